"""Load site definitions from a JSON file."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from src.config.exceptions import InvalidSitesFileError, SitesFileNotFoundError
from src.models.site import ProjectConfig, SitesFile

logger = logging.getLogger(__name__)


def load_sites_file(json_path: str | Path) -> SitesFile:
    """
    Load site definitions from a JSON file.

    Accepted shapes:
    - {"projects": [{"name": "gp", "sites": [...]}, ...]}
    - {"gp": [...], "un": [...]} (project name to list of sites)

    Args:
        json_path: Path to the JSON file

    Returns:
        SitesFile with every project and site validated

    Raises:
        SitesFileNotFoundError: if the file is missing
        InvalidSitesFileError: if the JSON is malformed or fails validation
    """
    json_path = Path(json_path)
    if not json_path.exists():
        raise SitesFileNotFoundError(f"Sites file not found: {json_path}")

    try:
        with json_path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidSitesFileError(f"Invalid JSON in {json_path}: {e}") from e

    try:
        if isinstance(data, dict) and "projects" in data:
            sites_file = SitesFile.model_validate(data)
        elif isinstance(data, dict):
            sites_file = SitesFile(
                projects=[
                    ProjectConfig.model_validate({"name": name, "sites": sites})
                    for name, sites in data.items()
                ]
            )
        else:
            raise InvalidSitesFileError(
                "Invalid sites file format: expected dict with 'projects' key "
                "or a mapping of project name to sites"
            )
    except ValidationError as e:
        raise InvalidSitesFileError(f"Invalid site definitions in {json_path}: {e}") from e

    logger.info(
        f"Loaded {sum(len(p.sites) for p in sites_file.projects)} sites "
        f"across {len(sites_file.projects)} projects from {json_path}"
    )
    return sites_file


def save_sites_file(sites_file: SitesFile, json_path: str | Path) -> None:
    """
    Save site definitions to a JSON file.

    Args:
        sites_file: SitesFile to save
        json_path: Path to output JSON file
    """
    json_path = Path(json_path)
    json_path.parent.mkdir(parents=True, exist_ok=True)

    with json_path.open("w", encoding="utf-8") as f:
        json.dump(
            sites_file.model_dump(mode="json", exclude_none=True),
            f,
            indent=2,
        )
