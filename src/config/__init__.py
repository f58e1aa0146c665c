"""Configuration loading and settings."""

from src.config.exceptions import (
    InvalidSitesFileError,
    SiteConfigError,
    SitesFileNotFoundError,
)
from src.config.loader import load_sites_file, save_sites_file
from src.config.settings import Settings, get_settings

__all__ = [
    "InvalidSitesFileError",
    "SiteConfigError",
    "Settings",
    "SitesFileNotFoundError",
    "get_settings",
    "load_sites_file",
    "save_sites_file",
]
