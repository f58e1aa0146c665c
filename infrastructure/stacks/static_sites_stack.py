"""Project stack composing one Site nested stack per configured site."""

import logging

from aws_cdk import (
    Stack,
    Tags,
)
from constructs import Construct

from src.models import SiteConfig
from stacks.common_stack import CommonStack
from stacks.site_stack import Site

logger = logging.getLogger(__name__)


def default_sites(project: str, deployment_env: str) -> list[SiteConfig]:
    """Site used when a project has no site definitions."""
    return [
        SiteConfig(
            site_name=f"VueJS-{project}-{deployment_env}",
            origins={"/sub-site/*": "subsite"},
            dev=deployment_env == "dev",
            url_prefix="test",
            disable_cache=True,
            origin_access_control=True,
        ),
    ]


class StaticSitesStack(Stack):
    """Stack for a project's static sites."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        project: str,
        common: CommonStack,
        sites: list[SiteConfig] | None = None,
        deployment_env: str = "dev",
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.project = project
        self.deployment_env = deployment_env

        Tags.of(self).add("project", project)
        Tags.of(self).add("environment", deployment_env)

        if not sites:
            logger.info(f"No sites configured for {project}, using default site")
            sites = default_sites(project, deployment_env)

        self.sites: dict[str, Site] = {}
        for site_config in sites:
            logger.info(f"Adding site {site_config.site_name} to {construct_id}")
            self.sites[site_config.site_name] = Site(self, site_config, common)
