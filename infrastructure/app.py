#!/usr/bin/env python3
"""CDK app entry point for the CloudFront static sites."""

import logging

import aws_cdk as cdk
from stacks.common_stack import CommonStack
from stacks.static_sites_stack import StaticSitesStack

from src.config import SitesFileNotFoundError, get_settings, load_sites_file
from src.models import ProjectConfig

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

# Projects deployed when no sites file exists
DEFAULT_PROJECTS = ["gp", "un"]

app = cdk.App()
settings = get_settings()

# Context overrides environment settings: cdk deploy -c environment=prod
environment = app.node.try_get_context("environment") or settings.environment
sites_file_path = app.node.try_get_context("sites_file") or settings.sites_file_path
resource_prefix = app.node.try_get_context("resource_prefix") or settings.resource_prefix

# CloudFront WAF, certificates and Lambda@Edge all live in us-east-1
env = cdk.Environment(
    account=settings.cdk_default_account,
    region=settings.cdk_default_region,
)

try:
    projects = load_sites_file(sites_file_path).projects
except SitesFileNotFoundError:
    projects = []
if not projects:
    logger.warning(f"No site definitions in {sites_file_path}, using default projects")
    projects = [ProjectConfig(name=name) for name in DEFAULT_PROJECTS]

# 1. Shared resources: origin access control, access logs, web ACL
common = CommonStack(
    app,
    "CommonResources",
    env=env,
    resource_prefix=resource_prefix,
)

# 2. One stack per project, each site a nested stack
for project in projects:
    sites_stack = StaticSitesStack(
        app,
        f"{project.name.upper()}CloudfrontMinisites",
        env=env,
        project=project.name,
        common=common,
        sites=project.sites,
        deployment_env=environment,
    )
    sites_stack.add_dependency(common)

app.synth()
