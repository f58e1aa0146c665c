"""Pytest fixtures for the static sites tests."""

import aws_cdk as cdk
import pytest
from aws_cdk import assertions
from stacks.common_stack import CommonStack
from stacks.static_sites_stack import StaticSitesStack

from src.models import DomainConfig, SiteConfig

TEST_ENV = cdk.Environment(account="123456789012", region="us-east-1")

CERTIFICATE_ARN = (
    "arn:aws:acm:us-east-1:123456789012:certificate/11111111-2222-3333-4444-555555555555"
)


@pytest.fixture
def cdk_app() -> cdk.App:
    """CDK app with asset bundling disabled (no Docker in unit tests)."""
    return cdk.App(context={"aws:cdk:bundling-stacks": []})


@pytest.fixture
def common_stack(cdk_app) -> CommonStack:
    """Shared resources stack."""
    return CommonStack(cdk_app, "CommonResources", env=TEST_ENV)


@pytest.fixture
def sub_site_config() -> SiteConfig:
    """Dev site with one sub-site, cache disabled, OAC on."""
    return SiteConfig(
        site_name="VueJS-dev",
        origins={"/sub-site/*": "subsite"},
        dev=True,
        url_prefix="test",
        disable_cache=True,
        origin_access_control=True,
    )


@pytest.fixture
def domain_site_config() -> SiteConfig:
    """Production site with two sub-sites and a custom domain."""
    return SiteConfig(
        site_name="Minisite",
        origins={"/docs/*": "docs", "/campaign/*": "campaign"},
        url_prefix="www",
        domain=DomainConfig(zone_name="example.org", certificate_arn=CERTIFICATE_ARN),
    )


@pytest.fixture
def build_site(cdk_app, common_stack):
    """Build a project stack around one site and return (site, template)."""

    def _build(config: SiteConfig):
        stack = StaticSitesStack(
            cdk_app,
            "TestSites",
            project="test",
            common=common_stack,
            sites=[config],
            env=TEST_ENV,
        )
        site = stack.sites[config.site_name]
        return site, assertions.Template.from_stack(site)

    return _build
