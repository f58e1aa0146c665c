"""Tests for the project stack composing site nested stacks."""

import aws_cdk as cdk
from aws_cdk import assertions
from aws_cdk.assertions import Match
from stacks.static_sites_stack import StaticSitesStack, default_sites

from src.models import SiteConfig

TEST_ENV = cdk.Environment(account="123456789012", region="us-east-1")


class TestDefaultSites:
    """Tests for default_sites."""

    def test_default_site(self):
        """Test the default site has one sub-site and caching off."""
        sites = default_sites("gp", "dev")

        assert len(sites) == 1
        site = sites[0]
        assert site.site_name == "VueJS-gp-dev"
        assert site.origins == {"/sub-site/*": "subsite"}
        assert site.dev is True
        assert site.disable_cache is True
        assert site.origin_access_control is True

    def test_default_site_outside_dev(self):
        """Test non-dev environments keep their buckets."""
        assert default_sites("gp", "prod")[0].dev is False


class TestStaticSitesStack:
    """Tests for StaticSitesStack."""

    def test_nested_stack_per_site(self, cdk_app, common_stack):
        """Test each site becomes one nested stack."""
        stack = StaticSitesStack(
            cdk_app,
            "Sites",
            project="un",
            common=common_stack,
            sites=[SiteConfig(site_name="Docs"), SiteConfig(site_name="Campaign")],
            env=TEST_ENV,
        )
        template = assertions.Template.from_stack(stack)

        template.resource_count_is("AWS::CloudFormation::Stack", 2)
        assert set(stack.sites) == {"Docs", "Campaign"}

    def test_default_site_when_empty(self, cdk_app, common_stack):
        """Test a project without sites gets the default site."""
        stack = StaticSitesStack(
            cdk_app,
            "Sites",
            project="gp",
            common=common_stack,
            sites=[],
            env=TEST_ENV,
        )

        assert list(stack.sites) == ["VueJS-gp-dev"]

    def test_tags(self, cdk_app, common_stack):
        """Test site resources are tagged with project and environment."""
        stack = StaticSitesStack(
            cdk_app,
            "Sites",
            project="un",
            common=common_stack,
            sites=[SiteConfig(site_name="Docs")],
            deployment_env="prod",
            env=TEST_ENV,
        )
        template = assertions.Template.from_stack(stack.sites["Docs"])

        template.has_resource_properties(
            "AWS::S3::Bucket",
            {
                "Tags": Match.array_with(
                    [
                        {"Key": "environment", "Value": "prod"},
                        {"Key": "project", "Value": "un"},
                    ]
                )
            },
        )
