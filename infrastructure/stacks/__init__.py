"""CDK stacks for the CloudFront static sites."""

from stacks.common_stack import CommonStack
from stacks.site_stack import Site
from stacks.static_sites_stack import StaticSitesStack

__all__ = [
    "CommonStack",
    "Site",
    "StaticSitesStack",
]
