"""Data models for the CloudFront static sites."""

from src.models.site import (
    PRICE_CLASSES,
    DomainConfig,
    ProjectConfig,
    SiteConfig,
    SitesFile,
    SubSite,
)

__all__ = [
    "PRICE_CLASSES",
    "DomainConfig",
    "ProjectConfig",
    "SiteConfig",
    "SitesFile",
    "SubSite",
]
