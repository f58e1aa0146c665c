"""Custom exceptions for site configuration."""


class SiteConfigError(Exception):
    """Base exception for site configuration errors."""


class SitesFileNotFoundError(SiteConfigError):
    """Site definitions file does not exist."""


class InvalidSitesFileError(SiteConfigError):
    """Site definitions file could not be parsed or validated."""
