"""Site definition models for the CloudFront static sites."""

import re

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

# CloudFront price classes accepted by the Site construct
PRICE_CLASSES = ("PRICE_CLASS_100", "PRICE_CLASS_200", "PRICE_CLASS_ALL")

SUB_SITE_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class DomainConfig(BaseModel):
    """Custom domain for a site distribution."""

    zone_name: str = Field(..., description="Apex domain of the hosted zone")
    hosted_zone_id: str | None = Field(
        default=None,
        description="Route 53 hosted zone ID (enables DNS validation and alias records)",
    )
    certificate_arn: str | None = Field(
        default=None,
        description="Existing ACM certificate ARN in us-east-1",
    )

    @field_validator("zone_name")
    @classmethod
    def normalise_zone_name(cls, value: str) -> str:
        value = value.strip().rstrip(".").lower()
        if not value:
            raise ValueError("zone_name must not be empty")
        return value

    @model_validator(mode="after")
    def require_certificate_source(self) -> "DomainConfig":
        """A domain needs either a hosted zone to validate in or a certificate."""
        if not self.hosted_zone_id and not self.certificate_arn:
            raise ValueError(
                f"Domain {self.zone_name} requires either hosted_zone_id or certificate_arn"
            )
        return self


class SubSite(BaseModel):
    """A path-prefixed sub-site served from its own bucket."""

    path_pattern: str
    prefix: str
    name: str


class SiteConfig(BaseModel):
    """Configuration for one CloudFront distribution and its buckets."""

    site_name: str = Field(..., min_length=1, description="Site name used in resource names")
    origins: dict[str, str] = Field(
        default_factory=dict,
        description="Path pattern (e.g. /sub-site/*) to sub-site name",
    )
    dev: bool = Field(default=False, description="Destroy buckets with the stack")
    url_prefix: str | None = Field(
        default=None, description="Subdomain label in front of the zone name"
    )
    domain: DomainConfig | None = None
    disable_cache: bool = False
    origin_access_control: bool = Field(
        default=True,
        description="Use signed-request origin access control instead of an OAI",
    )
    spa: bool = Field(default=True, description="Serve index.html for 403/404")
    edge_spa_fallback: bool = Field(
        default=False,
        description="Attach Lambda@Edge origin request/response SPA handlers",
    )
    web_acl: bool = True
    enable_logging: bool = True
    price_class: str = "PRICE_CLASS_100"

    @field_validator("origins")
    @classmethod
    def validate_origins(cls, value: dict[str, str]) -> dict[str, str]:
        seen: set[str] = set()
        for pattern, name in value.items():
            if not pattern.startswith("/") or not pattern.endswith("/*"):
                raise ValueError(
                    f"Origin path pattern must look like /prefix/*, got {pattern!r}"
                )
            prefix = pattern[:-2]
            if len(prefix) < 2 or prefix.endswith("/") or "//" in prefix:
                raise ValueError(
                    f"Origin path pattern needs a non-empty prefix, got {pattern!r}"
                )
            if "*" in prefix or "?" in prefix:
                raise ValueError(
                    f"Origin path prefix must not contain wildcards, got {pattern!r}"
                )
            name = name.lower()
            if not SUB_SITE_NAME_PATTERN.match(name):
                raise ValueError(f"Invalid sub-site name: {name!r}")
            if name in seen:
                raise ValueError(f"Duplicate sub-site name: {name!r}")
            seen.add(name)
        return value

    @field_validator("price_class")
    @classmethod
    def validate_price_class(cls, value: str) -> str:
        value = value.upper()
        if value not in PRICE_CLASSES:
            raise ValueError(f"price_class must be one of {', '.join(PRICE_CLASSES)}")
        return value

    @computed_field
    @property
    def custom_domain(self) -> str | None:
        """Fully qualified domain served by the distribution, if any."""
        if self.domain is None:
            return None
        if self.url_prefix:
            return f"{self.url_prefix.lower()}.{self.domain.zone_name}"
        return self.domain.zone_name

    @property
    def sub_sites(self) -> list[SubSite]:
        """Sub-sites in declaration order."""
        return [
            SubSite(path_pattern=pattern, prefix=pattern[:-2], name=name.lower())
            for pattern, name in self.origins.items()
        ]

    def resource_name(self, resource: str) -> str:
        """Site-scoped, lowercased resource name."""
        return f"{self.site_name}-{resource}".lower()


class ProjectConfig(BaseModel):
    """A deployable project grouping several sites in one stack."""

    name: str = Field(..., min_length=1)
    sites: list[SiteConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_site_names(self) -> "ProjectConfig":
        names = [site.site_name.lower() for site in self.sites]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate site names in {self.name}: {', '.join(duplicates)}")
        return self

    def get_site(self, site_name: str) -> SiteConfig | None:
        """Find a site by name (case-insensitive)."""
        for site in self.sites:
            if site.site_name.lower() == site_name.lower():
                return site
        return None


class SitesFile(BaseModel):
    """Top-level site definitions file."""

    projects: list[ProjectConfig] = Field(default_factory=list)

    def get_project(self, name: str) -> ProjectConfig | None:
        """Find a project by name."""
        for project in self.projects:
            if project.name == name:
                return project
        return None
