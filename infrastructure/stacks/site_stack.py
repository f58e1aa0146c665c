"""Site nested stack: one CloudFront distribution over one or more S3 buckets."""

from pathlib import Path

from aws_cdk import (
    AssetHashType,
    Aws,
    BundlingOptions,
    CfnOutput,
    Duration,
    NestedStack,
    RemovalPolicy,
)
from aws_cdk import (
    aws_certificatemanager as acm,
)
from aws_cdk import (
    aws_cloudfront as cloudfront,
)
from aws_cdk import (
    aws_cloudfront_origins as origins,
)
from aws_cdk import (
    aws_iam as iam,
)
from aws_cdk import (
    aws_lambda as lambda_,
)
from aws_cdk import (
    aws_route53 as route53,
)
from aws_cdk import (
    aws_route53_targets as targets,
)
from aws_cdk import (
    aws_s3 as s3,
)
from aws_cdk.aws_cloudfront import experimental
from constructs import Construct

from src.edge import strip_prefix_code, trailing_slash_redirect_code
from src.edge.origin_response import ORIGIN_REQUEST_HEADER
from src.models import SiteConfig
from stacks.common_stack import CommonStack

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Noncurrent object versions move to Glacier after this many days
NONCURRENT_TRANSITION_DAYS = 90

CONTENT_SECURITY_POLICY = (
    "default-src 'none'; script-src 'self'; connect-src 'self'; "
    "img-src 'self' data:; style-src 'self'; font-src 'self'; "
    "frame-ancestors 'self'; form-action 'self';"
)


class Site(NestedStack):
    """
    Nested stack for a single static site.

    Features:
    - Versioned content bucket plus one bucket per sub-site path prefix
    - CloudFront distribution with OAC (or legacy OAI) S3 origins
    - Viewer-request functions stripping sub-site prefixes and redirecting
      bare prefixes to their trailing-slash form
    - Bucket policies scoped to this distribution only
    - Optional custom domain, web ACL, access logging and Lambda@Edge SPA
      fallback
    """

    def __init__(
        self,
        scope: Construct,
        config: SiteConfig,
        common: CommonStack,
        **kwargs,
    ) -> None:
        super().__init__(scope, f"{config.site_name}-Site", **kwargs)

        self.config = config
        self.site_name = config.site_name
        self.common = common

        removal_policy = RemovalPolicy.DESTROY if config.dev else RemovalPolicy.RETAIN

        self.deployer_role = iam.Role(
            self,
            self.name("DeployerRole"),
            role_name=self.name("DeployerRole"),
            description=f"Role for publishing {self.site_name} content",
            assumed_by=iam.AccountRootPrincipal(),
        )

        # S3 bucket for the main site
        self.content_bucket = self._content_bucket(
            self.name("webContent"),
            self.region_name("webContent-Bucket"),
            removal_policy,
        )

        # One bucket per sub-site, keyed by sub-site name
        self.sub_site_buckets: dict[str, s3.Bucket] = {
            sub_site.name: self._content_bucket(
                self.name(f"{sub_site.name}-content"),
                self.region_name(f"{sub_site.name}-Bucket"),
                removal_policy,
            )
            for sub_site in config.sub_sites
        }

        self.origin_access_identity: cloudfront.OriginAccessIdentity | None = None
        if not config.origin_access_control:
            self.origin_access_identity = cloudfront.OriginAccessIdentity(
                self,
                self.name("OAI"),
                comment=f"OAI for {self.site_name}",
            )

        content_origin = self._origin(self.content_bucket)
        sub_site_origins = {
            name: self._origin(bucket) for name, bucket in self.sub_site_buckets.items()
        }

        self.response_headers_policy = self._response_headers_policy()
        self.cache_policy = (
            cloudfront.CachePolicy.CACHING_DISABLED
            if config.disable_cache
            else cloudfront.CachePolicy.CACHING_OPTIMIZED
        )

        certificate = self._certificate()

        self.distribution = cloudfront.Distribution(
            self,
            self.name("CloudFront"),
            comment=f"{self.site_name} static site",
            default_behavior=cloudfront.BehaviorOptions(
                origin=content_origin,
                cache_policy=self.cache_policy,
                response_headers_policy=self.response_headers_policy,
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                allowed_methods=cloudfront.AllowedMethods.ALLOW_GET_HEAD,
                cached_methods=cloudfront.CachedMethods.CACHE_GET_HEAD,
                edge_lambdas=self._edge_lambdas() or None,
                origin_request_policy=self._origin_request_policy(),
            ),
            default_root_object="index.html",
            domain_names=[config.custom_domain] if config.custom_domain else None,
            certificate=certificate,
            enable_ipv6=True,
            enabled=True,
            enable_logging=config.enable_logging,
            log_bucket=common.access_log if config.enable_logging else None,
            log_file_prefix=f"accessLog/{self.site_name}" if config.enable_logging else None,
            web_acl_id=common.web_acl.attr_arn if config.web_acl else None,
            price_class=getattr(cloudfront.PriceClass, config.price_class),
            error_responses=self._error_responses() or None,
        )

        for sub_site in config.sub_sites:
            origin = sub_site_origins[sub_site.name]
            self._add_sub_site_behaviors(sub_site.prefix, sub_site.path_pattern, origin)

        if config.origin_access_control:
            self._use_origin_access_control(1 + len(sub_site_origins))

        for bucket in [self.content_bucket, *self.sub_site_buckets.values()]:
            self._allow_distribution_read(bucket)
            bucket.grant_read_write(self.deployer_role)

        self.deployer_role.add_to_policy(
            iam.PolicyStatement(
                sid="CloudFrontInvalidation",
                effect=iam.Effect.ALLOW,
                actions=[
                    "cloudfront:CreateInvalidation",
                    "cloudfront:GetInvalidation",
                ],
                resources=[self.distribution_arn],
            )
        )

        self._alias_records()
        self._outputs()

    def name(self, resource_name: str) -> str:
        """Site-scoped, lowercased resource name."""
        return self.config.resource_name(resource_name)

    def region_name(self, resource_name: str) -> str:
        """Site-scoped resource name suffixed with the account ID."""
        # The account is a token and must not be lowercased
        return f"{self.name(resource_name)}-{self.account}"

    @property
    def distribution_arn(self) -> str:
        return (
            f"arn:{Aws.PARTITION}:cloudfront::{self.account}"
            f":distribution/{self.distribution.distribution_id}"
        )

    def _content_bucket(
        self,
        construct_id: str,
        bucket_name: str,
        removal_policy: RemovalPolicy,
    ) -> s3.Bucket:
        return s3.Bucket(
            self,
            construct_id,
            bucket_name=bucket_name,
            versioned=True,
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=removal_policy,
            auto_delete_objects=removal_policy == RemovalPolicy.DESTROY,
            lifecycle_rules=[
                s3.LifecycleRule(
                    id="ArchiveOldVersions",
                    noncurrent_version_transitions=[
                        s3.NoncurrentVersionTransition(
                            storage_class=s3.StorageClass.GLACIER,
                            transition_after=Duration.days(NONCURRENT_TRANSITION_DAYS),
                        ),
                    ],
                ),
            ],
        )

    def _origin(self, bucket: s3.IBucket) -> cloudfront.IOrigin:
        if self.origin_access_identity is not None:
            return origins.S3BucketOrigin.with_origin_access_identity(
                bucket,
                origin_access_identity=self.origin_access_identity,
            )
        # Access control is attached by _use_origin_access_control
        return origins.S3BucketOrigin.with_bucket_defaults(bucket)

    def _use_origin_access_control(self, origin_count: int) -> None:
        """Point every origin at the shared OAC and clear any identity."""
        cfn_distribution = self.distribution.node.default_child
        for index in range(origin_count):
            cfn_distribution.add_property_override(
                f"DistributionConfig.Origins.{index}.OriginAccessControlId",
                self.common.origin_access_control.attr_id,
            )
            cfn_distribution.add_property_override(
                f"DistributionConfig.Origins.{index}.S3OriginConfig.OriginAccessIdentity",
                "",
            )

    def _allow_distribution_read(self, bucket: s3.Bucket) -> None:
        bucket.add_to_resource_policy(
            iam.PolicyStatement(
                sid="AllowCloudFrontServicePrincipal",
                effect=iam.Effect.ALLOW,
                actions=["s3:GetObject"],
                principals=[iam.ServicePrincipal("cloudfront.amazonaws.com")],
                resources=[bucket.arn_for_objects("*")],
                conditions={
                    "StringEquals": {
                        "AWS:SourceArn": self.distribution_arn,
                    },
                },
            )
        )

    def _response_headers_policy(self) -> cloudfront.ResponseHeadersPolicy:
        return cloudfront.ResponseHeadersPolicy(
            self,
            self.name("ResponseHeadersPolicy"),
            response_headers_policy_name=self.name("ResponseHeadersPolicy"),
            comment="A policy for " + self.name("ResponseHeadersPolicy"),
            security_headers_behavior=cloudfront.ResponseSecurityHeadersBehavior(
                content_security_policy=cloudfront.ResponseHeadersContentSecurityPolicy(
                    content_security_policy=CONTENT_SECURITY_POLICY,
                    override=True,
                ),
                content_type_options=cloudfront.ResponseHeadersContentTypeOptions(
                    override=True
                ),
                frame_options=cloudfront.ResponseHeadersFrameOptions(
                    frame_option=cloudfront.HeadersFrameOption.DENY,
                    override=True,
                ),
                referrer_policy=cloudfront.ResponseHeadersReferrerPolicy(
                    referrer_policy=cloudfront.HeadersReferrerPolicy.NO_REFERRER,
                    override=True,
                ),
                strict_transport_security=cloudfront.ResponseHeadersStrictTransportSecurity(
                    access_control_max_age=Duration.seconds(600),
                    include_subdomains=True,
                    override=True,
                ),
                xss_protection=cloudfront.ResponseHeadersXSSProtection(
                    protection=True,
                    mode_block=True,
                    override=True,
                ),
            ),
            remove_headers=["Server"],
            server_timing_sampling_rate=50,
        )

    def _certificate(self) -> acm.ICertificate | None:
        domain = self.config.domain
        if domain is None:
            return None

        if domain.certificate_arn:
            return acm.Certificate.from_certificate_arn(
                self, self.name("Certificate"), domain.certificate_arn
            )

        # CloudFront only accepts us-east-1 certificates, so the stack must be
        # deployed there when the certificate is created in place
        return acm.Certificate(
            self,
            self.name("Certificate"),
            domain_name=self.config.custom_domain,
            validation=acm.CertificateValidation.from_dns(self._hosted_zone()),
        )

    def _hosted_zone(self) -> route53.IHostedZone:
        zone = self.node.try_find_child(self.name("HostedZone"))
        if zone is not None:
            return zone
        return route53.HostedZone.from_hosted_zone_attributes(
            self,
            self.name("HostedZone"),
            hosted_zone_id=self.config.domain.hosted_zone_id,
            zone_name=self.config.domain.zone_name,
        )

    def _alias_records(self) -> None:
        domain = self.config.domain
        if domain is None or not domain.hosted_zone_id:
            return

        zone = self._hosted_zone()
        target = route53.RecordTarget.from_alias(targets.CloudFrontTarget(self.distribution))
        route53.ARecord(
            self,
            self.name("AliasRecord"),
            zone=zone,
            record_name=self.config.custom_domain,
            target=target,
        )
        route53.AaaaRecord(
            self,
            self.name("AliasRecordIpv6"),
            zone=zone,
            record_name=self.config.custom_domain,
            target=target,
        )

    def _error_responses(self) -> list[cloudfront.ErrorResponse]:
        # Lambda@Edge regenerates the page itself when enabled
        if not self.config.spa or self.config.edge_spa_fallback:
            return []
        return [
            cloudfront.ErrorResponse(
                http_status=status,
                response_http_status=200,
                response_page_path="/index.html",
                ttl=Duration.seconds(10),
            )
            for status in (403, 404)
        ]

    def _origin_request_policy(self) -> cloudfront.IOriginRequestPolicy | None:
        """Forward the regeneration marker so the origin-response handler can see it."""
        if not self.config.edge_spa_fallback:
            return None
        return cloudfront.OriginRequestPolicy(
            self,
            self.name("SpaOriginRequestPolicy"),
            origin_request_policy_name=self.name("SpaOriginRequestPolicy"),
            comment=f"Forward {ORIGIN_REQUEST_HEADER} for {self.site_name}",
            header_behavior=cloudfront.OriginRequestHeaderBehavior.allow_list(
                ORIGIN_REQUEST_HEADER
            ),
            query_string_behavior=cloudfront.OriginRequestQueryStringBehavior.none(),
            cookie_behavior=cloudfront.OriginRequestCookieBehavior.none(),
        )

    def _edge_lambdas(self) -> list[cloudfront.EdgeLambda]:
        if not self.config.edge_spa_fallback:
            return []

        origin_request = self._edge_function("SpaOriginRequest", "src.edge.origin_request.handler")
        origin_response = self._edge_function(
            "SpaOriginResponse", "src.edge.origin_response.handler"
        )
        return [
            cloudfront.EdgeLambda(
                function_version=origin_request.current_version,
                event_type=cloudfront.LambdaEdgeEventType.ORIGIN_REQUEST,
            ),
            cloudfront.EdgeLambda(
                function_version=origin_response.current_version,
                event_type=cloudfront.LambdaEdgeEventType.ORIGIN_RESPONSE,
            ),
        ]

    def _edge_function(self, construct_id: str, handler: str) -> experimental.EdgeFunction:
        # Lambda@Edge has no environment variables; all settings are in code
        return experimental.EdgeFunction(
            self,
            self.name(construct_id),
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler=handler,
            code=lambda_.Code.from_asset(
                str(PROJECT_ROOT),
                asset_hash_type=AssetHashType.OUTPUT,
                exclude=["cdk.out", "**/cdk.out", ".git", ".venv", "tests"],
                bundling=BundlingOptions(
                    image=lambda_.Runtime.PYTHON_3_12.bundling_image,
                    command=[
                        "bash",
                        "-c",
                        "pip install httpx -t /asset-output "
                        "&& mkdir -p /asset-output/src "
                        "&& cp src/__init__.py /asset-output/src/ "
                        "&& cp -r src/edge /asset-output/src/",
                    ],
                ),
            ),
            memory_size=128,
            timeout=Duration.seconds(5),
        )

    def _add_sub_site_behaviors(
        self,
        prefix: str,
        path_pattern: str,
        origin: cloudfront.IOrigin,
    ) -> None:
        """Route <prefix>/* to the sub-site bucket and redirect the bare prefix."""
        sub_site_id = prefix.strip("/").replace("/", "-")

        strip_prefix = cloudfront.Function(
            self,
            self.name(f"{sub_site_id}-StripPrefix"),
            code=cloudfront.FunctionCode.from_inline(
                strip_prefix_code(prefix, spa=self.config.spa)
            ),
            runtime=cloudfront.FunctionRuntime.JS_2_0,
            comment=f"Strip {prefix} before forwarding to the origin",
        )
        self.distribution.add_behavior(
            path_pattern,
            origin,
            cache_policy=self.cache_policy,
            response_headers_policy=self.response_headers_policy,
            viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
            function_associations=[
                cloudfront.FunctionAssociation(
                    function=strip_prefix,
                    event_type=cloudfront.FunctionEventType.VIEWER_REQUEST,
                ),
            ],
        )

        redirect = cloudfront.Function(
            self,
            self.name(f"{sub_site_id}-Redirect"),
            code=cloudfront.FunctionCode.from_inline(trailing_slash_redirect_code(prefix)),
            runtime=cloudfront.FunctionRuntime.JS_2_0,
            comment=f"Redirect {prefix} to {prefix}/",
        )
        self.distribution.add_behavior(
            prefix,
            origin,
            cache_policy=cloudfront.CachePolicy.CACHING_DISABLED,
            viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
            function_associations=[
                cloudfront.FunctionAssociation(
                    function=redirect,
                    event_type=cloudfront.FunctionEventType.VIEWER_REQUEST,
                ),
            ],
        )

    def _outputs(self) -> None:
        CfnOutput(
            self,
            self.name("CloudFrontURL-Output"),
            value=self.distribution.distribution_domain_name,
            description=f"{self.site_name} CloudFront URL",
            export_name=self.name("CloudFrontURL"),
        )

        CfnOutput(
            self,
            self.name("DistributionId-Output"),
            value=self.distribution.distribution_id,
            description=f"{self.site_name} CloudFront distribution ID",
            export_name=self.name("DistributionId"),
        )

        if self.config.enable_logging:
            CfnOutput(
                self,
                self.name("LoggingBucket-Output"),
                value=self.common.access_log.bucket_arn,
                description=f"{self.site_name} Logging bucket",
                export_name=self.name("LoggingBucket"),
            )

        CfnOutput(
            self,
            self.name("SiteBucket-Output"),
            value=self.content_bucket.bucket_arn,
            description=f"{self.site_name} Site bucket",
            export_name=self.name("SiteBucket"),
        )

        for sub_site_name, bucket in self.sub_site_buckets.items():
            CfnOutput(
                self,
                self.name(f"{sub_site_name}-Bucket-Output"),
                value=bucket.bucket_arn,
                description=f"{self.site_name} {sub_site_name} bucket",
                export_name=self.name(f"{sub_site_name}-Bucket"),
            )

        if self.config.custom_domain:
            CfnOutput(
                self,
                self.name("SiteURL-Output"),
                value=f"https://{self.config.custom_domain}",
                description=f"{self.site_name} URL (custom domain)",
            )
