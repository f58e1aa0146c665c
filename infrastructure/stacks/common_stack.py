"""Common stack with resources shared by every static site."""

from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Stack,
)
from aws_cdk import (
    aws_cloudfront as cloudfront,
)
from aws_cdk import (
    aws_s3 as s3,
)
from aws_cdk import (
    aws_wafv2 as wafv2,
)
from constructs import Construct

# Access logs are kept for this many days
ACCESS_LOG_RETENTION_DAYS = 90

# AWS Managed Rule Groups applied to the web ACL
_MANAGED_RULE_GROUPS = [
    {
        "rule_name": "CRSRule",
        "name": "AWSManagedRulesCommonRuleSet",
        "vendor": "AWS",
        "priority": 0,
        "metric_name": "MetricForWebACLCDK-CRS",
    },
]


def _build_managed_rules() -> list[wafv2.CfnWebACL.RuleProperty]:
    """Build WAF rule properties for the managed rule groups."""
    return [
        wafv2.CfnWebACL.RuleProperty(
            name=rule["rule_name"],
            priority=rule["priority"],
            override_action=wafv2.CfnWebACL.OverrideActionProperty(none={}),
            statement=wafv2.CfnWebACL.StatementProperty(
                managed_rule_group_statement=wafv2.CfnWebACL.ManagedRuleGroupStatementProperty(
                    vendor_name=rule["vendor"],
                    name=rule["name"],
                ),
            ),
            visibility_config=wafv2.CfnWebACL.VisibilityConfigProperty(
                cloud_watch_metrics_enabled=True,
                metric_name=rule["metric_name"],
                sampled_requests_enabled=True,
            ),
        )
        for rule in _MANAGED_RULE_GROUPS
    ]


class CommonStack(Stack):
    """
    Stack for resources shared across sites.

    - Origin access control used by every S3 origin
    - Access-log bucket receiving CloudFront standard logs
    - CLOUDFRONT scope web ACL (the stack MUST be deployed in us-east-1)
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        resource_prefix: str = "static-sites",
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        oac_config = cloudfront.CfnOriginAccessControl.OriginAccessControlConfigProperty
        self.origin_access_control = cloudfront.CfnOriginAccessControl(
            self,
            "S3AccessControl",
            origin_access_control_config=oac_config(
                name=f"{resource_prefix}-S3AccessControl",
                origin_access_control_origin_type="s3",
                signing_behavior="always",
                signing_protocol="sigv4",
                description="Allow cloudfront access to S3 buckets using Bucket Policies",
            ),
        )

        # CloudFront standard logging writes through ACLs, so the bucket keeps
        # object-writer ownership
        self.access_log = s3.Bucket(
            self,
            "AccessLog",
            bucket_name=f"cloudfront-accesslog-{self.account}",
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            access_control=s3.BucketAccessControl.LOG_DELIVERY_WRITE,
            object_ownership=s3.ObjectOwnership.OBJECT_WRITER,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            lifecycle_rules=[
                s3.LifecycleRule(
                    id="rule",
                    enabled=True,
                    expiration=Duration.days(ACCESS_LOG_RETENTION_DAYS),
                ),
            ],
        )

        self.web_acl = wafv2.CfnWebACL(
            self,
            "WebAcl",
            name=f"{resource_prefix}-cloudfront-waf",
            scope="CLOUDFRONT",
            default_action=wafv2.CfnWebACL.DefaultActionProperty(allow={}),
            rules=_build_managed_rules(),
            visibility_config=wafv2.CfnWebACL.VisibilityConfigProperty(
                cloud_watch_metrics_enabled=True,
                metric_name="MetricForWebACLCDK",
                sampled_requests_enabled=True,
            ),
        )

        # Outputs
        CfnOutput(
            self,
            "WebAclArn",
            value=self.web_acl.attr_arn,
            description="CloudFront WAF WebACL ARN",
        )

        CfnOutput(
            self,
            "AccessLogBucketName",
            value=self.access_log.bucket_name,
            description="S3 bucket for CloudFront access logs",
        )

        CfnOutput(
            self,
            "OriginAccessControlId",
            value=self.origin_access_control.attr_id,
            description="Origin access control shared by site origins",
        )
