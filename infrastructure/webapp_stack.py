import logging

from aws_cdk import (
    CfnOutput,
    Stack,
    Tags,
    aws_elasticbeanstalk as elasticbeanstalk,
    aws_iam as iam,
    aws_route53 as route53,
    aws_s3_assets as s3_assets,
)
from constructs import Construct

from infrastructure.config import DeploymentConfig
from infrastructure.targets import EnvironmentEndpointTarget

logger = logging.getLogger(__name__)


def option_settings(
    config: DeploymentConfig, instance_profile: str
) -> list[elasticbeanstalk.CfnEnvironment.OptionSettingProperty]:
    """Namespace/name/value triples for the Beanstalk environment."""
    triples = [
        ("aws:autoscaling:launchconfiguration", "IamInstanceProfile", instance_profile),
        ("aws:autoscaling:asg", "MinSize", str(config.min_size)),
        ("aws:autoscaling:asg", "MaxSize", str(config.max_size)),
        ("aws:ec2:instances", "InstanceTypes", config.instance_type),
    ]
    return [
        elasticbeanstalk.CfnEnvironment.OptionSettingProperty(
            namespace=namespace, option_name=name, value=value
        )
        for namespace, name, value in triples
    ]


class WebAppStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, config: DeploymentConfig, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        app_name = config.app_name

        # ---------------------------------------------------------
        # 1. Route53 (Hosted Zone)
        # ---------------------------------------------------------
        # 既存のホストゾーンを参照 (委任済みであること)
        self.hosted_zone = route53.HostedZone.from_hosted_zone_attributes(self, "HostedZone",
            hosted_zone_id=config.hosted_zone_id,
            zone_name=config.domain_name,
        )

        # ---------------------------------------------------------
        # 2. S3 Asset (Application Bundle)
        # ---------------------------------------------------------
        # ビルド済みの app.zip をアップロード対象として登録する
        logger.info("Staging application bundle %s", config.bundle_path)
        self.bundle = s3_assets.Asset(self, "WebAppZip",
            path=str(config.bundle_path),
        )

        # ---------------------------------------------------------
        # 3. Elastic Beanstalk Application & Version
        # ---------------------------------------------------------
        self.application = elasticbeanstalk.CfnApplication(self, "Application",
            application_name=app_name,
        )

        self.app_version = elasticbeanstalk.CfnApplicationVersion(self, "AppVersion",
            application_name=app_name,
            source_bundle=elasticbeanstalk.CfnApplicationVersion.SourceBundleProperty(
                s3_bucket=self.bundle.s3_bucket_name,
                s3_key=self.bundle.s3_object_key,
            ),
        )
        # application_name は値渡しのため、明示的に順序を指定する
        self.app_version.add_dependency(self.application)

        # ---------------------------------------------------------
        # 4. IAM Role & Instance Profile
        # ---------------------------------------------------------
        self.role = iam.Role(self, config.role_id,
            assumed_by=iam.ServicePrincipal(config.trust_principal),
        )
        self.role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name(config.managed_policy)
        )

        self.instance_profile = iam.CfnInstanceProfile(self, config.instance_profile_name,
            instance_profile_name=config.instance_profile_name,
            roles=[self.role.role_name],
        )

        # ---------------------------------------------------------
        # 5. Elastic Beanstalk Environment
        # ---------------------------------------------------------
        # min = max = 1 (スケールしない)
        self.eb_environment = elasticbeanstalk.CfnEnvironment(self, "Environment",
            environment_name=config.environment_name,
            application_name=self.application.application_name or app_name,
            solution_stack_name=config.solution_stack,
            # Ref of an instance profile is its name
            option_settings=option_settings(config, self.instance_profile.ref),
            version_label=self.app_version.ref,
        )

        # ---------------------------------------------------------
        # 6. DNS Record (A Alias)
        # ---------------------------------------------------------
        self.alias_record = route53.ARecord(self, "SiteAliasRecord",
            zone=self.hosted_zone,
            record_name=config.subdomain,
            target=route53.RecordTarget.from_alias(EnvironmentEndpointTarget(self.eb_environment)),
        )

        # ---------------------------------------------------------
        # 7. Outputs
        # ---------------------------------------------------------
        CfnOutput(self, "EnvironmentEndpoint",
            value=self.eb_environment.attr_endpoint_url,
            description="Elastic Beanstalk environment endpoint",
        )
        CfnOutput(self, "SiteDomain",
            value=config.record_fqdn,
            description="Alias record name",
        )

        Tags.of(self).add("Application", app_name)
