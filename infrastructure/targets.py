import jsii
from aws_cdk import (
    Stack,
    aws_elasticbeanstalk as elasticbeanstalk,
    aws_route53 as route53,
)
from aws_cdk.region_info import FactName


@jsii.implements(route53.IAliasRecordTarget)
class EnvironmentEndpointTarget:
    """
    Alias target pointing at an Elastic Beanstalk environment's endpoint.

    Takes the CfnEnvironment itself rather than an endpoint string, so the
    record always resolves to the environment built in the same stack.
    """

    def __init__(self, environment: elasticbeanstalk.CfnEnvironment) -> None:
        self.environment = environment

    def bind(self, record, zone=None) -> route53.AliasRecordTargetConfig:
        # region-agnostic stacks get a CfnMapping lookup instead of a literal
        hosted_zone_id = Stack.of(self.environment).regional_fact(
            FactName.EBS_ENV_ENDPOINT_HOSTED_ZONE_ID
        )
        return route53.AliasRecordTargetConfig(
            dns_name=self.environment.attr_endpoint_url,
            hosted_zone_id=hosted_zone_id,
        )
