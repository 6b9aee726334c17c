import logging
from collections.abc import Mapping
from pathlib import Path

import aws_cdk as cdk
from constructs import Construct

from infrastructure.config import load_config
from infrastructure.webapp_stack import WebAppStack

logger = logging.getLogger(__name__)

DEFAULT_STACK_ID = "XmageAwsStack"


def cdk_environment(environ: Mapping[str, str]) -> cdk.Environment | None:
    """Account/region resolved by the CDK CLI, or None for a region-agnostic stack."""
    account = environ.get("CDK_DEFAULT_ACCOUNT")
    region = environ.get("CDK_DEFAULT_REGION")
    if not account and not region:
        return None
    return cdk.Environment(account=account, region=region)


def assemble(
    scope: Construct,
    environ: Mapping[str, str],
    *,
    stack_id: str = DEFAULT_STACK_ID,
    bundle_path: Path | None = None,
    env: cdk.Environment | None = None,
) -> WebAppStack:
    """
    Validate configuration, then build the whole stack under ``scope``.

    Raises ConfigurationError before any construct is created when a
    required variable is missing, so nothing is staged for upload.
    """
    config = load_config(environ, bundle_path=bundle_path).unwrap()
    logger.info(
        "Assembling %s for %s (hosted zone %s)",
        stack_id,
        config.record_fqdn,
        config.hosted_zone_id,
    )
    return WebAppStack(scope, stack_id, config=config, env=env)
