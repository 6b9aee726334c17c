from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

# app.zip lives at the repository root, one level up from this package
DEFAULT_BUNDLE_PATH = Path(__file__).resolve().parent.parent / "app.zip"

REQUIRED_VARIABLES = ("DOMAIN", "HOSTED_ZONE")


class ConfigurationError(Exception):

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        names = " and ".join(self.missing)
        super().__init__(f"Missing {names} in ENV")


class DeploymentConfig(BaseModel):
    """Validated inputs and policy constants for one deployment unit."""

    model_config = ConfigDict(frozen=True)

    # --- 外部入力 (environment) ---
    domain_name: str = Field(min_length=1)
    hosted_zone_id: str = Field(min_length=1)
    subdomain: str | None = None

    # --- 固定ポリシー (literals) ---
    app_name: str = "MyWebApp"
    environment_name: str = "XMageEnvironment"
    solution_stack: str = "64bit Amazon Linux 2 v3.4.1 running Corretto 17"
    instance_type: str = "t2.micro"
    min_size: int = 1
    max_size: int = 1
    managed_policy: str = "AWSElasticBeanstalkWebTier"
    trust_principal: str = "ec2.amazonaws.com"
    bundle_path: Path = DEFAULT_BUNDLE_PATH

    @property
    def instance_profile_name(self) -> str:
        return f"{self.app_name}-InstanceProfile"

    @property
    def role_id(self) -> str:
        return f"{self.app_name}-aws-elasticbeanstalk-ec2-role"

    @property
    def record_fqdn(self) -> str:
        if self.subdomain:
            return f"{self.subdomain}.{self.domain_name}"
        return self.domain_name


class ConfigResult(BaseModel):
    """Either a config or the names that were missing, never both."""

    config: DeploymentConfig | None = None
    missing: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _config_or_missing(self) -> ConfigResult:
        if (self.config is None) == (not self.missing):
            raise ValueError("exactly one of config or missing must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.config is not None

    def unwrap(self) -> DeploymentConfig:
        if not self.ok:
            raise ConfigurationError(self.missing)
        return self.config


def _read(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_config(
    environ: Mapping[str, str], bundle_path: Path | None = None
) -> ConfigResult:
    # empty values count as missing; all missing names are reported together
    values = {key: _read(environ, key) for key in REQUIRED_VARIABLES}
    missing = [key for key, value in values.items() if value is None]
    if missing:
        return ConfigResult(missing=missing)

    overrides = {}
    if bundle_path is not None:
        overrides["bundle_path"] = bundle_path

    config = DeploymentConfig(
        domain_name=values["DOMAIN"],
        hosted_zone_id=values["HOSTED_ZONE"],
        subdomain=_read(environ, "SUBDOMAIN"),
        **overrides,
    )
    return ConfigResult(config=config)
