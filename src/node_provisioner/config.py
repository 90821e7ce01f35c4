"""Configuration management for Node Provisioner."""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

GROUP_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NODE_PROVISIONER_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Provider settings
    provider: str = Field(default="gce", description="Libcloud compute provider name")
    project: str | None = Field(
        default=None, description="GCE project, derived from the service account when unset"
    )

    # Template constraints
    zone: str = Field(default="europe-west1-b", description="Location id for new nodes")
    hardware_profile_name: str = Field(default="f1-micro", description="Hardware profile name")
    image_name_prefix: str = Field(default="centos-7", description="Image name prefix")

    # Node group
    group_name: str = Field(default="provisioner-example", description="Node group name")
    node_count: int = Field(default=1, ge=1, description="Number of nodes to create")
    login_user: str = Field(default="provisioner", description="Login user issued on new nodes")

    # Polling
    poll_interval_ms: int = Field(
        default=20_000, gt=0, description="Initial and maximum provider poll interval"
    )
    provisioning_timeout_seconds: int = Field(
        default=600, gt=0, description="Max wait for nodes to reach running state"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Minimum log level")
    log_json: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("group_name")
    @classmethod
    def validate_group_name(cls, value: str) -> str:
        """Group names end up in node names, keep them DNS-label safe."""
        if not GROUP_NAME_PATTERN.match(value):
            raise ValueError(
                f"group name {value!r} must start with a lowercase letter and "
                "contain only lowercase letters, digits and dashes"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def poll_interval_seconds(self) -> float:
        """Poll interval converted to seconds."""
        return self.poll_interval_ms / 1000


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
