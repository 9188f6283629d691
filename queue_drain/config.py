"""Configuration with JSON file, optional YAML overlay, and env variable support.

Load order (later overrides earlier):
1. config.json - base configuration
2. config.yml next to it - optional overlay
3. Environment variables (prefix DRAIN_)
4. Explicit overrides (command line flags)
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from queue_drain.enums import SinkKind
from queue_drain.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "DRAIN_"
ENV_FILE = ".env"


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class SinkConfig:
    """Destinations for a drained batch.

    Either destination may be absent, but not both.
    """

    dest_queue: str | None = None
    bucket: str | None = None

    @property
    def kinds(self) -> list[SinkKind]:
        kinds = []
        if _blank_to_none(self.dest_queue):
            kinds.append(SinkKind.QUEUE)
        if _blank_to_none(self.bucket):
            kinds.append(SinkKind.BUCKET)
        return kinds

    def validate(self) -> "SinkConfig":
        if not self.kinds:
            raise ConfigurationError(
                "At least one destination is required: a destination queue or a bucket"
            )
        return self


def _load_yaml_overlay(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")
    return data


class DrainConfig(BaseSettings):
    """Settings for a single drain run.

    Prefix: DRAIN_ (e.g., DRAIN_SOURCE_QUEUE, DRAIN_BUCKET)
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Pipeline settings
    source_queue: str = Field(default="", description="URL of the queue to drain.")
    dest_queue: str | None = Field(default=None, description="URL of the destination queue.")
    bucket: str | None = Field(default=None, description="Destination S3 bucket name.")
    strict_delivery: bool = Field(
        default=False,
        description=(
            "If true, entries rejected one by one by SendMessageBatch or "
            "DeleteMessageBatch fail the run instead of only being logged. "
            "With it off a rejected entry is still purged from the source."
        ),
    )
    max_workers: int = Field(default=2, ge=1)

    # AWS settings
    aws_region: str | None = Field(default=None)
    aws_access_key_id: str | None = Field(default=None)
    aws_secret_access_key: str | None = Field(default=None)
    aws_session_token: str | None = Field(
        default=None,
        description="Optional AWS session token for temporary credentials.",
    )
    localstack_endpoint: str | None = Field(default=None)
    max_attempts: int = Field(
        default=0,
        ge=0,
        description="botocore retry attempts; 0 keeps every remote error terminal.",
    )
    connect_timeout: float | None = Field(default=None, gt=0)
    read_timeout: float | None = Field(default=None, gt=0)

    # Logging
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def sinks(self) -> SinkConfig:
        return SinkConfig(
            dest_queue=_blank_to_none(self.dest_queue),
            bucket=_blank_to_none(self.bucket),
        )

    def validate_for_run(self) -> "DrainConfig":
        """Check the run pre-conditions.

        Raises:
            ConfigurationError: If the source queue is empty or no destination
                is configured.
        """
        if not _blank_to_none(self.source_queue):
            raise ConfigurationError("A source queue is required")
        self.sinks.validate()
        return self

    @classmethod
    def from_json_file(
        cls,
        config_path: str = "config.json",
        overrides: dict[str, Any] | None = None,
    ) -> "DrainConfig":
        """Load config from JSON + YAML overlay with env var and explicit overrides.

        Args:
            config_path: Path to JSON config file. Missing files are skipped.
            overrides: Values that win over everything else. None values are
                ignored so unset command line flags do not mask config.

        Returns:
            Configured DrainConfig instance.

        Raises:
            ConfigurationError: If a file cannot be parsed or a value is invalid.
        """
        config_data: dict[str, Any] = {}

        json_path = Path(config_path)
        if json_path.is_file():
            try:
                with json_path.open(encoding="utf-8") as f:
                    config_data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {json_path}: {e}") from e
            if not isinstance(config_data, dict):
                raise ConfigurationError(f"{json_path} must contain an object")
            logger.debug("Loaded config from %s", json_path)

        config_data.update(_load_yaml_overlay(json_path.with_suffix(".yml")))

        # Init kwargs beat env vars in pydantic-settings, so drop file values
        # whose env var is set, in the process environment or in .env.
        env_keys = {k.upper() for k in os.environ}
        env_keys.update(k.upper() for k in dotenv_values(ENV_FILE))
        for key in [k for k in config_data if f"{ENV_PREFIX}{k.upper()}" in env_keys]:
            del config_data[key]

        if overrides:
            config_data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
