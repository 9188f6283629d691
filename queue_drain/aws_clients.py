"""boto3 client factory for the source/destination queues and the bucket.

Uses LocalStack when `localstack_endpoint` is configured, explicit credentials
when they are set, and otherwise the default AWS credential chain.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from queue_drain.errors import ConfigurationError

if TYPE_CHECKING:
    from queue_drain.config import DrainConfig

logger = logging.getLogger(__name__)


def _client_config(config: DrainConfig) -> Config:
    kwargs: dict[str, Any] = {
        "retries": {"max_attempts": config.max_attempts, "mode": "standard"},
    }
    if config.connect_timeout is not None:
        kwargs["connect_timeout"] = config.connect_timeout
    if config.read_timeout is not None:
        kwargs["read_timeout"] = config.read_timeout
    # Both sinks may call from worker threads at once.
    kwargs["max_pool_connections"] = max(10, config.max_workers * 2)
    return Config(**kwargs)


def _new_client(service: str, kwargs: dict[str, Any]) -> Any:
    try:
        return boto3.client(service, **kwargs)
    except BotoCoreError as e:
        # e.g. NoRegionError when neither config nor environment name a region
        raise ConfigurationError(f"Cannot create {service} client: {e}") from e


def create_client(service: str, config: DrainConfig) -> Any:
    """Create a boto3 client for `service` ("sqs" or "s3").

    Args:
        service: boto3 service name.
        config: Drain configuration.

    Returns:
        Boto3 client configured for LocalStack or AWS.
    """
    kwargs: dict[str, Any] = {"config": _client_config(config)}
    if config.aws_region:
        kwargs["region_name"] = config.aws_region

    if config.localstack_endpoint:
        logger.info("Using LocalStack %s at %s", service.upper(), config.localstack_endpoint)
        kwargs["endpoint_url"] = config.localstack_endpoint
        kwargs["aws_access_key_id"] = config.aws_access_key_id or "test"
        kwargs["aws_secret_access_key"] = config.aws_secret_access_key or "test"
        kwargs.setdefault("region_name", "us-east-1")
        return _new_client(service, kwargs)

    if config.aws_access_key_id and config.aws_secret_access_key:
        kwargs["aws_access_key_id"] = config.aws_access_key_id
        kwargs["aws_secret_access_key"] = config.aws_secret_access_key
        if config.aws_session_token:
            kwargs["aws_session_token"] = config.aws_session_token

    logger.info(
        "Using AWS %s in region %s", service.upper(), kwargs.get("region_name", "<default>")
    )
    return _new_client(service, kwargs)


def create_sqs_client(config: DrainConfig) -> Any:
    return create_client("sqs", config)


def create_s3_client(config: DrainConfig) -> Any:
    return create_client("s3", config)
