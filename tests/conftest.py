"""Pytest configuration and fixtures."""

import hashlib
import logging
import os
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest


# Configure pytest-asyncio to auto-detect async tests
pytest_plugins = ("pytest_asyncio",)

SOURCE_QUEUE = "https://sqs.us-east-1.amazonaws.com/123456789012/source"
DEST_QUEUE = "https://sqs.us-east-1.amazonaws.com/123456789012/dest"
BUCKET = "drain-archive"


def pytest_configure(config: pytest.Config) -> None:
    """Keep SDK credential lookups quiet in opt-in LocalStack runs."""
    if not os.environ.get("LOCALSTACK_ENDPOINT"):
        return

    for name in ["botocore.credentials", "botocore", "boto3"]:
        logging.getLogger(name).setLevel(logging.WARNING)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test away from real config files and DRAIN_* variables."""
    for key in list(os.environ):
        if key.startswith("DRAIN_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


def _sqs_message(message_id: str, body: str | None = None, **extra) -> dict:
    body = body if body is not None else f"body-{message_id}"
    message = {
        "MessageId": message_id,
        "ReceiptHandle": f"rh-{message_id}-" + "x" * 24,
        "MD5OfBody": hashlib.md5(body.encode("utf-8")).hexdigest(),
        "Body": body,
        "Attributes": {"SentTimestamp": "1760000000000", "ApproximateReceiveCount": "1"},
    }
    message.update(extra)
    return message


@pytest.fixture
def make_message() -> Callable[..., dict]:
    """Factory for boto3-shaped SQS messages."""
    return _sqs_message


@pytest.fixture
def make_messages() -> Callable[[int], list[dict]]:
    def _make(count: int, prefix: str = "m") -> list[dict]:
        return [_sqs_message(f"{prefix}{i}") for i in range(count)]

    return _make


def _all_successful(*, QueueUrl: str, Entries: list[dict]) -> dict:  # noqa: N803 (boto-style kwargs)
    return {"Successful": [{"Id": e["Id"]} for e in Entries], "Failed": []}


@pytest.fixture
def sqs_client() -> MagicMock:
    """SQS client whose batch calls accept every entry.

    Set `receive_message.return_value` to choose what the source returns.
    """
    client = MagicMock()
    client.receive_message.return_value = {"Messages": []}
    client.send_message_batch.side_effect = _all_successful
    client.delete_message_batch.side_effect = _all_successful
    return client


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.put_object.return_value = {"ETag": '"etag"'}
    return client
