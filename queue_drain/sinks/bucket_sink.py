"""Archive a batch as one JSON object in S3."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from queue_drain.enums import SinkKind
from queue_drain.errors import RemoteServiceError
from queue_drain.models.delivery import DeliveryOutcome
from queue_drain.models.message import Batch
from queue_drain.models.storage import S3Location
from queue_drain.sinks.base import Sink

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def object_key(source_queue: str, when: datetime) -> str:
    """Key for a batch archive: `<source queue>-<UTC timestamp>`.

    Two runs on the same source within one clock tick write the same key.
    """
    return f"{source_queue}-{when.astimezone(UTC)}"


class BucketSink(Sink):
    """Stores the whole batch, receipt handles included, as a JSON array.

    Receipt handles in the archive expire with the receive lease and cannot
    be used to delete messages later.
    """

    kind = SinkKind.BUCKET
    CONTENT_TYPE = "application/json"

    def __init__(
        self,
        s3_client: Any,
        bucket: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.s3_client = s3_client
        self.bucket = bucket
        self.clock = clock

    @property
    def target(self) -> str:
        return self.bucket

    def deliver(self, batch: Batch) -> DeliveryOutcome:
        body = batch.to_document()
        location = S3Location(bucket=self.bucket, key=object_key(batch.source_queue, self.clock()))

        try:
            self.s3_client.put_object(
                Bucket=location.bucket,
                Key=location.key,
                Body=body,
                ContentType=self.CONTENT_TYPE,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to write batch to %s: %s", location.uri, e)
            raise RemoteServiceError("put_object", location.uri, str(e)) from e

        logger.info(
            "Archived %d messages to %s (%d bytes)", len(batch), location.uri, len(body)
        )
        return DeliveryOutcome(
            sink=self.kind,
            delivered_ids=tuple(batch.message_ids),
            location=location,
        )
