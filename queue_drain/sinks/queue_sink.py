"""Forward a batch to another SQS queue."""

import logging
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from queue_drain.enums import SinkKind
from queue_drain.errors import RemoteServiceError
from queue_drain.models.delivery import DeliveryOutcome
from queue_drain.models.message import MAX_BATCH_BYTES, MAX_BATCH_SIZE, Batch
from queue_drain.sinks.base import Sink

if TYPE_CHECKING:
    from queue_drain.sqs.puller import SQSClient

logger = logging.getLogger(__name__)


class QueueSink(Sink):
    """Sends each message to the destination queue with its original id and body.

    Messages go out in SendMessageBatch calls of at most 10 entries and
    `max_batch_bytes` of body text. Message attributes are not forwarded.
    """

    kind = SinkKind.QUEUE

    def __init__(
        self,
        sqs_client: "SQSClient",
        dest_queue: str,
        strict: bool = False,
        chunk_size: int = MAX_BATCH_SIZE,
        max_batch_bytes: int = MAX_BATCH_BYTES,
    ) -> None:
        """Initialize the queue sink.

        Args:
            sqs_client: Boto3 SQS client.
            dest_queue: URL of the destination queue.
            strict: Fail the delivery when any entry is rejected.
            chunk_size: Entries per SendMessageBatch call (max 10).
            max_batch_bytes: Body bytes per SendMessageBatch call.
        """
        if not 1 <= chunk_size <= MAX_BATCH_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_BATCH_SIZE}")
        if max_batch_bytes <= 0:
            raise ValueError("max_batch_bytes must be positive")
        self.sqs_client = sqs_client
        self.dest_queue = dest_queue
        self.strict = strict
        self.chunk_size = chunk_size
        self.max_batch_bytes = max_batch_bytes

    @property
    def target(self) -> str:
        return self.dest_queue

    def deliver(self, batch: Batch) -> DeliveryOutcome:
        if batch.is_empty:
            logger.info("No messages to send to %s", self.dest_queue)
            return DeliveryOutcome(sink=self.kind)

        delivered: list[str] = []
        failed: list[str] = []
        for chunk in batch.chunks(self.chunk_size, max_bytes=self.max_batch_bytes):
            try:
                response = self.sqs_client.send_message_batch(
                    QueueUrl=self.dest_queue,
                    Entries=[m.send_entry() for m in chunk],
                )
            except (ClientError, BotoCoreError) as e:
                logger.error("Failed to send messages to %s: %s", self.dest_queue, e)
                raise RemoteServiceError("send_message_batch", self.dest_queue, str(e)) from e

            response = response or {}
            delivered.extend(entry["Id"] for entry in response.get("Successful", []))
            for entry in response.get("Failed", []):
                failed.append(entry["Id"])
                logger.warning(
                    "Send rejected for message %s to %s: %s %s",
                    entry["Id"],
                    self.dest_queue,
                    entry.get("Code"),
                    entry.get("Message"),
                )

        error = None
        if failed:
            if self.strict:
                error = RemoteServiceError(
                    "send_message_batch",
                    self.dest_queue,
                    f"{len(failed)} entries rejected: {', '.join(failed)}",
                )
            else:
                # The source batch is still purged in full afterwards.
                logger.warning(
                    "%d of %d messages were not accepted by %s and will be lost on purge",
                    len(failed),
                    len(batch),
                    self.dest_queue,
                )

        logger.info("Sent %d messages to %s", len(delivered), self.dest_queue)
        return DeliveryOutcome(
            sink=self.kind,
            delivered_ids=tuple(delivered),
            failed_ids=tuple(failed),
            error=error,
        )
