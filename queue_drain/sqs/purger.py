"""Delete a pulled batch from the source queue."""

import logging
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from queue_drain.errors import RemoteServiceError
from queue_drain.models.delivery import PurgeResult
from queue_drain.models.message import Batch

if TYPE_CHECKING:
    from queue_drain.sqs.puller import SQSClient

logger = logging.getLogger(__name__)


class Purger:
    """Deletes every message of a batch using its receipt handle.

    The whole pulled batch is deleted as a unit. Whether each message actually
    reached a sink is not checked here.
    """

    def __init__(self, sqs_client: "SQSClient", strict: bool = False) -> None:
        """Initialize the purger.

        Args:
            sqs_client: Boto3 SQS client.
            strict: Raise when DeleteMessageBatch rejects individual entries
                instead of only logging them.
        """
        self.sqs_client = sqs_client
        self.strict = strict

    def purge(self, source_queue: str, batch: Batch) -> PurgeResult:
        """Delete `batch` from `source_queue`, one call per 10 messages.

        Raises:
            RemoteServiceError: If a delete call fails, or in strict mode if
                any entry is rejected.
        """
        if batch.is_empty:
            logger.info("Nothing to purge from %s", source_queue)
            return PurgeResult()

        deleted: list[str] = []
        failed: list[str] = []
        for chunk in batch.chunks():
            try:
                response = self.sqs_client.delete_message_batch(
                    QueueUrl=source_queue,
                    Entries=[m.delete_entry() for m in chunk],
                )
            except (ClientError, BotoCoreError) as e:
                logger.error("Failed to purge messages from %s: %s", source_queue, e)
                raise RemoteServiceError("delete_message_batch", source_queue, str(e)) from e

            response = response or {}
            deleted.extend(entry["Id"] for entry in response.get("Successful", []))
            for entry in response.get("Failed", []):
                failed.append(entry["Id"])
                logger.warning(
                    "Delete rejected for message %s from %s: %s %s",
                    entry["Id"],
                    source_queue,
                    entry.get("Code"),
                    entry.get("Message"),
                )

        if failed and self.strict:
            raise RemoteServiceError(
                "delete_message_batch",
                source_queue,
                f"{len(failed)} entries rejected: {', '.join(failed)}",
            )

        logger.info("Purged %d messages from %s", len(deleted), source_queue)
        return PurgeResult(deleted_ids=tuple(deleted), failed_ids=tuple(failed))
