"""Pull one batch from the source queue."""

import logging
from typing import TYPE_CHECKING, Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from queue_drain.errors import RemoteServiceError
from queue_drain.models.message import MAX_BATCH_SIZE, Batch
from queue_drain.observability.redaction import sanitize

if TYPE_CHECKING:
    from mypy_boto3_sqs import SQSClient
else:

    class SQSClient(Protocol):
        def receive_message(self, **kwargs: Any) -> Any: ...

        def send_message_batch(self, **kwargs: Any) -> Any: ...

        def delete_message_batch(self, **kwargs: Any) -> Any: ...


logger = logging.getLogger(__name__)


class Puller:
    """Receives a single batch from the source queue.

    The receive call does not wait for messages to arrive: an idle queue yields
    an empty batch immediately.
    """

    WAIT_TIME_SECONDS = 0

    def __init__(self, sqs_client: "SQSClient", max_messages: int = MAX_BATCH_SIZE) -> None:
        if not 1 <= max_messages <= MAX_BATCH_SIZE:
            raise ValueError(f"max_messages must be between 1 and {MAX_BATCH_SIZE}")
        self.sqs_client = sqs_client
        self.max_messages = max_messages

    def pull(self, source_queue: str) -> Batch:
        """Receive up to `max_messages` messages with all their attributes.

        Args:
            source_queue: URL of the queue to read.

        Returns:
            The batch as received, possibly empty.

        Raises:
            RemoteServiceError: If the receive call fails or returns entries
                that are not SQS messages.
        """
        try:
            response = self.sqs_client.receive_message(
                QueueUrl=source_queue,
                MaxNumberOfMessages=self.max_messages,
                WaitTimeSeconds=self.WAIT_TIME_SECONDS,
                AttributeNames=["All"],
                MessageAttributeNames=["All"],
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to receive messages from %s: %s", source_queue, e)
            raise RemoteServiceError("receive_message", source_queue, str(e)) from e

        try:
            batch = Batch.from_response(source_queue, response or {})
        except ValidationError as e:
            raise RemoteServiceError(
                "receive_message", source_queue, f"malformed response: {e}"
            ) from e

        logger.info("Received %d messages from %s", len(batch), source_queue)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Batch from %s: %s",
                source_queue,
                sanitize([m.to_wire() for m in batch.messages], max_chars=200),
            )
        return batch
