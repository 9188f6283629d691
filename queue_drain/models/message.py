"""Queue message and batch models.

Field names follow the SQS ReceiveMessage response so a received message can be
parsed straight from boto3 output and written back out in the same shape.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import Field, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from queue_drain.errors import SerializationError
from queue_drain.models.base import SqsModel


# SQS caps receive, send-batch and delete-batch at 10 entries per call.
MAX_BATCH_SIZE = 10
# Total payload SQS accepts in one SendMessageBatch call (1 MiB).
MAX_BATCH_BYTES = 1024 * 1024


class MessageAttributeValue(SqsModel):
    """A user-defined message attribute."""

    data_type: str
    string_value: str | None = None
    binary_value: bytes | None = None
    string_list_values: list[str] | None = None
    binary_list_values: list[bytes] | None = None


class QueueMessage(SqsModel):
    """A message as received from the source queue.

    `receipt_handle` is only valid for the receive call that produced it.
    """

    message_id: str
    receipt_handle: str
    body: str
    md5_of_body: str | None = Field(default=None, alias="MD5OfBody")
    attributes: dict[str, str] | None = None
    message_attributes: dict[str, MessageAttributeValue] | None = None
    md5_of_message_attributes: str | None = Field(
        default=None, alias="MD5OfMessageAttributes"
    )

    def send_entry(self) -> dict[str, str]:
        """Entry for SendMessageBatch: original id and body, unchanged."""
        return {"Id": self.message_id, "MessageBody": self.body}

    def delete_entry(self) -> dict[str, str]:
        """Entry for DeleteMessageBatch."""
        return {"Id": self.message_id, "ReceiptHandle": self.receipt_handle}


_DOCUMENT = TypeAdapter(list[QueueMessage])


class Batch(SqsModel):
    """Messages pulled from one queue in a single receive call.

    Order is kept as received but carries no meaning.
    """

    source_queue: str
    messages: tuple[QueueMessage, ...] = ()

    @classmethod
    def from_response(cls, source_queue: str, response: Mapping[str, Any]) -> Batch:
        """Build a batch from a boto3 `receive_message` response.

        A missing `Messages` key means the queue was empty.
        """
        raw = response.get("Messages") or []
        return cls(
            source_queue=source_queue,
            messages=tuple(QueueMessage.model_validate(m) for m in raw),
        )

    @classmethod
    def from_document(cls, source_queue: str, document: bytes | str) -> Batch:
        """Rebuild a batch from a bucket document written by `to_document`."""
        try:
            messages = _DOCUMENT.validate_json(document)
        except ValidationError as e:
            raise SerializationError(f"Invalid batch document: {e}") from e
        return cls(source_queue=source_queue, messages=tuple(messages))

    def to_document(self) -> bytes:
        """Serialize every message, attributes and receipt handles included."""
        try:
            return _DOCUMENT.dump_json(
                list(self.messages), by_alias=True, exclude_none=True
            )
        except PydanticSerializationError as e:
            raise SerializationError(
                f"Cannot encode batch from {self.source_queue}: {e}"
            ) from e

    @property
    def message_ids(self) -> list[str]:
        return [m.message_id for m in self.messages]

    @property
    def is_empty(self) -> bool:
        return not self.messages

    def __len__(self) -> int:
        return len(self.messages)

    def chunks(
        self, size: int = MAX_BATCH_SIZE, max_bytes: int | None = None
    ) -> list[tuple[QueueMessage, ...]]:
        """Split messages into groups no larger than a batch call accepts.

        With `max_bytes`, a group also stays within that many UTF-8 body bytes.
        A single message larger than the cap still goes out alone.
        """
        if max_bytes is None:
            return list(chunked(self.messages, size))
        return list(chunked(self.messages, size, max_bytes=max_bytes, weight=body_size))


def body_size(message: QueueMessage) -> int:
    return len(message.body.encode("utf-8"))


def chunked(
    items: Iterable[Any],
    size: int,
    max_bytes: int | None = None,
    weight: Callable[[Any], int] | None = None,
) -> Iterable[tuple[Any, ...]]:
    """Yield consecutive tuples of at most `size` items.

    When `max_bytes` is given, the summed `weight` of each tuple also stays
    within it.
    """
    if size <= 0:
        raise ValueError("size must be positive")
    if max_bytes is not None and (max_bytes <= 0 or weight is None):
        raise ValueError("max_bytes must be positive and needs a weight function")
    chunk: list[Any] = []
    total = 0
    for item in items:
        item_bytes = weight(item) if max_bytes is not None else 0
        if chunk and max_bytes is not None and total + item_bytes > max_bytes:
            yield tuple(chunk)
            chunk, total = [], 0
        chunk.append(item)
        total += item_bytes
        if len(chunk) == size:
            yield tuple(chunk)
            chunk, total = [], 0
    if chunk:
        yield tuple(chunk)
