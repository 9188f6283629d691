"""Typed models for a drain run."""

from queue_drain.models.base import SqsModel
from queue_drain.models.delivery import DeliveryOutcome, DrainReport, PurgeResult
from queue_drain.models.message import Batch, MessageAttributeValue, QueueMessage
from queue_drain.models.storage import S3Location

__all__ = [
    "Batch",
    "DeliveryOutcome",
    "DrainReport",
    "MessageAttributeValue",
    "PurgeResult",
    "QueueMessage",
    "S3Location",
    "SqsModel",
]
