"""Delivery strategies for a pulled batch."""

from .base import Sink
from .bucket_sink import BucketSink
from .queue_sink import QueueSink

__all__ = ["BucketSink", "QueueSink", "Sink"]
