"""Sink interface."""

from abc import ABC, abstractmethod

from queue_drain.enums import SinkKind
from queue_drain.models.delivery import DeliveryOutcome
from queue_drain.models.message import Batch


class Sink(ABC):
    """A destination for a pulled batch.

    `deliver` runs on a worker thread and must only read the batch. It raises
    when the remote call fails; entries rejected one by one are reported in
    the returned outcome.
    """

    kind: SinkKind

    @property
    @abstractmethod
    def target(self) -> str:
        """Name of the destination, for logs."""

    @abstractmethod
    def deliver(self, batch: Batch) -> DeliveryOutcome:
        """Deliver `batch` and describe the result."""
