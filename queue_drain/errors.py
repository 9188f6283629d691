"""Exception hierarchy for a drain run.

Every error here is terminal for the run: nothing is retried locally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from queue_drain.enums import SinkKind
    from queue_drain.models.delivery import DeliveryOutcome, DrainReport


class DrainError(Exception):
    """Base class for all drain failures.

    `report` is set to the run report when the error ends a pipeline run.
    """

    report: DrainReport | None = None


class ConfigurationError(DrainError):
    """Raised when required settings are missing or invalid.

    Raised before any AWS client is built or any remote call is made.
    """


class RemoteServiceError(DrainError):
    """Raised when an SQS or S3 call fails."""

    def __init__(
        self,
        operation: str,
        resource: str,
        message: str | None = None,
    ) -> None:
        self.operation = operation
        self.resource = resource
        detail = f": {message}" if message else ""
        super().__init__(f"{operation} failed for {resource}{detail}")


class DispatchError(RemoteServiceError):
    """Raised after the join barrier when one or more sinks failed.

    Carries every outcome so callers can see what the other sink did.
    """

    def __init__(self, outcomes: dict[SinkKind, DeliveryOutcome]) -> None:
        self.outcomes = outcomes
        failed = sorted(str(kind) for kind, o in outcomes.items() if not o.succeeded)
        super().__init__("dispatch", ",".join(failed), "sink delivery failed")

    @property
    def failed_sinks(self) -> list[SinkKind]:
        return [kind for kind, o in self.outcomes.items() if not o.succeeded]


class SerializationError(DrainError):
    """Raised when a batch cannot be encoded for the bucket."""
