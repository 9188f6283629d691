"""Per-run results: sink outcomes, purge result and the final report."""

from __future__ import annotations

from dataclasses import dataclass, field

from queue_drain.enums import RunState, SinkKind
from queue_drain.models.storage import S3Location


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of delivering a batch to one sink.

    `failed_ids` lists entries the remote service rejected one by one while the
    call itself succeeded. The outcome only fails when `error` is set.
    """

    sink: SinkKind
    delivered_ids: tuple[str, ...] = ()
    failed_ids: tuple[str, ...] = ()
    error: BaseException | None = None
    location: S3Location | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, sink: SinkKind, error: BaseException) -> DeliveryOutcome:
        return cls(sink=sink, error=error)


@dataclass(frozen=True)
class PurgeResult:
    deleted_ids: tuple[str, ...] = ()
    failed_ids: tuple[str, ...] = ()


@dataclass
class DrainReport:
    """Summary of one drain run."""

    source_queue: str
    state: RunState = RunState.START
    pulled: int = 0
    outcomes: dict[SinkKind, DeliveryOutcome] = field(default_factory=dict)
    purge: PurgeResult | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.DONE

    def summary(self) -> str:
        sinks = ", ".join(
            f"{kind}={'ok' if o.succeeded else 'failed'}"
            + (f" ({len(o.failed_ids)} rejected)" if o.failed_ids else "")
            for kind, o in self.outcomes.items()
        )
        purged = len(self.purge.deleted_ids) if self.purge else 0
        return (
            f"state={self.state} source={self.source_queue} pulled={self.pulled} "
            f"sinks=[{sinks}] purged={purged}"
        )
