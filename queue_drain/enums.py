"""StrEnum definitions for type-safe constants."""

from enum import StrEnum


class SinkKind(StrEnum):
    """Destinations a drained batch can be delivered to."""

    QUEUE = "queue"
    BUCKET = "bucket"


class RunState(StrEnum):
    """States of a single drain run.

    The run moves forward only:
    start -> pulled -> dispatching -> dispatched -> purged -> done.
    Any error moves it to failed.
    """

    START = "start"
    PULLED = "pulled"
    DISPATCHING = "dispatching"
    DISPATCHED = "dispatched"
    PURGED = "purged"
    DONE = "done"
    FAILED = "failed"
