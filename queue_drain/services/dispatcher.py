"""Concurrent delivery of one batch to every configured sink."""

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import Executor

from queue_drain.enums import SinkKind
from queue_drain.errors import ConfigurationError, DispatchError
from queue_drain.models.delivery import DeliveryOutcome
from queue_drain.models.message import Batch
from queue_drain.sinks.base import Sink

logger = logging.getLogger(__name__)


class Dispatcher:
    """Runs each sink's delivery as its own task and joins on all of them.

    A failing sink never cancels the other one: both outcomes are collected
    before deciding whether the run may continue to purge.
    """

    def __init__(self, sinks: Sequence[Sink]) -> None:
        if not sinks:
            raise ConfigurationError("Dispatcher needs at least one sink")
        kinds = [s.kind for s in sinks]
        if len(set(kinds)) != len(kinds):
            raise ConfigurationError(f"Duplicate sinks configured: {kinds}")
        self.sinks = list(sinks)

    @property
    def kinds(self) -> list[SinkKind]:
        return [s.kind for s in self.sinks]

    async def dispatch(
        self,
        batch: Batch,
        executor: Executor | None = None,
    ) -> dict[SinkKind, DeliveryOutcome]:
        """Deliver `batch` to every sink concurrently.

        Args:
            batch: The pulled batch. Shared read-only between sinks.
            executor: Thread pool for the blocking SDK calls. Defaults to the
                event loop's executor.

        Returns:
            Outcome per sink kind, when every sink succeeded.

        Raises:
            DispatchError: After the join, if any sink failed. Carries all
                outcomes.
        """
        loop = asyncio.get_running_loop()

        for sink in self.sinks:
            logger.info("Transferring %d messages to %s %s", len(batch), sink.kind, sink.target)

        results = await asyncio.gather(
            *(loop.run_in_executor(executor, sink.deliver, batch) for sink in self.sinks),
            return_exceptions=True,
        )

        outcomes: dict[SinkKind, DeliveryOutcome] = {}
        for sink, result in zip(self.sinks, results):
            if isinstance(result, Exception):
                logger.error("Delivery to %s %s failed: %s", sink.kind, sink.target, result)
                outcomes[sink.kind] = DeliveryOutcome.failure(sink.kind, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                if not result.succeeded:
                    logger.error(
                        "Delivery to %s %s failed: %s", sink.kind, sink.target, result.error
                    )
                outcomes[sink.kind] = result

        if any(not o.succeeded for o in outcomes.values()):
            raise DispatchError(outcomes)

        return outcomes
