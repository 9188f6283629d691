"""Pull, dispatch and purge: one drain run.

Requirements:
- The source batch is purged only after every configured sink has finished
  and none of them failed.
- The purge covers exactly the messages that were pulled.
- No retries: every remote error ends the run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import TYPE_CHECKING, Any

from queue_drain.aws_clients import create_s3_client, create_sqs_client
from queue_drain.enums import RunState, SinkKind
from queue_drain.errors import ConfigurationError, DispatchError, DrainError
from queue_drain.models.delivery import DrainReport
from queue_drain.services.dispatcher import Dispatcher
from queue_drain.sinks.base import Sink
from queue_drain.sinks.bucket_sink import BucketSink
from queue_drain.sinks.queue_sink import QueueSink
from queue_drain.sqs.puller import Puller
from queue_drain.sqs.purger import Purger

if TYPE_CHECKING:
    from queue_drain.config import DrainConfig
    from queue_drain.sqs.puller import SQSClient

logger = logging.getLogger(__name__)


class DrainPipeline:
    """Runs a single pull -> dispatch -> purge cycle.

    The state only moves forward:
    start -> pulled -> dispatching -> dispatched -> purged -> done,
    and to failed from any state on error.
    """

    def __init__(
        self,
        config: DrainConfig,
        sqs_client: SQSClient,
        s3_client: Any | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the pipeline with injected clients.

        Args:
            config: Drain configuration. Validated before anything else.
            sqs_client: Boto3 SQS client used for the source and the
                destination queue.
            s3_client: Boto3 S3 client. Required when a bucket is configured.
            clock: Source of the current UTC time for bucket keys.

        Raises:
            ConfigurationError: If the configuration cannot support a run.
        """
        config.validate_for_run()
        self.config = config
        self.source_queue = config.source_queue.strip()
        self.sqs_client = sqs_client
        self.s3_client = s3_client

        self.puller = Puller(sqs_client)
        self.purger = Purger(sqs_client, strict=config.strict_delivery)
        self.dispatcher = Dispatcher(self._build_sinks(clock))

    @classmethod
    def from_config(cls, config: DrainConfig) -> DrainPipeline:
        """Build a pipeline with boto3 clients created from `config`.

        Configuration is validated before any client is created.
        """
        config.validate_for_run()
        kinds = config.sinks.kinds
        sqs_client = create_sqs_client(config)
        s3_client = create_s3_client(config) if SinkKind.BUCKET in kinds else None
        return cls(config, sqs_client=sqs_client, s3_client=s3_client)

    def _build_sinks(self, clock: Callable[[], datetime] | None) -> list[Sink]:
        sink_config = self.config.sinks
        sinks: list[Sink] = []
        if sink_config.dest_queue:
            sinks.append(
                QueueSink(
                    self.sqs_client,
                    sink_config.dest_queue,
                    strict=self.config.strict_delivery,
                )
            )
        if sink_config.bucket:
            if self.s3_client is None:
                raise ConfigurationError("A bucket is configured but no S3 client was given")
            kwargs = {"clock": clock} if clock is not None else {}
            sinks.append(BucketSink(self.s3_client, sink_config.bucket, **kwargs))
        return sinks

    @staticmethod
    def _advance(report: DrainReport, state: RunState) -> None:
        logger.debug("Run on %s: %s -> %s", report.source_queue, report.state, state)
        report.state = state

    async def run(self) -> DrainReport:
        """Execute one drain cycle.

        Returns:
            Report of a completed run.

        Raises:
            DrainError: Any failure. The report is attached as `error.report`.
        """
        report = DrainReport(source_queue=self.source_queue)
        loop = asyncio.get_running_loop()
        logger.info("Draining %s to %s", self.source_queue, ", ".join(self.dispatcher.kinds))

        # Every sink needs its own worker or delivery is no longer concurrent.
        workers = max(self.config.max_workers, len(self.dispatcher.sinks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="queue-drain") as executor:
            try:
                batch = await loop.run_in_executor(executor, self.puller.pull, self.source_queue)
                report.pulled = len(batch)
                self._advance(report, RunState.PULLED)

                self._advance(report, RunState.DISPATCHING)
                try:
                    report.outcomes = await self.dispatcher.dispatch(batch, executor)
                except DispatchError as e:
                    report.outcomes = e.outcomes
                    raise
                self._advance(report, RunState.DISPATCHED)

                report.purge = await loop.run_in_executor(
                    executor, self.purger.purge, self.source_queue, batch
                )
                self._advance(report, RunState.PURGED)
            except DrainError as e:
                self._advance(report, RunState.FAILED)
                report.error = e
                e.report = report
                logger.error("Drain of %s failed: %s", self.source_queue, e)
                raise

        self._advance(report, RunState.DONE)
        logger.info("All done: %s", report.summary())
        return report

    def run_once(self) -> DrainReport:
        """Blocking wrapper around `run`."""
        return asyncio.run(self.run())
