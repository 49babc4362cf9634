"""
Run controller: wires feeder, dispatcher and status ticks for one run.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional, TextIO

from dead_link_monitor.config import PipelineConfig
from dead_link_monitor.utils.logging import get_business_logger, get_logger
from dead_link_monitor.utils.errors import ValidationError
from dead_link_monitor.data.repository import ResultRepository
from dead_link_monitor.extractors import DocumentFormat
from dead_link_monitor.transport.http_client import HTTPClient
from .dispatcher import FetchDispatcher
from .feeder import FeederState, FileFeeder
from .job_queue import JobQueue
from .models import ConnectionBudget, RunStats
from .scheduler import RecurringTick


logger = get_logger(__name__)


@dataclass
class PipelineContext:
    """Shared state of one run; created at start, discarded after reporting."""
    queue: JobQueue
    budget: ConnectionBudget
    results: ResultRepository
    stats: RunStats = field(default_factory=RunStats)

    @classmethod
    def create(cls, max_connections: int) -> "PipelineContext":
        return cls(
            queue=JobQueue(),
            budget=ConnectionBudget(max_connections),
            results=ResultRepository(),
        )


class LinkCheckController:
    """
    Runs the link checking pipeline on the current event loop.

    The feeder and dispatcher ticks run independently. The dispatcher's
    completion check stops every tick and releases ``run``.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        client: Optional[Any] = None,
        progress_stream: Optional[TextIO] = None
    ):
        """
        Initialize controller.

        Args:
            config: Pipeline settings
            client: Transport to use; an ``HTTPClient`` is created and closed
                per run when omitted
            progress_stream: Stream for progress lines (defaults to stdout)
        """
        self.config = config or PipelineConfig()
        if self.config.max_connections < 1:
            raise ValidationError(
                "max_connections must be at least 1",
                {"max_connections": self.config.max_connections}
            )
        self.client = client
        self.progress_stream = progress_stream
        self.status_logger = get_business_logger('status')

    async def run(
        self,
        paths: Iterable[str],
        forced_format: Optional[DocumentFormat] = None
    ) -> PipelineContext:
        """
        Check every link in ``paths`` and return the finished run context.

        Args:
            paths: Input documents, processed in order
            forced_format: Treat every input as this format
        """
        context = PipelineContext.create(self.config.max_connections)
        finished = asyncio.Event()

        owns_client = self.client is None
        client = self.client or HTTPClient(
            timeout=self.config.request_timeout,
            user_agent=self.config.user_agent,
        )

        feeder = FileFeeder(paths, context.queue, forced_format, context.stats)

        def feed() -> None:
            if feeder.tick() is FeederState.EXHAUSTED:
                feeder_tick.stop()

        feeder_tick = RecurringTick("feeder", feed, self.config.tick_interval)

        status_tick = RecurringTick(
            "status",
            lambda: self._log_status(context),
            self.config.status_interval,
        )

        def finish() -> None:
            dispatcher_tick.stop()
            status_tick.stop()
            context.stats.finished_at = datetime.now()
            finished.set()

        dispatcher = FetchDispatcher(
            context.queue,
            context.budget,
            context.results,
            client,
            stats=context.stats,
            on_finished=finish,
            progress_stream=self.progress_stream,
        )
        dispatcher_tick = RecurringTick("dispatcher", dispatcher.tick, self.config.tick_interval)

        logger.info(
            f"Checking links in {feeder.pending} documents "
            f"(max_connections={self.config.max_connections})"
        )

        if owns_client:
            await client.open()
        try:
            feeder_tick.start()
            dispatcher_tick.start()
            status_tick.start(delay=self.config.status_interval)
            await finished.wait()
        finally:
            for tick in (feeder_tick, dispatcher_tick, status_tick):
                tick.stop()
            if owns_client:
                await client.close()

        self._log_summary(context)
        return context

    def check(
        self,
        paths: Iterable[str],
        forced_format: Optional[DocumentFormat] = None
    ) -> PipelineContext:
        """Run the pipeline on a fresh event loop and block until it ends."""
        return asyncio.run(self.run(paths, forced_format))

    def _log_status(self, context: PipelineContext) -> None:
        self.status_logger.info(
            f"queue={len(context.queue)} "
            f"active={context.budget.active}/{context.budget.max_connections} "
            f"completed={context.stats.jobs_completed}"
        )

    def _log_summary(self, context: PipelineContext) -> None:
        stats = context.stats
        logger.info(
            f"Run finished: documents={stats.documents_processed} "
            f"skipped={stats.documents_skipped} jobs={stats.jobs_discovered} "
            f"completed={stats.jobs_completed} urls={len(context.results)} "
            f"failures={len(context.results.get_failures())} "
            f"peak_connections={context.budget.peak} "
            f"elapsed={stats.get_elapsed_time() or 0.0:.2f}s"
        )
