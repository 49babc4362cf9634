"""
Fetch dispatcher: drains the job queue under the connection budget.
"""

import asyncio
import sys
from functools import partial
from typing import Any, Callable, Optional, Set, TextIO

from dead_link_monitor.utils.logging import get_business_logger
from dead_link_monitor.utils.errors import describe_error
from dead_link_monitor.data.models import FetchOutcome, is_redirect
from dead_link_monitor.data.repository import ResultRepository
from .job_queue import JobQueue
from .models import ConnectionBudget, Job, RunStats


class FetchDispatcher:
    """
    Bounded-concurrency consumer of the job queue.

    Each tick starts as many fetches as the budget allows. Every started
    fetch gets a completion callback that frees its slot and records exactly
    one result update, whatever the transport did. When the queue is closed
    and drained and nothing is in flight, ``on_finished`` is called once.

    All methods run on the event loop thread.
    """

    def __init__(
        self,
        queue: JobQueue,
        budget: ConnectionBudget,
        results: ResultRepository,
        client: Any,
        stats: Optional[RunStats] = None,
        on_finished: Optional[Callable[[], None]] = None,
        progress_stream: Optional[TextIO] = None
    ):
        """
        Initialize dispatcher.

        Args:
            queue: Source of jobs
            budget: Connection budget bounding in-flight fetches
            results: Results table updated on completion
            client: Transport with an ``async get(url)`` returning a response
                with ``status`` and ``header(name)``
            stats: Run statistics to update
            on_finished: Called once when the run is complete
            progress_stream: Stream for per-completion progress lines
                (defaults to stdout)
        """
        self.queue = queue
        self.budget = budget
        self.results = results
        self.client = client
        self.stats = stats or RunStats()
        self.on_finished = on_finished
        self.progress_stream = progress_stream
        self.finished = False
        self._in_flight: Set[asyncio.Task] = set()
        self.logger = get_business_logger('dispatcher')

    def is_complete(self) -> bool:
        """Queue closed, queue empty and no fetch in flight."""
        return self.queue.is_closed and len(self.queue) == 0 and self.budget.active == 0

    def tick(self) -> None:
        if self.finished:
            return

        if len(self.queue) > 0:
            for _ in range(self.budget.available):
                job = self.queue.next()
                if job is None:
                    break
                self._dispatch(job)
        elif self.is_complete():
            self._finish()

    def _dispatch(self, job: Job) -> None:
        self.budget.acquire()
        job.mark_dispatched()
        self.stats.jobs_dispatched += 1

        task = asyncio.ensure_future(self.client.get(job.url))
        self._in_flight.add(task)
        task.add_done_callback(partial(self._on_complete, job))
        self.logger.debug(f"Dispatched {job.url} ({self.budget})")

    def _on_complete(self, job: Job, task: asyncio.Future) -> None:
        self._in_flight.discard(task)
        job.mark_completed()
        self.budget.release()

        outcome = self._outcome_of(job, task)
        entry = self.results.record(job, outcome)
        self.stats.jobs_completed += 1
        if outcome.error is not None:
            self.stats.transport_failures += 1

        self._print_progress(entry.code, job.get_fetch_time() or 0.0, job.url)

    def _outcome_of(self, job: Job, task: asyncio.Future) -> FetchOutcome:
        if task.cancelled():
            return FetchOutcome.failed("request cancelled")

        error = task.exception()
        if error is not None:
            details = describe_error(error)
            self.logger.debug(f"Fetch failed for {job.url}: {details['error_message']}")
            return FetchOutcome.failed(f"{details['error_type']}: {details['error_message']}")

        response = task.result()
        location = response.header('Location') if is_redirect(response.status) else None
        return FetchOutcome(code=response.status, location=location)

    def _print_progress(self, code: int, elapsed: float, url: str) -> None:
        stream = self.progress_stream or sys.stdout
        print(f"{code}  {elapsed:.3f}  {url}", file=stream, flush=True)

    def _finish(self) -> None:
        self.finished = True
        self.logger.debug("Queue closed and drained with nothing in flight")
        if self.on_finished is not None:
            self.on_finished()
