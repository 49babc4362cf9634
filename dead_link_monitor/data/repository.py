"""
In-memory results table keyed by URL.
"""

from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from dead_link_monitor.utils.logging import get_logger
from dead_link_monitor.utils.errors import ValidationError
from .models import FetchOutcome, ResultEntry, is_redirect

if TYPE_CHECKING:
    from dead_link_monitor.concurrent.models import Job


logger = get_logger(__name__)


class ResultRepository:
    """
    Results table for one run.

    One entry per distinct URL. Later completions for the same URL add their
    document to ``files`` and overwrite code, location, error and timings.
    Mutated only from completion continuations on the event loop thread.
    """

    def __init__(self):
        self._entries: Dict[str, ResultEntry] = {}
        self.updates = 0

    def record(self, job: "Job", outcome: FetchOutcome) -> ResultEntry:
        """
        Upsert the entry for a completed job.

        Args:
            job: Job whose fetch resolved
            outcome: Status code, redirect target and error text

        Returns:
            The updated entry

        Raises:
            ValidationError: If the job has not completed
        """
        if job.completed_at is None:
            raise ValidationError("Cannot record a job that has not completed", {"url": job.url})

        entry = self._entries.get(job.url)
        if entry is None:
            entry = ResultEntry(url=job.url, code=outcome.code)
            self._entries[job.url] = entry

        entry.code = outcome.code
        entry.location = outcome.location if is_redirect(outcome.code) else None
        entry.error = outcome.error
        entry.discovered_at = job.discovered_at
        entry.dispatched_at = job.dispatched_at
        entry.completed_at = job.completed_at
        entry.add_file(job.document)

        self.updates += 1
        logger.debug(f"Recorded {outcome.code} for {job.url} from {job.document}")
        return entry

    def get(self, url: str) -> Optional[ResultEntry]:
        return self._entries.get(url)

    def get_failures(self) -> List[ResultEntry]:
        """Failing entries sorted by ascending code, then URL."""
        failures = [entry for entry in self._entries.values() if entry.is_failure]
        failures.sort(key=lambda entry: (entry.code, entry.url))
        return failures

    def total_fetch_time(self) -> float:
        """Sum of dispatch-to-completion time over all entries, in seconds."""
        return sum(entry.fetch_seconds for entry in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ResultEntry]:
        return iter(self._entries.values())

    def __contains__(self, url: str) -> bool:
        return url in self._entries
