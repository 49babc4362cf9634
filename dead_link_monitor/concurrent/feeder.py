"""
File feeder: turns the input document list into jobs.
"""

from collections import deque
from enum import Enum
from typing import Deque, Iterable, Optional

from dead_link_monitor.utils.logging import get_business_logger
from dead_link_monitor.utils.errors import DeadLinkMonitorError
from dead_link_monitor.extractors import DocumentFormat, extract_file, select_format
from .job_queue import JobQueue
from .models import RunStats


class FeederState(Enum):
    """Feeder lifecycle state."""
    HAS_MORE_FILES = "has_more_files"
    EXHAUSTED = "exhausted"


class FileFeeder:
    """
    Pops one input path per tick and runs its extractor against the queue.

    When the input list is empty the feeder closes the queue and reports
    itself exhausted; the owner stops its tick at that point.
    """

    def __init__(
        self,
        paths: Iterable[str],
        queue: JobQueue,
        forced_format: Optional[DocumentFormat] = None,
        stats: Optional[RunStats] = None
    ):
        """
        Initialize feeder.

        Args:
            paths: Input document paths, consumed in order
            queue: Queue receiving extracted jobs
            forced_format: Format override applied to every path
            stats: Run statistics to update
        """
        self._paths: Deque[str] = deque(paths)
        self.queue = queue
        self.forced_format = forced_format
        self.stats = stats or RunStats()
        self.state = FeederState.HAS_MORE_FILES if self._paths else FeederState.EXHAUSTED
        self.logger = get_business_logger('feeder')

    @property
    def pending(self) -> int:
        return len(self._paths)

    def tick(self) -> FeederState:
        """Process at most one input path; close the queue once none are left."""
        if self.state is FeederState.EXHAUSTED or not self._paths:
            self._finish()
            return self.state

        path = self._paths.popleft()
        self.feed(path)

        if not self._paths:
            self._finish()
        return self.state

    def feed(self, path: str) -> int:
        """
        Extract jobs from one document.

        Unrecognized and unreadable documents are logged and contribute
        no jobs.

        Returns:
            Number of jobs emitted for the document
        """
        document_format = select_format(path, self.forced_format)
        if document_format is None:
            self.logger.warning(f"Skipping {path}: unrecognized file type")
            self.stats.documents_skipped += 1
            return 0

        try:
            count = extract_file(path, document_format, self.queue)
        except DeadLinkMonitorError as e:
            self.logger.warning(f"Skipping {path}: {e.message}")
            self.stats.documents_skipped += 1
            return 0

        self.stats.record_document(path, count)
        self.stats.jobs_discovered += count
        self.logger.debug(f"Extracted {count} links from {path} ({document_format.value})")
        return count

    def _finish(self) -> None:
        if self.state is not FeederState.EXHAUSTED or self.queue.is_open:
            self.queue.close()
            self.state = FeederState.EXHAUSTED
            self.logger.debug("Input exhausted, queue closed")
