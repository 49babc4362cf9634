"""
FIFO job queue with an open/closed lifecycle.

The queue is only touched from the event loop thread, so it carries no locks.
"""

from collections import deque
from typing import Deque, Optional

from dead_link_monitor.utils.errors import QueueClosedError
from .models import Job


class JobQueue:
    """Pending jobs in discovery order."""

    def __init__(self):
        self._jobs: Deque[Job] = deque()
        self._open = True
        self._emitted = 0

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_closed(self) -> bool:
        return not self._open

    @property
    def is_exhausted(self) -> bool:
        """Closed and drained: no job will ever come out again."""
        return not self._open and not self._jobs

    @property
    def emitted(self) -> int:
        """Total number of jobs ever emitted."""
        return self._emitted

    def emit(self, job: Job) -> None:
        """
        Append a job to the tail of the queue.

        Raises:
            QueueClosedError: If the queue has been closed
        """
        if not self._open:
            raise QueueClosedError(
                "Cannot emit job: queue is closed",
                {"document": job.document, "url": job.url}
            )
        self._jobs.append(job)
        self._emitted += 1

    def next(self) -> Optional[Job]:
        """Pop the head of the queue, or None if it is empty."""
        if not self._jobs:
            return None
        return self._jobs.popleft()

    def close(self) -> None:
        """Forbid further emission. Closing twice is a no-op."""
        self._open = False

    def __len__(self) -> int:
        return len(self._jobs)

    def __bool__(self) -> bool:
        # An empty queue is still a queue
        return True

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"JobQueue({state}, pending={len(self._jobs)})"
