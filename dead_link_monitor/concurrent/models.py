"""
Data models for the link checking pipeline.
"""

from dataclasses import FrozenInstanceError, dataclass, field
from typing import Dict, Optional
from datetime import datetime
from enum import Enum
from urllib.parse import urlsplit

from dead_link_monitor.utils.errors import ValidationError


HTTP_SCHEMES = frozenset({"http", "https"})


def is_absolute_url(url: str) -> bool:
    """Return True if ``url`` has an HTTP(S) scheme and a host."""
    try:
        parts = urlsplit(url)
        # Accessing hostname validates bracketed IPv6 hosts
        hostname = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in HTTP_SCHEMES and bool(hostname)


class JobStatus(Enum):
    """Job lifecycle status."""
    PENDING = "pending"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"


@dataclass
class Job:
    """One (document, URL) probe request."""
    document: str
    url: str
    discovered_at: datetime = field(default_factory=datetime.now)
    dispatched_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Only the timestamps change after construction
    _IDENTITY_FIELDS = ("document", "url")

    def __setattr__(self, name, value):
        if name in self._IDENTITY_FIELDS and name in self.__dict__:
            raise FrozenInstanceError(f"cannot assign to field '{name}'")
        super().__setattr__(name, value)

    def __post_init__(self):
        if not is_absolute_url(self.url):
            raise ValidationError(
                "Job URL must be absolute",
                {"document": self.document, "url": self.url}
            )

    @property
    def status(self) -> JobStatus:
        if self.completed_at is not None:
            return JobStatus.COMPLETED
        if self.dispatched_at is not None:
            return JobStatus.DISPATCHED
        return JobStatus.PENDING

    def mark_dispatched(self, when: Optional[datetime] = None) -> None:
        """Stamp the moment the job is handed to the transport."""
        if self.dispatched_at is not None:
            raise ValidationError("Job already dispatched", {"url": self.url})
        self.dispatched_at = max(when or datetime.now(), self.discovered_at)

    def mark_completed(self, when: Optional[datetime] = None) -> None:
        """Stamp the moment the fetch resolved, successfully or not."""
        if self.dispatched_at is None:
            raise ValidationError("Job completed before dispatch", {"url": self.url})
        if self.completed_at is not None:
            raise ValidationError("Job already completed", {"url": self.url})
        self.completed_at = max(when or datetime.now(), self.dispatched_at)

    def get_fetch_time(self) -> Optional[float]:
        """Get dispatch-to-completion time in seconds."""
        if self.dispatched_at and self.completed_at:
            return (self.completed_at - self.dispatched_at).total_seconds()
        return None


class ConnectionBudget:
    """Admission control for in-flight fetches."""

    def __init__(self, max_connections: int = 4):
        if max_connections < 1:
            raise ValidationError(
                "max_connections must be at least 1",
                {"max_connections": max_connections}
            )
        self.max_connections = max_connections
        self.active = 0
        self.peak = 0

    @property
    def available(self) -> int:
        return self.max_connections - self.active

    def acquire(self) -> None:
        if self.active >= self.max_connections:
            raise ValidationError(
                "Connection budget exhausted",
                {"active": self.active, "max_connections": self.max_connections}
            )
        self.active += 1
        self.peak = max(self.peak, self.active)

    def release(self) -> None:
        if self.active <= 0:
            raise ValidationError("Connection budget released below zero")
        self.active -= 1

    def __repr__(self) -> str:
        return f"ConnectionBudget(active={self.active}, max={self.max_connections})"


@dataclass
class RunStats:
    """Counters collected over one pipeline run."""
    documents_processed: int = 0
    documents_skipped: int = 0
    jobs_discovered: int = 0
    jobs_dispatched: int = 0
    jobs_completed: int = 0
    transport_failures: int = 0
    jobs_per_document: Dict[str, int] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def record_document(self, document: str, job_count: int) -> None:
        self.documents_processed += 1
        self.jobs_per_document[document] = self.jobs_per_document.get(document, 0) + job_count

    def get_elapsed_time(self) -> Optional[float]:
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None
