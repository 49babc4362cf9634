"""
Result models for probed URLs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime


# Code recorded when no HTTP status was received at all
FETCH_FAILED = -1

SUCCESS_CODE = 200


def is_redirect(code: int) -> bool:
    return 300 <= code < 400


@dataclass
class FetchOutcome:
    """What the dispatcher learned about one dispatched job."""
    code: int
    location: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "FetchOutcome":
        return cls(code=FETCH_FAILED, error=error)


@dataclass
class ResultEntry:
    """Aggregated outcome for one distinct URL."""
    url: str
    code: int
    location: Optional[str] = None
    files: List[str] = field(default_factory=list)
    discovered_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.code != SUCCESS_CODE

    @property
    def fetch_seconds(self) -> float:
        if self.dispatched_at and self.completed_at:
            return (self.completed_at - self.dispatched_at).total_seconds()
        return 0.0

    def add_file(self, document: str) -> None:
        if document not in self.files:
            self.files.append(document)

    def to_export_dict(self) -> Dict[str, Any]:
        """Project to the structured export shape."""
        record: Dict[str, Any] = {
            "files": list(self.files),
            "code": self.code,
        }
        if self.location is not None:
            record["location"] = self.location
        return record
