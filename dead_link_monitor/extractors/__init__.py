"""
Link extractors for the supported document formats.

Extractors are plain functions selected from a table keyed by
``DocumentFormat``; each one reads an open file handle and emits jobs.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, Callable, Dict, Optional

from dead_link_monitor.utils.errors import ExtractionError
from dead_link_monitor.concurrent.job_queue import JobQueue
from .html_extractor import extract_html, find_base_url
from .markdown_extractor import extract_markdown


class DocumentFormat(Enum):
    """Document formats with a link extractor."""
    HTML = "html"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class ExtractorEntry:
    """How to open and scan one document format."""
    format: DocumentFormat
    extract: Callable[[str, IO, JobQueue], int]
    binary: bool


EXTRACTORS: Dict[DocumentFormat, ExtractorEntry] = {
    DocumentFormat.HTML: ExtractorEntry(DocumentFormat.HTML, extract_html, binary=True),
    DocumentFormat.MARKDOWN: ExtractorEntry(DocumentFormat.MARKDOWN, extract_markdown, binary=False),
}

EXTENSION_FORMATS: Dict[str, DocumentFormat] = {
    ".md": DocumentFormat.MARKDOWN,
    ".markdown": DocumentFormat.MARKDOWN,
    ".html": DocumentFormat.HTML,
    ".htm": DocumentFormat.HTML,
}


def select_format(path: str, forced: Optional[DocumentFormat] = None) -> Optional[DocumentFormat]:
    """
    Pick the format for a path.

    A forced format (from --html / --markdown) overrides the extension.
    Returns None for unrecognized extensions.
    """
    if forced is not None:
        return forced
    return EXTENSION_FORMATS.get(Path(path).suffix.lower())


def extract_file(path: str, document_format: DocumentFormat, queue: JobQueue) -> int:
    """
    Open ``path`` and run the extractor for ``document_format`` on it.

    Returns:
        Number of emitted jobs

    Raises:
        ExtractionError: If the file cannot be opened
    """
    entry = EXTRACTORS[document_format]
    try:
        if entry.binary:
            with open(path, "rb") as handle:
                return entry.extract(path, handle, queue)
        # Undecodable bytes become U+FFFD so a stray byte never aborts a file midway
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            return entry.extract(path, handle, queue)
    except OSError as e:
        raise ExtractionError(
            f"Cannot read {path}: {e}",
            {"path": path, "format": document_format.value}
        ) from e


__all__ = [
    'DocumentFormat',
    'ExtractorEntry',
    'EXTRACTORS',
    'EXTENSION_FORMATS',
    'select_format',
    'extract_file',
    'extract_html',
    'extract_markdown',
    'find_base_url',
]
