"""
Link extraction from Markdown documents.

Lines are scanned one at a time, so a link split across two lines is not seen.
"""

import re
from typing import IO, Iterable, Iterator

from dead_link_monitor.concurrent.models import Job, is_absolute_url
from dead_link_monitor.concurrent.job_queue import JobQueue


# [text](url) where url starts with "http" and may hold one level of balanced
# parentheses; an optional title after the URL is ignored
INLINE_LINK_PATTERN = re.compile(r'\[[^\]]*\]\((http(?:[^()\s]|\([^()\s]*\))*)', re.IGNORECASE)

HTTP_PREFIXES = ("http://", "https://")


def iter_line_links(line: str) -> Iterator[str]:
    """Yield HTTP(S) inline link targets on one line, in order."""
    for match in INLINE_LINK_PATTERN.finditer(line):
        url = match.group(1)
        if url.lower().startswith(HTTP_PREFIXES) and is_absolute_url(url):
            yield url


def iter_links(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        yield from iter_line_links(line)


def extract_markdown(document: str, handle: IO[str], queue: JobQueue) -> int:
    """
    Emit one job per inline HTTP(S) link found in a Markdown document.

    Args:
        document: Path identifying the document
        handle: Text file handle, consumed line by line
        queue: Queue receiving the jobs

    Returns:
        Number of emitted jobs
    """
    count = 0
    for url in iter_links(handle):
        queue.emit(Job(document=document, url=url))
        count += 1
    return count
