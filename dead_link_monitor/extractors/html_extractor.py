"""
Link extraction from HTML documents.
"""

from typing import IO, Iterator, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from dead_link_monitor.utils.logging import get_business_logger
from dead_link_monitor.concurrent.models import Job, is_absolute_url
from dead_link_monitor.concurrent.job_queue import JobQueue


logger = get_business_logger('feeder')


def _attribute(tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    value = value.strip()
    return value or None


def find_base_url(soup: BeautifulSoup) -> Optional[str]:
    """
    Determine the URL relative links resolve against.

    ``<base href>`` wins, then ``<meta property="og:url">``. Candidates that
    are not absolute HTTP(S) URLs are ignored.
    """
    for tag in soup.find_all("base", href=True):
        href = _attribute(tag, "href")
        if href and is_absolute_url(href):
            return href

    for tag in soup.find_all("meta", attrs={"property": "og:url"}):
        content = _attribute(tag, "content")
        if content and is_absolute_url(content):
            return content

    return None


def iter_links(markup: Union[str, bytes]) -> Iterator[str]:
    """Yield every anchor href as an absolute URL, in document order."""
    soup = BeautifulSoup(markup, "html.parser")
    base = find_base_url(soup)

    for anchor in soup.find_all("a", href=True):
        href = _attribute(anchor, "href")
        if not href:
            continue

        url = href
        if not is_absolute_url(url):
            if base is None:
                logger.debug(f"Dropping relative link without base: {href}")
                continue
            try:
                url = urljoin(base, href)
            except ValueError:
                logger.debug(f"Dropping malformed link: {href}")
                continue

        if not is_absolute_url(url):
            logger.debug(f"Dropping non-HTTP link: {href}")
            continue

        yield url


def extract_html(document: str, handle: IO[bytes], queue: JobQueue) -> int:
    """
    Emit one job per absolute anchor URL found in an HTML document.

    Args:
        document: Path identifying the document
        handle: Binary file handle; the parser sniffs the encoding
        queue: Queue receiving the jobs

    Returns:
        Number of emitted jobs
    """
    count = 0
    for url in iter_links(handle.read()):
        queue.emit(Job(document=document, url=url))
        count += 1
    return count
