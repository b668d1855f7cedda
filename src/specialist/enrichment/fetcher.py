"""Fetching documentation content for enrichment."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
from bs4 import BeautifulSoup
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from specialist.templates.base import DocumentationReference

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
USER_AGENT = "specialist-enrich/0.3"


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRY_STATUS_CODES
    return isinstance(exc, httpx.RequestError)


def html_to_text(html: str) -> str:
    """Reduce an HTML page to its readable text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text("\n").splitlines())
    return "\n".join(line for line in lines if line)


class DocumentFetcher:
    """Load the content behind a documentation reference.

    URLs are fetched over HTTP; HTML is reduced to text and JSON is
    pretty-printed. Relative file paths are tried against each base
    directory in order.
    """

    def __init__(
        self,
        base_dirs: list[Path] | None = None,
        timeout: float = 30.0,
        retry_attempts: int = 2,
    ) -> None:
        self.base_dirs = base_dirs or [Path.cwd()]
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)

    def fetch(self, doc: DocumentationReference) -> str:
        """Return the text content of a documentation reference.

        Raises ValueError when the reference has no location, OSError for
        unreadable files and httpx.HTTPError for failed requests.
        """
        location = doc.location
        if not location:
            raise ValueError("documentation entry has neither url nor path")
        if is_url(location):
            return self.fetch_url(location)
        return self.read_file(location)

    def fetch_url(self, url: str) -> str:
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        return self._decode(retrying(self._get, url))

    def _get(self, url: str) -> httpx.Response:
        with httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = client.get(url)
        response.raise_for_status()
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> str:
        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type:
            return html_to_text(response.text)
        if "application/json" in content_type:
            return json.dumps(response.json(), indent=2)
        return response.text

    def read_file(self, location: str) -> str:
        path = Path(location).expanduser()
        candidates = [path] if path.is_absolute() else [base / path for base in self.base_dirs]
        for candidate in candidates:
            if candidate.is_file():
                logger.debug("Reading documentation from %s", candidate)
                text = candidate.read_text(encoding="utf-8")
                if candidate.suffix in (".html", ".htm"):
                    return html_to_text(text)
                return text
        raise FileNotFoundError(f"documentation file not found: {location}")
