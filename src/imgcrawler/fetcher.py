"""
HTTP fetching of pages and image payloads.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

import requests
from bs4 import BeautifulSoup, ParserRejectedMarkup

from imgcrawler.config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES: frozenset[str] = frozenset(("text/html", "application/xhtml+xml"))


@dataclass(slots=True)
class FetchResult:
    """Outcome of a single GET request."""
    url: str
    final_url: Optional[str] = None
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    document: Optional[BeautifulSoup] = None
    content: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_html(content_type: Optional[str]) -> bool:
    """Missing content types are treated as HTML."""
    if not content_type:
        return True
    return content_type.split(";", 1)[0].strip().lower() in HTML_CONTENT_TYPES


class PageFetcher:
    """
    Issues GET requests with an optional User-Agent, following redirects.

    Failures never raise: network errors and HTTP error statuses come back as
    ``FetchResult.error``. Each worker thread gets its own requests.Session.
    """

    def __init__(self, user_agent: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            if self.user_agent:
                session.headers["User-Agent"] = self.user_agent
            with self._sessions_lock:
                self._sessions.append(session)
            self._local.session = session
        return session

    def _get(self, url: str) -> tuple[FetchResult, Optional[requests.Response]]:
        result = FetchResult(url=url)
        try:
            resp = self._session().get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            result.error = f"{type(e).__name__}: {e}"
            return result, None

        result.final_url = resp.url or url
        result.status_code = resp.status_code
        result.content_type = resp.headers.get("content-type")
        if resp.status_code >= 400:
            result.error = f"HTTP {resp.status_code}"
            return result, None
        return result, resp

    def fetch_page(self, url: str) -> FetchResult:
        """Fetch a page and parse it; non-HTML responses come back without a document."""
        result, resp = self._get(url)
        if resp is None:
            return result
        if not is_html(result.content_type):
            logger.debug("Not HTML (%s): %s", result.content_type, url)
            return result
        try:
            result.document = BeautifulSoup(resp.text, "lxml")
        except ParserRejectedMarkup as e:
            result.error = f"parse error: {e}"
        return result

    def fetch_bytes(self, url: str) -> FetchResult:
        """Fetch a raw payload together with its declared content type."""
        result, resp = self._get(url)
        if resp is not None:
            result.content = resp.content
        return result

    def close(self) -> None:
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
