from __future__ import annotations

from typing import Dict, Optional, Protocol
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


class FetchError(RuntimeError):
    """A page could not be fetched: transport failure or non-success status."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class Fetcher(Protocol):
    async def fetch(self, url: str) -> str:
        """Return the body of ``url`` or raise FetchError."""
        ...


def html_headers(accept_language: Optional[str] = None, user_agent: Optional[str] = None) -> Dict[str, str]:
    headers = {"Accept": HTML_ACCEPT}
    if accept_language:
        headers["Accept-Language"] = accept_language
    if user_agent:
        headers["User-Agent"] = user_agent
    return headers


async def fetch_text(session: ClientSession, url: str, *, headers: Optional[Dict[str, str]] = None) -> str:
    """
    GET a page and return its body text.
    No retries and no timeout: the caller decides when to try again.
    """
    try:
        async with session.get(url, headers=headers, timeout=ClientTimeout(total=None)) as resp:
            if resp.status < 200 or resp.status >= 300:
                raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
            return await resp.text(errors="replace")
    except aiohttp.ClientError as exc:
        raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc


class PageFetcher:
    """
    Fetches result pages through one shared session.
    The session's cookie jar carries the view's credentials between requests.
    """

    def __init__(
        self,
        session: ClientSession,
        *,
        accept_language: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self.session = session
        self.headers = html_headers(accept_language, user_agent)

    async def fetch(self, url: str) -> str:
        logger.debug("GET %s", url)
        return await fetch_text(self.session, url, headers=self.headers)


def create_session(cookies: Optional[Dict[str, str]] = None) -> ClientSession:
    """
    Create the aiohttp session shared by a view's fetches.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=1)  # loads are single-flight anyway
    return aiohttp.ClientSession(connector=connector, cookies=cookies)
