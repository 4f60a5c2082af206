"""HTTP fetching utilities for the mensa menu aggregator."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Mapping

import httpx

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT_HEADER = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
)
DEFAULT_USER_AGENT = "MensaMenu/0.1 (+https://example.com/contact)"


@dataclass(slots=True)
class FetchResult:
    """Describes the outcome of a single request."""

    url: str
    final_url: str | None
    status_code: int | None
    content_type: str | None
    text: str | None
    error: str | None
    content: bytes | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and (self.status_code or 0) < 400


class AsyncCrawler:
    """Async HTTP client with a concurrency limit and one attempt per request.

    Transport failures never raise: they are reported through
    :attr:`FetchResult.error` so one failing request cannot disturb others.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        concurrency: int = 8,
        connect_timeout: float = 10.0,
        read_timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")

        self._user_agent = user_agent

        timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=read_timeout,
            pool=connect_timeout,
        )
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent,
                "Accept": DEFAULT_ACCEPT_HEADER,
                "Accept-Language": "de-DE,de;q=0.9,en;q=0.8",
            },
            timeout=timeout,
            http2=True,
            follow_redirects=True,
            transport=transport,
        )

        self._semaphore = asyncio.Semaphore(concurrency)

    async def __aenter__(self) -> "AsyncCrawler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(self, url: str, params: Mapping[str, str] | None = None) -> FetchResult:
        """POST to *url* and decode the response as text."""

        return await self._request("POST", url, params=params, want_text=True)

    async def get_bytes(self, url: str) -> FetchResult:
        """GET *url* and keep the raw response body."""

        return await self._request("GET", url, params=None, want_text=False)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None,
        want_text: bool,
    ) -> FetchResult:
        original_url = url
        url = _sanitize_url(url)
        if url != original_url:
            logger.debug("Sanitized URL from %r to %r", original_url, url)

        async with self._semaphore:
            try:
                response = await self._client.request(method, url, params=params)
            except httpx.RequestError as exc:
                logger.debug("Request error for %s: %s", url, exc)
                return FetchResult(
                    url=url,
                    final_url=None,
                    status_code=None,
                    content_type=None,
                    text=None,
                    error=str(exc) or exc.__class__.__name__,
                )

        return self._build_result(url, response, want_text=want_text)

    def _build_result(
        self, url: str, response: httpx.Response, *, want_text: bool
    ) -> FetchResult:
        content_type = response.headers.get("content-type")
        text: str | None = None
        content: bytes | None = None

        if want_text:
            try:
                if content_type is None or any(
                    token in content_type.lower()
                    for token in ("text", "html", "xml", "json")
                ):
                    text = response.text
            except UnicodeDecodeError:  # pragma: no cover - extremely rare
                logger.debug("Failed to decode response text for %s", url)
                text = None
        else:
            content = response.content

        return FetchResult(
            url=url,
            final_url=str(response.url) if response.url is not None else url,
            status_code=response.status_code,
            content_type=content_type,
            text=text,
            error=None,
            content=content,
        )


def _sanitize_url(url: str) -> str:
    """Remove control characters and encode literal spaces in URLs."""
    if not url:
        return url
    cleaned = re.sub(r"[\x00-\x1f\x7f]", "", url).strip()
    if " " in cleaned:
        cleaned = cleaned.replace(" ", "%20")
    return cleaned
