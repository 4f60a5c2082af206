"""Best-effort background fetching of dish images."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass

from .crawler import AsyncCrawler

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DishImage:
    content: bytes
    content_type: str


class ImageEnricher:
    """Fetch dish images in fire-and-forget tasks keyed by dish name.

    Failures are logged at debug level and otherwise ignored; nothing here
    feeds back into menu aggregation. At most *max_images* images are kept;
    the least recently stored ones are evicted first.
    """

    def __init__(self, crawler: AsyncCrawler, *, max_images: int = 256) -> None:
        self._crawler = crawler
        self._max_images = max_images
        self._images: OrderedDict[str, DishImage] = OrderedDict()
        self._pending: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

    def submit(self, name: str, url: str) -> None:
        """Schedule a fetch of *url* for *name* unless one is known or running."""

        if name in self._images or name in self._pending:
            return
        if len(self._pending) >= self._max_images:
            return
        self._pending.add(name)
        task = asyncio.create_task(self._fetch(name, url))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def get(self, name: str) -> DishImage | None:
        return self._images.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._images

    def __len__(self) -> int:
        return len(self._images)

    async def wait(self) -> None:
        """Wait for every scheduled fetch to finish."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _fetch(self, name: str, url: str) -> None:
        try:
            result = await self._crawler.get_bytes(url)
        except Exception as exc:
            logger.debug("Image fetch for %r raised: %s", name, exc)
            return
        finally:
            self._pending.discard(name)

        if not result.ok or not result.content:
            logger.debug("No image for %r from %s: %s", name, url, result.error or result.status_code)
            return
        content_type = (result.content_type or "").split(";")[0].strip()
        if content_type and not content_type.startswith("image/"):
            logger.debug("Ignoring non-image response for %r: %s", name, content_type)
            return
        self._images[name] = DishImage(
            content=result.content,
            content_type=content_type or "application/octet-stream",
        )
        while len(self._images) > self._max_images:
            evicted, _ = self._images.popitem(last=False)
            logger.debug("Evicted image for %r", evicted)
