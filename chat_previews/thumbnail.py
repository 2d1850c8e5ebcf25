"""
ThumbnailValidator
==================
1. Input : ``og:image`` candidate + canonical page URL.
2. Reject anything that is not an absolute ``http(s)`` URL.
3. Fetch the candidate; reject on any non-``ok`` outcome.
4. Reject if the bytes are not an image.
5. Optionally hand the bytes to the prefetch store and use its URL.

NOTE: A rejected candidate means "no thumbnail", never a failed preview.
"""

from __future__ import annotations

from typing import Optional

from .classifier import classify
from .config import Prefetch
from .errors import InvalidThumbnailUrl, ThumbnailUnreachable
from .extractor import is_absolute_url
from .fetcher import ResourceFetcher
from .model import FetchResult
from .storage import MediaStore

import logging
logger = logging.getLogger(__name__)


async def store_media(
    store: Optional[MediaStore], settings: Prefetch, result: FetchResult
) -> Optional[str]:
    """
    Push already-fetched bytes to the prefetch store.

    :returns: The stored URL, or ``None`` when storage is off or fails.
    """
    if store is None or not settings.STORAGE or not result.body:
        return None
    try:
        return await store.store(result.body, result.content_type, result.canonical_url)
    except Exception:
        logger.exception("Prefetch store failed for %s", result.canonical_url)
        return None


class ThumbnailValidator:
    def __init__(
        self,
        fetcher: ResourceFetcher,
        settings: Prefetch,
        store: Optional[MediaStore] = None,
    ) -> None:
        self.fetcher = fetcher
        self.settings = settings
        self.store = store

    async def validate(self, candidate: str, page_url: str) -> str:
        """
        Return a trustworthy thumbnail URL for ``candidate`` or ``""``.

        :param candidate: Raw ``og:image`` value from the page.
        :param page_url: Canonical URL of the page, for log context.
        """
        if not candidate:
            return ""

        if not is_absolute_url(candidate):
            logger.info(
                "Dropping thumbnail for %s: %s", page_url, InvalidThumbnailUrl(candidate)
            )
            return ""

        result = await self.fetcher.fetch(candidate)
        if not result.ok:
            logger.info(
                "Dropping thumbnail for %s: %s",
                page_url,
                ThumbnailUnreachable(f"{candidate} ({result.outcome.value})"),
            )
            return ""

        if classify(result) != "image":
            logger.info(
                "Dropping thumbnail for %s: %s is %r, not an image",
                page_url,
                candidate,
                result.content_type,
            )
            return ""

        stored = await store_media(self.store, self.settings, result)
        return stored or candidate


__all__ = ["ThumbnailValidator", "store_media"]
