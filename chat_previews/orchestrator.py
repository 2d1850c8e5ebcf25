"""
LinkPreviewer Pipeline
======================
1. Input : :class:`ChatMessage` (+ optional channel id for addressing).
2. ``extract_links(message.text)`` -> one asyncio task per occurrence.
3. Per task
   a. Fetch the URL (bounded by the fetcher's concurrency slots).
   b. ``classify`` -> image | document.
   c. image    : ``Preview(type="image", thumb=link)``
      document : ``extract_metadata`` (HTML only) + ``ThumbnailValidator.validate``
   d. Append to the message and emit ``msg:preview``.
4. ``process`` returns immediately; use ``wait`` to settle a message.

NOTE: A pipeline that cannot fetch its primary URL ends silently. No pipeline
error reaches the caller or a sibling pipeline.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Set, Tuple

from .assembler import PreviewAssembler
from .classifier import classify, is_markup
from .config import Prefetch
from .events import EventChannel
from .extractor import extract_links
from .fetcher import ResourceFetcher
from .metadata import extract_metadata
from .model import ChatMessage, LinkCandidate, PageMetadata, Preview
from .storage import MediaStore
from .thumbnail import ThumbnailValidator, store_media

import logging
logger = logging.getLogger(__name__)


class LinkPreviewer:
    """Runs preview pipelines for chat messages."""

    def __init__(
        self,
        settings: Prefetch,
        events: EventChannel | None = None,
        *,
        store: MediaStore | None = None,
        fetcher: ResourceFetcher | None = None,
    ) -> None:
        self.settings = settings
        self.events = events or EventChannel()
        self.store = store
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ResourceFetcher(settings)
        self.thumbnails = ThumbnailValidator(self.fetcher, settings, store)
        self.assembler = PreviewAssembler(self.events)
        self._inflight: Dict[int, Tuple[ChatMessage, Set[asyncio.Task]]] = {}

    async def __aenter__(self) -> "LinkPreviewer":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ---------- public contract -------------------------------------- #

    def process(self, message: ChatMessage, channel_id: Any = None) -> List[asyncio.Task]:
        """
        Start one preview pipeline per link in ``message``.

        Must be called from a running event loop. Returns the started tasks
        without awaiting them.
        """
        if not self.settings.ENABLED or message.closed:
            return []

        candidates = extract_links(message.text, max_links=self.settings.MAX_LINKS)
        if not candidates:
            return []

        logger.info("Previewing %d link(s) in message %s", len(candidates), message.id)

        tasks = []
        for candidate in candidates:
            task = asyncio.create_task(
                self._run(message, candidate, channel_id),
                name=f"preview:{message.id}:{candidate.position}",
            )
            self._track(message, task)
            tasks.append(task)
        return tasks

    async def wait(self, message: ChatMessage) -> List[Preview]:
        """Wait for every pipeline of ``message`` to finish; return its previews."""
        entry = self._inflight.get(id(message))
        if entry:
            await asyncio.gather(*entry[1], return_exceptions=True)
        return list(message.previews)

    async def cancel(self, message: ChatMessage) -> None:
        """Tear down ``message``'s in-flight pipelines; nothing is emitted afterwards."""
        message.close()
        entry = self._inflight.pop(id(message), None)
        if not entry:
            return
        tasks = entry[1]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def close(self) -> None:
        for message, _ in list(self._inflight.values()):
            await self.cancel(message)
        if self._owns_fetcher:
            await self.fetcher.close()

    # ---------- pipeline --------------------------------------------- #

    def _track(self, message: ChatMessage, task: asyncio.Task) -> None:
        key = id(message)
        _, tasks = self._inflight.setdefault(key, (message, set()))
        tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            tasks.discard(t)
            if not tasks and self._inflight.get(key, (None, None))[1] is tasks:
                del self._inflight[key]

        task.add_done_callback(_done)

    async def _run(
        self, message: ChatMessage, candidate: LinkCandidate, channel_id: Any
    ) -> Optional[Preview]:
        try:
            preview = await self._build(candidate)
            if preview is None:
                return None
            if await self.assembler.publish(message, candidate, preview, channel_id):
                return preview
            return None
        except Exception:
            logger.exception("Preview pipeline failed for %s", candidate.url)
            return None

    async def _build(self, candidate: LinkCandidate) -> Optional[Preview]:
        result = await self.fetcher.fetch(candidate.url)
        if not result.ok:
            logger.info("No preview for %s: %s", candidate.url, result.error)
            return None

        if classify(result) == "image":
            stored = await store_media(self.store, self.settings, result)
            return PreviewAssembler.build_image(result, stored)

        if is_markup(result):
            metadata = extract_metadata(
                result.body,
                result.canonical_url,
                charset=result.charset,
                max_len=self.settings.MAX_FIELD_LEN,
            )
        else:
            # plain text, json, pdf ...: a link preview with nothing extracted
            metadata = PageMetadata()
        thumb = await self.thumbnails.validate(metadata.thumb, result.canonical_url)
        return PreviewAssembler.build_link(result, metadata, thumb)


__all__ = ["LinkPreviewer"]
