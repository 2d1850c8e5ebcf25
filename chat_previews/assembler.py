from __future__ import annotations

from typing import Any, Optional

from .events import EventChannel
from .model import (
    UNTITLED_PAGE,
    ChatMessage,
    FetchResult,
    LinkCandidate,
    PageMetadata,
    Preview,
    PreviewEvent,
)

import logging
logger = logging.getLogger(__name__)


class PreviewAssembler:
    """Builds finished previews and publishes them to the message and channel."""

    def __init__(self, events: EventChannel) -> None:
        self.events = events

    @staticmethod
    def build_image(result: FetchResult, stored_url: Optional[str] = None) -> Preview:
        link = result.canonical_url
        return Preview(type="image", link=link, thumb=stored_url or link)

    @staticmethod
    def build_link(result: FetchResult, metadata: PageMetadata, thumb: str = "") -> Preview:
        return Preview(
            type="link",
            link=result.canonical_url,
            head=metadata.head or UNTITLED_PAGE,
            body=metadata.body,
            thumb=thumb,
        )

    async def publish(
        self,
        message: ChatMessage,
        candidate: LinkCandidate,
        preview: Preview,
        channel_id: Any = None,
    ) -> bool:
        """
        Attach ``preview`` to ``message`` and emit ``msg:preview``.

        :returns: ``True`` if the preview was attached and emitted. Closed
            messages and already-previewed occurrences emit nothing.
        """
        if not await message.add_preview(candidate.position, preview):
            logger.debug(
                "Discarding preview for %s on message %s", candidate.url, message.id
            )
            return False

        await self.events.emit(
            PreviewEvent(
                message_id=message.id,
                preview=preview,
                channel_id=channel_id,
                message=message,
            )
        )
        return True


__all__ = ["PreviewAssembler"]
