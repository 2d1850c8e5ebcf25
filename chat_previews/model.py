from __future__ import annotations

"""Dataclass models shared by the preview pipeline.

Preview schema (output of :meth:`Preview.to_dict`):

```
{"type": "link", "link": "https://example.com/post", "head": "<title>",
 "body": "<description>", "thumb": "https://example.com/cover.png"}
{"type": "image", "link": "https://example.com/cat.png", "head": "",
 "body": "", "thumb": "https://example.com/cat.png"}
```

A ``Preview`` is immutable and only built once every field is resolved, so a
half-filled record is never attached to a message or emitted.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from .errors import FetchError

PreviewType = Literal["link", "image"]

UNTITLED_PAGE = "Untitled page"
PREVIEW_EVENT = "msg:preview"


@dataclass(frozen=True, slots=True)
class LinkCandidate:
    """A URL found in message text and its order of appearance."""

    url: str
    position: int


class FetchOutcome(str, Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http-error"
    NETWORK_ERROR = "network-error"
    TOO_LARGE = "too-large"
    DISALLOWED = "disallowed"


@dataclass(slots=True)
class FetchResult:
    """Outcome of one GET/HEAD. Owned by the pipeline that requested it."""

    url: str
    outcome: FetchOutcome
    final_url: str = ""
    status: Optional[int] = None
    content_type: str = ""
    charset: Optional[str] = None
    body: bytes = b""
    truncated: bool = False
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.outcome is FetchOutcome.OK

    @property
    def canonical_url(self) -> str:
        return self.final_url or self.url


@dataclass(frozen=True, slots=True)
class PageMetadata:
    """Head-level values pulled from an HTML document."""

    head: str = ""
    body: str = ""
    thumb: str = ""


@dataclass(frozen=True, slots=True)
class Preview:
    """Preview record attached to a chat message."""

    type: PreviewType
    link: str
    head: str = ""
    body: str = ""
    thumb: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "link": self.link,
            "head": self.head,
            "body": self.body,
            "thumb": self.thumb,
        }


@dataclass(slots=True, eq=False)
class ChatMessage:
    """
    Engine-side view of a chat message.

    ``previews`` grows in pipeline completion order. :meth:`add_preview` is the
    only writer; it accepts at most one preview per link occurrence and nothing
    once the message is closed.
    """

    id: Any
    text: str = ""
    previews: List[Preview] = field(default_factory=list)
    closed: bool = False
    _claimed: set = field(default_factory=set, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def add_preview(self, position: int, preview: Preview) -> bool:
        """
        Append ``preview`` for the link found at ``position``.

        :returns: ``True`` when appended, ``False`` for a closed message or an
            occurrence that already has a preview.
        """
        async with self._lock:
            if self.closed or position in self._claimed:
                return False
            self._claimed.add(position)
            self.previews.append(preview)
            return True

    def close(self) -> None:
        self.closed = True


@dataclass(frozen=True, slots=True)
class PreviewEvent:
    """Payload of a ``msg:preview`` notification."""

    message_id: Any
    preview: Preview
    channel_id: Any = None
    message: Optional[ChatMessage] = field(default=None, compare=False, repr=False)

    name: str = field(default=PREVIEW_EVENT, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chan": self.channel_id,
            "id": self.message_id,
            "preview": self.preview.to_dict(),
        }


__all__ = [
    "PreviewType",
    "UNTITLED_PAGE",
    "PREVIEW_EVENT",
    "LinkCandidate",
    "FetchOutcome",
    "FetchResult",
    "PageMetadata",
    "Preview",
    "ChatMessage",
    "PreviewEvent",
]
