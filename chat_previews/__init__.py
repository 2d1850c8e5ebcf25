from __future__ import annotations

from .config import Prefetch
from .errors import (
    PreviewError,
    FetchError,
    FetchTimeout,
    FetchNetworkError,
    FetchHttpError,
    ResourceTooLarge,
    DisallowedScheme,
    UnparsableMetadata,
    InvalidThumbnailUrl,
    ThumbnailUnreachable,
)
from .events import EventChannel
from .extractor import extract_links
from .model import (
    PREVIEW_EVENT,
    UNTITLED_PAGE,
    ChatMessage,
    FetchOutcome,
    FetchResult,
    LinkCandidate,
    PageMetadata,
    Preview,
    PreviewEvent,
)
from .orchestrator import LinkPreviewer
from .storage import MediaStore

__all__ = [
    "Prefetch",
    "PreviewError",
    "FetchError",
    "FetchTimeout",
    "FetchNetworkError",
    "FetchHttpError",
    "ResourceTooLarge",
    "DisallowedScheme",
    "UnparsableMetadata",
    "InvalidThumbnailUrl",
    "ThumbnailUnreachable",
    "EventChannel",
    "extract_links",
    "PREVIEW_EVENT",
    "UNTITLED_PAGE",
    "ChatMessage",
    "FetchOutcome",
    "FetchResult",
    "LinkCandidate",
    "PageMetadata",
    "Preview",
    "PreviewEvent",
    "LinkPreviewer",
    "MediaStore",
]
