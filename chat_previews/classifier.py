from __future__ import annotations

from io import BytesIO
from typing import Literal

from PIL import Image, UnidentifiedImageError

from .model import FetchResult

import logging
logger = logging.getLogger(__name__)

ContentKind = Literal["image", "document"]

_HTML_TYPES = ("text/html", "application/xhtml")
_UNDECLARED = {"", "application/octet-stream", "binary/octet-stream"}
_HTML_PREFIXES = (b"<!doctype html", b"<html", b"<head", b"<title", b"<meta", b"<!--")
_SNIFF_BYTES = 512


def _is_media(content_type: str) -> bool:
    return content_type.startswith("image/")


def _is_html(content_type: str) -> bool:
    return content_type.startswith(_HTML_TYPES)


def _looks_like_html(body: bytes) -> bool:
    head = body[:_SNIFF_BYTES].lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    return head.startswith(_HTML_PREFIXES)


def _looks_like_image(body: bytes) -> bool:
    if not body:
        return False
    try:
        with Image.open(BytesIO(body)) as im:
            return bool(im.format)
    except (UnidentifiedImageError, OSError, ValueError):
        return False


def classify(result: FetchResult) -> ContentKind:
    """
    Decide whether a fetched resource is an image or a markup document.

    :param result: Successful fetch.
    :returns: ``"image"`` for ``image/*`` (declared or sniffed), otherwise
        ``"document"``. Unsupported types are documents with no metadata.
    """
    ctype = result.content_type
    if _is_media(ctype):
        return "image"
    if _is_html(ctype):
        return "document"

    if ctype in _UNDECLARED:
        if _looks_like_html(result.body):
            return "document"
        if _looks_like_image(result.body):
            logger.debug("Sniffed image bytes at %s", result.canonical_url)
            return "image"

    return "document"


def is_markup(result: FetchResult) -> bool:
    """True when a document is HTML, declared or sniffed; only markup has metadata."""
    ctype = result.content_type
    if _is_html(ctype):
        return True
    return ctype in _UNDECLARED and _looks_like_html(result.body)


__all__ = ["ContentKind", "classify", "is_markup"]
