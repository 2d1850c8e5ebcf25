"""
Metadata extraction for HTML documents.

Precedence per field, first non-empty wins:

* ``head``  : ``og:title``       -> ``<title>``
* ``body``  : ``og:description`` -> ``<meta name="description">``
* ``thumb`` : ``og:image``

Parsing uses BeautifulSoup's ``html.parser``; scripts are never run. Broken
markup degrades to empty fields instead of failing the pipeline.
"""

from __future__ import annotations

from typing import Dict, Optional

from bs4 import BeautifulSoup

from .errors import UnparsableMetadata
from .model import PageMetadata

import logging
logger = logging.getLogger(__name__)

_ELLIPSIS = "…"


def _clean(value: Optional[str], max_len: int) -> str:
    """Collapse whitespace and cap ``value`` at ``max_len`` characters."""
    text = " ".join((value or "").split())
    if max_len and len(text) > max_len:
        text = text[: max_len - 1].rstrip() + _ELLIPSIS
    return text


def _meta_values(soup: BeautifulSoup) -> Dict[str, str]:
    """Map lower-cased ``property``/``name`` keys to the first non-empty ``content``."""
    values: Dict[str, str] = {}
    for tag in soup.find_all("meta"):
        content = (tag.get("content") or "").strip()
        if not content:
            continue
        for attr in ("property", "name"):
            key = (tag.get(attr) or "").strip().lower()
            if key and key not in values:
                values[key] = content
    return values


def _parse_document(body: bytes | str, *, charset: str | None = None) -> BeautifulSoup:
    if isinstance(body, bytes):
        return BeautifulSoup(body, "html.parser", from_encoding=charset)
    return BeautifulSoup(body, "html.parser")


def extract_metadata(
    body: bytes | str,
    url: str = "",
    *,
    charset: str | None = None,
    max_len: int = 300,
) -> PageMetadata:
    """
    Pull title, description and thumbnail candidate out of a document.

    :param body: Raw (possibly truncated) document.
    :param url: Canonical page URL, used for log context only.
    :param charset: Declared charset from the response headers, if any.
    :param max_len: Cap applied to ``head`` and ``body``.
    :returns: :class:`PageMetadata`; fields missing from the page are ``""``.
    """
    try:
        soup = _parse_document(body, charset=charset)
    except Exception as e:
        err = UnparsableMetadata(f"{url}: {e}")
        logger.warning("Could not parse document: %s", err)
        return PageMetadata()

    meta = _meta_values(soup)

    title = meta.get("og:title")
    if not title:
        title_tag = soup.find("title")
        title = title_tag.get_text() if title_tag else ""

    description = meta.get("og:description") or meta.get("description", "")
    thumb = meta.get("og:image", "")

    return PageMetadata(
        head=_clean(title, max_len),
        body=_clean(description, max_len),
        thumb=thumb.strip(),
    )


__all__ = ["extract_metadata"]
