import re
from typing import List, Optional
from urllib.parse import urlparse

from .model import LinkCandidate

import logging
logger = logging.getLogger(__name__)

# --------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------- #

_URL_RE = re.compile(r"https?://[^\s<>\"]+", re.IGNORECASE)

# bold, colour (with optional fg[,bg]), hex colour, monospace, reset,
# reverse, italic, strikethrough, underline
_FORMATTING_RE = re.compile(
    r"\x03(?:\d{1,2}(?:,\d{1,2})?)?"
    r"|\x04(?:[0-9a-fA-F]{6}(?:,[0-9a-fA-F]{6})?)?"
    r"|[\x02\x0f\x11\x16\x1d\x1e\x1f]"
)

_TRAILING_PUNCT = ".,;:!?'\""
_BRACKETS = {")": "(", "]": "["}

_ALLOWED_SCHEMES = {"http", "https"}


def strip_formatting(text: str) -> str:
    """Remove chat formatting control codes from ``text``."""
    return _FORMATTING_RE.sub("", text)


def _trim(url: str) -> str:
    """Drop sentence punctuation and unbalanced closing brackets from the tail."""
    while url:
        tail = url[-1]
        if tail in _TRAILING_PUNCT:
            url = url[:-1]
        elif tail in _BRACKETS and url.count(tail) > url.count(_BRACKETS[tail]):
            url = url[:-1]
        else:
            break
    return url


def is_absolute_url(url: str) -> bool:
    """True for ``http(s)://host[...]`` URLs with a usable host and port."""
    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError for junk ports
    except ValueError:
        return False
    return parsed.scheme.lower() in _ALLOWED_SCHEMES and bool(parsed.hostname)


# --------------------------------------------------------------------- #
#  Main entry
# --------------------------------------------------------------------- #

def extract_links(text: Optional[str], *, max_links: int = 0) -> List[LinkCandidate]:
    """
    Find previewable URLs in message text.

    :param text: Raw message text; ``None`` and ``""`` yield no links.
    :param max_links: Keep at most this many candidates (``0`` = no cap).
    :returns: Candidates in order of appearance. Repeated URLs are kept, one
        candidate per occurrence.

    .. code-block:: python

        extract_links("see http://a.example/x, and http://a.example/x")
        # [LinkCandidate("http://a.example/x", 0), LinkCandidate("http://a.example/x", 1)]
    """
    if not text:
        return []

    candidates: List[LinkCandidate] = []
    for match in _URL_RE.finditer(strip_formatting(text)):
        url = _trim(match.group(0))
        if not is_absolute_url(url):
            logger.debug("Skipping malformed URL %r", match.group(0))
            continue
        candidates.append(LinkCandidate(url=url, position=len(candidates)))
        if max_links and len(candidates) >= max_links:
            break

    return candidates


__all__ = ["extract_links", "is_absolute_url", "strip_formatting"]
