"""
ResourceFetcher
===============
1. Input : absolute ``http(s)`` URL.
2. GET it with the configured timeout, redirect cap and byte cap.
3. Return a :class:`FetchResult` tagged ``ok`` / ``timeout`` /
   ``http-error`` / ``network-error`` / ``too-large`` / ``disallowed``.

Images larger than ``MAX_IMAGE_BYTES`` abort with ``too-large``. Any other
body is cut at ``MAX_DOCUMENT_BYTES`` and flagged ``truncated``; the head of an
HTML page is all the metadata extractor needs.

NOTE: Nothing but ``asyncio.CancelledError`` leaves :meth:`fetch`.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp
from aiohttp import hdrs

from .config import Prefetch
from .errors import (
    DisallowedScheme,
    FetchHttpError,
    FetchNetworkError,
    FetchTimeout,
    ResourceTooLarge,
)
from .extractor import is_absolute_url
from .model import FetchOutcome, FetchResult

import logging
logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _media_type(raw: Optional[str]) -> str:
    """``"Text/HTML; charset=utf-8"`` -> ``"text/html"``."""
    if not raw:
        return ""
    return raw.split(";", 1)[0].strip().lower()


class ResourceFetcher:
    """Bounded HTTP client shared by every pipeline of a previewer."""

    def __init__(self, settings: Prefetch, session: aiohttp.ClientSession | None = None) -> None:
        self.settings = settings
        self._session = session
        self._owns_session = session is None
        # bounds simultaneous outbound requests across all pipelines
        self._slots = asyncio.Semaphore(settings.CONCURRENCY)

    # ---------- session lifecycle ------------------------------------ #

    def _headers(self) -> dict:
        headers = {hdrs.USER_AGENT: self.settings.USER_AGENT}
        if self.settings.ACCEPT_LANGUAGE:
            headers[hdrs.ACCEPT_LANGUAGE] = self.settings.ACCEPT_LANGUAGE
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self._headers())
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "ResourceFetcher":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ---------- public contract -------------------------------------- #

    async def fetch(self, url: str) -> FetchResult:
        """
        Retrieve ``url`` within the configured bounds.

        :param url: Absolute ``http(s)`` URL.
        :returns: A :class:`FetchResult`; failures are reported through
            ``outcome`` and ``error`` rather than raised.
        """
        if not is_absolute_url(url):
            return FetchResult(
                url=url,
                outcome=FetchOutcome.DISALLOWED,
                error=DisallowedScheme(url, "not an absolute http(s) URL"),
            )

        try:
            async with self._slots:
                return await self._fetch(url)
        except aiohttp.TooManyRedirects:
            logger.info("Too many redirects for %s", url)
            return FetchResult(
                url=url,
                outcome=FetchOutcome.NETWORK_ERROR,
                error=FetchNetworkError(url, "too many redirects"),
            )
        except asyncio.TimeoutError:
            logger.info("Timed out fetching %s", url)
            return FetchResult(url=url, outcome=FetchOutcome.TIMEOUT, error=FetchTimeout(url))
        except (aiohttp.ClientError, ValueError) as e:
            logger.info("Network error fetching %s: %s", url, e)
            return FetchResult(
                url=url,
                outcome=FetchOutcome.NETWORK_ERROR,
                error=FetchNetworkError(url, str(e)),
            )

    async def _fetch(self, url: str) -> FetchResult:
        session = self._get_session()
        follow = self.settings.MAX_REDIRECTS > 0
        # aiohttp stops when its history reaches max_redirects, so +1 allows MAX_REDIRECTS hops
        async with session.get(
            url,
            headers=self._headers(),
            timeout=aiohttp.ClientTimeout(total=self.settings.TIMEOUT),
            allow_redirects=follow,
            max_redirects=self.settings.MAX_REDIRECTS + 1,
        ) as resp:
            final_url = str(resp.url)
            status = resp.status
            content_type = _media_type(resp.headers.get(hdrs.CONTENT_TYPE))

            if not follow and 300 <= status < 400 and hdrs.LOCATION in resp.headers:
                logger.info("Redirects disabled; not following %s", url)
                return FetchResult(
                    url=url,
                    final_url=final_url,
                    outcome=FetchOutcome.NETWORK_ERROR,
                    status=status,
                    content_type=content_type,
                    error=FetchNetworkError(url, "too many redirects"),
                )

            if not 200 <= status < 300:
                logger.info("Fetching %s returned HTTP %d", url, status)
                return FetchResult(
                    url=url,
                    final_url=final_url,
                    outcome=FetchOutcome.HTTP_ERROR,
                    status=status,
                    content_type=content_type,
                    error=FetchHttpError(url, status),
                )

            is_image = content_type.startswith("image/")
            limit = self.settings.MAX_IMAGE_BYTES if is_image else self.settings.MAX_DOCUMENT_BYTES

            declared = resp.content_length
            if is_image and declared is not None and declared > limit:
                logger.info("Image %s declares %d bytes (limit %d)", url, declared, limit)
                return self._too_large(url, final_url, status, content_type, limit)

            buf = bytearray()
            truncated = False
            async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
                buf.extend(chunk)
                if len(buf) > limit:
                    if is_image:
                        logger.info("Image %s exceeded %d bytes", url, limit)
                        return self._too_large(url, final_url, status, content_type, limit)
                    del buf[limit:]
                    truncated = True
                    break

            if truncated:
                logger.debug("Truncated %s to %d bytes", url, limit)

            return FetchResult(
                url=url,
                final_url=final_url,
                outcome=FetchOutcome.OK,
                status=status,
                content_type=content_type,
                charset=resp.charset,
                body=bytes(buf),
                truncated=truncated,
            )

    @staticmethod
    def _too_large(url: str, final_url: str, status: int, content_type: str, limit: int) -> FetchResult:
        return FetchResult(
            url=url,
            final_url=final_url,
            outcome=FetchOutcome.TOO_LARGE,
            status=status,
            content_type=content_type,
            error=ResourceTooLarge(url, limit),
        )


__all__ = ["ResourceFetcher"]
