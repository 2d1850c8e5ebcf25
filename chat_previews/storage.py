"""
Prefetch storage hook.

When ``Prefetch.STORAGE`` is on and a store is supplied, image bytes the
previewer already downloaded are handed to the store and the URL it returns is
used as the preview's ``thumb``. Persisting anything is the store's business.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class MediaStore(Protocol):
    async def store(self, data: bytes, content_type: str, source_url: str) -> Optional[str]:
        """Persist ``data`` and return the URL clients should load, or ``None``."""


__all__ = ["MediaStore"]
