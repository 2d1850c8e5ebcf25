"""
Failure taxonomy for the preview pipeline.

None of these escape a pipeline. Fetch errors ride along on
:class:`~chat_previews.model.FetchResult` and abort the pipeline when the
primary resource fails; thumbnail errors only blank the ``thumb`` field.
"""

from __future__ import annotations


class PreviewError(RuntimeError):
    """Base class for every preview pipeline failure."""

    pass


class FetchError(PreviewError):
    """The resource could not be retrieved."""

    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}" if reason else url)


class FetchTimeout(FetchError):
    pass


class FetchNetworkError(FetchError):
    pass


class FetchHttpError(FetchError):
    def __init__(self, url: str, status: int) -> None:
        self.status = status
        super().__init__(url, f"HTTP {status}")


class ResourceTooLarge(FetchError):
    def __init__(self, url: str, limit: int) -> None:
        self.limit = limit
        super().__init__(url, f"exceeds {limit} bytes")


class DisallowedScheme(FetchError):
    pass


class UnparsableMetadata(PreviewError):
    """Markup could not be parsed; extraction falls back to empty fields."""

    pass


class InvalidThumbnailUrl(PreviewError):
    pass


class ThumbnailUnreachable(PreviewError):
    pass


__all__ = [
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
]
