import os

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; chat-previews link fetcher; +https://example.invalid/bot)"
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _as_bool(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Expected a boolean value, got {raw!r}")


class Prefetch:
    """Limits and toggles for link preview fetching.

    Values come from ``[chat_previews.prefetch]`` in ``config.toml`` and fall
    back to environment variables, then to the defaults below.
    """

    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("chat_previews", {}).get("prefetch", {})

        self.ENABLED: bool = _as_bool(cfg.get("enabled", os.getenv("PREFETCH", "true")))
        self.STORAGE: bool = _as_bool(cfg.get("storage", os.getenv("PREFETCH_STORAGE", "false")))
        self.TIMEOUT: float = float(cfg.get("timeout", os.getenv("PREFETCH_TIMEOUT", "5")))
        self.MAX_REDIRECTS: int = int(cfg.get("max_redirects", os.getenv("PREFETCH_MAX_REDIRECTS", "5")))
        self.MAX_DOCUMENT_BYTES: int = 1024 * int(
            cfg.get("max_document_kb", os.getenv("PREFETCH_MAX_DOCUMENT_KB", "512"))
        )
        self.MAX_IMAGE_BYTES: int = 1024 * int(
            cfg.get("max_image_kb", os.getenv("PREFETCH_MAX_IMAGE_KB", "2048"))
        )
        self.CONCURRENCY: int = int(cfg.get("concurrency", os.getenv("PREFETCH_CONCURRENCY", "8")))
        self.MAX_LINKS: int = int(cfg.get("max_links", os.getenv("PREFETCH_MAX_LINKS", "0")))
        self.MAX_FIELD_LEN: int = int(cfg.get("max_field_len", os.getenv("PREFETCH_MAX_FIELD_LEN", "300")))
        self.USER_AGENT: str = str(cfg.get("user_agent", os.getenv("PREFETCH_USER_AGENT", DEFAULT_USER_AGENT)))
        self.ACCEPT_LANGUAGE: str = str(
            cfg.get("accept_language", os.getenv("PREFETCH_ACCEPT_LANGUAGE", "en-US,en;q=0.9"))
        )

        positive = {
            "TIMEOUT": self.TIMEOUT,
            "MAX_DOCUMENT_BYTES": self.MAX_DOCUMENT_BYTES,
            "MAX_IMAGE_BYTES": self.MAX_IMAGE_BYTES,
            "CONCURRENCY": self.CONCURRENCY,
            "MAX_FIELD_LEN": self.MAX_FIELD_LEN,
        }
        non_negative = {"MAX_REDIRECTS": self.MAX_REDIRECTS, "MAX_LINKS": self.MAX_LINKS}
        invalid = [name for name, val in positive.items() if val <= 0]
        invalid += [name for name, val in non_negative.items() if val < 0]
        if invalid:
            raise ValueError(f"Invalid prefetch settings: {', '.join(invalid)}")

    @classmethod
    def from_values(cls, **values) -> "Prefetch":
        """Build settings from keyword overrides, e.g. ``Prefetch.from_values(timeout=1)``."""
        return cls({"chat_previews": {"prefetch": values}})
