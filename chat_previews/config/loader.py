from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict


DEFAULT_CONFIG_PATH = Path("config.toml")
CONFIG_PATH_ENV = "CHAT_PREVIEWS_CONFIG"
SECTION = ("chat_previews", "prefetch")


def _resolve_path(path: str | Path | None) -> Path:
    if path is not None:
        return Path(path)
    override = os.getenv(CONFIG_PATH_ENV)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load the previewer's toml config.

    The file is ``path``, else ``$CHAT_PREVIEWS_CONFIG``, else ``config.toml``
    in the working directory. A missing file yields ``{}`` so settings fall
    back to environment variables.

    :raises ValueError: when ``[chat_previews]`` or ``[chat_previews.prefetch]``
        is present but not a table (e.g. ``chat_previews = 1``).
    """
    target = _resolve_path(path)
    if not target.is_file():
        return {}

    with target.open("rb") as handle:
        raw = tomllib.load(handle)

    node: Any = raw
    for depth, key in enumerate(SECTION, start=1):
        if key not in node:
            break
        node = node[key]
        if not isinstance(node, dict):
            name = ".".join(SECTION[:depth])
            raise ValueError(f"[{name}] in {target} must be a table")

    return raw


__all__ = ["load_raw_config", "DEFAULT_CONFIG_PATH", "CONFIG_PATH_ENV"]
