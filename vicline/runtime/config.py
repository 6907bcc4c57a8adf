"""Persistent JSON config helpers.

Stores input settings (ambiguity timeout, incremental search, wrap-around,
history sizes), saved histories and bookmarks. All access is defensive:
malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from ..bookmarks import BookmarkTable
from ..history import DEFAULT_HISTORY_SIZE, HISTORY_CATEGORIES, HistoryStore
from ..input.matcher import DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)

APP_NAME = "vicline"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


@dataclass
class Settings:
    """Read-mostly options consumed by the input subsystem."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    inc_search: bool = False
    wrap_scan: bool = True
    ignore_case: bool = True
    history_size: int = DEFAULT_HISTORY_SIZE
    history_sizes: dict[str, int] = field(default_factory=dict)


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object], path: Path | None = None) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is logged and ignored to keep runtime
    behavior non-fatal when config cannot be written.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception as exc:
        logger.warning("cannot save config %s: %s", config_path, exc)


def _coerce_nonnegative_int(value: object, default: int) -> int:
    """Normalize JSON scalars; booleans and non-integers fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return max(0, value)


def _coerce_bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def load_settings(path: Path | None = None) -> Settings:
    """Build :class:`Settings` from the ``settings`` config object."""
    raw = load_config(path).get("settings")
    if not isinstance(raw, dict):
        return Settings()
    defaults = Settings()
    sizes: dict[str, int] = {}
    raw_sizes = raw.get("history_sizes")
    if isinstance(raw_sizes, dict):
        for category, size in raw_sizes.items():
            if category in HISTORY_CATEGORIES and isinstance(size, int) and not isinstance(size, bool):
                sizes[category] = max(0, size)
    return Settings(
        timeout_ms=_coerce_nonnegative_int(raw.get("timeout_ms"), defaults.timeout_ms),
        inc_search=_coerce_bool(raw.get("inc_search"), defaults.inc_search),
        wrap_scan=_coerce_bool(raw.get("wrap_scan"), defaults.wrap_scan),
        ignore_case=_coerce_bool(raw.get("ignore_case"), defaults.ignore_case),
        history_size=_coerce_nonnegative_int(raw.get("history_size"), defaults.history_size),
        history_sizes=sizes,
    )


def save_settings(settings: Settings, path: Path | None = None) -> None:
    config = load_config(path)
    config["settings"] = {
        "timeout_ms": settings.timeout_ms,
        "inc_search": settings.inc_search,
        "wrap_scan": settings.wrap_scan,
        "ignore_case": settings.ignore_case,
        "history_size": settings.history_size,
        "history_sizes": dict(settings.history_sizes),
    }
    save_config(config, path)


def load_histories(settings: Settings, path: Path | None = None) -> HistoryStore:
    """Load saved histories sized according to ``settings``."""
    raw = load_config(path).get("histories")
    data = raw if isinstance(raw, dict) else {}
    return HistoryStore.from_dict(
        data,
        capacity=settings.history_size,
        capacities=settings.history_sizes,
    )


def save_histories(histories: HistoryStore, path: Path | None = None) -> None:
    config = load_config(path)
    config["histories"] = histories.to_dict()
    save_config(config, path)


def load_bookmarks(bookmarks: BookmarkTable, path: Path | None = None) -> BookmarkTable:
    """Merge persisted marks into ``bookmarks`` and return it."""
    raw = load_config(path).get("bookmarks")
    if isinstance(raw, dict):
        bookmarks.load_dict(raw)
    return bookmarks


def save_bookmarks(bookmarks: BookmarkTable, path: Path | None = None) -> None:
    config = load_config(path)
    config["bookmarks"] = bookmarks.to_dict()
    save_config(config, path)
