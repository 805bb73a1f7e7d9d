"""Persistent JSON config helpers.

Stores scan exclusions, scan time budget, cache freshness window, the
optional candidate cap, and named path prefixes.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .scan_cache.cache import DEFAULT_EXCLUDES, DEFAULT_SCAN_TIMEOUT_SECONDS, DEFAULT_SCAN_TTL_SECONDS

APP_NAME = "quickopener"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
HOME_PREFIX = "~"


def default_prefixes() -> dict[str, str]:
    """Return the built-in alias table (``~`` for the user home)."""
    return {HOME_PREFIX: str(Path.home())}


@dataclass(frozen=True)
class ScanSettings:
    """Effective scanner/resolver settings after config validation."""

    exclude: tuple[str, ...] = DEFAULT_EXCLUDES
    timeout: float = DEFAULT_SCAN_TIMEOUT_SECONDS
    ttl: float = DEFAULT_SCAN_TTL_SECONDS
    max_items: int | None = None
    prefixes: dict[str, str] = field(default_factory=default_prefixes)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored so a read-only config directory never
    breaks the picker.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _positive_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None


def load_exclude(data: dict[str, object] | None = None) -> tuple[str, ...]:
    """Load excluded base names; a non-list or non-string entries are dropped."""
    value = (load_config() if data is None else data).get("exclude")
    if not isinstance(value, list):
        return DEFAULT_EXCLUDES
    return tuple(name for name in value if isinstance(name, str) and name)


def load_scan_timeout(data: dict[str, object] | None = None) -> float:
    """Load the per-call scan budget, stored in milliseconds, as seconds."""
    value = _positive_number((load_config() if data is None else data).get("scan_timeout_ms"))
    return DEFAULT_SCAN_TIMEOUT_SECONDS if value is None else value / 1000.0


def load_scan_ttl(data: dict[str, object] | None = None) -> float:
    value = _positive_number((load_config() if data is None else data).get("scan_ttl_seconds"))
    return DEFAULT_SCAN_TTL_SECONDS if value is None else value


def load_max_items(data: dict[str, object] | None = None) -> int | None:
    """Load the optional candidate cap; only positive integers are accepted."""
    value = (load_config() if data is None else data).get("max_items")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def load_prefixes(data: dict[str, object] | None = None) -> dict[str, str]:
    """Load named prefixes merged over the built-in ``~`` alias.

    Aliases must be non-empty and free of path separators; targets must be
    absolute after ``~`` expansion. Anything else is dropped.
    """
    prefixes = default_prefixes()
    value = (load_config() if data is None else data).get("prefixes")
    if not isinstance(value, dict):
        return prefixes
    for alias, target in value.items():
        if not isinstance(alias, str) or not alias or os.sep in alias:
            continue
        if not isinstance(target, str) or not target:
            continue
        expanded = os.path.expanduser(target)
        if not os.path.isabs(expanded):
            continue
        prefixes[alias] = os.path.normpath(expanded)
    return prefixes


def load_scan_settings() -> ScanSettings:
    """Read the config file once and validate every known key."""
    data = load_config()
    return ScanSettings(
        exclude=load_exclude(data),
        timeout=load_scan_timeout(data),
        ttl=load_scan_ttl(data),
        max_items=load_max_items(data),
        prefixes=load_prefixes(data),
    )


def save_exclude(names: list[str]) -> None:
    config = load_config()
    config["exclude"] = [str(name) for name in names if str(name)]
    save_config(config)


def save_prefix(alias: str, target: str) -> None:
    """Persist one named prefix, replacing an existing alias."""
    stripped = alias.strip()
    if not stripped or os.sep in stripped:
        return
    config = load_config()
    raw = config.get("prefixes")
    prefixes = dict(raw) if isinstance(raw, dict) else {}
    prefixes[stripped] = target
    config["prefixes"] = prefixes
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_CONFIG_PATH",
    "HOME_PREFIX",
    "ScanSettings",
    "default_prefixes",
    "load_config",
    "save_config",
    "load_exclude",
    "load_scan_timeout",
    "load_scan_ttl",
    "load_max_items",
    "load_prefixes",
    "load_scan_settings",
    "save_exclude",
    "save_prefix",
]
