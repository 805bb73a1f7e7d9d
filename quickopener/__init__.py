"""Public package surface for quickopener.

Exports ``main`` for programmatic CLI invocation plus the core types, which
are imported on first access so ``import quickopener`` stays cheap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .resolver import PathResolver, Resolution, ResolvedEntry
    from .scan_cache import ScanCache, ScanRecord
    from .session import QuickOpenSession

_LAZY_EXPORTS = {
    "PathResolver": "resolver",
    "Resolution": "resolver",
    "ResolvedEntry": "resolver",
    "ScanCache": "scan_cache",
    "ScanRecord": "scan_cache",
    "QuickOpenSession": "session",
}


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def __getattr__(name: str):
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is not None:
        from importlib import import_module

        return getattr(import_module(f".{module_name}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "main",
    "PathResolver",
    "Resolution",
    "ResolvedEntry",
    "ScanCache",
    "ScanRecord",
    "QuickOpenSession",
]
