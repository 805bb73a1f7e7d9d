"""Directory scan cache and the filesystem providers it reads through.

This package contains the non-UI scanning primitives:
- scan records and listing value types
- async filesystem providers (local disk and in-memory)
- the budgeted, single-flight ``ScanCache``
"""

from __future__ import annotations

from .cache import DEFAULT_EXCLUDES, DEFAULT_SCAN_TIMEOUT_SECONDS, DEFAULT_SCAN_TTL_SECONDS, ScanCache
from .fs import FileSystem, LocalFileSystem
from .memory import MemoryFileSystem
from .types import DirectoryListingEntry, FileStat, ScanRecord

__all__ = [
    "DEFAULT_EXCLUDES",
    "DEFAULT_SCAN_TIMEOUT_SECONDS",
    "DEFAULT_SCAN_TTL_SECONDS",
    "ScanCache",
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "DirectoryListingEntry",
    "FileStat",
    "ScanRecord",
]
