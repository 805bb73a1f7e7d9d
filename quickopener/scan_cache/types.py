"""Datatypes shared by the scan cache and its filesystem providers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DirectoryListingEntry:
    """One raw child reported by a filesystem listing."""

    name: str
    is_dir: bool


@dataclass(frozen=True)
class FileStat:
    """Subset of stat metadata the scanner cares about."""

    is_dir: bool


@dataclass(eq=False)
class ScanRecord:
    """Everything currently known about one directory.

    ``path`` always ends with a separator and doubles as the cache key.
    ``child_dirs``/``child_files`` stay ``None`` for records created by an
    existence check and become lists once a scan starts. Child directory
    paths are separator-terminated, child file paths are not.
    """

    path: str
    created_at: float
    child_dirs: list[str] | None = None
    child_files: list[str] | None = None
    errored: bool = False
    error: OSError | None = None
    in_flight: asyncio.Task | None = field(default=None, repr=False)

    @property
    def scanned(self) -> bool:
        """Return whether a listing has started (or finished) for this record."""
        return self.child_dirs is not None and self.child_files is not None

    def reset(self, created_at: float) -> None:
        """Clear previous results ahead of a fresh scan."""
        self.created_at = created_at
        self.child_dirs = []
        self.child_files = []
        self.errored = False
        self.error = None


__all__ = [
    "DirectoryListingEntry",
    "FileStat",
    "ScanRecord",
]
