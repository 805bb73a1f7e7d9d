"""Filesystem providers consumed by the scan cache.

Every provider method is a coroutine and therefore a suspension point for
the event loop. Failures are reported as ``OSError`` subclasses
(``FileNotFoundError``, ``PermissionError``, ``NotADirectoryError``, ...);
the scan cache treats anything else as an unexpected fault.
"""

from __future__ import annotations

import asyncio
import os
import stat as stat_module
from typing import Protocol

from .types import DirectoryListingEntry, FileStat


class FileSystem(Protocol):
    """Async filesystem primitives needed by scanning and path actions."""

    async def list_directory(self, path: str) -> list[DirectoryListingEntry]: ...

    async def stat(self, path: str) -> FileStat: ...

    async def create_directory(self, path: str, recursive: bool = True) -> None: ...

    async def create_empty_file(self, path: str) -> None: ...


def list_directory_entries(directory: str) -> list[DirectoryListingEntry]:
    """List ``directory`` in ``os.scandir`` order.

    Symlinks are classified without following them so recursive scans can
    never loop. A child whose type cannot be determined is reported as a file.
    """
    entries: list[DirectoryListingEntry] = []
    with os.scandir(directory) as iterator:
        for child in iterator:
            try:
                is_dir = child.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            entries.append(DirectoryListingEntry(name=child.name, is_dir=is_dir))
    return entries


def stat_path(path: str) -> FileStat:
    """Stat ``path`` following symlinks, like an editor opening it would."""
    result = os.stat(path)
    return FileStat(is_dir=stat_module.S_ISDIR(result.st_mode))


def make_directory(path: str, recursive: bool = True) -> None:
    if recursive:
        os.makedirs(path, exist_ok=True)
    else:
        os.mkdir(path)


def touch_empty_file(path: str) -> None:
    """Create ``path`` if missing without truncating an existing file."""
    with open(path, "a", encoding="utf-8"):
        pass


class LocalFileSystem:
    """Local disk provider running blocking calls on worker threads."""

    async def list_directory(self, path: str) -> list[DirectoryListingEntry]:
        return await asyncio.to_thread(list_directory_entries, path)

    async def stat(self, path: str) -> FileStat:
        return await asyncio.to_thread(stat_path, path)

    async def create_directory(self, path: str, recursive: bool = True) -> None:
        await asyncio.to_thread(make_directory, path, recursive)

    async def create_empty_file(self, path: str) -> None:
        await asyncio.to_thread(touch_empty_file, path)


__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "list_directory_entries",
    "stat_path",
    "make_directory",
    "touch_empty_file",
]
