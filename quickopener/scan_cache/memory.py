"""Deterministic in-memory filesystem provider.

The tree is a nested ``dict`` where directories map child names to nested
dicts and files map to ``None``. Insertion order is listing order. Paths are
absolute and rooted at a single root (``/`` on POSIX).
"""

from __future__ import annotations

import asyncio
import errno
import os
from collections import Counter

from .types import DirectoryListingEntry, FileStat

MemoryTree = dict[str, "MemoryTree | None"]


def _parts(path: str) -> list[str]:
    normalized = os.path.normpath(path)
    return [part for part in normalized.split(os.sep) if part]


def _key(path: str) -> str:
    return os.sep + os.sep.join(_parts(path))


class MemoryFileSystem:
    """In-memory provider with optional latency and injected failures.

    ``delays`` and ``failures`` are keyed by normalized absolute path (no
    trailing separator). ``list_calls`` counts listings per normalized path.
    """

    def __init__(self, tree: MemoryTree | None = None, *, latency: float = 0.0) -> None:
        self.tree: MemoryTree = tree if tree is not None else {}
        self.latency = latency
        self.delays: dict[str, float] = {}
        self.failures: dict[str, BaseException] = {}
        self.list_calls: Counter[str] = Counter()
        self.stat_calls: Counter[str] = Counter()

    def _lookup(self, path: str) -> MemoryTree | None:
        node: MemoryTree | None = self.tree
        walked = ""
        for part in _parts(path):
            walked += os.sep + part
            if node is None:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", walked)
            if part not in node:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", walked)
            node = node[part]
        return node

    async def _pause(self, key: str) -> None:
        delay = self.delays.get(key, self.latency)
        if delay > 0:
            await asyncio.sleep(delay)
        else:
            await asyncio.sleep(0)
        failure = self.failures.get(key)
        if failure is not None:
            raise failure

    async def list_directory(self, path: str) -> list[DirectoryListingEntry]:
        key = _key(path)
        self.list_calls[key] += 1
        await self._pause(key)
        node = self._lookup(path)
        if node is None:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", key)
        return [DirectoryListingEntry(name=name, is_dir=child is not None) for name, child in node.items()]

    async def stat(self, path: str) -> FileStat:
        key = _key(path)
        self.stat_calls[key] += 1
        await self._pause(key)
        return FileStat(is_dir=self._lookup(path) is not None)

    async def create_directory(self, path: str, recursive: bool = True) -> None:
        parts = _parts(path)
        node = self.tree
        for idx, part in enumerate(parts):
            child = node.get(part, ...)
            if child is ...:
                if not recursive and idx != len(parts) - 1:
                    raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
                child = {}
                node[part] = child
            elif not recursive and idx == len(parts) - 1:
                raise FileExistsError(errno.EEXIST, "File exists", path)
            if child is None:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            node = child
        await asyncio.sleep(0)

    async def create_empty_file(self, path: str) -> None:
        parts = _parts(path)
        parent = self._lookup(os.sep + os.sep.join(parts[:-1]))
        if parent is None:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
        if isinstance(parent.get(parts[-1]), dict):
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        parent.setdefault(parts[-1], None)
        await asyncio.sleep(0)


__all__ = [
    "MemoryFileSystem",
    "MemoryTree",
]
