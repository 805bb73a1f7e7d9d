"""Budgeted, single-flight directory scan cache.

Records are keyed by separator-terminated absolute path. A scan lists one
directory, records its children, and recursively schedules scans of child
directories against one shared absolute deadline. The top-level call only
waits until that deadline; deeper scans keep running in the background and
warm the cache for later lookups.

All mutation happens on the event loop thread. Resetting a record and
attaching its scan task happen without an intervening ``await``, which is
what keeps concurrent scans of one path down to a single listing.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
import time
from collections import deque
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from ..path_utils import append_dir_suffix
from .fs import FileSystem, LocalFileSystem
from .types import ScanRecord

if TYPE_CHECKING:
    from ..config import ScanSettings

DEFAULT_EXCLUDES: tuple[str, ...] = ("node_modules", ".git", ".DS_Store")
DEFAULT_SCAN_TIMEOUT_SECONDS = 0.1
DEFAULT_SCAN_TTL_SECONDS = 30.0

logger = logging.getLogger(__name__)


def _log_background_failure(task: asyncio.Task) -> None:
    """Consume and log unexpected faults from child scans nobody awaits."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background directory scan failed", exc_info=exc)


def _settle(record: ScanRecord, task: asyncio.Task) -> None:
    if record.in_flight is task:
        record.in_flight = None


class ScanCache:
    """In-memory cache of directory listings with freshness and time budgets."""

    def __init__(
        self,
        *,
        exclude: Iterable[str] = DEFAULT_EXCLUDES,
        timeout: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
        ttl: float = DEFAULT_SCAN_TTL_SECONDS,
        max_items: int | None = None,
        filesystem: FileSystem | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.exclude = frozenset(exclude)
        self.timeout = timeout
        self.ttl = ttl
        self.max_items = max_items
        self.filesystem: FileSystem = filesystem if filesystem is not None else LocalFileSystem()
        self._clock = clock
        self.records: dict[str, ScanRecord] = {}

    @classmethod
    def from_settings(cls, settings: ScanSettings, **kwargs) -> ScanCache:
        """Build a cache from loaded configuration; ``kwargs`` override."""
        options: dict[str, object] = {
            "exclude": settings.exclude,
            "timeout": settings.timeout,
            "ttl": settings.ttl,
            "max_items": settings.max_items,
        }
        options.update(kwargs)
        return cls(**options)

    @staticmethod
    def normalize_path(path: str) -> str:
        return append_dir_suffix(path)

    def now(self) -> float:
        return self._clock()

    def is_fresh(self, record: ScanRecord) -> bool:
        return self._clock() - record.created_at < self.ttl

    def get_record(self, path: str) -> ScanRecord | None:
        """Return the fresh record for ``path``; stale records are dropped."""
        key = self.normalize_path(path)
        record = self.records.get(key)
        if record is None:
            return None
        if self.is_fresh(record):
            return record
        del self.records[key]
        return None

    def flush_entry(self, path: str) -> bool:
        """Evict the record for ``path`` regardless of freshness."""
        return self.records.pop(self.normalize_path(path), None) is not None

    def clear(self) -> None:
        self.records.clear()

    # scanning
    async def scan(self, path: str, max_time: float | None = None) -> ScanRecord:
        """Scan ``path`` and return its record within roughly ``max_time`` seconds.

        A fresh record that is already scanned (successfully or not) is
        returned without touching the filesystem. A scan already in flight is
        shared rather than repeated.
        """
        budget = self.timeout if max_time is None else max_time
        record = self._begin_scan(self.normalize_path(path), self._clock() + budget)
        if record.in_flight is None:
            return record
        return await asyncio.shield(record.in_flight)

    def _begin_scan(self, key: str, deadline: float) -> ScanRecord:
        record = self.get_record(key)
        if record is not None and (record.in_flight is not None or record.scanned):
            return record

        now = self._clock()
        if record is None:
            record = ScanRecord(path=key, created_at=now)
            self.records[key] = record
        record.reset(now)
        task = asyncio.ensure_future(self._run_scan(record, deadline))
        record.in_flight = task
        task.add_done_callback(functools.partial(_settle, record))
        return record

    def _evict(self, record: ScanRecord) -> None:
        if self.records.get(record.path) is record:
            del self.records[record.path]

    async def _run_scan(self, record: ScanRecord, deadline: float) -> ScanRecord:
        try:
            entries = await self.filesystem.list_directory(record.path)
        except OSError as exc:
            record.errored = True
            record.error = exc
            logger.debug("Cannot scan %s: %s", record.path, exc)
            return record
        except Exception:
            self._evict(record)
            raise

        remaining = deadline - self._clock()
        child_dirs: list[str] = []
        child_files: list[str] = []
        workers: list[asyncio.Task] = []
        for entry in entries:
            if entry.name in self.exclude:
                continue
            if not entry.is_dir:
                child_files.append(record.path + entry.name)
                continue
            child_path = record.path + entry.name + os.sep
            child_dirs.append(child_path)
            if remaining <= 0:
                continue
            cached = self.get_record(child_path)
            if cached is not None and cached.scanned:
                continue
            child = self._begin_scan(child_path, deadline)
            if child.in_flight is not None:
                child.in_flight.add_done_callback(_log_background_failure)
                workers.append(child.in_flight)
        record.child_dirs = child_dirs
        record.child_files = child_files

        if workers:
            await asyncio.wait(workers, timeout=max(0.0, deadline - self._clock()))
        return record

    # lookups
    def for_each(
        self,
        root: ScanRecord | str,
        visit: Callable[[str, bool], None],
        max_items: int | None = None,
    ) -> int:
        """Visit every cached descendant of ``root`` breadth-first.

        Only fresh cached records are followed; nothing new is scanned.
        Directories of a record are visited before its files. Returns the
        number of visited paths, which never exceeds ``max_items``.
        """
        limit = self.max_items if max_items is None else max_items
        start = root if isinstance(root, ScanRecord) else self.get_record(root)
        if start is None:
            return 0

        visited = 0
        queue: deque[ScanRecord] = deque([start])
        while queue:
            record = queue.popleft()
            for child_dir in record.child_dirs or ():
                if limit is not None and visited >= limit:
                    return visited
                visit(child_dir, True)
                visited += 1
                child = self.get_record(child_dir)
                if child is not None:
                    queue.append(child)
            for child_file in record.child_files or ():
                if limit is not None and visited >= limit:
                    return visited
                visit(child_file, False)
                visited += 1
        return visited

    def to_list(self, root: ScanRecord | str, max_items: int | None = None) -> list[str]:
        out: list[str] = []
        self.for_each(root, lambda path, _is_dir: out.append(path), max_items=max_items)
        return out

    async def is_directory(self, path: str) -> bool:
        """Return whether ``path`` is a directory, preferring cached knowledge.

        A successful stat of a directory leaves an unscanned record behind.
        Negative results are never cached.
        """
        key = self.normalize_path(path)
        record = self.get_record(key)
        if record is not None:
            if record.in_flight is not None:
                record = await asyncio.shield(record.in_flight)
            return not record.errored

        try:
            info = await self.filesystem.stat(key)
        except OSError:
            return False
        if not info.is_dir:
            return False
        if self.get_record(key) is None:
            self.records[key] = ScanRecord(path=key, created_at=self._clock())
        return True


__all__ = [
    "DEFAULT_EXCLUDES",
    "DEFAULT_SCAN_TIMEOUT_SECONDS",
    "DEFAULT_SCAN_TTL_SECONDS",
    "ScanCache",
]
