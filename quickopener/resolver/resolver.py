"""Incremental resolution of typed paths into ordered candidate entries.

Every keystroke resolves the raw input against the current base directory:
prefixes are expanded, the nearest scannable ancestor of the intended
directory is scanned through the shared ``ScanCache``, and cached results
are flattened into display rows. Filesystem faults arrive only as
``ScanRecord.errored``; unexpected faults propagate to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Iterable, Mapping
from pathlib import Path

from ..actions import input_actions
from ..path_utils import (
    append_dir_suffix,
    has_dir_suffix,
    is_dot,
    is_filesystem_root,
    normalize_joined,
    parent_directory,
    trim_dir_suffix,
)
from ..scan_cache import ScanCache, ScanRecord
from ..workspace_roots import is_workspace_root, normalized_workspace_roots
from .prefixes import NamedPrefixes
from .types import Resolution, ResolvedEntry

ANCESTOR_LABEL = append_dir_suffix("..")

logger = logging.getLogger(__name__)


def is_ancestor_reference(raw_input: str) -> bool:
    """Return whether input is ``..`` or starts with ``../``."""
    return raw_input == ".." or raw_input.startswith(".." + os.sep)


def relative_label(path: str, base_directory: str) -> str:
    """Return ``path`` relative to ``base_directory`` (absolute across drives)."""
    try:
        return os.path.relpath(path, base_directory)
    except ValueError:
        return path


class PathResolver:
    """Resolve raw picker input into entries using a shared scan cache.

    The only session state is the base directory (``relative``), which is
    always absolute and separator-terminated. Changing it never touches the
    cache.
    """

    def __init__(
        self,
        scanner: ScanCache,
        *,
        base_directory: str | None = None,
        prefixes: NamedPrefixes | Mapping[str, str] | None = None,
        workspace_roots: Iterable[str] = (),
        max_items: int | None = None,
    ) -> None:
        self.scanner = scanner
        self.prefixes = prefixes if isinstance(prefixes, NamedPrefixes) else NamedPrefixes(prefixes)
        self.max_items = max_items
        self._workspace_roots = normalized_workspace_roots(workspace_roots)
        initial = base_directory if base_directory is not None else str(Path.home())
        self._relative = append_dir_suffix(os.path.abspath(initial))

    @property
    def relative(self) -> str:
        return self._relative

    def change_directory(self, path: str) -> str:
        """Move the base directory to ``path`` (relative, prefixed or absolute)."""
        self._relative = append_dir_suffix(os.path.normpath(self.resolve_relative(path)))
        return self._relative

    def set_workspace_roots(self, paths: Iterable[str]) -> None:
        self._workspace_roots = normalized_workspace_roots(paths)

    def is_workspace_root(self, path: str) -> bool:
        return is_workspace_root(path, self._workspace_roots)

    def resolve_relative(self, raw_input: str, base_directory: str | None = None) -> str:
        """Expand prefixes and join relative input onto the base directory.

        Every result collapses ``.`` and ``..`` and keeps a trailing
        separator when the input had one, so one directory maps to one cache
        slot however it was typed.
        """
        base = self._relative if base_directory is None else base_directory
        keep_suffix = has_dir_suffix(raw_input)
        expanded = self.prefixes.expand(raw_input)
        if expanded is not None:
            return normalize_joined(expanded, keep_suffix)
        if os.path.isabs(raw_input):
            return normalize_joined(raw_input, keep_suffix)
        return normalize_joined(os.path.join(base, raw_input), keep_suffix)

    def path_for_display(self, absolute_path: str, shorten: bool) -> str:
        return self.prefixes.shorten(absolute_path) if shorten else absolute_path

    async def scan_nearest_ancestor(self, directory: str) -> ScanRecord | None:
        """Scan ``directory`` or, failing that, each ancestor up to the root.

        Returns the first record that did not error, or ``None`` when even the
        filesystem root could not be listed.
        """
        parts = trim_dir_suffix(directory).split(os.sep)
        for count in range(len(parts), 0, -1):
            candidate = os.sep.join(parts[:count])
            record = await self.scanner.scan(candidate)
            if not record.errored:
                return record
        return None

    async def resolve(self, raw_input: str, base_directory: str | None = None) -> Resolution:
        """Resolve ``raw_input`` into ordered entries plus input flags.

        Synthetic rows (``../`` and the scanned root itself) come first,
        followed by cached descendants of the scanned root in cache order.
        Each path appears once, and the base directory is not listed under
        relative labels.
        The directory check for the literal input runs alongside the scan
        and never affects the entry list.
        """
        started = time.perf_counter()
        base = self._relative if base_directory is None else append_dir_suffix(os.path.abspath(base_directory))

        input_is_dot = is_dot(raw_input)
        input_has_dir_suffix = has_dir_suffix(raw_input)
        input_is_ancestor = is_ancestor_reference(raw_input)
        shorten = self.prefixes.target_for(raw_input) is not None
        input_is_absolute = shorten or os.path.isabs(raw_input)
        input_absolute = self.resolve_relative(raw_input, base)

        entries: list[ResolvedEntry] = []
        if input_is_ancestor and not is_filesystem_root(base):
            parent = parent_directory(base)
            entries.append(
                ResolvedEntry(
                    label=ANCESTOR_LABEL,
                    path=parent,
                    is_dir=True,
                    is_workspace_root=self.is_workspace_root(parent),
                )
            )

        directory_check = asyncio.ensure_future(self.scanner.is_directory(input_absolute))
        try:
            if raw_input and not input_has_dir_suffix and not input_is_ancestor and not input_is_dot:
                root_directory = os.path.dirname(input_absolute)
            else:
                root_directory = input_absolute
            root = await self.scan_nearest_ancestor(root_directory)
        except BaseException:
            directory_check.cancel()
            raise

        if root is None:
            logger.warning("No scannable directory found for %s", input_absolute)
        else:
            if root.path != base and all(entry.path != root.path for entry in entries):
                label = self.path_for_display(root.path, shorten) if input_is_absolute else relative_label(root.path, base)
                entries.append(
                    ResolvedEntry(
                        label=append_dir_suffix(label),
                        path=root.path,
                        is_dir=True,
                        is_workspace_root=self.is_workspace_root(root.path),
                    )
                )

            def visit(path: str, is_dir: bool) -> None:
                if path == base and not input_is_absolute:
                    return
                label = self.path_for_display(path, shorten) if input_is_absolute else relative_label(path, base)
                entries.append(
                    ResolvedEntry(
                        label=append_dir_suffix(label) if is_dir else label,
                        path=path,
                        is_dir=is_dir,
                        is_workspace_root=is_dir and self.is_workspace_root(path),
                    )
                )

            self.scanner.for_each(root, visit, max_items=self.max_items)

        logger.debug(
            "Generated %d items for %r in %.1fms",
            len(entries),
            raw_input,
            (time.perf_counter() - started) * 1000.0,
        )

        input_is_directory = await directory_check
        return Resolution(
            input=raw_input,
            base_directory=base,
            input_absolute=input_absolute,
            entries=tuple(entries),
            input_is_directory=input_is_directory,
            input_is_ancestor=input_is_ancestor,
            input_is_dot=input_is_dot,
            input_has_dir_suffix=input_has_dir_suffix,
            input_is_absolute=input_is_absolute,
            root=root,
            actions=input_actions(
                raw_input,
                input_is_directory=input_is_directory,
                input_is_workspace_root=input_is_directory and self.is_workspace_root(input_absolute),
            ),
        )


async def resolve(scanner: ScanCache, base_directory: str, raw_input: str, **kwargs) -> Resolution:
    """One-shot resolution without keeping a resolver around."""
    resolver = PathResolver(scanner, base_directory=base_directory, **kwargs)
    return await resolver.resolve(raw_input)


__all__ = [
    "ANCESTOR_LABEL",
    "PathResolver",
    "is_ancestor_reference",
    "relative_label",
    "resolve",
]
