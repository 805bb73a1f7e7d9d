"""Value types produced by path resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..scan_cache.types import ScanRecord

if TYPE_CHECKING:
    from ..actions import ActionKind


@dataclass(frozen=True)
class ResolvedEntry:
    """One display row: label as shown, absolute path, and its kind.

    Directory paths are separator-terminated, matching the scan cache.
    """

    label: str
    path: str
    is_dir: bool
    is_workspace_root: bool = False


@dataclass(frozen=True)
class Resolution:
    """Result of resolving one raw input against a base directory."""

    input: str
    base_directory: str
    input_absolute: str
    entries: tuple[ResolvedEntry, ...]
    input_is_directory: bool
    input_is_ancestor: bool
    input_is_dot: bool
    input_has_dir_suffix: bool
    input_is_absolute: bool
    root: ScanRecord | None
    actions: tuple[ActionKind, ...] = ()

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self.entries]


__all__ = [
    "ResolvedEntry",
    "Resolution",
]
