"""Workspace-root normalization helpers."""

from __future__ import annotations

import os
from collections.abc import Iterable

from .path_utils import trim_dir_suffix


def normalized_workspace_root(path: str) -> str:
    """Return the comparison key for one root: normalized, no trailing separator."""
    return trim_dir_suffix(os.path.normpath(path))


def normalized_workspace_roots(paths: Iterable[str]) -> frozenset[str]:
    return frozenset(normalized_workspace_root(path) for path in paths if path)


def is_workspace_root(path: str, roots: frozenset[str]) -> bool:
    """Return whether ``path`` (file or separator-terminated dir) is a root."""
    return bool(path) and normalized_workspace_root(path) in roots


__all__ = [
    "normalized_workspace_root",
    "normalized_workspace_roots",
    "is_workspace_root",
]
