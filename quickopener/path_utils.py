"""Small string helpers for separator-terminated directory paths."""

from __future__ import annotations

import os


def is_dot(path: str) -> bool:
    """Return whether ``path`` is exactly ``.`` or ``..``."""
    return path in (".", "..")


def has_dir_suffix(path: str) -> bool:
    return path.endswith(os.sep)


def append_dir_suffix(path: str) -> str:
    return path if has_dir_suffix(path) else path + os.sep


def trim_dir_suffix(path: str) -> str:
    """Drop one trailing separator, keeping bare roots like ``/`` intact."""
    if not has_dir_suffix(path):
        return path
    trimmed = path[: -len(os.sep)]
    if not trimmed or os.path.dirname(path) == path:
        return path
    return trimmed


def normalize_joined(path: str, keep_suffix: bool) -> str:
    """``os.path.normpath`` that optionally preserves a trailing separator."""
    normalized = os.path.normpath(path)
    return append_dir_suffix(normalized) if keep_suffix else normalized


def parent_directory(path: str) -> str:
    """Return the separator-terminated parent of ``path``."""
    return append_dir_suffix(os.path.dirname(trim_dir_suffix(path)))


def is_filesystem_root(path: str) -> bool:
    trimmed = trim_dir_suffix(path)
    return os.path.dirname(trimmed) == trimmed


__all__ = [
    "is_dot",
    "has_dir_suffix",
    "append_dir_suffix",
    "trim_dir_suffix",
    "normalize_joined",
    "parent_directory",
    "is_filesystem_root",
]
