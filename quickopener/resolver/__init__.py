"""Path resolution on top of the scan cache."""

from __future__ import annotations

from .prefixes import NamedPrefixes
from .resolver import ANCESTOR_LABEL, PathResolver, is_ancestor_reference, relative_label, resolve
from .types import Resolution, ResolvedEntry

__all__ = [
    "ANCESTOR_LABEL",
    "NamedPrefixes",
    "PathResolver",
    "Resolution",
    "ResolvedEntry",
    "is_ancestor_reference",
    "relative_label",
    "resolve",
]
