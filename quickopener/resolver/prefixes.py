"""Named path prefixes such as ``~`` for the user home directory."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping

from ..config import default_prefixes


class NamedPrefixes:
    """Alias table applied to the first path segment of user input.

    Targets are stored normalized without a trailing separator.
    """

    def __init__(self, table: Mapping[str, str] | None = None) -> None:
        if table is None:
            table = default_prefixes()
        self._table: dict[str, str] = {
            alias: os.path.normpath(target) for alias, target in table.items() if alias and target
        }

    def __contains__(self, alias: object) -> bool:
        return alias in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def items(self) -> list[tuple[str, str]]:
        return list(self._table.items())

    def target_for(self, raw_input: str) -> tuple[str, str] | None:
        """Return ``(alias, target)`` when the first segment is a known alias."""
        first = raw_input.split(os.sep, 1)[0]
        target = self._table.get(first)
        if target is None:
            return None
        return first, target

    def expand(self, raw_input: str) -> str | None:
        """Substitute the alias segment with its target, or ``None`` if unaliased."""
        match = self.target_for(raw_input)
        if match is None:
            return None
        _alias, target = match
        rest = raw_input.split(os.sep)[1:]
        return os.path.join(target, *rest)

    def shorten(self, path: str) -> str:
        """Replace the longest target that prefixes ``path`` with its alias."""
        best: tuple[str, str] | None = None
        for alias, target in self._table.items():
            root = target if target.endswith(os.sep) else target + os.sep
            if path != target and not path.startswith(root):
                continue
            if best is None or len(target) > len(best[1]):
                best = (alias, target)
        if best is None:
            return path
        alias, target = best
        remainder = path[len(target):]
        if target.endswith(os.sep):
            remainder = os.sep + remainder
        return alias + remainder


__all__ = ["NamedPrefixes"]
