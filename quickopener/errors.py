"""Exception types raised by quickopener outside the scan cache.

Filesystem faults never surface as these: the scan cache absorbs ``OSError``
into a record's ``errored`` flag.
"""

from __future__ import annotations


class QuickOpenerError(Exception):
    """Base class for quickopener errors."""


class SessionClosedError(QuickOpenerError):
    """Raised when a disposed session is used again."""


__all__ = ["QuickOpenerError", "SessionClosedError"]
