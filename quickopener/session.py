"""Picker session: one explicit handle per open quick-open interaction.

The session owns a ``PathResolver`` and talks to its host (editor, window
manager, workspace) through ``SessionHost``. Rendering and keystroke
debouncing stay with the host; the session only turns input changes,
accepts and actions into resolver calls and host callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from .actions import ActionKind
from .errors import SessionClosedError
from .path_utils import is_filesystem_root, parent_directory, trim_dir_suffix
from .resolver import ANCESTOR_LABEL, PathResolver, Resolution, ResolvedEntry

logger = logging.getLogger(__name__)


class SessionHost(Protocol):
    """Side-effecting collaborators provided by the embedding application."""

    def open_document(self, path: str, beside: bool = False) -> None: ...

    def open_window(self, path: str) -> None: ...

    def add_workspace_folder(self, path: str) -> None: ...

    def remove_workspace_folder(self, path: str) -> None: ...

    def workspace_folders(self) -> list[str]: ...


class AcceptOutcome(Enum):
    """What accepting a row did."""

    NOTHING = "nothing"
    CHANGED_DIRECTORY = "changed_directory"
    FILLED_INPUT = "filled_input"
    OPENED_DOCUMENT = "opened_document"


class QuickOpenSession:
    """State-bound quick-open operations for one picker instance."""

    def __init__(
        self,
        resolver: PathResolver,
        host: SessionHost,
        *,
        on_dispose: Callable[[QuickOpenSession], None] | None = None,
    ) -> None:
        self.resolver = resolver
        self.host = host
        self.value = ""
        self.resolution: Resolution | None = None
        self.error: str | None = None
        self._on_dispose = on_dispose
        self._disposed = False
        self.refresh_workspace_roots()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def entries(self) -> tuple[ResolvedEntry, ...]:
        return self.resolution.entries if self.resolution is not None else ()

    @property
    def title(self) -> str:
        return self.resolver.path_for_display(self.resolver.relative, True)

    def _ensure_open(self) -> None:
        if self._disposed:
            raise SessionClosedError("quick-open session was disposed")

    def refresh_workspace_roots(self) -> None:
        self.resolver.set_workspace_roots(self.host.workspace_folders())

    def dispose(self) -> None:
        """Close the session and run the disposal callback exactly once."""
        if self._disposed:
            return
        self._disposed = True
        if self._on_dispose is not None:
            self._on_dispose(self)

    # input
    async def show(self) -> Resolution | None:
        return await self.update("")

    async def update(self, value: str) -> Resolution | None:
        """Resolve ``value`` and keep the result as the current item list.

        Unexpected faults are logged and kept in ``error`` so the next
        keystroke can retry from a clean state.
        """
        self._ensure_open()
        self.value = value
        try:
            resolution = await self.resolver.resolve(value)
        except Exception as exc:
            logger.exception("Failed to resolve %r", value)
            self.resolution = None
            self.error = str(exc) or exc.__class__.__name__
            return None
        self.resolution = resolution
        self.error = None
        return resolution

    async def change_directory(self, path: str) -> Resolution | None:
        """Move the base directory and re-list from an empty input."""
        self._ensure_open()
        self.resolver.change_directory(path)
        return await self.update("")

    async def accept(self, label: str) -> AcceptOutcome:
        """Handle accepting the row labelled ``label``.

        Directories become the base directory when the label equals the
        current input (or the input is ``..``); otherwise the label is put
        into the input. Anything else is opened as a document.
        """
        self._ensure_open()
        if not label:
            return AcceptOutcome.NOTHING

        target = self.resolver.resolve_relative(label)
        if await self.resolver.scanner.is_directory(target):
            if label == self.value or (self.value == ".." and label == ANCESTOR_LABEL):
                await self.change_directory(target)
                return AcceptOutcome.CHANGED_DIRECTORY
            await self.update(label)
            return AcceptOutcome.FILLED_INPUT

        self.host.open_document(target)
        self.dispose()
        return AcceptOutcome.OPENED_DOCUMENT

    # actions
    async def trigger(self, action: ActionKind, value: str) -> None:
        """Run ``action`` against the path typed or labelled as ``value``."""
        self._ensure_open()
        target = self.resolver.resolve_relative(value)

        if action is ActionKind.CREATE_FILE or action is ActionKind.CREATE_DIRECTORY:
            await self._create(target, is_file=action is ActionKind.CREATE_FILE)
            if action is ActionKind.CREATE_FILE:
                self.host.open_document(target)
                self.dispose()
            else:
                await self.change_directory(target)
            return

        if action is ActionKind.CHANGE_DIRECTORY:
            await self.change_directory(target)
            return

        if action is ActionKind.OPEN_BESIDE:
            self.host.open_document(target, beside=True)
            self.dispose()
            return

        if action is ActionKind.OPEN_WINDOW:
            self.dispose()
            self.host.open_window(trim_dir_suffix(target))
            return

        if action is ActionKind.WORKSPACE_ADD:
            self.dispose()
            self.host.add_workspace_folder(trim_dir_suffix(target))
            self.refresh_workspace_roots()
            return

        if action is ActionKind.WORKSPACE_REMOVE:
            self.dispose()
            self.host.remove_workspace_folder(trim_dir_suffix(target))
            self.refresh_workspace_roots()
            return

        raise ValueError(f"unsupported action: {action!r}")

    async def _create(self, target: str, *, is_file: bool) -> None:
        filesystem = self.resolver.scanner.filesystem
        try:
            await filesystem.stat(target)
        except OSError:
            pass
        else:
            return

        directory = parent_directory(target) if is_file else target
        await filesystem.create_directory(trim_dir_suffix(directory), recursive=True)
        if is_file:
            await filesystem.create_empty_file(target)
        self._flush_created(target)

    def _flush_created(self, target: str) -> None:
        """Evict records invalidated by creating ``target`` and missing parents.

        Walks upward past uncached or errored ancestors (errored ones did not
        exist before) and stops after evicting the first healthy cached one.
        """
        scanner = self.resolver.scanner
        current = target
        while True:
            scanner.flush_entry(current)
            if is_filesystem_root(current):
                return
            parent = parent_directory(current)
            record = scanner.get_record(parent)
            if record is not None and not record.errored:
                scanner.flush_entry(parent)
                return
            current = parent


__all__ = [
    "AcceptOutcome",
    "QuickOpenSession",
    "SessionHost",
]
