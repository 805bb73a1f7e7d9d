"""Closed set of picker actions and the rules for offering them.

Callers dispatch on ``ActionKind`` members; nothing compares action objects
by identity.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import TYPE_CHECKING

from .path_utils import is_dot, trim_dir_suffix

if TYPE_CHECKING:
    from .resolver.types import ResolvedEntry


class ActionKind(Enum):
    """Every action a consumer can trigger on an input or an entry."""

    CREATE_FILE = "create_file"
    CREATE_DIRECTORY = "create_directory"
    CHANGE_DIRECTORY = "change_directory"
    OPEN_WINDOW = "open_window"
    OPEN_BESIDE = "open_beside"
    WORKSPACE_ADD = "workspace_add"
    WORKSPACE_REMOVE = "workspace_remove"

    @property
    def tooltip(self) -> str:
        return ACTION_TOOLTIPS[self]


ACTION_TOOLTIPS: dict[ActionKind, str] = {
    ActionKind.CREATE_FILE: "Create new file using input as path",
    ActionKind.CREATE_DIRECTORY: "Create new directory using input as path",
    ActionKind.CHANGE_DIRECTORY: "Change starting directory",
    ActionKind.OPEN_WINDOW: "Open window",
    ActionKind.OPEN_BESIDE: "Open to the side",
    ActionKind.WORKSPACE_ADD: "Add to workspace",
    ActionKind.WORKSPACE_REMOVE: "Remove from workspace",
}

FILE_ACTIONS: tuple[ActionKind, ...] = (ActionKind.OPEN_BESIDE,)


def directory_actions(is_workspace_root: bool) -> tuple[ActionKind, ...]:
    workspace_action = ActionKind.WORKSPACE_REMOVE if is_workspace_root else ActionKind.WORKSPACE_ADD
    return (workspace_action, ActionKind.OPEN_WINDOW, ActionKind.CHANGE_DIRECTORY)


def entry_actions(entry: ResolvedEntry) -> tuple[ActionKind, ...]:
    """Return per-row actions for one resolved entry."""
    if entry.is_dir:
        return directory_actions(entry.is_workspace_root)
    return FILE_ACTIONS


def input_actions(
    raw_input: str,
    *,
    input_is_directory: bool,
    input_is_workspace_root: bool = False,
) -> tuple[ActionKind, ...]:
    """Return title-bar actions for the literal input.

    An existing directory gets directory actions. Otherwise an input with a
    final name that is not ``.``/``..`` offers creation: a directory when it
    ends with a separator, a file otherwise.
    """
    if input_is_directory:
        return directory_actions(input_is_workspace_root)
    name = os.path.basename(trim_dir_suffix(raw_input))
    if not name or is_dot(raw_input) or is_dot(name):
        return ()
    if raw_input.endswith(os.sep):
        return (ActionKind.CREATE_DIRECTORY,)
    return (ActionKind.CREATE_FILE,)


__all__ = [
    "ActionKind",
    "ACTION_TOOLTIPS",
    "FILE_ACTIONS",
    "directory_actions",
    "entry_actions",
    "input_actions",
]
