"""
Actions — every concrete step the engine knows how to apply and undo.

``Action`` is the closed union of all concrete action types, tagged by
``action_name``. Plans store ``list[Action]``, so a receipt written by
one process loads back into the exact same types in another.

    from unwind.core.actions import Action, parse_action, dump_action
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, TypeAdapter

from unwind.core.actions.actionable import Actionable
from unwind.core.actions.composite import CompositeAction, run_children
from unwind.core.actions.configure_nix import ConfigureNix, ConfigureNixError
from unwind.core.actions.errors import (
    ActionError,
    ChildActionError,
    DiscoveryError,
    MultipleChildErrors,
    TaskCrashedError,
)
from unwind.core.actions.files import CreateOrAppendFile, CreateOrAppendFileError
from unwind.core.actions.profile import SetupDefaultProfile, SetupDefaultProfileError
from unwind.core.actions.shell_profile import ConfigureShellProfile, ConfigureShellProfileError

Action = Annotated[
    CreateOrAppendFile | SetupDefaultProfile | ConfigureShellProfile | ConfigureNix,
    Field(discriminator="action_name"),
]

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(data: dict[str, Any]) -> Actionable:
    """Rebuild a concrete action from its serialized form."""
    return _action_adapter.validate_python(data)


def dump_action(action: Actionable) -> dict[str, Any]:
    """Serialize any concrete action (state included) to JSON-ready data."""
    return _action_adapter.dump_python(action, mode="json")


__all__ = [
    "Action",
    "ActionError",
    "Actionable",
    "ChildActionError",
    "CompositeAction",
    "ConfigureNix",
    "ConfigureNixError",
    "ConfigureShellProfile",
    "ConfigureShellProfileError",
    "CreateOrAppendFile",
    "CreateOrAppendFileError",
    "DiscoveryError",
    "MultipleChildErrors",
    "SetupDefaultProfile",
    "SetupDefaultProfileError",
    "TaskCrashedError",
    "dump_action",
    "parse_action",
    "run_children",
]
