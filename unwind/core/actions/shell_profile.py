"""
ConfigureShellProfile — make every existing system shell profile source Nix.

One CreateOrAppendFile child per profile target that already exists on
the host. Targets that do not exist are skipped at plan time, never
created.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import Field

from unwind.core.actions.composite import CompositeAction
from unwind.core.actions.errors import (
    ActionError,
    ChildActionError,
    DiscoveryError,
    MultipleChildErrors,
)
from unwind.core.actions.files import CreateOrAppendFile, CreateOrAppendFileError
from unwind.core.models.action import ActionDescription
from unwind.core.models.settings import DEFAULT_PROFILE_NIX_FILE, PROFILE_TARGETS

logger = logging.getLogger(__name__)


def profile_block(profile_nix_file: str) -> str:
    """The marker block appended to each shell profile."""
    return (
        "\n"
        "# Nix\n"
        f"if [ -e '{profile_nix_file}' ]; then\n"
        f"  . '{profile_nix_file}'\n"
        "fi\n"
        "# End Nix\n"
        "\n"
    )


# ── Errors ──────────────────────────────────────────────────────


class ConfigureShellProfileError(ActionError):
    """Any failure of a ConfigureShellProfile action."""


class ShellProfileFileError(ConfigureShellProfileError, ChildActionError):
    label = "Creating or appending to file"


class ShellProfileFileDiscoveryError(ConfigureShellProfileError, ChildActionError, DiscoveryError):
    label = "Planning file"


class MultipleShellProfileErrors(ConfigureShellProfileError, MultipleChildErrors):
    pass


# ── Action ──────────────────────────────────────────────────────


class ConfigureShellProfile(CompositeAction):
    """Append the Nix block to each existing shell profile, concurrently."""

    label: ClassVar[str] = "Configure shell profile"
    child_field: ClassVar[str] = "create_or_append_files"
    child_errors: ClassVar = ((CreateOrAppendFileError, ShellProfileFileError),)
    multiple_error: ClassVar = MultipleShellProfileErrors

    action_name: Literal["configure_shell_profile"] = "configure_shell_profile"
    create_or_append_files: list[CreateOrAppendFile] = Field(default_factory=list)

    @classmethod
    def plan(
        cls,
        targets: list[str] | None = None,
        *,
        profile_nix_file: str = DEFAULT_PROFILE_NIX_FILE,
    ) -> ConfigureShellProfile:
        """Plan one append per existing target.

        Raises:
            ShellProfileFileDiscoveryError: If a child cannot be planned.
        """
        buf = profile_block(profile_nix_file)
        create_or_append_files: list[CreateOrAppendFile] = []
        for target in targets if targets is not None else PROFILE_TARGETS:
            path = Path(target)
            if not path.exists():
                logger.debug("Not planning to edit `%s` as it does not exist", target)
                continue
            try:
                create_or_append_files.append(CreateOrAppendFile.plan(path, buf, mode=0o644))
            except CreateOrAppendFileError as e:
                raise ShellProfileFileDiscoveryError(e) from e
        return cls(create_or_append_files=create_or_append_files)

    def execute_description(self) -> ActionDescription:
        return ActionDescription(
            "Configure the shell profiles",
            [
                "Update shell profiles to import Nix",
                *(f"Append to `{child.path}`" for child in self.create_or_append_files),
            ],
        )

    def revert_description(self) -> ActionDescription:
        return ActionDescription(
            "Unconfigure the shell profiles",
            [
                "Update shell profiles to no longer import Nix",
                *(f"Edit `{child.path}`" for child in self.create_or_append_files),
            ],
        )
