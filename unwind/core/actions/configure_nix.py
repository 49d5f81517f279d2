"""
ConfigureNix — bring a freshly unpacked store into a usable state.

Heterogeneous composite: seeds the default profile and wires the shell
profiles at the same time. The two steps touch unrelated host state,
so they run concurrently like any other composite's children.
"""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal

from pydantic import Field

from unwind.core.actions.composite import CompositeAction
from unwind.core.actions.errors import (
    ActionError,
    ChildActionError,
    DiscoveryError,
    MultipleChildErrors,
)
from unwind.core.actions.profile import SetupDefaultProfile, SetupDefaultProfileError
from unwind.core.actions.shell_profile import ConfigureShellProfile, ConfigureShellProfileError
from unwind.core.models.action import ActionDescription
from unwind.core.models.settings import InstallSettings

ConfigureNixStep = Annotated[
    SetupDefaultProfile | ConfigureShellProfile,
    Field(discriminator="action_name"),
]


# ── Errors ──────────────────────────────────────────────────────


class ConfigureNixError(ActionError):
    """Any failure of a ConfigureNix action."""


class DefaultProfileStepError(ConfigureNixError, ChildActionError):
    label = "Setting up the default profile"


class ShellProfileStepError(ConfigureNixError, ChildActionError):
    label = "Configuring the shell profile"


class DefaultProfileDiscoveryError(ConfigureNixError, ChildActionError, DiscoveryError):
    label = "Planning the default profile"


class ShellProfileDiscoveryError(ConfigureNixError, ChildActionError, DiscoveryError):
    label = "Planning the shell profile"


class MultipleConfigureNixErrors(ConfigureNixError, MultipleChildErrors):
    pass


# ── Action ──────────────────────────────────────────────────────


class ConfigureNix(CompositeAction):
    """Default profile + shell profiles, run side by side."""

    label: ClassVar[str] = "Configure Nix"
    child_field: ClassVar[str] = "steps"
    child_errors: ClassVar = (
        (SetupDefaultProfileError, DefaultProfileStepError),
        (ConfigureShellProfileError, ShellProfileStepError),
    )
    multiple_error: ClassVar = MultipleConfigureNixErrors

    action_name: Literal["configure_nix"] = "configure_nix"
    steps: list[ConfigureNixStep] = Field(default_factory=list)

    @classmethod
    def plan(cls, settings: InstallSettings) -> ConfigureNix:
        """Plan both steps from settings.

        Raises:
            DefaultProfileDiscoveryError: The store lacks a required package.
            ShellProfileDiscoveryError: A profile target cannot be planned.
        """
        try:
            setup_default_profile = SetupDefaultProfile.plan(
                settings.channels,
                store_root=settings.store_root,
                ssl_cert_file=settings.ssl_cert_file,
            )
        except SetupDefaultProfileError as e:
            raise DefaultProfileDiscoveryError(e) from e
        try:
            configure_shell_profile = ConfigureShellProfile.plan(
                settings.profile_targets,
                profile_nix_file=settings.profile_nix_file,
            )
        except ConfigureShellProfileError as e:
            raise ShellProfileDiscoveryError(e) from e
        return cls(steps=[setup_default_profile, configure_shell_profile])

    def execute_description(self) -> ActionDescription:
        explanation: list[str] = []
        for step in self.steps:
            for description in step.describe_execute():
                explanation.append(description.title)
        return ActionDescription("Configure Nix", explanation)

    def revert_description(self) -> ActionDescription:
        explanation: list[str] = []
        for step in self.steps:
            for description in step.describe_revert():
                explanation.append(description.title)
        return ActionDescription("Unconfigure Nix", explanation)
