"""
SetupDefaultProfile — seed the default Nix profile from the unpacked store.

Planning finds the ``nix`` and ``nss-cacert`` packages in the store.
Execution installs both into the default profile, exports
NIX_SSL_CERT_FILE, and updates channels when any were given.

Discovery policy: when a pattern matches several store paths, the
first one in lexicographic order is used and the others are logged.

Revert only unsets NIX_SSL_CERT_FILE. Installed packages stay in the
profile: removing them from underneath a running Nix is not supported
at this layer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import Field

from unwind.adapters.shell.command import CommandError, execute_command
from unwind.adapters.shell.environment import set_env, unset_env
from unwind.adapters.shell.filesystem import PatternError, glob_paths
from unwind.core.actions.actionable import Actionable
from unwind.core.actions.errors import ActionError, DiscoveryError
from unwind.core.models.action import ActionDescription
from unwind.core.models.settings import DEFAULT_SSL_CERT_FILE, DEFAULT_STORE_ROOT

logger = logging.getLogger(__name__)

SSL_CERT_FILE_VAR = "NIX_SSL_CERT_FILE"

NIX_PACKAGE_PATTERN = "*-nix-*"
NSS_CACERT_PACKAGE_PATTERN = "*-nss-cacert-*"


# ── Errors ──────────────────────────────────────────────────────


class SetupDefaultProfileError(ActionError):
    """Any failure of a SetupDefaultProfile action."""


class GlobPatternError(SetupDefaultProfileError, DiscoveryError):
    def __init__(self, cause: PatternError):
        super().__init__("Glob pattern error", cause=cause)


class NoPackageFoundError(SetupDefaultProfileError, DiscoveryError):
    def __init__(self, package: str, pattern: str):
        super().__init__(f"Unpacked Nix store does not include a `{package}` package ({pattern})")
        self.package = package
        self.pattern = pattern


class ProfileCommandError(SetupDefaultProfileError):
    def __init__(self, step: str, target: Path, cause: CommandError):
        super().__init__(f"Failed to {step} `{target}`", cause=cause)
        self.step = step
        self.target = target


# ── Discovery ───────────────────────────────────────────────────


def find_store_package(store_root: str, package: str, pattern: str) -> Path:
    """Return the first store path matching ``pattern``.

    Raises:
        GlobPatternError: The pattern is malformed.
        NoPackageFoundError: Nothing matched.
    """
    full_pattern = f"{store_root.rstrip('/')}/{pattern}"
    try:
        matches = glob_paths(full_pattern)
    except PatternError as e:
        raise GlobPatternError(e) from e

    found = next(matches, None)
    if found is None:
        raise NoPackageFoundError(package, full_pattern)

    ignored = list(matches)
    if ignored:
        logger.warning(
            "Found %d candidates for `%s`, using %s (ignored: %s)",
            len(ignored) + 1,
            package,
            found,
            ", ".join(str(p) for p in ignored),
        )
    return found


# ── Action ──────────────────────────────────────────────────────


class SetupDefaultProfile(Actionable):
    """Install nix + nss-cacert into the default profile and export the CA bundle."""

    label: ClassVar[str] = "Setup default profile"

    action_name: Literal["setup_default_profile"] = "setup_default_profile"
    channels: list[str] = Field(default_factory=list)
    nix_pkg: Path
    nss_ca_cert_pkg: Path
    ssl_cert_file: str = DEFAULT_SSL_CERT_FILE

    @classmethod
    def plan(
        cls,
        channels: list[str],
        *,
        store_root: str = DEFAULT_STORE_ROOT,
        ssl_cert_file: str = DEFAULT_SSL_CERT_FILE,
    ) -> SetupDefaultProfile:
        nix_pkg = find_store_package(store_root, "nix", NIX_PACKAGE_PATTERN)
        nss_ca_cert_pkg = find_store_package(store_root, "nss-cacert", NSS_CACERT_PACKAGE_PATTERN)
        return cls(
            channels=list(channels),
            nix_pkg=nix_pkg,
            nss_ca_cert_pkg=nss_ca_cert_pkg,
            ssl_cert_file=ssl_cert_file,
        )

    @property
    def nix_env(self) -> Path:
        return self.nix_pkg / "bin" / "nix-env"

    @property
    def nix_channel(self) -> Path:
        return self.nix_pkg / "bin" / "nix-channel"

    def execute_description(self) -> ActionDescription:
        explanation = [
            f"Install `{self.nix_pkg}` into the default profile",
            f"Install `{self.nss_ca_cert_pkg}` into the default profile",
            f"Set `{SSL_CERT_FILE_VAR}` to `{self.ssl_cert_file}`",
        ]
        if self.channels:
            explanation.append(f"Update channels: {', '.join(self.channels)}")
        return ActionDescription("Setup the default Nix profile", explanation)

    def revert_description(self) -> ActionDescription:
        return ActionDescription(
            "Unset the default Nix profile",
            [
                f"Unset `{SSL_CERT_FILE_VAR}`",
                "Installed packages are left in the default profile",
            ],
        )

    def _execute(self) -> None:
        self._run("install", self.nix_pkg, [self.nix_env, "-i", self.nix_pkg])
        self._run("install", self.nss_ca_cert_pkg, [self.nix_env, "-i", self.nss_ca_cert_pkg])

        set_env(SSL_CERT_FILE_VAR, self.ssl_cert_file)

        if self.channels:
            self._run(
                "update channels with",
                self.nix_pkg,
                [self.nix_channel, "--update", *self.channels],
                env_overrides={SSL_CERT_FILE_VAR: self.ssl_cert_file},
            )

    def _revert(self) -> None:
        unset_env(SSL_CERT_FILE_VAR)

    def _run(
        self,
        step: str,
        target: Path,
        cmd: list[str | Path],
        env_overrides: dict[str, str] | None = None,
    ) -> None:
        try:
            execute_command(cmd, env_overrides=env_overrides)
        except CommandError as e:
            raise ProfileCommandError(step, target, e) from e
