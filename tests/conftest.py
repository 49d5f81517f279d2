"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from tests.fake_actions import CALLS
from unwind.adapters.shell.command import CommandError, CommandResult
from unwind.core.actions.profile import SSL_CERT_FILE_VAR


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch):
    """Reset the fake call log and restore NIX_SSL_CERT_FILE after each test."""
    CALLS.clear()
    # setenv records the original value, so the later delenv is undone too
    monkeypatch.setenv(SSL_CERT_FILE_VAR, "placeholder")
    monkeypatch.delenv(SSL_CERT_FILE_VAR)
    yield
    CALLS.clear()


@pytest.fixture
def nix_store(tmp_path: Path) -> Path:
    """An unpacked store with one nix and one nss-cacert package."""
    store = tmp_path / "nix" / "store"
    (store / "0a1b2c-nix-2.11.0" / "bin").mkdir(parents=True)
    (store / "3d4e5f-nss-cacert-3.83").mkdir(parents=True)
    (store / "6g7h8i-bash-5.1").mkdir(parents=True)
    return store


class CommandRecorder:
    """Stands in for execute_command; records calls, can fail on demand."""

    def __init__(self):
        self.calls: list[tuple[list[str], dict[str, str] | None]] = []
        self.fail_on: str | None = None

    def __call__(self, cmd, *, env_overrides=None, **kwargs) -> CommandResult:
        args = [str(part) for part in cmd]
        self.calls.append((args, env_overrides))
        if self.fail_on and self.fail_on in " ".join(args):
            raise CommandError(args, "exited with code 1", return_code=1, stderr="boom")
        return CommandResult(command=args)

    @property
    def commands(self) -> list[list[str]]:
        return [args for args, _ in self.calls]


@pytest.fixture
def commands(monkeypatch) -> CommandRecorder:
    """Replace the external command runner used by SetupDefaultProfile."""
    recorder = CommandRecorder()
    monkeypatch.setattr("unwind.core.actions.profile.execute_command", recorder)
    return recorder


@pytest.fixture
def profile_targets(tmp_path: Path) -> dict[str, Path]:
    """Three shell profile targets; only bashrc and zshrc exist."""
    etc = tmp_path / "etc"
    (etc / "profile.d").mkdir(parents=True)
    bashrc = etc / "bashrc"
    zshrc = etc / "zshrc"
    bashrc.write_text("# system bashrc\n")
    zshrc.write_text("# system zshrc\n")
    return {
        "bashrc": bashrc,
        "zshrc": zshrc,
        "nix.sh": etc / "profile.d" / "nix.sh",
    }
