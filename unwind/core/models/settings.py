"""
Install settings — what the planner needs to know about the host.

Loaded from unwind.yml. Every field has a default, so a missing
file plans a standard multi-user Nix layout.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_STORE_ROOT = "/nix/store"
DEFAULT_SSL_CERT_FILE = "/nix/var/nix/profiles/default/etc/ssl/certs/ca-bundle.crt"
DEFAULT_PROFILE_NIX_FILE = "/nix/var/nix/profiles/default/etc/profile.d/nix-daemon.sh"
DEFAULT_RECEIPT_PATH = "unwind-receipt.json"

PROFILE_TARGETS = [
    "/etc/bashrc",
    "/etc/profile.d/nix.sh",
    "/etc/zshrc",
    "/etc/bash.bashrc",
    "/etc/zsh/zshrc",
]


class InstallSettings(BaseModel):
    """Planner inputs — loaded from unwind.yml."""

    store_root: str = DEFAULT_STORE_ROOT
    channels: list[str] = Field(default_factory=list)
    profile_targets: list[str] = Field(default_factory=lambda: list(PROFILE_TARGETS))
    profile_nix_file: str = DEFAULT_PROFILE_NIX_FILE
    ssl_cert_file: str = DEFAULT_SSL_CERT_FILE
    receipt_path: str = DEFAULT_RECEIPT_PATH
