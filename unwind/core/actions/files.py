"""
CreateOrAppendFile — append a block of text to a file, creating it if needed.

Idempotent: if the file already contains the block, execute leaves the
content alone and only re-applies mode and ownership.

Revert only removes a block this action put there. Planning records
whether the block was already in the file (`preexisting`); execute sets
`appended` when the block is ours, including a block left behind by an
earlier run that failed after writing. Revert strips the first
occurrence only when `appended` is set, and deletes the file once it
is empty.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd
import shutil
from pathlib import Path
from typing import ClassVar, Literal

from unwind.core.actions.actionable import Actionable
from unwind.core.actions.errors import ActionError, DiscoveryError
from unwind.core.models.action import ActionDescription

logger = logging.getLogger(__name__)


# ── Errors ──────────────────────────────────────────────────────


class CreateOrAppendFileError(ActionError):
    """Any failure of a CreateOrAppendFile action."""


class ReadFileError(CreateOrAppendFileError):
    def __init__(self, path: Path, cause: OSError | UnicodeDecodeError):
        super().__init__(f"Reading `{path}`", cause=cause)
        self.path = path


class WriteFileError(CreateOrAppendFileError):
    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Writing `{path}`", cause=cause)
        self.path = path


class FileModeError(CreateOrAppendFileError):
    def __init__(self, path: Path, mode: int, cause: OSError):
        super().__init__(f"Setting mode {mode:#o} / ownership on `{path}`", cause=cause)
        self.path = path
        self.mode = mode


class OwnerError(CreateOrAppendFileError, DiscoveryError):
    def __init__(self, kind: str, name: str):
        super().__init__(f"No {kind} named `{name}` exists on this host")
        self.owner_kind = kind
        self.name = name


# ── Action ──────────────────────────────────────────────────────


class CreateOrAppendFile(Actionable):
    """Append ``buf`` to ``path`` (creating it with ``mode`` if missing)."""

    label: ClassVar[str] = "Create or append file"

    action_name: Literal["create_or_append_file"] = "create_or_append_file"
    path: Path
    user: str | None = None
    group: str | None = None
    mode: int = 0o644
    buf: str
    preexisting: bool = False
    appended: bool = False

    @classmethod
    def plan(
        cls,
        path: str | Path,
        buf: str,
        *,
        user: str | None = None,
        group: str | None = None,
        mode: int = 0o644,
    ) -> CreateOrAppendFile:
        """Plan an append. Owners are resolved now so a typo fails before any write.

        Raises:
            OwnerError: If ``user`` or ``group`` does not exist.
            ReadFileError: If an existing file cannot be inspected.
        """
        path = Path(path)
        if user is not None:
            try:
                pwd.getpwnam(user)
            except KeyError:
                raise OwnerError("user", user) from None
        if group is not None:
            try:
                grp.getgrnam(group)
            except KeyError:
                raise OwnerError("group", group) from None
        action = cls(path=path, user=user, group=group, mode=mode, buf=buf)
        if path.is_file():
            action.preexisting = buf in action._read()
            if action.preexisting:
                logger.debug("`%s` already contains the block, revert will keep it", path)
        return action

    def execute_description(self) -> ActionDescription:
        return ActionDescription(
            f"Create or append file `{self.path}`",
            [f"Append {len(self.buf)} bytes to `{self.path}` (mode {self.mode:#o})"],
        )

    def revert_description(self) -> ActionDescription:
        if not self.appended:
            return ActionDescription(
                f"Leave `{self.path}` as it is",
                ["The block was already there before install, so it is kept"],
            )
        return ActionDescription(
            f"Remove appended content from `{self.path}`",
            [f"Remove the block previously appended to `{self.path}`"],
        )

    def _execute(self) -> None:
        existing = self._read() if self.path.exists() else None

        if existing is not None and self.buf in existing:
            logger.debug("`%s` already contains the block, not appending", self.path)
            if not self.preexisting:
                # Written by an earlier run that failed before recording it
                self.appended = True
        else:
            try:
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(self.buf)
            except OSError as e:
                raise WriteFileError(self.path, e) from e
            self.appended = True

        try:
            os.chmod(self.path, self.mode)
            if self.user is not None or self.group is not None:
                shutil.chown(self.path, user=self.user, group=self.group)
        except (OSError, LookupError) as e:
            raise FileModeError(self.path, self.mode, e) from e

    def _revert(self) -> None:
        if not self.appended:
            logger.debug("Block in `%s` was not added by this action, keeping it", self.path)
            return
        if not self.path.exists():
            logger.debug("`%s` no longer exists, nothing to remove", self.path)
            self.appended = False
            return

        content = self._read()
        updated = content.replace(self.buf, "", 1)
        try:
            if updated:
                if updated != content:
                    self.path.write_text(updated, encoding="utf-8")
            else:
                self.path.unlink()
        except OSError as e:
            raise WriteFileError(self.path, e) from e
        self.appended = False

    def _read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadFileError(self.path, e) from e
