"""
Action errors — the failure contract between actions and drivers.

Every action type owns a subclass of ActionError; its variants are
further subclasses. Composite families add one ChildActionError
subclass per child error kind and one MultipleChildErrors subclass.

TaskCrashedError is deliberately outside this hierarchy: it means the
engine itself failed to run a child, not that the child reported a
failure. It is never aggregated and never worth retrying blindly.
"""

from __future__ import annotations

from typing import Any


class ActionError(Exception):
    """Base class for every failure an action reports.

    Args:
        message: Human-readable summary.
        cause: Underlying exception (also chained as ``__cause__``).
    """

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Serialize for a driver or UI (the cause is rendered as text)."""
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if isinstance(self.cause, ActionError):
            data["cause"] = self.cause.to_dict()
        elif self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __str__(self) -> str:
        if self.cause is not None and not isinstance(self, ChildActionError):
            return f"{self.message}: {self.cause}"
        return self.message


class DiscoveryError(ActionError):
    """Planning-time failure — raised before any host mutation."""


class ChildActionError(ActionError):
    """Exactly one child of a composite failed; wraps that child's error."""

    label = "Child action failed"

    def __init__(self, error: ActionError):
        super().__init__(f"{self.label}: {error}", cause=error)
        self.error = error


class MultipleChildErrors(ActionError):
    """Two or more children of a composite failed in one fan-out round."""

    def __init__(self, errors: list[ActionError]):
        joined = " & ".join(str(e) for e in errors)
        super().__init__(f"Multiple errors: {joined}")
        self.errors = list(errors)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.errors]
        return data


class TaskCrashedError(Exception):
    """A worker running a child action raised something that is not an ActionError."""

    def __init__(self, action_name: str, error: BaseException):
        super().__init__(f"Worker for '{action_name}' crashed: {error!r}")
        self.action_name = action_name
        self.error = error
        self.__cause__ = error

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": type(self).__name__,
            "message": str(self),
            "action": self.action_name,
        }
