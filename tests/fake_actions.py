"""
Test doubles — in-memory actions for exercising the engine itself.

FakeStep records what it did in CALLS instead of touching the host.
Each worker runs on a deep copy, so the log is module-level rather
than stored on the instance.
"""

from __future__ import annotations

import time
from typing import ClassVar, Literal

from pydantic import Field

from unwind.core.actions.actionable import Actionable
from unwind.core.actions.composite import CompositeAction
from unwind.core.actions.errors import ActionError, ChildActionError, MultipleChildErrors
from unwind.core.models.action import ActionDescription

# (operation, step name) in completion order
CALLS: list[tuple[str, str]] = []


class FakeStepError(ActionError):
    """A FakeStep was told to fail."""


class FakeStep(Actionable):
    label: ClassVar[str] = "Fake step"

    action_name: Literal["fake_step"] = "fake_step"
    name: str
    fail: bool = False
    crash: bool = False
    delay: float = 0.0

    def execute_description(self) -> ActionDescription:
        return ActionDescription(f"Run {self.name}", [f"Pretend to apply {self.name}"])

    def revert_description(self) -> ActionDescription:
        return ActionDescription(f"Undo {self.name}", [f"Pretend to undo {self.name}"])

    def _execute(self) -> None:
        self._act("execute")

    def _revert(self) -> None:
        self._act("revert")

    def _act(self, operation: str) -> None:
        if self.delay:
            time.sleep(self.delay)
        if self.crash:
            raise RuntimeError(f"{self.name} crashed")
        if self.fail:
            raise FakeStepError(f"{self.name} failed")
        CALLS.append((operation, self.name))


class FakeCompositeError(ActionError):
    pass


class FakeStepFailed(FakeCompositeError, ChildActionError):
    label = "Running fake step"


class MultipleFakeStepErrors(FakeCompositeError, MultipleChildErrors):
    pass


class FakeComposite(CompositeAction):
    label: ClassVar[str] = "Fake composite"
    child_field: ClassVar[str] = "steps"
    child_errors: ClassVar = ((FakeStepError, FakeStepFailed),)
    multiple_error: ClassVar = MultipleFakeStepErrors

    action_name: Literal["fake_composite"] = "fake_composite"
    steps: list[FakeStep] = Field(default_factory=list)

    def execute_description(self) -> ActionDescription:
        return ActionDescription("Run fake steps", [s.name for s in self.steps])

    def revert_description(self) -> ActionDescription:
        return ActionDescription("Undo fake steps", [s.name for s in self.steps])


def make_composite(*names: str, **overrides: dict) -> FakeComposite:
    """Build a composite of FakeSteps; ``overrides`` maps name → field values."""
    return FakeComposite(
        steps=[FakeStep(name=name, **overrides.get(name, {})) for name in names]
    )


def executed() -> list[str]:
    return [name for op, name in CALLS if op == "execute"]


def reverted() -> list[str]:
    return [name for op, name in CALLS if op == "revert"]
