"""
Install plan — the top of the action tree and the receipt format.

The plan is built by discovery only, then executed top-down. Actions
run one after another in plan order; revert walks them in reverse.
The first failing action stops the walk, and the plan is left exactly
as far as it got, so re-running execute/revert resumes it.

Flow:
    settings → plan (discovery) → execute → receipt → [revert]
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from unwind import __version__
from unwind.core.actions import Action, ConfigureNix
from unwind.core.models.action import ActionDescription, ActionState
from unwind.core.models.settings import InstallSettings

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class InstallPlan(BaseModel):
    """An ordered list of actions plus enough metadata to resume it."""

    version: str = __version__
    planned_at: str = Field(default_factory=_now_iso)
    actions: list[Action] = Field(default_factory=list)

    @classmethod
    def plan(cls, settings: InstallSettings) -> InstallPlan:
        """Discover the host and build the default plan.

        Raises:
            ActionError: If discovery fails (nothing has been changed).
        """
        logger.info("Planning install (store root %s)", settings.store_root)
        return cls(actions=[ConfigureNix.plan(settings)])

    # ── Introspection ────────────────────────────────────────────

    def describe_execute(self) -> list[ActionDescription]:
        return [d for action in self.actions for d in action.describe_execute()]

    def describe_revert(self) -> list[ActionDescription]:
        return [d for action in reversed(self.actions) for d in action.describe_revert()]

    @property
    def completed(self) -> bool:
        return all(a.action_state == ActionState.COMPLETED for a in self.actions)

    @property
    def reverted(self) -> bool:
        return all(a.action_state == ActionState.UNCOMPLETED for a in self.actions)

    # ── Execution ────────────────────────────────────────────────

    def execute(self, on_progress: Callable[[InstallPlan], Any] | None = None) -> None:
        """Execute every action in order.

        Args:
            on_progress: Called with the plan after each action finishes,
                so a driver can persist the receipt as it goes.

        Raises:
            ActionError: The first action failure (later actions untouched).
            TaskCrashedError: A worker inside a composite crashed.
        """
        for action in self.actions:
            action.execute()
            logger.info("✓ %s", action.label)
            if on_progress:
                on_progress(self)

    def revert(self, on_progress: Callable[[InstallPlan], Any] | None = None) -> None:
        """Revert every action in reverse order (see ``execute``)."""
        for action in reversed(self.actions):
            action.revert()
            logger.info("↺ %s", action.label)
            if on_progress:
                on_progress(self)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
