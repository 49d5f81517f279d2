"""
Actionable — the four-operation contract every action obeys.

    describe_execute() → [] once Completed, else one description
    execute()          → no-op once Completed, else mutate → Completed
    describe_revert()  → [] once Uncompleted, else one description
    revert()           → no-op once Uncompleted, else undo → Uncompleted

Subclasses implement ``_execute``/``_revert`` and the two description
builders. State only changes here, after the subclass hook returns. A
hook that raises leaves the state untouched, so calling execute/revert
again retries exactly what did not finish.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from pydantic import BaseModel

from unwind.core.models.action import ActionDescription, ActionState

logger = logging.getLogger(__name__)


class Actionable(BaseModel, ABC):
    """Base model for leaf and composite actions."""

    # Short human label used in log lines ("Configuring shell profile")
    label: ClassVar[str] = "action"

    action_state: ActionState = ActionState.UNCOMPLETED

    # ── Descriptions ─────────────────────────────────────────────

    @abstractmethod
    def execute_description(self) -> ActionDescription:
        """Describe the mutation ``execute`` would perform."""

    @abstractmethod
    def revert_description(self) -> ActionDescription:
        """Describe the compensating change ``revert`` would perform."""

    def describe_execute(self) -> list[ActionDescription]:
        if self.action_state == ActionState.COMPLETED:
            return []
        return [self.execute_description()]

    def describe_revert(self) -> list[ActionDescription]:
        if self.action_state == ActionState.UNCOMPLETED:
            return []
        return [self.revert_description()]

    # ── State machine ────────────────────────────────────────────

    @abstractmethod
    def _execute(self) -> None:
        """Perform the mutation. Raise an ActionError on failure."""

    @abstractmethod
    def _revert(self) -> None:
        """Undo the mutation. Raise an ActionError on failure."""

    def execute(self) -> None:
        if self.action_state == ActionState.COMPLETED:
            logger.debug("Already completed: %s", self.label)
            return
        logger.debug("Executing: %s", self.label)
        self._execute()
        self.action_state = ActionState.COMPLETED
        logger.debug("Completed: %s", self.label)

    def revert(self) -> None:
        if self.action_state == ActionState.UNCOMPLETED:
            logger.debug("Already reverted: %s", self.label)
            return
        logger.debug("Reverting: %s", self.label)
        self._revert()
        self.action_state = ActionState.UNCOMPLETED
        logger.debug("Reverted: %s", self.label)
