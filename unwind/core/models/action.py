"""
Action state and description models — the vocabulary of the engine.

Every action carries exactly one ActionState. Descriptions are never
stored: they are recomputed from the current state each time a driver
asks what an action would do.

State machine:
    Uncompleted --execute--> Completed --revert--> Uncompleted

InProgress is a transient marker composites hold while children are
in flight. A composite whose children failed stays InProgress so the
next execute/revert resumes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ActionState(StrEnum):
    """Completion state of a single action."""

    UNCOMPLETED = "Uncompleted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class ActionDescription:
    """Human-readable summary of a pending mutation (for dry runs)."""

    title: str
    explanation: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "explanation": list(self.explanation),
        }
