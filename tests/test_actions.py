"""
Tests for the action contract — state machine, idempotency, descriptions.
"""

import pytest

from tests.fake_actions import FakeStep, FakeStepError, executed, reverted
from unwind.core.models.action import ActionDescription, ActionState

# ── Models ───────────────────────────────────────────────────────────


class TestActionState:
    def test_values_are_serialized_names(self):
        assert ActionState.UNCOMPLETED == "Uncompleted"
        assert ActionState.IN_PROGRESS == "InProgress"
        assert ActionState.COMPLETED == "Completed"

    def test_default_state_is_uncompleted(self):
        assert FakeStep(name="a").action_state == ActionState.UNCOMPLETED


class TestActionDescription:
    def test_to_dict(self):
        d = ActionDescription("Title", ["one", "two"]).to_dict()
        assert d == {"title": "Title", "explanation": ["one", "two"]}

    def test_explanation_defaults_empty(self):
        assert ActionDescription("Title").explanation == []


# ── State machine ────────────────────────────────────────────────────


class TestExecute:
    def test_execute_completes(self):
        step = FakeStep(name="a")
        step.execute()
        assert step.action_state == ActionState.COMPLETED
        assert executed() == ["a"]

    def test_execute_is_idempotent(self):
        step = FakeStep(name="a")
        step.execute()
        step.execute()
        assert executed() == ["a"]
        assert step.action_state == ActionState.COMPLETED

    def test_failed_execute_leaves_state_unchanged(self):
        step = FakeStep(name="a", fail=True)
        with pytest.raises(FakeStepError):
            step.execute()
        assert step.action_state == ActionState.UNCOMPLETED

    def test_retry_after_failure(self):
        step = FakeStep(name="a", fail=True)
        with pytest.raises(FakeStepError):
            step.execute()
        step.fail = False
        step.execute()
        assert step.action_state == ActionState.COMPLETED
        assert executed() == ["a"]


class TestRevert:
    def test_revert_uncompleted_is_noop(self):
        step = FakeStep(name="a")
        step.revert()
        assert reverted() == []
        assert step.action_state == ActionState.UNCOMPLETED

    def test_revert_after_execute(self):
        step = FakeStep(name="a")
        step.execute()
        step.revert()
        assert step.action_state == ActionState.UNCOMPLETED
        assert reverted() == ["a"]

    def test_revert_is_idempotent(self):
        step = FakeStep(name="a")
        step.execute()
        step.revert()
        step.revert()
        assert reverted() == ["a"]

    def test_failed_revert_stays_completed(self):
        step = FakeStep(name="a")
        step.execute()
        step.fail = True
        with pytest.raises(FakeStepError):
            step.revert()
        assert step.action_state == ActionState.COMPLETED

    def test_execute_revert_cycle_repeats(self):
        step = FakeStep(name="a")
        step.execute()
        step.revert()
        step.execute()
        assert executed() == ["a", "a"]
        assert step.action_state == ActionState.COMPLETED


# ── Descriptions ─────────────────────────────────────────────────────


class TestDescriptions:
    def test_describe_execute_pending(self):
        step = FakeStep(name="a")
        descriptions = step.describe_execute()
        assert len(descriptions) == 1
        assert descriptions[0].title == "Run a"

    def test_describe_execute_empty_once_completed(self):
        step = FakeStep(name="a")
        step.execute()
        assert step.describe_execute() == []

    def test_describe_revert_empty_when_uncompleted(self):
        assert FakeStep(name="a").describe_revert() == []

    def test_describe_revert_after_execute(self):
        step = FakeStep(name="a")
        step.execute()
        assert [d.title for d in step.describe_revert()] == ["Undo a"]

    def test_in_progress_describes_both_ways(self):
        step = FakeStep(name="a", action_state=ActionState.IN_PROGRESS)
        assert len(step.describe_execute()) == 1
        assert len(step.describe_revert()) == 1

    def test_describe_has_no_side_effects(self):
        step = FakeStep(name="a")
        step.describe_execute()
        step.describe_revert()
        assert executed() == []
        assert step.action_state == ActionState.UNCOMPLETED
