"""
Tests for receipt persistence — atomic save, load, corruption handling.
"""

import json
from pathlib import Path

import pytest

from unwind.core.actions import CreateOrAppendFile
from unwind.core.engine.plan import InstallPlan
from unwind.core.models.action import ActionState
from unwind.core.persistence.plan_file import PlanFileError, load_plan, save_plan


def _plan(tmp_path: Path) -> InstallPlan:
    return InstallPlan(actions=[CreateOrAppendFile.plan(tmp_path / "bashrc", "block\n")])


class TestPlanFile:
    def test_save_and_load(self, tmp_path: Path):
        """A receipt roundtrips through save/load, states included."""
        plan = _plan(tmp_path)
        plan.execute()
        path = tmp_path / "receipt.json"

        save_plan(plan, path)
        loaded = load_plan(path)

        assert loaded == plan
        assert loaded.actions[0].action_state == ActionState.COMPLETED

    def test_load_missing_returns_none(self, tmp_path: Path):
        assert load_plan(tmp_path / "nonexistent.json") is None

    def test_load_corrupt_raises(self, tmp_path: Path):
        """A corrupt receipt is an error, never silently replaced."""
        path = tmp_path / "receipt.json"
        path.write_text("not json at all {{{")
        with pytest.raises(PlanFileError, match="Corrupt"):
            load_plan(path)

    def test_load_invalid_schema_raises(self, tmp_path: Path):
        path = tmp_path / "receipt.json"
        path.write_text(json.dumps({"actions": [{"action_name": "nope"}]}))
        with pytest.raises(PlanFileError, match="Invalid"):
            load_plan(path)

    def test_save_creates_directories(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "receipt.json"
        save_plan(_plan(tmp_path), path)
        assert path.is_file()

    def test_save_leaves_no_temp_files(self, tmp_path: Path):
        path = tmp_path / "state" / "receipt.json"
        save_plan(_plan(tmp_path), path)
        save_plan(_plan(tmp_path), path)
        assert [p.name for p in path.parent.iterdir()] == ["receipt.json"]

    def test_saved_json_is_readable(self, tmp_path: Path):
        path = tmp_path / "receipt.json"
        save_plan(_plan(tmp_path), path)

        data = json.loads(path.read_text())
        assert data["version"] == "0.1.0"
        assert data["actions"][0]["action_name"] == "create_or_append_file"
        assert data["actions"][0]["action_state"] == "Uncompleted"
