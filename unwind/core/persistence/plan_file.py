"""
Plan file persistence — atomic read/write for the install receipt.

The receipt is the serialized InstallPlan, action states included.
Writes are atomic (write to temp file, then rename) so a crash mid-run
never leaves a half-written receipt behind.

Unlike disposable state, a receipt is the only record of what was
changed on the host: a corrupt one is an error, never silently replaced.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from pydantic import ValidationError

from unwind.core.engine.plan import InstallPlan

logger = logging.getLogger(__name__)


class PlanFileError(Exception):
    """Raised when a receipt exists but cannot be read or understood."""


def load_plan(path: Path) -> InstallPlan | None:
    """Load an install receipt.

    Returns:
        The plan, or None if no receipt exists at ``path``.

    Raises:
        PlanFileError: If the file is unreadable, not JSON, or not a plan.
    """
    if not path.is_file():
        logger.debug("No receipt at %s", path)
        return None

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PlanFileError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PlanFileError(f"Corrupt receipt {path}: {e}") from e

    try:
        plan = InstallPlan.model_validate(data)
    except ValidationError as e:
        raise PlanFileError(f"Invalid receipt {path}: {e}") from e

    logger.debug("Loaded receipt from %s (planned_at=%s)", path, plan.planned_at)
    return plan


def save_plan(plan: InstallPlan, path: Path) -> None:
    """Save an install receipt (atomic write).

    Raises:
        OSError: If the receipt cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(plan.to_dict(), indent=2, ensure_ascii=False) + "\n"

    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".receipt_",
        suffix=".tmp",
    )
    tmp = Path(tmp_path)
    try:
        with open(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
        logger.debug("Receipt saved to %s", path)
    except Exception:
        tmp.unlink(missing_ok=True)
        logger.error("Failed to save receipt to %s", path)
        raise
