"""
Process environment — set/unset variables for this process and its children.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def set_env(name: str, value: str) -> None:
    """Set ``name`` for the current process and every command it spawns."""
    logger.debug("Setting %s=%s", name, value)
    os.environ[name] = value


def unset_env(name: str) -> None:
    """Remove ``name`` from the process environment (no-op if unset)."""
    if os.environ.pop(name, None) is not None:
        logger.debug("Unset %s", name)
