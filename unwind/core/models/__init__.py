"""
Domain models — state and description types shared by every action.

    from unwind.core.models import ActionDescription, ActionState, InstallSettings
"""

from unwind.core.models.action import ActionDescription, ActionState
from unwind.core.models.settings import InstallSettings

__all__ = [
    # action.py
    "ActionDescription",
    "ActionState",
    # settings.py
    "InstallSettings",
]
