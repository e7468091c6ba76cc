# healthcomm/modules/care_team/__init__.py
"""Care team module: candidate scoring, assignment and escalation."""

from .care_team_controller import router

__all__ = ["router"]
