"""
Hopper - Planning workflow core.

Reads the .planning/ markdown record of a project and answers two questions:
- Where are we? (phases, decisions, session continuity, progress)
- What next? (exactly one recommended action)

Also runs the resumable user acceptance testing flow and records the
issues it finds.

Pure Python. Text generation, git and UI rendering live elsewhere.
"""

__version__ = "0.1.0"

from hopper.project import build_project_state
from hopper.router import route, Action, ActionKind
from hopper.verification import VerificationService

__all__ = [
    "build_project_state",
    "route",
    "Action",
    "ActionKind",
    "VerificationService",
]
