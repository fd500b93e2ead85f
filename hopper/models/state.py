"""
State models for the current position and session continuity.

STATE.md is source of truth (human-editable). ProjectState is an aggregate
rebuilt fresh on every call from ROADMAP.md + STATE.md; it is not persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hopper.models.roadmap import Milestone, Phase


@dataclass
class SessionContinuity:
    """Session continuity for handoff/resume.

    Every field is optional; a missing line in STATE.md leaves it unset.
    """
    last_session: Optional[str] = None  # Date or datetime as written
    stopped_at: Optional[str] = None  # Where work stopped
    resume_file: Optional[str] = None  # "None" in STATE.md becomes None
    next: Optional[str] = None  # Suggested next action

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_session": self.last_session,
            "stopped_at": self.stopped_at,
            "resume_file": self.resume_file,
            "next": self.next,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionContinuity":
        return cls(
            last_session=data.get("last_session"),
            stopped_at=data.get("stopped_at"),
            resume_file=data.get("resume_file"),
            next=data.get("next"),
        )


@dataclass
class ProjectState:
    """Everything the router needs to know about the project."""
    phases: List[Phase] = field(default_factory=list)
    current_phase: Optional[float] = None
    total_phases: int = 0

    decisions: List[str] = field(default_factory=list)  # "<phase>: <decision>", last 5
    issues: List[str] = field(default_factory=list)  # Project-level ISS-NNN lines
    milestones: List[Milestone] = field(default_factory=list)

    session_continuity: Optional[SessionContinuity] = None
    progress_percent: int = 0

    has_handoff: bool = False
    interrupted_agent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phases": [p.to_dict() for p in self.phases],
            "current_phase": self.current_phase,
            "total_phases": self.total_phases,
            "decisions": self.decisions,
            "issues": self.issues,
            "milestones": [m.to_dict() for m in self.milestones],
            "session_continuity": self.session_continuity.to_dict() if self.session_continuity else None,
            "progress_percent": self.progress_percent,
            "has_handoff": self.has_handoff,
            "interrupted_agent_id": self.interrupted_agent_id,
        }

    def get_phase(self, number: Optional[float]) -> Optional[Phase]:
        """Get a phase by number."""
        if number is None:
            return None
        for phase in self.phases:
            if phase.number == number:
                return phase
        return None

    def get_next_phase(self) -> Optional[Phase]:
        """Get the phase after the current one, in numeric order."""
        if self.current_phase is None:
            return None
        for phase in self.phases:
            if phase.number > self.current_phase:
                return phase
        return None

    def get_current_milestone(self) -> Optional[Milestone]:
        """Get the milestone covering the current phase."""
        if self.current_phase is None:
            return None
        for milestone in self.milestones:
            if milestone.covers(self.current_phase):
                return milestone
        return None

    def suggestion(self) -> Optional[str]:
        """STATE.md's recorded next-step hint, if any."""
        if self.session_continuity and self.session_continuity.next:
            return self.session_continuity.next
        return None
