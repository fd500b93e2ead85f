"""
Roadmap models: phases, plans and milestones.

ROADMAP.md is the source of truth (human-editable). These objects are
rebuilt from it on every call and never cached.

Phase numbers are decimal so inserted phases (2.1, 2.2) sort between their
surrounding integers.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


def format_phase_number(number: float) -> str:
    """Format a phase number the way ROADMAP.md writes it (1, 1.5, 2)."""
    if number == int(number):
        return str(int(number))
    return f"{number:g}"


def pad_phase_number(number: float) -> str:
    """Zero-padded phase prefix used by phase directories (01, 01.5)."""
    text = format_phase_number(number)
    whole, _, frac = text.partition(".")
    padded = whole.zfill(2)
    return f"{padded}.{frac}" if frac else padded


@dataclass
class Phase:
    """A phase in the roadmap."""
    number: float
    name: str
    goal: str = ""
    completed: bool = False
    depends_on: Optional[float] = None  # Phase number this depends on
    inserted: bool = False  # Decimal phase marked INSERTED

    @property
    def label(self) -> str:
        return format_phase_number(self.number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "goal": self.goal,
            "completed": self.completed,
            "depends_on": self.depends_on,
            "inserted": self.inserted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Phase":
        return cls(
            number=float(data.get("number", 0)),
            name=data.get("name", ""),
            goal=data.get("goal", ""),
            completed=data.get("completed", False),
            depends_on=data.get("depends_on"),
            inserted=data.get("inserted", False),
        )


@dataclass
class Plan:
    """An executable plan within a phase (NN-MM-PLAN.md)."""
    phase: str  # Phase identifier as written in the file name ("01", "02.1")
    index: int
    file_name: str
    executed: bool = False  # A matching NN-MM-SUMMARY.md exists

    @property
    def base_name(self) -> str:
        return self.file_name[: -len("-PLAN.md")] if self.file_name.endswith("-PLAN.md") else self.file_name

    @property
    def plan_ref(self) -> str:
        return f"{self.phase}-{self.index:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "index": self.index,
            "file_name": self.file_name,
            "executed": self.executed,
        }


@dataclass
class Milestone:
    """A milestone grouping consecutive phases."""
    number: int
    name: str
    start_phase: Optional[float] = None
    end_phase: Optional[float] = None
    status: str = "in-progress"  # in-progress, complete

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "start_phase": self.start_phase,
            "end_phase": self.end_phase,
            "status": self.status,
        }

    def covers(self, phase_number: float) -> bool:
        """Check whether a phase number falls inside this milestone."""
        if self.start_phase is None or self.end_phase is None:
            return False
        return self.start_phase <= phase_number <= self.end_phase

    def is_complete(self) -> bool:
        return self.status == "complete"
