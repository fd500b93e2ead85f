"""
Issue model for acceptance-testing findings.

Issues are problems found during verification:
- Features that failed outright
- Features that only partially work

They are appended to the Open section of a phase-scoped ISSUES.md ledger.
Resolution happens elsewhere (plan-fix / execute-plan), never here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class IssueSeverity(Enum):
    """Severity of a verification issue."""
    BLOCKER = "Blocker"    # Feature completely unusable
    MAJOR = "Major"        # Works, but with a significant problem
    MINOR = "Minor"        # Small issue, still usable
    COSMETIC = "Cosmetic"  # Visual only

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["IssueSeverity"]:
        """Parse a severity case-insensitively; None if unknown."""
        if not value:
            return None
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        return None

    @property
    def default_description(self) -> str:
        return DEFAULT_DESCRIPTIONS[self]


DEFAULT_DESCRIPTIONS = {
    IssueSeverity.BLOCKER: "Feature completely unusable",
    IssueSeverity.MAJOR: "Feature works but significant problem",
    IssueSeverity.MINOR: "Small issue, feature still usable",
    IssueSeverity.COSMETIC: "Visual issue only",
}


def format_issue_id(prefix: str, sequence: int) -> str:
    """PREFIX-NNN, 1-based, zero padded to 3 digits."""
    return f"{prefix}-{sequence:03d}"


@dataclass
class Issue:
    """A defect recorded during verification."""
    id: str
    feature: str
    severity: IssueSeverity
    description: str

    expected: Optional[str] = None
    actual: Optional[str] = None

    # Context
    plan_ref: str = ""  # e.g. "04-02"
    discovered: Optional[str] = None  # YYYY-MM-DD

    resolved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "feature": self.feature,
            "severity": self.severity.value,
            "description": self.description,
            "expected": self.expected,
            "actual": self.actual,
            "plan_ref": self.plan_ref,
            "discovered": self.discovered,
            "resolved": self.resolved,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        severity = IssueSeverity.parse(data.get("severity")) or IssueSeverity.MAJOR
        return cls(
            id=data.get("id", ""),
            feature=data.get("feature", ""),
            severity=severity,
            description=data.get("description", ""),
            expected=data.get("expected"),
            actual=data.get("actual"),
            plan_ref=data.get("plan_ref", ""),
            discovered=data.get("discovered"),
            resolved=data.get("resolved", False),
        )

    def format_display(self) -> str:
        """Format issue for display."""
        return f"{self.id} ({self.severity.value}): {self.feature}"
