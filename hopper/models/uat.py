"""
UAT (User Acceptance Testing) model.

A VerificationSession is the persisted record of one walk through a test
checklist. It is mutated by exactly one external event per call and deleted
once every item has a result and the summary has been produced.

Invariant: current_index == len(results), except while pending_severity is
set. During that window one result is "in flight": its status is known but
it has no severity yet and has not been appended.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from hopper.models.issue import IssueSeverity


class TestStatus(Enum):
    """Outcome reported by the operator for one test item."""
    __test__ = False  # not a pytest class

    PASS = "pass"
    FAIL = "fail"
    PARTIAL = "partial"
    SKIP = "skip"

    @property
    def needs_severity(self) -> bool:
        return self in (TestStatus.FAIL, TestStatus.PARTIAL)

    @property
    def icon(self) -> str:
        return {"pass": "✓", "fail": "✗", "partial": "⚠", "skip": "⏭"}[self.value]


@dataclass
class TestResult:
    """Result for a single test item."""
    __test__ = False

    feature: str
    status: TestStatus
    severity: Optional[IssueSeverity] = None  # Required iff fail/partial
    description: Optional[str] = None

    def __post_init__(self):
        if self.status.needs_severity and self.severity is None:
            raise ValueError(f"{self.status.value} result requires a severity")
        if not self.status.needs_severity:
            self.severity = None
        if self.severity is not None and not self.description:
            self.description = self.severity.default_description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feature": self.feature,
            "status": self.status.value,
            "severity": self.severity.value if self.severity else None,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestResult":
        return cls(
            feature=data.get("feature", ""),
            status=TestStatus(data.get("status", "skip")),
            severity=IssueSeverity.parse(data.get("severity")),
            description=data.get("description"),
        )


@dataclass
class VerificationSession:
    """Persisted state of one verification run."""
    key: str
    test_items: List[str]

    # Plan identity
    plan_path: str = ""
    phase: str = ""
    plan: str = ""

    # Progress
    results: List[TestResult] = field(default_factory=list)  # Append-only
    current_index: int = 0
    pending_severity: bool = False
    pending_status: Optional[TestStatus] = None

    started_at: Optional[str] = None

    def __post_init__(self):
        if not self.started_at:
            self.started_at = datetime.now().isoformat()

        # A pending fail/partial has not been appended to results yet
        if self.current_index != len(self.results):
            raise ValueError(
                f"current_index {self.current_index} does not match {len(self.results)} results"
            )
        if self.current_index > len(self.test_items):
            raise ValueError(f"current_index {self.current_index} is past {len(self.test_items)} tests")
        if self.pending_severity != (self.pending_status is not None):
            raise ValueError("pending_severity and pending_status disagree")
        if self.pending_status is not None and not self.pending_status.needs_severity:
            raise ValueError(f"{self.pending_status.value} result cannot await a severity")

    @property
    def plan_ref(self) -> str:
        if self.phase and self.plan:
            return f"{self.phase}-{self.plan.zfill(2)}"
        return self.key

    @property
    def total(self) -> int:
        return len(self.test_items)

    def is_complete(self) -> bool:
        """All items have a result and nothing is in flight."""
        return not self.pending_severity and self.current_index >= len(self.test_items)

    def current_item(self) -> Optional[str]:
        if self.current_index < len(self.test_items):
            return self.test_items[self.current_index]
        return None

    def state_name(self) -> str:
        """Name of the machine state this record is in."""
        if self.pending_severity:
            return "awaiting_severity"
        if self.is_complete():
            return "complete"
        return "awaiting_result"

    def copy(self) -> "VerificationSession":
        """Deep-enough copy for mutate-then-persist."""
        return VerificationSession.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "plan_path": self.plan_path,
            "phase": self.phase,
            "plan": self.plan,
            "test_items": list(self.test_items),
            "results": [r.to_dict() for r in self.results],
            "current_index": self.current_index,
            "pending_severity": self.pending_severity,
            "pending_status": self.pending_status.value if self.pending_status else None,
            "started_at": self.started_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerificationSession":
        pending = data.get("pending_status")
        return cls(
            key=data.get("key", ""),
            test_items=list(data.get("test_items", [])),
            plan_path=data.get("plan_path", ""),
            phase=data.get("phase", ""),
            plan=data.get("plan", ""),
            results=[TestResult.from_dict(r) for r in data.get("results", [])],
            current_index=data.get("current_index", 0),
            pending_severity=data.get("pending_severity", False),
            pending_status=TestStatus(pending) if pending else None,
            started_at=data.get("started_at"),
        )

    def format_display(self) -> str:
        """Format session progress for display."""
        lines = [f"Verification {self.plan_ref}: {len(self.results)} of {self.total} tests completed"]
        for i, result in enumerate(self.results, 1):
            severity = f" ({result.severity.value})" if result.severity else ""
            lines.append(f"{result.status.icon} Test {i}: {result.status.value}{severity}")
        if self.pending_severity and self.pending_status:
            lines.append(f"Test {self.current_index + 1}: marked {self.pending_status.value}, awaiting severity")
        elif self.current_item() is not None:
            lines.append(f"Next: Test {self.current_index + 1} of {self.total}")
        return "\n".join(lines)
