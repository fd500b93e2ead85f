"""
Hopper Models - Data structures for the planning workflow.

This module provides dataclasses and enums for:
- Roadmap phases, plans and milestones
- Project state and session continuity
- Verification sessions and test results
- Issues recorded from verification
"""

from hopper.models.roadmap import (
    Phase,
    Plan,
    Milestone,
    format_phase_number,
    pad_phase_number,
)
from hopper.models.state import ProjectState, SessionContinuity
from hopper.models.issue import Issue, IssueSeverity, format_issue_id
from hopper.models.uat import TestResult, TestStatus, VerificationSession

__all__ = [
    # Roadmap
    "Phase", "Plan", "Milestone", "format_phase_number", "pad_phase_number",
    # State
    "ProjectState", "SessionContinuity",
    # Issue
    "Issue", "IssueSeverity", "format_issue_id",
    # UAT
    "TestResult", "TestStatus", "VerificationSession",
]
