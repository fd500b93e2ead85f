"""
Verification session state machine.

States:
    Idle                       no session persisted under the key
    AwaitingResult(i)          waiting for the result of item i
    AwaitingSeverity(i, st)    item i was marked fail/partial, needs severity
    Complete                   every item has a result

apply_result() and apply_severity() are pure: they take a session, check the
event is legal for it, and return an updated copy. VerificationService wraps
them with load -> validate -> mutate copy -> persist, one event per call.
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from hopper.errors import IllegalEventError, SessionNotFoundError
from hopper.issues import issues_from_results
from hopper.models.issue import Issue, IssueSeverity
from hopper.models.uat import TestResult, TestStatus, VerificationSession
from hopper.verification.store import SessionStore

logger = logging.getLogger(__name__)

SUMMARY_KEY = re.compile(r"(\d+(?:\.\d+)?)-(\d+)-SUMMARY\.md$")


def session_key(plan_path: str) -> str:
    """Deterministic session key for a summary/plan path.

    '.planning/phases/04-auth/04-02-SUMMARY.md' -> 'verification.04-02'.
    Paths that don't follow the naming scheme get a short path hash.
    """
    match = SUMMARY_KEY.search(plan_path or "")
    if match:
        return f"verification.{match.group(1)}-{match.group(2)}"
    digest = hashlib.sha1((plan_path or "").encode("utf-8")).hexdigest()[:12]
    return f"verification.{digest}"


# ============================================================================
# Pure transitions
# ============================================================================

def apply_result(session: VerificationSession, index: int, status: TestStatus) -> VerificationSession:
    """Apply a result event for item `index`.

    pass/skip append a result and advance. fail/partial park the status
    and wait for a severity event; nothing is appended yet.

    Raises:
        IllegalEventError: session complete, severity pending, or index
            is not the current item
    """
    if session.is_complete():
        raise IllegalEventError("Session is already complete", key=session.key)
    if session.pending_severity:
        raise IllegalEventError(
            f"Test {session.current_index + 1} is awaiting a severity, not a result",
            key=session.key,
        )
    if index != session.current_index:
        raise IllegalEventError(
            f"Result for test {index + 1} but current test is {session.current_index + 1}",
            key=session.key,
        )

    updated = session.copy()
    if status.needs_severity:
        updated.pending_severity = True
        updated.pending_status = status
    else:
        updated.results.append(TestResult(feature=updated.test_items[index], status=status))
        updated.current_index += 1
    return updated


def apply_severity(session: VerificationSession, severity: IssueSeverity) -> VerificationSession:
    """Complete a parked fail/partial result with its severity.

    Raises:
        IllegalEventError: no result is waiting for a severity
    """
    if not session.pending_severity or session.pending_status is None:
        raise IllegalEventError("No result is awaiting a severity", key=session.key)

    updated = session.copy()
    updated.results.append(TestResult(
        feature=updated.test_items[updated.current_index],
        status=updated.pending_status,
        severity=severity,
    ))
    updated.current_index += 1
    updated.pending_severity = False
    updated.pending_status = None
    return updated


# ============================================================================
# Tally
# ============================================================================

def tally(results: Iterable[TestResult]) -> Dict[str, int]:
    """Count results by status."""
    counts = {"passed": 0, "failed": 0, "partial": 0, "skipped": 0}
    names = {
        TestStatus.PASS: "passed",
        TestStatus.FAIL: "failed",
        TestStatus.PARTIAL: "partial",
        TestStatus.SKIP: "skipped",
    }
    for result in results:
        counts[names[result.status]] += 1
    return counts


def severity_counts(results: Iterable[TestResult]) -> Dict[str, int]:
    """Count fail/partial results by severity."""
    counts = {s.value: 0 for s in IssueSeverity}
    for result in results:
        if result.severity is not None:
            counts[result.severity.value] += 1
    return counts


def verdict(session: VerificationSession) -> str:
    """One-word outcome of a session.

    Returns one of: incomplete, blockers, major, minor, all-passed.
    """
    if not session.is_complete():
        return "incomplete"
    counts = severity_counts(session.results)
    if counts["Blocker"]:
        return "blockers"
    if counts["Major"]:
        return "major"
    if counts["Minor"] or counts["Cosmetic"]:
        return "minor"
    return "all-passed"


# ============================================================================
# Service
# ============================================================================

@dataclass(frozen=True)
class SessionNotFound:
    """Returned when an event names a key with no persisted session."""
    key: str
    needs_restart: bool = True

    @property
    def message(self) -> str:
        return str(SessionNotFoundError(self.key))


@dataclass(frozen=True)
class ResultOutcome:
    needs_severity: bool
    completed: bool
    session: Optional[VerificationSession] = None


@dataclass(frozen=True)
class SeverityOutcome:
    completed: bool
    session: Optional[VerificationSession] = None


def require_session(store: SessionStore, key: str) -> VerificationSession:
    """Load a session or raise SessionNotFoundError."""
    session = store.load(key)
    if session is None:
        raise SessionNotFoundError(key)
    return session


class VerificationService:
    """Event handlers over a SessionStore.

    Each handler loads the persisted session, validates the event, mutates
    a copy and persists it before returning. An illegal event raises
    IllegalEventError and the stored session is left as it was.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def start_verification(
        self,
        test_items: List[str],
        key: str,
        plan_path: str = "",
        phase: str = "",
        plan: str = "",
    ) -> Optional[VerificationSession]:
        """Create a session in AwaitingResult(0).

        Returns None (and persists nothing) when there are no test items.
        An existing session under the key is returned unchanged so an
        interrupted run resumes where it stopped.
        """
        items = [item for item in test_items if item and item.strip()]
        if not items:
            logger.info(f"No testable items for {key}; no session created")
            return None

        existing = self.store.load(key)
        if existing is not None:
            logger.debug(f"Resuming session {key} at test {existing.current_index + 1}")
            return existing

        session = VerificationSession(
            key=key,
            test_items=items,
            plan_path=plan_path,
            phase=phase,
            plan=plan,
        )
        self.store.save(session)
        logger.debug(f"Started session {key} with {len(items)} tests")
        return session

    def apply_result_event(
        self, key: str, index: int, status: Union[TestStatus, str]
    ) -> Union[ResultOutcome, SessionNotFound]:
        session = self.store.load(key)
        if session is None:
            return SessionNotFound(key)

        try:
            status = TestStatus(status)
        except ValueError:
            raise IllegalEventError(f"Unknown test status '{status}'", key=key)

        updated = apply_result(session, index, status)
        self.store.save(updated)
        logger.debug(f"{key}: test {index + 1} -> {updated.state_name()}")
        return ResultOutcome(
            needs_severity=updated.pending_severity,
            completed=updated.is_complete(),
            session=updated,
        )

    def apply_severity_event(
        self, key: str, severity: Union[IssueSeverity, str]
    ) -> Union[SeverityOutcome, SessionNotFound]:
        session = self.store.load(key)
        if session is None:
            return SessionNotFound(key)

        if isinstance(severity, str):
            parsed = IssueSeverity.parse(severity)
            if parsed is None:
                raise IllegalEventError(f"Unknown severity '{severity}'", key=key)
            severity = parsed

        updated = apply_severity(session, severity)
        self.store.save(updated)
        logger.debug(f"{key}: severity {severity.value} -> {updated.state_name()}")
        return SeverityOutcome(completed=updated.is_complete(), session=updated)

    def finalize_session(
        self, key: str, recorder=None, prefix: str = "UAT"
    ) -> Union[List[Issue], SessionNotFound]:
        """Turn a complete session into issues and delete it.

        Args:
            key: Session key
            recorder: Optional IssueRecorder; when given, the issues are
                appended to the phase ledger (ids continue from the ledger)
            prefix: Issue id prefix

        Raises:
            IllegalEventError: session is not complete yet
        """
        session = self.store.load(key)
        if session is None:
            return SessionNotFound(key)
        if not session.is_complete():
            raise IllegalEventError(
                f"Session has {session.total - len(session.results)} tests without a result",
                key=key,
            )

        issues = issues_from_results(session.results, prefix=prefix, plan_ref=session.plan_ref)
        if recorder is not None and issues:
            issues = recorder.record(session.phase, session.plan, issues)

        self.store.delete(key)
        logger.debug(f"Finalized session {key}: {verdict(session)}")
        return issues
