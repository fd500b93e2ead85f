"""
Hopper Verification - resumable acceptance-testing sessions.

Usage:
    from hopper.verification import VerificationService, JsonSessionStore

    service = VerificationService(JsonSessionStore.for_project("."))
    session = service.start_verification(items, session_key(summary_path))
    service.apply_result_event(session.key, 0, "pass")
"""

from hopper.verification.store import (
    SessionStore,
    MemorySessionStore,
    JsonSessionStore,
)
from hopper.verification.session import (
    VerificationService,
    ResultOutcome,
    SeverityOutcome,
    SessionNotFound,
    apply_result,
    apply_severity,
    require_session,
    session_key,
    severity_counts,
    tally,
    verdict,
)
from hopper.verification.checklist import (
    ChecklistGenerator,
    FallbackGenerator,
    begin_verification,
    build_checklist,
    build_prompt,
    fallback_checklist,
    parse_checklist_payload,
)

__all__ = [
    # Stores
    "SessionStore",
    "MemorySessionStore",
    "JsonSessionStore",
    # State machine
    "VerificationService",
    "ResultOutcome",
    "SeverityOutcome",
    "SessionNotFound",
    "apply_result",
    "apply_severity",
    "require_session",
    "session_key",
    "severity_counts",
    "tally",
    "verdict",
    # Checklist
    "ChecklistGenerator",
    "FallbackGenerator",
    "begin_verification",
    "build_checklist",
    "build_prompt",
    "fallback_checklist",
    "parse_checklist_payload",
]
