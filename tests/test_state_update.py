"""
Tests for STATE.md updates after a verification run.
"""

from hopper.documents import parse_progress_percent, parse_session_continuity
from hopper.progress import progress_bar
from hopper.state_update import (
    after_verification,
    update_last_activity,
    update_progress,
    update_session_section,
    update_state_file,
)


STATE = """# Project State

## Current Position

Phase: 4 of 6 (Authentication)
Plan: 2 of 3 in current phase
Status: In progress
Last activity: 2026-01-17 — Completed 04-02-PLAN.md

Progress: ████████░░░░░░░░░░░░ 40%

## Session Continuity

Last session: 2026-01-17
Stopped at: Completed 04-02-PLAN.md
Resume file: None
Next: /verify-work 04-02
"""


class TestProgressBar:
    """Tests for progress_bar()."""

    def test_widths(self):
        assert progress_bar(0) == "░" * 20
        assert progress_bar(100) == "█" * 20
        assert progress_bar(50, width=10) == "█████░░░░░"

    def test_clamped(self):
        assert progress_bar(150, width=4) == "████"
        assert progress_bar(-5, width=4) == "░░░░"


class TestLineUpdates:
    """Tests for single-line updates."""

    def test_last_activity_replaced(self):
        content = update_last_activity(STATE, "Verified 04-02", date="2026-01-18")

        assert "Last activity: 2026-01-18 — Verified 04-02" in content
        assert "2026-01-17 — Completed" not in content

    def test_last_activity_inserted_after_status(self):
        content = update_last_activity("Status: In progress\nOther\n", "Did it", date="2026-01-18")

        assert content == "Status: In progress\nLast activity: 2026-01-18 — Did it\nOther\n"

    def test_progress_replaced(self):
        content = update_progress(STATE, 75)

        assert parse_progress_percent(content) == 75


class TestSessionSection:
    """Tests for update_session_section()."""

    def test_fields_updated(self):
        content = update_session_section(STATE, stopped_at="Verified 04-02", next="/plan-fix 04-02")
        continuity = parse_session_continuity(content)

        assert continuity.stopped_at == "Verified 04-02"
        assert continuity.next == "/plan-fix 04-02"
        assert continuity.last_session == "2026-01-17"

    def test_other_sections_untouched(self):
        content = update_session_section(STATE, next="/progress")

        assert content.split("## Session Continuity")[0] == STATE.split("## Session Continuity")[0]

    def test_missing_section_appended(self):
        content = update_session_section("# Project State\n", last_session="2026-01-18",
                                         stopped_at="Somewhere")
        continuity = parse_session_continuity(content)

        assert continuity.last_session == "2026-01-18"
        assert continuity.stopped_at == "Somewhere"
        assert continuity.resume_file is None


class TestAfterVerification:
    """Tests for after_verification()."""

    def test_all_passed(self):
        counts = {"passed": 3, "failed": 0, "partial": 0, "skipped": 1}

        content = after_verification(STATE, "04-02", counts, date="2026-01-18")
        continuity = parse_session_continuity(content)

        assert "Last activity: 2026-01-18 — Verified 04-02: 3/4 passed ✓" in content
        assert continuity.stopped_at == "Verified 04-02 (all tests passed)"
        assert continuity.next == "/execute-plan to continue"
        assert continuity.last_session == "2026-01-18"

    def test_with_issues(self):
        counts = {"passed": 1, "failed": 1, "partial": 1, "skipped": 0}

        content = after_verification(STATE, "04-02", counts, date="2026-01-18")
        continuity = parse_session_continuity(content)

        assert "Verified 04-02: 1/3 passed" in content
        assert continuity.stopped_at == "Verified 04-02 (1 failed, 1 partial)"
        assert continuity.next == "/plan-fix 04-02 to address 2 issues"


class TestUpdateStateFile:
    """Tests for applying updates on disk."""

    def test_writes(self, tmp_path):
        (tmp_path / "STATE.md").write_text(STATE)

        assert update_state_file(tmp_path, lambda c: c.replace("In progress", "Complete")) is True
        assert "Status: Complete" in (tmp_path / "STATE.md").read_text()

    def test_missing_file_skipped(self, tmp_path):
        assert update_state_file(tmp_path, lambda c: c + "x") is False
        assert not (tmp_path / "STATE.md").exists()
