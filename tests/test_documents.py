"""
Tests for the .planning/ markdown readers.

Every reader must be total: malformed or missing input gives defaults.
"""

import pytest

from hopper.documents import (
    count_total_phases,
    extract_objective,
    extract_one_liner,
    get_next_phase,
    match_phase_line,
    parse_current_phase,
    parse_decisions,
    parse_deliverables,
    parse_frontmatter,
    parse_issue_lines,
    parse_milestones,
    parse_open_issues,
    parse_phase_dependencies,
    parse_phase_info,
    parse_phases,
    parse_plan_file_name,
    parse_progress_percent,
    parse_session_continuity,
    parse_summary_id,
)
from hopper.models import IssueSeverity


ROADMAP = """# Roadmap: Todo App

## Milestone 1: MVP

- [x] **Phase 1: Foundation** - Project skeleton and CI
- [ ] **Phase 2: Authentication** - JWT login

## Milestone 2: Polish

- [ ] **Phase 3: Theming** – Dark mode

## Phase Details

### Phase 2: Authentication
**Goal**: JWT login
**Depends on**: Phase 1

### Phase 3: Theming
**Goal**: Dark mode
**Depends on**: Nothing
"""

STATE = """# Project State

## Current Position

Phase: 2 of 3 (Authentication)
Plan: 1 of 2 in current phase
Status: In progress
Last activity: 2026-01-18 — Completed 02-01-PLAN.md

Progress: ████████░░░░░░░░░░░░ 40%

## Accumulated Context

### Decisions

| Phase | Decision | Rationale |
|-------|----------|-----------|
| 1 | Use SQLite | Single user |
| 2 | Use JWT | Stateless |

### Blockers

None

## Session Continuity

Last session: 2026-01-18
Stopped at: Completed 02-01-PLAN.md
Resume file: None
Next: /execute-plan to continue
"""


class TestPhaseParsing:
    """Tests for ROADMAP.md phase lines."""

    def test_phase_numbers_sort_numerically(self):
        roadmap = "\n".join([
            "- [ ] **Phase 1: One** - first",
            "- [ ] **Phase 2: Two** - second",
            "- [ ] **Phase 1.5: Between** - inserted later",
        ])
        phases = parse_phases(roadmap)

        assert [p.number for p in phases] == [1, 1.5, 2]

    def test_checkbox_sets_completed(self):
        phases = parse_phases(ROADMAP)

        assert phases[0].completed is True
        assert phases[1].completed is False

    def test_name_and_goal(self):
        phase = match_phase_line("- [ ] **Phase 2: Authentication** - JWT login")

        assert phase.name == "Authentication"
        assert phase.goal == "JWT login"

    def test_en_dash_separator(self):
        phase = match_phase_line("- [ ] **Phase 3: Theming** – Dark mode")

        assert phase.goal == "Dark mode"

    def test_goal_optional(self):
        phase = match_phase_line("- [ ] **Phase 4: Deploy**")

        assert phase.name == "Deploy"
        assert phase.goal == ""

    def test_hyphenated_name_not_split(self):
        phase = match_phase_line("- [ ] **Phase 5: Real-time sync** - Websockets")

        assert phase.name == "Real-time sync"
        assert phase.goal == "Websockets"

    def test_inserted_marker_stripped(self):
        phase = match_phase_line("- [ ] **Phase 1.5: Hotfix** - INSERTED - Patch the login race")

        assert phase.inserted is True
        assert phase.goal == "Patch the login race"

    def test_non_phase_line(self):
        assert match_phase_line("- [ ] Buy milk") is None
        assert match_phase_line("Phase 1: Foundation") is None

    def test_duplicates_keep_first(self):
        roadmap = "- [ ] **Phase 1: First** - a\n- [x] **Phase 1: Second** - b\n"
        phases = parse_phases(roadmap)

        assert len(phases) == 1
        assert phases[0].name == "First"

    def test_heading_format_fallback(self):
        roadmap = "### Phase 1: Setup\n\nSome text\n**Goal**: Get going\n"
        phases = parse_phases(roadmap)

        assert len(phases) == 1
        assert phases[0].name == "Setup"
        assert phases[0].goal == "Get going"

    def test_empty_and_garbage(self):
        assert parse_phases("") == []
        assert parse_phases(None) == []
        assert parse_phases("#### ??? \n- [?] nope") == []

    def test_count_total_phases(self):
        assert count_total_phases(ROADMAP) == 3


class TestDependencies:
    """Tests for phase dependency resolution."""

    def test_explicit_dependencies(self):
        deps = parse_phase_dependencies(ROADMAP)

        assert deps[2] == 1
        assert deps[3] is None

    def test_default_is_previous_phase(self):
        roadmap = "- [ ] **Phase 1: A**\n- [ ] **Phase 1.5: B**\n- [ ] **Phase 2: C**\n"
        phases = parse_phases(roadmap)

        assert phases[0].depends_on is None
        assert phases[1].depends_on == 1
        assert phases[2].depends_on == 1.5

    def test_explicit_nothing_overrides_default(self):
        phases = parse_phases(ROADMAP)

        assert phases[2].depends_on is None


class TestMilestones:
    """Tests for milestone sections."""

    def test_phase_ranges(self):
        milestones = parse_milestones(ROADMAP)

        assert [m.name for m in milestones] == ["MVP", "Polish"]
        assert milestones[0].start_phase == 1
        assert milestones[0].end_phase == 2
        assert milestones[1].start_phase == 3

    def test_explicit_status(self):
        roadmap = "## Milestone 1: MVP\n**Status:** Complete\n- [ ] **Phase 1: A**\n"
        milestones = parse_milestones(roadmap)

        assert milestones[0].is_complete()

    def test_all_phases_checked_means_complete(self):
        roadmap = "## Milestone 1: MVP\n- [x] **Phase 1: A**\n- [x] **Phase 2: B**\n"

        assert parse_milestones(roadmap)[0].status == "complete"

    def test_no_milestones(self):
        assert parse_milestones("- [ ] **Phase 1: A**") == []


class TestPhaseLookup:
    """Tests for next-phase and phase-info lookups."""

    def test_get_next_phase(self):
        phases = parse_phases(ROADMAP)

        assert get_next_phase(phases, 2).number == 3
        assert get_next_phase(phases, 3) is None
        assert get_next_phase(phases, None) is None

    def test_parse_phase_info(self):
        phase = parse_phase_info(ROADMAP, 2)

        assert phase.name == "Authentication"
        assert parse_phase_info(ROADMAP, 9) is None


class TestStateParsing:
    """Tests for STATE.md readers."""

    def test_current_phase(self):
        assert parse_current_phase(STATE) == 2
        assert parse_current_phase("Phase: 2.5 of 4") == 2.5
        assert parse_current_phase("no position here") is None

    def test_progress_percent(self):
        assert parse_progress_percent(STATE) == 40
        assert parse_progress_percent("Progress: [████░░░░] 50%") == 50
        assert parse_progress_percent("") == 0

    def test_decisions(self):
        decisions = parse_decisions(STATE)

        assert decisions == ["1: Use SQLite", "2: Use JWT"]

    def test_decisions_keeps_last_five(self):
        rows = "\n".join(f"| {i} | Decision {i} | why |" for i in range(1, 9))
        content = f"### Decisions\n\n| Phase | Decision | Rationale |\n|---|---|---|\n{rows}\n"

        decisions = parse_decisions(content)

        assert len(decisions) == 5
        assert decisions[0] == "4: Decision 4"
        assert decisions[-1] == "8: Decision 8"

    def test_decisions_stop_at_next_header(self):
        content = (
            "| Phase | Decision |\n|---|---|\n| 1 | Keep |\n"
            "## Other\n| 2 | Not a decision |\n"
        )

        assert parse_decisions(content) == ["1: Keep"]

    def test_no_decisions(self):
        assert parse_decisions("## Current Position\nPhase: 1 of 2") == []

    def test_session_continuity(self):
        continuity = parse_session_continuity(STATE)

        assert continuity.last_session == "2026-01-18"
        assert continuity.stopped_at == "Completed 02-01-PLAN.md"
        assert continuity.resume_file is None
        assert continuity.next == "/execute-plan to continue"

    def test_session_continuity_missing(self):
        assert parse_session_continuity("# State\nPhase: 1 of 2\n") is None

    def test_issue_lines(self):
        content = "# Issues\n\n- ISS-001: Slow startup\n- random note\n- ISS-002: Typo\n"

        assert parse_issue_lines(content) == ["ISS-001: Slow startup", "ISS-002: Typo"]


class TestPlanAndSummary:
    """Tests for plan and summary helpers."""

    def test_frontmatter(self):
        content = "---\nphase: 02-auth\nplan: 1\n---\n# Plan\n"

        assert parse_frontmatter(content) == {"phase": "02-auth", "plan": 1}

    def test_frontmatter_invalid_yaml(self):
        assert parse_frontmatter("---\nphase: [unclosed\n---\nbody") == {}
        assert parse_frontmatter("no frontmatter") == {}

    def test_objective(self):
        content = "<objective>\n\nAdd JWT login endpoint\nMore detail\n</objective>"

        assert extract_objective(content) == "Add JWT login endpoint"

    def test_objective_truncated(self):
        content = f"<objective>{'x' * 150}</objective>"
        objective = extract_objective(content)

        assert objective == "x" * 100 + "..."

    def test_objective_missing(self):
        assert extract_objective("# Plan\nNo objective") is None

    @pytest.mark.parametrize("name,expected", [
        ("04-02-PLAN.md", ("04", 2)),
        ("02.1-01-PLAN.md", ("02.1", 1)),
        ("04-02-FIX-PLAN.md", ("04", 2)),
        ("README.md", None),
    ])
    def test_plan_file_name(self, name, expected):
        assert parse_plan_file_name(name) == expected

    def test_deliverables(self):
        summary = (
            "# Phase 2 Plan 1: Auth Summary\n\n**JWT login with refresh tokens**\n\n"
            "## Accomplishments\n\n- Login endpoint\n- Refresh rotation\n\n"
            "## Files Created/Modified\n\n- `src/auth.py` - login\n- `src/tokens.py`\n\n"
            "## Next Step\n\n- Not an accomplishment\n"
        )
        deliverables = parse_deliverables(summary)

        assert deliverables.accomplishments == ["Login endpoint", "Refresh rotation"]
        assert deliverables.files == ["src/auth.py", "src/tokens.py"]
        assert extract_one_liner(summary) == "JWT login with refresh tokens"

    def test_summary_id(self):
        assert parse_summary_id("phases/02-auth/02-01-SUMMARY.md") == ("02", "01")
        assert parse_summary_id("notes.md") is None


class TestLedgerParsing:
    """Tests for reading issue ledgers back."""

    def test_open_issues(self):
        ledger = (
            "# UAT Issues: Phase 04 Plan 02\n\n## Open Issues\n\n"
            "### UAT-001: Login form\n\n**Discovered:** 2026-01-18\n"
            "**Phase/Plan:** 04-02\n**Severity:** Blocker\n**Feature:** Login form\n"
            "**Description:** Crashes on submit\n\n"
            "## Resolved Issues\n\n### UAT-000: Old thing\n\n**Severity:** Minor\n"
        )
        issues = parse_open_issues(ledger)

        assert len(issues) == 1
        assert issues[0].id == "UAT-001"
        assert issues[0].severity == IssueSeverity.BLOCKER
        assert issues[0].plan_ref == "04-02"
        assert issues[0].description == "Crashes on submit"
