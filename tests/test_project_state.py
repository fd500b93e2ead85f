"""
Tests for ProjectState assembly and the on-disk inventory scan.
"""

import pytest

from hopper.config import HopperConfig, load_config, save_config
from hopper.inventory import (
    classify_artifacts,
    find_phase_dir,
    find_summary_files,
    scan_inventory,
)
from hopper.project import build_project_state, load_project_state


ROADMAP = """# Roadmap

## Milestone 1: MVP

- [x] **Phase 1: Foundation** - Skeleton
- [ ] **Phase 2: Authentication** - JWT login
- [ ] **Phase 3: Theming** - Dark mode
"""

STATE = """## Current Position

Phase: 2 of 3 (Authentication)
Progress: ██████░░░░░░░░░░░░░░ 33%

## Session Continuity

Last session: 2026-01-18
Stopped at: Completed 02-01-PLAN.md
Resume file: None
Next: /execute-plan to continue
"""


@pytest.fixture
def project(tmp_path):
    """A project with ROADMAP/STATE and a phase 2 directory."""
    planning = tmp_path / ".planning"
    phase_dir = planning / "phases" / "02-authentication"
    phase_dir.mkdir(parents=True)
    (planning / "phases" / "01-foundation").mkdir()
    (planning / "ROADMAP.md").write_text(ROADMAP)
    (planning / "STATE.md").write_text(STATE)
    (phase_dir / "02-01-PLAN.md").write_text("<objective>Login</objective>")
    (phase_dir / "02-01-SUMMARY.md").write_text("## Accomplishments\n\n- Login\n")
    (phase_dir / "02-02-PLAN.md").write_text("<objective>Refresh</objective>")
    (planning / "phases" / "01-foundation" / "01-01-SUMMARY.md").write_text("done")
    return tmp_path


class TestBuildProjectState:
    """Tests for build_project_state()."""

    def test_fields(self):
        state = build_project_state(ROADMAP, STATE)

        assert state.current_phase == 2
        assert state.total_phases == 3
        assert state.progress_percent == 33
        assert state.session_continuity.next == "/execute-plan to continue"
        assert state.get_next_phase().name == "Theming"
        assert state.get_current_milestone().name == "MVP"

    def test_current_phase_falls_back_to_first_incomplete(self):
        state = build_project_state(ROADMAP, "")

        assert state.current_phase == 2

    def test_current_phase_falls_back_to_first_phase(self):
        roadmap = "- [x] **Phase 1: A**\n- [x] **Phase 2: B**\n"

        assert build_project_state(roadmap, None).current_phase == 1

    def test_empty_inputs(self):
        state = build_project_state(None, None)

        assert state.phases == []
        assert state.current_phase is None
        assert state.session_continuity is None
        assert state.suggestion() is None

    def test_agent_id_blank_is_ignored(self):
        assert build_project_state(ROADMAP, STATE, agent_id="  \n").interrupted_agent_id is None
        assert build_project_state(ROADMAP, STATE, agent_id="a-1\n").interrupted_agent_id == "a-1"

    def test_to_dict(self):
        data = build_project_state(ROADMAP, STATE).to_dict()

        assert data["current_phase"] == 2
        assert len(data["phases"]) == 3
        assert data["session_continuity"]["stopped_at"] == "Completed 02-01-PLAN.md"


class TestInventory:
    """Tests for artifact classification and scanning."""

    def test_classify(self):
        inv = classify_artifacts([
            "02-01-PLAN.md", "02-01-SUMMARY.md", "02-01-ISSUES.md",
            "02-01-FIX-PLAN.md", "02-01-FIX-SUMMARY.md", "notes.md",
        ])

        assert inv.plan_files == ["02-01-PLAN.md"]
        assert inv.summary_files == ["02-01-SUMMARY.md"]
        assert inv.issue_files == ["02-01-ISSUES.md"]
        assert inv.fix_plans == ["02-01-FIX-PLAN.md"]
        assert inv.fix_summaries == ["02-01-FIX-SUMMARY.md"]
        assert inv.plan_count == 1
        assert inv.executed_count == 1

    def test_plans_have_executed_flags(self):
        inv = classify_artifacts(["02-02-PLAN.md", "02-01-PLAN.md", "02-01-SUMMARY.md"])
        plans = inv.plans()

        assert [p.plan_ref for p in plans] == ["02-01", "02-02"]
        assert [p.executed for p in plans] == [True, False]

    def test_scan(self, project):
        inv = scan_inventory(project, 2)

        assert inv.phase_dir == "02-authentication"
        assert inv.plan_count == 2
        assert inv.executed_count == 1
        assert inv.handoff_path is None
        assert inv.interrupted_agent_id is None

    def test_scan_handoff_and_agent(self, project):
        planning = project / ".planning"
        (planning / "phases" / "02-authentication" / ".continue-here.md").write_text("paused")
        (planning / "current-agent-id.txt").write_text("agent-7\n")

        inv = scan_inventory(project, 2)

        assert inv.handoff_path == ".planning/phases/02-authentication/.continue-here.md"
        assert inv.interrupted_agent_id == "agent-7"

    def test_scan_missing_phase_dir(self, project):
        inv = scan_inventory(project, 3)

        assert inv.phase_dir is None
        assert inv.plan_count == 0

    def test_scan_without_planning_dir(self, tmp_path):
        inv = scan_inventory(tmp_path, 1)

        assert inv.plan_count == 0
        assert inv.handoff_path is None

    def test_find_phase_dir_unpadded(self, tmp_path):
        planning = tmp_path / ".planning"
        (planning / "phases" / "2-auth").mkdir(parents=True)

        assert find_phase_dir(planning, 2).name == "2-auth"
        assert find_phase_dir(planning, None) is None

    def test_find_summary_files_newest_first(self, project):
        found = find_summary_files(project)

        assert [(phase, plan) for _, phase, plan in found] == [("02", "01"), ("01", "01")]

    def test_find_summary_files_target(self, project):
        assert [p for _, p, _ in find_summary_files(project, "1")] == ["01"]
        assert len(find_summary_files(project, "02-01")) == 1
        assert find_summary_files(project, "02-05") == []


class TestLoadProjectState:
    """Tests for reading .planning/ from disk."""

    def test_load(self, project):
        state = load_project_state(project)

        assert state.current_phase == 2
        assert state.has_handoff is False

    def test_load_detects_handoff(self, project):
        (project / ".planning" / "phases" / "01-foundation" / ".continue-here.md").write_text("x")

        assert load_project_state(project).has_handoff is True

    def test_load_missing_files(self, tmp_path):
        state = load_project_state(tmp_path)

        assert state.phases == []
        assert state.current_phase is None


class TestConfig:
    """Tests for .planning/config.json."""

    def test_defaults_when_missing(self, tmp_path):
        config = load_config(tmp_path)

        assert config.issue_prefix == "UAT"
        assert config.max_decisions == 5
        assert config.sessions_dir == ".sessions"

    def test_round_trip(self, tmp_path):
        save_config(tmp_path, HopperConfig(issue_prefix="QA", progress_bar_width=10))

        config = load_config(tmp_path)

        assert config.issue_prefix == "QA"
        assert config.progress_bar_width == 10

    def test_invalid_json_gives_defaults(self, tmp_path):
        (tmp_path / ".planning").mkdir()
        (tmp_path / ".planning" / "config.json").write_text("{not json")

        assert load_config(tmp_path) == HopperConfig()

    def test_max_decisions_applied(self, tmp_path):
        rows = "\n".join(f"| {i} | D{i} | r |" for i in range(1, 8))
        state_md = f"### Decisions\n| Phase | Decision | Rationale |\n|---|---|---|\n{rows}\n"

        state = build_project_state("", state_md, max_decisions=2)

        assert state.decisions == ["6: D6", "7: D7"]
