"""
Tests for the hopper CLI (progress and verify commands).
"""

import json

import pytest
from click.testing import CliRunner

from hopper.cli import cli
from hopper.documents import parse_open_issues, parse_session_continuity


ROADMAP = """# Roadmap

- [x] **Phase 1: Foundation** - Skeleton
- [ ] **Phase 2: Authentication** - JWT login
"""

STATE = """# Project State

## Current Position

Phase: 1 of 2 (Foundation)
Status: In progress
Last activity: 2026-01-17 — Completed 01-01-PLAN.md

Progress: ██████████░░░░░░░░░░ 50%

## Session Continuity

Last session: 2026-01-17
Stopped at: Completed 01-01-PLAN.md
Resume file: None
Next: /verify-work 01-01
"""

SUMMARY = """# Phase 1 Plan 1: Foundation Summary

**Project skeleton with CI**

## Accomplishments

- Repository layout
- CI pipeline
- Health endpoint

## Files Created/Modified

- `pyproject.toml`
"""


@pytest.fixture
def project(tmp_path):
    planning = tmp_path / ".planning"
    phase_dir = planning / "phases" / "01-foundation"
    phase_dir.mkdir(parents=True)
    (planning / "PROJECT.md").write_text("# Todo App\n\nA todo app.\n")
    (planning / "ROADMAP.md").write_text(ROADMAP)
    (planning / "STATE.md").write_text(STATE)
    (phase_dir / "01-01-PLAN.md").write_text("<objective>Skeleton</objective>")
    (phase_dir / "01-01-SUMMARY.md").write_text(SUMMARY)
    return tmp_path


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


class TestProgressCommand:
    """Tests for `hopper progress`."""

    def test_report(self, project):
        result = invoke("progress", "-p", str(project))

        assert result.exit_code == 0, result.output
        assert "# Todo App" in result.output
        assert "50%" in result.output
        assert "**Phase:** 1 of 2 (Foundation)" in result.output
        assert "/plan-phase 2" in result.output

    def test_json(self, project):
        result = invoke("progress", "-p", str(project), "--json")

        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["project"] == "Todo App"
        assert report["action"] == {"kind": "plan-phase", "phase": 2.0}
        assert report["position"]["plans_total"] == 1

    def test_next_plan_with_objective(self, project):
        phase_dir = project / ".planning" / "phases" / "01-foundation"
        (phase_dir / "01-02-PLAN.md").write_text("<objective>\nAdd login form\n</objective>")

        report = json.loads(invoke("progress", "-p", str(project), "--json").output)

        assert report["action"]["kind"] == "execute-plan"
        assert report["action"]["objective"] == "Add login form"

    def test_no_planning_dir(self, tmp_path):
        result = invoke("progress", "-p", str(tmp_path))

        assert result.exit_code == 1
        assert "No .planning directory" in result.output


class TestVerifyCommands:
    """Tests for the `hopper verify` group."""

    KEY = "verification.01-01"

    def test_full_walkthrough(self, project):
        p = str(project)

        result = invoke("verify", "start", "-p", p)
        assert result.exit_code == 0, result.output
        assert self.KEY in result.output
        assert "Verify: Repository layout" in result.output

        assert invoke("verify", "result", self.KEY, "1", "pass", "-p", p).exit_code == 0

        result = invoke("verify", "result", self.KEY, "2", "fail", "-p", p)
        assert "verify severity" in result.output

        result = invoke("verify", "severity", self.KEY, "major", "-p", p)
        assert result.exit_code == 0, result.output
        assert "Major" in result.output

        result = invoke("verify", "result", self.KEY, "3", "skip", "-p", p)
        assert "verify finish" in result.output

        result = invoke("verify", "finish", self.KEY, "-p", p)
        assert result.exit_code == 0, result.output
        assert "1/3 passed" in result.output
        assert "UAT-001 (Major): Verify: CI pipeline" in result.output

        ledger = project / ".planning" / "phases" / "01-foundation" / "01-01-ISSUES.md"
        issues = parse_open_issues(ledger.read_text())
        assert len(issues) == 1

        continuity = parse_session_continuity((project / ".planning" / "STATE.md").read_text())
        assert continuity.stopped_at == "Verified 01-01 (1 failed, 0 partial)"

        assert invoke("verify", "status", self.KEY, "-p", p).exit_code == 1

    def test_start_twice_resumes(self, project):
        p = str(project)
        invoke("verify", "start", "-p", p)
        invoke("verify", "result", self.KEY, "1", "pass", "-p", p)

        result = invoke("verify", "start", "-p", p)

        assert "1 of 3 tests completed" in result.output
        assert "Test 2 of 3" in result.output

    def test_wrong_test_number(self, project):
        p = str(project)
        invoke("verify", "start", "-p", p)

        result = invoke("verify", "result", self.KEY, "3", "pass", "-p", p)

        assert result.exit_code == 1
        assert "current test is 1" in result.output

    def test_unknown_session(self, project):
        result = invoke("verify", "result", "verification.09-09", "1", "pass", "-p", str(project))

        assert result.exit_code == 1
        assert "verify start" in result.output

    def test_finish_incomplete(self, project):
        p = str(project)
        invoke("verify", "start", "-p", p)

        result = invoke("verify", "finish", self.KEY, "-p", p)

        assert result.exit_code == 1
        assert "without a result" in result.output

    def test_start_without_summary(self, tmp_path):
        (tmp_path / ".planning" / "phases" / "01-x").mkdir(parents=True)

        result = invoke("verify", "start", "-p", str(tmp_path))

        assert result.exit_code == 1
        assert "No SUMMARY.md" in result.output

    def test_summary_without_accomplishments(self, project):
        summary = project / ".planning" / "phases" / "01-foundation" / "01-01-SUMMARY.md"
        summary.write_text("# Summary\n\nNothing listed.\n")

        result = invoke("verify", "start", "-p", str(project))

        assert result.exit_code == 0
        assert "No testable items" in result.output
        assert not (project / ".planning" / ".sessions").exists()

    def test_list(self, project):
        p = str(project)
        assert "No open verification sessions" in invoke("verify", "list", "-p", p).output

        invoke("verify", "start", "-p", p)

        assert self.KEY in invoke("verify", "list", "-p", p).output
