"""
Verify Commands - Acceptance testing of executed plans.

Commands:
- verify start: Start (or resume) a session for the newest summary
- verify result: Record pass/fail/partial/skip for the current test
- verify severity: Give the severity of a fail/partial result
- verify finish: Tally, write the issue ledger, update STATE.md
- verify status: Show session progress
- verify list: List open sessions

Each command is one event against a session persisted under
.planning/.sessions/, so the walk-through survives restarts.
"""

import asyncio
import os
import sys

import click

from hopper.models.issue import IssueSeverity
from hopper.models.uat import TestStatus


SEVERITY_CHOICES = [s.value.lower() for s in IssueSeverity]
STATUS_CHOICES = [s.value for s in TestStatus]


def _show_current_test(session) -> None:
    item = session.current_item()
    if item is None:
        return
    click.echo("")
    click.echo(f"Test {session.current_index + 1} of {session.total}")
    click.echo(f"  {item}")
    click.echo("")
    click.echo(f"Record it: hopper verify result {session.key} {session.current_index + 1} <pass|fail|partial|skip>")


def register(cli):
    """Register verify group commands with CLI."""
    from hopper.config import get_planning_dir, load_config
    from hopper.errors import IllegalEventError, SessionNotFoundError
    from hopper.verification import (
        FallbackGenerator,
        JsonSessionStore,
        SessionNotFound,
        VerificationService,
        begin_verification,
        require_session,
        session_key,
        tally,
        verdict,
    )

    def _service(project_path: str):
        config = load_config(project_path)
        store = JsonSessionStore.for_project(project_path, config.sessions_dir)
        return VerificationService(store), config

    def _not_found(outcome) -> None:
        click.echo(f"Error: {outcome.message}", err=True)
        sys.exit(1)

    @cli.group("verify")
    def verify_group():
        """Acceptance testing commands.

        Walk through a plan's deliverables one test at a time.

        \b
            verify start [TARGET]            - Start/resume for newest summary
            verify result KEY TEST STATUS    - pass, fail, partial or skip
            verify severity KEY SEVERITY     - blocker, major, minor, cosmetic
            verify finish KEY                - Record issues, update STATE.md
            verify status KEY                - Show progress
            verify list                      - List open sessions
        """
        pass

    @verify_group.command("start")
    @click.argument("target", required=False, default=None)
    @click.option("-p", "--project", default=None, help="Project path")
    def verify_start(target: str, project: str):
        """Start verifying the newest executed plan.

        TARGET narrows the choice to a phase ("4") or plan ("04-02").

        \b
        Example:
            hopper verify start
            hopper verify start 04-02
        """
        from hopper.documents import parse_deliverables
        from hopper.inventory import find_summary_files

        project_path = project or os.getcwd()
        summaries = find_summary_files(project_path, target)
        if not summaries:
            scope = f" for {target}" if target else ""
            click.echo(f"Error: No SUMMARY.md found{scope}. Execute a plan first.", err=True)
            sys.exit(1)

        summary_path, phase, plan = summaries[0]
        deliverables = parse_deliverables(summary_path.read_text(encoding="utf-8"))
        rel_path = os.path.relpath(summary_path, project_path)

        service, _config = _service(project_path)
        key = session_key(summary_path.name)
        session = asyncio.run(begin_verification(
            service,
            FallbackGenerator(),
            deliverables,
            key,
            plan_path=rel_path,
            phase=phase,
            plan=plan,
        ))

        if session is None:
            click.echo(f"No testable items in {summary_path.name}.")
            return

        click.echo(f"Verifying {rel_path}")
        click.echo(f"Session: {session.key}")
        click.echo("")
        click.echo(session.format_display())
        if session.pending_severity:
            click.echo("")
            click.echo(f"Set severity: hopper verify severity {key} <{'|'.join(SEVERITY_CHOICES)}>")
        elif session.is_complete():
            click.echo("")
            click.echo(f"All tests done: hopper verify finish {key}")
        else:
            _show_current_test(session)

    @verify_group.command("result")
    @click.argument("key")
    @click.argument("test", type=int)
    @click.argument("status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
    @click.option("-p", "--project", default=None, help="Project path")
    def verify_result(key: str, test: int, status: str, project: str):
        """Record the result of test number TEST (1-based).

        \b
        Example:
            hopper verify result verification.04-02 1 pass
        """
        project_path = project or os.getcwd()
        service, _config = _service(project_path)

        try:
            outcome = service.apply_result_event(key, test - 1, status.lower())
        except IllegalEventError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        if isinstance(outcome, SessionNotFound):
            _not_found(outcome)

        session = outcome.session
        click.echo(f"{TestStatus(status.lower()).icon} Test {test}: {status.lower()}")
        if outcome.needs_severity:
            click.echo(f"Set severity: hopper verify severity {key} <{'|'.join(SEVERITY_CHOICES)}>")
        elif outcome.completed:
            click.echo(f"All {session.total} tests done: hopper verify finish {key}")
        else:
            _show_current_test(session)

    @verify_group.command("severity")
    @click.argument("key")
    @click.argument("severity", type=click.Choice(SEVERITY_CHOICES, case_sensitive=False))
    @click.option("-p", "--project", default=None, help="Project path")
    def verify_severity(key: str, severity: str, project: str):
        """Set the severity of the pending fail/partial result.

        \b
        Example:
            hopper verify severity verification.04-02 major
        """
        project_path = project or os.getcwd()
        service, _config = _service(project_path)

        try:
            outcome = service.apply_severity_event(key, severity)
        except IllegalEventError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        if isinstance(outcome, SessionNotFound):
            _not_found(outcome)

        session = outcome.session
        recorded = session.results[-1]
        click.echo(f"Severity: {recorded.severity.value} ({recorded.description})")
        if outcome.completed:
            click.echo(f"All {session.total} tests done: hopper verify finish {key}")
        else:
            _show_current_test(session)

    @verify_group.command("finish")
    @click.argument("key")
    @click.option("-p", "--project", default=None, help="Project path")
    def verify_finish(key: str, project: str):
        """Summarize a completed session and record its issues.

        Writes NN-MM-ISSUES.md for any fail/partial results, updates
        STATE.md, and deletes the session.
        """
        from hopper.issues import IssueRecorder
        from hopper.state_update import after_verification, update_state_file

        project_path = project or os.getcwd()
        service, config = _service(project_path)
        planning_dir = get_planning_dir(project_path)

        try:
            session = require_session(service.store, key)
            counts = tally(session.results)
            outcome = verdict(session)
            recorder = IssueRecorder(planning_dir, prefix=config.issue_prefix)
            issues = service.finalize_session(key, recorder=recorder, prefix=config.issue_prefix)
        except SessionNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        except IllegalEventError as e:
            click.echo(f"Error: {e}", err=True)
            click.echo(f"Continue with: hopper verify status {key}", err=True)
            sys.exit(1)
        except OSError as e:
            click.echo(f"Error: Could not write issues: {e}", err=True)
            sys.exit(1)

        total = sum(counts.values())
        click.echo(f"Verification {session.plan_ref}: {counts['passed']}/{total} passed")
        click.echo(f"  Passed:  {counts['passed']}")
        click.echo(f"  Failed:  {counts['failed']}")
        click.echo(f"  Partial: {counts['partial']}")
        click.echo(f"  Skipped: {counts['skipped']}")

        if issues:
            click.echo("")
            click.echo(f"Issues ({len(issues)}):")
            for issue in issues:
                click.echo(f"  {issue.format_display()}")
            click.echo(f"Ledger: {recorder.ledger_path(session.phase, session.plan)}")

        update_state_file(planning_dir, lambda content: after_verification(content, session.plan_ref, counts))

        click.echo("")
        if outcome == "all-passed":
            click.echo("All tests passed. Next: /execute-plan to continue")
        else:
            click.echo(f"Next: /plan-fix {session.plan_ref}")

    @verify_group.command("status")
    @click.argument("key")
    @click.option("-p", "--project", default=None, help="Project path")
    def verify_status(key: str, project: str):
        """Show progress of a verification session."""
        project_path = project or os.getcwd()
        service, _config = _service(project_path)

        try:
            session = require_session(service.store, key)
        except SessionNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        click.echo(session.format_display())
        click.echo(f"State: {session.state_name()}")

    @verify_group.command("list")
    @click.option("-p", "--project", default=None, help="Project path")
    def verify_list(project: str):
        """List open verification sessions."""
        project_path = project or os.getcwd()
        service, _config = _service(project_path)

        keys = service.store.keys()
        if not keys:
            click.echo("No open verification sessions.")
            return

        for key in keys:
            session = service.store.load(key)
            if session is None:
                continue
            click.echo(f"  {key}  {len(session.results)}/{session.total}  {session.state_name()}")
