"""
Issue recorder.

Turns fail/partial verification results into Issue records and appends
them to the phase-scoped ledger:

    .planning/phases/04-auth/04-02-ISSUES.md

Issues only ever go into the Open section. The Resolved section is
written by whoever fixes the issue, never here.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from hopper.documents.issues_md import OPEN_HEADER, RESOLVED_HEADER, parse_ledger, parse_open_issues
from hopper.inventory import find_phase_dir
from hopper.models.issue import Issue, IssueSeverity, format_issue_id
from hopper.models.uat import TestResult

logger = logging.getLogger(__name__)

NONE_YET = "[None yet]"


def _today() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def issues_from_results(
    results: Iterable[TestResult],
    prefix: str = "UAT",
    plan_ref: str = "",
    discovered: Optional[str] = None,
    start: int = 1,
) -> List[Issue]:
    """One Issue per fail/partial result, numbered in result order."""
    issues = []
    seq = start
    for result in results:
        if not result.status.needs_severity:
            continue
        severity = result.severity or IssueSeverity.MAJOR
        issues.append(Issue(
            id=format_issue_id(prefix, seq),
            feature=result.feature,
            severity=severity,
            description=result.description or severity.default_description,
            plan_ref=plan_ref,
            discovered=discovered or _today(),
        ))
        seq += 1
    return issues


def render_issue(issue: Issue) -> List[str]:
    """Markdown lines for one ledger entry (ends with a blank line)."""
    lines = [
        f"### {issue.id}: {issue.feature}",
        "",
        f"**Discovered:** {issue.discovered or _today()}",
        f"**Phase/Plan:** {issue.plan_ref}",
        f"**Severity:** {issue.severity.value}",
        f"**Feature:** {issue.feature}",
        f"**Description:** {issue.description}",
    ]
    if issue.expected:
        lines.append(f"**Expected:** {issue.expected}")
    if issue.actual:
        lines.append(f"**Actual:** {issue.actual}")
    lines.append("")
    return lines


class IssueLedger:
    """In-memory view of one NN-MM-ISSUES.md file."""

    def __init__(self, content: str = ""):
        self.content = content or ""

    @classmethod
    def new(cls, phase: str, plan: str, source: str = "", tested: Optional[str] = None) -> "IssueLedger":
        """Empty ledger with header, Open/Resolved sections and footer."""
        tested = tested or _today()
        lines = [
            f"# UAT Issues: Phase {phase} Plan {plan}",
            "",
            f"**Tested:** {tested}",
            f"**Source:** {source}",
            "**Tester:** User via hopper verify",
            "",
            OPEN_HEADER,
            "",
            "## Resolved Issues",
            "",
            NONE_YET,
            "",
            "---",
            "",
            f"*Phase: {phase}*",
            f"*Plan: {plan}*",
            f"*Tested: {tested}*",
            "",
        ]
        return cls("\n".join(lines))

    @property
    def issues(self) -> List[Issue]:
        return parse_ledger(self.content)

    @property
    def open_issues(self) -> List[Issue]:
        return parse_open_issues(self.content)

    def next_sequence(self, prefix: str) -> int:
        """1 + the highest PREFIX-NNN id anywhere in the ledger."""
        pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
        highest = 0
        for issue in self.issues:
            match = pattern.match(issue.id)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest + 1

    def renumber(self, issues: List[Issue], prefix: str) -> List[Issue]:
        """Reassign ids so they continue after the ledger's existing ones."""
        seq = self.next_sequence(prefix)
        for offset, issue in enumerate(issues):
            issue.id = format_issue_id(prefix, seq + offset)
        return issues

    def append(self, issues: List[Issue]) -> str:
        """Insert issues at the end of the Open section; returns new content."""
        if not issues:
            return self.content

        lines = self.content.split("\n")
        open_at = next(
            (i for i, line in enumerate(lines) if line.strip().startswith(OPEN_HEADER)),
            None,
        )
        if open_at is None:
            # No Open section yet: add one ahead of Resolved Issues and the footer
            anchor = next(
                (i for i, line in enumerate(lines)
                 if line.strip().startswith(RESOLVED_HEADER) or line.strip() == "---"),
                len(lines),
            )
            section = [OPEN_HEADER, "", NONE_YET, ""]
            if anchor > 0 and lines[anchor - 1].strip():
                section.insert(0, "")
            lines = lines[:anchor] + section + lines[anchor:]
            open_at = lines.index(OPEN_HEADER, anchor)

        end = len(lines)
        for i in range(open_at + 1, len(lines)):
            stripped = lines[i].strip()
            if stripped.startswith("## ") or stripped == "---":
                end = i
                break

        body = [line for line in lines[open_at + 1:end] if line.strip()]
        insert_at = end
        if body == [NONE_YET]:
            insert_at = open_at + 1
        else:
            while insert_at > open_at + 1 and not lines[insert_at - 1].strip():
                insert_at -= 1

        block: List[str] = [""]
        for issue in issues:
            block.extend(render_issue(issue))

        self.content = "\n".join(lines[:insert_at] + block + lines[end:])
        return self.content


class IssueRecorder:
    """Writes verification issues into the phase directory ledger."""

    def __init__(self, planning_dir: Union[str, Path], prefix: str = "UAT"):
        self.planning_dir = Path(planning_dir)
        self.prefix = prefix

    def _phase_dir(self, phase: str) -> Path:
        phases_dir = self.planning_dir / "phases"
        if phases_dir.is_dir():
            for d in sorted(phases_dir.iterdir()):
                if d.is_dir() and d.name.startswith(f"{phase}-"):
                    return d
        try:
            found = find_phase_dir(self.planning_dir, float(phase))
        except ValueError:
            found = None
        return found or phases_dir / phase

    def ledger_path(self, phase: str, plan: str) -> Path:
        return self._phase_dir(phase) / f"{phase}-{plan.zfill(2)}-ISSUES.md"

    def record(self, phase: str, plan: str, issues: List[Issue]) -> List[Issue]:
        """Append issues to the ledger, creating it if needed.

        Ids are renumbered to continue after the ledger's highest id.
        Returns the issues as written.

        Raises:
            OSError: ledger could not be written
        """
        if not issues:
            return []

        path = self.ledger_path(phase, plan)
        plan_ref = f"{phase}-{plan.zfill(2)}"
        if path.exists():
            ledger = IssueLedger(path.read_text(encoding="utf-8"))
        else:
            source = f".planning/phases/{path.parent.name}/{plan_ref}-SUMMARY.md"
            ledger = IssueLedger.new(phase, plan, source=source)

        ledger.renumber(issues, self.prefix)
        for issue in issues:
            issue.plan_ref = issue.plan_ref or plan_ref

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(ledger.append(issues), encoding="utf-8")
        logger.info(f"Recorded {len(issues)} issue(s) in {path.name}")
        return issues
