"""
Read phase-scoped issue ledgers (NN-MM-ISSUES.md).

Ledger layout:
```
## Open Issues

### UAT-001: Login form

**Discovered:** 2026-01-18
**Phase/Plan:** 04-02
**Severity:** Major
**Feature:** Login form
**Description:** Feature works but significant problem

## Resolved Issues

[None yet]
```
"""

import re
from typing import List

from hopper.models.issue import Issue, IssueSeverity


ISSUE_HEADING = re.compile(r"^###\s+([A-Za-z][A-Za-z0-9_]*-[\d.-]+(?:-FIX\d*)?):\s*(.*)$")
FIELD_LINE = re.compile(r"^-?\s*\*\*([^*]+?):?\*\*:?\s*(.*)$")
OPEN_HEADER = "## Open Issues"
RESOLVED_HEADER = "## Resolved Issues"


def _parse_blocks(lines: List[str], resolved: bool) -> List[Issue]:
    issues: List[Issue] = []
    current = None

    for raw in lines:
        line = raw.strip()
        heading = ISSUE_HEADING.match(line)
        if heading:
            current = Issue(
                id=heading.group(1),
                feature=heading.group(2).strip(),
                severity=IssueSeverity.MAJOR,
                description="",
                resolved=resolved,
            )
            issues.append(current)
            continue

        if current is None:
            continue

        field_match = FIELD_LINE.match(line)
        if not field_match:
            continue
        key = field_match.group(1).strip().lower()
        value = field_match.group(2).strip()

        if key == "severity":
            current.severity = IssueSeverity.parse(value) or IssueSeverity.MAJOR
        elif key == "feature":
            current.feature = value or current.feature
        elif key == "description":
            current.description = value
        elif key == "expected":
            current.expected = value
        elif key == "actual":
            current.actual = value
        elif key == "discovered":
            current.discovered = value
        elif key == "phase/plan":
            current.plan_ref = value

    return issues


def split_sections(content: str):
    """Return (open_lines, resolved_lines)."""
    open_lines: List[str] = []
    resolved_lines: List[str] = []
    target = None

    for line in (content or "").split("\n"):
        stripped = line.strip()
        if stripped.startswith(OPEN_HEADER):
            target = open_lines
            continue
        if stripped.startswith(RESOLVED_HEADER):
            target = resolved_lines
            continue
        if stripped.startswith("## ") or stripped == "---":
            target = None
            continue
        if target is not None:
            target.append(line)

    return open_lines, resolved_lines


def parse_ledger(content: str) -> List[Issue]:
    """All issues in a ledger, open first then resolved."""
    open_lines, resolved_lines = split_sections(content)
    return _parse_blocks(open_lines, resolved=False) + _parse_blocks(resolved_lines, resolved=True)


def parse_open_issues(content: str) -> List[Issue]:
    """Issues in the Open section, in file order."""
    open_lines, _ = split_sections(content)
    return _parse_blocks(open_lines, resolved=False)
