"""
Parse STATE.md: current position, decisions, progress gauge, session
continuity.

Expected format (abridged):
```
## Current Position

Phase: 2 of 4 (Authentication)
Plan: 1 of 3 in current phase
Progress: ████████░░░░░░░░░░░░ 40%

## Accumulated Context

### Decisions

| Phase | Decision | Rationale |
|-------|----------|-----------|
| 1 | Use SQLite | Single user |

## Session Continuity

Last session: 2026-01-18
Stopped at: Completed 07-04-PLAN.md
Resume file: None
Next: /execute-plan to continue
```

All functions are total: missing sections produce defaults.
"""

import re
from typing import List, Optional

from hopper.models.state import SessionContinuity


CURRENT_PHASE = re.compile(r"Phase:\s*(\d+(?:\.\d+)?)\s*of\s*\d+")
PROGRESS_GAUGE = re.compile(r"Progress:\s*\[?[█░]+\]?\s*(\d+)%")
DECISIONS_HEADER = re.compile(r"^#{2,4}\s*Decisions\b|^\|\s*Phase\s*\|\s*Decision\s*\|")
SEPARATOR_ROW = re.compile(r"^\|[\s:|-]+\|\s*$")
SESSION_HEADER = re.compile(r"^##\s*Session Continuity\s*$")


def parse_current_phase(content: str) -> Optional[float]:
    """Current phase from 'Phase: X of Y', or None."""
    match = CURRENT_PHASE.search(content or "")
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_progress_percent(content: str) -> int:
    """Progress gauge percentage; 0 when the gauge is absent."""
    match = PROGRESS_GAUGE.search(content or "")
    if not match:
        return 0
    return min(int(match.group(1)), 100)


def parse_decisions(content: str, limit: int = 5) -> List[str]:
    """Decision rows rendered as '<col0>: <col1>', last `limit` rows.

    The section starts at a '### Decisions' header or a
    '| Phase | Decision |' row and ends at the next markdown header.
    """
    decisions: List[str] = []
    in_section = False
    separator_seen = False

    for raw in (content or "").split("\n"):
        line = raw.strip()

        if not in_section:
            if DECISIONS_HEADER.match(line):
                in_section = True
            continue

        if line.startswith("#"):
            break

        if SEPARATOR_ROW.match(line):
            separator_seen = True
            continue

        if not line.startswith("|"):
            continue

        # Header row of the table itself
        if not separator_seen:
            continue

        cells = [c.strip() for c in line.strip("|").split("|")]
        cells = [c for c in cells if c]
        if len(cells) >= 2:
            decisions.append(f"{cells[0]}: {cells[1]}")

    if limit <= 0:
        return []
    return decisions[-limit:]


def _session_section(content: str) -> Optional[List[str]]:
    lines = (content or "").split("\n")
    for i, line in enumerate(lines):
        if SESSION_HEADER.match(line.strip()):
            section = []
            for follow in lines[i + 1:]:
                if follow.startswith("## "):
                    break
                section.append(follow)
            return section
    return None


def parse_session_continuity(content: str) -> Optional[SessionContinuity]:
    """Parse the '## Session Continuity' section; None if absent."""
    section = _session_section(content)
    if section is None:
        return None

    continuity = SessionContinuity()
    for line in section:
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip().lower()
        value = value.strip()
        if not value:
            continue

        if key == "last session":
            continuity.last_session = value
        elif key == "stopped at":
            continuity.stopped_at = value
        elif key == "resume file":
            continuity.resume_file = None if value.lower() == "none" else value
        elif key == "next":
            continuity.next = value

    return continuity


def parse_issue_lines(content: str) -> List[str]:
    """Project-level ISSUES.md entries of the form '- ISS-001: ...'."""
    issues = []
    for line in (content or "").split("\n"):
        match = re.match(r"^-\s+(ISS-\d+:.+)$", line.strip())
        if match:
            issues.append(match.group(1))
    return issues
