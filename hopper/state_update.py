"""
STATE.md updates.

Each update is a pure str -> str function over the document text so it can
be tested without a file system. update_state_file() applies them to
.planning/STATE.md; a missing or unwritable file is logged and skipped.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from hopper.progress import progress_bar

logger = logging.getLogger(__name__)

SESSION_HEADER = "## Session Continuity"
SESSION_FIELDS = ("Last session", "Stopped at", "Resume file", "Next")


def _today() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def _replace_line(content: str, prefix: str, new_line: str) -> Optional[str]:
    """Replace the first line starting with prefix; None if absent."""
    pattern = re.compile(rf"^{re.escape(prefix)}.*$", re.MULTILINE)
    if not pattern.search(content):
        return None
    return pattern.sub(lambda _m: new_line, content, count=1)


def update_last_activity(content: str, description: str, date: Optional[str] = None) -> str:
    """Set 'Last activity: <date> — <description>'.

    Inserted after the Status line when missing.
    """
    line = f"Last activity: {date or _today()} — {description}"
    replaced = _replace_line(content, "Last activity:", line)
    if replaced is not None:
        return replaced

    status = re.search(r"^Status:.*$", content, re.MULTILINE)
    if status:
        return content[:status.end()] + "\n" + line + content[status.end():]
    return content


def update_progress(content: str, percent: int, width: int = 20) -> str:
    """Set 'Progress: <bar> N%'."""
    line = f"Progress: {progress_bar(percent, width)} {percent}%"
    replaced = _replace_line(content, "Progress:", line)
    if replaced is not None:
        return replaced

    activity = re.search(r"^Last activity:.*$", content, re.MULTILINE)
    if activity:
        return content[:activity.end()] + "\n\n" + line + content[activity.end():]
    return content


def update_session_section(
    content: str,
    last_session: Optional[str] = None,
    stopped_at: Optional[str] = None,
    resume_file: Optional[str] = None,
    next: Optional[str] = None,
) -> str:
    """Update fields of the Session Continuity section.

    Fields passed as None are left alone. A missing section is appended
    with defaults for the fields not given.
    """
    lines = content.split("\n")
    start = next_header = None
    for i, line in enumerate(lines):
        if line.strip().startswith(SESSION_HEADER):
            start = i
        elif start is not None and line.startswith("## "):
            next_header = i
            break

    if start is None:
        section = [
            "",
            SESSION_HEADER,
            "",
            f"Last session: {last_session or _today()}",
            f"Stopped at: {stopped_at or 'Unknown'}",
            f"Resume file: {resume_file or 'None'}",
            f"Next: {next or 'Continue with hopper progress'}",
            "",
        ]
        return content.rstrip("\n") + "\n" + "\n".join(section)

    end = next_header if next_header is not None else len(lines)
    values: Dict[str, Optional[str]] = {
        "Last session": last_session,
        "Stopped at": stopped_at,
        "Resume file": resume_file,
        "Next": next,
    }
    for i in range(start + 1, end):
        for name in SESSION_FIELDS:
            if values[name] is not None and lines[i].startswith(f"{name}:"):
                lines[i] = f"{name}: {values[name]}"
    return "\n".join(lines)


def after_verification(
    content: str,
    plan_ref: str,
    counts: Dict[str, int],
    date: Optional[str] = None,
) -> str:
    """Record a finished verification run in STATE.md.

    Args:
        content: STATE.md text
        plan_ref: e.g. "04-02"
        counts: tally() output (passed/failed/partial/skipped)
    """
    date = date or _today()
    passed = counts.get("passed", 0)
    failed = counts.get("failed", 0)
    partial = counts.get("partial", 0)
    total = passed + failed + partial + counts.get("skipped", 0)
    all_passed = failed == 0 and partial == 0

    description = f"Verified {plan_ref}: {passed}/{total} passed"
    if all_passed:
        description += " ✓"
        stopped_at = f"Verified {plan_ref} (all tests passed)"
        next_step = "/execute-plan to continue"
    else:
        stopped_at = f"Verified {plan_ref} ({failed} failed, {partial} partial)"
        next_step = f"/plan-fix {plan_ref} to address {failed + partial} issues"

    content = update_last_activity(content, description, date=date)
    return update_session_section(content, last_session=date, stopped_at=stopped_at, next=next_step)


def update_state_file(
    planning_dir: Union[str, Path],
    transform: Callable[[str], str],
) -> bool:
    """Apply transform to .planning/STATE.md. Returns False if skipped."""
    path = Path(planning_dir) / "STATE.md"
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("STATE.md not found, cannot update")
        return False
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read STATE.md: {e}")
        return False

    try:
        path.write_text(transform(content), encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to update STATE.md: {e}")
        return False
    return True
