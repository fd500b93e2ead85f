"""
Hopper Documents - tolerant readers for the .planning/ markdown files.

ROADMAP.md, STATE.md and the per-plan files are human-edited, so every
reader here is total: bad structure gives empty/default values instead of
an exception.

Usage:
    from hopper.documents import parse_phases, parse_session_continuity

    phases = parse_phases(roadmap_text)
    continuity = parse_session_continuity(state_text)
"""

from hopper.documents.roadmap_md import (
    parse_phases,
    parse_phase_dependencies,
    parse_phase_info,
    parse_milestones,
    count_total_phases,
    get_next_phase,
    match_phase_line,
)
from hopper.documents.state_md import (
    parse_current_phase,
    parse_decisions,
    parse_progress_percent,
    parse_session_continuity,
    parse_issue_lines,
)
from hopper.documents.plan_md import (
    parse_frontmatter,
    extract_objective,
    parse_plan_file_name,
)
from hopper.documents.summary_md import (
    Deliverables,
    parse_deliverables,
    extract_one_liner,
    parse_summary_id,
)
from hopper.documents.issues_md import parse_ledger, parse_open_issues

__all__ = [
    # ROADMAP.md
    "parse_phases",
    "parse_phase_dependencies",
    "parse_phase_info",
    "parse_milestones",
    "count_total_phases",
    "get_next_phase",
    "match_phase_line",
    # STATE.md
    "parse_current_phase",
    "parse_decisions",
    "parse_progress_percent",
    "parse_session_continuity",
    "parse_issue_lines",
    # PLAN.md
    "parse_frontmatter",
    "extract_objective",
    "parse_plan_file_name",
    # SUMMARY.md
    "Deliverables",
    "parse_deliverables",
    "extract_one_liner",
    "parse_summary_id",
    # ISSUES.md
    "parse_ledger",
    "parse_open_issues",
]
