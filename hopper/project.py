"""
Build the ProjectState aggregate from raw ROADMAP.md and STATE.md text.

Rebuilt on every call; nothing is cached. Reading the files is the caller's
job (see load_project_state for the file-system convenience wrapper).
"""

from pathlib import Path
from typing import Optional, Union

from hopper.config import HopperConfig, get_planning_dir, load_config
from hopper.documents import (
    parse_current_phase,
    parse_decisions,
    parse_issue_lines,
    parse_milestones,
    parse_phases,
    parse_progress_percent,
    parse_session_continuity,
)
from hopper.models.state import ProjectState


def build_project_state(
    raw_roadmap: Optional[str],
    raw_state: Optional[str],
    raw_issues: Optional[str] = None,
    agent_id: Optional[str] = None,
    has_handoff: bool = False,
    max_decisions: int = 5,
) -> ProjectState:
    """Extract a ProjectState from document text.

    Current phase comes from STATE.md's 'Phase: X of Y'. If STATE.md does
    not say, fall back to the first incomplete phase, then the first phase.

    Args:
        raw_roadmap: ROADMAP.md content (None/empty allowed)
        raw_state: STATE.md content (None/empty allowed)
        raw_issues: Project-level ISSUES.md content
        agent_id: Contents of current-agent-id.txt, if any
        has_handoff: Whether a .continue-here.md handoff exists
        max_decisions: How many recent decisions to keep

    Returns:
        ProjectState (never raises on malformed input)
    """
    roadmap = raw_roadmap or ""
    state = raw_state or ""

    phases = parse_phases(roadmap)

    current = parse_current_phase(state)
    if current is None and phases:
        incomplete = [p for p in phases if not p.completed]
        current = (incomplete[0] if incomplete else phases[0]).number

    agent = (agent_id or "").strip() or None

    return ProjectState(
        phases=phases,
        current_phase=current,
        total_phases=len(phases),
        decisions=parse_decisions(state, limit=max_decisions),
        issues=parse_issue_lines(raw_issues or ""),
        milestones=parse_milestones(roadmap),
        session_continuity=parse_session_continuity(state),
        progress_percent=parse_progress_percent(state),
        has_handoff=has_handoff,
        interrupted_agent_id=agent,
    )


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def load_project_state(
    project_path: Optional[Union[str, Path]] = None,
    config: Optional[HopperConfig] = None,
) -> ProjectState:
    """Read .planning/ documents from disk and build the ProjectState."""
    planning_dir = get_planning_dir(project_path)
    if config is None:
        config = load_config(project_path)

    phases_dir = planning_dir / "phases"
    has_handoff = phases_dir.is_dir() and any(phases_dir.glob("*/.continue-here.md"))

    return build_project_state(
        _read_text(planning_dir / "ROADMAP.md"),
        _read_text(planning_dir / "STATE.md"),
        raw_issues=_read_text(planning_dir / "ISSUES.md"),
        agent_id=_read_text(planning_dir / "current-agent-id.txt"),
        has_handoff=has_handoff,
        max_decisions=config.max_decisions,
    )
