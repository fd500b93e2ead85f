"""
Progress report: the status view shown by `hopper progress`.

progress_report() assembles a plain dict from the ProjectState, the phase
inventory and the routed Action; format_report() renders it as markdown.
"""

from typing import Any, Dict, List, Optional

from hopper.inventory import ArtifactInventory
from hopper.models.roadmap import format_phase_number
from hopper.models.state import ProjectState
from hopper.router import Action

MAX_ISSUES_SHOWN = 5


def progress_bar(percent: int, width: int = 20) -> str:
    """Bar like ████░░░░ (no brackets)."""
    percent = max(0, min(100, percent))
    filled = int(round(width * percent / 100))
    return "█" * filled + "░" * (width - filled)


def project_name(project_md: Optional[str]) -> str:
    """First markdown heading of PROJECT.md, or 'Project'."""
    for line in (project_md or "").split("\n"):
        if line.startswith("#"):
            return line.lstrip("#").strip() or "Project"
    return "Project"


def progress_report(
    state: ProjectState,
    inventory: ArtifactInventory,
    action: Action,
    name: str = "Project",
    bar_width: int = 20,
) -> Dict[str, Any]:
    """Structured status report."""
    current = state.get_phase(state.current_phase)
    next_phase = state.get_next_phase()
    continuity = state.session_continuity

    position: Dict[str, Any] = {
        "phase": format_phase_number(state.current_phase) if state.current_phase is not None else None,
        "total_phases": state.total_phases,
        "phase_name": current.name if current else None,
        "plans_complete": inventory.executed_count,
        "plans_total": inventory.plan_count,
    }
    if continuity:
        position["last_session"] = continuity.last_session
        position["stopped_at"] = continuity.stopped_at

    issues: List[str] = state.issues[:MAX_ISSUES_SHOWN]
    milestone = state.get_current_milestone()

    return {
        "project": name,
        "progress_percent": state.progress_percent,
        "progress_bar": progress_bar(state.progress_percent, bar_width),
        "position": position,
        "milestone": milestone.to_dict() if milestone else None,
        "decisions": list(state.decisions),
        "issues": issues,
        "more_issues": max(0, len(state.issues) - MAX_ISSUES_SHOWN),
        "whats_next": {
            "phase": next_phase.label,
            "name": next_phase.name,
            "goal": next_phase.goal,
        } if next_phase else None,
        "action": action.to_dict(),
        "command": action.command(),
    }


def format_report(report: Dict[str, Any]) -> str:
    """Render a progress_report() dict as markdown."""
    lines = [
        f"# {report['project']}",
        "",
        f"**Progress:** [{report['progress_bar']}] {report['progress_percent']}%",
        "",
        "## Current Position",
        "",
    ]

    position = report["position"]
    if position["phase"] is not None:
        phase_line = f"**Phase:** {position['phase']} of {position['total_phases']}"
        if position.get("phase_name"):
            phase_line += f" ({position['phase_name']})"
        lines.append(phase_line)
        if position["plans_total"]:
            lines.append(f"**Plan:** {position['plans_complete']} of {position['plans_total']} complete")
    else:
        lines.append("No phases found in ROADMAP.md")
    if position.get("last_session"):
        lines.append(f"**Last session:** {position['last_session']}")
    if position.get("stopped_at"):
        lines.append(f"**Stopped at:** {position['stopped_at']}")
    lines.append("")

    if report["decisions"]:
        lines.extend(["## Key Decisions Made", ""])
        lines.extend(f"- {d}" for d in report["decisions"])
        lines.append("")

    if report["issues"]:
        lines.extend(["## Open Issues", ""])
        lines.extend(f"- {i}" for i in report["issues"])
        if report["more_issues"]:
            lines.append(f"- ... and {report['more_issues']} more")
        lines.append("")

    nxt = report["whats_next"]
    if nxt:
        lines.extend(["## What's Next", ""])
        line = f"**Phase {nxt['phase']}:** {nxt['name']}"
        if nxt["goal"]:
            line += f" - {nxt['goal']}"
        lines.extend([line, ""])

    lines.extend(["---", "", "## Next Up", ""])
    if report["command"]:
        lines.append(f"`{report['command']}`")
    else:
        lines.append("No recommendation. Check ROADMAP.md and STATE.md.")
    action = report["action"]
    if action.get("objective"):
        lines.append(f"Objective: {action['objective']}")

    return "\n".join(lines) + "\n"
