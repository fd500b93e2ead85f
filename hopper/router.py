"""
Next-action router.

route(state, inventory) picks exactly one Action. Guards are checked in a
fixed order and the first match wins:

1. Interrupted agent      -> ResumeInterrupted
2. Paused handoff         -> ResumeWork
3. Fix plan, no summary   -> ExecutePlan (fix)
4. Issues, no fix plan    -> PlanFix
5. Plan, no summary       -> ExecutePlan
6. No plans in phase      -> PlanPhase (current)
7. Phase fully executed   -> PlanPhase (next) or CompleteMilestone
8. Anything else          -> UseStateSuggestion or Unknown

The last step always matches, so there is always an answer. route() is pure:
no file system, no clock, same input gives the same Action.
"""

import logging
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional

from hopper.documents.plan_md import extract_objective
from hopper.inventory import ArtifactInventory
from hopper.models.roadmap import format_phase_number
from hopper.models.state import ProjectState

logger = logging.getLogger(__name__)

PlanReader = Callable[[str], str]

ISSUE_REF = re.compile(r"(\d+(?:\.\d+)?-\d+)")


class ActionKind(Enum):
    """Tag for each recommendation the router can make."""
    RESUME_INTERRUPTED = "resume-task"
    RESUME_WORK = "resume-work"
    EXECUTE_PLAN = "execute-plan"
    PLAN_FIX = "plan-fix"
    PLAN_PHASE = "plan-phase"
    COMPLETE_MILESTONE = "complete-milestone"
    USE_STATE_SUGGESTION = "state-suggestion"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Action:
    """Base class for router results."""
    kind: ClassVar[ActionKind] = ActionKind.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    def command(self) -> str:
        """Slash command the operator would run."""
        return ""


@dataclass(frozen=True)
class ResumeInterrupted(Action):
    agent_id: str = ""
    kind: ClassVar[ActionKind] = ActionKind.RESUME_INTERRUPTED

    def command(self) -> str:
        return f"/resume-task {self.agent_id}"


@dataclass(frozen=True)
class ResumeWork(Action):
    handoff_path: Optional[str] = None
    kind: ClassVar[ActionKind] = ActionKind.RESUME_WORK

    def command(self) -> str:
        return "/resume-work"


@dataclass(frozen=True)
class ExecutePlan(Action):
    plan_path: str = ""
    objective: Optional[str] = None
    is_fix: bool = False
    kind: ClassVar[ActionKind] = ActionKind.EXECUTE_PLAN

    def command(self) -> str:
        return f"/execute-plan {self.plan_path}"


@dataclass(frozen=True)
class PlanFix(Action):
    issue: str = ""  # Plan reference such as "04-02"
    issue_file: str = ""
    kind: ClassVar[ActionKind] = ActionKind.PLAN_FIX

    def command(self) -> str:
        return f"/plan-fix {self.issue}"


@dataclass(frozen=True)
class PlanPhase(Action):
    phase: float = 0
    kind: ClassVar[ActionKind] = ActionKind.PLAN_PHASE

    def command(self) -> str:
        return f"/plan-phase {format_phase_number(self.phase)}"


@dataclass(frozen=True)
class CompleteMilestone(Action):
    kind: ClassVar[ActionKind] = ActionKind.COMPLETE_MILESTONE

    def command(self) -> str:
        return "/complete-milestone"


@dataclass(frozen=True)
class UseStateSuggestion(Action):
    suggestion: str = ""
    kind: ClassVar[ActionKind] = ActionKind.USE_STATE_SUGGESTION

    def command(self) -> str:
        return self.suggestion


@dataclass(frozen=True)
class Unknown(Action):
    kind: ClassVar[ActionKind] = ActionKind.UNKNOWN


def _strip(name: str, suffix: str) -> str:
    return name[: -len(suffix)] if name.endswith(suffix) else name


def fixes_without_summary(inventory: ArtifactInventory) -> List[str]:
    """FIX plans with no FIX summary, ascending by file name."""
    done = set(inventory.fix_summaries)
    return [
        fix for fix in sorted(inventory.fix_plans)
        if f"{_strip(fix, '-PLAN.md')}-SUMMARY.md" not in done
    ]


def issues_without_fix(inventory: ArtifactInventory) -> List[str]:
    """Issue ledgers with no FIX plan named after them."""
    missing = []
    for issue_file in sorted(inventory.issue_files):
        base = _strip(issue_file, "-ISSUES.md")
        if not any(fix.startswith(f"{base}-FIX") for fix in inventory.fix_plans):
            missing.append(issue_file)
    return missing


def first_unexecuted_plan(inventory: ArtifactInventory) -> Optional[str]:
    """First plan (by file name) without a matching summary."""
    executed = {_strip(s, "-SUMMARY.md") for s in inventory.summary_files}
    for plan in sorted(inventory.plan_files):
        if _strip(plan, "-PLAN.md") not in executed:
            return plan
    return None


def _read_objective(
    read_plan: Optional[PlanReader], plan_path: str, max_length: int
) -> Optional[str]:
    if read_plan is None:
        return None
    try:
        return extract_objective(read_plan(plan_path), max_length=max_length)
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read objective from {plan_path}: {e}")
        return None


def route(
    state: ProjectState,
    inventory: ArtifactInventory,
    read_plan: Optional[PlanReader] = None,
    objective_max_length: int = 100,
) -> Action:
    """Pick the single next action.

    Args:
        state: ProjectState built from ROADMAP.md/STATE.md
        inventory: Artifacts of the current phase directory
        read_plan: Optional reader used only to attach a plan objective;
            any failure just leaves the objective out

    Returns:
        Exactly one Action
    """
    # 1. Interrupted execution
    agent_id = inventory.interrupted_agent_id or state.interrupted_agent_id
    if agent_id:
        return ResumeInterrupted(agent_id=agent_id)

    # 2. Paused work
    if inventory.paused or state.has_handoff:
        return ResumeWork(handoff_path=inventory.handoff_path)

    # 3. Fix plans waiting to run
    pending_fixes = fixes_without_summary(inventory)
    if pending_fixes:
        return ExecutePlan(plan_path=inventory.relative_path(pending_fixes[0]), is_fix=True)

    # 4. Issues needing a fix plan
    open_issues = issues_without_fix(inventory)
    if open_issues:
        issue_file = open_issues[0]
        ref = ISSUE_REF.search(issue_file)
        return PlanFix(
            issue=ref.group(1) if ref else _strip(issue_file, "-ISSUES.md"),
            issue_file=issue_file,
        )

    # 5. Plans waiting to run
    next_plan = first_unexecuted_plan(inventory)
    if next_plan:
        plan_path = inventory.relative_path(next_plan)
        objective = _read_objective(read_plan, plan_path, objective_max_length)
        return ExecutePlan(plan_path=plan_path, objective=objective)

    if state.current_phase is not None:
        # 6. Phase not planned yet (also covers a phase dir that vanished)
        if inventory.plan_count == 0:
            return PlanPhase(phase=state.current_phase)

        # 7. Phase fully executed
        if inventory.executed_count == inventory.plan_count:
            next_phase = state.get_next_phase()
            if next_phase is not None:
                return PlanPhase(phase=next_phase.number)
            return CompleteMilestone()

    # 8. Fallback
    suggestion = state.suggestion()
    if suggestion:
        return UseStateSuggestion(suggestion=suggestion)
    return Unknown()
