"""
Artifact inventory for the active phase directory.

The router never touches the file system; it is handed an ArtifactInventory.
classify_artifacts() builds one from a list of file names (pure), and
scan_inventory() reads .planning/phases/ to produce the names.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from hopper.config import get_planning_dir
from hopper.models.roadmap import Plan, pad_phase_number
from hopper.documents.plan_md import parse_plan_file_name

logger = logging.getLogger(__name__)

HANDOFF_FILE = ".continue-here.md"
AGENT_ID_FILE = "current-agent-id.txt"
SUMMARY_NAME = re.compile(r"^(\d+(?:\.\d+)?)-(\d+)-SUMMARY\.md$")


@dataclass
class ArtifactInventory:
    """File inventory of one phase directory."""
    phase_dir: Optional[str] = None  # e.g. "02-authentication"

    plan_files: List[str] = field(default_factory=list)
    summary_files: List[str] = field(default_factory=list)
    issue_files: List[str] = field(default_factory=list)
    fix_plans: List[str] = field(default_factory=list)
    fix_summaries: List[str] = field(default_factory=list)

    handoff_path: Optional[str] = None  # Set when a paused handoff exists
    interrupted_agent_id: Optional[str] = None

    @property
    def plan_count(self) -> int:
        return len(self.plan_files)

    @property
    def executed_count(self) -> int:
        return len(self.summary_files)

    @property
    def paused(self) -> bool:
        return self.handoff_path is not None

    @property
    def interrupted(self) -> bool:
        return bool(self.interrupted_agent_id)

    def relative_path(self, file_name: str) -> str:
        """Path of a phase file relative to the project root."""
        if self.phase_dir:
            return f".planning/phases/{self.phase_dir}/{file_name}"
        return file_name

    def plans(self) -> List[Plan]:
        """Plan records with executed flags, ordered by file name."""
        executed = {s[: -len("-SUMMARY.md")] for s in self.summary_files}
        plans = []
        for name in sorted(self.plan_files):
            parsed = parse_plan_file_name(name)
            phase, index = parsed if parsed else ("", 0)
            plan = Plan(phase=phase, index=index, file_name=name)
            plan.executed = plan.base_name in executed
            plans.append(plan)
        return plans

    def to_dict(self) -> dict:
        return {
            "phase_dir": self.phase_dir,
            "plan_files": self.plan_files,
            "summary_files": self.summary_files,
            "issue_files": self.issue_files,
            "fix_plans": self.fix_plans,
            "fix_summaries": self.fix_summaries,
            "handoff_path": self.handoff_path,
            "interrupted_agent_id": self.interrupted_agent_id,
        }


def classify_artifacts(
    names: Iterable[str],
    phase_dir: Optional[str] = None,
    handoff_path: Optional[str] = None,
    interrupted_agent_id: Optional[str] = None,
) -> ArtifactInventory:
    """Sort file names into plan/summary/issue/fix buckets.

    FIX plans and FIX summaries are kept apart from regular plans and
    summaries so that executing a fix never counts as executing a plan.
    """
    inventory = ArtifactInventory(
        phase_dir=phase_dir,
        handoff_path=handoff_path,
        interrupted_agent_id=interrupted_agent_id,
    )

    for name in sorted(names):
        is_fix = "-FIX" in name
        if name.endswith("-PLAN.md"):
            (inventory.fix_plans if is_fix else inventory.plan_files).append(name)
        elif name.endswith("-SUMMARY.md"):
            (inventory.fix_summaries if is_fix else inventory.summary_files).append(name)
        elif name.endswith("-ISSUES.md"):
            inventory.issue_files.append(name)

    return inventory


def find_phase_dir(planning_dir: Path, phase_number: Optional[float]) -> Optional[Path]:
    """Find the phase directory by number ('02-' or '2-' prefix)."""
    if phase_number is None:
        return None

    phases_dir = planning_dir / "phases"
    if not phases_dir.is_dir():
        return None

    padded = pad_phase_number(phase_number)
    plain = padded.lstrip("0") or "0"
    if plain.startswith("."):
        plain = "0" + plain

    for d in sorted(phases_dir.iterdir()):
        if d.is_dir() and (d.name.startswith(f"{padded}-") or d.name.startswith(f"{plain}-")):
            return d

    return None


def find_handoff(planning_dir: Path) -> Optional[str]:
    """Relative path of the first .continue-here.md handoff, if any."""
    phases_dir = planning_dir / "phases"
    if not phases_dir.is_dir():
        return None
    for d in sorted(phases_dir.iterdir()):
        if d.is_dir() and (d / HANDOFF_FILE).exists():
            return f".planning/phases/{d.name}/{HANDOFF_FILE}"
    return None


def read_agent_id(planning_dir: Path) -> Optional[str]:
    """Interrupted agent id from current-agent-id.txt, if any."""
    try:
        agent_id = (planning_dir / AGENT_ID_FILE).read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {AGENT_ID_FILE}: {e}")
        return None
    return agent_id or None


def scan_inventory(
    project_path: Union[str, Path],
    phase_number: Optional[float],
) -> ArtifactInventory:
    """Build the inventory for a phase from disk.

    Read errors degrade to an empty inventory (which routes to planning)
    rather than aborting.
    """
    planning_dir = get_planning_dir(project_path)
    agent_id = read_agent_id(planning_dir)
    try:
        handoff = find_handoff(planning_dir)
    except OSError as e:
        logger.warning(f"Handoff scan failed: {e}")
        handoff = None

    try:
        phase_dir = find_phase_dir(planning_dir, phase_number)
        if phase_dir is None:
            return classify_artifacts([], handoff_path=handoff, interrupted_agent_id=agent_id)
        names = [p.name for p in phase_dir.iterdir() if p.is_file()]
    except OSError as e:
        logger.warning(f"Inventory scan failed for phase {phase_number}: {e}")
        return classify_artifacts([], handoff_path=handoff, interrupted_agent_id=agent_id)

    return classify_artifacts(
        names,
        phase_dir=phase_dir.name,
        handoff_path=handoff,
        interrupted_agent_id=agent_id,
    )


def _matches_target(phase: str, plan: str, target: Optional[str]) -> bool:
    """Target is a phase ('4', '04', '4.5') or plan ref ('04-02')."""
    if not target:
        return True
    want_phase, _, want_plan = target.partition("-")
    try:
        if float(phase) != float(want_phase):
            return False
        return not want_plan or int(plan) == int(want_plan)
    except ValueError:
        return False


def find_summary_files(
    project_path: Union[str, Path],
    target: Optional[str] = None,
) -> List[Tuple[Path, str, str]]:
    """Plan summaries as (path, phase, plan), newest phase/plan first.

    FIX summaries are excluded.
    """
    phases_dir = get_planning_dir(project_path) / "phases"
    found = []
    try:
        for summary in sorted(phases_dir.glob("*/*-SUMMARY.md")):
            match = SUMMARY_NAME.match(summary.name)
            if match and _matches_target(match.group(1), match.group(2), target):
                found.append((summary, match.group(1), match.group(2)))
    except OSError as e:
        logger.warning(f"Could not list summaries: {e}")
        return []

    found.sort(key=lambda item: (float(item[1]), int(item[2])), reverse=True)
    return found
