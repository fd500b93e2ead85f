"""
Parse ROADMAP.md into phases and milestones.

Expected format:
```
# Roadmap: Project

## Phases

- [x] **Phase 1: Foundation** - Project skeleton and CI
- [ ] **Phase 1.5: Hotfix** - INSERTED - Patch the login race
- [ ] **Phase 2: Authentication** - JWT login

## Phase Details

### Phase 2: Authentication
**Goal**: JWT login
**Depends on**: Phase 1
```

Every function here is total: malformed or missing structure gives an empty
or default result, never an exception.
"""

import re
from typing import Dict, List, Optional

from hopper.models.roadmap import Milestone, Phase


PHASE_LINE = re.compile(
    r"^\s*-\s*\[([ xX])\]\s*(?:\*\*)?Phase\s+(\d+(?:\.\d+)?)[:.]?\s*([^*]*?)(?:\*\*)?(?:\s+[-–]\s*(.*?))?\s*$"
)
PHASE_HEADING = re.compile(r"^#{2,4}\s*Phase\s+(\d+(?:\.\d+)?)[:.]?\s*(.*)$", re.IGNORECASE)
GOAL_LINE = re.compile(r"\*\*Goal\*\*:?\s*(.+)")
DEPENDS_LINE = re.compile(r"\*\*Depends on\*\*:?\s*(.+)", re.IGNORECASE)
MILESTONE_HEADING = re.compile(r"^##\s*Milestone\s+(\d+)(?::\s*(.*))?$", re.IGNORECASE)
MILESTONE_STATUS = re.compile(r"\*\*Status:?\*\*:?\s*(.+)", re.IGNORECASE)
INSERTED_MARKER = re.compile(r"\(?INSERTED\)?\s*[-–]?\s*", re.IGNORECASE)


def _to_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


def match_phase_line(line: str) -> Optional[Phase]:
    """Match one checklist phase line, or None."""
    match = PHASE_LINE.match(line)
    if not match:
        return None

    number = _to_number(match.group(2))
    if number is None:
        return None

    goal = (match.group(4) or "").strip()
    inserted = "INSERTED" in goal.upper()
    if inserted:
        goal = INSERTED_MARKER.sub("", goal, count=1).strip()

    return Phase(
        number=number,
        name=match.group(3).strip(),
        goal=goal,
        completed=match.group(1).lower() == "x",
        inserted=inserted,
    )


def _parse_heading_phases(lines: List[str]) -> List[Phase]:
    """Fallback for roadmaps that only use '### Phase N: Name' headings."""
    phases = []
    for i, line in enumerate(lines):
        match = PHASE_HEADING.match(line.strip())
        if not match:
            continue
        number = _to_number(match.group(1))
        if number is None:
            continue

        goal = ""
        for follow in lines[i + 1:i + 10]:
            goal_match = GOAL_LINE.search(follow)
            if goal_match:
                goal = goal_match.group(1).strip()
                break

        phases.append(Phase(number=number, name=match.group(2).strip(), goal=goal))
    return phases


def parse_phase_dependencies(content: str) -> Dict[float, Optional[float]]:
    """Read explicit '**Depends on**:' lines from the Phase Details section.

    Returns a mapping of phase number to the phase it depends on, with None
    for phases that state they depend on nothing. Phases without a line are
    absent from the mapping.
    """
    deps: Dict[float, Optional[float]] = {}
    current: Optional[float] = None

    for line in (content or "").split("\n"):
        heading = PHASE_HEADING.match(line.strip())
        if heading:
            current = _to_number(heading.group(1))
            continue

        if current is None:
            continue

        dep_match = DEPENDS_LINE.search(line)
        if dep_match:
            number = re.search(r"Phase\s+(\d+(?:\.\d+)?)", dep_match.group(1), re.IGNORECASE)
            deps[current] = _to_number(number.group(1)) if number else None
            current = None

    return deps


def parse_phases(content: str) -> List[Phase]:
    """Parse all phases, sorted numerically.

    Dependencies: explicit Phase Details entries win; otherwise phase 1 (the
    first phase) has none and every later phase depends on the one before it.
    """
    lines = (content or "").split("\n")

    phases: List[Phase] = []
    seen = set()
    for line in lines:
        phase = match_phase_line(line)
        if phase and phase.number not in seen:
            seen.add(phase.number)
            phases.append(phase)

    if not phases:
        for phase in _parse_heading_phases(lines):
            if phase.number not in seen:
                seen.add(phase.number)
                phases.append(phase)

    phases.sort(key=lambda p: p.number)

    explicit = parse_phase_dependencies(content)
    previous: Optional[float] = None
    for phase in phases:
        if phase.number in explicit:
            phase.depends_on = explicit[phase.number]
        else:
            phase.depends_on = previous
        previous = phase.number

    return phases


def count_total_phases(content: str) -> int:
    """Count phases listed in the roadmap."""
    return len(parse_phases(content))


def get_next_phase(phases: List[Phase], current: Optional[float]) -> Optional[Phase]:
    """Return the phase numerically after current, if one is listed."""
    if current is None:
        return None
    for phase in sorted(phases, key=lambda p: p.number):
        if phase.number > current:
            return phase
    return None


def parse_milestones(content: str) -> List[Milestone]:
    """Parse '## Milestone N: Name' sections.

    The phase range is taken from the phase lines inside each section;
    status is 'complete' when the section says so or every phase in it is
    checked off.
    """
    milestones: List[Milestone] = []
    current: Optional[Milestone] = None
    section_phases: List[Phase] = []
    explicit_status = False

    def close():
        if current is None:
            return
        if section_phases:
            numbers = [p.number for p in section_phases]
            current.start_phase = min(numbers)
            current.end_phase = max(numbers)
            if not explicit_status and all(p.completed for p in section_phases):
                current.status = "complete"
        milestones.append(current)

    for line in (content or "").split("\n"):
        heading = MILESTONE_HEADING.match(line.strip())
        if heading:
            close()
            current = Milestone(
                number=int(heading.group(1)),
                name=(heading.group(2) or f"Milestone {heading.group(1)}").strip(),
            )
            section_phases = []
            explicit_status = False
            continue

        if current is None:
            continue

        status_match = MILESTONE_STATUS.search(line)
        if status_match:
            explicit_status = True
            value = status_match.group(1).strip().lower()
            current.status = "complete" if value.startswith("complete") else "in-progress"
            continue

        phase = match_phase_line(line)
        if phase:
            section_phases.append(phase)

    close()
    return milestones


def parse_phase_info(content: str, number: float) -> Optional[Phase]:
    """Look up a single phase by number."""
    for phase in parse_phases(content):
        if phase.number == number:
            return phase
    return None
