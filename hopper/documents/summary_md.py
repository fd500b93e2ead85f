"""
SUMMARY.md helpers.

A summary marks a plan as executed. Verification reads its Accomplishments
and Files Created/Modified sections to know what to test.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


SUMMARY_FILE = re.compile(r"(\d+(?:\.\d+)?)-(\d+)-SUMMARY\.md$")


@dataclass
class Deliverables:
    """What a plan claims to have delivered."""
    accomplishments: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.accomplishments


def _section(content: str, title: str) -> List[str]:
    """Lines of a '## <title>' section up to the next '##' header."""
    lines = (content or "").split("\n")
    pattern = re.compile(rf"^##\s*{re.escape(title)}\s*$", re.IGNORECASE)
    for i, line in enumerate(lines):
        if pattern.match(line.strip()):
            section = []
            for follow in lines[i + 1:]:
                if follow.strip().startswith("##"):
                    break
                section.append(follow)
            return section
    return []


def parse_deliverables(content: str) -> Deliverables:
    """Accomplishment bullets and backticked file paths."""
    deliverables = Deliverables()

    for line in _section(content, "Accomplishments"):
        stripped = line.strip()
        if stripped.startswith(("-", "*")):
            item = re.sub(r"^[-*]\s*", "", stripped)
            if item:
                deliverables.accomplishments.append(item)

    for line in _section(content, "Files Created/Modified"):
        match = re.search(r"`([^`]+)`", line)
        if match:
            deliverables.files.append(match.group(1))

    return deliverables


def extract_one_liner(content: str) -> Optional[str]:
    """The bold one-line summary under the title, if present."""
    lines = (content or "").split("\n")
    for i, raw in enumerate(lines):
        line = raw.strip()
        if line.startswith("**") and line.endswith("**") and len(line) > 4 and ":" not in line:
            return line.strip("*").strip()
        if line.startswith("#") and i + 1 < len(lines):
            nxt = lines[i + 1].strip()
            if nxt.startswith("**") and nxt.endswith("**") and len(nxt) > 4:
                return nxt.strip("*").strip()
    return None


def parse_summary_id(path: str) -> Optional[Tuple[str, str]]:
    """'01-foundation/01-02-SUMMARY.md' -> ('01', '02')."""
    match = SUMMARY_FILE.search(path or "")
    if not match:
        return None
    return match.group(1), match.group(2)
