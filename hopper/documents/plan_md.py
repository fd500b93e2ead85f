"""
Plan body helpers (NN-MM-PLAN.md).

Only used for best-effort display data: frontmatter and the objective line.
"""

import re
from typing import Any, Dict, Optional, Tuple

import yaml


OBJECTIVE_BLOCK = re.compile(r"<objective>\s*([\s\S]*?)\s*</objective>")
PLAN_FILE = re.compile(r"^(\d+(?:\.\d+)?)-(\d+)(-FIX\d*)?-PLAN\.md$")


def parse_frontmatter(content: str) -> Dict[str, Any]:
    """Parse YAML frontmatter; {} when absent or invalid."""
    if not content or not content.startswith("---"):
        return {}

    parts = content.split("---", 2)
    if len(parts) < 3:
        return {}

    try:
        data = yaml.safe_load(parts[1]) or {}
    except yaml.YAMLError:
        return {}
    return data if isinstance(data, dict) else {}


def extract_objective(content: str, max_length: int = 100) -> Optional[str]:
    """First non-blank line inside <objective>...</objective>, truncated."""
    match = OBJECTIVE_BLOCK.search(content or "")
    if not match:
        return None

    first = next((l.strip() for l in match.group(1).split("\n") if l.strip()), "")
    if not first:
        return None
    if len(first) > max_length:
        return first[:max_length] + "..."
    return first


def parse_plan_file_name(file_name: str) -> Optional[Tuple[str, int]]:
    """'04-02-PLAN.md' -> ('04', 2). None for anything else."""
    match = PLAN_FILE.match(file_name)
    if not match:
        return None
    return match.group(1), int(match.group(2))
