"""
Hopper Project Configuration.

Per-project settings stored in .planning/config.json.

Everything has a default, so a project without a config file (or with a
broken one) behaves exactly like a fresh project.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


PLANNING_DIR = ".planning"
CONFIG_FILE = "config.json"


@dataclass
class HopperConfig:
    """Project-level configuration."""
    issue_prefix: str = "UAT"  # UAT-001, UAT-002, ...
    max_decisions: int = 5  # Recent decisions kept in ProjectState
    objective_max_length: int = 100  # Plan objective truncation
    sessions_dir: str = ".sessions"  # Under .planning/
    progress_bar_width: int = 20

    def to_dict(self) -> dict:
        return {
            "issue_prefix": self.issue_prefix,
            "max_decisions": self.max_decisions,
            "objective_max_length": self.objective_max_length,
            "sessions_dir": self.sessions_dir,
            "progress_bar_width": self.progress_bar_width,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HopperConfig":
        return cls(
            issue_prefix=data.get("issue_prefix", "UAT"),
            max_decisions=data.get("max_decisions", 5),
            objective_max_length=data.get("objective_max_length", 100),
            sessions_dir=data.get("sessions_dir", ".sessions"),
            progress_bar_width=data.get("progress_bar_width", 20),
        )


def get_planning_dir(project_path: Optional[Union[str, Path]] = None) -> Path:
    """Get the .planning directory for a project."""
    if project_path is None:
        project_path = Path.cwd()
    return Path(project_path) / PLANNING_DIR


def get_config_path(project_path: Optional[Union[str, Path]] = None) -> Path:
    """Get the config file path for a project."""
    return get_planning_dir(project_path) / CONFIG_FILE


def load_config(project_path: Optional[Union[str, Path]] = None) -> HopperConfig:
    """Load project configuration. Returns defaults if not found."""
    config_file = get_config_path(project_path)

    if not config_file.exists():
        return HopperConfig()

    try:
        with open(config_file) as f:
            data = json.load(f)
        return HopperConfig.from_dict(data)
    except (json.JSONDecodeError, KeyError, AttributeError):
        return HopperConfig()


def save_config(project_path: Union[str, Path], config: HopperConfig) -> None:
    """Save project configuration."""
    config_file = get_config_path(project_path)

    # Ensure .planning directory exists
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
