"""
Hopper CLI - planning progress and acceptance testing.

Commands:
- progress: Show where the project is and the one thing to do next
- verify: Walk through a plan's acceptance tests (start, result, severity,
  finish, status, list)
"""

import json
import logging
import os
import sys

import click

from hopper import __version__
from hopper.cli_commands import register_all
from hopper.config import get_planning_dir, load_config
from hopper.inventory import scan_inventory
from hopper.progress import format_report, progress_report, project_name
from hopper.project import load_project_state
from hopper.router import route


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def cli(verbose: bool):
    """Hopper - staged delivery planning from .planning/ markdown.

    Reads ROADMAP.md and STATE.md, tells you what to do next, and runs
    resumable acceptance-testing sessions.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Progress
# ============================================================================

@cli.command()
@click.option("-p", "--project", default=None, help="Project path (default: cwd)")
@click.option("--json", "as_json", is_flag=True, help="Output the report as JSON")
def progress(project: str, as_json: bool):
    """Show project progress and the next action.

    \b
    Example:
        hopper progress
        hopper progress -p ../myapp --json
    """
    project_path = project or os.getcwd()
    planning_dir = get_planning_dir(project_path)

    if not planning_dir.is_dir():
        click.echo("Error: No .planning directory found.", err=True)
        click.echo("Create .planning/ROADMAP.md and .planning/STATE.md to start.", err=True)
        sys.exit(1)

    config = load_config(project_path)
    state = load_project_state(project_path, config)
    inventory = scan_inventory(project_path, state.current_phase)

    def read_plan(plan_path: str) -> str:
        with open(os.path.join(project_path, plan_path), encoding="utf-8") as f:
            return f.read()

    action = route(state, inventory, read_plan=read_plan,
                   objective_max_length=config.objective_max_length)

    project_md = planning_dir / "PROJECT.md"
    name = project_name(project_md.read_text(encoding="utf-8")) if project_md.exists() else "Project"

    report = progress_report(state, inventory, action, name=name,
                             bar_width=config.progress_bar_width)

    if as_json:
        click.echo(json.dumps(report, indent=2))
    else:
        click.echo(format_report(report))


register_all(cli)


# ============================================================================
# Entry Point
# ============================================================================

def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
