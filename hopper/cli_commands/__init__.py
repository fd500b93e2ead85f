"""
Hopper CLI Commands.

Each submodule has a `register(cli)` function that adds its commands.

    cli_commands/
    ├── __init__.py      # This file - registration
    └── verify_group.py  # verify (start, result, severity, finish, status, list)

Usage:
    from hopper.cli_commands import register_all

    @click.group()
    def cli():
        pass

    register_all(cli)
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_all(cli: "click.Group") -> None:
    """Register all command modules with the CLI group.

    Args:
        cli: The Click group to register commands with
    """
    from . import verify_group

    verify_group.register(cli)
