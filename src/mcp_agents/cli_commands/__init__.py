"""Subcommands of the ``mcp-agents`` CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach ``serve`` and ``tools`` to *cli*."""
    from mcp_agents.cli_commands.serve import serve
    from mcp_agents.cli_commands.tools import tools

    for command in (serve, tools):
        cli.add_command(command)
