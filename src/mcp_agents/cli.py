"""Command-line entrypoint: ``mcp-agents`` (also ``python -m mcp_agents``)."""

from __future__ import annotations

import click

from mcp_agents import __version__
from mcp_agents.cli_commands import register_commands

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="mcp-agents")
def main() -> None:
    """Stdio JSON-RPC tool servers for Gmail, Notion and Supabase tasks.

    \b
    Run an agent for an MCP host:
        mcp-agents serve tasks --config agents.yaml
    Inspect what it exposes:
        mcp-agents tools list gmail
    """


register_commands(main)
