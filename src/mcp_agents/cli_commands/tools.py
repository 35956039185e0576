"""``mcp-agents tools`` — inspect an agent's tool catalog."""

from __future__ import annotations

import json

import click

from mcp_agents.agents import AGENT_BUILDERS
from mcp_agents.cli_commands._output import console, print_tools_table


@click.group()
def tools() -> None:
    """Inspect the tools each agent exposes."""


@tools.command("list")
@click.argument("agent", type=click.Choice(sorted(AGENT_BUILDERS)))
@click.option("--json", "as_json", is_flag=True, help="Print the raw tools/list payload.")
def list_tools(agent: str, as_json: bool) -> None:
    """List the tools published by AGENT.

    No credentials are needed; the catalog is static.
    """
    from mcp_agents.agents import build_agent
    from mcp_agents.config import AgentConfig

    registry = build_agent(agent, AgentConfig()).registry
    descriptors = [descriptor.to_wire() for descriptor in registry.list_tools()]

    if as_json:
        console.print_json(json.dumps({"tools": descriptors}))
        return

    if not descriptors:
        console.print("[yellow]No tools registered.[/yellow]")
        return

    print_tools_table(descriptors, title=f"{agent} tools")
