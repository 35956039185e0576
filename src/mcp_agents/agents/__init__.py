"""The deployable agents and a name-based lookup for the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp_agents.agents import gmail, notion, tasks
from mcp_agents.agents.base import Agent

if TYPE_CHECKING:
    from collections.abc import Callable

    from mcp_agents.config import AgentConfig

AGENT_BUILDERS: dict[str, Callable[[AgentConfig], Agent]] = {
    "gmail": gmail.build_agent,
    "notion": notion.build_agent,
    "tasks": tasks.build_agent,
}


def build_agent(name: str, config: AgentConfig) -> Agent:
    """Build the agent registered under *name*."""
    builder = AGENT_BUILDERS.get(name)
    if builder is None:
        msg = f"Unknown agent: {name} (expected one of {', '.join(AGENT_BUILDERS)})"
        raise KeyError(msg)
    return builder(config)
