"""``mcp-agents serve`` — run one agent over stdin/stdout."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from mcp_agents.agents import AGENT_BUILDERS
from mcp_agents.cli_commands._output import LOG_LEVELS, configure_logging, err_console

logger = logging.getLogger(__name__)


@click.command()
@click.argument("agent", type=click.Choice(sorted(AGENT_BUILDERS)))
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (credentials may also come from the environment).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    help="Diagnostic verbosity (logs go to stderr).",
)
@click.option("--telemetry", is_flag=True, help="Export OpenTelemetry spans to stderr.")
@click.option("--otlp-endpoint", default=None, help="Also export spans to this OTLP endpoint.")
def serve(
    agent: str,
    config_path: Path | None,
    log_level: str,
    telemetry: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve AGENT's tools as line-delimited JSON-RPC on stdio."""
    from mcp_agents.agents import build_agent
    from mcp_agents.config import ConfigError, load_config
    from mcp_agents.protocol.errors import StdioUnavailableError
    from mcp_agents.protocol.server import serve_stdio

    configure_logging(log_level)

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    if telemetry or otlp_endpoint:
        from mcp_agents.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(agent, export_to_console=telemetry, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    built = build_agent(agent, config)
    server = built.server(config.server)
    logger.info("%s MCP server starting...", built.server_info.name)

    try:
        asyncio.run(serve_stdio(server))
    except StdioUnavailableError as exc:
        err_console.print(f"[red]Stdio error:[/red] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
