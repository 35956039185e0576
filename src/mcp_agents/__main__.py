from mcp_agents.cli import main

main(prog_name="mcp-agents")
