"""Thin async HTTP clients for the services the agents expose."""

from mcp_agents.backends.errors import BackendError, SessionError
