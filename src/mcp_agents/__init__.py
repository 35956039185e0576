"""MCP agents — stdio JSON-RPC tool servers for Gmail, Notion and Supabase tasks."""

from __future__ import annotations

__version__ = "0.1.0"
