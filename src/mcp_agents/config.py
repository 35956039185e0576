"""Agent configuration — server limits and per-backend credentials.

Settings come from an optional YAML file and from the environment. Values
in the file win; credentials left unset fall back to the environment
variables the agents have always read (``SUPABASE_URL``, ``NOTION_API_KEY``,
...).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcp_agents.protocol.framing import DEFAULT_MAX_FRAME_BYTES
from mcp_agents.protocol.models import PROTOCOL_VERSION


class ConfigError(Exception):
    """Raised when a config file cannot be read or fails validation."""


class ServerSettings(BaseModel):
    """Protocol-loop limits shared by every agent."""

    protocol_version: str = PROTOCOL_VERSION
    max_frame_bytes: int = Field(default=DEFAULT_MAX_FRAME_BYTES, gt=0)
    max_concurrency: int | None = Field(default=None, gt=0)


class GmailSettings(BaseModel):
    client_id: str | None = None
    client_secret: str | None = None
    token_path: Path = Path("token.json")
    token_uri: str = "https://oauth2.googleapis.com/token"
    api_base: str = "https://gmail.googleapis.com/gmail/v1"
    timeout: float = 30.0


class NotionSettings(BaseModel):
    api_key: str | None = None
    api_base: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    timeout: float = 30.0


class TasksSettings(BaseModel):
    supabase_url: str | None = None
    supabase_key: str | None = None
    table: str = "tasks"
    timeout: float = 30.0


class AgentConfig(BaseModel):
    """Top-level configuration, one section per concern."""

    server: ServerSettings = Field(default_factory=ServerSettings)
    gmail: GmailSettings = Field(default_factory=GmailSettings)
    notion: NotionSettings = Field(default_factory=NotionSettings)
    tasks: TasksSettings = Field(default_factory=TasksSettings)


# (section, field) -> environment variable
_ENV_FALLBACKS: dict[tuple[str, str], str] = {
    ("server", "max_frame_bytes"): "MCP_AGENTS_MAX_FRAME_BYTES",
    ("server", "max_concurrency"): "MCP_AGENTS_MAX_CONCURRENCY",
    ("gmail", "client_id"): "GOOGLE_CLIENT_ID",
    ("gmail", "client_secret"): "GOOGLE_CLIENT_SECRET",
    ("gmail", "token_path"): "GMAIL_TOKEN_PATH",
    ("notion", "api_key"): "NOTION_API_KEY",
    ("tasks", "supabase_url"): "SUPABASE_URL",
    ("tasks", "supabase_key"): "SUPABASE_ANON_KEY",
}


def load_config(path: Path | None = None, env: dict[str, str] | None = None) -> AgentConfig:
    """Build an :class:`AgentConfig` from *path* (optional) and *env*.

    Environment variables in the form ``${VAR}`` or ``$VAR`` inside the file
    are expanded before YAML parsing.

    Raises:
        ConfigError: On unreadable files, YAML errors or invalid values.
    """
    environ = os.environ if env is None else env
    data: dict[str, Any] = {}

    if path is not None:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {path}: {exc}") from exc
        try:
            loaded: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError("Config YAML must be a mapping")
        data = loaded

    for (section, key), var in _ENV_FALLBACKS.items():
        value = environ.get(var)
        if not value:
            continue
        block = data.setdefault(section, {})
        if not isinstance(block, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        if block.get(key) is None:
            block[key] = value

    try:
        return AgentConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
