"""Gmail agent — search, read, send and label the user's mail."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, field_validator

from mcp_agents.agents.base import Agent
from mcp_agents.backends.gmail import GmailClient, GmailSession
from mcp_agents.protocol.models import ServerInfo
from mcp_agents.protocol.registry import ToolArguments, ToolRegistry, ToolSpec

if TYPE_CHECKING:
    import httpx

    from mcp_agents.config import AgentConfig

_MESSAGE_FIELDS_REQUIRED = "To, subject, and body are required"
_MESSAGE_IDS_REQUIRED = "Message IDs array is required"


def header(headers: list[dict[str, Any]], name: str, default: str = "") -> str:
    """Return the value of the first header called *name*."""
    for item in headers:
        if item.get("name") == name:
            return str(item.get("value", default))
    return default


def build_raw_message(to: str, subject: str, body: str) -> str:
    """RFC 822 plain-text message, base64url-encoded for the Gmail API."""
    message = "\n".join(
        [
            f"To: {to}",
            f"Subject: {subject}",
            "Content-Type: text/plain; charset=utf-8",
            "MIME-Version: 1.0",
            "",
            body,
        ]
    )
    return base64.urlsafe_b64encode(message.encode("utf-8")).decode("ascii")


def decode_body(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8", errors="replace")


def extract_plain_text(payload: dict[str, Any]) -> str:
    """First ``text/plain`` part of a message payload, or its inline body."""
    parts = payload.get("parts")
    if parts:
        for part in parts:
            data = (part.get("body") or {}).get("data")
            if part.get("mimeType") == "text/plain" and data:
                return decode_body(data)
        return ""
    data = (payload.get("body") or {}).get("data")
    return decode_body(data) if data else ""


def summarize(message: dict[str, Any]) -> dict[str, Any]:
    headers = (message.get("payload") or {}).get("headers") or []
    return {
        "id": message.get("id"),
        "subject": header(headers, "Subject", "No Subject"),
        "from": header(headers, "From", "Unknown"),
        "date": header(headers, "Date"),
        "snippet": message.get("snippet"),
    }


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class SearchEmailsArgs(ToolArguments):
    query: str = Field(default="", description="Search query")
    sender: str = Field(default="", description="Sender email")
    date_from: str = Field(default="", alias="dateFrom", description="After date (YYYY/MM/DD)")
    date_to: str = Field(default="", alias="dateTo", description="Before date (YYYY/MM/DD)")
    max_results: int = Field(default=10, gt=0, le=500, alias="maxResults", description="Max results")

    def gmail_query(self) -> str:
        terms = []
        if self.query:
            terms.append(self.query)
        if self.sender:
            terms.append(f"from:{self.sender}")
        if self.date_from:
            terms.append(f"after:{self.date_from}")
        if self.date_to:
            terms.append(f"before:{self.date_to}")
        return " ".join(terms)


class ReadEmailArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {"messageId": "Message ID is required"}

    message_id: str = Field(alias="messageId", description="Email message ID")


class ComposeArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {
        "to": _MESSAGE_FIELDS_REQUIRED,
        "subject": _MESSAGE_FIELDS_REQUIRED,
        "body": _MESSAGE_FIELDS_REQUIRED,
    }

    to: str = Field(description="Recipient")
    subject: str = Field(description="Subject")
    body: str = Field(description="Body")


class GetThreadArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {"threadId": "Thread ID is required"}

    thread_id: str = Field(alias="threadId", description="Thread ID")


class MessageIdsArgs(ToolArguments):
    required_messages: ClassVar[dict[str, str]] = {"messageIds": _MESSAGE_IDS_REQUIRED}

    message_ids: list[str] = Field(alias="messageIds", description="Message IDs to update")

    @field_validator("message_ids", mode="before")
    @classmethod
    def _must_be_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            raise ValueError(_MESSAGE_IDS_REQUIRED)
        return value


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def search_emails(client: GmailClient, args: SearchEmailsArgs) -> list[dict[str, Any]]:
    found = await client.list_messages(args.gmail_query(), args.max_results)
    results = []
    for ref in found:
        message = await client.get_message(ref["id"])
        results.append({**summarize(message), "threadId": ref.get("threadId")})
    return results


async def read_email(client: GmailClient, args: ReadEmailArgs) -> dict[str, Any]:
    message = await client.get_message(args.message_id, fmt="full")
    payload = message.get("payload") or {}
    headers = payload.get("headers") or []
    return {
        "id": message.get("id"),
        "subject": header(headers, "Subject", "No Subject"),
        "from": header(headers, "From", "Unknown"),
        "to": header(headers, "To"),
        "date": header(headers, "Date"),
        "body": extract_plain_text(payload),
    }


async def send_email(client: GmailClient, args: ComposeArgs) -> dict[str, Any]:
    sent = await client.send_message(build_raw_message(args.to, args.subject, args.body))
    return {"id": sent.get("id")}


async def get_thread(client: GmailClient, args: GetThreadArgs) -> dict[str, Any]:
    thread = await client.get_thread(args.thread_id)
    return {
        "threadId": thread.get("id"),
        "messages": [summarize(message) for message in thread.get("messages") or []],
    }


async def mark_read(client: GmailClient, args: MessageIdsArgs) -> dict[str, int]:
    for message_id in args.message_ids:
        await client.modify_labels(message_id, remove=["UNREAD"])
    return {"updated": len(args.message_ids)}


async def mark_unread(client: GmailClient, args: MessageIdsArgs) -> dict[str, int]:
    for message_id in args.message_ids:
        await client.modify_labels(message_id, add=["UNREAD"])
    return {"updated": len(args.message_ids)}


async def create_draft(client: GmailClient, args: ComposeArgs) -> dict[str, Any]:
    draft = await client.create_draft(build_raw_message(args.to, args.subject, args.body))
    return {"id": draft.get("id")}


TOOLS: tuple[ToolSpec[Any], ...] = (
    ToolSpec("search_emails", "Find emails by query, sender, date range", SearchEmailsArgs, search_emails),
    ToolSpec("read_email", "Get email content, headers", ReadEmailArgs, read_email),
    ToolSpec("send_email", "Compose and send messages", ComposeArgs, send_email),
    ToolSpec("get_thread", "Retrieve email conversations", GetThreadArgs, get_thread),
    ToolSpec("mark_read", "Mark emails as read", MessageIdsArgs, mark_read),
    ToolSpec("mark_unread", "Mark emails as unread", MessageIdsArgs, mark_unread),
    ToolSpec("create_draft", "Save draft emails", ComposeArgs, create_draft),
)


def build_agent(config: AgentConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> Agent:
    return Agent(
        name="gmail",
        server_info=ServerInfo(name="gmail-mcp", version="1.0.0"),
        registry=ToolRegistry(TOOLS),
        session=GmailSession(config.gmail, transport=transport),
    )
