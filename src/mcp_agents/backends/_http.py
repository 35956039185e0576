"""Shared ``httpx`` plumbing for the backend clients."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mcp_agents.backends.errors import BackendError

logger = logging.getLogger(__name__)


def error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a provider error body.

    Understands the shapes used by Google (``{"error": {"message"}}`` and
    OAuth's ``{"error", "error_description"}``), Notion and PostgREST
    (``{"message"}``). Falls back to the raw body, then the status line.
    """
    try:
        body: Any = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        if isinstance(body.get("message"), str):
            return body["message"]
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            description = body.get("error_description")
            return f"{error}: {description}" if description else error

    text = response.text.strip()
    if text:
        return text
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class ApiClient:
    """Wraps one ``httpx.AsyncClient`` bound to a service's base URL.

    :meth:`request` returns the decoded JSON body (``None`` for empty
    bodies) and turns every transport or HTTP failure into
    :class:`BackendError` carrying the provider's message.
    """

    service = "backend"

    def __init__(
        self,
        base_url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and return the successful response."""
        try:
            response = await self._http.request(
                method, path, params=params, json=json, data=data, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s %s failed: %s", self.service, method, path, exc)
            raise BackendError(f"{self.service} request failed: {exc}") from exc

        if response.is_error:
            message = error_message(response)
            logger.warning(
                "%s %s %s returned %d: %s",
                self.service, method, path, response.status_code, message,
            )
            raise BackendError(message, status=response.status_code)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return its decoded JSON body."""
        response = await self.send(
            method, path, params=params, json=json, data=data, headers=headers
        )
        if not response.content:
            return None
        return response.json()
