"""Gmail REST client and the OAuth-token session that owns it."""

from __future__ import annotations

import copy
import json
import logging
import time
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from mcp_agents.backends._http import ApiClient
from mcp_agents.backends.errors import BackendError, SessionError
from mcp_agents.protocol.session import Session

if TYPE_CHECKING:
    from pathlib import Path

    import httpx

    from mcp_agents.config import GmailSettings

logger = logging.getLogger(__name__)

# Refresh this long before the recorded expiry.
_EXPIRY_SKEW_MS = 60_000


class OAuthTokens(BaseModel):
    """The token file written by Google's OAuth consent flow."""

    model_config = {"extra": "allow"}

    access_token: str | None = None
    refresh_token: str | None = None
    expiry_date: int | None = None
    token_type: str = "Bearer"
    scope: str | None = None

    def expired(self, now_ms: int | None = None) -> bool:
        if not self.access_token:
            return True
        if self.expiry_date is None:
            return False
        now = int(time.time() * 1000) if now_ms is None else now_ms
        return now >= self.expiry_date - _EXPIRY_SKEW_MS


def _expired_message(path: Path) -> str:
    return (
        "Authentication tokens are expired. "
        f"Re-run the Gmail OAuth consent flow to refresh {path}."
    )


class GmailClient(ApiClient):
    """Calls the Gmail v1 API for the authenticated user (``me``).

    A client is bound to one set of OAuth tokens. When they have expired, or
    Gmail answers 401, the client asks its session for a replacement through
    :meth:`Session.refresh`, so concurrent callers holding the same stale
    client trigger a single token refresh, and the call is retried once.
    """

    service = "gmail"

    def __init__(
        self,
        settings: GmailSettings,
        tokens: OAuthTokens,
        session: Session[GmailClient],
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(settings.api_base, timeout=settings.timeout, transport=transport)
        self.tokens = tokens
        self._session = session

    def with_tokens(self, tokens: OAuthTokens) -> GmailClient:
        """Return a client for *tokens* sharing this one's connection pool."""
        fresh = copy.copy(self)
        fresh.tokens = tokens
        return fresh

    async def _authorized(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        json: Any,
    ) -> Any:
        return await self.request(
            method, path, params=params, json=json,
            headers={"Authorization": f"Bearer {self.tokens.access_token}"},
        )

    async def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        client = self
        if client.tokens.expired():
            client = await self._session.refresh(client)
        try:
            return await client._authorized(method, path, params, json)
        except BackendError as exc:
            if exc.status != 401:
                raise
            logger.info("Gmail rejected the access token, refreshing")
        client = await self._session.refresh(client)
        return await client._authorized(method, path, params, json)

    async def list_messages(self, query: str, max_results: int) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"maxResults": max_results}
        if query:
            params["q"] = query
        data = await self.call("GET", "/users/me/messages", params=params)
        return list((data or {}).get("messages") or [])

    async def get_message(self, message_id: str, fmt: str | None = None) -> dict[str, Any]:
        params = {"format": fmt} if fmt else None
        return await self.call("GET", f"/users/me/messages/{message_id}", params=params)

    async def send_message(self, raw: str) -> dict[str, Any]:
        return await self.call("POST", "/users/me/messages/send", json={"raw": raw})

    async def get_thread(self, thread_id: str) -> dict[str, Any]:
        return await self.call("GET", f"/users/me/threads/{thread_id}")

    async def modify_labels(
        self,
        message_id: str,
        *,
        add: list[str] | None = None,
        remove: list[str] | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if add:
            body["addLabelIds"] = add
        if remove:
            body["removeLabelIds"] = remove
        return await self.call("POST", f"/users/me/messages/{message_id}/modify", json=body)

    async def create_draft(self, raw: str) -> dict[str, Any]:
        return await self.call("POST", "/users/me/drafts", json={"message": {"raw": raw}})


class GmailSession(Session[GmailClient]):
    """Loads the saved OAuth tokens and keeps the access token fresh.

    Acquiring the tokens (the interactive consent flow) happens elsewhere;
    this session only reads the token file, refreshes the access token at
    Google's token endpoint when it is missing, expired or rejected, and
    reports actionable errors. Refreshes run under the session lock.
    """

    def __init__(
        self,
        settings: GmailSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._transport = transport
        self._oauth: ApiClient | None = None
        self._tokens: OAuthTokens | None = None

    @property
    def tokens(self) -> OAuthTokens | None:
        return self._tokens

    async def _open(self) -> GmailClient:
        tokens = self._load_tokens()
        self._oauth = ApiClient("", timeout=self._settings.timeout, transport=self._transport)
        self._oauth.service = "google-oauth"
        if tokens.expired():
            try:
                tokens = await self._refresh_tokens(tokens)
            except SessionError:
                await self._oauth.aclose()
                self._oauth = None
                raise
        self._tokens = tokens
        logger.info("Authentication successful")
        return GmailClient(self._settings, tokens, self, transport=self._transport)

    async def _refresh(self, stale: GmailClient) -> GmailClient:
        self._tokens = await self._refresh_tokens(stale.tokens)
        return stale.with_tokens(self._tokens)

    async def _close(self, client: GmailClient) -> None:
        await client.aclose()
        if self._oauth is not None:
            await self._oauth.aclose()
            self._oauth = None

    def _load_tokens(self) -> OAuthTokens:
        path = self._settings.token_path
        logger.info("Looking for token file at: %s", path)
        if not path.exists():
            msg = (
                f"No authentication tokens found at {path}. "
                "Run the Gmail OAuth consent flow and save the tokens there."
            )
            raise SessionError(msg)
        try:
            return OAuthTokens.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as exc:
            msg = f"Cannot read authentication tokens from {path}: {exc}"
            raise SessionError(msg) from exc

    async def _refresh_tokens(self, tokens: OAuthTokens) -> OAuthTokens:
        path = self._settings.token_path
        if not tokens.refresh_token:
            raise SessionError(_expired_message(path))
        if not self._settings.client_id or not self._settings.client_secret:
            msg = (
                "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set "
                "to refresh the Gmail access token."
            )
            raise SessionError(msg)
        assert self._oauth is not None

        try:
            data = await self._oauth.request(
                "POST",
                self._settings.token_uri,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": tokens.refresh_token,
                    "client_id": self._settings.client_id,
                    "client_secret": self._settings.client_secret,
                },
            )
        except BackendError as exc:
            logger.error("Token validation failed: %s", exc)
            if "invalid_grant" in str(exc) or "invalid_token" in str(exc):
                raise SessionError(_expired_message(path), status=exc.status) from exc
            raise SessionError(f"Token refresh failed: {exc}", status=exc.status) from exc

        data = data or {}
        expires_in = data.get("expires_in")
        expiry = int(time.time() * 1000) + int(expires_in) * 1000 if expires_in else None
        logger.info("Refreshed Gmail access token")
        return tokens.model_copy(
            update={
                "access_token": data.get("access_token"),
                "expiry_date": expiry,
                "refresh_token": data.get("refresh_token") or tokens.refresh_token,
            }
        )
