"""Error types raised by the backend integrations."""

from __future__ import annotations


class BackendError(Exception):
    """A call to a remote service failed.

    ``str(exc)`` is the provider's own message when one was returned, so it
    can be shown to the caller unchanged.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class SessionError(BackendError):
    """Credentials are missing, expired or rejected.

    The message always says how to fix the problem, since nothing is
    retried automatically.
    """
