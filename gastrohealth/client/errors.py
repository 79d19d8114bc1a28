# -*- coding: utf-8 -*-
"""Client — exceptions surfaced to screens and the CLI."""

from __future__ import annotations

from typing import Optional


class ClientError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(ClientError):
    """The API rejected the session (401/403). The session is already torn down."""


class RequestError(ClientError):
    """Any other failed call: non-2xx status, unreachable server, bad body."""


class FormValidationError(ClientError):
    """A required field is empty; raised before any request is issued."""


class SessionStateError(ClientError):
    """The operation is not available in the current session state."""
