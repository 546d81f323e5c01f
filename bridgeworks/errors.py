"""
Error taxonomy for the lifecycle service.

All four are local, recoverable conditions: the caller turns them into
user-facing messages (the API maps them to 401 / 403 / 422 / 404).
They are raised before any state is mutated.
"""

from __future__ import annotations

from typing import Optional


class BridgeworksError(Exception):
    """Base class for every error raised by the lifecycle service."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(BridgeworksError):
    """No acting user was supplied for a mutating operation."""

    def __init__(self, action: str):
        super().__init__(f"You must be logged in to {action}.")
        self.action = action


class AuthorizationError(BridgeworksError):
    """The actor's role may not move the request to the requested status."""

    def __init__(self, current_status: str, requested_status: str, role: str):
        super().__init__(
            f"Role '{role}' cannot move a request from '{current_status}' "
            f"to '{requested_status}'"
        )
        self.current_status = current_status
        self.requested_status = requested_status
        self.role = role


class ValidationError(BridgeworksError):
    """A required free-text field is blank or a numeric/date field is malformed."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid '{field}': {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(BridgeworksError):
    """The operation targets an unknown request identifier."""

    def __init__(self, request_id: str, kind: Optional[str] = "Request"):
        super().__init__(f"{kind} {request_id} not found")
        self.request_id = request_id
