"""Failure taxonomy for the commerce-state engine.

Every public ledger operation converts these into a user notification at
its boundary (see ``src.engine.boundary``); none of them is fatal.
"""

from __future__ import annotations


class CommerceError(Exception):
    """Base class for engine failures that surface as notifications."""

    notification_type = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(CommerceError):
    """A mutating operation was attempted with no signed-in identity."""


class MalformedPersistedData(CommerceError):
    """Persisted data could not be parsed. Logged, never propagated."""


class RemoteOperationFailed(CommerceError):
    """The remote backend reported an error."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ValidationFailed(CommerceError):
    """Input rejected before any state change."""

    notification_type = "warning"


class NotFound(CommerceError):
    """The referenced line, entry or alert does not exist."""

    notification_type = "info"
