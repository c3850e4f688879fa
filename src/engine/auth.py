"""Signed-in identity as seen by the ledgers.

Authentication itself is external; this only records who is signed in so
each ledger can scope its collection to that user's partition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..common.errors import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


class AuthContext:
    """Holds the current identity. Signing out never clears stored collections."""

    def __init__(self, identity: Identity | None = None) -> None:
        self._identity = identity

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def user_id(self) -> str | None:
        return self._identity.user_id if self._identity else None

    def sign_in(self, user_id: str, email: str | None = None) -> Identity:
        self._identity = Identity(user_id=user_id, email=email)
        logger.info("Signed in as %s", user_id)
        return self._identity

    def sign_out(self) -> None:
        if self._identity:
            logger.info("Signed out %s", self._identity.user_id)
        self._identity = None

    def require(self, message: str = "Please sign in to continue") -> Identity:
        """Return the current identity or raise Unauthenticated."""
        if self._identity is None:
            raise Unauthenticated(message)
        return self._identity
