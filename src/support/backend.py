"""Supabase support backend: tickets and messages.

Every call returns ``(data, error)``; failures never raise across this
boundary. The session decides what an error means for the user.

Prerequisites:
    - ``support_tickets`` and ``support_messages`` tables in Supabase
    - SUPABASE_URL and SUPABASE_ANON_KEY in .env

Usage:
    backend = SupabaseSupportBackend()
    tickets, error = await backend.get_user_support_tickets("user-1")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from ..common.config import settings

logger = logging.getLogger(__name__)

TICKETS_TABLE = "support_tickets"
MESSAGES_TABLE = "support_messages"


@dataclass
class BackendError:
    """Error reported by the remote backend."""

    message: str
    code: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: Exception) -> BackendError:
        message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
        code = getattr(exc, "code", None)
        return cls(message=str(message), code=str(code) if code is not None else None)


Result = tuple[Any, Optional[BackendError]]


class SupportBackend(Protocol):
    async def get_user_support_tickets(self, user_id: str) -> Result: ...

    async def create_support_ticket(self, record: dict) -> Result: ...

    async def add_support_message(self, record: dict) -> Result: ...

    async def update_support_ticket_status(self, ticket_id: str, status: str) -> Result: ...


class SupabaseSupportBackend:
    """Support tables over the async Supabase client."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
    ):
        self._url = supabase_url or settings.support.supabase_url
        self._key = supabase_key or settings.support.supabase_key
        self._client = None

    async def _get_client(self):
        """Lazy-initialize the async Supabase client."""
        if self._client is not None:
            return self._client
        if not self._url or not self._key:
            raise ValueError(
                "SUPABASE_URL / SUPABASE_ANON_KEY must be set in .env. See .env.example."
            )
        from supabase import acreate_client

        self._client = await acreate_client(self._url, self._key)
        return self._client

    async def client(self):
        """Shared client for realtime channels."""
        return await self._get_client()

    async def get_user_support_tickets(self, user_id: str) -> Result:
        """Tickets for a user with their messages embedded, newest first."""
        try:
            client = await self._get_client()
            response = await (
                client.table(TICKETS_TABLE)
                .select(f"*, {MESSAGES_TABLE}(*)")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or [], None
        except Exception as e:
            logger.warning("Loading support tickets for %s failed: %s", user_id, e)
            return None, BackendError.from_exception(e)

    async def create_support_ticket(self, record: dict) -> Result:
        return await self._insert(TICKETS_TABLE, record)

    async def add_support_message(self, record: dict) -> Result:
        return await self._insert(MESSAGES_TABLE, record)

    async def update_support_ticket_status(self, ticket_id: str, status: str) -> Result:
        try:
            client = await self._get_client()
            response = await (
                client.table(TICKETS_TABLE)
                .update({
                    "status": status,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", ticket_id)
                .execute()
            )
            return _single(response.data), None
        except Exception as e:
            logger.warning("Updating ticket %s to '%s' failed: %s", ticket_id, status, e)
            return None, BackendError.from_exception(e)

    async def _insert(self, table: str, record: dict) -> Result:
        try:
            client = await self._get_client()
            response = await client.table(table).insert(record).execute()
            return _single(response.data), None
        except Exception as e:
            logger.warning("Insert into %s failed: %s", table, e)
            return None, BackendError.from_exception(e)


def _single(data: Any) -> Any:
    """PostgREST returns inserted/updated rows as a list."""
    if isinstance(data, list):
        return data[0] if data else None
    return data
