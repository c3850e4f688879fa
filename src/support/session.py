"""Support Session - local mirror of the signed-in user's support tickets.

The mirror is never patched in place: after every write and on every
push from the realtime channel the full ticket list is fetched again.

Usage:
    session = SupportSession(SupabaseSupportBackend(), auth, bus, realtime)
    await session.open()
    await session.create_ticket("Order not delivered", "Tracking shows no movement")
    await session.close()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from ..common.config import settings
from ..common.errors import RemoteOperationFailed, ValidationFailed
from ..engine.auth import AuthContext
from ..engine.boundary import async_operation
from ..engine.event_bus import EventBus, NotificationType
from .backend import BackendError, SupportBackend
from .models import SenderType, SupportTicket, TicketPriority, TicketStatus
from .realtime import RealtimeSync

logger = logging.getLogger(__name__)


def _remote_failure(error: BackendError, fallback: str) -> RemoteOperationFailed:
    return RemoteOperationFailed(error.message or fallback, code=error.code)


def _parse(enum, value):
    try:
        return enum(value)
    except ValueError as e:
        raise ValidationFailed(f"Unknown {enum.__name__} value: {value!r}") from e


class SupportSession:
    def __init__(
        self,
        backend: SupportBackend,
        auth: AuthContext,
        bus: EventBus,
        realtime: Optional[RealtimeSync] = None,
    ) -> None:
        self.backend = backend
        self.auth = auth
        self.bus = bus
        self.realtime = realtime
        self.tickets: list[SupportTicket] = []
        self.loading = False
        self.sending = False
        self._subscription_key: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def is_open(self) -> bool:
        return self._loop is not None

    def ticket(self, ticket_id: str) -> Optional[SupportTicket]:
        return next((t for t in self.tickets if t.id == ticket_id), None)

    # --- lifecycle ---

    async def open(self) -> list[SupportTicket]:
        """Load tickets and start listening for pushes."""
        self._loop = asyncio.get_running_loop()
        user_id = self.auth.user_id
        tickets = await self.refresh()

        if user_id and self.realtime is not None and settings.support.realtime_enabled:
            try:
                self._subscription_key = await self.realtime.subscribe_to_support_tickets(
                    user_id, self._on_push
                )
            except Exception as e:
                logger.warning("Realtime unavailable, tickets will not update live: %s", e)
        return tickets or []

    async def close(self) -> None:
        """Stop listening. Calls already in flight are left to finish."""
        if self._subscription_key and self.realtime is not None:
            await self.realtime.unsubscribe(self._subscription_key)
        self._subscription_key = None
        self._loop = None

    async def drain(self) -> None:
        """Wait for refreshes scheduled by pushes."""
        await asyncio.sleep(0)
        while self._pending:
            await asyncio.gather(*list(self._pending))
            await asyncio.sleep(0)

    def _on_push(self, payload: dict) -> None:
        logger.debug("Support ticket update: %s", payload)
        if self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._schedule_refresh)

    def _schedule_refresh(self) -> None:
        task = asyncio.ensure_future(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # --- operations ---

    @async_operation
    async def refresh(self) -> list[SupportTicket]:
        """Replace the mirror with the backend's ticket list, newest first."""
        user_id = self.auth.user_id
        if user_id is None:
            return self.tickets

        self.loading = True
        try:
            data, error = await self.backend.get_user_support_tickets(user_id)
        finally:
            self.loading = False
        if error:
            raise _remote_failure(error, "Failed to load support tickets")

        tickets = []
        for row in data or []:
            try:
                tickets.append(SupportTicket.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping malformed ticket %s: %d error(s)", row.get("id"), e.error_count())
        tickets.sort(key=lambda t: t.created_at, reverse=True)
        self.tickets = tickets
        return tickets

    @async_operation
    async def create_ticket(
        self,
        subject: str,
        message: str,
        priority: TicketPriority | str = TicketPriority.MEDIUM,
        order_id: Optional[str] = None,
    ) -> Optional[SupportTicket]:
        """Open a ticket with its first message. Blank subject or message is a no-op."""
        user_id = self.auth.user_id
        if user_id is None or not subject.strip() or not message.strip():
            return None

        self.sending = True
        try:
            record, error = await self.backend.create_support_ticket({
                "user_id": user_id,
                "order_id": order_id or None,
                "subject": subject.strip(),
                "status": TicketStatus.OPEN.value,
                "priority": _parse(TicketPriority, priority).value,
            })
            if error or not record:
                raise _remote_failure(
                    error or BackendError(""), "Failed to create support ticket"
                )

            _, error = await self.backend.add_support_message({
                "ticket_id": record["id"],
                "sender_type": SenderType.USER.value,
                "sender_id": user_id,
                "message": message.strip(),
            })
            if error:
                logger.warning("Ticket %s created without its first message: %s", record["id"], error.message)

            await self.refresh()
        finally:
            self.sending = False

        self.bus.notify(NotificationType.SUCCESS, "Support ticket created successfully!")
        return self.ticket(str(record["id"]))

    @async_operation
    async def append_message(self, ticket_id: str, text: str) -> Optional[SupportTicket]:
        """Post a user message on a ticket. Blank text is a no-op."""
        user_id = self.auth.user_id
        if user_id is None or not text.strip():
            return None

        self.sending = True
        try:
            _, error = await self.backend.add_support_message({
                "ticket_id": ticket_id,
                "sender_type": SenderType.USER.value,
                "sender_id": user_id,
                "message": text.strip(),
            })
            if error:
                raise _remote_failure(error, "Failed to send message")
            await self.refresh()
        finally:
            self.sending = False
        return self.ticket(ticket_id)

    @async_operation
    async def update_status(self, ticket_id: str, status: TicketStatus | str) -> Optional[SupportTicket]:
        status = _parse(TicketStatus, status)
        _, error = await self.backend.update_support_ticket_status(ticket_id, status.value)
        if error:
            raise _remote_failure(error, "Failed to update ticket status")
        await self.refresh()
        return self.ticket(ticket_id)
