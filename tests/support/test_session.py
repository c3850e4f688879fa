"""Tests for the support session mirror."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.engine.auth import AuthContext
from src.engine.event_bus import NotificationType
from src.support.backend import BackendError
from src.support.models import SenderType, SupportTicket, TicketPriority, TicketStatus
from src.support.session import SupportSession


def _ticket_row(ticket_id="t1", created_at="2024-05-01T10:00:00Z", messages=None, **extra) -> dict:
    return {
        "id": ticket_id,
        "user_id": "user-1",
        "order_id": None,
        "subject": f"Subject {ticket_id}",
        "status": "open",
        "priority": "medium",
        "created_at": created_at,
        "updated_at": created_at,
        "support_messages": messages or [],
        **extra,
    }


def _message_row(text, created_at, sender_type="user") -> dict:
    return {
        "id": f"m-{created_at}",
        "ticket_id": "t1",
        "sender_type": sender_type,
        "sender_id": "user-1" if sender_type == "user" else "admin",
        "message": text,
        "created_at": created_at,
    }


@pytest.fixture
def backend() -> MagicMock:
    backend = MagicMock()
    backend.get_user_support_tickets = AsyncMock(return_value=([], None))
    backend.create_support_ticket = AsyncMock(return_value=({"id": "t1"}, None))
    backend.add_support_message = AsyncMock(return_value=({"id": "m1"}, None))
    backend.update_support_ticket_status = AsyncMock(return_value=({"id": "t1"}, None))
    return backend


@pytest.fixture
def realtime() -> MagicMock:
    realtime = MagicMock()
    realtime.subscribe_to_support_tickets = AsyncMock(return_value="tickets_user-1")
    realtime.unsubscribe = AsyncMock()
    return realtime


@pytest.fixture
def session(backend, auth, bus, realtime) -> SupportSession:
    return SupportSession(backend, auth, bus, realtime)


class TestModels:
    def test_messages_sorted_chronologically(self):
        ticket = SupportTicket.model_validate(_ticket_row(messages=[
            _message_row("second", "2024-05-01T10:05:00Z", "admin"),
            _message_row("first", "2024-05-01T10:00:00Z"),
        ]))
        assert [m.message for m in ticket.messages] == ["first", "second"]
        assert ticket.last_message.sender_type == SenderType.ADMIN

    def test_null_messages(self):
        ticket = SupportTicket.model_validate(_ticket_row(support_messages=None))
        assert ticket.messages == []


class TestOpenAndRefresh:
    def test_open_loads_and_subscribes(self, session, backend, realtime):
        backend.get_user_support_tickets.return_value = ([_ticket_row()], None)

        tickets = asyncio.run(session.open())

        assert [t.id for t in tickets] == ["t1"]
        backend.get_user_support_tickets.assert_awaited_once_with("user-1")
        realtime.subscribe_to_support_tickets.assert_awaited_once()
        assert realtime.subscribe_to_support_tickets.call_args[0][0] == "user-1"

    def test_refresh_orders_newest_first(self, session, backend):
        backend.get_user_support_tickets.return_value = ([
            _ticket_row("old", "2024-01-01T00:00:00Z"),
            _ticket_row("new", "2024-03-01T00:00:00Z"),
            _ticket_row("mid", "2024-02-01T00:00:00Z"),
        ], None)
        asyncio.run(session.refresh())
        assert [t.id for t in session.tickets] == ["new", "mid", "old"]

    def test_refresh_replaces_mirror(self, session, backend):
        backend.get_user_support_tickets.return_value = ([_ticket_row("a"), _ticket_row("b")], None)
        asyncio.run(session.refresh())
        backend.get_user_support_tickets.return_value = ([_ticket_row("b")], None)
        asyncio.run(session.refresh())
        assert [t.id for t in session.tickets] == ["b"]

    def test_refresh_error_keeps_state(self, session, backend, notifications):
        backend.get_user_support_tickets.return_value = ([_ticket_row()], None)
        asyncio.run(session.refresh())
        backend.get_user_support_tickets.return_value = (None, BackendError("JWT expired", "401"))

        assert asyncio.run(session.refresh()) is None
        assert [t.id for t in session.tickets] == ["t1"]
        assert notifications[-1].type == NotificationType.ERROR
        assert notifications[-1].message == "JWT expired"

    def test_malformed_ticket_skipped(self, session, backend):
        backend.get_user_support_tickets.return_value = (
            [_ticket_row("ok"), {"id": "broken"}], None
        )
        asyncio.run(session.refresh())
        assert [t.id for t in session.tickets] == ["ok"]

    def test_signed_out_does_not_call_backend(self, backend, bus):
        session = SupportSession(backend, AuthContext(), bus)
        assert asyncio.run(session.refresh()) == []
        backend.get_user_support_tickets.assert_not_awaited()

    def test_push_triggers_refresh(self, session, backend):
        async def scenario():
            await session.open()
            backend.get_user_support_tickets.return_value = ([_ticket_row("pushed")], None)
            callback = session.realtime.subscribe_to_support_tickets.call_args[0][1]
            callback({"eventType": "UPDATE"})
            await session.drain()

        asyncio.run(scenario())
        assert [t.id for t in session.tickets] == ["pushed"]
        assert backend.get_user_support_tickets.await_count == 2

    def test_close_unsubscribes(self, session, realtime):
        async def scenario():
            await session.open()
            await session.close()

        asyncio.run(scenario())
        realtime.unsubscribe.assert_awaited_once_with("tickets_user-1")
        assert not session.is_open

    def test_push_after_close_ignored(self, session, backend):
        async def scenario():
            await session.open()
            callback = session.realtime.subscribe_to_support_tickets.call_args[0][1]
            await session.close()
            callback({"eventType": "INSERT"})
            await session.drain()

        asyncio.run(scenario())
        assert backend.get_user_support_tickets.await_count == 1

    def test_realtime_failure_still_loads(self, session, backend, realtime):
        realtime.subscribe_to_support_tickets.side_effect = ConnectionError("socket closed")
        backend.get_user_support_tickets.return_value = ([_ticket_row()], None)
        tickets = asyncio.run(session.open())
        assert len(tickets) == 1


class TestCreateTicket:
    def test_creates_ticket_and_first_message(self, session, backend, notifications):
        backend.get_user_support_tickets.return_value = ([_ticket_row()], None)

        ticket = asyncio.run(session.create_ticket(
            "Order not delivered", "  Tracking shows no movement  ", "high", order_id="ord-7",
        ))

        record = backend.create_support_ticket.call_args[0][0]
        assert record == {
            "user_id": "user-1",
            "order_id": "ord-7",
            "subject": "Order not delivered",
            "status": "open",
            "priority": "high",
        }
        message = backend.add_support_message.call_args[0][0]
        assert message == {
            "ticket_id": "t1",
            "sender_type": "user",
            "sender_id": "user-1",
            "message": "Tracking shows no movement",
        }
        assert ticket.id == "t1"
        assert notifications[-1].type == NotificationType.SUCCESS
        assert notifications[-1].message == "Support ticket created successfully!"
        assert session.sending is False

    @pytest.mark.parametrize("subject, message", [("", "body"), ("subject", "   ")])
    def test_blank_input_is_noop(self, session, backend, notifications, subject, message):
        assert asyncio.run(session.create_ticket(subject, message)) is None
        backend.create_support_ticket.assert_not_awaited()
        assert notifications == []

    def test_remote_error_notifies_backend_message(self, session, backend, notifications):
        backend.create_support_ticket.return_value = (None, BackendError("permission denied", "42501"))

        assert asyncio.run(session.create_ticket("s", "m")) is None

        backend.add_support_message.assert_not_awaited()
        assert notifications[-1].type == NotificationType.ERROR
        assert notifications[-1].message == "permission denied"
        assert session.tickets == []
        assert session.sending is False

    def test_remote_error_without_message_uses_fallback(self, session, backend, notifications):
        backend.create_support_ticket.return_value = (None, BackendError(""))
        asyncio.run(session.create_ticket("s", "m"))
        assert notifications[-1].message == "Failed to create support ticket"

    def test_unknown_priority(self, session, backend, notifications):
        assert asyncio.run(session.create_ticket("s", "m", "whenever")) is None
        assert notifications[-1].type == NotificationType.WARNING
        backend.create_support_ticket.assert_not_awaited()

    def test_default_priority_medium(self, session, backend):
        asyncio.run(session.create_ticket("s", "m"))
        record = backend.create_support_ticket.call_args[0][0]
        assert record["priority"] == TicketPriority.MEDIUM.value
        assert record["order_id"] is None


class TestAppendMessage:
    def test_append_and_refresh(self, session, backend):
        backend.get_user_support_tickets.return_value = ([_ticket_row(messages=[
            _message_row("hello", "2024-05-01T10:00:00Z"),
            _message_row("more info", "2024-05-01T10:01:00Z"),
        ])], None)

        ticket = asyncio.run(session.append_message("t1", " more info "))

        sent = backend.add_support_message.call_args[0][0]
        assert sent["message"] == "more info"
        assert sent["sender_type"] == "user"
        assert ticket.last_message.message == "more info"

    def test_blank_is_noop(self, session, backend):
        assert asyncio.run(session.append_message("t1", "  ")) is None
        backend.add_support_message.assert_not_awaited()

    def test_error_notifies(self, session, backend, notifications):
        backend.add_support_message.return_value = (None, BackendError(""))
        assert asyncio.run(session.append_message("t1", "hi")) is None
        assert notifications[-1].message == "Failed to send message"
        backend.get_user_support_tickets.assert_not_awaited()


class TestUpdateStatus:
    def test_update_status(self, session, backend):
        backend.get_user_support_tickets.return_value = ([_ticket_row(status="resolved")], None)
        ticket = asyncio.run(session.update_status("t1", "resolved"))
        backend.update_support_ticket_status.assert_awaited_once_with("t1", "resolved")
        assert ticket.status == TicketStatus.RESOLVED
