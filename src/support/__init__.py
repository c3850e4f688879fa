# Support desk bridge
"""
Mirrors the signed-in user's support tickets from the remote backend and
keeps them current through realtime pushes.
"""

from .backend import BackendError, SupabaseSupportBackend, SupportBackend
from .models import SenderType, SupportMessage, SupportTicket, TicketPriority, TicketStatus
from .realtime import RealtimeSync
from .session import SupportSession
from .tracking import TrackingLookup

__all__ = [
    "BackendError",
    "RealtimeSync",
    "SenderType",
    "SupabaseSupportBackend",
    "SupportBackend",
    "SupportMessage",
    "SupportSession",
    "SupportTicket",
    "TicketPriority",
    "TicketStatus",
    "TrackingLookup",
]
