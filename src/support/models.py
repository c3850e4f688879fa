"""Support desk records as returned by the backend."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class SenderType(str, Enum):
    USER = "user"
    ADMIN = "admin"


class SupportMessage(BaseModel):
    id: Optional[str] = None
    ticket_id: Optional[str] = None
    sender_type: SenderType
    sender_id: str
    message: str
    created_at: datetime

    @field_validator("id", "ticket_id", "sender_id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if isinstance(v, int) else v


class SupportTicket(BaseModel):
    """A ticket with its conversation, oldest message first."""

    id: str
    user_id: str
    order_id: Optional[str] = None
    subject: str
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    created_at: datetime
    updated_at: Optional[datetime] = None
    messages: list[SupportMessage] = Field(
        default_factory=list, validation_alias=AliasChoices("messages", "support_messages")
    )

    @field_validator("id", "user_id", "order_id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("messages", mode="before")
    @classmethod
    def _no_messages(cls, v):
        return [] if v is None else v

    @field_validator("messages")
    @classmethod
    def _chronological(cls, v: list[SupportMessage]) -> list[SupportMessage]:
        return sorted(v, key=lambda m: m.created_at)

    @property
    def last_message(self) -> Optional[SupportMessage]:
        return self.messages[-1] if self.messages else None
