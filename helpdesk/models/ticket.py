# helpdesk/models/ticket.py
"""
Ticket models for the help-desk.
"""

import uuid as uuid_pkg
from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

from ..core.constants import TicketCategory, TicketPriority, TicketStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ticket(SQLModel, table=True):
    """
    A support request.
    `creator_id` owns the ticket, `assignee_id` is the agent working on it.
    """

    __tablename__ = "tickets"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=200)
    description: str = Field(nullable=False)

    status: str = Field(default=TicketStatus.OPEN.value, index=True, max_length=20)
    priority: str = Field(default=TicketPriority.MEDIUM.value, max_length=20)
    category: str = Field(default=TicketCategory.OTHER.value, max_length=20)

    creator_id: uuid_pkg.UUID = Field(foreign_key="users.id", index=True)
    assignee_id: Optional[uuid_pkg.UUID] = Field(default=None, foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    closed_at: Optional[datetime] = Field(default=None)

    comments: List["Comment"] = Relationship(back_populates="ticket")

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED


class Comment(SQLModel, table=True):
    """
    Message in a ticket thread. Append-only.
    """

    __tablename__ = "comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="tickets.id", index=True)
    author_id: uuid_pkg.UUID = Field(foreign_key="users.id")

    content: str = Field(nullable=False)
    image_url: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=_utcnow)

    ticket: Ticket = Relationship(back_populates="comments")
