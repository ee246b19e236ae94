# helpdesk/schemas/ticket.py
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, Field

from ..core.constants import TicketCategory, TicketPriority, TicketStatus
from .user import UserSummary


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class TicketCreate(BaseModel):
    title: NonBlankStr = Field(max_length=200)
    description: NonBlankStr
    priority: TicketPriority = TicketPriority.MEDIUM
    category: TicketCategory = TicketCategory.OTHER


class TicketUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None


class CommentCreate(BaseModel):
    content: NonBlankStr
    image_url: Optional[str] = Field(default=None, max_length=500)


class CommentRead(BaseModel):
    id: int
    content: str
    image_url: Optional[str]
    created_at: datetime
    author: UserSummary


class TicketRead(BaseModel):
    id: int
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    category: TicketCategory
    creator: UserSummary
    assignee: Optional[UserSummary]
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None


class TicketDetail(TicketRead):
    comments: List[CommentRead] = []
