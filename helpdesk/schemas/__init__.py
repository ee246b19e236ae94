"""Pydantic schemas package"""
from .user import (
    UserRead,
    UserCreate,
    UserAdminCreate,
    UserProfileUpdate,
    UserRoleUpdate,
    PasswordChange,
    UserSummary,
    UserListItem,
)
from .ticket import (
    TicketCreate,
    TicketUpdate,
    CommentCreate,
    CommentRead,
    TicketRead,
    TicketDetail,
)

__all__ = [
    "UserRead",
    "UserCreate",
    "UserAdminCreate",
    "UserProfileUpdate",
    "UserRoleUpdate",
    "PasswordChange",
    "UserSummary",
    "UserListItem",
    "TicketCreate",
    "TicketUpdate",
    "CommentCreate",
    "CommentRead",
    "TicketRead",
    "TicketDetail",
]
