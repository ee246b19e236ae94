# helpdesk/core/permissions.py
"""
Ticket access rules, shared by the API handlers and the HTML views.
"""
from ..models.ticket import Ticket
from ..models.user import User
from .constants import UserRole


def is_staff(user: User) -> bool:
    return user.role in (UserRole.AGENT, UserRole.ADMIN)


def can_view_ticket(user: User, ticket: Ticket) -> bool:
    """
    USER: own tickets. AGENT: unassigned tickets and tickets assigned to
    them. ADMIN: everything. The creator always sees their ticket.
    """
    if ticket.creator_id == user.id:
        return True
    if user.role == UserRole.ADMIN:
        return True
    if user.role == UserRole.AGENT:
        return ticket.assignee_id is None or ticket.assignee_id == user.id
    return False


def can_edit_ticket(user: User, ticket: Ticket) -> bool:
    """Status/priority edits: staff only, and agents only on free or own tickets."""
    if user.role == UserRole.ADMIN:
        return True
    if user.role == UserRole.AGENT:
        return ticket.assignee_id is None or ticket.assignee_id == user.id
    return False


def can_claim_ticket(user: User) -> bool:
    return is_staff(user)


def ticket_claimable(user: User, ticket: Ticket) -> bool:
    """Staff may take an open ticket nobody holds; taking one they already hold is a no-op."""
    if not can_claim_ticket(user) or ticket.is_closed:
        return False
    return ticket.assignee_id is None or ticket.assignee_id == user.id


def can_close_ticket(user: User, ticket: Ticket) -> bool:
    return ticket.creator_id == user.id


def can_create_ticket(user: User) -> bool:
    return user.role in (UserRole.USER, UserRole.AGENT, UserRole.ADMIN)
