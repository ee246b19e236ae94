# helpdesk/api/tickets/main.py
import uuid as uuid_pkg
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from ...core.audit import log_action
from ...core.constants import TicketCategory, TicketPriority, TicketStatus
from ...core.limiter import limiter
from ...core.users import current_active_user, require_staff
from ...db.engine import get_session
from ...models.user import User
from ...schemas.ticket import (
    CommentCreate,
    CommentRead,
    TicketCreate,
    TicketDetail,
    TicketRead,
    TicketUpdate,
)
from ...services.ticket_service import TicketService

router = APIRouter(prefix="/tickets")


# --- Inyección de Dependencia ---
def get_ticket_service(session: AsyncSession = Depends(get_session)) -> TicketService:
    return TicketService(session)


@router.get("", response_model=List[TicketRead])
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    priority: Optional[TicketPriority] = None,
    category: Optional[TicketCategory] = None,
    search: Optional[str] = None,
    assignee_id: Optional[uuid_pkg.UUID] = None,
    unassigned: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    """
    Tickets visible to the caller, CLOSED excluded:
    USER -> own tickets, AGENT -> unassigned + assigned to them, ADMIN -> all.
    """
    tickets = await service.list_tickets(
        current_user,
        status=status_filter,
        priority=priority,
        category=category,
        search=search,
        assignee_id=assignee_id,
        unassigned=unassigned,
        limit=limit,
        offset=offset,
    )
    return await service.to_read(tickets)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def create_ticket(
    request: Request,
    ticket_in: TicketCreate,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    ticket = await service.create_ticket(current_user, ticket_in)
    log_action(
        "CREATE", "ticket", str(ticket.id), user=current_user, request=request,
        details={"priority": ticket.priority, "category": ticket.category},
    )
    return (await service.to_read([ticket]))[0]


@router.get("/{ticket_id}", response_model=TicketDetail)
async def get_ticket_detail(
    ticket_id: int,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    ticket = await service.get_ticket(ticket_id, current_user)
    return await service.to_detail(ticket)


@router.patch("/{ticket_id}", response_model=TicketRead)
async def update_ticket(
    ticket_id: int,
    ticket_in: TicketUpdate,
    request: Request,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    """Change status and/or priority (staff only; CLOSED is reserved for the requester)."""
    ticket = await service.update_ticket(ticket_id, current_user, ticket_in)
    log_action(
        "UPDATE", "ticket", str(ticket.id), user=current_user, request=request,
        details=ticket_in.model_dump(exclude_none=True, mode="json"),
    )
    return (await service.to_read([ticket]))[0]


@router.patch("/{ticket_id}/assign", response_model=TicketRead)
async def assign_ticket(
    ticket_id: int,
    request: Request,
    current_user: User = Depends(require_staff),
    service: TicketService = Depends(get_ticket_service),
):
    """Claim an unassigned ticket for the calling agent/admin."""
    ticket = await service.claim_ticket(ticket_id, current_user)
    log_action("ASSIGN", "ticket", str(ticket.id), user=current_user, request=request)
    return (await service.to_read([ticket]))[0]


@router.patch("/{ticket_id}/close", response_model=TicketRead)
@router.patch("/{ticket_id}/approve", response_model=TicketRead, include_in_schema=False)
async def close_ticket(
    ticket_id: int,
    request: Request,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    """The requester confirms a RESOLVED ticket and closes it."""
    ticket = await service.close_ticket(ticket_id, current_user)
    log_action("CLOSE", "ticket", str(ticket.id), user=current_user, request=request)
    return (await service.to_read([ticket]))[0]


@router.get("/{ticket_id}/comments", response_model=List[CommentRead])
async def list_comments(
    ticket_id: int,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    ticket = await service.get_ticket(ticket_id, current_user)
    return (await service.to_detail(ticket)).comments


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    ticket_id: int,
    comment_in: CommentCreate,
    request: Request,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    comment = await service.add_comment(ticket_id, current_user, comment_in)
    log_action(
        "COMMENT", "ticket", str(ticket_id), user=current_user, request=request,
        details={"comment_id": comment.id, "has_image": bool(comment.image_url)},
    )
    return service.comment_to_read(comment, current_user)
