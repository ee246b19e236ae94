# helpdesk/views.py
import uuid as uuid_pkg
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from .api.tickets.main import get_ticket_service
from .api.users.main import get_user_service
from .core.constants import (
    CATEGORY_LABELS,
    PRIORITY_LABELS,
    STATUS_LABELS,
    TicketStatus,
    UserRole,
)
from .core.exceptions import HelpdeskError
from .core.permissions import can_close_ticket, can_edit_ticket, is_staff, ticket_claimable
from .core.templates import templates
from .core.users import (
    ACCESS_TOKEN_COOKIE_NAME,
    current_active_user,
    current_optional_user,
    require_requester,
    require_staff,
)
from .models.user import User
from .services.ticket_service import TicketService
from .services.user_service import UserService

router = APIRouter(include_in_schema=False)


def _home_for(user: User) -> str:
    return "/tickets" if is_staff(user) else "/portal"


# --- Auth Routes (Web UI) ---

@router.get("/login", response_class=HTMLResponse)
async def read_login_form(request: Request, user: Optional[User] = Depends(current_optional_user)):
    """Login page"""
    if user:
        return RedirectResponse(url=_home_for(user), status_code=status.HTTP_303_SEE_OTHER)
    return templates.TemplateResponse(request, "login.html")


@router.get("/register", response_class=HTMLResponse)
async def read_register_form(request: Request, user: Optional[User] = Depends(current_optional_user)):
    if user:
        return RedirectResponse(url=_home_for(user), status_code=status.HTTP_303_SEE_OTHER)
    return templates.TemplateResponse(request, "register.html")


@router.get("/logout")
async def logout_and_redirect():
    response = RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(ACCESS_TOKEN_COOKIE_NAME)
    return response


# --- Page Routes ---

@router.get("/")
async def read_home(current_user: User = Depends(current_active_user)):
    return RedirectResponse(url=_home_for(current_user), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/portal", response_class=HTMLResponse)
async def read_portal(
    request: Request,
    current_user: User = Depends(require_requester),
    service: TicketService = Depends(get_ticket_service),
):
    tickets = await service.to_read(await service.list_tickets(current_user, limit=200))
    return templates.TemplateResponse(
        request,
        "portal.html",
        {"active_page": "portal", "user": current_user, "tickets": tickets},
    )


@router.get("/portal/new", response_class=HTMLResponse)
async def read_new_ticket_form(request: Request, current_user: User = Depends(current_active_user)):
    return templates.TemplateResponse(
        request,
        "ticket_new.html",
        {
            "active_page": "new",
            "user": current_user,
            "priorities": {k.value: v for k, v in PRIORITY_LABELS.items()},
            "categories": {k.value: v for k, v in CATEGORY_LABELS.items()},
        },
    )


@router.get("/portal/history", response_class=HTMLResponse)
async def read_history(
    request: Request,
    current_user: User = Depends(require_requester),
    service: TicketService = Depends(get_ticket_service),
):
    tickets = await service.to_read(await service.list_history(current_user))
    return templates.TemplateResponse(
        request,
        "history.html",
        {"active_page": "history", "user": current_user, "tickets": tickets},
    )


@router.get("/tickets", response_class=HTMLResponse)
async def read_dashboard(
    request: Request,
    tab: str = "unassigned",
    agent_id: Optional[uuid_pkg.UUID] = None,
    current_user: User = Depends(require_staff),
    service: TicketService = Depends(get_ticket_service),
    user_service: UserService = Depends(get_user_service),
):
    """Staff dashboard. Tabs: unassigned, mine; admins also get all and by-agent."""
    is_admin = current_user.role == UserRole.ADMIN
    if tab not in ("unassigned", "mine", "all", "agent") or (tab in ("all", "agent") and not is_admin):
        tab = "unassigned"

    filters = {"unassigned": tab == "unassigned"}
    if tab == "mine":
        filters["assignee_id"] = current_user.id

    agents = []
    if is_admin:
        agents = await user_service.get_all_users(UserRole.AGENT)
        if tab == "agent":
            agent_id = agent_id or (agents[0].id if agents else None)
            # No agents yet: show an empty list instead of every ticket
            filters["assignee_id"] = agent_id or uuid_pkg.UUID(int=0)

    tickets = await service.to_read(await service.list_tickets(current_user, limit=200, **filters))
    return templates.TemplateResponse(
        request,
        "tickets.html",
        {
            "active_page": "tickets",
            "user": current_user,
            "tickets": tickets,
            "tab": tab,
            "agents": agents,
            "agent_id": agent_id,
        },
    )


@router.get("/tickets/{ticket_id}", response_class=HTMLResponse)
async def read_ticket_detail(
    request: Request,
    ticket_id: int,
    current_user: User = Depends(current_active_user),
    service: TicketService = Depends(get_ticket_service),
):
    try:
        ticket = await service.get_ticket(ticket_id, current_user)
    except HelpdeskError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return templates.TemplateResponse(
        request,
        "ticket_detail.html",
        {
            "active_page": "tickets" if is_staff(current_user) else "portal",
            "user": current_user,
            "ticket": await service.to_detail(ticket),
            "can_edit": can_edit_ticket(current_user, ticket) and not ticket.is_closed,
            "can_claim": ticket_claimable(current_user, ticket),
            "can_close": can_close_ticket(current_user, ticket) and ticket.status == TicketStatus.RESOLVED,
            "can_comment": not ticket.is_closed,
            "statuses": {k.value: v for k, v in STATUS_LABELS.items() if k != TicketStatus.CLOSED},
            "priorities": {k.value: v for k, v in PRIORITY_LABELS.items()},
        },
    )


@router.get("/settings", response_class=HTMLResponse)
async def read_settings_page(request: Request, current_user: User = Depends(current_active_user)):
    return templates.TemplateResponse(
        request,
        "settings.html",
        {"active_page": "settings", "user": current_user},
    )
