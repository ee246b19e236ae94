# helpdesk/api/portal/main.py
from typing import List

from fastapi import APIRouter, Depends

from ...core.users import require_requester
from ...models.user import User
from ...schemas.ticket import TicketRead
from ...services.ticket_service import TicketService
from ..tickets.main import get_ticket_service

router = APIRouter(prefix="/portal")


@router.get("/history", response_model=List[TicketRead])
async def get_history(
    current_user: User = Depends(require_requester),
    service: TicketService = Depends(get_ticket_service),
):
    """Closed tickets of the calling requester."""
    tickets = await service.list_history(current_user)
    return await service.to_read(tickets)
