# helpdesk/services/ticket_service.py
import logging
import uuid as uuid_pkg
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlmodel import col, desc, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.constants import TicketCategory, TicketPriority, TicketStatus, UserRole
from ..core.exceptions import (
    InvalidTransitionError,
    PermissionDeniedError,
    TicketConflictError,
    TicketNotFoundError,
)
from ..core.permissions import (
    can_claim_ticket,
    can_close_ticket,
    can_create_ticket,
    can_edit_ticket,
    can_view_ticket,
    is_staff,
    ticket_claimable,
)
from ..models.ticket import Comment, Ticket
from ..models.user import User
from ..schemas.ticket import (
    CommentCreate,
    CommentRead,
    TicketCreate,
    TicketDetail,
    TicketRead,
    TicketUpdate,
)
from ..schemas.user import UserSummary

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketService:
    """
    Ticket lifecycle: listing by role, creation, status/priority edits,
    claiming, closure by the requester and the comment thread.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Queries ---

    def _visibility_clause(self, user: User):
        if user.role == UserRole.ADMIN:
            return None
        if user.role == UserRole.AGENT:
            return or_(
                col(Ticket.assignee_id).is_(None),
                Ticket.assignee_id == user.id,
                Ticket.creator_id == user.id,
            )
        return Ticket.creator_id == user.id

    async def list_tickets(
        self,
        user: User,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        category: Optional[TicketCategory] = None,
        search: Optional[str] = None,
        assignee_id: Optional[uuid_pkg.UUID] = None,
        unassigned: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Ticket]:
        """Open tickets visible to `user`, newest first. CLOSED never shows up here."""
        query = select(Ticket).where(Ticket.status != TicketStatus.CLOSED.value)

        clause = self._visibility_clause(user)
        if clause is not None:
            query = query.where(clause)

        if status:
            query = query.where(Ticket.status == status.value)
        if priority:
            query = query.where(Ticket.priority == priority.value)
        if category:
            query = query.where(Ticket.category == category.value)
        if assignee_id:
            query = query.where(Ticket.assignee_id == assignee_id)
        if unassigned:
            query = query.where(col(Ticket.assignee_id).is_(None))

        if search:
            search_term = f"%{search.strip()}%"
            query = query.where(
                col(Ticket.title).ilike(search_term)
                | col(Ticket.description).ilike(search_term)
            )

        query = (
            query.order_by(desc(Ticket.created_at), desc(Ticket.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def list_history(self, user: User) -> List[Ticket]:
        """Closed tickets created by `user`."""
        query = (
            select(Ticket)
            .where(Ticket.creator_id == user.id, Ticket.status == TicketStatus.CLOSED.value)
            .order_by(desc(Ticket.closed_at), desc(Ticket.created_at))
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def _get(self, ticket_id: int) -> Ticket:
        ticket = await self.session.get(Ticket, ticket_id)
        if not ticket:
            raise TicketNotFoundError("Ticket no encontrado")
        return ticket

    async def get_ticket(self, ticket_id: int, user: User) -> Ticket:
        ticket = await self._get(ticket_id)
        if not can_view_ticket(user, ticket):
            raise PermissionDeniedError("No autorizado")
        return ticket

    async def get_comments(self, ticket_id: int) -> List[Comment]:
        query = (
            select(Comment)
            .where(Comment.ticket_id == ticket_id)
            .order_by(Comment.created_at, Comment.id)
        )
        result = await self.session.exec(query)
        return list(result.all())

    # --- Mutations ---

    async def create_ticket(self, user: User, data: TicketCreate) -> Ticket:
        if not can_create_ticket(user):
            raise PermissionDeniedError("No tenés permisos para crear tickets")

        ticket = Ticket(
            title=data.title,
            description=data.description,
            priority=data.priority.value,
            category=data.category.value,
            status=TicketStatus.OPEN.value,
            creator_id=user.id,
        )
        self.session.add(ticket)
        await self.session.commit()
        await self.session.refresh(ticket)
        logger.info("Ticket #%s created by %s", ticket.id, user.email)
        return ticket

    async def update_ticket(self, ticket_id: int, user: User, data: TicketUpdate) -> Ticket:
        """
        Staff edit of status and/or priority.
        CLOSED can never be set here: closing is confirmed by the requester.
        """
        if not is_staff(user):
            raise PermissionDeniedError("No tenés permisos para editar tickets")

        ticket = await self._get(ticket_id)
        if not can_edit_ticket(user, ticket):
            raise PermissionDeniedError("No autorizado")
        if ticket.is_closed:
            raise TicketConflictError("El ticket está cerrado")

        if data.status == TicketStatus.CLOSED:
            raise PermissionDeniedError("El cierre lo confirma el solicitante (usuario).")

        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise InvalidTransitionError("No hay cambios para aplicar")

        for key, value in changes.items():
            setattr(ticket, key, value.value)
        ticket.updated_at = _utcnow()

        self.session.add(ticket)
        await self.session.commit()
        await self.session.refresh(ticket)
        return ticket

    async def claim_ticket(self, ticket_id: int, user: User) -> Ticket:
        """
        Assign the ticket to `user`. Fails if another agent already holds it.
        Check-then-update; no row lock.
        """
        if not can_claim_ticket(user):
            raise PermissionDeniedError("Sin permisos")

        ticket = await self._get(ticket_id)
        if not ticket_claimable(user, ticket):
            if ticket.is_closed:
                raise TicketConflictError("El ticket está cerrado")
            raise TicketConflictError("El ticket ya está asignado a otro agente")

        if ticket.assignee_id != user.id:
            ticket.assignee_id = user.id
            ticket.updated_at = _utcnow()
            self.session.add(ticket)
            await self.session.commit()
            await self.session.refresh(ticket)
            logger.info("Ticket #%s claimed by %s", ticket.id, user.email)
        return ticket

    async def close_ticket(self, ticket_id: int, user: User) -> Ticket:
        """Requester confirms the resolution: RESOLVED -> CLOSED."""
        ticket = await self._get(ticket_id)
        if not can_close_ticket(user, ticket):
            raise PermissionDeniedError("No autorizado")
        if ticket.is_closed:
            raise TicketConflictError("El ticket ya está cerrado")
        if ticket.status != TicketStatus.RESOLVED:
            raise InvalidTransitionError("Solo podés cerrar tickets en estado RESUELTO")

        now = _utcnow()
        ticket.status = TicketStatus.CLOSED.value
        ticket.closed_at = now
        ticket.updated_at = now

        self.session.add(ticket)
        await self.session.commit()
        await self.session.refresh(ticket)
        logger.info("Ticket #%s closed by %s", ticket.id, user.email)
        return ticket

    async def add_comment(self, ticket_id: int, user: User, data: CommentCreate) -> Comment:
        ticket = await self.get_ticket(ticket_id, user)
        if ticket.is_closed:
            raise TicketConflictError("No se puede comentar un ticket cerrado")

        comment = Comment(
            ticket_id=ticket.id,
            author_id=user.id,
            content=data.content,
            image_url=data.image_url or None,
        )
        ticket.updated_at = _utcnow()

        self.session.add(comment)
        self.session.add(ticket)
        await self.session.commit()
        await self.session.refresh(comment)
        return comment

    # --- Serialization ---

    async def _users_by_id(self, ids: Iterable[Optional[uuid_pkg.UUID]]) -> Dict[uuid_pkg.UUID, User]:
        wanted = {i for i in ids if i}
        if not wanted:
            return {}
        result = await self.session.exec(select(User).where(col(User.id).in_(wanted)))
        return {u.id: u for u in result.all()}

    @staticmethod
    def _build_read(ticket: Ticket, users: Dict[uuid_pkg.UUID, User]) -> dict:
        creator = users.get(ticket.creator_id)
        assignee = users.get(ticket.assignee_id) if ticket.assignee_id else None
        return dict(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            priority=ticket.priority,
            category=ticket.category,
            creator=UserSummary.model_validate(creator),
            assignee=UserSummary.model_validate(assignee) if assignee else None,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            closed_at=ticket.closed_at,
        )

    async def to_read(self, tickets: List[Ticket]) -> List[TicketRead]:
        ids = [t.creator_id for t in tickets] + [t.assignee_id for t in tickets]
        users = await self._users_by_id(ids)
        return [TicketRead(**self._build_read(t, users)) for t in tickets]

    async def to_detail(self, ticket: Ticket) -> TicketDetail:
        comments = await self.get_comments(ticket.id)
        users = await self._users_by_id(
            [ticket.creator_id, ticket.assignee_id] + [c.author_id for c in comments]
        )
        return TicketDetail(
            **self._build_read(ticket, users),
            comments=[
                CommentRead(
                    id=c.id,
                    content=c.content,
                    image_url=c.image_url,
                    created_at=c.created_at,
                    author=UserSummary.model_validate(users[c.author_id]),
                )
                for c in comments
            ],
        )

    @staticmethod
    def comment_to_read(comment: Comment, author: User) -> CommentRead:
        return CommentRead(
            id=comment.id,
            content=comment.content,
            image_url=comment.image_url,
            created_at=comment.created_at,
            author=UserSummary.model_validate(author),
        )
