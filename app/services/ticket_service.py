import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import ActivityAction, ActivityTarget, TicketStatus, TicketType
from app.infra.db.models import Ticket, User
from app.infra.db.repositories import ActivityLogRepository, TicketRepository
from app.services.errors import AdminRequiredError, NotAuthorizedError, TicketNotFoundError
from app.services.pagination import Page, PageRequest

logger = logging.getLogger(__name__)


class TicketService:
    def __init__(
        self,
        session: AsyncSession,
        tickets: TicketRepository | None = None,
        activity: ActivityLogRepository | None = None,
    ) -> None:
        self.session = session
        self.tickets = tickets or TicketRepository(session)
        self.activity = activity or ActivityLogRepository(session)

    async def list_tickets(
        self,
        viewer: User,
        request: PageRequest,
        status_filter: TicketStatus | None = None,
    ) -> Page[Ticket]:
        # Admins see the whole queue, everyone else only their own tickets.
        owner_filter = None if viewer.is_admin else viewer.id
        tickets, total = await self.tickets.list(
            owner_filter, status_filter, request.offset, request.limit
        )
        return Page(items=tickets, page=request.page, limit=request.limit, total=total)

    async def create_ticket(
        self,
        author: User,
        ticket_type: TicketType,
        subject: str,
        description: str,
    ) -> Ticket:
        cleaned_subject = subject.strip()
        cleaned_description = description.strip()
        if not cleaned_subject or not cleaned_description:
            raise ValueError("Type, subject, and description are required")

        ticket = await self.tickets.create(
            user_id=author.id,
            ticket_type=ticket_type,
            subject=cleaned_subject,
            description=cleaned_description,
        )
        await self.session.commit()
        await self.session.refresh(ticket)
        return ticket

    async def get_ticket(self, viewer: User, ticket_id: UUID) -> Ticket:
        ticket = await self._get_ticket_or_raise(ticket_id)
        if ticket.user_id != viewer.id and not viewer.is_admin:
            raise NotAuthorizedError()
        return ticket

    async def update_ticket(
        self,
        actor: User,
        ticket_id: UUID,
        status: TicketStatus | None = None,
        response: str | None = None,
    ) -> Ticket:
        ticket = await self._get_ticket_or_raise(ticket_id)
        if not actor.is_admin:
            raise AdminRequiredError()

        if status is not None:
            ticket.status = status

        message = response.strip() if response else ""
        if message:
            # JSON columns are not mutation-tracked; assign a new list.
            ticket.responses = [
                *(ticket.responses or []),
                {
                    "user_id": str(actor.id),
                    "username": actor.username,
                    "message": message,
                    "created_at": datetime.now(UTC).isoformat(),
                    "is_admin": True,
                },
            ]
            await self.activity.create(
                user_id=actor.id,
                action=ActivityAction.TICKET_RESPONDED,
                target_type=ActivityTarget.TICKET,
                target_id=ticket.id,
                description=f"Admin responded to ticket: {ticket.subject}",
            )
            logger.info("Admin %s responded to ticket %s", actor.id, ticket.id)

        await self.tickets.save(ticket)
        await self.session.commit()
        await self.session.refresh(ticket)
        return ticket

    async def _get_ticket_or_raise(self, ticket_id: UUID) -> Ticket:
        ticket = await self.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket
