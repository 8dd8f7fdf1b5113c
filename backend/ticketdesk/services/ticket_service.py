"""Ticket service."""
import logging
import time
from typing import Any, List, Optional, Tuple
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from ticketdesk import rendering
from ticketdesk.config import Settings
from ticketdesk.exceptions import DeliveryError, NotFoundError, StorageError, ValidationError
from ticketdesk.models import Company, Profile, Ticket, TicketComment, TicketStatus
from ticketdesk.models.ticket import utcnow
from ticketdesk.schemas.ticket import (
    SubmitTicketRequest,
    SubmitTicketResponse,
    UpdateTicketForm,
    UserFields,
)
from ticketdesk.services.notification_service import OutboundEmail

logger = logging.getLogger(__name__)

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
STAFF_AUTHOR = "Support Team"
STATUS_VALUES = {s.value for s in TicketStatus}


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(BASE36_DIGITS[rem])
        if value == 0:
            break
    return "".join(reversed(digits))


def generate_ticket_number(prefix: str = "PIOT", now_ms: Optional[int] = None) -> str:
    """
    Generate a ticket number from the current time.
    Format: {prefix}-{base36 epoch milliseconds}
    Example: PIOT-MGX3K2A1

    Not guaranteed collision-free; two tickets created in the same
    millisecond get the same number and the second insert fails.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{prefix}-{to_base36(now_ms)}"


async def find_company_by_name(db: AsyncSession, name: Optional[str]) -> Optional[Company]:
    """Get the first company with exactly this name."""
    if not name:
        return None
    result = await db.execute(select(Company).where(Company.name == name).limit(1))
    return result.scalars().first()


async def find_profile_by_email(db: AsyncSession, email: Optional[str]) -> Optional[Profile]:
    """Get the first profile with exactly this email."""
    if not email:
        return None
    result = await db.execute(select(Profile).where(Profile.email == email).limit(1))
    return result.scalars().first()


def parse_submission(payload: Any) -> SubmitTicketRequest:
    """Validate a raw submission body."""
    if not isinstance(payload, dict) or not payload.get("ticket") or not payload.get("user"):
        raise ValidationError("Missing ticket or user data")
    try:
        return SubmitTicketRequest.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Invalid ticket or user data", detail=str(e), errors=errors)


async def create_ticket(
    db: AsyncSession,
    data: SubmitTicketRequest,
    prefix: str = "PIOT",
) -> Ticket:
    """Persist a new ticket. Status always starts as unassigned."""
    ticket_fields, user = data.ticket, data.user
    try:
        company = await find_company_by_name(db, user.company_name)
        profile = await find_profile_by_email(db, user.email)

        ticket = Ticket(
            ticket_number=generate_ticket_number(prefix),
            subject=ticket_fields.subject,
            description=ticket_fields.description,
            priority=ticket_fields.priority,
            status=TicketStatus.UNASSIGNED.value,
            user_id=profile.id if profile else None,
            company_id=company.id if company else None,
            contact_preference=ticket_fields.contact_preference,
            scheduled_time=ticket_fields.scheduled_time,
        )
        db.add(ticket)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create ticket")
        raise StorageError("Failed to create ticket", detail=str(e))

    logger.info("Created ticket %s (%s)", ticket.ticket_number, ticket.id)
    return ticket


def build_notification(ticket: Ticket, user: UserFields, settings: Settings, base_url: str) -> OutboundEmail:
    """Email telling support about a new ticket, linking to its update form."""
    update_url = f"{base_url.rstrip('/')}/update/{ticket.id}"
    return OutboundEmail(
        from_address=settings.sender_address,
        to=settings.support_email,
        subject=rendering.new_ticket_subject(ticket, user),
        html=rendering.render_new_ticket_email(ticket, user, update_url, settings.display_timezone),
        reply_to=user.email or None,
    )


async def notify_support(mailer, ticket: Ticket, user: UserFields, settings: Settings, base_url: str) -> None:
    """Send the new-ticket email. Raises DeliveryError if sending fails."""
    message = build_notification(ticket, user, settings, base_url)
    try:
        await mailer.send(message)
    except Exception as e:
        logger.error("Failed to send notification for ticket %s: %s", ticket.ticket_number, e)
        raise DeliveryError(detail=str(e))


async def submit_ticket(
    db: AsyncSession,
    mailer,
    settings: Settings,
    payload: Any,
    base_url: str,
) -> SubmitTicketResponse:
    """
    Handle a ticket submission end to end.

    Validates the payload, stores the ticket and emails support. When the
    email fails the ticket stays stored; the response reports
    ``notification_sent=False`` unless ``fail_on_notification_error`` is set,
    in which case the DeliveryError propagates.
    """
    data = parse_submission(payload)
    ticket = await create_ticket(db, data, settings.ticket_number_prefix)

    notification_sent = True
    try:
        await notify_support(mailer, ticket, data.user, settings, base_url)
    except DeliveryError:
        if settings.fail_on_notification_error:
            raise
        notification_sent = False

    return SubmitTicketResponse(
        ticket_id=ticket.id,
        ticket_number=ticket.ticket_number,
        notification_sent=notification_sent,
        message=(
            "Ticket submitted successfully"
            if notification_sent
            else "Ticket submitted, but support could not be notified"
        ),
    )


async def get_ticket(db: AsyncSession, ticket_id: str, *options) -> Ticket:
    """Get a ticket by ID, raising NotFoundError when absent."""
    query = select(Ticket).where(Ticket.id == ticket_id)
    if options:
        query = query.options(*options)
    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        logger.exception("Failed to load ticket %s", ticket_id)
        raise StorageError("Failed to load ticket", detail=str(e))
    ticket = result.scalar_one_or_none()
    if ticket is None:
        raise NotFoundError(ticket_id)
    return ticket


async def get_ticket_detail(db: AsyncSession, ticket_id: str) -> Ticket:
    """Get a ticket with its comments."""
    return await get_ticket(db, ticket_id, selectinload(Ticket.comments))


async def get_ticket_for_form(db: AsyncSession, ticket_id: str) -> Ticket:
    """Get a ticket with the owning profile and company."""
    return await get_ticket(db, ticket_id, selectinload(Ticket.user), selectinload(Ticket.company))


async def apply_update(
    db: AsyncSession,
    ticket_id: str,
    form: UpdateTicketForm,
) -> Tuple[Ticket, Optional[TicketComment]]:
    """
    Apply a status update from the staff form.

    A blank technician keeps the stored one. A non-blank note adds one staff
    comment. The ticket change and the comment are committed together.
    """
    ticket = await get_ticket(db, ticket_id)

    if form.status is not None and form.status not in STATUS_VALUES:
        raise ValidationError(f"Unknown status '{form.status}'")

    if form.status:
        ticket.status = form.status
    ticket.technician_name = form.technician_name or ticket.technician_name
    ticket.updated_at = utcnow()

    comment = None
    if form.note:
        comment = TicketComment(
            ticket_id=ticket.id,
            author_name=form.technician_name or STAFF_AUTHOR,
            text=form.note,
            is_from_user=False,
        )
        db.add(comment)

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to update ticket %s", ticket_id)
        raise StorageError("Failed to update ticket", detail=str(e))

    logger.info(
        "Updated ticket %s: status=%s technician=%s note=%s",
        ticket.ticket_number, ticket.status, ticket.technician_name, comment is not None,
    )
    return ticket, comment


async def list_user_tickets(db: AsyncSession, user_id: str) -> List[Ticket]:
    """List a user's tickets, newest first."""
    try:
        result = await db.execute(
            select(Ticket).where(Ticket.user_id == user_id).order_by(desc(Ticket.created_at))
        )
    except SQLAlchemyError as e:
        logger.exception("Failed to list tickets for user %s", user_id)
        raise StorageError("Failed to load tickets", detail=str(e))
    return list(result.scalars().all())
