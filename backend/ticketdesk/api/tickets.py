"""Tickets API routes."""
import json
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from ticketdesk.api.deps import get_app_settings, get_base_url, get_mailer
from ticketdesk.config import Settings
from ticketdesk.database import get_db
from ticketdesk.exceptions import ValidationError
from ticketdesk.schemas.ticket import (
    SubmitTicketResponse,
    TicketDetailResponse,
    TicketEnvelope,
    TicketListEnvelope,
    TicketResponse,
)
from ticketdesk.services import ticket_service

router = APIRouter()


@router.post("/submit-ticket", response_model=SubmitTicketResponse)
async def submit_ticket(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    mailer=Depends(get_mailer),
):
    """
    Submit a new support ticket.

    Body: {"ticket": {...}, "user": {...}}. Support is emailed a link to
    the ticket's update form.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Missing ticket or user data", detail="request body is not valid JSON")

    return await ticket_service.submit_ticket(
        db,
        mailer,
        settings,
        payload,
        base_url=get_base_url(request),
    )


@router.get("/tickets/{user_id}", response_model=TicketListEnvelope)
async def list_user_tickets(user_id: str, db: AsyncSession = Depends(get_db)):
    """List a user's tickets, newest first."""
    tickets = await ticket_service.list_user_tickets(db, user_id)
    return TicketListEnvelope(tickets=[TicketResponse.model_validate(t) for t in tickets])


@router.get("/ticket/{ticket_id}", response_model=TicketEnvelope)
async def get_ticket(ticket_id: str, db: AsyncSession = Depends(get_db)):
    """Get a ticket and its comments."""
    ticket = await ticket_service.get_ticket_detail(db, ticket_id)
    return TicketEnvelope(ticket=TicketDetailResponse.model_validate(ticket))
