"""Staff-facing ticket update form."""
import json
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.formparsers import MultiPartException
from ticketdesk import rendering
from ticketdesk.api.deps import get_app_settings
from ticketdesk.config import Settings
from ticketdesk.database import get_db
from ticketdesk.schemas.ticket import UpdateTicketForm
from ticketdesk.services import ticket_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_update_fields(request: Request) -> dict:
    """Read form-encoded or JSON fields. Anything unparseable yields {}."""
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            data = await request.json()
            return data if isinstance(data, dict) else {}
        form = await request.form()
        return dict(form)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError, MultiPartException) as e:
        logger.debug("Ignoring unparseable update body: %s", e)
        return {}


def to_update_form(fields: dict) -> UpdateTicketForm:
    cleaned = {
        key: str(fields[key])
        for key in ("status", "technicianName", "note")
        if isinstance(fields.get(key), (str, int, float))
    }
    return UpdateTicketForm.model_validate(cleaned)


@router.get("/{ticket_id}", response_class=HTMLResponse)
async def update_form(
    ticket_id: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Render the status update form for a ticket."""
    ticket = await ticket_service.get_ticket_for_form(db, ticket_id)
    return HTMLResponse(rendering.render_update_form(ticket, settings.technicians))


@router.post("/{ticket_id}", response_class=HTMLResponse)
async def apply_update(
    ticket_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Apply a status/technician/note update and confirm it."""
    form = to_update_form(await read_update_fields(request))
    ticket, comment = await ticket_service.apply_update(db, ticket_id, form)
    return HTMLResponse(rendering.render_update_done(ticket, comment))
