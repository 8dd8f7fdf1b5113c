"""HTML page and email rendering."""
from datetime import timezone
from typing import List, Optional
from zoneinfo import ZoneInfo
from jinja2 import Environment, PackageLoader, select_autoescape
from ticketdesk.models import Ticket, TicketComment, TicketStatus
from ticketdesk.schemas.ticket import UserFields

env = Environment(
    loader=PackageLoader("ticketdesk", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

PRIORITY_COLORS = {
    "low": {"bg": "#d1e7dd", "text": "#0f5132"},
    "medium": {"bg": "#fff3cd", "text": "#856404"},
    "high": {"bg": "#f8d7da", "text": "#842029"},
    "critical": {"bg": "#dc3545", "text": "#ffffff"},
}

STATUS_CHOICES = [(s.value, s.label) for s in TicketStatus]


def status_label(status: Optional[str]) -> str:
    """Human label for a stored status value."""
    if not status:
        return ""
    try:
        return TicketStatus(status).label
    except ValueError:
        return status.replace("-", " ").title()


def contact_display(ticket: Ticket, tz_name: str) -> str:
    """Describe when the requester wants to be contacted."""
    if ticket.contact_preference == "scheduled" and ticket.scheduled_time:
        when = ticket.scheduled_time
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        local = when.astimezone(ZoneInfo(tz_name))
        return f"Scheduled: {local.strftime('%d %b %Y, %H:%M')}"
    return "ASAP - Available now"


def render_update_form(ticket: Ticket, technicians: List[str]) -> str:
    """Status update form pre-populated with the ticket's current values."""
    user_name = ticket.user.full_name if ticket.user else ""
    company_name = ticket.company.name if ticket.company and ticket.company.name else "Unknown"
    return env.get_template("update_form.html").render(
        ticket=ticket,
        user_name=user_name,
        company_name=company_name,
        status_label=status_label(ticket.status),
        statuses=STATUS_CHOICES,
        technicians=technicians,
    )


def render_update_done(ticket: Ticket, comment: Optional[TicketComment] = None) -> str:
    return env.get_template("update_done.html").render(
        ticket=ticket,
        status_label=status_label(ticket.status),
        comment=comment,
    )


def render_ticket_not_found(ticket_id: str) -> str:
    return env.get_template("ticket_not_found.html").render(ticket_id=ticket_id)


def render_error_page(title: str, message: str, back_url: Optional[str] = None) -> str:
    return env.get_template("error.html").render(title=title, message=message, back_url=back_url)


def render_new_ticket_email(ticket: Ticket, user: UserFields, update_url: str, tz_name: str) -> str:
    """Body of the notification sent to support for a new ticket."""
    return env.get_template("new_ticket_email.html").render(
        ticket=ticket,
        user=user,
        update_url=update_url,
        contact_display=contact_display(ticket, tz_name),
        colors=PRIORITY_COLORS.get(ticket.priority, PRIORITY_COLORS["medium"]),
    )


def new_ticket_subject(ticket: Ticket, user: UserFields) -> str:
    return f"[{ticket.ticket_number}] {user.company_name or ''} - {user.full_name} - Support Request"
