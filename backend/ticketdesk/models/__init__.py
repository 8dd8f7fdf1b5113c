"""SQLAlchemy models."""
from ticketdesk.models.company import Company
from ticketdesk.models.profile import Profile
from ticketdesk.models.ticket import Ticket, TicketStatus, TicketPriority, ContactPreference
from ticketdesk.models.comment import TicketComment

__all__ = [
    "Company",
    "Profile",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "ContactPreference",
    "TicketComment",
]
