"""Ticket model."""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from ticketdesk.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketPriority(str, enum.Enum):
    """Ticket priority values."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStatus(str, enum.Enum):
    """Ticket status values."""
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class ContactPreference(str, enum.Enum):
    """How the requester wants to be contacted."""
    ASAP = "asap"
    SCHEDULED = "scheduled"


class Ticket(Base):
    """Support ticket submitted by an end user."""

    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    ticket_number = Column(String(32), unique=True, nullable=False)  # PIOT + base36 epoch ms
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(Enum(*[p.value for p in TicketPriority], name="ticketpriority"), default="medium")
    status = Column(
        Enum(*[s.value for s in TicketStatus], name="ticketstatus"),
        default="unassigned",
    )
    technician_name = Column(String(100), nullable=True)
    contact_preference = Column(Enum(*[c.value for c in ContactPreference], name="contactpreference"), default="asap")
    scheduled_time = Column(DateTime(timezone=True), nullable=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True, index=True)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user = relationship("Profile")
    company = relationship("Company")
    comments = relationship(
        "TicketComment",
        back_populates="ticket",
        order_by="TicketComment.created_at",
    )

    def __repr__(self):
        return f"<Ticket(ticket_number={self.ticket_number}, status={self.status})>"
