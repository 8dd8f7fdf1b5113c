"""Ticket comment model."""
import uuid
from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from ticketdesk.database import Base
from ticketdesk.models.ticket import utcnow


class TicketComment(Base):
    """Note attached to a ticket, by the end user or by support staff."""

    __tablename__ = "ticket_comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    ticket_id = Column(String(36), ForeignKey("tickets.id"), nullable=False, index=True)
    author_name = Column(String(100), nullable=False)
    text = Column(Text, nullable=False)
    is_from_user = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    ticket = relationship("Ticket", back_populates="comments")

    def __repr__(self):
        return f"<TicketComment(ticket_id={self.ticket_id}, author={self.author_name})>"
