"""Company model."""
import uuid
from sqlalchemy import Column, String
from ticketdesk.database import Base


class Company(Base):
    """Customer company. Managed outside this service."""

    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False, index=True)

    def __repr__(self):
        return f"<Company(id={self.id}, name={self.name})>"
