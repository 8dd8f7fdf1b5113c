"""User profile model."""
import uuid
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from ticketdesk.database import Base


class Profile(Base):
    """End user who submits tickets. Managed outside this service."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=True)
    surname = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True)

    company = relationship("Company")

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.surname or ''}".strip()

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email})>"
