"""Ticket schemas."""
from datetime import datetime
from typing import Annotated, Optional, List, Literal
from pydantic import BaseModel, Field, StringConstraints, field_validator


# Use literal types to match database enum values
TicketPriorityType = Literal["low", "medium", "high", "critical"]
ContactPreferenceType = Literal["asap", "scheduled"]

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TicketFields(BaseModel):
    """Ticket part of a submission."""
    subject: NonBlankStr
    description: NonBlankStr
    priority: TicketPriorityType = "medium"
    contact_preference: ContactPreferenceType = Field("asap", alias="contactPreference")
    scheduled_time: Optional[datetime] = Field(None, alias="scheduledTime")

    class Config:
        populate_by_name = True

    @field_validator("priority", "contact_preference", mode="before")
    @classmethod
    def default_when_blank(cls, value, info):
        if value is None or _blank_to_none(value) is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("scheduled_time", mode="before")
    @classmethod
    def blank_time(cls, value):
        return _blank_to_none(value)


class UserFields(BaseModel):
    """Submitter details sent alongside a ticket."""
    first_name: NonBlankStr = Field(alias="firstName")
    surname: NonBlankStr
    email: Optional[str] = None  # lookup key, kept exactly as submitted
    phone: Optional[str] = None
    company_name: Optional[str] = Field(None, alias="companyName")
    any_desk_id: Optional[str] = Field(None, alias="anyDeskId")

    class Config:
        populate_by_name = True

    @field_validator("email", "phone", "company_name", "any_desk_id", mode="before")
    @classmethod
    def blank_optional(cls, value):
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}"


class SubmitTicketRequest(BaseModel):
    """Body of POST /api/submit-ticket."""
    ticket: TicketFields
    user: UserFields


class SubmitTicketResponse(BaseModel):
    """Result of a ticket submission."""
    success: bool = True
    message: str = "Ticket submitted successfully"
    ticket_id: str = Field(serialization_alias="ticketId")
    ticket_number: str = Field(serialization_alias="ticketNumber")
    notification_sent: bool = Field(True, serialization_alias="notificationSent")


class CommentResponse(BaseModel):
    """Ticket comment response schema."""
    id: str
    ticket_id: str
    author_name: str
    text: str
    is_from_user: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TicketResponse(BaseModel):
    """Ticket response schema."""
    id: str
    ticket_number: str
    subject: str
    description: str
    priority: str
    status: str
    technician_name: Optional[str] = None
    contact_preference: str
    scheduled_time: Optional[datetime] = None
    user_id: Optional[str] = None
    company_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TicketDetailResponse(TicketResponse):
    """Ticket with its comment history."""
    comments: List[CommentResponse] = []


class TicketEnvelope(BaseModel):
    """Single ticket envelope."""
    success: bool = True
    ticket: TicketDetailResponse


class TicketListEnvelope(BaseModel):
    """Ticket list envelope."""
    success: bool = True
    tickets: List[TicketResponse]


class UpdateTicketForm(BaseModel):
    """Fields posted by the status update form."""
    status: Optional[str] = None
    technician_name: Optional[str] = Field(None, alias="technicianName")
    note: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("status", "technician_name", mode="before")
    @classmethod
    def strip_blank(cls, value):
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("note", mode="before")
    @classmethod
    def strip_note(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None
