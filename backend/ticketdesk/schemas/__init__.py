"""Pydantic schemas for request/response models."""
from ticketdesk.schemas.ticket import (
    TicketFields,
    UserFields,
    SubmitTicketRequest,
    SubmitTicketResponse,
    CommentResponse,
    TicketResponse,
    TicketDetailResponse,
    TicketEnvelope,
    TicketListEnvelope,
    UpdateTicketForm,
)

__all__ = [
    "TicketFields",
    "UserFields",
    "SubmitTicketRequest",
    "SubmitTicketResponse",
    "CommentResponse",
    "TicketResponse",
    "TicketDetailResponse",
    "TicketEnvelope",
    "TicketListEnvelope",
    "UpdateTicketForm",
]
