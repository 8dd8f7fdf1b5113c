"""Errors raised by the ticket service and converted to HTTP responses."""


class TicketDeskError(Exception):
    """Base error. ``message`` is safe to show to clients."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None, detail: str = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(detail or self.message)


class ValidationError(TicketDeskError):
    """Missing or malformed request payload."""

    status_code = 400
    message = "Invalid request"

    def __init__(self, message: str = None, detail: str = None, errors: list = None):
        super().__init__(message, detail)
        self.errors = errors or []


class NotFoundError(TicketDeskError):
    """The requested ticket does not exist."""

    status_code = 404
    message = "Ticket not found"

    def __init__(self, ticket_id: str, message: str = None):
        super().__init__(message, detail=f"ticket {ticket_id} not found")
        self.ticket_id = ticket_id


class StorageError(TicketDeskError):
    """A database call failed."""

    status_code = 500


class DeliveryError(TicketDeskError):
    """The notification email could not be sent."""

    status_code = 500
    message = "Failed to submit ticket"
