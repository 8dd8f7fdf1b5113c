"""Shared route dependencies."""
from fastapi import Request
from ticketdesk.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_mailer(request: Request):
    """Mailer the application was created with."""
    return request.app.state.mailer


def get_base_url(request: Request) -> str:
    """Public base URL for links in emails.

    Uses BASE_URL when configured, otherwise the request's Host header.
    """
    settings = get_app_settings(request)
    if settings.base_url:
        return settings.base_url.rstrip("/")
    host = request.headers.get("host") or request.url.netloc
    return f"https://{host}"
