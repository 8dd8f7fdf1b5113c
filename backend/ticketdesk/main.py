"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from ticketdesk.api import api_router
from ticketdesk.config import Settings, get_settings
from ticketdesk.database import create_engine, create_session_factory, init_db
from ticketdesk.exceptions import NotFoundError, TicketDeskError, ValidationError
from ticketdesk.logging_config import setup_logging
from ticketdesk import rendering
from ticketdesk.services.notification_service import RecordingMailer, SmtpMailer

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def wants_html(request: Request) -> bool:
    """The update form endpoints answer in HTML, everything else in JSON."""
    return request.url.path.startswith("/update/")


def register_exception_handlers(app: FastAPI) -> None:
    """Convert service errors into HTTP responses without leaking detail."""

    @app.exception_handler(TicketDeskError)
    async def ticket_desk_error_handler(request: Request, exc: TicketDeskError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail or exc.message)

        if wants_html(request):
            if isinstance(exc, NotFoundError):
                body = rendering.render_ticket_not_found(exc.ticket_id)
            elif isinstance(exc, ValidationError):
                body = rendering.render_error_page("Invalid Update", exc.message, back_url=request.url.path)
            else:
                body = rendering.render_error_page("Something Went Wrong", exc.message)
            return HTMLResponse(body, status_code=exc.status_code, headers=CORS_HEADERS)

        content = {"success": False, "message": exc.message}
        if isinstance(exc, ValidationError) and exc.errors:
            content["errors"] = exc.errors
        return JSONResponse(content, status_code=exc.status_code, headers=CORS_HEADERS)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(
                {
                    "success": False,
                    "message": "Route not found",
                    "method": request.method,
                    "path": request.url.path,
                },
                status_code=404,
                headers=CORS_HEADERS,
            )
        return JSONResponse(
            {"success": False, "message": exc.detail},
            status_code=exc.status_code,
            headers=CORS_HEADERS,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if wants_html(request):
            body = rendering.render_error_page("Something Went Wrong", "Internal server error")
            return HTMLResponse(body, status_code=500, headers=CORS_HEADERS)
        return JSONResponse(
            {"success": False, "message": "Internal server error"},
            status_code=500,
            headers=CORS_HEADERS,
        )


def create_mailer(settings: Settings):
    """SMTP mailer, or an in-memory one when SMTP_HOST is empty."""
    if not settings.smtp_host:
        logger.warning("SMTP_HOST is not set; notification emails will not be delivered")
        return RecordingMailer()
    return SmtpMailer.from_settings(settings)


def create_app(settings: Optional[Settings] = None, mailer=None) -> FastAPI:
    """Build the application with its collaborators."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    engine = create_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        if settings.auto_create_tables:
            await init_db(engine)
        yield
        # Shutdown
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Support ticket submission and staff status updates",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.mailer = mailer or create_mailer(settings)

    # CORS headers on every response
    @app.middleware("http")
    async def default_cors_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    register_exception_handlers(app)

    @app.get("/")
    async def root():
        """Health and version info."""
        return {
            "status": f"{settings.app_name} is running",
            "version": settings.app_version,
            "endpoints": {
                "submitTicket": "POST /api/submit-ticket",
                "getTickets": "GET /api/tickets/:userId",
                "getTicket": "GET /api/ticket/:ticketId",
                "updateTicket": "GET /update/:ticketId",
            },
        }

    # Include API routes
    app.include_router(api_router)

    @app.options("/{path:path}", include_in_schema=False)
    async def preflight(path: str):
        """Answer CORS preflight for any path."""
        return Response(status_code=200)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ticketdesk.main:app", host="0.0.0.0", port=8000, reload=True)
