"""API routes."""
from fastapi import APIRouter
from ticketdesk.api import tickets, updates

api_router = APIRouter()

api_router.include_router(tickets.router, prefix="/api", tags=["Tickets"])
api_router.include_router(updates.router, prefix="/update", tags=["Update form"])
