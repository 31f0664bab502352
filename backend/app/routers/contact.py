"""
Contact form router.

Endpoints:
  POST    /   — submit the website contact form (JSON or form-encoded)
  OPTIONS /   — CORS pre-flight; 200 with an empty body

Every other method gets a 405 JSON body rather than FastAPI's default,
so the route is registered for all methods and the handler decides.
"""

from fastapi import APIRouter, Depends, Request, Response

from app.config import Settings, get_settings
from app.services.contact_handler import ContactHandler

router = APIRouter()

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_contact_handler(settings: Settings = Depends(get_settings)) -> ContactHandler:
    """Build the handler for this request from the current settings."""
    return ContactHandler.from_settings(settings)


@router.api_route("", methods=_ALL_METHODS, include_in_schema=False)
async def contact(
    request: Request,
    handler: ContactHandler = Depends(get_contact_handler),
) -> Response:
    return await handler.handle(request)
