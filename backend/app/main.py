"""
Krysh HVAC Contact API
FastAPI application for the website contact form.
"""

import logging

from fastapi import FastAPI

from app.config import load_settings
from app.routers import contact

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Krysh HVAC Contact API",
    description="Website contact form intake with AI triage and email notifications",
    version="0.1.0",
)

# CORS headers are set by the contact handler on every response it returns.
# CORSMiddleware would answer pre-flights itself with a text body.
app.include_router(contact.router, prefix="/api/contact", tags=["contact"])


@app.on_event("startup")
async def log_startup_config() -> None:
    """
    Log which optional integrations are active.

    Example output:

        Contact API ready:
          Email dispatch: log-only (SENDGRID_API_KEY / TO_EMAIL not set)
          AI enrichment:  enabled (claude-haiku-4-5)
    """
    settings = load_settings()
    email_line = (
        f"enabled (to {settings.to_email})"
        if settings.email_configured
        else "log-only (SENDGRID_API_KEY / TO_EMAIL not set)"
    )
    ai_line = (
        f"enabled ({settings.anthropic_model})"
        if settings.enrichment_configured
        else "disabled (ANTHROPIC_API_KEY not set)"
    )
    logger.info(
        "Contact API ready:\n"
        "  Email dispatch: %s\n"
        "  AI enrichment:  %s",
        email_line,
        ai_line,
    )


@app.get("/")
async def root():
    return {"message": "Krysh HVAC Contact API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}
