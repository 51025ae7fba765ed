"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import letters
from services.layout_engine import get_variant, list_variants, validate_variant
from services.text_layout import FontSet
from settings import settings

logger = logging.getLogger(__name__)


def check_configuration() -> None:
    """Validate settings, every card variant and the configured fonts; raises ConfigurationError."""
    settings.validate()
    for name in list_variants():
        validate_variant(get_variant(name))
    FontSet.from_settings().check_coverage()


# Misconfiguration is fatal at startup, not per request
check_configuration()
logger.info("Card variants ready: %s", ", ".join(list_variants()))

# Create app
app = FastAPI(
    title="Blind Message API",
    description="Share tokens, link previews and downloadable cards for blind messages",
    version="0.1.0",
)

# CORS for the front end and link unfurlers
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # share links are opened from any origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(letters.router, tags=["letters"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Blind Message API"}


@app.get("/health")
async def health():
    """Liveness plus the card variants this process can render."""
    return {"status": "healthy", "variants": list_variants()}
