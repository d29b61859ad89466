"""
DinnerSnap Web - FastAPI application.
"""

import logging

from fastapi import FastAPI

from dinnersnap import __version__
from dinnersnap.config import get_settings
from dinnersnap.observability import enable_prompt_logging
from dinnersnap.web.analyze_routes import router as analyze_router

logger = logging.getLogger(__name__)

app = FastAPI(title="DinnerSnap", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    settings = get_settings()
    if settings.dinnersnap_log_prompts:
        enable_prompt_logging(True)
    logger.info(f"DinnerSnap {__version__} starting up ({settings.dinnersnap_env})...")
    logger.info(f"  Vision: {'configured' if settings.has_vision else 'skipped'}")
    logger.info(f"  Recipe search: {'configured' if settings.has_search else 'skipped'}")
    logger.info(f"  Generative: {'configured' if settings.has_generative else 'skipped'}")
    logger.info(f"  Watchdog: {settings.watchdog_seconds:.1f}s")


app.include_router(analyze_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


def create_app() -> FastAPI:
    """Create and return the FastAPI application."""
    return app
