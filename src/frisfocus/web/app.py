"""
FrisFocus Web - FastAPI application.

Mounts the onboarding sync routes.
"""

import logging

from fastapi import FastAPI

from frisfocus import __version__
from frisfocus.config import settings
from onboarding.api import router as onboarding_router

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="FrisFocus", version=__version__)
app.include_router(onboarding_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
