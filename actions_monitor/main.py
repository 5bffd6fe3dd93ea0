"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from actions_monitor.api import actions, health
from actions_monitor.config import settings
from actions_monitor.core.logging import setup_logging
from actions_monitor.middleware.request_logging import RequestLoggingMiddleware

setup_logging(settings.LOG_LEVEL, service=settings.APP_NAME)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Workflow, run and job metrics for a GitHub repository",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(actions.router, prefix="/api/monitor/github", tags=["GitHub Actions"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
    }
