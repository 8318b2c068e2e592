"""
Application lifecycle event handlers.

Opens the ledger store (creating tables for the SQL backend) on startup and
releases it on shutdown.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from repositories.provider import close_ledger, get_ledger

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("Starting ThisOrThat API...", env=settings.APP_ENV)

        await get_ledger().initialize()
        logger.info("Ledger store initialized", backend=settings.LEDGER_BACKEND)

        logger.info("ThisOrThat API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("Shutting down ThisOrThat API...")

        await close_ledger()

        logger.info("ThisOrThat API shutdown complete")

    return stop_app
