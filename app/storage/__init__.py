"""
Entity store: one interface, a durable and an in-memory backing.
"""

from __future__ import annotations

import structlog

from app.core.config import Settings

from .base import (  # noqa: F401
    DuplicateValueError,
    MembershipKey,
    RatingKey,
    Storage,
    SubmissionKey,
)
from .database import DatabaseStorage
from .memory import MemoryStorage

log = structlog.get_logger()


async def build_storage(settings: Settings) -> Storage:
    """Pick the backing from settings: the database when configured, memory otherwise."""
    if settings.uses_database:
        if not settings.database_url:
            raise ValueError("SC_DATABASE_URL is required when SC_STORAGE_BACKEND=database")
        return await DatabaseStorage.connect(
            settings.database_url,
            echo=settings.debug,
            create_tables=settings.create_tables_on_startup,
        )

    log.info("storage.connected", backend=MemoryStorage.backend)
    return MemoryStorage()
