# ============================================================================
# API Dependencies
# ============================================================================
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.database import get_db
from app.core.redis import cache
from app.config import get_settings
from app.services.revision import (
    QuestionRepository,
    RevisionSessionManager,
    RevisionSessionStore,
    RevisionSummaryService,
)

settings = get_settings()
logger = logging.getLogger(__name__)


# ============================================================================
# Revision Dependencies
# ============================================================================
def get_session_store() -> RevisionSessionStore:
    """
    In-flight revision state, backed by Redis.

    Tests override this dependency with an in-memory cache.
    """
    return RevisionSessionStore(cache, ttl=settings.REVISION_SESSION_TTL_SECONDS)


async def get_question_repository(db: AsyncSession = Depends(get_db)) -> QuestionRepository:
    return QuestionRepository(db)


async def get_revision_manager(
    repository: QuestionRepository = Depends(get_question_repository),
    store: RevisionSessionStore = Depends(get_session_store),
) -> RevisionSessionManager:
    return RevisionSessionManager(repository, store)


async def get_summary_service(db: AsyncSession = Depends(get_db)) -> RevisionSummaryService:
    return RevisionSummaryService(db)
