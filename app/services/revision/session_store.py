# ============================================================================
# In-flight Revision Session Storage
# ============================================================================
"""
Parks a trainee's live revision between HTTP calls.

Only the running state lives here, under a TTL; nothing is written to the
database until the trainee saves the final summary.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional
import logging

from app.core.exceptions import RevisionSessionBusy, RevisionSessionNotFound
from app.core.redis import RedisCache
from app.services.revision.state import SessionState

logger = logging.getLogger(__name__)


@dataclass
class ActiveRevision:
    session_id: str
    state: SessionState
    questions: List[Dict[str, Any]]
    current_question_id: Optional[str] = None
    selected_categories: List[str] = field(default_factory=list)

    def question(self, question_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if question_id is None:
            return None
        for q in self.questions:
            if q["id"] == question_id:
                return q
        return None

    @property
    def current_question(self) -> Optional[Dict[str, Any]]:
        return self.question(self.current_question_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "state": self.state.to_dict(),
            "questions": self.questions,
            "current_question_id": self.current_question_id,
            "selected_categories": self.selected_categories,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActiveRevision":
        return cls(
            session_id=data["session_id"],
            state=SessionState.from_dict(data["state"]),
            questions=list(data["questions"]),
            current_question_id=data.get("current_question_id"),
            selected_categories=list(data.get("selected_categories") or []),
        )


class RevisionSessionStore:
    def __init__(self, cache: RedisCache, ttl: int = 4 * 3600, prefix: str = "revision"):
        self.cache = cache
        self.ttl = ttl
        self.prefix = prefix

    def _make_key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    async def save(self, revision: ActiveRevision) -> None:
        await self.cache.set_json(self._make_key(revision.session_id), revision.to_dict(), ttl=self.ttl)

    async def load(self, session_id: str) -> ActiveRevision:
        data = await self.cache.get_json(self._make_key(session_id))
        if data is None:
            raise RevisionSessionNotFound(session_id)
        return ActiveRevision.from_dict(data)

    async def delete(self, session_id: str) -> None:
        await self.cache.delete(self._make_key(session_id))
        logger.debug(f"Discarded in-flight revision {session_id}")

    @asynccontextmanager
    async def lock(self, session_id: str, ttl: int = 30) -> AsyncIterator[None]:
        """
        Serialise read-modify-write cycles on one session.

        A second caller arriving while the lock is held gets
        RevisionSessionBusy instead of overwriting the first one's answer.
        """
        key = f"{self._make_key(session_id)}:lock"
        if not await self.cache.acquire_lock(key, ttl):
            logger.warning(f"Concurrent answer rejected for revision {session_id}")
            raise RevisionSessionBusy(session_id)
        try:
            yield
        finally:
            await self.cache.release_lock(key)
