# ============================================================================
# Revision Summary Persistence & Statistics
# ============================================================================
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from app.models.revision import RevisionSession
from app.services.revision.session_stats import (
    calculate_success_rate,
    format_duration,
    round_half_up,
)
from app.services.revision.state import utcnow

logger = logging.getLogger(__name__)


class RevisionSummaryService:
    """Stores finished revision summaries and aggregates them"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save_session(
        self,
        pseudonym: str,
        selected_categories: Sequence[str],
        stats: Dict[str, int],
        duration: int,
    ) -> Dict[str, Any]:
        session = RevisionSession(
            pseudonym=pseudonym,
            mode="revision",
            selected_categories=[str(c) for c in selected_categories],
            total_answers=stats["total_answers"],
            correct_answers=stats["correct_answers"],
            incorrect_answers=stats["incorrect_answers"],
            questions_validated=stats["questions_validated"],
            duration_seconds=duration,
            completed_at=utcnow(),
        )
        self.db.add(session)
        await self.db.flush()
        await self.db.refresh(session)

        logger.info(f"Saved revision session {session.id} for '{pseudonym}' ({format_duration(duration)})")
        return self._serialize(session)

    async def list_sessions(self, pseudonym: str, limit: int = 10) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(RevisionSession)
            .where(RevisionSession.pseudonym == pseudonym)
            .order_by(RevisionSession.completed_at.desc(), RevisionSession.created_at.desc())
            .limit(limit)
        )
        return [self._serialize(s) for s in result.scalars().all()]

    async def average_stats(self, pseudonym: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Per-session averages; None when nothing has been saved yet"""
        query = select(RevisionSession)
        if pseudonym:
            query = query.where(RevisionSession.pseudonym == pseudonym)

        result = await self.db.execute(query)
        sessions = result.scalars().all()
        if not sessions:
            return None

        count = len(sessions)
        total_answers = sum(s.total_answers for s in sessions)
        total_correct = sum(s.correct_answers for s in sessions)
        total_incorrect = sum(s.incorrect_answers for s in sessions)
        total_validated = sum(s.questions_validated for s in sessions)
        average_duration = round_half_up(sum(s.duration_seconds for s in sessions) / count)

        return {
            "stats": {
                "total_answers": round_half_up(total_answers / count),
                "correct_answers": round_half_up(total_correct / count),
                "incorrect_answers": round_half_up(total_incorrect / count),
                "questions_validated": round_half_up(total_validated / count),
            },
            # Weighted by answers across all sessions, not a mean of rates
            "success_rate": calculate_success_rate(total_correct, total_answers),
            "duration": average_duration,
            "formatted_duration": format_duration(average_duration),
            "session_count": count,
        }

    async def average_duration_for_categories(
        self,
        category_ids: Sequence[str],
        pseudonym: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Average duration of saved sessions sharing at least one category"""
        wanted = {str(c) for c in category_ids}

        query = select(RevisionSession)
        if pseudonym:
            query = query.where(RevisionSession.pseudonym == pseudonym)
        result = await self.db.execute(query)

        durations = [
            s.duration_seconds
            for s in result.scalars().all()
            if wanted.intersection(s.selected_categories or [])
        ]
        if not durations:
            return {"average_duration": None, "formatted_duration": None, "session_count": 0}

        average = round_half_up(sum(durations) / len(durations))
        return {
            "average_duration": average,
            "formatted_duration": format_duration(average),
            "session_count": len(durations),
        }

    @staticmethod
    def _serialize(session: RevisionSession) -> Dict[str, Any]:
        return {
            "id": str(session.id),
            "pseudonym": session.pseudonym,
            "stats": {
                "total_answers": session.total_answers,
                "correct_answers": session.correct_answers,
                "incorrect_answers": session.incorrect_answers,
                "questions_validated": session.questions_validated,
            },
            "success_rate": session.success_rate,
            "duration": session.duration_seconds,
            "formatted_duration": format_duration(session.duration_seconds),
            "completed_at": session.completed_at.isoformat() if session.completed_at else None,
            "settings": {"selected_categories": list(session.selected_categories or [])},
        }
