# ============================================================================
# Revision Question Retrieval
# ============================================================================
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from uuid import UUID
import random
import logging

from app.core.exceptions import EmptyQuestionSet, QuestionNotFound
from app.models.question import Category, Question

logger = logging.getLogger(__name__)


class QuestionRepository:
    """Reads questions for revision sessions. Correct answers never leave through the public payload."""

    def __init__(self, db: AsyncSession, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    async def fetch_revision_questions(self, category_ids: Sequence[UUID]) -> List[Dict[str, Any]]:
        """All questions in any of the categories (every question when no filter), shuffled once"""
        query = select(Question).options(selectinload(Question.categories))

        if category_ids:
            query = query.where(Question.categories.any(Category.id.in_(list(category_ids))))

        result = await self.db.execute(query)
        questions = list(result.scalars().unique().all())

        if not questions:
            logger.info(f"No revision questions for categories {list(category_ids)}")
            raise EmptyQuestionSet()

        self.rng.shuffle(questions)
        return [self.to_public_payload(q) for q in questions]

    async def get_correct_answers(self, question_id: UUID) -> List[str]:
        """Authoritative correct labels, read fresh on every call"""
        result = await self.db.execute(
            select(Question.correct_answers).where(Question.id == question_id)
        )
        row = result.first()
        if row is None:
            raise QuestionNotFound(str(question_id))
        return list(row[0] or [])

    @staticmethod
    def to_public_payload(question: Question) -> Dict[str, Any]:
        return {
            "id": str(question.id),
            "title": question.title,
            "illustration": question.illustration,
            "answers": [
                {
                    "id": a["id"],
                    "type": a.get("type", "text"),
                    "text": a.get("text"),
                    "image": a.get("image"),
                }
                for a in (question.answers or [])
            ],
            "categories": [
                {
                    "id": str(c.id),
                    "name": c.name,
                    "icon": c.icon,
                    "category_type": c.category_type,
                }
                for c in question.categories
            ],
            "has_multiple_correct_answers": question.has_multiple_correct_answers,
        }
