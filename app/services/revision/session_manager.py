# ============================================================================
# Revision Session Management Service
# ============================================================================
"""
Drives a revision session across HTTP calls:

    start -> question -> answer -> question -> ... -> finish

The engine pieces (state, selector, answer processor, stats) are pure; this
service adds the I/O around them: loading questions, fetching the correct
answers at validation time and parking the live state in the session store.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from uuid import UUID, uuid4
import random
import logging

from app.core.exceptions import (
    CorrectAnswerLookupFailed,
    EmptySelection,
    QuestionAlreadyMastered,
    QuestionNotFound,
    QuestionNotPresented,
    UnknownQuestion,
)
from app.services.revision.answer_processor import normalize_labels, process_answer
from app.services.revision.question_repository import QuestionRepository
from app.services.revision.question_selector import RevisionQuestionSelector
from app.services.revision.session_stats import RevisionSummary, finalize_session
from app.services.revision.session_store import ActiveRevision, RevisionSessionStore
from app.services.revision.state import initialize_session, utcnow

logger = logging.getLogger(__name__)


class RevisionSessionManager:
    """Orchestrates revision sessions for the public trainee site"""

    def __init__(
        self,
        repository: QuestionRepository,
        store: RevisionSessionStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.store = store
        self.selector = RevisionQuestionSelector(rng)
        self.clock = clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start_session(self, category_ids: Sequence[UUID]) -> Tuple[ActiveRevision, Dict[str, Any]]:
        """Load the question set, initialise mastery state and draw the first question"""
        questions = await self.repository.fetch_revision_questions(category_ids)
        state = initialize_session(questions, now=self.clock())

        revision = ActiveRevision(
            session_id=str(uuid4()),
            state=state,
            questions=questions,
            selected_categories=[str(c) for c in category_ids],
        )
        first = self.selector.select_next(revision.questions, state)
        revision.current_question_id = first["id"]
        await self.store.save(revision)

        logger.info(
            f"Revision {revision.session_id} started with {state.total_questions} questions "
            f"(categories={revision.selected_categories or 'all'})"
        )
        return revision, first

    async def current_question(self, session_id: str) -> Tuple[ActiveRevision, Optional[Dict[str, Any]]]:
        revision = await self.store.load(session_id)
        return revision, revision.current_question

    async def submit_answer(
        self,
        session_id: str,
        question_id: str,
        selected_answers: List[str],
    ) -> Dict[str, Any]:
        """
        Validate the presented question and move on.

        The correct answers are fetched before anything is mutated: a lookup
        failure leaves the session untouched and the call can be retried.
        Load, validation and save run under the session lock so two answers
        racing on one session cannot overwrite each other.
        """
        async with self.store.lock(session_id):
            revision = await self.store.load(session_id)
            state = revision.state
            question_id = str(question_id)

            if not normalize_labels(selected_answers):
                raise EmptySelection()

            record = state.records.get(question_id)
            if record is None:
                raise UnknownQuestion(question_id)
            if record.is_mastered:
                raise QuestionAlreadyMastered(question_id)
            if question_id != revision.current_question_id:
                raise QuestionNotPresented(question_id)

            correct_answers = await self._lookup_correct_answers(question_id)

            result = process_answer(state, question_id, selected_answers, correct_answers)

            next_question = self.selector.select_next(revision.questions, state)
            revision.current_question_id = next_question["id"] if next_question else None
            await self.store.save(revision)

        if result.session_complete:
            logger.info(
                f"Revision {session_id} complete: {state.total_questions} questions validated "
                f"in {state.total_answers} answers"
            )

        response = result.to_dict()
        response["next_question"] = next_question
        response["progress"] = self.progress(revision)
        return response

    async def finish_session(self, session_id: str) -> Tuple[ActiveRevision, RevisionSummary]:
        """Summarise the session (complete or exited early) and drop the live state"""
        revision = await self.store.load(session_id)
        summary = finalize_session(revision.state, now=self.clock(), questions=revision.questions)
        await self.store.delete(session_id)

        logger.info(
            f"Revision {session_id} finished (completed={summary.completed}, "
            f"success_rate={summary.success_rate}%, duration={summary.formatted_duration})"
        )
        return revision, summary

    async def abandon_session(self, session_id: str) -> None:
        await self.store.load(session_id)
        await self.store.delete(session_id)
        logger.info(f"Revision {session_id} abandoned")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _lookup_correct_answers(self, question_id: str) -> List[str]:
        try:
            correct = await self.repository.get_correct_answers(UUID(question_id))
        except QuestionNotFound:
            logger.warning(f"Correct-answer lookup: question {question_id} no longer exists")
            raise CorrectAnswerLookupFailed(question_id, "question not found")
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Correct-answer lookup failed for {question_id}: {e}")
            raise CorrectAnswerLookupFailed(question_id)

        if not correct:
            logger.warning(f"Question {question_id} has no correct answers on record")
            raise CorrectAnswerLookupFailed(question_id, "no correct answers on record")
        return correct

    def progress(self, revision: ActiveRevision) -> Dict[str, Any]:
        state = revision.state
        current = state.records.get(revision.current_question_id or "")
        elapsed = max(int((self.clock() - state.started_at).total_seconds()), 0)
        return {
            "total_questions": state.total_questions,
            "validated_questions": state.validated_count,
            "current_question_streak": current.correct_streak if current else 0,
            "elapsed_seconds": elapsed,
            "correct_answers": state.total_correct,
            "incorrect_answers": state.total_incorrect,
        }
