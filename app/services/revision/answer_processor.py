# ============================================================================
# Revision Answer Processing
# ============================================================================
"""
Validates a trainee's answer against the authoritative correct-answer set
and applies the mastery transition.

The correct labels must come from the question store (fetched fresh at
validation time), never from the request body. Every check runs before the
session is touched, so a failure leaves the state exactly as it was.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List
import logging

from app.core.exceptions import (
    EmptySelection,
    UnknownQuestion,
    QuestionAlreadyMastered,
)
from app.services.revision.state import MasteryRecord, SessionState

logger = logging.getLogger(__name__)


@dataclass
class AnswerResult:
    """Outcome of one validation"""
    question_id: str
    is_correct: bool
    record: MasteryRecord
    correct_answers: List[str]
    selected_answers: List[str]
    total_answers: int
    total_correct: int
    total_incorrect: int
    session_complete: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "is_correct": self.is_correct,
            "question_state": self.record.to_dict(),
            "correct_answers": self.correct_answers,
            "selected_answers": self.selected_answers,
            "stats": {
                "total_answers": self.total_answers,
                "correct_answers": self.total_correct,
                "incorrect_answers": self.total_incorrect,
            },
            "session_complete": self.session_complete,
        }


def normalize_labels(labels: Iterable[str]) -> FrozenSet[str]:
    return frozenset(str(label).strip().upper() for label in labels)


def is_exact_match(selected: Iterable[str], correct: Iterable[str]) -> bool:
    """Correct iff both label sets are identical (no subset, no superset)"""
    return normalize_labels(selected) == normalize_labels(correct)


def process_answer(
    state: SessionState,
    question_id: str,
    selected_answers: Iterable[str],
    correct_answers: Iterable[str],
) -> AnswerResult:
    selected = normalize_labels(selected_answers)
    if not selected:
        raise EmptySelection()

    record = state.records.get(str(question_id))
    if record is None:
        raise UnknownQuestion(str(question_id))
    if record.is_mastered:
        raise QuestionAlreadyMastered(str(question_id))

    correct = normalize_labels(correct_answers)
    is_correct = selected == correct

    if is_correct:
        record.record_correct()
        state.total_correct += 1
    else:
        record.record_incorrect()
        state.total_incorrect += 1
    state.total_answers += 1

    logger.debug(
        f"Question {record.question_id}: {'correct' if is_correct else 'incorrect'} "
        f"(streak={record.correct_streak}, mastered={record.is_mastered})"
    )

    return AnswerResult(
        question_id=record.question_id,
        is_correct=is_correct,
        record=MasteryRecord(**vars(record)),
        correct_answers=sorted(correct),
        selected_answers=sorted(selected),
        total_answers=state.total_answers,
        total_correct=state.total_correct,
        total_incorrect=state.total_incorrect,
        session_complete=state.is_complete,
    )
