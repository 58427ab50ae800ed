# ============================================================================
# Revision Mastery State
# ============================================================================
"""
Per-question mastery tracking for Revision Mode.

A question is *mastered* (validated) once it has been answered correctly
twice in a row. Any incorrect answer zeroes the streak. Mastered questions
leave the selection pool for the rest of the session.

State is plain data: it serialises to a JSON-compatible dict so the
session manager can park it between HTTP calls.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.core.exceptions import EmptyQuestionSet

# Consecutive correct answers required to validate a question
MASTERY_THRESHOLD = 2


class AnswerOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


def question_key(question: Any) -> str:
    """Return the session key of a question (plain id, mapping or object)"""
    if isinstance(question, str):
        return question
    if isinstance(question, dict):
        return str(question["id"])
    return str(question.id)


@dataclass
class MasteryRecord:
    question_id: str
    correct_streak: int = 0
    last_outcome: Optional[AnswerOutcome] = None
    is_mastered: bool = False

    def record_correct(self) -> None:
        self.correct_streak += 1
        self.last_outcome = AnswerOutcome.CORRECT
        if self.correct_streak >= MASTERY_THRESHOLD:
            self.is_mastered = True

    def record_incorrect(self) -> None:
        # Zeroed, not decremented
        self.correct_streak = 0
        self.last_outcome = AnswerOutcome.INCORRECT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "correct_streak": self.correct_streak,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "is_mastered": self.is_mastered,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MasteryRecord":
        streak = int(data.get("correct_streak", 0))
        outcome = data.get("last_outcome")
        return cls(
            question_id=str(data["question_id"]),
            correct_streak=streak,
            last_outcome=AnswerOutcome(outcome) if outcome else None,
            is_mastered=streak >= MASTERY_THRESHOLD,
        )


@dataclass
class SessionState:
    """Mastery records and running counters of one trainee's revision session"""
    question_ids: List[str]
    records: Dict[str, MasteryRecord]
    started_at: datetime
    total_answers: int = 0
    total_correct: int = 0
    total_incorrect: int = 0

    @property
    def total_questions(self) -> int:
        return len(self.records)

    @property
    def validated_count(self) -> int:
        return sum(1 for r in self.records.values() if r.is_mastered)

    @property
    def is_complete(self) -> bool:
        return all(r.is_mastered for r in self.records.values())

    def unmastered_ids(self) -> List[str]:
        """Unmastered question ids, in session order"""
        return [qid for qid in self.question_ids if not self.records[qid].is_mastered]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_ids": list(self.question_ids),
            "records": [self.records[qid].to_dict() for qid in self.question_ids],
            "started_at": self.started_at.isoformat(),
            "total_answers": self.total_answers,
            "total_correct": self.total_correct,
            "total_incorrect": self.total_incorrect,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        records = {}
        for raw in data["records"]:
            record = MasteryRecord.from_dict(raw)
            records[record.question_id] = record
        return cls(
            question_ids=[str(qid) for qid in data["question_ids"]],
            records=records,
            started_at=datetime.fromisoformat(data["started_at"]),
            total_answers=int(data.get("total_answers", 0)),
            total_correct=int(data.get("total_correct", 0)),
            total_incorrect=int(data.get("total_incorrect", 0)),
        )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def initialize_session(
    questions: Iterable[Any],
    now: Optional[datetime] = None,
) -> SessionState:
    """
    Create a fresh session with one unmastered record per question.

    Duplicate ids collapse into a single record; the first occurrence keeps
    its position in the session order.
    """
    question_ids: List[str] = []
    records: Dict[str, MasteryRecord] = {}

    for question in questions:
        qid = question_key(question)
        if qid in records:
            continue
        question_ids.append(qid)
        records[qid] = MasteryRecord(question_id=qid)

    if not records:
        raise EmptyQuestionSet()

    return SessionState(
        question_ids=question_ids,
        records=records,
        started_at=now or utcnow(),
    )
