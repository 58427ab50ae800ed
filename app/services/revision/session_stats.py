# ============================================================================
# Revision Session Statistics
# ============================================================================
"""
Summary figures for a finished (or abandoned) revision session, plus the
display helpers shared by the results screen and the stored-session
endpoints.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import math

from app.services.revision.state import MasteryRecord, SessionState, question_key, utcnow


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_success_rate(correct_answers: int, total_answers: int) -> int:
    if total_answers == 0:
        return 0
    return round_half_up(correct_answers * 100 / total_answers)


def average_time_per_question(duration_seconds: int, questions_validated: int) -> int:
    if questions_validated == 0:
        return 0
    return duration_seconds // questions_validated


def format_duration(seconds: int) -> str:
    """65 -> '1m 5s', 3605 -> '1h 0m 5s', 45 -> '45s'"""
    seconds = max(int(seconds), 0)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def revision_message(success_rate: int) -> Dict[str, str]:
    """Encouragement shown on the results screen"""
    if success_rate == 100:
        return {"text": "Perfect", "emoji": "🎉"}
    if success_rate >= 90:
        return {"text": "Excellent", "emoji": "🌟"}
    if success_rate >= 75:
        return {"text": "Very good", "emoji": "👍"}
    if success_rate >= 60:
        return {"text": "Good", "emoji": "💪"}
    return {"text": "Keep revising", "emoji": "📚"}


def questions_needing_work(
    questions: Sequence[Any],
    state: SessionState,
) -> List[Tuple[Any, MasteryRecord]]:
    """Unmastered questions, weakest streak first"""
    pending = []
    for question in questions:
        record = state.records.get(question_key(question))
        if record is not None and not record.is_mastered:
            pending.append((question, record))
    # sorted() is stable, ties keep session order
    return sorted(pending, key=lambda item: item[1].correct_streak)


def _question_title(question: Any) -> Optional[str]:
    if isinstance(question, dict):
        return question.get("title")
    return getattr(question, "title", None)


@dataclass
class RevisionSummary:
    total_answers: int
    correct_answers: int
    incorrect_answers: int
    questions_validated: int
    total_questions: int
    duration_seconds: int
    success_rate: int
    average_time_per_question: int
    formatted_duration: str
    completed: bool
    message: Dict[str, str]
    questions_needing_work: List[Dict[str, Any]] = field(default_factory=list)

    def stats(self) -> Dict[str, int]:
        return {
            "total_answers": self.total_answers,
            "correct_answers": self.correct_answers,
            "incorrect_answers": self.incorrect_answers,
            "questions_validated": self.questions_validated,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def finalize_session(
    state: SessionState,
    now: Optional[datetime] = None,
    questions: Optional[Sequence[Any]] = None,
) -> RevisionSummary:
    """
    Summarise a session, complete or exited early.

    When the question payloads are given, the unmastered ones are listed
    (weakest first) so the results screen can point at what to revise.
    """
    now = now or utcnow()
    duration = max(int((now - state.started_at).total_seconds()), 0)
    validated = state.validated_count
    success_rate = calculate_success_rate(state.total_correct, state.total_answers)

    pending = [
        {
            "question_id": record.question_id,
            "title": _question_title(question),
            "correct_streak": record.correct_streak,
        }
        for question, record in questions_needing_work(questions or [], state)
    ]

    return RevisionSummary(
        total_answers=state.total_answers,
        correct_answers=state.total_correct,
        incorrect_answers=state.total_incorrect,
        questions_validated=validated,
        total_questions=state.total_questions,
        duration_seconds=duration,
        success_rate=success_rate,
        average_time_per_question=average_time_per_question(duration, validated),
        formatted_duration=format_duration(duration),
        completed=state.is_complete,
        message=revision_message(success_rate),
        questions_needing_work=pending,
    )
