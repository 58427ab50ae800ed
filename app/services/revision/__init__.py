# ============================================================================
# Revision Services - Public API
# ============================================================================
"""
Revision Mode: trainees answer randomly drawn questions until every
question has been answered correctly twice in a row.

Engine (pure, synchronous):
- initialize_session: one mastery record per question
- RevisionQuestionSelector: uniform draw over unmastered questions
- process_answer: exact-match verdict + streak transition
- finalize_session: summary figures and display helpers

Services (async, I/O):
- QuestionRepository: question set and correct-answer lookup
- RevisionSessionStore: in-flight state in Redis
- RevisionSessionManager: start / answer / finish orchestration
- RevisionSummaryService: saved summaries and averages
"""
from app.services.revision.state import (
    MASTERY_THRESHOLD,
    AnswerOutcome,
    MasteryRecord,
    SessionState,
    initialize_session,
)
from app.services.revision.question_selector import (
    RevisionQuestionSelector,
    select_next_question,
)
from app.services.revision.answer_processor import (
    AnswerResult,
    is_exact_match,
    process_answer,
)
from app.services.revision.session_stats import (
    RevisionSummary,
    average_time_per_question,
    calculate_success_rate,
    finalize_session,
    format_duration,
    questions_needing_work,
    revision_message,
)
from app.services.revision.question_repository import QuestionRepository
from app.services.revision.session_store import ActiveRevision, RevisionSessionStore
from app.services.revision.session_manager import RevisionSessionManager
from app.services.revision.summary_service import RevisionSummaryService

__all__ = [
    "MASTERY_THRESHOLD",
    "AnswerOutcome",
    "MasteryRecord",
    "SessionState",
    "initialize_session",
    "RevisionQuestionSelector",
    "select_next_question",
    "AnswerResult",
    "is_exact_match",
    "process_answer",
    "RevisionSummary",
    "average_time_per_question",
    "calculate_success_rate",
    "finalize_session",
    "format_duration",
    "questions_needing_work",
    "revision_message",
    "QuestionRepository",
    "ActiveRevision",
    "RevisionSessionStore",
    "RevisionSessionManager",
    "RevisionSummaryService",
]
