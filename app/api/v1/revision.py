# ============================================================================
# Revision Mode Endpoints
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from uuid import UUID

from app.api.deps import get_revision_manager, get_summary_service
from app.config import get_settings
from app.schemas.revision import (
    CategoryDurationResponse,
    CurrentQuestionResponse,
    GenerateRevisionRequest,
    GenerateRevisionResponse,
    RevisionAverageResponse,
    RevisionSessionListResponse,
    RevisionSummaryResponse,
    SaveRevisionSessionRequest,
    SavedRevisionSession,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from app.services.revision import RevisionSessionManager, RevisionSummaryService

router = APIRouter(prefix="/revision", tags=["revision"])
settings = get_settings()

@router.post("/generate", response_model=GenerateRevisionResponse)
async def generate_revision(
    request: GenerateRevisionRequest,
    manager: RevisionSessionManager = Depends(get_revision_manager)
):
    """Start a revision session over the selected categories (all when empty)"""
    revision, first_question = await manager.start_session(request.selected_categories)

    return {
        "session_id": revision.session_id,
        "total_questions": revision.state.total_questions,
        "settings": {"selected_categories": revision.selected_categories},
        "question": first_question,
        "progress": manager.progress(revision),
    }

@router.get("/sessions/{session_id}/question", response_model=CurrentQuestionResponse)
async def get_current_question(
    session_id: str,
    manager: RevisionSessionManager = Depends(get_revision_manager)
):
    """Question currently on screen; null once everything is validated"""
    revision, question = await manager.current_question(session_id)

    return {
        "session_id": revision.session_id,
        "question": question,
        "progress": manager.progress(revision),
        "session_complete": revision.state.is_complete,
    }

@router.post("/sessions/{session_id}/answer", response_model=SubmitAnswerResponse)
async def submit_answer(
    session_id: str,
    request: SubmitAnswerRequest,
    manager: RevisionSessionManager = Depends(get_revision_manager)
):
    """Validate the selected answers against the stored correct answers"""
    return await manager.submit_answer(
        session_id=session_id,
        question_id=str(request.question_id),
        selected_answers=list(request.user_answers),
    )

@router.post("/sessions/{session_id}/finish", response_model=RevisionSummaryResponse)
async def finish_revision(
    session_id: str,
    manager: RevisionSessionManager = Depends(get_revision_manager)
):
    """Summarise the session, complete or exited early"""
    revision, summary = await manager.finish_session(session_id)

    return {
        "session_id": revision.session_id,
        "settings": {"selected_categories": revision.selected_categories},
        "stats": summary.stats(),
        "total_questions": summary.total_questions,
        "duration": summary.duration_seconds,
        "formatted_duration": summary.formatted_duration,
        "success_rate": summary.success_rate,
        "average_time_per_question": summary.average_time_per_question,
        "completed": summary.completed,
        "message": summary.message,
        "questions_needing_work": summary.questions_needing_work,
    }

@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_revision(
    session_id: str,
    manager: RevisionSessionManager = Depends(get_revision_manager)
):
    """Exit without a summary"""
    await manager.abandon_session(session_id)

@router.post("/sessions", response_model=SavedRevisionSession, status_code=status.HTTP_201_CREATED)
async def save_revision_session(
    request: SaveRevisionSessionRequest,
    service: RevisionSummaryService = Depends(get_summary_service)
):
    """Persist a finished session summary under the trainee's pseudonym"""
    return await service.save_session(
        pseudonym=request.pseudonym,
        selected_categories=[str(c) for c in request.settings.selected_categories],
        stats=request.stats.model_dump(),
        duration=request.duration,
    )

@router.get("/sessions", response_model=RevisionSessionListResponse)
async def list_revision_sessions(
    pseudonym: str,
    limit: int = Query(settings.SESSION_HISTORY_LIMIT, ge=1, le=100),
    service: RevisionSummaryService = Depends(get_summary_service)
):
    """Saved sessions for a pseudonym, newest first"""
    sessions = await service.list_sessions(pseudonym, limit)
    return {"sessions": sessions, "total": len(sessions)}

@router.get("/stats", response_model=RevisionAverageResponse)
async def get_revision_average(
    pseudonym: Optional[str] = None,
    service: RevisionSummaryService = Depends(get_summary_service)
):
    """Average figures over saved sessions"""
    return {"average": await service.average_stats(pseudonym)}

@router.get("/last-session", response_model=CategoryDurationResponse)
async def get_category_average_duration(
    categories: str,
    pseudonym: Optional[str] = None,
    service: RevisionSummaryService = Depends(get_summary_service)
):
    """Average duration of saved sessions covering any of the given categories"""
    try:
        category_ids = [str(UUID(c.strip())) for c in categories.split(",") if c.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid category id")

    if not category_ids:
        raise HTTPException(status_code=400, detail="At least one category is required")

    return await service.average_duration_for_categories(category_ids, pseudonym)
