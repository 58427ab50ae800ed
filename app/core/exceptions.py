# ============================================================================
# Custom Exceptions
# ============================================================================
from typing import Optional

class RailQuizException(Exception):
    """Base exception for RailQuiz Revision"""
    def __init__(
        self,
        detail: str,
        status_code: int = 400,
        error_code: Optional[str] = None
    ):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code or "RAILQUIZ_ERROR"
        super().__init__(self.detail)

class EmptyQuestionSet(RailQuizException):
    def __init__(self):
        super().__init__(
            detail="No questions available for this selection",
            status_code=404,
            error_code="EMPTY_QUESTION_SET"
        )

class EmptySelection(RailQuizException):
    def __init__(self):
        super().__init__(
            detail="Select at least one answer before validating",
            status_code=400,
            error_code="EMPTY_SELECTION"
        )

class UnknownQuestion(RailQuizException):
    def __init__(self, question_id: str):
        super().__init__(
            detail=f"Question is not part of this revision session: {question_id}",
            status_code=409,
            error_code="UNKNOWN_QUESTION"
        )
        self.question_id = question_id

class QuestionAlreadyMastered(RailQuizException):
    def __init__(self, question_id: str):
        super().__init__(
            detail=f"Question already validated in this session: {question_id}",
            status_code=409,
            error_code="QUESTION_ALREADY_MASTERED"
        )
        self.question_id = question_id

class QuestionNotPresented(RailQuizException):
    def __init__(self, question_id: str):
        super().__init__(
            detail=f"Question is not the one currently presented: {question_id}",
            status_code=409,
            error_code="QUESTION_NOT_PRESENTED"
        )
        self.question_id = question_id

class CorrectAnswerLookupFailed(RailQuizException):
    def __init__(self, question_id: str, reason: str = "unavailable"):
        super().__init__(
            detail=f"Could not verify the answer right now ({reason}). Please try again.",
            status_code=503,
            error_code="CORRECT_ANSWER_LOOKUP_FAILED"
        )
        self.question_id = question_id
        self.reason = reason

class QuestionNotFound(RailQuizException):
    def __init__(self, question_id: str):
        super().__init__(
            detail=f"Question not found: {question_id}",
            status_code=404,
            error_code="QUESTION_NOT_FOUND"
        )

class RevisionSessionNotFound(RailQuizException):
    def __init__(self, session_id: str):
        super().__init__(
            detail=f"Revision session not found or expired: {session_id}",
            status_code=404,
            error_code="REVISION_SESSION_NOT_FOUND"
        )

class RevisionSessionBusy(RailQuizException):
    def __init__(self, session_id: str):
        super().__init__(
            detail=f"Another answer for this revision session is being validated: {session_id}",
            status_code=409,
            error_code="REVISION_SESSION_BUSY"
        )
        self.session_id = session_id
