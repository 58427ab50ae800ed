# ============================================================================
# Revision Schemas
# ============================================================================
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Literal
from uuid import UUID
from enum import Enum
import re

from app.config import get_settings

# Upper bound for a saved session duration
MAX_SESSION_DURATION = get_settings().MAX_SESSION_DURATION_SECONDS

AnswerLabel = Literal["A", "B", "C", "D", "E", "F"]

PSEUDONYM_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\s]+$")

class AnswerTypeEnum(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    TEXT_IMAGE = "text-image"

class RevisionSettings(BaseModel):
    selected_categories: List[UUID] = Field(default_factory=list)

class GenerateRevisionRequest(RevisionSettings):
    pass

class AnswerOptionResponse(BaseModel):
    id: AnswerLabel
    type: AnswerTypeEnum
    text: Optional[str] = None
    image: Optional[str] = None

class CategorySummary(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None
    category_type: Optional[str] = None

class RevisionQuestionResponse(BaseModel):
    """A question as shown to the trainee: no correct answers"""
    id: str
    title: str
    illustration: Optional[str] = None
    answers: List[AnswerOptionResponse]
    categories: List[CategorySummary] = Field(default_factory=list)
    has_multiple_correct_answers: bool

class RevisionProgress(BaseModel):
    total_questions: int
    validated_questions: int
    current_question_streak: int
    elapsed_seconds: int
    correct_answers: int
    incorrect_answers: int

class GenerateRevisionResponse(BaseModel):
    session_id: str
    total_questions: int
    settings: RevisionSettings
    question: RevisionQuestionResponse
    progress: RevisionProgress

class CurrentQuestionResponse(BaseModel):
    session_id: str
    question: Optional[RevisionQuestionResponse]
    progress: RevisionProgress
    session_complete: bool

class SubmitAnswerRequest(BaseModel):
    question_id: UUID
    # Empty selections are rejected by the engine with EMPTY_SELECTION
    user_answers: List[AnswerLabel] = Field(default_factory=list, max_length=6)

class QuestionStateResponse(BaseModel):
    question_id: str
    correct_streak: int
    last_outcome: Optional[Literal["correct", "incorrect"]]
    is_mastered: bool

class RevisionStats(BaseModel):
    total_answers: int = Field(0, ge=0)
    correct_answers: int = Field(0, ge=0)
    incorrect_answers: int = Field(0, ge=0)
    questions_validated: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_totals(self):
        if self.total_answers != self.correct_answers + self.incorrect_answers:
            raise ValueError("total_answers must equal correct_answers + incorrect_answers")
        return self

class RunningStats(BaseModel):
    total_answers: int
    correct_answers: int
    incorrect_answers: int

class SubmitAnswerResponse(BaseModel):
    question_id: str
    is_correct: bool
    question_state: QuestionStateResponse
    correct_answers: List[str]
    selected_answers: List[str]
    stats: RunningStats
    session_complete: bool
    next_question: Optional[RevisionQuestionResponse] = None
    progress: RevisionProgress

class RevisionMessage(BaseModel):
    text: str
    emoji: str

class PendingQuestion(BaseModel):
    question_id: str
    title: Optional[str] = None
    correct_streak: int

class RevisionSummaryResponse(BaseModel):
    session_id: str
    settings: RevisionSettings
    stats: RevisionStats
    total_questions: int
    duration: int
    formatted_duration: str
    success_rate: int
    average_time_per_question: int
    completed: bool
    message: RevisionMessage
    questions_needing_work: List[PendingQuestion] = Field(default_factory=list)

class SaveRevisionSessionRequest(BaseModel):
    pseudonym: str
    settings: RevisionSettings = Field(default_factory=RevisionSettings)
    stats: RevisionStats
    duration: int = Field(..., ge=0, le=MAX_SESSION_DURATION)

    @field_validator("pseudonym")
    @classmethod
    def validate_pseudonym(cls, value: str) -> str:
        value = value.strip()
        if not 2 <= len(value) <= 50:
            raise ValueError("Pseudonym must be between 2 and 50 characters")
        if not PSEUDONYM_PATTERN.match(value):
            raise ValueError("Pseudonym may only contain letters, digits, spaces, dashes and underscores")
        return value

class SavedRevisionSession(BaseModel):
    id: str
    pseudonym: str
    stats: RevisionStats
    success_rate: int
    duration: int
    formatted_duration: str
    completed_at: Optional[str]
    settings: RevisionSettings

class RevisionSessionListResponse(BaseModel):
    sessions: List[SavedRevisionSession]
    total: int

class AverageStats(BaseModel):
    total_answers: int
    correct_answers: int
    incorrect_answers: int
    questions_validated: int

class RevisionAverage(BaseModel):
    stats: AverageStats
    success_rate: int
    duration: int
    formatted_duration: str
    session_count: int

class RevisionAverageResponse(BaseModel):
    average: Optional[RevisionAverage]

class CategoryDurationResponse(BaseModel):
    average_duration: Optional[int]
    formatted_duration: Optional[str]
    session_count: int
