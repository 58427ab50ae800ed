# ============================================================================
# Revision Session Models
# ============================================================================
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy import JSON, Uuid
from sqlalchemy.sql import func
import uuid
from app.core.database import Base

class RevisionSession(Base):
    """Summary of a finished revision session. In-flight state never lands here."""
    __tablename__ = "revision_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    pseudonym = Column(String(50), nullable=False, index=True)
    mode = Column(String(20), nullable=False, default="revision")

    # Category ids (as strings) the trainee filtered on
    selected_categories = Column(JSON, nullable=False, default=list)

    total_answers = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    incorrect_answers = Column(Integer, nullable=False, default=0)
    questions_validated = Column(Integer, nullable=False, default=0)
    duration_seconds = Column(Integer, nullable=False)

    completed_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def success_rate(self) -> int:
        from app.services.revision.session_stats import calculate_success_rate
        return calculate_success_rate(self.correct_answers, self.total_answers)

    def __repr__(self):
        return f"<RevisionSession {self.id} ({self.pseudonym})>"
