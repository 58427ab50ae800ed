# ============================================================================
# Question Bank Models
# ============================================================================
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Table
from sqlalchemy import Text, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.core.database import Base


question_categories = Table(
    "question_categories",
    Base.metadata,
    Column("question_id", Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    icon = Column(String(50))  # lucide icon name
    category_type = Column(String(50))  # e.g. "signalling", "safety"
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    questions = relationship("Question", secondary=question_categories, back_populates="categories")

    def __repr__(self):
        return f"<Category {self.name}>"

class Question(Base):
    __tablename__ = "questions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    illustration = Column(String(500))  # image reference

    # [{"id": "A", "type": "text", "text": "...", "image": null}, ...]
    answers = Column(JSON, nullable=False, default=list)
    correct_answers = Column(JSON, nullable=False, default=list)  # ["A", "C"]

    version = Column(Integer, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    categories = relationship("Category", secondary=question_categories, back_populates="questions")

    @property
    def has_multiple_correct_answers(self) -> bool:
        return len(self.correct_answers or []) > 1

    def __repr__(self):
        return f"<Question {self.id} ({len(self.answers or [])} answers)>"
