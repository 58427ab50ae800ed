from app.models.question import Category, Question, question_categories
from app.models.revision import RevisionSession

__all__ = [
    "Category", "Question", "question_categories",
    "RevisionSession",
]
