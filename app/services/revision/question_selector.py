# ============================================================================
# Revision Question Selection
# ============================================================================
from typing import Any, Optional, Sequence, TypeVar
import random

from app.core.exceptions import UnknownQuestion
from app.services.revision.state import SessionState, question_key

Q = TypeVar("Q")

_default_rng = random.Random()


class RevisionQuestionSelector:
    """
    Uniform random draw over the unmastered questions.

    Every call is an independent draw: a question answered correctly once
    may come straight back. Returns None only once everything is mastered.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or _default_rng

    def select_next(self, questions: Sequence[Q], state: SessionState) -> Optional[Q]:
        if state.is_complete:
            return None

        by_key = {question_key(q): q for q in questions}
        candidates = []
        for qid in state.unmastered_ids():
            if qid not in by_key:
                # Every unmastered record must stay drawable
                raise UnknownQuestion(qid)
            candidates.append(by_key[qid])

        return self.rng.choice(candidates)


def select_next_question(
    questions: Sequence[Any],
    state: SessionState,
    rng: Optional[random.Random] = None,
) -> Optional[Any]:
    return RevisionQuestionSelector(rng).select_next(questions, state)
