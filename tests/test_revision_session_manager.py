# ============================================================================
# Revision Session Manager Tests
# ============================================================================
import asyncio
import pytest
import random
from uuid import uuid4
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from app.core.exceptions import (
    CorrectAnswerLookupFailed,
    EmptyQuestionSet,
    EmptySelection,
    QuestionAlreadyMastered,
    QuestionNotFound,
    QuestionNotPresented,
    RevisionSessionBusy,
    RevisionSessionNotFound,
    UnknownQuestion,
)
from app.services.revision import RevisionSessionManager


@pytest.fixture
def question_ids():
    return [str(uuid4()), str(uuid4())]


@pytest.fixture
def correct_answers(question_ids):
    return {question_ids[0]: ["A"], question_ids[1]: ["A", "C"]}


@pytest.fixture
def repository(question_ids, correct_answers, make_question_payload):
    repo = MagicMock()
    repo.fetch_revision_questions = AsyncMock(
        return_value=[make_question_payload(qid, f"Question {i}") for i, qid in enumerate(question_ids)]
    )

    async def _lookup(question_id):
        return list(correct_answers[str(question_id)])

    repo.get_correct_answers = AsyncMock(side_effect=_lookup)
    return repo


@pytest.fixture
def manager(repository, session_store, clock):
    return RevisionSessionManager(repository, session_store, rng=random.Random(7), clock=clock)


async def answer_current(manager, session_id, correct_answers, right=True):
    revision, question = await manager.current_question(session_id)
    labels = correct_answers[question["id"]] if right else ["B"]
    return await manager.submit_answer(session_id, question["id"], labels)


class TestStartSession:
    """Tests for starting a revision"""

    @pytest.mark.asyncio
    async def test_start_stores_state_and_presents_question(self, manager, session_store, question_ids):
        """Starting parks the state and presents an unmastered question"""
        revision, first = await manager.start_session([])

        assert first["id"] in question_ids
        assert revision.current_question_id == first["id"]
        assert revision.state.total_questions == 2

        stored = await session_store.load(revision.session_id)
        assert stored.current_question_id == first["id"]
        assert stored.state.total_answers == 0

    @pytest.mark.asyncio
    async def test_start_records_selected_categories(self, manager, repository):
        """Category filter is passed to the repository and recorded"""
        category_id = uuid4()

        revision, _ = await manager.start_session([category_id])

        repository.fetch_revision_questions.assert_awaited_once_with([category_id])
        assert revision.selected_categories == [str(category_id)]

    @pytest.mark.asyncio
    async def test_empty_question_set_propagates(self, manager, repository, mock_redis_client):
        """Nothing is stored when no question matches"""
        repository.fetch_revision_questions.side_effect = EmptyQuestionSet()

        with pytest.raises(EmptyQuestionSet):
            await manager.start_session([uuid4()])

        assert mock_redis_client.data == {}


class TestSubmitAnswer:
    """Tests for answer submission through the manager"""

    @pytest.mark.asyncio
    async def test_correct_answer_updates_state(self, manager, session_store, correct_answers):
        """A correct answer raises the streak and is persisted"""
        revision, first = await manager.start_session([])

        response = await manager.submit_answer(
            revision.session_id, first["id"], correct_answers[first["id"]]
        )

        assert response["is_correct"] is True
        assert response["question_state"]["correct_streak"] == 1
        assert response["stats"] == {"total_answers": 1, "correct_answers": 1, "incorrect_answers": 0}
        assert response["next_question"] is not None
        assert response["progress"]["validated_questions"] == 0

        stored = await session_store.load(revision.session_id)
        assert stored.state.records[first["id"]].correct_streak == 1
        assert stored.current_question_id == response["next_question"]["id"]

    @pytest.mark.asyncio
    async def test_correct_answers_fetched_on_every_validation(self, manager, repository, correct_answers):
        """Correct answers are looked up fresh for each validation"""
        revision, _ = await manager.start_session([])

        await answer_current(manager, revision.session_id, correct_answers)
        await answer_current(manager, revision.session_id, correct_answers, right=False)

        assert repository.get_correct_answers.await_count == 2

    @pytest.mark.asyncio
    async def test_full_session_reaches_completion(self, manager, correct_answers):
        """Answering every question right twice completes the session"""
        revision, _ = await manager.start_session([])

        responses = []
        for _ in range(4):
            responses.append(await answer_current(manager, revision.session_id, correct_answers))

        assert responses[-1]["session_complete"] is True
        assert responses[-1]["next_question"] is None
        assert all(not r["session_complete"] for r in responses[:-1])

        _, question = await manager.current_question(revision.session_id)
        assert question is None

    @pytest.mark.asyncio
    async def test_empty_selection_rejected(self, manager, repository):
        """Empty selection fails before the answer lookup"""
        revision, first = await manager.start_session([])

        with pytest.raises(EmptySelection):
            await manager.submit_answer(revision.session_id, first["id"], [])

        repository.get_correct_answers.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_question_rejected(self, manager):
        """Question outside the session is rejected"""
        revision, _ = await manager.start_session([])

        with pytest.raises(UnknownQuestion):
            await manager.submit_answer(revision.session_id, str(uuid4()), ["A"])

    @pytest.mark.asyncio
    async def test_question_not_on_screen_rejected(self, manager, question_ids):
        """Only the presented question may be answered"""
        revision, first = await manager.start_session([])
        other = next(qid for qid in question_ids if qid != first["id"])

        with pytest.raises(QuestionNotPresented):
            await manager.submit_answer(revision.session_id, other, ["A"])

    @pytest.mark.asyncio
    async def test_mastered_question_rejected(self, manager, session_store, correct_answers):
        """A mastered question cannot be answered again"""
        revision, _ = await manager.start_session([])
        stored = await session_store.load(revision.session_id)
        qid = stored.current_question_id
        stored.state.records[qid].record_correct()
        stored.state.records[qid].record_correct()
        await session_store.save(stored)

        with pytest.raises(QuestionAlreadyMastered):
            await manager.submit_answer(revision.session_id, qid, correct_answers[qid])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", [
        OperationalError("SELECT", {}, Exception("connection lost")),
        QuestionNotFound("gone"),
    ])
    async def test_lookup_failure_leaves_state_untouched(self, manager, repository, session_store, failure):
        """Lookup failure surfaces as 503 and changes nothing"""
        revision, first = await manager.start_session([])
        repository.get_correct_answers.side_effect = failure

        with pytest.raises(CorrectAnswerLookupFailed) as exc:
            await manager.submit_answer(revision.session_id, first["id"], ["A"])

        assert exc.value.status_code == 503
        stored = await session_store.load(revision.session_id)
        assert stored.state.total_answers == 0
        assert stored.state.records[first["id"]].last_outcome is None
        assert stored.current_question_id == first["id"]

    @pytest.mark.asyncio
    async def test_lookup_retry_after_failure(self, manager, repository, correct_answers):
        """The same answer can be resubmitted after a lookup failure"""
        revision, first = await manager.start_session([])
        original = repository.get_correct_answers.side_effect
        repository.get_correct_answers.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

        with pytest.raises(CorrectAnswerLookupFailed):
            await manager.submit_answer(revision.session_id, first["id"], correct_answers[first["id"]])

        repository.get_correct_answers.side_effect = original
        response = await manager.submit_answer(revision.session_id, first["id"], correct_answers[first["id"]])

        assert response["is_correct"] is True
        assert response["stats"]["total_answers"] == 1

    @pytest.mark.asyncio
    async def test_missing_correct_answers_is_a_lookup_failure(self, manager, repository):
        """A question without correct answers cannot be validated"""
        revision, first = await manager.start_session([])
        repository.get_correct_answers.side_effect = None
        repository.get_correct_answers.return_value = []

        with pytest.raises(CorrectAnswerLookupFailed):
            await manager.submit_answer(revision.session_id, first["id"], ["A"])

    @pytest.mark.asyncio
    async def test_answer_rejected_while_session_locked(self, manager, repository, session_store, mock_redis_client):
        """A second validation on a locked session is refused without side effects"""
        revision, first = await manager.start_session([])
        mock_redis_client.data[f"revision:{revision.session_id}:lock"] = "1"

        with pytest.raises(RevisionSessionBusy) as exc:
            await manager.submit_answer(revision.session_id, first["id"], ["A"])

        assert exc.value.status_code == 409
        repository.get_correct_answers.assert_not_awaited()
        stored = await session_store.load(revision.session_id)
        assert stored.state.total_answers == 0

    @pytest.mark.asyncio
    async def test_lock_released_after_rejected_answer(self, manager, mock_redis_client, correct_answers):
        """Validation errors do not leave the session locked"""
        revision, first = await manager.start_session([])

        with pytest.raises(EmptySelection):
            await manager.submit_answer(revision.session_id, first["id"], [])

        assert f"revision:{revision.session_id}:lock" not in mock_redis_client.data
        response = await manager.submit_answer(revision.session_id, first["id"], correct_answers[first["id"]])
        assert response["stats"]["total_answers"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_answers_do_not_overwrite_each_other(self, manager, repository, session_store, correct_answers):
        """Two racing answers: one is recorded, the other is refused"""
        revision, first = await manager.start_session([])

        async def _slow_lookup(question_id):
            await asyncio.sleep(0.01)
            return list(correct_answers[str(question_id)])

        repository.get_correct_answers.side_effect = _slow_lookup
        labels = correct_answers[first["id"]]

        results = await asyncio.gather(
            manager.submit_answer(revision.session_id, first["id"], labels),
            manager.submit_answer(revision.session_id, first["id"], labels),
            return_exceptions=True,
        )

        assert sum(isinstance(r, dict) for r in results) == 1
        assert sum(isinstance(r, RevisionSessionBusy) for r in results) == 1
        stored = await session_store.load(revision.session_id)
        assert stored.state.total_answers == 1

    @pytest.mark.asyncio
    async def test_unknown_session(self, manager):
        """Answering an expired session fails"""
        with pytest.raises(RevisionSessionNotFound):
            await manager.submit_answer("missing", str(uuid4()), ["A"])


class TestFinishSession:
    """Tests for summaries and exits"""

    @pytest.mark.asyncio
    async def test_finish_after_completion(self, manager, session_store, clock, correct_answers):
        """Summary of a completed session and state cleanup"""
        revision, _ = await manager.start_session([])
        await answer_current(manager, revision.session_id, correct_answers, right=False)
        for _ in range(4):
            clock.advance(20)
            await answer_current(manager, revision.session_id, correct_answers)

        _, summary = await manager.finish_session(revision.session_id)

        assert summary.completed is True
        assert summary.total_answers == 5
        assert summary.correct_answers == 4
        assert summary.incorrect_answers == 1
        assert summary.questions_validated == 2
        assert summary.success_rate == 80
        assert summary.duration_seconds == 80
        assert summary.formatted_duration == "1m 20s"
        assert summary.average_time_per_question == 40

        with pytest.raises(RevisionSessionNotFound):
            await session_store.load(revision.session_id)

    @pytest.mark.asyncio
    async def test_early_exit_summary(self, manager, clock, correct_answers):
        """Summary of a session exited before completion"""
        revision, _ = await manager.start_session([])
        await answer_current(manager, revision.session_id, correct_answers)
        clock.advance(7)

        _, summary = await manager.finish_session(revision.session_id)

        assert summary.completed is False
        assert summary.questions_validated == 0
        assert summary.success_rate == 100
        assert summary.formatted_duration == "7s"

    @pytest.mark.asyncio
    async def test_abandon_discards_state(self, manager, session_store):
        """Abandoning drops the in-flight state"""
        revision, _ = await manager.start_session([])

        await manager.abandon_session(revision.session_id)

        with pytest.raises(RevisionSessionNotFound):
            await session_store.load(revision.session_id)

    @pytest.mark.asyncio
    async def test_early_exit_lists_questions_needing_work(self, manager, correct_answers):
        """Unmastered questions are listed weakest first on exit"""
        revision, _ = await manager.start_session([])
        answered = await answer_current(manager, revision.session_id, correct_answers)

        _, summary = await manager.finish_session(revision.session_id)

        pending = summary.questions_needing_work
        assert [p["correct_streak"] for p in pending] == [0, 1]
        assert pending[1]["question_id"] == answered["question_id"]
        assert pending[1]["title"].startswith("Question ")

    @pytest.mark.asyncio
    async def test_completed_session_has_nothing_pending(self, manager, correct_answers):
        """A completed session leaves no question to revise"""
        revision, _ = await manager.start_session([])
        for _ in range(4):
            await answer_current(manager, revision.session_id, correct_answers)

        _, summary = await manager.finish_session(revision.session_id)

        assert summary.questions_needing_work == []
