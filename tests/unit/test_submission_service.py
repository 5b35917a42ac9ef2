# -*- coding: utf-8 -*-
"""
Unit тесты для SubmissionCoordinator
"""

import uuid

import pytest

from exam_engine.domain.enums import SessionStatus
from exam_engine.domain.results import AnswerInput
from exam_engine.repository.sessions import get_session_by_id, transition_status
from exam_engine.service.answer_recorder import AnswerRecorder
from exam_engine.service.scoring import ScoringEngine
from exam_engine.service.submission import SubmissionCoordinator
from exam_engine.utils.exceptions import ConflictError, NotFoundError
from tests.fixtures import create_exam_setup, create_test_session


class TestSubmit:
    """Тесты отправки экзамена"""

    @pytest.mark.asyncio
    async def test_submit_counts_answered_questions(self, test_session):
        """Отправка считает отвеченные и неотвеченные вопросы"""
        # Arrange
        student, exam, questions = await create_exam_setup(test_session)
        exam_session = await create_test_session(test_session, exam.id, student.id)
        await AnswerRecorder.save_answers(
            test_session,
            exam_session.id,
            [
                AnswerInput(question_id=questions[0].id, selected_option_index=0),
                AnswerInput(question_id=questions[1].id, selected_option_index=2),
                AnswerInput(question_id=questions[2].id, selected_option_index=None),
            ],
        )

        # Act
        summary = await SubmissionCoordinator.submit(test_session, exam_session.id)

        # Assert
        assert summary.answered_count == 2
        assert summary.total_count == 4
        assert summary.unanswered_count == 2
        stored = await get_session_by_id(test_session, exam_session.id, refresh=True)
        assert stored.status == SessionStatus.SUBMITTED
        assert stored.submit_time is not None
        assert stored.submit_time >= stored.start_time

    @pytest.mark.asyncio
    async def test_submit_without_answers(self, test_session):
        """Отправка без ответов: все вопросы неотвечены"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        exam_session = await create_test_session(test_session, exam.id, student.id)

        # Act
        summary = await SubmissionCoordinator.submit(test_session, exam_session.id)

        # Assert
        assert summary.answered_count == 0
        assert summary.unanswered_count == summary.total_count == 4

    @pytest.mark.asyncio
    async def test_double_submit_conflicts_and_result_stays_available(
        self, test_session
    ):
        """Повторная отправка - Conflict, результат по-прежнему считается"""
        # Arrange
        student, exam, questions = await create_exam_setup(test_session)
        exam_session = await create_test_session(test_session, exam.id, student.id)
        session_id = exam_session.id
        await AnswerRecorder.save_answers(
            test_session,
            session_id,
            [AnswerInput(question_id=questions[0].id, selected_option_index=0)],
        )
        await SubmissionCoordinator.submit(test_session, session_id)

        # Act & Assert
        with pytest.raises(ConflictError):
            await SubmissionCoordinator.submit(test_session, session_id)

        result = await ScoringEngine.calculate_result(test_session, session_id)
        assert result.total_correct == 1
        assert result.total_questions == 1
        stored = await get_session_by_id(test_session, session_id, refresh=True)
        assert stored.status == SessionStatus.SUBMITTED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status", [SessionStatus.EXPIRED, SessionStatus.COMPLETED]
    )
    async def test_submit_terminal_session(self, test_session, status):
        """Отправка истекшей или завершенной сессии - Conflict"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        exam_session = await create_test_session(
            test_session, exam.id, student.id, status=status
        )
        session_id = exam_session.id

        # Act & Assert
        with pytest.raises(ConflictError):
            await SubmissionCoordinator.submit(test_session, session_id)
        stored = await get_session_by_id(test_session, session_id, refresh=True)
        assert stored.status == status
        assert stored.submit_time is None

    @pytest.mark.asyncio
    async def test_submit_unknown_session(self, test_session):
        """Несуществующая сессия - NotFound"""
        with pytest.raises(NotFoundError):
            await SubmissionCoordinator.submit(test_session, uuid.uuid4())


class TestConditionalTransition:
    """Тесты условного перехода статуса"""

    @pytest.mark.asyncio
    async def test_transition_applies_only_from_expected_status(self, test_session):
        """Переход из неожиданного статуса не меняет строку"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        exam_session = await create_test_session(
            test_session, exam.id, student.id, status=SessionStatus.EXPIRED
        )

        # Act
        changed = await transition_status(
            test_session,
            exam_session.id,
            SessionStatus.STARTED,
            SessionStatus.SUBMITTED,
        )
        await test_session.commit()

        # Assert
        assert changed is False
        stored = await get_session_by_id(test_session, exam_session.id, refresh=True)
        assert stored.status == SessionStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_sweep_loses_to_submit(self, test_session):
        """Если отправка зафиксирована первой, истечение сессию не трогает"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        exam_session = await create_test_session(test_session, exam.id, student.id)
        await SubmissionCoordinator.submit(test_session, exam_session.id)

        # Act
        changed = await transition_status(
            test_session,
            exam_session.id,
            SessionStatus.STARTED,
            SessionStatus.EXPIRED,
        )
        await test_session.commit()

        # Assert
        assert changed is False
        stored = await get_session_by_id(test_session, exam_session.id, refresh=True)
        assert stored.status == SessionStatus.SUBMITTED
