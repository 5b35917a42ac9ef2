# -*- coding: utf-8 -*-
"""
Integration тесты для API прохождения экзамена
"""

import uuid

import pytest
from httpx import AsyncClient

from exam_engine.domain.enums import SessionStatus
from tests.fixtures import (create_exam_setup, create_test_session,
                            create_test_student)


async def start_exam(client: AsyncClient, student_id, exam_id) -> dict:
    response = await client.post(
        "/api/v1/exams/start",
        json={"student_id": str(student_id), "exam_id": exam_id},
    )
    assert response.status_code == 200
    return response.json()


class TestExamFlowAPI:
    """Полный сценарий: старт, ответы, отправка, завершение, результат"""

    @pytest.mark.asyncio
    async def test_full_exam_flow(self, client: AsyncClient, test_session):
        """Сквозной сценарий по примеру 2 + 2 вопроса"""
        # Arrange
        student, exam, questions = await create_exam_setup(test_session)

        # Act: старт
        handle = await start_exam(client, student.id, exam.id)
        session_id = handle["session_id"]
        assert handle["duration_seconds"] == 3600
        assert handle["is_existing"] is False

        # Act: вопросы
        response = await client.get(
            f"/api/v1/exams/{session_id}/questions", params={"page": 0, "size": 2}
        )
        assert response.status_code == 200
        page = response.json()
        assert page["total_pages"] == 2
        assert page["is_last_page"] is False
        assert "correct_index" not in page["questions"][0]

        # Act: ответы
        response = await client.put(
            f"/api/v1/exams/{session_id}/answers",
            json=[
                {"question_id": questions[0].id, "selected_option_index": 0},
                {"question_id": questions[1].id, "selected_option_index": 0},
                {"question_id": questions[2].id, "selected_option_index": 2},
                {"question_id": questions[3].id, "selected_option_index": None},
            ],
        )
        assert response.status_code == 204

        # Act: отправка
        response = await client.post(f"/api/v1/exams/{session_id}/submit")
        assert response.status_code == 200
        assert response.json() == {
            "answered_count": 3,
            "total_count": 4,
            "unanswered_count": 1,
        }

        # Act: завершение
        response = await client.post(f"/api/v1/exams/{session_id}/finish")
        assert response.status_code == 200
        assert response.json() == {"report_url": f"/api/v1/reports/{session_id}"}

        # Assert: результат
        response = await client.get(f"/api/v1/exams/{session_id}/result")
        assert response.status_code == 200
        result = response.json()
        assert result["math_correct"] == 1
        assert result["math_total"] == 2
        assert result["math_percentage"] == 50.0
        assert result["english_correct"] == 1
        assert result["english_total"] == 2
        assert result["english_percentage"] == 50.0
        assert result["total_correct"] == 2
        assert result["total_questions"] == 4
        assert result["total_percentage"] == 50.0
        assert result["completed_at"]
        assert {s["subject"] for s in result["subjects"]} == {"MATH", "ENGLISH"}

        # Assert: статус
        response = await client.get(f"/api/v1/exams/{session_id}")
        assert response.status_code == 200
        assert response.json()["status"] == SessionStatus.COMPLETED.value
        assert response.json()["is_terminal"] is True

    @pytest.mark.asyncio
    async def test_start_twice_returns_same_session(self, client: AsyncClient, test_session):
        """Повторный старт возвращает ту же сессию"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)

        # Act
        first = await start_exam(client, student.id, exam.id)
        second = await start_exam(client, student.id, exam.id)

        # Assert
        assert second["session_id"] == first["session_id"]
        assert second["is_existing"] is True

    @pytest.mark.asyncio
    async def test_list_exams(self, client: AsyncClient, test_session):
        """Список экзаменов"""
        # Arrange
        _, exam, _ = await create_exam_setup(test_session)

        # Act
        response = await client.get("/api/v1/exams")

        # Assert
        assert response.status_code == 200
        assert response.json() == [
            {"id": exam.id, "title": exam.title, "time_limit_seconds": 3600}
        ]


class TestExamErrorsAPI:
    """Коды ошибок API"""

    @pytest.mark.asyncio
    async def test_start_unknown_exam(self, client: AsyncClient, test_session):
        """Несуществующий экзамен - 404"""
        # Arrange
        student = await create_test_student(test_session)
        student_id = student.id

        # Act
        response = await client.post(
            "/api/v1/exams/start", json={"student_id": str(student_id), "exam_id": 404}
        )

        # Assert
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_start_without_exam_id(self, client: AsyncClient, test_session):
        """Старт без ID экзамена - 400"""
        # Arrange
        student = await create_test_student(test_session)
        student_id = student.id

        # Act
        response = await client.post(
            "/api/v1/exams/start", json={"student_id": str(student_id)}
        )

        # Assert
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_session(self, client: AsyncClient):
        """Несуществующая сессия - 404"""
        response = await client.get(f"/api/v1/exams/{uuid.uuid4()}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_double_submit(self, client: AsyncClient, test_session):
        """Повторная отправка - 409"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        handle = await start_exam(client, student.id, exam.id)
        session_id = handle["session_id"]
        first = await client.post(f"/api/v1/exams/{session_id}/submit")

        # Act
        second = await client.post(f"/api/v1/exams/{session_id}/submit")

        # Assert
        assert first.status_code == 200
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_finish_before_submit(self, client: AsyncClient, test_session):
        """Завершение без отправки - 409"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        handle = await start_exam(client, student.id, exam.id)

        # Act
        response = await client.post(f"/api/v1/exams/{handle['session_id']}/finish")

        # Assert
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_double_finish_recovers_report_url(
        self, client: AsyncClient, test_session
    ):
        """Повторное завершение - 409, адрес отчета доступен отдельно"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        handle = await start_exam(client, student.id, exam.id)
        session_id = handle["session_id"]
        await client.post(f"/api/v1/exams/{session_id}/submit")
        first = await client.post(f"/api/v1/exams/{session_id}/finish")

        # Act
        second = await client.post(f"/api/v1/exams/{session_id}/finish")
        locator = await client.get(f"/api/v1/exams/{session_id}/report-url")

        # Assert
        assert first.status_code == 200
        assert second.status_code == 409
        assert "SUBMITTED" in second.json()["detail"]
        assert locator.status_code == 200
        assert locator.json() == first.json()
        assert locator.json() == {"report_url": f"/api/v1/reports/{session_id}"}

    @pytest.mark.asyncio
    async def test_report_url_before_finish(self, client: AsyncClient, test_session):
        """Адрес отчета незавершенной сессии - 409"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        handle = await start_exam(client, student.id, exam.id)
        session_id = handle["session_id"]
        await client.post(f"/api/v1/exams/{session_id}/submit")

        # Act
        response = await client.get(f"/api/v1/exams/{session_id}/report-url")

        # Assert
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_questions_page_out_of_bounds(self, client: AsyncClient, test_session):
        """Слишком большой номер страницы - 400"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        handle = await start_exam(client, student.id, exam.id)

        # Act
        response = await client.get(
            f"/api/v1/exams/{handle['session_id']}/questions",
            params={"page": 2**62, "size": 20},
        )

        # Assert
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_answer_out_of_range(self, client: AsyncClient, test_session):
        """Индекс варианта вне диапазона - 400"""
        # Arrange
        student, exam, questions = await create_exam_setup(test_session)
        question_id = questions[0].id
        handle = await start_exam(client, student.id, exam.id)

        # Act
        response = await client.put(
            f"/api/v1/exams/{handle['session_id']}/answers",
            json=[{"question_id": question_id, "selected_option_index": 7}],
        )

        # Assert
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_questions_of_expired_session(self, client: AsyncClient, test_session):
        """Вопросы истекшей сессии - 409"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        exam_session = await create_test_session(
            test_session, exam.id, student.id, status=SessionStatus.EXPIRED
        )

        # Act
        response = await client.get(f"/api/v1/exams/{exam_session.id}/questions")

        # Assert
        assert response.status_code == 409


class TestReportsAndHistoryAPI:
    """Отчеты и история студента"""

    @pytest.mark.asyncio
    async def test_report_and_history_after_finish(self, client: AsyncClient, test_session):
        """После завершения доступны отчет и запись в истории"""
        # Arrange
        student, exam, questions = await create_exam_setup(test_session)
        student_id = student.id
        handle = await start_exam(client, student_id, exam.id)
        session_id = handle["session_id"]
        await client.put(
            f"/api/v1/exams/{session_id}/answers",
            json=[{"question_id": questions[0].id, "selected_option_index": 0}],
        )
        await client.post(f"/api/v1/exams/{session_id}/submit")
        await client.post(f"/api/v1/exams/{session_id}/finish")

        # Act
        report = await client.get(f"/api/v1/reports/{session_id}")
        history = await client.get(f"/api/v1/students/{student_id}/history")

        # Assert
        assert report.status_code == 200
        assert report.json()["student_name"] == "Ivan Petrov"
        assert report.json()["result"]["total_correct"] == 1
        assert history.status_code == 200
        entries = history.json()
        assert len(entries) == 1
        assert entries[0]["session_id"] == session_id
        assert entries[0]["score"] == 1
        assert entries[0]["report_url"] == f"/api/v1/reports/{session_id}"

    @pytest.mark.asyncio
    async def test_report_before_finish(self, client: AsyncClient, test_session):
        """Отчет незавершенной сессии - 409"""
        # Arrange
        student, exam, _ = await create_exam_setup(test_session)
        handle = await start_exam(client, student.id, exam.id)

        # Act
        response = await client.get(f"/api/v1/reports/{handle['session_id']}")

        # Assert
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_history_unknown_student(self, client: AsyncClient):
        """История несуществующего студента - 404"""
        response = await client.get(f"/api/v1/students/{uuid.uuid4()}/history")
        assert response.status_code == 404
