# -*- coding: utf-8 -*-
"""
Сервис выдачи вопросов и записи ответов в активной сессии.
"""

import math
import uuid
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import atomic
from exam_engine.config.logger import configure_logger
from exam_engine.config.settings import settings
from exam_engine.domain.enums import SessionStatus
from exam_engine.domain.lifecycle import ensure_status
from exam_engine.domain.models import Question, StudentResponse
from exam_engine.domain.results import AnswerInput, QuestionPage, QuestionView
from exam_engine.repository.catalog import get_question
from exam_engine.repository.catalog import \
    get_questions_page as fetch_questions_page
from exam_engine.repository.responses import (apply_choice, find_response,
                                              get_chosen_by_question,
                                              insert_response)
from exam_engine.repository.sessions import get_session_by_id
from exam_engine.utils.exceptions import BadRequestError, ConflictError

logger = configure_logger(__name__)


def _validate_option(question: Question, option_index: Optional[int]) -> None:
    if option_index is None:
        return
    if not 0 <= option_index < len(question.options):
        raise BadRequestError(
            f"Индекс варианта {option_index} вне диапазона для вопроса "
            f"{question.id} (вариантов: {len(question.options)})"
        )


class AnswerRecorder:
    """Постраничная выдача вопросов и upsert ответов"""

    @staticmethod
    async def get_questions_page(
        session: AsyncSession,
        session_id: uuid.UUID,
        page: int = 0,
        size: Optional[int] = None,
    ) -> QuestionPage:
        """
        Получить страницу вопросов сессии с уже выбранными вариантами.

        Размер страницы ограничен сверху ``questions_page_size_max``,
        номер страницы ``questions_page_max``.
        Индекс правильного ответа в выдачу не попадает.

        Args:
            session: Сессия базы данных
            session_id: ID экзаменационной сессии
            page: Номер страницы, начиная с 0
            size: Запрошенный размер страницы

        Raises:
            NotFoundError: Если сессия не найдена
            ConflictError: Если сессия не в статусе STARTED
            BadRequestError: Если page или size некорректны
        """
        if size is None:
            size = settings.questions_page_size_default
        if page < 0:
            raise BadRequestError("Номер страницы не может быть отрицательным")
        if page > settings.questions_page_max:
            raise BadRequestError(
                f"Номер страницы не может превышать {settings.questions_page_max}"
            )
        if size < 1:
            raise BadRequestError("Размер страницы должен быть положительным")
        size = min(size, settings.questions_page_size_max)

        exam_session = await get_session_by_id(session, session_id, refresh=True)
        ensure_status(exam_session.status, SessionStatus.STARTED, "получить вопросы")

        questions, total = await fetch_questions_page(
            session, exam_session.exam_id, page, size
        )
        chosen = await get_chosen_by_question(session, session_id)

        total_pages = math.ceil(total / size)
        return QuestionPage(
            questions=[
                QuestionView(
                    id=question.id,
                    subject=question.subject,
                    content=question.content,
                    options=list(question.options),
                    selected_option=chosen.get(question.id),
                )
                for question in questions
            ],
            total_pages=total_pages,
            current_page=page,
            is_last_page=page + 1 >= total_pages,
        )

    @staticmethod
    async def save_answers(
        session: AsyncSession, session_id: uuid.UUID, answers: Sequence[AnswerInput]
    ) -> None:
        """
        Сохранить ответы студента (upsert по паре сессия-вопрос).

        Все ответы одного вызова применяются атомарно: ошибка в любом из
        них откатывает весь вызов.

        Raises:
            NotFoundError: Если сессия не найдена
            ConflictError: Если сессия не в статусе STARTED
            BadRequestError: Если вопрос не найден, не из этого экзамена
                или индекс варианта вне диапазона
        """
        logger.info(f"📝 Сохранение {len(answers)} ответов для сессии {session_id}")

        async with atomic(session):
            exam_session = await get_session_by_id(session, session_id, refresh=True)
            ensure_status(
                exam_session.status, SessionStatus.STARTED, "сохранить ответы"
            )
            exam_id = exam_session.exam_id

            for answer in answers:
                question = await get_question(session, answer.question_id)
                if question is None:
                    raise BadRequestError(
                        f"Некорректный ID вопроса: {answer.question_id}"
                    )
                if question.exam_id != exam_id:
                    raise BadRequestError(
                        f"Вопрос {answer.question_id} не относится к этому экзамену"
                    )
                _validate_option(question, answer.selected_option_index)

                await AnswerRecorder._upsert(
                    session, session_id, question, answer.selected_option_index
                )

        logger.debug(f"Ответы сессии {session_id} сохранены")

    @staticmethod
    async def _upsert(
        session: AsyncSession,
        session_id: uuid.UUID,
        question: Question,
        chosen_index: Optional[int],
    ) -> StudentResponse:
        response = await find_response(session, session_id, question.id)
        if response is not None:
            return apply_choice(response, question, chosen_index)

        try:
            return await insert_response(session, session_id, question, chosen_index)
        except IntegrityError:
            # Параллельная запись успела вставить ответ; повторяем один раз как update
            logger.warning(
                f"⚠️ Конфликт уникальности ответа: сессия {session_id}, "
                f"вопрос {question.id}; повтор как обновление"
            )
            response = await find_response(session, session_id, question.id)
            if response is None:
                raise ConflictError(
                    f"Не удалось сохранить ответ на вопрос {question.id}, повторите запрос"
                )
            return apply_choice(response, question, chosen_index)


__all__ = ["AnswerRecorder"]
