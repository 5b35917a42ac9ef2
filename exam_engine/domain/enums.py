# -*- coding: utf-8 -*-
"""
exam_engine/domain/enums.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Определение классов перечислений для домена экзаменов.
"""

import enum


class Subject(str, enum.Enum):
    """Предметы, по которым сегментируется подсчет баллов.

    Новый предмет добавляется новым значением перечисления; подсчет
    результата учитывает все значения автоматически.
    """

    MATH = "MATH"
    ENGLISH = "ENGLISH"


class SessionStatus(str, enum.Enum):
    """Статусы жизненного цикла экзаменационной сессии."""

    STARTED = "STARTED"  # Сессия начата, принимает ответы
    SUBMITTED = "SUBMITTED"  # Ответы отправлены, ждет завершения
    COMPLETED = "COMPLETED"  # Завершена, результат доступен
    EXPIRED = "EXPIRED"  # Брошена и помечена как истекшая

