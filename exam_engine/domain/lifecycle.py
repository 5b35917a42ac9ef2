# -*- coding: utf-8 -*-
"""
Машина состояний экзаменационной сессии.

STARTED -> SUBMITTED -> COMPLETED
STARTED -> EXPIRED
COMPLETED и EXPIRED - терминальные.
"""

from typing import Dict, FrozenSet, List

from exam_engine.domain.enums import SessionStatus
from exam_engine.utils.exceptions import ConflictError

ALLOWED_TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.STARTED: frozenset(
        {SessionStatus.SUBMITTED, SessionStatus.EXPIRED}
    ),
    SessionStatus.SUBMITTED: frozenset({SessionStatus.COMPLETED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.EXPIRED: frozenset(),
}

_CONFLICT_MESSAGES = {
    SessionStatus.SUBMITTED: "Сессия уже отправлена или не начата",
    SessionStatus.COMPLETED: "Перед завершением сессия должна быть отправлена",
    SessionStatus.EXPIRED: "Истечь может только начатая сессия",
}


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """Допустим ли переход из ``current`` в ``target``."""
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(status: SessionStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def allowed_sources(target: SessionStatus) -> List[SessionStatus]:
    """Статусы, из которых разрешен переход в ``target``."""
    return [
        source
        for source, targets in ALLOWED_TRANSITIONS.items()
        if target in targets
    ]


def ensure_transition(current: SessionStatus, target: SessionStatus) -> None:
    """
    Проверить допустимость перехода.

    Raises:
        ConflictError: Если переход запрещен
    """
    if not can_transition(current, target):
        message = _CONFLICT_MESSAGES.get(target, "Недопустимый переход статуса")
        required = ", ".join(s.value for s in allowed_sources(target)) or "-"
        raise ConflictError(
            f"{message} (текущий статус: {current.value}, требуемый: {required})"
        )


def ensure_status(current: SessionStatus, required: SessionStatus, action: str) -> None:
    """
    Проверить, что сессия находится в нужном статусе для действия.

    Raises:
        ConflictError: Если статус другой
    """
    if current != required:
        raise ConflictError(
            f"Нельзя {action}: сессия в статусе {current.value}, "
            f"требуется {required.value}"
        )
