"""
Эндпоинты прохождения экзамена студентом.
"""

from .routes import router

__all__ = ["router"]
