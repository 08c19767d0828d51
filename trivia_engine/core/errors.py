"""
Exception hierarchy for the trivia engine.

Everything raised on purpose by the engine derives from TriviaError so the UI
layer can choose to ignore failures on non-critical (display) paths.
"""

from __future__ import annotations


class TriviaError(Exception):
    """Base class for trivia engine errors."""


class StorageError(TriviaError):
    """A read or write against the persistent store failed."""


class InvalidModeError(TriviaError, ValueError):
    """Unknown trivia mode."""

    def __init__(self, mode: object):
        super().__init__(f"Unknown trivia mode: {mode!r}")
        self.mode = mode


class UnknownMasteryPolicyError(TriviaError, ValueError):
    """Requested mastery policy is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown mastery policy: {name!r}")
        self.name = name


class QuestionNotInGameError(TriviaError, KeyError):
    """An answer was submitted for a question that is not part of the game."""

    def __init__(self, question_id: int):
        super().__init__(question_id)
        self.question_id = question_id

    def __str__(self) -> str:
        return f"Question {self.question_id} is not part of this game"


class MissingCategoryError(TriviaError, ValueError):
    """Category trivia was requested without a category."""

    def __init__(self):
        super().__init__("category_slug is required for category trivia")


class EmptyGameError(TriviaError, ValueError):
    """A game without questions cannot be finished."""

    def __init__(self, mode: str):
        super().__init__(f"No questions were played in this {mode} game")
        self.mode = mode
