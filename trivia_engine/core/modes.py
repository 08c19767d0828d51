"""
Trivia modes and question types.

The mode decides which selection policy feeds a game and is stored with every
attempt and session so history can be filtered per mode.
"""

from __future__ import annotations

from enum import Enum

from trivia_engine.core.errors import InvalidModeError


class TriviaMode(str, Enum):
    """Selection policy a quiz was started with."""

    DAILY = "daily"  # Questions from facts shown today
    MIXED = "mixed"  # Unanswered questions across all categories
    CATEGORY = "category"  # Unmastered questions of one category

    @classmethod
    def parse(cls, value: TriviaMode | str) -> TriviaMode:
        """Coerce a raw string to a mode, raising InvalidModeError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidModeError(value) from None

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return {
            TriviaMode.DAILY: "Daily Trivia",
            TriviaMode.MIXED: "Mixed Trivia",
            TriviaMode.CATEGORY: "Category Trivia",
        }[self]


class QuestionType(str, Enum):
    """Question formats offered by the catalog."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"


TRUE_FALSE_ANSWERS: tuple[str, str] = ("True", "False")
