"""
Core Module - Shared domain types for the trivia engine.

Components:
- errors: Exception hierarchy (TriviaError, StorageError, ...)
- modes: TriviaMode and QuestionType enums
- mastery: Swappable mastery policies
- dates: Local calendar helpers
"""

from trivia_engine.core.errors import (
    EmptyGameError,
    InvalidModeError,
    MissingCategoryError,
    QuestionNotInGameError,
    StorageError,
    TriviaError,
    UnknownMasteryPolicyError,
)
from trivia_engine.core.mastery import (
    MASTERY_POLICIES,
    MasteryPolicy,
    consecutive_correct,
    ever_correct,
    get_mastery_policy,
    most_recent_correct,
)
from trivia_engine.core.modes import TRUE_FALSE_ANSWERS, QuestionType, TriviaMode

__all__ = [
    # Errors
    "TriviaError",
    "StorageError",
    "InvalidModeError",
    "UnknownMasteryPolicyError",
    "QuestionNotInGameError",
    "MissingCategoryError",
    "EmptyGameError",
    # Modes
    "TriviaMode",
    "QuestionType",
    "TRUE_FALSE_ANSWERS",
    # Mastery
    "MasteryPolicy",
    "MASTERY_POLICIES",
    "get_mastery_policy",
    "most_recent_correct",
    "ever_correct",
    "consecutive_correct",
]
