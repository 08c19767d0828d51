# SQLAlchemy models
from .base import Base
from .catalog import Category, Fact, Question
from .progress import DailyTriviaProgress, HintUsage, QuestionAttempt, TriviaSession

__all__ = [
    # Base
    "Base",
    # Catalog (read-only for the engine)
    "Category",
    "Fact",
    "Question",
    # Progress
    "QuestionAttempt",
    "DailyTriviaProgress",
    "TriviaSession",
    "HintUsage",
]
