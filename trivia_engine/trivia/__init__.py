"""
Trivia Module - Spaced-practice trivia on top of the content catalog.

Components:
- selector: Question selection for daily, mixed and category games
- attempts / mastery_tracker: Append-only attempt log and derived mastery
- streaks: Daily progress and streaks
- session_store: Finished sessions with replayable transcripts
- stats: Summary statistics
- hints: Daily explanation-hint allowance
- game: Per-game controller
- service: Facade used by the UI
"""

from trivia_engine.trivia.answers import (
    AnswerShuffle,
    answer_to_index,
    estimated_time_minutes,
    format_accuracy,
    get_shuffled_answers,
    get_streak_display,
    index_to_answer,
    is_answer_correct,
    is_text_answer_correct,
)
from trivia_engine.trivia.attempts import AttemptRecorder, AttemptTotals
from trivia_engine.trivia.game import AnswerOutcome, TriviaGame
from trivia_engine.trivia.hints import HintTracker
from trivia_engine.trivia.mastery_tracker import MasteryProgress, MasteryTracker
from trivia_engine.trivia.selector import QuestionSelector
from trivia_engine.trivia.service import TriviaService
from trivia_engine.trivia.session_store import SessionStore, SessionTranscript, SessionWithCategory
from trivia_engine.trivia.stats import CategoryWithProgress, DayActivity, StatsAggregator, TriviaStats
from trivia_engine.trivia.streaks import StreakTracker

__all__ = [
    # Answers
    "AnswerShuffle",
    "answer_to_index",
    "estimated_time_minutes",
    "format_accuracy",
    "get_shuffled_answers",
    "get_streak_display",
    "index_to_answer",
    "is_answer_correct",
    "is_text_answer_correct",
    # Components
    "AttemptRecorder",
    "AttemptTotals",
    "HintTracker",
    "MasteryProgress",
    "MasteryTracker",
    "QuestionSelector",
    "SessionStore",
    "SessionTranscript",
    "SessionWithCategory",
    "StatsAggregator",
    "StreakTracker",
    # Views
    "CategoryWithProgress",
    "DayActivity",
    "TriviaStats",
    # Game
    "AnswerOutcome",
    "TriviaGame",
    "TriviaService",
]
