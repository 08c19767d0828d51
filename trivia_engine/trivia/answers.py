"""
Answer presentation and scoring helpers.

Stored answers use an index convention shared by the live game and the
history screens:
- multiple choice: 0 = correct answer, 1..n = wrong_answers[0..n-1]
- true/false: 0 = "True", 1 = "False"
"""

from __future__ import annotations

import math
import random

from trivia_engine.catalog import TriviaQuestion
from trivia_engine.core.modes import TRUE_FALSE_ANSWERS


def get_shuffled_answers(question: TriviaQuestion, rng: random.Random | None = None) -> list[str]:
    """
    Get all answer options for a question.

    True/false questions always return ["True", "False"] in that order.
    Multiple choice returns the correct answer plus the wrong answers in a
    uniformly random order (Fisher-Yates).
    """
    if question.is_true_false:
        return list(TRUE_FALSE_ANSWERS)

    rng = rng or random
    answers = [question.correct_answer, *question.wrong_answers]
    for i in range(len(answers) - 1, 0, -1):
        j = rng.randint(0, i)
        answers[i], answers[j] = answers[j], answers[i]
    return answers


class AnswerShuffle:
    """
    Fixed answer order per question for one game.

    The first request for a question shuffles its answers; later requests
    (navigating back and forward) return the same order.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._orders: dict[int, list[str]] = {}

    def answers_for(self, question: TriviaQuestion) -> list[str]:
        if question.id not in self._orders:
            self._orders[question.id] = get_shuffled_answers(question, self._rng)
        return list(self._orders[question.id])

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._orders

    def __len__(self) -> int:
        return len(self._orders)


# ====== ANSWER INDEX HELPERS ======


def answer_to_index(question: TriviaQuestion, selected_answer: str) -> int:
    """Convert a selected answer text to its storage index (unknown text maps to 0)."""
    if question.is_true_false:
        return 0 if selected_answer.strip().lower() == "true" else 1

    if selected_answer == question.correct_answer:
        return 0
    try:
        return question.wrong_answers.index(selected_answer) + 1
    except ValueError:
        return 0


def index_to_answer(question: TriviaQuestion, index: int) -> str:
    """Convert a stored answer index back to the answer text."""
    if question.is_true_false:
        return TRUE_FALSE_ANSWERS[0] if index == 0 else TRUE_FALSE_ANSWERS[1]

    if index == 0:
        return question.correct_answer
    if 1 <= index <= len(question.wrong_answers):
        return question.wrong_answers[index - 1]
    return question.correct_answer


def is_answer_correct(question: TriviaQuestion, answer_index: int) -> bool:
    """Check whether a stored answer index is the correct one."""
    if question.is_true_false:
        correct_is_true = question.correct_answer.strip().lower() == "true"
        return answer_index == (0 if correct_is_true else 1)
    return answer_index == 0


def is_text_answer_correct(question: TriviaQuestion, selected_answer: str) -> bool:
    """
    Check a text answer.

    True/false compares case-insensitively; multiple choice requires an exact
    match against the correct answer text.
    """
    if question.is_true_false:
        return selected_answer.strip().lower() == question.correct_answer.strip().lower()
    return selected_answer == question.correct_answer


# ====== DISPLAY HELPERS ======


def accuracy_ratio(correct: int, answered: int) -> float:
    """Raw 0..1 ratio; 0 when nothing was answered."""
    if answered <= 0:
        return 0.0
    return correct / answered


def accuracy_percent(correct: int, answered: int) -> int:
    """Accuracy rounded to the nearest whole percent for display."""
    # Half-up rounding, matching what the screens show (Python's round() is banker's)
    return int(math.floor(accuracy_ratio(correct, answered) * 100 + 0.5))


def format_accuracy(total_answered: int, total_correct: int) -> str:
    return f"{accuracy_percent(total_correct, total_answered)}%"


def get_streak_display(streak: int) -> str:
    if streak <= 0:
        return ""
    return f"\N{FIRE} {streak}"


def estimated_time_minutes(question_count: int, seconds_per_question: int = 45) -> int:
    """Estimated quiz duration, rounded up to whole minutes."""
    return math.ceil(question_count * seconds_per_question / 60)
