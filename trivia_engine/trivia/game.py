"""
Trivia game controller.

Owns the state of one game in progress: the question list, the learner's
position, the fixed answer order of every question shown so far, the answers
given and the in-session streak. finish() writes the session transcript,
then records every answer through the AttemptRecorder under the new session
id and, for daily games, today's progress. An abandoned game records nothing.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from trivia_engine.catalog import TriviaQuestion
from trivia_engine.core.dates import Clock, local_now
from trivia_engine.core.errors import EmptyGameError, QuestionNotInGameError
from trivia_engine.core.modes import TriviaMode
from trivia_engine.trivia.answers import AnswerShuffle, is_text_answer_correct
from trivia_engine.trivia.attempts import AttemptRecorder
from trivia_engine.trivia.session_store import SessionStore
from trivia_engine.trivia.streaks import StreakTracker


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of answering one question."""

    question_id: int
    selected_answer: str
    correct_answer: str
    is_correct: bool
    explanation: str | None = None


class TriviaGame:
    """One trivia game from first question to saved session."""

    def __init__(
        self,
        mode: TriviaMode | str,
        questions: Sequence[TriviaQuestion],
        recorder: AttemptRecorder,
        sessions: SessionStore,
        streaks: StreakTracker,
        category_slug: str | None = None,
        rng: random.Random | None = None,
        clock: Clock = local_now,
    ):
        self.mode = TriviaMode.parse(mode)
        self.questions = list(questions)
        self.category_slug = category_slug
        self.recorder = recorder
        self.sessions = sessions
        self.streaks = streaks
        self.clock = clock

        self._by_id = {q.id: q for q in self.questions}
        self._shuffle = AnswerShuffle(rng)
        self._outcomes: dict[int, AnswerOutcome] = {}
        self._index = 0
        self._run = 0
        self.best_streak = 0
        self.started_at: datetime = clock()
        self.session_id: int | None = None
        self._daily_saved = False
        self._recorded: set[int] = set()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> TriviaQuestion | None:
        if not self.questions:
            return None
        return self.questions[self._index]

    def go_to(self, index: int) -> TriviaQuestion:
        if not 0 <= index < len(self.questions):
            raise IndexError(f"Question index {index} out of range")
        self._index = index
        return self.questions[index]

    def next(self) -> TriviaQuestion | None:
        if self._index + 1 >= len(self.questions):
            return None
        return self.go_to(self._index + 1)

    def previous(self) -> TriviaQuestion | None:
        if self._index == 0:
            return None
        return self.go_to(self._index - 1)

    def answers_for(self, question: TriviaQuestion | int) -> list[str]:
        """Answer options in this game's fixed order."""
        question_id = question if isinstance(question, int) else question.id
        return self._shuffle.answers_for(self._question(question_id))

    def _question(self, question_id: int) -> TriviaQuestion:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise QuestionNotInGameError(question_id) from None

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open today's daily progress row when a daily game begins."""
        if self.mode is TriviaMode.DAILY and self.questions:
            await self.streaks.start_daily_progress(self.total_questions)

    async def submit_answer(self, question_id: int, selected_answer: str) -> AnswerOutcome:
        """
        Answer a question.

        A question is scored once per game; answering it again returns the
        first outcome. The attempt is recorded when the game finishes.
        """
        question = self._question(question_id)
        if question_id in self._outcomes:
            return self._outcomes[question_id]

        is_correct = is_text_answer_correct(question, selected_answer)

        outcome = AnswerOutcome(
            question_id=question_id,
            selected_answer=selected_answer,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            explanation=question.explanation,
        )
        self._outcomes[question_id] = outcome
        self._run = self._run + 1 if is_correct else 0
        self.best_streak = max(self.best_streak, self._run)
        return outcome

    def outcome_for(self, question_id: int) -> AnswerOutcome | None:
        return self._outcomes.get(question_id)

    @property
    def answered_count(self) -> int:
        return len(self._outcomes)

    @property
    def correct_count(self) -> int:
        return sum(1 for outcome in self._outcomes.values() if outcome.is_correct)

    @property
    def is_complete(self) -> bool:
        return bool(self.questions) and len(self._outcomes) == len(self.questions)

    @property
    def answers(self) -> dict[int, str]:
        return {qid: outcome.selected_answer for qid, outcome in self._outcomes.items()}

    @property
    def wrong_question_ids(self) -> list[int]:
        return [q.id for q in self.questions if q.id in self._outcomes and not self._outcomes[q.id].is_correct]

    def elapsed_seconds(self) -> int:
        return max(0, int((self.clock() - self.started_at).total_seconds()))

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def finish(self, elapsed_time: int | None = None) -> int:
        """
        Save the finished game and return its session id.

        Safe to call again after a failure: the session is inserted once,
        each answer is recorded once and only the remaining writes are retried.

        Raises:
            EmptyGameError: If the game has no questions
            StorageError: If a write fails
        """
        if not self.questions:
            raise EmptyGameError(self.mode.value)

        if self.session_id is None:
            self.session_id = await self.sessions.save_session_result(
                mode=self.mode,
                total_questions=self.total_questions,
                correct_answers=self.correct_count,
                category_slug=self.category_slug,
                elapsed_time=self.elapsed_seconds() if elapsed_time is None else elapsed_time,
                best_streak=self.best_streak,
                questions=self.questions,
                answers=self.answers,
            )
        for question in self.questions:
            outcome = self._outcomes.get(question.id)
            if outcome is None or question.id in self._recorded:
                continue
            await self.recorder.record_answer(question.id, outcome.is_correct, self.mode, self.session_id)
            self._recorded.add(question.id)
        if self.mode is TriviaMode.DAILY and not self._daily_saved:
            await self.streaks.save_daily_progress(self.total_questions, self.correct_count)
            self._daily_saved = True
        logger.debug("Game finished as session {}", self.session_id)
        return self.session_id
