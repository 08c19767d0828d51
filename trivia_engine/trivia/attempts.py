"""
Attempt Recorder.

Appends one QuestionAttempt row per submitted answer. Rows are never updated
or deleted, so every count derived from them only grows. The recorder does no
deduplication: two calls are two attempts.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy import case, func, select

from trivia_engine.catalog import TriviaQuestion
from trivia_engine.core.dates import Clock, local_now
from trivia_engine.core.modes import TriviaMode
from trivia_engine.db.database import Database
from trivia_engine.db.models import QuestionAttempt
from trivia_engine.trivia.answers import is_text_answer_correct


@dataclass(frozen=True)
class AttemptTotals:
    """Answered/correct counts over some slice of the attempt log."""

    answered: int = 0
    correct: int = 0


class AttemptRecorder:
    """Append-only writer and simple aggregate reader for question attempts."""

    def __init__(self, db: Database, clock: Clock = local_now):
        self.db = db
        self.clock = clock

    async def record_answer(
        self,
        question_id: int,
        is_correct: bool,
        mode: TriviaMode | str,
        session_id: int | None = None,
    ) -> int:
        """
        Record an answer to a question.

        Args:
            question_id: Catalog question id
            is_correct: Whether the submitted answer was correct
            mode: Trivia mode the question was served in
            session_id: Owning trivia session, if already known

        Returns:
            Id of the new attempt row

        Raises:
            StorageError: If the insert fails (no retry is attempted)
        """
        trivia_mode = TriviaMode.parse(mode)
        attempt = QuestionAttempt(
            question_id=question_id,
            is_correct=bool(is_correct),
            answered_at=self.clock(),
            trivia_mode=trivia_mode.value,
            trivia_session_id=session_id,
        )
        async with self.db.session() as session:
            session.add(attempt)
            await session.flush()
            attempt_id = attempt.id
        logger.debug(
            "Recorded {} attempt for question {} (correct={})",
            trivia_mode.value,
            question_id,
            is_correct,
        )
        return attempt_id

    async def record_text_answer(
        self,
        question: TriviaQuestion,
        selected_answer: str,
        mode: TriviaMode | str,
        session_id: int | None = None,
    ) -> bool:
        """Score a text answer against the catalog question, record it, return correctness."""
        is_correct = is_text_answer_correct(question, selected_answer)
        await self.record_answer(question.id, is_correct, mode, session_id)
        return is_correct

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def attempt_count(self, question_id: int) -> int:
        async with self.db.session() as session:
            result = await session.execute(
                select(func.count(QuestionAttempt.id)).where(QuestionAttempt.question_id == question_id)
            )
            return result.scalar_one()

    async def attempted_question_ids(self, question_ids: Iterable[int] | None = None) -> set[int]:
        """Ids (optionally restricted to ``question_ids``) with at least one attempt."""
        query = select(QuestionAttempt.question_id).distinct()
        if question_ids is not None:
            ids = list(set(question_ids))
            if not ids:
                return set()
            query = query.where(QuestionAttempt.question_id.in_(ids))
        async with self.db.session() as session:
            result = await session.execute(query)
            return set(result.scalars())

    async def last_attempted_at(self, question_ids: Iterable[int]) -> dict[int, datetime]:
        ids = list(set(question_ids))
        if not ids:
            return {}
        query = (
            select(QuestionAttempt.question_id, func.max(QuestionAttempt.answered_at))
            .where(QuestionAttempt.question_id.in_(ids))
            .group_by(QuestionAttempt.question_id)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return {question_id: answered_at for question_id, answered_at in result.all()}

    async def totals(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        question_ids: Iterable[int] | None = None,
    ) -> AttemptTotals:
        """Answered and correct attempt counts, optionally within [since, until)."""
        query = select(
            func.count(QuestionAttempt.id),
            func.coalesce(func.sum(case((QuestionAttempt.is_correct.is_(True), 1), else_=0)), 0),
        )
        if since is not None:
            query = query.where(QuestionAttempt.answered_at >= since)
        if until is not None:
            query = query.where(QuestionAttempt.answered_at < until)
        if question_ids is not None:
            ids = list(set(question_ids))
            if not ids:
                return AttemptTotals()
            query = query.where(QuestionAttempt.question_id.in_(ids))
        async with self.db.session() as session:
            answered, correct = (await session.execute(query)).one()
        return AttemptTotals(answered=answered or 0, correct=int(correct or 0))

    async def daily_totals(self, since: datetime) -> dict[str, AttemptTotals]:
        """Answered/correct counts grouped by local date (YYYY-MM-DD) since ``since``."""
        day = func.date(QuestionAttempt.answered_at)
        query = (
            select(
                day,
                func.count(QuestionAttempt.id),
                func.coalesce(func.sum(case((QuestionAttempt.is_correct.is_(True), 1), else_=0)), 0),
            )
            .where(QuestionAttempt.answered_at >= since)
            .group_by(day)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return {
                str(row_day): AttemptTotals(answered=answered, correct=int(correct))
                for row_day, answered, correct in result.all()
            }

    async def question_outcomes(self, question_ids: Iterable[int]) -> dict[int, AttemptTotals]:
        """Per-question answered/correct attempt counts for questions with attempts."""
        ids = list(set(question_ids))
        if not ids:
            return {}
        query = (
            select(
                QuestionAttempt.question_id,
                func.count(QuestionAttempt.id),
                func.coalesce(func.sum(case((QuestionAttempt.is_correct.is_(True), 1), else_=0)), 0),
            )
            .where(QuestionAttempt.question_id.in_(ids))
            .group_by(QuestionAttempt.question_id)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return {
                question_id: AttemptTotals(answered=answered, correct=int(correct))
                for question_id, answered, correct in result.all()
            }
