"""
Daily streak tracking.

A day counts toward the streak once its DailyTriviaProgress row has a
completion timestamp. The current streak is the run of consecutive completed
days ending today or yesterday; today still being open does not break it.
The best streak is the longest run in the whole history, so it can never go
down while progress rows are kept.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from loguru import logger
from sqlalchemy import func, select

from trivia_engine.core.dates import Clock, local_date_string, local_now, parse_date_string
from trivia_engine.db.database import Database
from trivia_engine.db.models import DailyTriviaProgress


def compute_current_streak(completed: Iterable[date], today: date) -> int:
    """Consecutive completed days ending at ``today`` or ``today - 1``."""
    days = set(completed)
    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_best_streak(completed: Iterable[date]) -> int:
    """Longest run of consecutive completed days."""
    days = sorted(set(completed))
    if not days:
        return 0
    best = current = 1
    for previous, day in zip(days, days[1:]):
        if (day - previous).days == 1:
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


class StreakTracker:
    """Daily progress writes and streak reads."""

    def __init__(self, db: Database, clock: Clock = local_now):
        self.db = db
        self.clock = clock

    def _today(self) -> str:
        return local_date_string(self.clock())

    async def start_daily_progress(self, total_questions: int) -> None:
        """Create today's progress row when a daily game starts; existing rows are kept."""
        table = DailyTriviaProgress.__table__
        stmt = (
            self.db.insert(table)
            .values(date=self._today(), total_questions=total_questions, correct_answers=0, completed_at=None)
            .on_conflict_do_nothing(index_elements=[table.c.date])
        )
        async with self.db.session() as session:
            await session.execute(stmt)

    async def save_daily_progress(self, total_questions: int, correct_answers: int) -> None:
        """
        Mark today's daily trivia as completed.

        A single INSERT .. ON CONFLICT(date) DO UPDATE, so two completions
        racing for the same day cannot create a duplicate row or lose an
        update. The first completion timestamp of a day is kept.

        Raises:
            StorageError: If the upsert fails
        """
        table = DailyTriviaProgress.__table__
        today = self._today()
        stmt = self.db.insert(table).values(
            date=today,
            total_questions=total_questions,
            correct_answers=correct_answers,
            completed_at=self.clock(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.date],
            set_={
                "total_questions": stmt.excluded.total_questions,
                "correct_answers": stmt.excluded.correct_answers,
                "completed_at": func.coalesce(table.c.completed_at, stmt.excluded.completed_at),
            },
        )
        async with self.db.session() as session:
            await session.execute(stmt)
        logger.info("Daily trivia completed for {}: {}/{}", today, correct_answers, total_questions)

    async def get_progress(self, day: date | str) -> DailyTriviaProgress | None:
        key = day if isinstance(day, str) else local_date_string(day)
        async with self.db.session() as session:
            return await session.get(DailyTriviaProgress, key)

    async def get_today_progress(self) -> DailyTriviaProgress | None:
        return await self.get_progress(self._today())

    async def is_daily_trivia_completed(self) -> bool:
        progress = await self.get_today_progress()
        return progress is not None and progress.completed_at is not None

    async def completed_dates(self) -> list[date]:
        async with self.db.session() as session:
            result = await session.execute(
                select(DailyTriviaProgress.date)
                .where(DailyTriviaProgress.completed_at.is_not(None))
                .order_by(DailyTriviaProgress.date)
            )
            return [parse_date_string(value) for value in result.scalars()]

    async def get_daily_streak(self) -> int:
        return compute_current_streak(await self.completed_dates(), self.clock().date())

    async def get_best_streak(self) -> int:
        return compute_best_streak(await self.completed_dates())
