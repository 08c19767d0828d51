"""
Trivia statistics for the summary screens.

Every figure is computed from the attempt log, the daily progress rows and
the session table. These are display-only reads: a failing sub-query is
logged and replaced by zero/empty so one storage hiccup never blanks the
whole screen. Percentages are rounded for display only; the raw ratios are
kept alongside them.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Collection
from dataclasses import dataclass
from datetime import timedelta
from typing import TypeVar

from loguru import logger

from trivia_engine.catalog import CategoryInfo, ContentCatalog
from trivia_engine.core.dates import Clock, day_bounds, local_date_string, local_now, week_start
from trivia_engine.core.errors import StorageError
from trivia_engine.trivia.answers import accuracy_percent, accuracy_ratio
from trivia_engine.trivia.attempts import AttemptRecorder, AttemptTotals
from trivia_engine.trivia.mastery_tracker import MasteryTracker
from trivia_engine.trivia.session_store import SessionStore
from trivia_engine.trivia.streaks import StreakTracker

T = TypeVar("T")


@dataclass(frozen=True)
class TriviaStats:
    """Overall trivia statistics."""

    total_answered: int = 0
    total_correct: int = 0
    accuracy: int = 0
    accuracy_ratio: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    total_mastered: int = 0
    tests_taken: int = 0
    tests_this_week: int = 0
    answered_this_week: int = 0
    mastered_today: int = 0
    correct_today: int = 0


@dataclass(frozen=True)
class CategoryWithProgress:
    """A category with mastery and accuracy figures."""

    category: CategoryInfo
    mastered: int
    total: int
    answered: int
    correct: int

    @property
    def slug(self) -> str:
        return self.category.slug

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def accuracy_ratio(self) -> float:
        return accuracy_ratio(self.correct, self.answered)

    @property
    def accuracy(self) -> int:
        return accuracy_percent(self.correct, self.answered)

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.mastered >= self.total


@dataclass(frozen=True)
class DayActivity:
    """Answers and finished sessions on one local date."""

    date: str
    answered: int
    correct: int
    sessions: int

    @property
    def accuracy(self) -> int:
        return accuracy_percent(self.correct, self.answered)


class StatsAggregator:
    """Compose attempts, mastery, streaks and sessions into summary views."""

    def __init__(
        self,
        catalog: ContentCatalog,
        recorder: AttemptRecorder,
        mastery: MasteryTracker,
        streaks: StreakTracker,
        sessions: SessionStore,
        session_size: int = 10,
        clock: Clock = local_now,
    ):
        self.catalog = catalog
        self.recorder = recorder
        self.mastery = mastery
        self.streaks = streaks
        self.sessions = sessions
        self.session_size = session_size
        self.clock = clock

    @staticmethod
    async def _safe(awaitable: Awaitable[T], default: T, label: str) -> T:
        try:
            return await awaitable
        except StorageError as e:
            logger.warning("Stats query '{}' failed, using default: {}", label, e)
            return default

    async def _mastered_in_locale(self, locale: str) -> int:
        ids = await self.catalog.all_question_ids(locale)
        return len(await self.mastery.mastered_ids(ids))

    async def _mastered_today(self, locale: str) -> int:
        ids = await self.catalog.all_question_ids(locale)
        return len(await self.mastery.mastered_on(self.clock().date(), ids))

    async def get_overall_stats(self, locale: str) -> TriviaStats:
        """
        Overall statistics.

        tests_taken is the exact number of saved sessions; if that count
        cannot be read it falls back to ceil(total_answered / session_size).
        """
        now = self.clock()
        today_start, today_end = day_bounds(now.date())
        monday_start, _ = day_bounds(week_start(now.date()))

        (
            totals,
            today_totals,
            week_totals,
            current_streak,
            best_streak,
            total_mastered,
            mastered_today,
            session_count,
            tests_this_week,
        ) = await asyncio.gather(
            self._safe(self.recorder.totals(), AttemptTotals(), "totals"),
            self._safe(self.recorder.totals(since=today_start, until=today_end), AttemptTotals(), "today"),
            self._safe(self.recorder.totals(since=monday_start), AttemptTotals(), "week"),
            self._safe(self.streaks.get_daily_streak(), 0, "current_streak"),
            self._safe(self.streaks.get_best_streak(), 0, "best_streak"),
            self._safe(self._mastered_in_locale(locale), 0, "total_mastered"),
            self._safe(self._mastered_today(locale), 0, "mastered_today"),
            self._safe(self.sessions.count_sessions(), None, "tests_taken"),
            self._safe(self.sessions.count_sessions(since=monday_start), 0, "tests_this_week"),
        )

        if session_count is None:
            session_count = math.ceil(totals.answered / self.session_size) if self.session_size > 0 else 0

        return TriviaStats(
            total_answered=totals.answered,
            total_correct=totals.correct,
            accuracy=accuracy_percent(totals.correct, totals.answered),
            accuracy_ratio=accuracy_ratio(totals.correct, totals.answered),
            # The best run always includes the current one
            current_streak=current_streak,
            best_streak=max(best_streak, current_streak),
            total_mastered=total_mastered,
            tests_taken=session_count,
            tests_this_week=tests_this_week,
            answered_this_week=week_totals.answered,
            mastered_today=mastered_today,
            correct_today=today_totals.correct,
        )

    async def get_categories_with_progress(
        self,
        locale: str,
        selected_slugs: Collection[str] | None = None,
    ) -> list[CategoryWithProgress]:
        """
        Categories that have questions, with their progress.

        Args:
            locale: Content locale
            selected_slugs: Restrict to the user's selected categories

        Returns:
            Categories ordered by name; answered/correct count distinct questions
        """
        try:
            categories = await self.catalog.list_categories(locale)
            grouped = await self.catalog.question_ids_grouped_by_category(locale)
            all_ids = [qid for ids in grouped.values() for qid in ids]
            mastered = await self.mastery.mastered_ids(all_ids)
            outcomes = await self.recorder.question_outcomes(all_ids)
        except StorageError as e:
            logger.warning("Category progress unavailable: {}", e)
            return []

        results = []
        for category in categories:
            if selected_slugs is not None and category.slug not in selected_slugs:
                continue
            ids = grouped.get(category.slug, [])
            if not ids:
                continue
            answered = [qid for qid in ids if qid in outcomes]
            results.append(
                CategoryWithProgress(
                    category=category,
                    mastered=sum(1 for qid in ids if qid in mastered),
                    total=len(ids),
                    answered=len(answered),
                    correct=sum(1 for qid in answered if outcomes[qid].correct > 0),
                )
            )
        return results

    async def get_daily_activity(self, days: int = 7) -> list[DayActivity]:
        """Per-day answers and sessions for the last ``days`` local days, oldest first."""
        today = self.clock().date()
        first_day = today - timedelta(days=days - 1)
        since, _ = day_bounds(first_day)
        attempts, session_counts = await asyncio.gather(
            self._safe(self.recorder.daily_totals(since), {}, "daily_totals"),
            self._safe(self.sessions.daily_session_counts(since), {}, "daily_sessions"),
        )
        activity = []
        for offset in range(days):
            key = local_date_string(first_day + timedelta(days=offset))
            totals = attempts.get(key, AttemptTotals())
            activity.append(
                DayActivity(
                    date=key,
                    answered=totals.answered,
                    correct=totals.correct,
                    sessions=session_counts.get(key, 0),
                )
            )
        return activity
