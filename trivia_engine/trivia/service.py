"""
Trivia Service.

Provides the operations the app screens call:
- Question selection for daily, mixed and category games
- Answer recording and mastery checks
- Daily progress and streaks
- Session history
- Summary statistics and category progress
- Explanation hint allowance
- Starting a TriviaGame

The service wires the components together from Settings and a Database. It
owns no state of its own beyond them.
"""

from __future__ import annotations

import random
from collections.abc import Collection, Iterable, Mapping, Sequence

from loguru import logger

from trivia_engine.catalog import CategoryInfo, ContentCatalog, FactInfo, SqlContentCatalog, TriviaQuestion
from trivia_engine.config import Settings, get_settings
from trivia_engine.core.dates import Clock, local_now
from trivia_engine.core.errors import MissingCategoryError, StorageError
from trivia_engine.core.mastery import get_mastery_policy
from trivia_engine.core.modes import TriviaMode
from trivia_engine.db.database import Database, get_database
from trivia_engine.db.models import DailyTriviaProgress
from trivia_engine.trivia.answers import estimated_time_minutes, get_shuffled_answers
from trivia_engine.trivia.attempts import AttemptRecorder
from trivia_engine.trivia.game import TriviaGame
from trivia_engine.trivia.hints import HintTracker
from trivia_engine.trivia.mastery_tracker import MasteryProgress, MasteryTracker
from trivia_engine.trivia.selector import QuestionSelector
from trivia_engine.trivia.session_store import SessionStore, SessionWithCategory
from trivia_engine.trivia.stats import CategoryWithProgress, DayActivity, StatsAggregator, TriviaStats
from trivia_engine.trivia.streaks import StreakTracker


class TriviaService:
    """High-level trivia operations for the UI."""

    def __init__(
        self,
        db: Database | None = None,
        settings: Settings | None = None,
        catalog: ContentCatalog | None = None,
        rng: random.Random | None = None,
        clock: Clock = local_now,
    ):
        self.settings = settings or get_settings()
        self.db = db or get_database()
        self.rng = rng or random.Random()
        self.clock = clock

        self.catalog = catalog or SqlContentCatalog(self.db, delivered_only=self.settings.catalog_delivered_only)
        policy = get_mastery_policy(self.settings.mastery_policy, self.settings.mastery_streak_length)

        self.recorder = AttemptRecorder(self.db, clock=clock)
        self.mastery = MasteryTracker(self.db, policy=policy)
        self.streaks = StreakTracker(self.db, clock=clock)
        self.sessions = SessionStore(self.db, self.catalog, clock=clock)
        self.hints = HintTracker(
            self.db,
            free_limit=self.settings.hint_limit_free,
            premium_limit=self.settings.hint_limit_premium,
            clock=clock,
        )
        self.selector = QuestionSelector(
            self.catalog,
            self.recorder,
            self.mastery,
            daily_size=self.settings.daily_questions,
            mixed_size=self.settings.mixed_questions,
            category_size=self.settings.category_questions,
            rng=self.rng,
            clock=clock,
        )
        self.stats = StatsAggregator(
            self.catalog,
            self.recorder,
            self.mastery,
            self.streaks,
            self.sessions,
            session_size=self.settings.daily_questions,
            clock=clock,
        )

    def _locale(self, locale: str | None) -> str:
        return locale or self.settings.default_locale

    # ====== QUESTION SELECTION ======

    async def get_daily_trivia_questions(self, locale: str | None = None) -> list[TriviaQuestion]:
        return await self.selector.daily_questions(self._locale(locale))

    async def get_daily_trivia_questions_count(self, locale: str | None = None) -> int:
        return await self.selector.daily_questions_count(self._locale(locale))

    async def get_mixed_trivia_questions(self, locale: str | None = None) -> list[TriviaQuestion]:
        return await self.selector.mixed_questions(self._locale(locale))

    async def get_mixed_trivia_questions_count(self, locale: str | None = None) -> int:
        return await self.selector.mixed_questions_count(self._locale(locale))

    async def get_category_trivia_questions(
        self,
        category_slug: str,
        locale: str | None = None,
        limit: int | None = None,
    ) -> list[TriviaQuestion]:
        return await self.selector.category_questions(category_slug, self._locale(locale), limit)

    async def get_category_trivia_questions_count(self, category_slug: str, locale: str | None = None) -> int:
        return await self.selector.category_questions_count(category_slug, self._locale(locale))

    def get_shuffled_answers(self, question: TriviaQuestion) -> list[str]:
        """A fresh shuffle; games keep their own fixed order via TriviaGame.answers_for."""
        return get_shuffled_answers(question, self.rng)

    def get_estimated_time_minutes(self, question_count: int) -> int:
        return estimated_time_minutes(question_count, self.settings.time_per_question_seconds)

    # ====== ATTEMPTS & MASTERY ======

    async def record_answer(
        self,
        question_id: int,
        is_correct: bool,
        mode: TriviaMode | str,
        session_id: int | None = None,
    ) -> int:
        return await self.recorder.record_answer(question_id, is_correct, mode, session_id)

    async def is_question_mastered(self, question_id: int) -> bool:
        return await self.mastery.is_mastered(question_id)

    async def get_total_available_questions(self, locale: str | None = None) -> int:
        return len(await self.catalog.all_question_ids(self._locale(locale)))

    async def get_total_mastered_questions(self, locale: str | None = None) -> int:
        ids = await self.catalog.all_question_ids(self._locale(locale))
        return len(await self.mastery.mastered_ids(ids))

    async def get_category_progress(self, category_slug: str, locale: str | None = None) -> MasteryProgress:
        ids = await self.catalog.question_ids_by_category(category_slug, self._locale(locale))
        return await self.mastery.progress(ids)

    async def is_category_complete(self, category_slug: str, locale: str | None = None) -> bool:
        return (await self.get_category_progress(category_slug, locale)).is_complete

    async def get_facts_for_wrong_answers(self, wrong_question_ids: Iterable[int]) -> list[FactInfo]:
        """Facts behind the questions a learner missed, for the post-quiz review list."""
        return await self.catalog.facts_for_questions(wrong_question_ids)

    # ====== DAILY PROGRESS & STREAKS ======

    async def start_daily_progress(self, total_questions: int) -> None:
        await self.streaks.start_daily_progress(total_questions)

    async def save_daily_progress(self, total_questions: int, correct_answers: int) -> None:
        await self.streaks.save_daily_progress(total_questions, correct_answers)

    async def is_daily_trivia_completed(self) -> bool:
        return await self.streaks.is_daily_trivia_completed()

    async def get_today_progress(self) -> DailyTriviaProgress | None:
        return await self.streaks.get_today_progress()

    async def get_daily_streak(self) -> int:
        return await self.streaks.get_daily_streak()

    async def get_best_streak(self) -> int:
        return max(await self.streaks.get_best_streak(), await self.streaks.get_daily_streak())

    # ====== SESSIONS ======

    async def save_session_result(
        self,
        mode: TriviaMode | str,
        total_questions: int,
        correct_answers: int,
        category_slug: str | None = None,
        elapsed_time: int | None = None,
        best_streak: int | None = None,
        questions: Sequence[TriviaQuestion] | None = None,
        answers: Mapping[int, str] | None = None,
    ) -> int:
        return await self.sessions.save_session_result(
            mode,
            total_questions,
            correct_answers,
            category_slug=category_slug,
            elapsed_time=elapsed_time,
            best_streak=best_streak,
            questions=questions,
            answers=answers,
        )

    async def get_session_by_id(self, session_id: int, locale: str | None = None) -> SessionWithCategory | None:
        return await self.sessions.get_session_by_id(session_id, self._locale(locale))

    async def get_recent_sessions(
        self,
        limit: int | None = None,
        locale: str | None = None,
    ) -> list[SessionWithCategory]:
        limit = self.settings.recent_sessions_limit if limit is None else limit
        try:
            return await self.sessions.get_recent_sessions(limit, self._locale(locale))
        except StorageError as e:
            logger.warning("Session history unavailable: {}", e)
            return []

    async def get_all_sessions(self, locale: str | None = None) -> list[SessionWithCategory]:
        """The full session history, newest first."""
        try:
            return await self.sessions.get_recent_sessions(None, self._locale(locale))
        except StorageError as e:
            logger.warning("Session history unavailable: {}", e)
            return []

    # ====== STATS ======

    async def get_overall_stats(self, locale: str | None = None) -> TriviaStats:
        return await self.stats.get_overall_stats(self._locale(locale))

    async def get_categories_with_progress(
        self,
        locale: str | None = None,
        selected_slugs: Collection[str] | None = None,
    ) -> list[CategoryWithProgress]:
        return await self.stats.get_categories_with_progress(self._locale(locale), selected_slugs)

    async def get_daily_activity(self, days: int = 7) -> list[DayActivity]:
        return await self.stats.get_daily_activity(days)

    async def get_category(self, slug: str, locale: str | None = None) -> CategoryInfo | None:
        return await self.catalog.get_category(slug, self._locale(locale))

    # ====== HINTS ======

    def get_hint_limit(self, is_premium: bool = False) -> int:
        return self.hints.get_hint_limit(is_premium)

    async def get_remaining_hints(self, is_premium: bool = False) -> int:
        return await self.hints.remaining_hints(is_premium)

    async def can_use_hint(self, is_premium: bool = False) -> bool:
        return await self.hints.can_use_hint(is_premium)

    async def use_hint(self) -> int:
        return await self.hints.use_hint()

    # ====== GAMES ======

    async def start_game(
        self,
        mode: TriviaMode | str,
        category_slug: str | None = None,
        locale: str | None = None,
    ) -> TriviaGame:
        """
        Select questions for a mode and return a ready TriviaGame.

        Daily games also open today's progress row. The game may hold zero
        questions when the pool is empty; check total_questions first, since
        an empty game cannot be finished.
        """
        trivia_mode = TriviaMode.parse(mode)
        locale = self._locale(locale)
        if trivia_mode is TriviaMode.DAILY:
            questions = await self.selector.daily_questions(locale)
        elif trivia_mode is TriviaMode.MIXED:
            questions = await self.selector.mixed_questions(locale)
        else:
            if not category_slug:
                raise MissingCategoryError()
            questions = await self.selector.category_questions(category_slug, locale)

        game = TriviaGame(
            trivia_mode,
            questions,
            recorder=self.recorder,
            sessions=self.sessions,
            streaks=self.streaks,
            category_slug=category_slug if trivia_mode is TriviaMode.CATEGORY else None,
            rng=random.Random(self.rng.random()),
            clock=self.clock,
        )
        await game.start()
        logger.info("Started {} game with {} questions", trivia_mode.value, game.total_questions)
        return game
