"""
Question Selection for trivia games.

Three policies, all scoped to one locale:
- Daily: questions whose fact was shown today (local day)
- Mixed: questions with no attempt yet, across every category
- Category: unmastered questions of one category

Every policy caps the game at its configured size and has a count-only
variant that sizes the eligible pool without loading full question records.
An empty pool is not an error; callers check the length before starting.
"""

from __future__ import annotations

import random
from datetime import datetime

from loguru import logger

from trivia_engine.catalog import ContentCatalog, TriviaQuestion
from trivia_engine.core.dates import Clock, local_now
from trivia_engine.trivia.attempts import AttemptRecorder
from trivia_engine.trivia.mastery_tracker import MasteryTracker

DEFAULT_SESSION_SIZE = 10


class QuestionSelector:
    """
    Select questions for daily, mixed and category games.

    Category games prefer questions never attempted, then the ones attempted
    longest ago, so back-to-back sessions on one category draw a fresh slice
    of the unmastered pool whenever the pool is large enough.
    """

    def __init__(
        self,
        catalog: ContentCatalog,
        recorder: AttemptRecorder,
        mastery: MasteryTracker,
        daily_size: int = DEFAULT_SESSION_SIZE,
        mixed_size: int = DEFAULT_SESSION_SIZE,
        category_size: int = DEFAULT_SESSION_SIZE,
        rng: random.Random | None = None,
        clock: Clock = local_now,
    ):
        self.catalog = catalog
        self.recorder = recorder
        self.mastery = mastery
        self.daily_size = daily_size
        self.mixed_size = mixed_size
        self.category_size = category_size
        self.rng = rng or random.Random()
        self.clock = clock

    # ====== DAILY ======

    async def daily_questions(self, locale: str) -> list[TriviaQuestion]:
        """Up to ``daily_size`` random questions from facts shown today."""
        pool = await self.catalog.questions_shown_on(self.clock().date(), locale)
        self.rng.shuffle(pool)
        selected = pool[: self.daily_size]
        logger.debug("Daily pool for {}: {} questions, selected {}", locale, len(pool), len(selected))
        return selected

    async def daily_questions_count(self, locale: str) -> int:
        return await self.catalog.count_questions_shown_on(self.clock().date(), locale)

    # ====== MIXED ======

    async def _unanswered_ids(self, locale: str) -> list[int]:
        ids = await self.catalog.all_question_ids(locale)
        attempted = await self.recorder.attempted_question_ids(ids)
        return [qid for qid in ids if qid not in attempted]

    async def mixed_questions(self, locale: str) -> list[TriviaQuestion]:
        """Up to ``mixed_size`` random never-answered questions from any category."""
        pool = await self._unanswered_ids(locale)
        picked = self.rng.sample(pool, min(self.mixed_size, len(pool)))
        logger.debug("Mixed pool for {}: {} unanswered, selected {}", locale, len(pool), len(picked))
        return await self.catalog.questions_by_ids(picked)

    async def mixed_questions_count(self, locale: str) -> int:
        return len(await self._unanswered_ids(locale))

    # ====== CATEGORY ======

    async def _unmastered_ids(self, category_slug: str, locale: str) -> list[int]:
        ids = await self.catalog.question_ids_by_category(category_slug, locale)
        mastered = await self.mastery.mastered_ids(ids)
        return [qid for qid in ids if qid not in mastered]

    async def category_questions(
        self,
        category_slug: str,
        locale: str,
        limit: int | None = None,
    ) -> list[TriviaQuestion]:
        """
        Unmastered questions of one category for a new session.

        Args:
            category_slug: Category to draw from
            locale: Content locale
            limit: Session size (defaults to ``category_size``)

        Returns:
            At most ``limit`` questions, none of them currently mastered
        """
        limit = self.category_size if limit is None else limit
        pool = await self._unmastered_ids(category_slug, locale)
        if not pool or limit <= 0:
            return []

        last_seen = await self.recorder.last_attempted_at(pool)
        # Random tiebreak keeps equal-priority questions from always surfacing in id order
        ranked = sorted(
            pool,
            key=lambda qid: (qid in last_seen, last_seen.get(qid, datetime.min), self.rng.random()),
        )
        picked = ranked[:limit]
        self.rng.shuffle(picked)
        logger.debug(
            "Category {} ({}): {} unmastered, selected {}",
            category_slug,
            locale,
            len(pool),
            len(picked),
        )
        return await self.catalog.questions_by_ids(picked)

    async def category_questions_count(self, category_slug: str, locale: str) -> int:
        return len(await self._unmastered_ids(category_slug, locale))
