"""
Explanation hint allowance.

Learners may reveal a question's explanation a limited number of times per
local day (more for premium users). Usage is a per-date counter bumped with
an atomic upsert; a new day simply has no row yet.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import delete

from trivia_engine.core.dates import Clock, local_date_string, local_now
from trivia_engine.db.database import Database
from trivia_engine.db.models import HintUsage


class HintTracker:
    def __init__(self, db: Database, free_limit: int = 1, premium_limit: int = 3, clock: Clock = local_now):
        self.db = db
        self.free_limit = free_limit
        self.premium_limit = premium_limit
        self.clock = clock

    def get_hint_limit(self, is_premium: bool = False) -> int:
        return self.premium_limit if is_premium else self.free_limit

    async def used_today(self) -> int:
        async with self.db.session() as session:
            usage = await session.get(HintUsage, local_date_string(self.clock()))
            return usage.count if usage else 0

    async def remaining_hints(self, is_premium: bool = False) -> int:
        return max(0, self.get_hint_limit(is_premium) - await self.used_today())

    async def can_use_hint(self, is_premium: bool = False) -> bool:
        return await self.remaining_hints(is_premium) > 0

    async def use_hint(self) -> int:
        """Count one hint for today and return today's total."""
        table = HintUsage.__table__
        today = local_date_string(self.clock())
        stmt = self.db.insert(table).values(date=today, count=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.date],
            set_={"count": table.c["count"] + 1},
        )
        async with self.db.session() as session:
            await session.execute(stmt)
            usage = await session.get(HintUsage, today, populate_existing=True)
            used = usage.count if usage else 1
        logger.debug("Explanation hint used ({} today)", used)
        return used

    async def clear(self) -> None:
        """Forget all hint usage (used when the app state is reset)."""
        async with self.db.session() as session:
            await session.execute(delete(HintUsage))
