"""
Mastery Tracker.

Answers "is this question mastered?" by replaying each question's attempt
history through the configured mastery policy. Nothing is cached between
calls; the attempt log is the only source of truth.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select

from trivia_engine.core.mastery import MasteryPolicy, most_recent_correct
from trivia_engine.db.database import Database
from trivia_engine.db.models import QuestionAttempt


@dataclass(frozen=True)
class MasteryProgress:
    """Mastered vs total for a set of questions (usually one category)."""

    mastered: int
    total: int

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.mastered >= self.total


class MasteryTracker:
    """Derive per-question mastery from the attempt log."""

    def __init__(self, db: Database, policy: MasteryPolicy = most_recent_correct):
        self.db = db
        self.policy = policy

    async def _load_histories(
        self, question_ids: Iterable[int] | None = None
    ) -> dict[int, list[tuple[bool, datetime]]]:
        """Attempt history per question, most recent first."""
        query = select(
            QuestionAttempt.question_id,
            QuestionAttempt.is_correct,
            QuestionAttempt.answered_at,
        )
        if question_ids is not None:
            ids = list(set(question_ids))
            if not ids:
                return {}
            query = query.where(QuestionAttempt.question_id.in_(ids))
        query = query.order_by(
            QuestionAttempt.question_id,
            QuestionAttempt.answered_at.desc(),
            QuestionAttempt.id.desc(),
        )

        histories: dict[int, list[tuple[bool, datetime]]] = defaultdict(list)
        async with self.db.session() as session:
            result = await session.execute(query)
            for question_id, is_correct, answered_at in result.all():
                histories[question_id].append((bool(is_correct), answered_at))
        return dict(histories)

    def _is_mastered(self, history: list[tuple[bool, datetime]]) -> bool:
        return self.policy([correct for correct, _ in history])

    async def history(self, question_id: int) -> list[bool]:
        """Correctness history for one question, most recent first."""
        histories = await self._load_histories([question_id])
        return [correct for correct, _ in histories.get(question_id, [])]

    async def is_mastered(self, question_id: int) -> bool:
        histories = await self._load_histories([question_id])
        return self._is_mastered(histories.get(question_id, []))

    async def mastered_ids(self, question_ids: Iterable[int] | None = None) -> set[int]:
        """Subset of ``question_ids`` (or of every attempted question) currently mastered."""
        histories = await self._load_histories(question_ids)
        return {qid for qid, history in histories.items() if self._is_mastered(history)}

    async def progress(self, question_ids: Iterable[int]) -> MasteryProgress:
        ids = set(question_ids)
        mastered = await self.mastered_ids(ids)
        return MasteryProgress(mastered=len(mastered & ids), total=len(ids))

    async def mastered_on(self, day: date, question_ids: Iterable[int] | None = None) -> set[int]:
        """Questions currently mastered whose latest attempt happened on ``day``."""
        histories = await self._load_histories(question_ids)
        return {
            qid
            for qid, history in histories.items()
            if history and history[0][1].date() == day and self._is_mastered(history)
        }
