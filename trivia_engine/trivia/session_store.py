"""
Session Store for finished trivia games.

Each finished game becomes one immutable TriviaSession row. Besides the
scores, the row carries a JSON transcript: a denormalized snapshot of every
question as it was asked plus the answer the learner picked. The results
screen can be rebuilt from the transcript alone, even after questions are
removed from the catalog.

Reads never fail on a bad transcript: an unparseable blob yields an empty
transcript and the scalar fields stay usable. Questions that no longer exist
in the catalog are reported in ``unavailable_question_ids``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import func, select

from trivia_engine.catalog import CategoryInfo, ContentCatalog, TriviaQuestion
from trivia_engine.core.dates import Clock, local_now
from trivia_engine.core.modes import QuestionType, TriviaMode
from trivia_engine.db.database import Database
from trivia_engine.db.models import TriviaSession
from trivia_engine.trivia.answers import accuracy_percent, answer_to_index, is_answer_correct

TRANSCRIPT_VERSION = 1

# =============================================================================
# Transcript schema
# =============================================================================


class QuestionSnapshot(BaseModel):
    """A question exactly as it was asked."""

    id: int
    fact_id: int
    category_slug: str
    locale: str
    question_type: QuestionType
    question_text: str
    correct_answer: str
    wrong_answers: list[str] = Field(default_factory=list)
    explanation: str | None = None
    difficulty: int = 2

    @classmethod
    def from_question(cls, question: TriviaQuestion) -> QuestionSnapshot:
        return cls(
            id=question.id,
            fact_id=question.fact_id,
            category_slug=question.category_slug,
            locale=question.locale,
            question_type=question.question_type,
            question_text=question.question_text,
            correct_answer=question.correct_answer,
            wrong_answers=list(question.wrong_answers),
            explanation=question.explanation,
            difficulty=question.difficulty,
        )

    def to_question(self) -> TriviaQuestion:
        return TriviaQuestion(
            id=self.id,
            fact_id=self.fact_id,
            category_slug=self.category_slug,
            locale=self.locale,
            question_type=self.question_type,
            question_text=self.question_text,
            correct_answer=self.correct_answer,
            wrong_answers=tuple(self.wrong_answers),
            explanation=self.explanation,
            difficulty=self.difficulty,
        )


class StoredAnswer(BaseModel):
    """The learner's pick: answer index (0 = correct answer), correctness and text."""

    index: int
    correct: bool
    text: str | None = None


class SessionTranscript(BaseModel):
    version: int = TRANSCRIPT_VERSION
    questions: list[QuestionSnapshot] = Field(default_factory=list)
    answers: dict[int, StoredAnswer] = Field(default_factory=dict)

    @property
    def question_ids(self) -> list[int]:
        return [q.id for q in self.questions]

    @property
    def is_empty(self) -> bool:
        return not self.questions and not self.answers

    @classmethod
    def build(
        cls,
        questions: Sequence[TriviaQuestion],
        answers: Mapping[int, str],
    ) -> SessionTranscript:
        """Snapshot the questions and convert answer texts to stored answers."""
        stored: dict[int, StoredAnswer] = {}
        for question in questions:
            answer_text = answers.get(question.id)
            if answer_text is None:
                continue
            index = answer_to_index(question, answer_text)
            stored[question.id] = StoredAnswer(
                index=index,
                correct=is_answer_correct(question, index),
                text=answer_text,
            )
        return cls(
            questions=[QuestionSnapshot.from_question(q) for q in questions],
            answers=stored,
        )


def parse_transcript(raw: str | None, session_id: int | None = None) -> SessionTranscript:
    """Parse a stored transcript, falling back to an empty one on any corruption."""
    if not raw:
        return SessionTranscript()
    try:
        return SessionTranscript.model_validate_json(raw)
    except (ValidationError, ValueError) as e:
        logger.warning("Unreadable transcript for session {}: {}", session_id, e)
        return SessionTranscript()


# =============================================================================
# Read model
# =============================================================================


@dataclass
class SessionWithCategory:
    """A finished session joined with category metadata and its replay data."""

    id: int
    trivia_mode: TriviaMode
    category_slug: str | None
    total_questions: int
    correct_answers: int
    elapsed_time: int | None
    best_streak: int | None
    completed_at: datetime
    category: CategoryInfo | None = None
    questions: list[TriviaQuestion] = field(default_factory=list)
    answers: dict[int, StoredAnswer] = field(default_factory=dict)
    unavailable_question_ids: list[int] = field(default_factory=list)

    @property
    def has_result_data(self) -> bool:
        return bool(self.questions) and bool(self.answers)

    @property
    def score_percent(self) -> int:
        return accuracy_percent(self.correct_answers, self.total_questions)

    @property
    def wrong_question_ids(self) -> list[int]:
        return [qid for qid, answer in self.answers.items() if not answer.correct]


# =============================================================================
# Store
# =============================================================================


class SessionStore:
    """Create and read finished trivia sessions."""

    def __init__(self, db: Database, catalog: ContentCatalog, clock: Clock = local_now):
        self.db = db
        self.catalog = catalog
        self.clock = clock

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
        """
        Save a finished game.

        Args:
            mode: Trivia mode the game was played in
            total_questions: Questions in the game
            correct_answers: Correctly answered questions
            category_slug: Category for category games
            elapsed_time: Seconds spent
            best_streak: Longest run of correct answers within the game
            questions: Questions exactly as presented
            answers: Question id -> selected answer text

        Returns:
            New session id

        Raises:
            StorageError: If the insert fails
        """
        trivia_mode = TriviaMode.parse(mode)
        transcript = SessionTranscript.build(questions or [], answers or {})
        row = TriviaSession(
            trivia_mode=trivia_mode.value,
            category_slug=category_slug or None,
            total_questions=total_questions,
            correct_answers=correct_answers,
            elapsed_time=elapsed_time,
            best_streak=best_streak,
            completed_at=self.clock(),
            transcript=transcript.model_dump_json(),
        )
        async with self.db.session() as session:
            session.add(row)
            await session.flush()
            session_id = row.id
        logger.info(
            "Saved {} session {}: {}/{} correct",
            trivia_mode.value,
            session_id,
            correct_answers,
            total_questions,
        )
        return session_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _hydrate(self, rows: Iterable[TriviaSession], locale: str) -> list[SessionWithCategory]:
        rows = list(rows)
        if not rows:
            return []

        transcripts = {row.id: parse_transcript(row.transcript, row.id) for row in rows}
        referenced = {qid for t in transcripts.values() for qid in t.question_ids}
        existing = await self.catalog.existing_question_ids(referenced)

        categories: dict[str, CategoryInfo] = {}
        if any(row.category_slug for row in rows):
            categories = {c.slug: c for c in await self.catalog.list_categories(locale)}

        sessions = []
        for row in rows:
            transcript = transcripts[row.id]
            try:
                mode = TriviaMode.parse(row.trivia_mode)
            except ValueError:
                logger.warning("Session {} has unknown mode {!r}", row.id, row.trivia_mode)
                mode = TriviaMode.MIXED
            sessions.append(
                SessionWithCategory(
                    id=row.id,
                    trivia_mode=mode,
                    category_slug=row.category_slug,
                    total_questions=row.total_questions,
                    correct_answers=row.correct_answers,
                    elapsed_time=row.elapsed_time,
                    best_streak=row.best_streak,
                    completed_at=row.completed_at,
                    category=categories.get(row.category_slug) if row.category_slug else None,
                    questions=[snapshot.to_question() for snapshot in transcript.questions],
                    answers=dict(transcript.answers),
                    unavailable_question_ids=[qid for qid in transcript.question_ids if qid not in existing],
                )
            )
        return sessions

    async def get_session_by_id(self, session_id: int, locale: str = "en") -> SessionWithCategory | None:
        async with self.db.session() as session:
            row = await session.get(TriviaSession, session_id)
        if row is None:
            return None
        hydrated = await self._hydrate([row], locale)
        return hydrated[0]

    async def get_recent_sessions(self, limit: int | None = 10, locale: str = "en") -> list[SessionWithCategory]:
        """Most recent sessions first; ``limit=None`` returns the whole history."""
        query = select(TriviaSession).order_by(TriviaSession.completed_at.desc(), TriviaSession.id.desc())
        if limit is not None:
            query = query.limit(limit)
        async with self.db.session() as session:
            rows = list((await session.execute(query)).scalars())
        return await self._hydrate(rows, locale)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def count_sessions(self, since: datetime | None = None) -> int:
        query = select(func.count(TriviaSession.id))
        if since is not None:
            query = query.where(TriviaSession.completed_at >= since)
        async with self.db.session() as session:
            return (await session.execute(query)).scalar_one()

    async def daily_session_counts(self, since: datetime) -> dict[str, int]:
        """Sessions finished per local date (YYYY-MM-DD) since ``since``."""
        day = func.date(TriviaSession.completed_at)
        query = (
            select(day, func.count(TriviaSession.id))
            .where(TriviaSession.completed_at >= since)
            .group_by(day)
        )
        async with self.db.session() as session:
            return {str(d): n for d, n in (await session.execute(query)).all()}
