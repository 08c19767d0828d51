"""
Progress tables written by the trivia engine.

- QuestionAttempt: append-only answer log (the source of mastery and accuracy)
- DailyTriviaProgress: one row per local date, upserted atomically
- TriviaSession: immutable transcript of a finished quiz
- HintUsage: explanation hints used per local date

question_id columns carry no foreign key; history outlives questions removed
from the catalog.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class QuestionAttempt(Base):
    __tablename__ = "question_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    trivia_mode: Mapped[str] = mapped_column(Text, nullable=False)
    trivia_session_id: Mapped[int | None] = mapped_column(Integer)

    __table_args__ = (
        Index("idx_attempts_question_id", "question_id"),
        Index("idx_attempts_answered_at", "answered_at"),
    )

    def __repr__(self) -> str:
        return f"<QuestionAttempt(question={self.question_id}, correct={self.is_correct})>"


class DailyTriviaProgress(Base):
    __tablename__ = "daily_progress"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)  # YYYY-MM-DD local
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        return f"<DailyTriviaProgress(date={self.date}, completed={self.is_completed})>"


class TriviaSession(Base):
    __tablename__ = "trivia_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trivia_mode: Mapped[str] = mapped_column(Text, nullable=False)
    category_slug: Mapped[str | None] = mapped_column(Text)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False)
    elapsed_time: Mapped[int | None] = mapped_column(Integer)  # seconds
    best_streak: Mapped[int | None] = mapped_column(Integer)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # JSON snapshot of questions + chosen answers, see trivia.session_store
    transcript: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("idx_sessions_completed_at", "completed_at"),)

    def __repr__(self) -> str:
        return f"<TriviaSession(id={self.id}, mode={self.trivia_mode}, {self.correct_answers}/{self.total_questions})>"


class HintUsage(Base):
    __tablename__ = "hint_usage"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
