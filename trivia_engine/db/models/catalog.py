"""
Content catalog tables.

These tables belong to the content pipeline of the host application; the
trivia engine only ever reads them:
- Category: display metadata per locale
- Fact: a piece of content shown in the feed (owns questions)
- Question: a multiple-choice or true/false question about a fact

wrong_answers is stored as a JSON array string, empty or NULL for true/false.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(Text)
    color_hex: Mapped[str | None] = mapped_column(Text)
    locale: Mapped[str] = mapped_column(Text, nullable=False, default="en")

    __table_args__ = (UniqueConstraint("slug", "locale", name="uq_category_slug_locale"),)

    def __repr__(self) -> str:
        return f"<Category(slug={self.slug}, locale={self.locale})>"


class Fact(Base):
    __tablename__ = "facts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str | None] = mapped_column(Text)
    summary: Mapped[str | None] = mapped_column(Text)
    source_url: Mapped[str | None] = mapped_column(Text)
    category_slug: Mapped[str] = mapped_column(Text, nullable=False)
    locale: Mapped[str] = mapped_column(Text, nullable=False, default="en")

    # Local wall-clock time the fact was delivered to the feed (NULL = not yet shown)
    shown_at: Mapped[datetime | None] = mapped_column(DateTime)

    questions: Mapped[list[Question]] = relationship(
        back_populates="fact", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_facts_category_locale", "category_slug", "locale"),
        Index("idx_facts_shown_at", "shown_at"),
    )

    def __repr__(self) -> str:
        return f"<Fact(id={self.id}, category={self.category_slug})>"


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    fact_id: Mapped[int] = mapped_column(
        ForeignKey("facts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_type: Mapped[str] = mapped_column(Text, nullable=False)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    wrong_answers: Mapped[str | None] = mapped_column(Text)
    explanation: Mapped[str | None] = mapped_column(Text)
    difficulty: Mapped[int] = mapped_column(Integer, default=2)

    fact: Mapped[Fact] = relationship(back_populates="questions")

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, type={self.question_type})>"
