"""
Content Catalog adapter.

The catalog is owned by the host application's content pipeline. The trivia
engine consumes it through the ContentCatalog protocol, which is read-only and
locale-parameterized. SqlContentCatalog reads the catalog tables living in the
same SQLite database as the progress tables.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from loguru import logger
from sqlalchemy import Select, func, select

from trivia_engine.core.dates import day_bounds
from trivia_engine.core.modes import QuestionType
from trivia_engine.db.database import Database
from trivia_engine.db.models import Category, Fact, Question

# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class CategoryInfo:
    """Display metadata for a category."""

    slug: str
    name: str
    icon: str | None = None
    color_hex: str | None = None
    locale: str = "en"


@dataclass(frozen=True)
class TriviaQuestion:
    """An immutable catalog question, flattened with its fact's category/locale."""

    id: int
    fact_id: int
    category_slug: str
    locale: str
    question_type: QuestionType
    question_text: str
    correct_answer: str
    wrong_answers: tuple[str, ...] = field(default_factory=tuple)
    explanation: str | None = None
    difficulty: int = 2

    @property
    def is_true_false(self) -> bool:
        return self.question_type is QuestionType.TRUE_FALSE


@dataclass(frozen=True)
class FactInfo:
    """Fact summary used for "review these facts" after wrong answers."""

    id: int
    title: str
    summary: str | None
    category_slug: str
    locale: str
    source_url: str | None = None


def parse_wrong_answers(wrong_answers_json: str | None) -> list[str]:
    """Parse the stored JSON array of wrong answers; anything unparseable is empty."""
    if not wrong_answers_json:
        return []
    try:
        data = json.loads(wrong_answers_json)
    except (json.JSONDecodeError, TypeError):
        return []
    if not isinstance(data, list):
        return []
    return [str(item) for item in data]


# =============================================================================
# Protocol
# =============================================================================


class ContentCatalog(Protocol):
    """Read-only catalog interface consumed by the engine."""

    async def list_categories(self, locale: str) -> list[CategoryInfo]: ...

    async def get_category(self, slug: str, locale: str) -> CategoryInfo | None: ...

    async def questions_by_category(self, slug: str, locale: str) -> list[TriviaQuestion]: ...

    async def question_ids_by_category(self, slug: str, locale: str) -> list[int]: ...

    async def question_ids_grouped_by_category(self, locale: str) -> dict[str, list[int]]: ...

    async def questions_by_ids(self, question_ids: Iterable[int]) -> list[TriviaQuestion]: ...

    async def existing_question_ids(self, question_ids: Iterable[int]) -> set[int]: ...

    async def questions_shown_on(self, day: date, locale: str) -> list[TriviaQuestion]: ...

    async def count_questions_shown_on(self, day: date, locale: str) -> int: ...

    async def all_question_ids(self, locale: str) -> list[int]: ...

    async def facts_for_questions(self, question_ids: Iterable[int]) -> list[FactInfo]: ...


# =============================================================================
# SQL implementation
# =============================================================================


class SqlContentCatalog:
    """
    ContentCatalog backed by the categories/facts/questions tables.

    With ``delivered_only`` the catalog exposes only questions whose fact has
    already been shown to the user, which is what the trivia screens offer.
    """

    def __init__(self, db: Database, delivered_only: bool = True):
        self.db = db
        self.delivered_only = delivered_only

    # ------------------------------------------------------------------
    # Query builders
    # ------------------------------------------------------------------

    def _question_query(self) -> Select:
        query = select(Question, Fact.category_slug, Fact.locale).join(Fact, Question.fact_id == Fact.id)
        if self.delivered_only:
            query = query.where(Fact.shown_at.is_not(None))
        return query

    def _id_query(self) -> Select:
        query = select(Question.id).join(Fact, Question.fact_id == Fact.id)
        if self.delivered_only:
            query = query.where(Fact.shown_at.is_not(None))
        return query

    @staticmethod
    def _to_record(row) -> TriviaQuestion:
        question, category_slug, locale = row
        try:
            question_type = QuestionType(question.question_type)
        except ValueError:
            logger.warning(
                "Question {} has unknown type {!r}, treating as multiple choice",
                question.id,
                question.question_type,
            )
            question_type = QuestionType.MULTIPLE_CHOICE
        wrong = () if question_type is QuestionType.TRUE_FALSE else tuple(parse_wrong_answers(question.wrong_answers))
        return TriviaQuestion(
            id=question.id,
            fact_id=question.fact_id,
            category_slug=category_slug,
            locale=locale,
            question_type=question_type,
            question_text=question.question_text,
            correct_answer=question.correct_answer,
            wrong_answers=wrong,
            explanation=question.explanation,
            difficulty=question.difficulty or 2,
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self, locale: str) -> list[CategoryInfo]:
        async with self.db.session() as session:
            result = await session.execute(
                select(Category).where(Category.locale == locale).order_by(Category.name)
            )
            return [
                CategoryInfo(slug=c.slug, name=c.name, icon=c.icon, color_hex=c.color_hex, locale=c.locale)
                for c in result.scalars()
            ]

    async def get_category(self, slug: str, locale: str) -> CategoryInfo | None:
        async with self.db.session() as session:
            result = await session.execute(
                select(Category).where(Category.slug == slug, Category.locale == locale)
            )
            category = result.scalar_one_or_none()
            if category is None:
                return None
            return CategoryInfo(
                slug=category.slug,
                name=category.name,
                icon=category.icon,
                color_hex=category.color_hex,
                locale=category.locale,
            )

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    async def questions_by_category(self, slug: str, locale: str) -> list[TriviaQuestion]:
        query = self._question_query().where(Fact.category_slug == slug, Fact.locale == locale)
        async with self.db.session() as session:
            result = await session.execute(query.order_by(Question.id))
            return [self._to_record(row) for row in result.all()]

    async def question_ids_by_category(self, slug: str, locale: str) -> list[int]:
        query = self._id_query().where(Fact.category_slug == slug, Fact.locale == locale)
        async with self.db.session() as session:
            result = await session.execute(query.order_by(Question.id))
            return list(result.scalars())

    async def question_ids_grouped_by_category(self, locale: str) -> dict[str, list[int]]:
        query = (
            select(Fact.category_slug, Question.id)
            .join(Fact, Question.fact_id == Fact.id)
            .where(Fact.locale == locale)
        )
        if self.delivered_only:
            query = query.where(Fact.shown_at.is_not(None))
        grouped: dict[str, list[int]] = {}
        async with self.db.session() as session:
            result = await session.execute(query.order_by(Fact.category_slug, Question.id))
            for slug, question_id in result.all():
                grouped.setdefault(slug, []).append(question_id)
        return grouped

    async def questions_by_ids(self, question_ids: Iterable[int]) -> list[TriviaQuestion]:
        ids = list(dict.fromkeys(question_ids))
        if not ids:
            return []
        # No delivered filter: callers already hold these ids
        query = (
            select(Question, Fact.category_slug, Fact.locale)
            .join(Fact, Question.fact_id == Fact.id)
            .where(Question.id.in_(ids))
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            by_id = {record.id: record for record in map(self._to_record, result.all())}
        return [by_id[qid] for qid in ids if qid in by_id]

    async def existing_question_ids(self, question_ids: Iterable[int]) -> set[int]:
        ids = list(set(question_ids))
        if not ids:
            return set()
        async with self.db.session() as session:
            result = await session.execute(select(Question.id).where(Question.id.in_(ids)))
            return set(result.scalars())

    async def questions_shown_on(self, day: date, locale: str) -> list[TriviaQuestion]:
        start, end = day_bounds(day)
        query = (
            select(Question, Fact.category_slug, Fact.locale)
            .join(Fact, Question.fact_id == Fact.id)
            .where(Fact.locale == locale, Fact.shown_at >= start, Fact.shown_at < end)
            .order_by(Question.id)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return [self._to_record(row) for row in result.all()]

    async def count_questions_shown_on(self, day: date, locale: str) -> int:
        start, end = day_bounds(day)
        query = (
            select(func.count(Question.id))
            .join(Fact, Question.fact_id == Fact.id)
            .where(Fact.locale == locale, Fact.shown_at >= start, Fact.shown_at < end)
        )
        async with self.db.session() as session:
            return (await session.execute(query)).scalar_one()

    async def all_question_ids(self, locale: str) -> list[int]:
        query = self._id_query().where(Fact.locale == locale)
        async with self.db.session() as session:
            result = await session.execute(query.order_by(Question.id))
            return list(result.scalars())

    # ------------------------------------------------------------------
    # Facts
    # ------------------------------------------------------------------

    async def facts_for_questions(self, question_ids: Iterable[int]) -> list[FactInfo]:
        ids = list(set(question_ids))
        if not ids:
            return []
        query = (
            select(Fact)
            .join(Question, Question.fact_id == Fact.id)
            .where(Question.id.in_(ids))
            .distinct()
            .order_by(Fact.id)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return [
                FactInfo(
                    id=fact.id,
                    title=fact.title,
                    summary=fact.summary,
                    category_slug=fact.category_slug,
                    locale=fact.locale,
                    source_url=fact.source_url,
                )
                for fact in result.scalars()
            ]
