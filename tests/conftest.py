"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests:
a temporary SQLite database with all tables created, a controllable clock,
a seeded random generator and a helper for inserting catalog content.
"""
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from trivia_engine.config import Settings
from trivia_engine.db.database import Database
from trivia_engine.db.models import Category, Fact, Question
from trivia_engine.trivia.service import TriviaService

# Thursday noon, local time
NOW = datetime(2024, 3, 14, 12, 0, 0)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FixedClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class CatalogSeeder:
    """Insert categories, facts and questions straight into the catalog tables."""

    def __init__(self, db: Database, clock: FixedClock):
        self.db = db
        self.clock = clock

    async def category(self, slug: str, name: str | None = None, locale: str = "en", icon: str | None = None):
        async with self.db.session() as session:
            session.add(Category(slug=slug, name=name or slug.title(), icon=icon, locale=locale))

    async def fact(
        self,
        category_slug: str,
        shown_at: datetime | None = None,
        locale: str = "en",
        title: str = "A fact",
        delivered: bool = True,
    ) -> int:
        if shown_at is None and delivered:
            shown_at = self.clock() - timedelta(days=2)
        fact = Fact(title=title, summary=f"{title} summary", category_slug=category_slug, locale=locale, shown_at=shown_at)
        async with self.db.session() as session:
            session.add(fact)
            await session.flush()
            return fact.id

    async def question(
        self,
        fact_id: int,
        question_id: int | None = None,
        question_type: str = "multiple_choice",
        correct: str = "Right",
        wrong: str | None = '["Wrong 1", "Wrong 2", "Wrong 3"]',
        text: str = "Which one?",
    ) -> int:
        question = Question(
            id=question_id,
            fact_id=fact_id,
            question_type=question_type,
            question_text=text,
            correct_answer=correct,
            wrong_answers=None if question_type == "true_false" else wrong,
            explanation="Because.",
        )
        async with self.db.session() as session:
            session.add(question)
            await session.flush()
            return question.id

    async def category_with_questions(
        self,
        slug: str,
        count: int,
        locale: str = "en",
        shown_at: datetime | None = None,
        with_category: bool = True,
    ) -> list[int]:
        """One delivered fact with one question each; returns the question ids."""
        if with_category:
            await self.category(slug, locale=locale)
        ids = []
        for i in range(count):
            fact_id = await self.fact(slug, shown_at=shown_at, locale=locale, title=f"{slug} fact {i}")
            ids.append(await self.question(fact_id, text=f"{slug} question {i}"))
        return ids


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        data_dir=tmp_path,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'trivia.db'}",
    )


@pytest_asyncio.fixture
async def db(settings):
    database = Database(settings.get_database_url())
    await database.init_db()
    yield database
    await database.dispose()


@pytest.fixture
def seed(db, clock):
    return CatalogSeeder(db, clock)


@pytest.fixture
def service(db, settings, rng, clock):
    return TriviaService(db=db, settings=settings, rng=rng, clock=clock)
