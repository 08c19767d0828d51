"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against a
fresh SQLite database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import asyncio
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from trivia_engine.catalog import SqlContentCatalog
from trivia_engine.cli.main import app
from trivia_engine.config import get_settings
from trivia_engine.core.modes import TriviaMode
from trivia_engine.db.database import Database
from trivia_engine.trivia.session_store import SessionStore
from trivia_engine.trivia.streaks import StreakTracker

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    """Point the CLI at an empty database and create the tables."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("TRIVIA_DATABASE_URL", url)
    monkeypatch.setenv("TRIVIA_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()

    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0, result.output

    yield url

    get_settings.cache_clear()
    logger.remove()
    logger.add(sys.stderr)


def seed_history(url: str) -> int:
    """Save one finished session and complete today's daily trivia."""

    async def work() -> int:
        db = Database(url)
        try:
            store = SessionStore(db, SqlContentCatalog(db))
            session_id = await store.save_session_result(TriviaMode.MIXED, 10, 7, elapsed_time=125)
            await StreakTracker(db).save_daily_progress(10, 7)
            return session_id
        finally:
            await db.dispose()

    return asyncio.run(work())


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("stats", "categories", "history", "session", "streak", "daily"):
            assert command in result.output

    def test_db_help(self):
        result = runner.invoke(app, ["db", "--help"])

        assert result.exit_code == 0
        assert "init" in result.output


class TestEmptyDatabase:
    """Commands against a database with no history."""

    def test_db_init_is_idempotent(self, database_url):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        assert "Database initialized" in result.output

    def test_stats(self, database_url):
        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Trivia Statistics" in result.output

    def test_categories(self, database_url):
        result = runner.invoke(app, ["categories"])

        assert result.exit_code == 0
        assert "No categories" in result.output

    def test_history(self, database_url):
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No trivia sessions yet" in result.output

    def test_missing_session(self, database_url):
        result = runner.invoke(app, ["session", "999"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_daily(self, database_url):
        result = runner.invoke(app, ["daily"])

        assert result.exit_code == 0
        assert "not started" in result.output


class TestWithHistory:
    """Commands after a finished session."""

    def test_history_lists_session(self, database_url):
        session_id = seed_history(database_url)

        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert str(session_id) in result.output
        assert "7/10" in result.output

    def test_session_detail(self, database_url):
        session_id = seed_history(database_url)

        result = runner.invoke(app, ["session", str(session_id)])

        assert result.exit_code == 0
        assert "Mixed Trivia" in result.output
        assert "2m 5s" in result.output

    def test_streak(self, database_url):
        seed_history(database_url)

        result = runner.invoke(app, ["streak", "--days", "3"])

        assert result.exit_code == 0
        assert "Current streak" in result.output

    def test_daily_completed(self, database_url):
        seed_history(database_url)

        result = runner.invoke(app, ["daily"])

        assert result.exit_code == 0
        assert "completed" in result.output
