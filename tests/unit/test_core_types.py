"""
Unit tests for core types: modes, errors, date helpers and settings.
"""

from datetime import date, datetime

import pytest

from trivia_engine.config import Settings
from trivia_engine.core.dates import day_bounds, local_date_string, parse_date_string, week_start
from trivia_engine.core.errors import (
    EmptyGameError,
    InvalidModeError,
    MissingCategoryError,
    QuestionNotInGameError,
    StorageError,
    TriviaError,
)
from trivia_engine.core.modes import QuestionType, TriviaMode


class TestTriviaMode:
    @pytest.mark.parametrize("raw", ["daily", "DAILY", TriviaMode.DAILY])
    def test_parse(self, raw):
        assert TriviaMode.parse(raw) is TriviaMode.DAILY

    def test_parse_unknown(self):
        with pytest.raises(InvalidModeError) as exc_info:
            TriviaMode.parse("weekly")
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.mode == "weekly"

    def test_display_name(self):
        assert TriviaMode.CATEGORY.display_name == "Category Trivia"

    def test_values_are_stored_strings(self):
        assert TriviaMode.MIXED.value == "mixed"
        assert QuestionType.TRUE_FALSE.value == "true_false"


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(StorageError, TriviaError)
        assert issubclass(MissingCategoryError, ValueError)
        assert issubclass(EmptyGameError, TriviaError)
        assert issubclass(EmptyGameError, ValueError)

    def test_question_not_in_game(self):
        error = QuestionNotInGameError(42)
        assert isinstance(error, KeyError)
        assert error.question_id == 42
        assert "42" in str(error)


class TestDates:
    def test_local_date_string(self):
        assert local_date_string(datetime(2024, 3, 4, 23, 59)) == "2024-03-04"
        assert local_date_string(date(2024, 12, 31)) == "2024-12-31"

    def test_parse_round_trip(self):
        assert parse_date_string("2024-03-04") == date(2024, 3, 4)

    def test_day_bounds(self):
        start, end = day_bounds(date(2024, 3, 4))
        assert start == datetime(2024, 3, 4, 0, 0)
        assert end == datetime(2024, 3, 5, 0, 0)

    def test_week_starts_monday(self):
        assert week_start(date(2024, 3, 14)) == date(2024, 3, 11)
        assert week_start(date(2024, 3, 11)) == date(2024, 3, 11)
        assert week_start(date(2024, 3, 17)) == date(2024, 3, 11)


class TestSettings:
    def test_defaults(self, tmp_path):
        settings = Settings(_env_file=None, data_dir=tmp_path)
        assert settings.default_locale == "en"
        assert settings.mastery_policy == "most_recent_correct"
        assert settings.get_session_sizes() == {"daily": 10, "mixed": 10, "category": 10}
        assert settings.get_hint_limit(False) == 1
        assert settings.get_hint_limit(True) == 3

    def test_default_database_under_data_dir(self, tmp_path):
        settings = Settings(_env_file=None, data_dir=tmp_path)
        url = settings.get_database_url()
        assert url.startswith("sqlite+aiosqlite:///")
        assert url.endswith("trivia.db")
        assert str(tmp_path) in url

    def test_explicit_database_url(self):
        settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:")
        assert settings.get_database_url() == "sqlite+aiosqlite:///:memory:"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TRIVIA_DAILY_QUESTIONS", "5")
        monkeypatch.setenv("TRIVIA_MASTERY_POLICY", "ever_correct")
        settings = Settings(_env_file=None)
        assert settings.daily_questions == 5
        assert settings.mastery_policy == "ever_correct"

    def test_rejects_unknown_policy(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, mastery_policy="sometimes")
