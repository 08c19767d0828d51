"""Read-only access to the content catalog (questions, categories, facts)."""

from trivia_engine.catalog.content_catalog import (
    CategoryInfo,
    ContentCatalog,
    FactInfo,
    SqlContentCatalog,
    TriviaQuestion,
    parse_wrong_answers,
)

__all__ = [
    "CategoryInfo",
    "ContentCatalog",
    "FactInfo",
    "SqlContentCatalog",
    "TriviaQuestion",
    "parse_wrong_answers",
]
