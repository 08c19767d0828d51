from trivia_engine.db.database import Database, get_database, reset_database

__all__ = ["Database", "get_database", "reset_database"]
