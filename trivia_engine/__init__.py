"""
Trivia Engine - spaced-practice trivia over a fact catalog.

Picks questions for daily, mixed and category quizzes, records every answer,
derives mastery from the attempt log, tracks daily streaks and keeps a
replayable history of finished sessions.
"""

__version__ = "1.0.0"
