"""
Setup script for trivia-engine.

Trivia Engine is the spaced-practice quiz core behind the daily facts app.
It serves three roles:

1. Question Selection - Daily, mixed and category quizzes
2. Progress Tracking - Attempts, mastery, streaks and session history
3. Inspection CLI - Terminal views over the local progress database

The 'trivia' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="trivia-engine",
    version="1.0.0",
    description="Spaced-practice trivia engine with mastery tracking and daily streaks",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "postgres": [
            "asyncpg>=0.29.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "trivia=trivia_engine.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="trivia quiz spaced-practice mastery streaks",
)
