"""Command-line inspection tools for the trivia engine."""
