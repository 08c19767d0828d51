"""
Core Mastery Module.

Mastery is *derived*: it is recomputed from the append-only attempt log every
time it is needed and never stored as a flag that could drift from the log.

A mastery policy is a plain callable receiving one question's correctness
history, most recent attempt first, and returning whether the question counts
as mastered. Policies are registered by name so the threshold can be changed
from settings without touching selection or statistics code.

Policies:
- most_recent_correct: the latest attempt was correct (default)
- ever_correct: at least one correct attempt
- consecutive_correct: the latest N attempts were all correct
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import partial
from typing import Protocol

from trivia_engine.core.errors import UnknownMasteryPolicyError


class MasteryPolicy(Protocol):
    """Decide mastery from a question's history (most recent first)."""

    def __call__(self, history: Sequence[bool]) -> bool: ...


def most_recent_correct(history: Sequence[bool]) -> bool:
    return bool(history) and history[0]


def ever_correct(history: Sequence[bool]) -> bool:
    return any(history)


def consecutive_correct(history: Sequence[bool], required: int = 3) -> bool:
    """True when the latest ``required`` attempts exist and are all correct."""
    if required < 1:
        raise ValueError("required must be at least 1")
    return len(history) >= required and all(history[:required])


MASTERY_POLICIES: dict[str, Callable[..., bool]] = {
    "most_recent_correct": most_recent_correct,
    "ever_correct": ever_correct,
    "consecutive_correct": consecutive_correct,
}


def get_mastery_policy(name: str, streak_length: int = 3) -> MasteryPolicy:
    """
    Look up a mastery policy by name.

    Args:
        name: Registered policy name
        streak_length: Run length for ``consecutive_correct``

    Raises:
        UnknownMasteryPolicyError: If the name is not registered
    """
    try:
        policy = MASTERY_POLICIES[name]
    except KeyError:
        raise UnknownMasteryPolicyError(name) from None
    if policy is consecutive_correct:
        return partial(consecutive_correct, required=streak_length)
    return policy
