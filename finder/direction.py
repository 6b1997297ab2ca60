"""
Direction Resolver — forward or reversed index for a pattern.

Order of decision:
    1. Explicit configuration (INDEX_REVERSE=direct|reversed)
    2. First matching reverse rule (INDEX_REVERSES)
    3. Heuristic: read the orientation with the longer literal prefix

Heuristic examples:
    a.b.c      → FORWARD   (no wildcard)
    a.*.c.d    → REVERSED  (1 separator before "*", 2 after)
    a.b.c.*    → FORWARD   (3 before, 0 after)
"""

from __future__ import annotations

import logging
from typing import Sequence

from constants import PATH_SEPARATOR
from finder.types import Direction, ReverseRule
from finder.where import index_last_wildcard, index_wildcard

logger = logging.getLogger(__name__)


def match_rule(pattern: str, rules: Sequence[ReverseRule]) -> Direction:
    """Direction forced by the first matching rule, AUTO if none applies."""
    for rule in rules:
        if rule.matches(pattern):
            return rule.direction
    return Direction.AUTO


def wildcard_depths(pattern: str) -> tuple[int, int] | None:
    """
    Separators before the first wildcard and after the last one.

    Returns:
        (first_depth, last_depth), or None for a literal pattern
    """
    first = index_wildcard(pattern)
    if first == -1:
        return None
    last = index_last_wildcard(pattern)
    return (
        pattern[:first].count(PATH_SEPARATOR),
        pattern[last:].count(PATH_SEPARATOR),
    )


def resolve_direction(
    pattern: str,
    configured: Direction = Direction.AUTO,
    rules: Sequence[ReverseRule] = (),
) -> Direction:
    """
    Resolves FORWARD or REVERSED for a pattern. Never returns AUTO.

    Args:
        pattern: Glob pattern as requested (natural order)
        configured: INDEX_REVERSE setting
        rules: INDEX_REVERSES, checked in order

    Returns:
        Direction.FORWARD or Direction.REVERSED
    """
    if configured != Direction.AUTO:
        return configured

    forced = match_rule(pattern, rules)
    if forced != Direction.AUTO:
        logger.debug(f"Reverse rule forced {forced.value} for {pattern}")
        return forced

    depths = wildcard_depths(pattern)
    if depths is None:
        return Direction.FORWARD

    first_depth, last_depth = depths
    if first_depth < last_depth:
        return Direction.REVERSED
    return Direction.FORWARD


class DirectionResolver:
    """
    Memoized resolver: the first resolved direction is kept for the
    lifetime of the object, whatever pattern is passed later.

    One resolver belongs to one query (see IndexQuery).
    """

    def __init__(
        self,
        configured: Direction = Direction.AUTO,
        rules: Sequence[ReverseRule] = (),
    ):
        self._configured = configured
        self._rules = tuple(rules)
        self._resolved: Direction | None = None

    @property
    def resolved(self) -> Direction | None:
        return self._resolved

    def resolve(self, pattern: str) -> Direction:
        if self._resolved is None:
            self._resolved = resolve_direction(pattern, self._configured, self._rules)
        return self._resolved
