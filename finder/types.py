"""Finder types - Direction, reverse rules and executor options.

Defines the building blocks shared by the resolver, the builder and
the executors:
- Direction: which physical orientation of the index a query reads
- ReverseRule: configured override of the direction heuristic
- QueryOptions: timeouts forwarded to the executor

Configuration (config.py) parses INDEX_REVERSE / INDEX_REVERSES into
these types, the finder itself never reads the environment.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# DIRECTION: forward vs reversed path representation
# =============================================================================

class Direction(Enum):
    """
    Orientation of stored paths a query is evaluated against.

    Values follow the configuration vocabulary (INDEX_REVERSE=auto|direct|reversed).
    AUTO is only a configuration value: a resolved query is always
    FORWARD or REVERSED.
    """

    AUTO = "auto"
    FORWARD = "direct"
    REVERSED = "reversed"


# =============================================================================
# REVERSE RULES: per-pattern overrides
# =============================================================================

class ReverseRule(BaseModel):
    """Forces a direction for patterns matching prefix/suffix/regex.

    Empty prefix/suffix and a missing regex act as wildcards, so a rule
    with only `suffix=".count"` applies to every pattern ending in ".count".

    Example (INDEX_REVERSES):
        [{"suffix": ".count", "direction": "direct"},
         {"regex": "^servers[.]", "direction": "reversed"}]
    """

    prefix: str = ""
    suffix: str = ""
    regex: re.Pattern | None = None
    direction: Direction = Direction.AUTO

    def matches(self, pattern: str) -> bool:
        if self.prefix and not pattern.startswith(self.prefix):
            return False
        if self.suffix and not pattern.endswith(self.suffix):
            return False
        if self.regex is not None and self.regex.search(pattern) is None:
            return False
        return True


# =============================================================================
# EXECUTOR OPTIONS
# =============================================================================

class QueryOptions(BaseModel):
    """Timeouts (seconds) forwarded to the query executor."""

    connect_timeout: float = Field(default=1.0, gt=0)
    timeout: float = Field(default=60.0, gt=0)
