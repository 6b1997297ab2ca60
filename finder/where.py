"""Predicate DSL for index queries.

Builds WHERE clauses for the index table:
- eq() / in_() — column comparisons with quoted literals
- tree_glob() — glob pattern over hierarchical paths (prefix + regexp)
- Where — AND-combination of clauses

Glob dialect: `*` and `?` never cross a separator, `[abc]` is a
character class, `{a,b}` is an alternation.

Example:
    w = Where()
    w.and_(eq("Level", 20003))
    w.and_(tree_glob("Path", "a.*.c"))
    str(w)
    # "(Level = 20003) AND (startsWith(Path, 'a.') AND match(Path, '^a[.][^.]*?[.]c[.]?$'))"
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from constants import PATH_SEPARATOR, WILDCARD_CHARS


# Table name: plain or database-qualified identifier
TABLE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# Regexp metacharacters that are literal in a glob
_REGEX_LITERALS = {
    ".": "[.]",
    "$": "[$]",
    "+": "[+]",
    "(": "[(]",
    ")": "[)]",
    "|": "[|]",
    "^": "\\^",
    "\\": "\\\\",
}


class ValidationError(ValueError):
    """Invalid input for SQL."""
    pass


def validate_table(value: str) -> str:
    """
    Validates a table name (optionally `database.table`).

    Raises:
        ValidationError: If the name is not a plain identifier
    """
    if not TABLE_PATTERN.match(value):
        raise ValidationError(
            f"Invalid table: '{value}'. Expected identifier or database.table"
        )
    return value


# =============================================================================
# Literals
# =============================================================================

def quote(value: Any) -> str:
    """
    Returns a SQL literal.

    Strings: backslashes and single quotes are doubled.
    Numbers are rendered as is.

    Example:
        >>> quote("O'Connor")
        "'O''Connor'"
        >>> quote(42)
        '42'
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace("'", "''")
    return f"'{escaped}'"


# =============================================================================
# Wildcards
# =============================================================================

def has_wildcard(pattern: str) -> bool:
    return index_wildcard(pattern) != -1


def index_wildcard(pattern: str) -> int:
    """Position of the first wildcard character, -1 if none."""
    for i, ch in enumerate(pattern):
        if ch in WILDCARD_CHARS:
            return i
    return -1


def index_last_wildcard(pattern: str) -> int:
    """Position of the last wildcard character, -1 if none."""
    for i in range(len(pattern) - 1, -1, -1):
        if pattern[i] in WILDCARD_CHARS:
            return i
    return -1


def glob_to_regexp(glob: str) -> str:
    """
    Translates a glob into a regexp body (without anchors).

    Examples:
        >>> glob_to_regexp("a.*.c")
        'a[.][^.]*?[.]c'
        >>> glob_to_regexp("cpu.{user,system}")
        'cpu[.](user|system)'
    """
    out = []
    depth = 0
    i = 0
    n = len(glob)
    while i < n:
        ch = glob[i]
        if ch == "*":
            out.append("[^.]*?")
        elif ch == "?":
            out.append("[^.]")
        elif ch == "[":
            end = glob.find("]", i + 1)
            if end == -1:
                out.append("[[]")
            else:
                out.append(glob[i:end + 1])
                i = end
        elif ch == "]":
            out.append("[]]")
        elif ch == "{":
            depth += 1
            out.append("(")
        elif ch == "}" and depth > 0:
            depth -= 1
            out.append(")")
        elif ch == "," and depth > 0:
            out.append("|")
        elif ch in _REGEX_LITERALS:
            out.append(_REGEX_LITERALS[ch])
        elif ch == "}":
            out.append("[}]")
        else:
            out.append(ch)
        i += 1
    # unbalanced "{" is closed so the regexp stays valid
    out.append(")" * depth)
    return "".join(out)


# =============================================================================
# Clauses
# =============================================================================

def eq(field: str, value: Any) -> str:
    return f"{field} = {quote(value)}"


def in_(field: str, values: Iterable[Any]) -> str:
    items = ", ".join(quote(v) for v in values)
    return f"{field} IN ({items})"


def starts_with(field: str, prefix: str) -> str:
    return f"startsWith({field}, {quote(prefix)})"


def match(field: str, regexp: str) -> str:
    return f"match({field}, {quote(regexp)})"


def tree_glob(field: str, pattern: str) -> str:
    """
    Glob over tree paths where directory nodes carry a trailing separator.

    Returns:
        SQL expression, or empty string when the pattern matches everything

    Examples:
        >>> tree_glob("Path", "a.b")
        "Path IN ('a.b', 'a.b.')"
        >>> tree_glob("Path", "a.b*")
        "startsWith(Path, 'a.b')"
    """
    if pattern == "*":
        return ""

    w = index_wildcard(pattern)
    if w == -1:
        return in_(field, [pattern, pattern + PATH_SEPARATOR])

    prefix = pattern[:w]

    # "metric.name.xxx*": the level predicate keeps deeper paths out
    if len(prefix) == len(pattern) - 1 and pattern[-1] == "*":
        return starts_with(field, prefix)

    # [.] instead of \. keeps the literal free of escapes
    regexp = "^" + glob_to_regexp(pattern) + "[.]?$"
    if not prefix:
        return match(field, regexp)
    return f"{starts_with(field, prefix)} AND {match(field, regexp)}"


class Where:
    """
    AND-combination of SQL clauses.

    Empty clauses are ignored, so optional filters can be added
    unconditionally.
    """

    def __init__(self):
        self._clauses: list[str] = []

    def and_(self, clause: str) -> "Where":
        if clause:
            self._clauses.append(clause)
        return self

    def andf(self, fmt: str, *args: Any) -> "Where":
        """Adds a formatted clause; args are quoted as SQL literals."""
        return self.and_(fmt.format(*(quote(a) for a in args)))

    def __bool__(self) -> bool:
        return bool(self._clauses)

    def __str__(self) -> str:
        if len(self._clauses) == 1:
            return self._clauses[0]
        return " AND ".join(f"({c})" for c in self._clauses)
