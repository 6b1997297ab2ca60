"""Response decoding: raw TabSeparatedRaw body → matched paths."""

from __future__ import annotations

from constants import PATH_SEPARATOR
from finder.reverse import reverse_bytes

_NEWLINE = b"\n"
_SEPARATOR = PATH_SEPARATOR.encode()[0]


def decode_rows(body: bytes | None, series_only: bool = False, reverse: bool = False) -> list[bytes]:
    """
    Splits the body into rows, keeping store order.

    Args:
        body: Raw response, None if nothing was executed
        series_only: Drop directory rows (trailing separator)
        reverse: Rows are stored reversed, restore natural order

    Returns:
        List of paths; empty list for an empty or missing body
    """
    if not body:
        return []

    rows = []
    for row in body.split(_NEWLINE):
        if not row:
            continue
        if series_only and row[-1] == _SEPARATOR:
            continue
        rows.append(reverse_bytes(row) if reverse else row)
    return rows
