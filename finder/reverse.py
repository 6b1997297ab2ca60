"""Segment-order reversal of metric paths.

Reversed index rows store "a.b.c" as "c.b.a". Segments are reversed
as a whole, so glob syntax inside a segment ("{x,y}", "[ab]") stays
valid. Leading and trailing separators stay where they are, so a
directory marker stays trailing ("a.b." <-> "b.a.") and reversal is
its own inverse for any string.
"""

from constants import PATH_SEPARATOR

_SEP_BYTES = PATH_SEPARATOR.encode()


def _reverse(path, sep):
    core = path.lstrip(sep)
    head = path[:len(path) - len(core)]
    middle = core.rstrip(sep)
    tail = core[len(middle):]
    return head + sep.join(reversed(middle.split(sep))) + tail


def reverse_string(path: str) -> str:
    return _reverse(path, PATH_SEPARATOR)


def reverse_bytes(path: bytes) -> bytes:
    return _reverse(path, _SEP_BYTES)
