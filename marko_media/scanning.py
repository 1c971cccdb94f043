from __future__ import annotations

import string

ALPHANUMERIC = frozenset(string.ascii_letters + string.digits)
DIGITS = frozenset(string.digits)

# Same set markdown engines treat as inline whitespace, newlines included.
WHITESPACE = frozenset(
    "\t\n\x0b\x0c\r \xa0\u1680\u202f\u205f\u3000"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
)


def is_whitespace(char: str) -> bool:
    return char in WHITESPACE


def is_alphanumeric(char: str) -> bool:
    return char in ALPHANUMERIC


def skip_whitespace(text: str, start: int, end: int) -> int:
    pos = start
    while pos < end and text[pos] in WHITESPACE:
        pos += 1
    return pos


def char_at(text: str, pos: int, end: int) -> str:
    """Character at pos, or "" once pos leaves [0, end)."""
    if 0 <= pos < end:
        return text[pos]
    return ""


def expect(text: str, pos: int, end: int, literal: str) -> bool:
    return pos + len(literal) <= end and text.startswith(literal, pos)
