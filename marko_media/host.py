from __future__ import annotations

from typing import Any, List, Optional, Protocol

from marko_media.models import Parsed


class MarkupHost(Protocol):
    """
    What the directive grammar needs from the Markdown engine it runs inside.

    Positions are indices into the text being scanned; every parse method is
    bounded by [start, end) and returns None instead of raising.
    """

    def parse_link_destination(self, text: str, start: int, end: int) -> Optional[Parsed]:
        """Parse a link destination; value is the raw (still escaped) string."""
        ...

    def parse_link_title(self, text: str, start: int, end: int) -> Optional[Parsed]:
        """Parse a quoted link title; value is the unescaped title."""
        ...

    def match_label(self, text: str, start: int, end: int) -> int:
        """text[start] is "["; return the index of its closing "]" or -1."""
        ...

    def normalize_link(self, raw: str) -> str:
        ...

    def validate_link(self, href: str) -> bool:
        ...

    def normalize_reference(self, label: str) -> str:
        ...

    def lookup_reference(self, key: str) -> Optional[Any]:
        ...

    def parse_inline(self, text: str) -> List[Any]:
        """Expand label text into the host's own inline nodes."""
        ...
