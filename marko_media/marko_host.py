"""The directive grammar's view of marko.

marko keeps its link parsing helpers private and unbounded, so destinations,
titles and labels are parsed here with the CommonMark rules marko follows,
using marko's own escape-aware ``find_next``.
"""
from __future__ import annotations

import html
import re
from typing import Any, List, Mapping, Optional

from marko import inline_parser
from marko.helpers import find_next, normalize_label
from marko.html_renderer import HARMFUL_PROTOCOLS
from marko.inline import Literal
from marko.source import Source

from marko_media.models import Parsed
from marko_media.references import ReferenceEntry
from marko_media.scanning import char_at

TITLE_CLOSERS = {'"': '"', "'": "'", "(": ")"}
MAX_PAREN_DEPTH = 32
CODE_SPAN = re.compile(r"(?<!`)(`+)(?!`)([\s\S]+?)(?<!`)\1(?!`)")


class MarkoHost:
    def __init__(self, source: Source, references: Optional[Mapping[str, ReferenceEntry]] = None):
        self.source = source
        self.references = references or {}
        self._closers = None

    def parse_link_destination(self, text: str, start: int, end: int) -> Optional[Parsed]:
        if char_at(text, start, end) == "<":
            close = find_next(text, ">", start + 1, end, disallowed="<\n")
            if close < 0:
                return None
            return Parsed(close + 1, text[start + 1:close])

        pos = start
        depth = 0
        while pos < end:
            c = text[pos]
            if c == " " or c in inline_parser.ASCII_CONTROL:
                break
            if c == "\\" and pos + 1 < end:
                if text[pos + 1] == " ":
                    break
                pos += 2
                continue
            if c == "(":
                depth += 1
                if depth > MAX_PAREN_DEPTH:
                    return None
            elif c == ")":
                if depth == 0:
                    break
                depth -= 1
            pos += 1

        if pos == start or depth:
            return None
        return Parsed(pos, text[start:pos])

    def parse_link_title(self, text: str, start: int, end: int) -> Optional[Parsed]:
        opener = char_at(text, start, end)
        closer = TITLE_CLOSERS.get(opener)
        if closer is None:
            return None
        disallowed = "(" if opener == "(" else ()
        close = find_next(text, closer, start + 1, end, disallowed=disallowed)
        if close < 0:
            return None
        return Parsed(close + 1, Literal.strip_backslash(text[start + 1:close]))

    def match_label(self, text: str, start: int, end: int) -> int:
        if char_at(text, start, end) != "[":
            return -1
        closers = self._label_closers(text, end)
        if start in closers:
            return closers[start]
        # start sits inside an escape or code span of the whole-text scan
        return self._scan_label(text, start, end)

    def _label_closers(self, text: str, end: int) -> Mapping[int, int]:
        """Where every ``[`` before end closes, or -1; one pass per text."""
        if self._closers is not None and self._closers[0] is text and self._closers[1] == end:
            return self._closers[2]
        closers = {}
        opened = []
        pos = 0
        while pos < end:
            pos, c = self._next_label_char(text, pos, end)
            if c == "[":
                opened.append(pos)
            elif c == "]" and opened:
                closers[opened.pop()] = pos
            pos += 1
        for pos in opened:
            closers[pos] = -1
        self._closers = (text, end, closers)
        return closers

    def _scan_label(self, text: str, start: int, end: int) -> int:
        depth = 0
        pos = start
        while pos < end:
            pos, c = self._next_label_char(text, pos, end)
            if c == "[":
                depth += 1
            elif c == "]":
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1
        return -1

    @staticmethod
    def _next_label_char(text: str, pos: int, end: int):
        """Skip escapes and code spans, which can't open or close a label."""
        while pos < end:
            c = text[pos]
            if c == "\\":
                pos += 2
                continue
            if c == "`":
                code = CODE_SPAN.match(text, pos, end)
                if code:
                    pos = code.end()
                    continue
            return pos, c
        return pos, ""

    def normalize_link(self, raw: str) -> str:
        return Literal.strip_backslash(raw)

    def validate_link(self, href: str) -> bool:
        return not HARMFUL_PROTOCOLS.match(html.unescape(href))

    def normalize_reference(self, label: str) -> str:
        return normalize_label(label)

    def lookup_reference(self, key: str) -> Optional[Any]:
        if key in self.references:
            return self.references[key]

        link = self.source.root.link_ref_defs.get(key)
        if link is None:
            return None
        dest, title = link
        if dest.startswith("<") and dest.endswith(">"):
            dest = dest[1:-1]
        return {
            "href": self.normalize_link(dest),
            "title": Literal.strip_backslash(title[1:-1]) if title else None,
        }

    def parse_inline(self, text: str) -> List[Any]:
        parser = self.source.parser
        elements = [e for e in parser.inline_elements.values() if not e.virtual]
        return inline_parser.parse(
            text,
            elements,
            fallback=parser.inline_elements["RawText"],
            source=self.source,
        )
