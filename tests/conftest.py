import re

import pytest

from marko_media.config import MediaOptions
from marko_media.md_parser import make_markdown
from marko_media.models import Parsed, TextNode

UNSAFE_URL = re.compile(r"^\s*(javascript|vbscript|data):", re.IGNORECASE)
TITLE_CLOSERS = {'"': '"', "'": "'", "(": ")"}


class FakeHost:
    """Small CommonMark-ish host so the grammar can be tested without marko."""

    def __init__(self, references=None):
        self.references = references or {}
        self.inline_calls = []

    def parse_link_destination(self, text, start, end):
        if start < end and text[start] == "<":
            close = text.find(">", start + 1, end)
            if close < 0:
                return None
            return Parsed(close + 1, text[start + 1:close])
        pos = start
        depth = 0
        while pos < end and not text[pos].isspace():
            if text[pos] == "(":
                depth += 1
            elif text[pos] == ")":
                if depth == 0:
                    break
                depth -= 1
            pos += 1
        if pos == start or depth:
            return None
        return Parsed(pos, text[start:pos])

    def parse_link_title(self, text, start, end):
        if start >= end or text[start] not in TITLE_CLOSERS:
            return None
        close = text.find(TITLE_CLOSERS[text[start]], start + 1, end)
        if close < 0:
            return None
        return Parsed(close + 1, text[start + 1:close])

    def match_label(self, text, start, end):
        if start >= end or text[start] != "[":
            return -1
        depth = 0
        pos = start
        while pos < end:
            if text[pos] == "\\":
                pos += 2
                continue
            if text[pos] == "[":
                depth += 1
            elif text[pos] == "]":
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1
        return -1

    def normalize_link(self, raw):
        return raw

    def validate_link(self, href):
        return not UNSAFE_URL.match(href)

    def normalize_reference(self, label):
        return " ".join(label.split()).casefold()

    def lookup_reference(self, key):
        return self.references.get(key)

    def parse_inline(self, text):
        self.inline_calls.append(text)
        return [TextNode(text)]


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def make_host():
    return FakeHost


@pytest.fixture
def render():
    """Render markdown with the media extension; options can be passed per call."""
    def _render(text, options=None):
        return make_markdown(options or MediaOptions()).convert(text)
    return _render
