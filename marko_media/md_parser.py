"""Custom media element
Parses markdown of the form ![label](/song.mp3) and renders an img, audio or
video element depending on what the sources are.

    ![Intro](/intro.webm ![video/mp4](/intro.mp4) "Intro" =640x360 #=/intro.jpeg [en](/intro.vtt "English"))
    ![Cover art](/cover.png)
    ![Episode 1][ep1]
"""
from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

from marko import HTMLRenderer, Markdown
from marko.element import Element
from marko.helpers import MarkoExtension, render_dispatch
from marko.inline import Image, InlineElement
from marko.inline_parser import Group, MatchObj
from marko.md_renderer import MarkdownRenderer
from marko.source import Source

from marko_media.assembler import assemble
from marko_media.config import MediaOptions, make_options
from marko_media.grammar import parse_media
from marko_media.marko_host import MarkoHost
from marko_media.media_type import classify
from marko_media.models import LinkNode, MediaDescriptor, SourceNode, TextNode, TrackNode

logger = logging.getLogger(__name__)

URL_ATTRS = {"src", "href", "poster"}


class MediaMatch(MatchObj):
    """The match handed to MediaElement; group 1 is the label."""

    def __init__(self, text: str, start: int, end: int, media: MediaDescriptor, host: MarkoHost):
        label_start = start + 2
        label = Group(label_start, label_start + len(media.label), media.label)
        super().__init__("MediaElement", text, start, end, label)
        self.media = media
        self.host = host


class MediaElement(InlineElement):
    # beats LiteralImage, which matches many of the same spans
    priority = 6
    # Like a link, tokens after the label (escapes, autolinks in the
    # arguments) are shaded instead of splitting the directive.
    parse_children = True
    parse_group = 1
    options = MediaOptions()

    def __init__(self, match: MediaMatch):
        self.media = match.media
        self.category = classify(self.media.sources)
        self.node = assemble(self.media, self.category, self.options, match.host)
        self.tag = self.node.tag
        self.source_text = match.group()
        # marko replaces these with the label's own elements
        self.children = [c for c in self.node.children if isinstance(c, Element)]

    @classmethod
    def find(cls, text: str, *, source: Source) -> Iterator[MediaMatch]:
        host = MarkoHost(source, cls.options.references)
        end = len(text)
        pos = text.find("![")
        while pos >= 0:
            parsed = parse_media(text, pos, end, host)
            if parsed is None:
                logger.debug("No media directive at offset %d: %r", pos, text[pos:pos + 40])
                pos = text.find("![", pos + 1)
                continue
            yield MediaMatch(text, pos, parsed.pos, parsed.value, host)
            pos = text.find("![", parsed.pos)


class LiteralImage(Image):
    """Stands in for marko's image: ![...](...) that isn't a media directive
    is left as the text it was written as."""
    override = True
    parse_children = False

    def __init__(self, match):
        self.source_text = match.group()
        self.children = []


class MediaElementMixin:
    @render_dispatch(HTMLRenderer)
    def render_media_element(self, element: MediaElement) -> str:
        node = element.node
        if node.tag == "img":
            # alt comes from the label, flattened to text like a normal image
            render_func = self.render
            self.render = self.render_plain_text
            alt = "".join(self.render(child) for child in node.children)
            self.render = render_func
            return f"<img{self._render_media_attrs(node.attrs, alt=alt)} />"

        body = "".join(self._render_media_child(child) for child in node.children)
        return f"<{node.tag}{self._render_media_attrs(node.attrs)}>{body}</{node.tag}>"

    @render_media_element.dispatch(MarkdownRenderer)
    def render_media_element(self, element: MediaElement) -> str:
        return element.source_text

    @render_dispatch(HTMLRenderer)
    def render_image(self, element: LiteralImage) -> str:
        return self.escape_html(element.source_text)

    @render_image.dispatch(MarkdownRenderer)
    def render_image(self, element: LiteralImage) -> str:
        return element.source_text

    def _render_media_attrs(self, attrs: Mapping[str, str], **escaped: str) -> str:
        parts = []
        for name, value in attrs.items():
            if name in escaped:
                value = escaped[name]
            elif name in URL_ATTRS:
                value = self.escape_url(value)
            else:
                value = self.escape_html(value)
            parts.append(f' {name}="{value}"')
        return "".join(parts)

    def _render_media_child(self, child: Any) -> str:
        if isinstance(child, SourceNode):
            return f"<source{self._render_media_attrs(child.attrs)} />"
        if isinstance(child, TrackNode):
            return f"<track{self._render_media_attrs(child.attrs)} />"
        if isinstance(child, LinkNode):
            body = "".join(self._render_media_child(c) for c in child.children)
            return f'<a href="{self.escape_url(child.href)}">{body}</a>'
        if isinstance(child, TextNode):
            return self.escape_html(child.content)
        return self.render(child)


def media_extension(options: MediaOptions) -> MarkoExtension:
    element = type("MediaElement", (MediaElement,), {"options": options})
    return MarkoExtension(
        elements=[element, LiteralImage],
        renderer_mixins=[MediaElementMixin])


def make_extension(**kwargs) -> MarkoExtension:
    """Entry point for marko.helpers.load_extension; accepts controls, attrs and references."""
    return media_extension(make_options(**kwargs))


def make_markdown(options: MediaOptions | None = None) -> Markdown:
    return Markdown(extensions=[media_extension(options or MediaOptions())])


Media = make_extension()

markdown_parser = Markdown(extensions=[Media])
