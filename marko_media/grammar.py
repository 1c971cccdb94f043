"""Parser for the media directive.

    ![label](/video.webm ![video/mp4](/video.mp4) "Title" =640x360 #=/poster.jpeg [en](/captions.vtt "English"))
    ![label][reference]

Every function takes the text and a [start, end) window and returns either a
``Parsed(pos, value)`` or None. Nothing here mutates state or raises, so a
caller backs out of a failed attempt simply by keeping its old position.
"""
from __future__ import annotations

from typing import List, Optional

from marko_media.host import MarkupHost
from marko_media.models import Caption, MediaDescriptor, Parsed, Source
from marko_media.references import entry_urls, parse_reference_entry
from marko_media.scanning import (
    DIGITS,
    char_at,
    expect,
    is_alphanumeric,
    is_whitespace,
    skip_whitespace,
)

MEDIA_TYPE_PREFIXES = ("image", "audio", "video")
SUBTYPE_SEPARATORS = frozenset("-+.")


def parse_number(text: str, start: int, end: int) -> Optional[Parsed]:
    """Digits with an optional trailing percent sign: 800, 50%."""
    pos = start
    while pos < end and text[pos] in DIGITS:
        pos += 1
    if pos == start:
        return None
    if char_at(text, pos, end) == "%":
        pos += 1
    return Parsed(pos, text[start:pos])


def parse_media_size(text: str, start: int, end: int) -> Optional[Parsed]:
    """=WIDTHxHEIGHT where either side may be left out, but not both."""
    if char_at(text, start, end) != "=":
        return None
    pos = start + 1

    width = parse_number(text, pos, end)
    if width:
        pos = width.pos

    if char_at(text, pos, end) != "x":
        return None
    pos += 1

    height = parse_number(text, pos, end)
    if height:
        pos = height.pos
    elif not width:
        return None

    return Parsed(pos, (width.value if width else "", height.value if height else ""))


def parse_language_tag(text: str, start: int, end: int) -> Optional[Parsed]:
    """Alphanumeric subtags joined by single hyphens (RFC 5646 shape): en, zh-Hant-TW."""
    pos = start
    while pos < end and is_alphanumeric(text[pos]):
        pos += 1
        if char_at(text, pos, end) == "-":
            pos += 1

    # never end on a hyphen
    if pos > start and text[pos - 1] == "-":
        pos -= 1

    if pos == start:
        return None
    return Parsed(pos, text[start:pos])


def parse_media_type(text: str, start: int, end: int) -> Optional[Parsed]:
    """image|audio|video "/" subtype, then an optional ";params" clause.

    Parameters are not parsed: everything up to the first "]" is taken as is,
    so a "]" inside a quoted parameter value ends the type early.
    """
    prefix = text[start:min(start + 5, end)]
    if prefix not in MEDIA_TYPE_PREFIXES:
        return None
    pos = start + 5

    if char_at(text, pos, end) != "/":
        return None
    pos += 1

    subtype_start = pos
    while pos < end and is_alphanumeric(text[pos]):
        pos += 1
        if char_at(text, pos, end) in SUBTYPE_SEPARATORS:
            pos += 1

    if pos == subtype_start:
        return None

    if char_at(text, pos, end) == ";":
        pos += 1
        while pos < end and text[pos] != "]":
            pos += 1

    return Parsed(pos, text[start:pos])


def _parse_url(text: str, start: int, end: int, host: MarkupHost) -> Optional[Parsed]:
    dest = host.parse_link_destination(text, start, end)
    if dest is None:
        return None
    href = host.normalize_link(dest.value)
    if not host.validate_link(href):
        return None
    return Parsed(dest.pos, href)


def parse_media_source(text: str, start: int, end: int, host: MarkupHost) -> Optional[Parsed]:
    """A typed source: ![ audio/webm ]( /song.webm )"""
    if not expect(text, start, end, "!["):
        return None
    pos = skip_whitespace(text, start + 2, end)

    media_type = parse_media_type(text, pos, end)
    if media_type is None:
        return None
    pos = skip_whitespace(text, media_type.pos, end)

    if not expect(text, pos, end, "]("):
        return None
    pos = skip_whitespace(text, pos + 2, end)

    url = _parse_url(text, pos, end, host)
    if url is None:
        return None
    pos = skip_whitespace(text, url.pos, end)

    if char_at(text, pos, end) != ")":
        return None
    return Parsed(pos + 1, Source(url.value, media_type.value))


def parse_media_poster(text: str, start: int, end: int, host: MarkupHost) -> Optional[Parsed]:
    """#=/poster.jpeg, with nothing between "#=" and the URL."""
    if not expect(text, start, end, "#="):
        return None
    return _parse_url(text, start + 2, end, host)


def parse_media_caption(text: str, start: int, end: int, host: MarkupHost) -> Optional[Parsed]:
    """[ en ]( /captions.vtt "English" )"""
    if char_at(text, start, end) != "[":
        return None
    pos = skip_whitespace(text, start + 1, end)

    language_tag = parse_language_tag(text, pos, end)
    if language_tag is None:
        return None
    pos = skip_whitespace(text, language_tag.pos, end)

    if not expect(text, pos, end, "]("):
        return None
    pos = skip_whitespace(text, pos + 2, end)

    url = _parse_url(text, pos, end, host)
    if url is None:
        return None
    pos = skip_whitespace(text, url.pos, end)

    label = None
    title = host.parse_link_title(text, pos, end)
    if title is not None:
        label = title.value
        pos = skip_whitespace(text, title.pos, end)

    if char_at(text, pos, end) != ")":
        return None
    return Parsed(pos + 1, Caption(url.value, language_tag.value, label))


def parse_media_args(text: str, start: int, end: int, host: MarkupHost) -> Optional[Parsed]:
    """Parse the inside of "( ... )"; text[start] is the opening paren.

    Returns the position of the first character no attribute claimed (the
    caller expects ")" there) and a dict of descriptor fields.
    """
    pos = skip_whitespace(text, start + 1, end)
    if pos >= end:
        return None

    # The first source may be a bare URL; later ones must carry a type,
    # otherwise a quoted title would be read as another destination.
    source = parse_media_source(text, pos, end, host)
    if source is None:
        url = _parse_url(text, pos, end, host)
        if url is None:
            return None
        source = Parsed(url.pos, Source(url.value))

    sources: List[Source] = []
    while source is not None:
        sources.append(source.value)
        pos = skip_whitespace(text, source.pos, end)
        source = parse_media_source(text, pos, end, host)

    fields = {
        "sources": tuple(sources),
        "title": None,
        "width": None,
        "height": None,
        "poster": None,
        "captions": [],
    }

    title = host.parse_link_title(text, pos, end) if pos < end else None
    if title is not None:
        fields["title"] = title.value
        pos = skip_whitespace(text, title.pos, end)

    # Each attribute needs whitespace before it.
    while pos < end and is_whitespace(text[pos - 1]):
        if fields["width"] is None:
            size = parse_media_size(text, pos, end)
            if size is not None:
                fields["width"], fields["height"] = size.value
                pos = skip_whitespace(text, size.pos, end)
                continue

        if fields["poster"] is None:
            poster = parse_media_poster(text, pos, end, host)
            if poster is not None:
                fields["poster"] = poster.value
                pos = skip_whitespace(text, poster.pos, end)
                continue

        caption = parse_media_caption(text, pos, end, host)
        if caption is not None:
            fields["captions"].append(caption.value)
            pos = skip_whitespace(text, caption.pos, end)
            continue

        break

    fields["captions"] = tuple(fields["captions"])
    return Parsed(pos, fields)


def _resolve_reference(text: str, label_start: int, label_end: int, end: int,
                       host: MarkupHost) -> Optional[Parsed]:
    label = text[label_start:label_end]
    key = label
    pos = skip_whitespace(text, label_end + 1, end)

    if char_at(text, pos, end) == "[":
        key_end = host.match_label(text, pos, end)
        if key_end >= 0:
            key = text[pos + 1:key_end]
            pos = key_end + 1
        else:
            pos = label_end + 1
    else:
        pos = label_end + 1

    # ![label][] and ![label] both fall back to the label itself
    if not key:
        key = label

    raw = host.lookup_reference(host.normalize_reference(key))
    if raw is None:
        return None
    entry = parse_reference_entry(raw)
    if entry is None:
        return None
    if not all(host.validate_link(url) for url in entry_urls(entry)):
        return None

    descriptor = MediaDescriptor(
        label=label,
        sources=entry.sources,
        title=entry.title,
        width=entry.width,
        height=entry.height,
        poster=entry.poster,
        captions=entry.captions,
    )
    return Parsed(pos, descriptor)


def parse_media(text: str, start: int, end: int, host: MarkupHost) -> Optional[Parsed]:
    """Parse one directive starting at text[start]; value is a MediaDescriptor."""
    if not expect(text, start, end, "!["):
        return None

    label_start = start + 2
    label_end = host.match_label(text, start + 1, end)
    if label_end < 0:
        return None

    pos = label_end + 1
    if char_at(text, pos, end) != "(":
        return _resolve_reference(text, label_start, label_end, end, host)

    args = parse_media_args(text, pos, end, host)
    if args is None:
        return None
    pos = args.pos

    if char_at(text, pos, end) != ")":
        return None

    descriptor = MediaDescriptor(label=text[label_start:label_end], **args.value)
    return Parsed(pos + 1, descriptor)
