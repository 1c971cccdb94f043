"""Reference-table entries for ``![label][key]`` directives.

An entry is either a plain link (``DirectHref``), which is what a Markdown
``[key]: /url "title"`` definition gives, or a full description with several
sources (``StructuredDescriptor``), which only configuration can provide::

    {
        "sources": [{"href": "/song.webm", "type": "audio/webm"}, {"href": "/song.mp3"}],
        "title": "Song",
        "poster": "/cover.jpeg",
        "width": "640",
        "height": "360",
        "captions": [{"href": "/lyrics.vtt", "lang": "en", "label": "English"}],
    }

Anything else is rejected as a whole; fields are never dropped silently.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from marko_media.models import Caption, Source

logger = logging.getLogger(__name__)

_OPTIONAL_TEXT_FIELDS = ("title", "poster", "width", "height")


@dataclass(frozen=True)
class DirectHref:
    href: str
    title: Optional[str] = None
    poster: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    captions: Tuple[Caption, ...] = ()

    @property
    def sources(self) -> Tuple[Source, ...]:
        return (Source(self.href),)


@dataclass(frozen=True)
class StructuredDescriptor:
    sources: Tuple[Source, ...]
    title: Optional[str] = None
    poster: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    captions: Tuple[Caption, ...] = ()


ReferenceEntry = Union[DirectHref, StructuredDescriptor]


def _optional_str(raw: Mapping[str, Any], key: str) -> Tuple[bool, Optional[str]]:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return True, value
    return False, None


def _parse_sources(raw: Any) -> Optional[Tuple[Source, ...]]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence) or not raw:
        return None
    sources = []
    for item in raw:
        if not isinstance(item, Mapping) or not isinstance(item.get("href"), str):
            return None
        ok, mime_type = _optional_str(item, "type")
        if not ok:
            return None
        sources.append(Source(item["href"], mime_type))
    return tuple(sources)


def _parse_captions(raw: Any) -> Optional[Tuple[Caption, ...]]:
    if raw is None:
        return ()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        return None
    captions = []
    for item in raw:
        if not isinstance(item, Mapping):
            return None
        href, lang = item.get("href"), item.get("lang")
        if not isinstance(href, str) or not isinstance(lang, str) or not lang:
            return None
        ok, label = _optional_str(item, "label")
        if not ok:
            return None
        captions.append(Caption(href, lang, label))
    return tuple(captions)


def parse_reference_entry(raw: Any) -> Optional[ReferenceEntry]:
    """Validate a raw reference-table value, or return None if it has the wrong shape."""
    if isinstance(raw, (DirectHref, StructuredDescriptor)):
        return raw
    if not isinstance(raw, Mapping):
        return None

    extras = {}
    for key in _OPTIONAL_TEXT_FIELDS:
        ok, value = _optional_str(raw, key)
        if not ok:
            logger.debug("Reference entry rejected: %r is not a string", key)
            return None
        extras[key] = value

    captions = _parse_captions(raw.get("captions"))
    if captions is None:
        logger.debug("Reference entry rejected: malformed captions")
        return None

    href = raw.get("href")
    if isinstance(href, str):
        return DirectHref(href, captions=captions, **extras)
    if href is not None:
        return None

    sources = _parse_sources(raw.get("sources"))
    if sources is None:
        logger.debug("Reference entry rejected: needs href or a non-empty sources list")
        return None
    return StructuredDescriptor(sources, captions=captions, **extras)


def entry_urls(entry: ReferenceEntry):
    """Every URL an entry would put into the output."""
    for source in entry.sources:
        yield source.href
    if entry.poster:
        yield entry.poster
    for caption in entry.captions:
        yield caption.href
