from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional, Tuple


class Parsed(NamedTuple):
    """A successful sub-parse: the position after the match and its value."""
    pos: int
    value: Any


class Category(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Source:
    href: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Caption:
    href: str
    language_tag: str
    label: Optional[str] = None


@dataclass(frozen=True)
class MediaDescriptor:
    """
    Everything a single directive says about the media it embeds.

    width and height are either both None or both set; one side may be ""
    when only half of a size pair was written (=800x).
    """
    label: str
    sources: Tuple[Source, ...]
    title: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    poster: Optional[str] = None
    captions: Tuple[Caption, ...] = ()


@dataclass(frozen=True)
class TextNode:
    content: str


@dataclass(frozen=True)
class LinkNode:
    href: str
    children: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SourceNode:
    attrs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TrackNode:
    attrs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MediaNode:
    """
    The element a directive turns into.

    category is what the sources are; tag is what gets emitted (an audio
    category can carry a video tag). children mixes the node types above with
    whatever the host produced for the label.
    """
    category: Category
    tag: str
    attrs: Mapping[str, str]
    children: Tuple[Any, ...] = ()
