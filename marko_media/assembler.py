from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from marko_media.config import MediaOptions
from marko_media.host import MarkupHost
from marko_media.media_type import media_subtype
from marko_media.models import (
    Category,
    LinkNode,
    MediaDescriptor,
    MediaNode,
    SourceNode,
    TextNode,
    TrackNode,
)


def _set_if(attrs: Dict[str, str], name: str, value: Optional[str]) -> None:
    if value:
        attrs[name] = value


def assemble_image(media: MediaDescriptor, label_children: List[Any],
                   extra_attrs: Mapping[str, str], category: Category = Category.IMAGE) -> MediaNode:
    # alt stays empty here; the renderer takes it from the label children
    attrs = {"src": media.sources[0].href, "alt": ""}
    _set_if(attrs, "title", media.title)
    _set_if(attrs, "width", media.width)
    _set_if(attrs, "height", media.height)
    attrs.update(extra_attrs)
    return MediaNode(category, "img", attrs, tuple(label_children))


def media_tag(media: MediaDescriptor, category: Category) -> str:
    # <audio> can't show a poster or captions but <video> plays audio just fine
    if category is Category.AUDIO and (media.poster or media.captions):
        return "video"
    return category.value


def assemble_playable(media: MediaDescriptor, category: Category, label_children: List[Any],
                      extra_attrs: Mapping[str, str], controls: bool = False) -> MediaNode:
    tag = media_tag(media, category)
    children: List[Any] = []

    for source in media.sources:
        attrs = {"src": source.href}
        _set_if(attrs, "type", source.mime_type)
        children.append(SourceNode(attrs))

    for caption in media.captions:
        attrs = {"src": caption.href, "srclang": caption.language_tag}
        _set_if(attrs, "label", caption.label)
        attrs["kind"] = "captions"
        children.append(TrackNode(attrs))

    children.extend(label_children)

    # Fallback for browsers that can't play any of the sources
    for source in media.sources:
        subtype = media_subtype(source.mime_type)
        text = f"Download {subtype} {category.value}" if subtype else f"Download {category.value}"
        children.append(TextNode(" "))
        children.append(LinkNode(source.href, (TextNode(text),)))
    children.append(TextNode("."))

    attrs: Dict[str, str] = {}
    if controls:
        attrs["controls"] = ""
    _set_if(attrs, "title", media.title)
    if tag != "audio":
        _set_if(attrs, "width", media.width)
        _set_if(attrs, "height", media.height)
        _set_if(attrs, "poster", media.poster)
    attrs.update(extra_attrs)

    return MediaNode(category, tag, attrs, tuple(children))


def assemble(media: MediaDescriptor, category: Category, options: MediaOptions,
             host: MarkupHost) -> MediaNode:
    """Turn a parsed directive into the node to render, expanding the label through host."""
    label_children = host.parse_inline(media.label) if media.label else []
    extra_attrs = options.attrs_for(category)

    if category in (Category.IMAGE, Category.UNKNOWN):
        return assemble_image(media, label_children, extra_attrs, category)
    return assemble_playable(media, category, label_children, extra_attrs, options.controls)
