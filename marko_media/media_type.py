from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import urlsplit

from marko_media.models import Category, Source

EXTENSION_CATEGORIES = {
    "bmp": Category.IMAGE,   # Bitmap
    "gif": Category.IMAGE,
    "jpg": Category.IMAGE,
    "jpeg": Category.IMAGE,
    "png": Category.IMAGE,
    "svg": Category.IMAGE,
    "tif": Category.IMAGE,
    "tiff": Category.IMAGE,
    "webp": Category.IMAGE,

    "avi": Category.VIDEO,   # Audio Video Interleave
    "m4v": Category.VIDEO,   # iTunes video
    "mkv": Category.VIDEO,   # Matroska
    "mov": Category.VIDEO,   # QuickTime
    "mpg": Category.VIDEO,
    "mp4": Category.VIDEO,
    "ogv": Category.VIDEO,
    "webm": Category.VIDEO,
    "wmv": Category.VIDEO,

    "aac": Category.AUDIO,
    "flac": Category.AUDIO,
    "m4a": Category.AUDIO,
    "mp3": Category.AUDIO,
    "oga": Category.AUDIO,
    "ogg": Category.AUDIO,
    "wav": Category.AUDIO,
}

TYPE_PREFIXES = {
    "image": Category.IMAGE,
    "audio": Category.AUDIO,
    "video": Category.VIDEO,
}


def category_from_mime_type(mime_type: Optional[str]) -> Optional[Category]:
    if not mime_type:
        return None
    prefix = mime_type.split("/", 1)[0]
    return TYPE_PREFIXES.get(prefix)


def category_from_href(href: str) -> Optional[Category]:
    """Guess from the file extension of the URL path: /song.mp3?v=2 is audio."""
    try:
        path = urlsplit(href).path
    except ValueError:  # unbalanced IPv6 brackets
        return None
    # a bare "mp3" is a file called mp3, not an extension
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return None
    extension = name.rsplit(".", 1)[-1].lower()
    return EXTENSION_CATEGORIES.get(extension)


def classify(sources: Iterable[Source]) -> Category:
    """
    Decide whether a set of sources is an image, audio or video.

    An explicit type on any source wins over every file extension; among
    several candidates the first source in order decides.
    """
    sources = list(sources)

    for source in sources:
        category = category_from_mime_type(source.mime_type)
        if category:
            return category

    for source in sources:
        category = category_from_href(source.href)
        if category:
            return category

    return Category.UNKNOWN


def media_subtype(mime_type: Optional[str]) -> str:
    """The part between "/" and any ";" parameters: audio/webm; codecs=opus -> webm."""
    if not mime_type or "/" not in mime_type:
        return ""
    return mime_type.split("/", 1)[1].split(";", 1)[0].strip()
