import pytest

from marko_media.media_type import category_from_href, classify, media_subtype
from marko_media.models import Category, Source


@pytest.mark.parametrize(
    "href,expected",
    [
        ("/cover.png", Category.IMAGE),
        ("/cover.JPEG", Category.IMAGE),
        ("https://example.com/clip.webm", Category.VIDEO),
        ("/song.mp3?v=2#t=10", Category.AUDIO),
        ("/song.mp3.txt", None),
        ("/archive.tar.gz", None),
        ("/noext", None),
        ("mp3", None),
        ("webm", None),
        ("/media.mp4/clip", None),
        ("clip.webm", Category.VIDEO),
        ("https://example.com", None),
        ("http://[::1/a.mp4", None),
    ],
)
def test_category_from_href(href, expected):
    assert category_from_href(href) == expected


def test_explicit_type_beats_extensions():
    sources = [Source("/a.mp4"), Source("/b.ogg", "audio/ogg")]
    assert classify(sources) is Category.AUDIO


def test_first_explicit_type_wins():
    sources = [Source("/a", "video/webm"), Source("/b", "audio/ogg")]
    assert classify(sources) is Category.VIDEO


def test_unrecognized_type_falls_back_to_extension():
    sources = [Source("/a.ogv", "application/ogg")]
    assert classify(sources) is Category.VIDEO


def test_first_known_extension_wins():
    sources = [Source("/readme.txt"), Source("/a.flac"), Source("/a.png")]
    assert classify(sources) is Category.AUDIO


def test_unknown():
    assert classify([Source("/file.txt")]) is Category.UNKNOWN


@pytest.mark.parametrize(
    "mime_type,expected",
    [
        ("video/mp4", "mp4"),
        ("audio/webm; codecs=opus", "webm"),
        ("audio/webm ;codecs=opus", "webm"),
        (None, ""),
        ("", ""),
    ],
)
def test_media_subtype(mime_type, expected):
    assert media_subtype(mime_type) == expected
