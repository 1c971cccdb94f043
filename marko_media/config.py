from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from marko.helpers import normalize_label

from marko_media.errors import MediaConfigError
from marko_media.models import Category
from marko_media.references import ReferenceEntry, parse_reference_entry

logger = logging.getLogger(__name__)

ATTR_CATEGORIES = ("image", "audio", "video")
TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class MediaOptions:
    """
    controls: add a controls attribute to audio/video elements.
    attrs: extra attributes per category, applied after the built-in ones.
    references: structured reference entries keyed by normalized label.
    """
    controls: bool = False
    attrs: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    references: Mapping[str, ReferenceEntry] = field(default_factory=dict)

    def attrs_for(self, category: Category) -> Mapping[str, str]:
        # unknown media renders as an image, so it takes image attributes too
        key = "image" if category is Category.UNKNOWN else category.value
        return self.attrs.get(key, {})


def parse_attrs(raw: Any) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise MediaConfigError("attrs must be a mapping of category to attributes")
    attrs = {}
    for category, values in raw.items():
        if category not in ATTR_CATEGORIES:
            raise MediaConfigError(f"Unknown media category in attrs: {category!r}")
        if not isinstance(values, Mapping):
            raise MediaConfigError(f"attrs[{category!r}] must be a mapping")
        for name, value in values.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise MediaConfigError(f"attrs[{category!r}] must map strings to strings")
        attrs[category] = dict(values)
    return attrs


def parse_references(raw: Any) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise MediaConfigError("references must be a mapping of label to entry")
    references = {}
    for label, value in raw.items():
        entry = parse_reference_entry(value)
        if entry is None:
            raise MediaConfigError(f"Malformed reference entry for {label!r}")
        references[normalize_label(label)] = entry
    return references


def make_options(controls: bool = False, attrs: Any = None, references: Any = None) -> MediaOptions:
    if not isinstance(controls, bool):
        raise MediaConfigError("controls must be a boolean")
    return MediaOptions(
        controls=controls,
        attrs=parse_attrs(attrs),
        references=parse_references(references),
    )


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MediaConfigError(f"{what} is not valid JSON: {e}") from e


def load_options(environ: Optional[Mapping[str, str]] = None) -> MediaOptions:
    """Build options from MEDIA_CONTROLS, MEDIA_ATTRS and MEDIA_REFERENCES_FILE."""
    environ = os.environ if environ is None else environ

    controls = environ.get("MEDIA_CONTROLS", "").strip().lower() in TRUTHY

    attrs = None
    if environ.get("MEDIA_ATTRS"):
        attrs = _load_json(environ["MEDIA_ATTRS"], "MEDIA_ATTRS")

    references = None
    references_file = environ.get("MEDIA_REFERENCES_FILE")
    if references_file:
        path = Path(references_file)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MediaConfigError(f"Cannot read references file {path}: {e}") from e
        references = _load_json(text, str(path))

    options = make_options(controls=controls, attrs=attrs, references=references)
    logger.info(
        "Loaded media options: controls=%s, attrs for %s, %d references",
        options.controls,
        sorted(options.attrs) or "none",
        len(options.references),
    )
    return options
