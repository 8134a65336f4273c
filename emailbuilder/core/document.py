"""Serialization of template documents to and from stored text.

Stored text is JSON carrying the structured document plus the flat fields
older readers understand (``imageUrl``, ``styles``, ``imageStyles``).
Reading is total: anything that cannot be interpreted falls back to
defaults, and text that is not a JSON object is taken as a legacy
plain-text body.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Dict, Optional, Sequence, Tuple

from loguru import logger

from .models import (
    DEFAULT_IMAGE,
    DEFAULT_STYLES,
    SECTIONS,
    ImageDescriptor,
    SectionStyle,
    StoredTemplate,
    TemplateDocument,
    default_sections,
    default_styles,
)

DEFAULT_TITLE = "Untitled"

KeyPath = Tuple[str, ...]

# First available path wins. Empty strings count as unavailable.
SECTION_SOURCES: Dict[str, Sequence[KeyPath]] = {
    "header": (("layout", "header", "content"),),
    "content": (
        ("layout", "content", "content"),
        ("sections", "content"),
        ("content",),
    ),
    "footer": (("layout", "footer", "content"),),
}
IMAGE_SOURCES: Sequence[KeyPath] = (("layout", "image"), ("imageStyles",))
IMAGE_URL_SOURCES: Sequence[KeyPath] = (("imageUrl",), ("layout", "image", "url"))


def serialize(doc: TemplateDocument) -> str:
    styles = {name: doc.styles[name].to_dict() for name in SECTIONS}
    layout: Dict[str, object] = {
        name: {"content": doc.sections[name], "styles": styles[name]}
        for name in SECTIONS
    }
    layout["image"] = doc.image.to_dict()
    payload = {
        "title": doc.title,
        "sections": {name: doc.sections[name] for name in SECTIONS},
        "styles": styles,
        "image": doc.image.to_dict(),
        "imageStyles": doc.image.to_dict(include_url=False),
        "imageUrl": doc.image.url,
        "layout": layout,
    }
    return json.dumps(payload, ensure_ascii=False)


def _lookup(data: object, path: KeyPath) -> object:
    node = data
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _first_text(data: object, sources: Sequence[KeyPath]) -> Optional[str]:
    for path in sources:
        value = _lookup(data, path)
        if isinstance(value, str) and value:
            return value
    return None


def _first_mapping(data: object, sources: Sequence[KeyPath]) -> Optional[dict]:
    for path in sources:
        value = _lookup(data, path)
        if isinstance(value, dict):
            return value
    return None


def _resolve_styles(data: dict) -> Dict[str, SectionStyle]:
    parsed = data.get("styles")
    if not isinstance(parsed, dict):
        return default_styles()
    return {
        name: SectionStyle.from_dict(parsed.get(name), DEFAULT_STYLES[name])
        for name in SECTIONS
    }


def _legacy_document(
    text: str, legacy_image_url: Optional[str], title: Optional[str]
) -> TemplateDocument:
    sections = default_sections()
    sections["content"] = text
    return TemplateDocument(
        title=title or DEFAULT_TITLE,
        sections=sections,
        styles=default_styles(),
        image=ImageDescriptor(url=legacy_image_url or ""),
    )


def deserialize(
    text: str,
    legacy_image_url: Optional[str] = None,
    title: Optional[str] = None,
) -> TemplateDocument:
    """Rebuild a document from stored text. Never raises.

    ``legacy_image_url`` is the record-level image of the stored template,
    used when the text itself names none. ``title`` is used when the text
    carries no title of its own.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError):
        data = None
    if not isinstance(data, dict):
        logger.debug("Reading template content as legacy plain text")
        return _legacy_document(
            text if isinstance(text, str) else "", legacy_image_url, title)

    sections = {
        name: _first_text(data, sources) or ""
        for name, sources in SECTION_SOURCES.items()
    }

    image_data = _first_mapping(data, IMAGE_SOURCES)
    image = ImageDescriptor.from_dict(image_data) if image_data else DEFAULT_IMAGE
    url = _first_text(data, IMAGE_URL_SOURCES) or legacy_image_url or ""
    image = replace(image, url=url)

    parsed_title = data.get("title")
    if not isinstance(parsed_title, str) or not parsed_title:
        parsed_title = title or DEFAULT_TITLE

    return TemplateDocument(
        title=parsed_title,
        sections=sections,
        styles=_resolve_styles(data),
        image=image,
    )


def document_from_record(record: StoredTemplate) -> TemplateDocument:
    return deserialize(
        record.content,
        legacy_image_url=record.image_url or None,
        title=record.title or None,
    )
