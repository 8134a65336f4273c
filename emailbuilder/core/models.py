"""Data models for the email template builder."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

SECTIONS: Tuple[str, ...] = ("header", "content", "footer")
ALIGNMENTS: Tuple[str, ...] = ("left", "center", "right")

# (attribute, serialized key, css property) in declaration order
STYLE_PROPERTIES: Tuple[Tuple[str, str, str], ...] = (
    ("font_size", "fontSize", "font-size"),
    ("color", "color", "color"),
    ("background_color", "backgroundColor", "background-color"),
    ("padding", "padding", "padding"),
    ("text_align", "textAlign", "text-align"),
    ("font_family", "fontFamily", "font-family"),
    ("line_height", "lineHeight", "line-height"),
)


@dataclass(frozen=True)
class SectionStyle:
    """Typography and box settings for one section. Values are raw CSS."""

    font_size: str
    color: str
    background_color: str
    padding: str
    text_align: str
    font_family: str
    line_height: Optional[str] = None

    def declarations(self) -> List[Tuple[str, str]]:
        """Return ``(css property, value)`` pairs in the fixed order."""
        pairs: List[Tuple[str, str]] = []
        for attr, _key, prop in STYLE_PROPERTIES:
            value = getattr(self, attr)
            if value is None:
                continue
            pairs.append((prop, value))
        return pairs

    def to_dict(self) -> Dict[str, str]:
        payload: Dict[str, str] = {}
        for attr, key, _prop in STYLE_PROPERTIES:
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        return payload

    @classmethod
    def from_dict(cls, data: object, default: "SectionStyle") -> "SectionStyle":
        """Build a style from a parsed mapping, filling gaps from ``default``.

        An absent ``lineHeight`` stays absent; the other properties are
        always present and fall back to ``default``.
        """
        if not isinstance(data, dict):
            return default
        values: Dict[str, Optional[str]] = {}
        for attr, key, _prop in STYLE_PROPERTIES:
            if attr == "line_height" and key not in data:
                values[attr] = None
                continue
            raw = data.get(key)
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                raw = str(raw)
            values[attr] = raw if isinstance(raw, str) else getattr(default, attr)
        return cls(**values)  # type: ignore[arg-type]


DEFAULT_STYLES: Dict[str, SectionStyle] = {
    "header": SectionStyle(
        font_size="24px",
        color="#000000",
        background_color="transparent",
        padding="10px",
        text_align="left",
        font_family="Arial",
    ),
    "content": SectionStyle(
        font_size="16px",
        color="#333333",
        background_color="transparent",
        padding="15px",
        text_align="left",
        font_family="Arial",
        line_height="1.5",
    ),
    "footer": SectionStyle(
        font_size="14px",
        color="#666666",
        background_color="transparent",
        padding="10px",
        text_align="center",
        font_family="Arial",
    ),
}


@dataclass(frozen=True)
class ImageDescriptor:
    url: str = ""
    width: str = "100%"
    max_height: str = "300px"
    alignment: str = "center"

    def to_dict(self, include_url: bool = True) -> Dict[str, str]:
        payload = {
            "width": self.width,
            "maxHeight": self.max_height,
            "alignment": self.alignment,
        }
        if include_url:
            payload["url"] = self.url
        return payload

    @classmethod
    def from_dict(cls, data: object) -> "ImageDescriptor":
        default = DEFAULT_IMAGE
        if not isinstance(data, dict):
            return default

        def text(key: str, fallback: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) and value else fallback

        alignment = text("alignment", default.alignment)
        if alignment not in ALIGNMENTS:
            alignment = default.alignment
        return cls(
            url=text("url", ""),
            width=text("width", default.width),
            max_height=text("maxHeight", default.max_height),
            alignment=alignment,
        )


DEFAULT_IMAGE = ImageDescriptor()


def default_sections() -> Dict[str, str]:
    return {name: "" for name in SECTIONS}


def default_styles() -> Dict[str, SectionStyle]:
    return dict(DEFAULT_STYLES)


@dataclass(frozen=True)
class TemplateDocument:
    """One email template as edited, stored and exported.

    Documents are never changed in place; ``sections`` and ``styles`` are
    read-only mappings and the ``with_*`` helpers return a new document with
    one field replaced.
    """

    title: str = "Untitled"
    sections: Mapping[str, str] = field(default_factory=default_sections)
    styles: Mapping[str, SectionStyle] = field(default_factory=default_styles)
    image: ImageDescriptor = DEFAULT_IMAGE

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Template title must not be empty")
        if set(self.sections) != set(SECTIONS):
            raise ValueError(
                f"sections must have exactly the keys {SECTIONS}, got {sorted(self.sections)}")
        if set(self.styles) != set(SECTIONS):
            raise ValueError(
                f"styles must have exactly the keys {SECTIONS}, got {sorted(self.styles)}")
        if self.image.alignment not in ALIGNMENTS:
            raise ValueError(f"Unknown image alignment: {self.image.alignment}")
        # read-only views over private copies
        object.__setattr__(self, "sections", MappingProxyType(dict(self.sections)))
        object.__setattr__(self, "styles", MappingProxyType(dict(self.styles)))

    def __hash__(self) -> int:
        return hash((
            self.title,
            tuple(self.sections[name] for name in SECTIONS),
            tuple(self.styles[name] for name in SECTIONS),
            self.image,
        ))

    def with_title(self, title: str) -> "TemplateDocument":
        return replace(self, title=title)

    def with_section(self, section: str, markup: str) -> "TemplateDocument":
        _check_section(section)
        sections = dict(self.sections)
        sections[section] = markup
        return replace(self, sections=sections)

    def with_style(self, section: str, **changes: Optional[str]) -> "TemplateDocument":
        """Return a copy with some properties of one section's style changed.

        Keyword names are the ``SectionStyle`` attributes, e.g.
        ``doc.with_style("header", font_size="32px", color="#ff0000")``.
        """
        _check_section(section)
        styles = dict(self.styles)
        styles[section] = replace(styles[section], **changes)
        return replace(self, styles=styles)

    def with_image(self, **changes: str) -> "TemplateDocument":
        return replace(self, image=replace(self.image, **changes))

    @property
    def image_url(self) -> str:
        return self.image.url


def _check_section(section: str) -> None:
    if section not in SECTIONS:
        raise KeyError(f"Unknown section '{section}'")


@dataclass
class StoredTemplate:
    """A persisted template record. ``content`` is serialized document text."""

    id: str
    title: str
    content: str
    image_url: str = ""
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "imageUrl": self.image_url,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "StoredTemplate":
        created_raw = data.get("createdAt")
        try:
            created_at = datetime.fromisoformat(str(created_raw))
        except (TypeError, ValueError):
            created_at = datetime.fromtimestamp(0, timezone.utc)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        image_url = data.get("imageUrl")
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            content=str(data.get("content", "")),
            image_url=image_url if isinstance(image_url, str) else "",
            created_at=created_at,
        )
