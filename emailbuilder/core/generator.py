"""HTML export of template documents."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List
from urllib.parse import urlparse

from jinja2 import DictLoader, Environment, select_autoescape
from loguru import logger

from .models import SECTIONS, ImageDescriptor, TemplateDocument

HTML_MIME_TYPE = "text/html"
FILENAME_SUFFIX = "-template.html"

BASE_CSS = """\
      body {
        margin: 0;
        padding: 0;
        font-family: Arial, sans-serif;
        background-color: #f5f5f5;
      }
      .container {
        max-width: 800px;
        margin: 40px auto;
        background: #ffffff;
        padding: 40px;
        border-radius: 8px;
        box-shadow: 0 2px 4px rgba(0,0,0,0.1);
      }
      .preview-container {
        background: #ffffff;
        border-radius: 4px;
      }"""

# Static overrides for rich-text editor markup classes and elements.
EMAIL_CLIENT_CSS = """\
      /* Editor alignment classes */
      .ql-align-center, [style*="text-align: center"] {
        text-align: center !important;
      }
      .ql-align-right, [style*="text-align: right"] {
        text-align: right !important;
      }
      .ql-align-left, [style*="text-align: left"] {
        text-align: left !important;
      }
      .ql-align-justify, [style*="text-align: justify"] {
        text-align: justify !important;
      }
      /* Font sizes */
      .ql-size-small {
        font-size: 0.75em !important;
      }
      .ql-size-large {
        font-size: 1.5em !important;
      }
      .ql-size-huge {
        font-size: 2.5em !important;
      }
      /* Headings */
      h1 { font-size: 2em !important; }
      h2 { font-size: 1.5em !important; }
      h3 { font-size: 1.17em !important; }
      h4 { font-size: 1em !important; }
      h5 { font-size: 0.83em !important; }
      h6 { font-size: 0.75em !important; }
      /* Indents */
      .ql-indent-1 { padding-left: 3em !important; }
      .ql-indent-2 { padding-left: 6em !important; }
      .ql-indent-3 { padding-left: 9em !important; }
      /* Rich text elements */
      p { margin: 0 0 1em 0; }
      strong { font-weight: bold !important; }
      em { font-style: italic !important; }
      u { text-decoration: underline !important; }
      s { text-decoration: line-through !important; }
      blockquote {
        border-left: 4px solid #ccc !important;
        margin: 1.5em 10px !important;
        padding: 0.5em 10px !important;
      }
      /* Lists */
      ul, ol {
        margin: 1em 0 !important;
        padding-left: 2em !important;
      }
      li {
        margin-bottom: 0.5em !important;
      }
      /* Links */
      a {
        color: #06c !important;
        text-decoration: underline !important;
      }
      /* Section children follow the section settings */
      .header *, .content *, .footer * {
        text-align: inherit !important;
        background-color: inherit !important;
        color: inherit !important;
        font-family: inherit !important;
        font-size: inherit !important;
        line-height: inherit !important;
      }
      /* Inline alignment inside markup follows the section too */
      [style*="text-align"] {
        text-align: inherit !important;
      }
      @media (max-width: 768px) {
        .container {
          margin: 20px;
          padding: 20px;
        }
      }"""

EMAIL_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
{{ base_css | safe }}
{% for rule in section_rules %}
      .{{ rule.name }} {
{% for prop, value in rule.declarations %}
        {{ prop }}: {{ value | safe }};
{% endfor %}
      }
{% endfor %}
{% if image %}
      .image-container {
        text-align: {{ image.alignment | safe }};
        margin: 20px 0;
      }
{% endif %}
{{ client_css | safe }}
    </style>
</head>
<body>
    <div class="container">
      <div class="preview-container">
{% for block in blocks %}
{% if block.kind == "image" %}
        <div class="image-container">
          <img src="{{ block.src }}" alt="Email Image" style="{{ block.style }}" />
        </div>
{% else %}
        <div class="{{ block.name }}">
          {{ block.markup | safe }}
        </div>
{% endif %}
{% endfor %}
      </div>
    </div>
</body>
</html>
"""

IMAGE_PLACEMENT: Dict[str, str] = {
    "center": "display: block; margin: 0 auto;",
    "left": "float: left; margin-right: 20px;",
    "right": "float: right; margin-left: 20px;",
}


@lru_cache(maxsize=None)
def _env() -> Environment:
    return Environment(
        loader=DictLoader({"email.html": EMAIL_TEMPLATE}),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def slugify(title: str) -> str:
    """Lower-case ``title`` and replace whitespace runs with hyphens."""

    return re.sub(r"\s+", "-", title.lower())


def suggested_filename(title: str) -> str:
    return slugify(title) + FILENAME_SUFFIX


def absolute_url(base_url: str, url: str) -> str:
    """Resolve an uploader-relative ``url`` against ``base_url``."""

    if not url or not base_url:
        return url
    if urlparse(url).scheme or url.startswith("//"):
        return url
    return base_url.rstrip("/") + "/" + url.lstrip("/")


def image_style(image: ImageDescriptor) -> str:
    parts = [f"width: {image.width};", f"max-height: {image.max_height};"]
    placement = IMAGE_PLACEMENT.get(image.alignment)
    if placement:
        parts.append(placement)
    return " ".join(parts)


def compile_html(doc: TemplateDocument, base_url: str = "") -> str:
    """Compile ``doc`` into a standalone HTML email document.

    Section markup is trusted and inserted verbatim. Style values are
    written out as given; nothing is validated.
    """

    section_rules: List[Dict[str, object]] = []
    blocks: List[Dict[str, str]] = []
    image = doc.image if doc.image.url else None

    for name in SECTIONS:
        markup = doc.sections[name]
        if not markup:
            continue
        section_rules.append(
            {"name": name, "declarations": doc.styles[name].declarations()})
        blocks.append({"kind": "section", "name": name, "markup": markup})
        if name == "header" and image is not None:
            blocks.append(_image_block(image, base_url))
    if image is not None and not doc.sections["header"]:
        blocks.insert(0, _image_block(image, base_url))

    template = _env().get_template("email.html")
    return template.render(
        title=doc.title,
        base_css=BASE_CSS,
        client_css=EMAIL_CLIENT_CSS,
        section_rules=section_rules,
        image=image,
        blocks=blocks,
    )


def _image_block(image: ImageDescriptor, base_url: str) -> Dict[str, str]:
    return {
        "kind": "image",
        "src": absolute_url(base_url, image.url),
        "style": image_style(image),
    }


def _local_filename(name: str) -> str:
    # path separators in a title must not leave output_dir
    return name.replace("/", "-").replace("\\", "-")


def export_html(doc: TemplateDocument, base_url: str, output_dir: str | Path) -> Path:
    """Write the compiled document to ``output_dir`` and return its path."""

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / _local_filename(suggested_filename(doc.title))
    target.write_text(compile_html(doc, base_url), encoding="utf-8")
    logger.info(f"Exported '{doc.title}' to {target}")
    return target
