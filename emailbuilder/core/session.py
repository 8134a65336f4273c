"""Editing session tying the document model to storage, uploads and export."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from loguru import logger

from .document import document_from_record, serialize
from .errors import UnsupportedImageTypeError, UpstreamFailure
from .generator import compile_html, export_html, suggested_filename
from .models import StoredTemplate, TemplateDocument
from .storage import TemplateStore
from .uploads import ImageUploader

SAVE_FAILED = "Failed to save template. Please try again."
LIST_FAILED = "Failed to fetch templates."
DELETE_FAILED = "Failed to delete template. Please try again."
UPLOAD_FAILED = "Failed to upload image. Please try again."
EXPORT_FAILED = "Failed to export template."
TITLE_REQUIRED = "Please enter a template title."


class EditorSession:
    """Holds the template being edited and the last user-visible error.

    Collaborator failures never discard the current document; they are
    logged and reported through ``error`` so the user can retry.
    """

    def __init__(
        self,
        store: TemplateStore,
        uploader: ImageUploader,
        base_url: str = "",
        document: Optional[TemplateDocument] = None,
    ) -> None:
        self.store = store
        self.uploader = uploader
        self.base_url = base_url
        self.document = document or TemplateDocument()
        # draft title as typed; may be empty while editing
        self.title = self.document.title
        self.templates: List[StoredTemplate] = []
        self.selected: Optional[StoredTemplate] = None
        self.error = ""

    # -- editing ---------------------------------------------------------

    def set_title(self, title: str) -> None:
        self.title = title
        if title:
            self.document = self.document.with_title(title)

    def set_section(self, section: str, markup: str) -> None:
        self.document = self.document.with_section(section, markup)

    def set_style(self, section: str, **changes: Optional[str]) -> None:
        self.document = self.document.with_style(section, **changes)

    def set_image(self, **changes: str) -> None:
        self.document = self.document.with_image(**changes)

    def reset(self) -> None:
        self.document = TemplateDocument()
        self.title = self.document.title
        self.selected = None
        self.error = ""

    # -- collaborators ---------------------------------------------------

    def _fail(self, message: str, exc: UpstreamFailure) -> None:
        logger.error(f"{message} ({exc})")
        self.error = message

    def refresh(self) -> List[StoredTemplate]:
        try:
            self.templates = self.store.list()
        except UpstreamFailure as exc:
            self._fail(LIST_FAILED, exc)
        else:
            self.error = ""
        return self.templates

    def save(self) -> Optional[StoredTemplate]:
        if not self.title:
            self.error = TITLE_REQUIRED
            return None
        doc = self.document
        try:
            record = self.store.save(doc.title, serialize(doc), doc.image.url)
        except UpstreamFailure as exc:
            self._fail(SAVE_FAILED, exc)
            return None
        self.error = ""
        self.selected = record
        self.refresh()
        return record

    def open(self, record: StoredTemplate) -> TemplateDocument:
        self.selected = record
        self.document = document_from_record(record)
        self.title = self.document.title
        self.error = ""
        return self.document

    def open_id(self, template_id: str) -> Optional[TemplateDocument]:
        try:
            record = self.store.get(template_id)
        except UpstreamFailure as exc:
            self._fail(LIST_FAILED, exc)
            return None
        return self.open(record)

    def delete(self, template_id: str) -> bool:
        try:
            self.store.delete(template_id)
        except UpstreamFailure as exc:
            self._fail(DELETE_FAILED, exc)
            return False
        self.templates = [t for t in self.templates if t.id != template_id]
        if self.selected is not None and self.selected.id == template_id:
            self.selected = None
        self.error = ""
        return True

    def upload_image(self, data: bytes, filename: str) -> Optional[str]:
        try:
            result = self.uploader.upload(data, filename)
        except UnsupportedImageTypeError as exc:
            self._fail(exc.message, exc)
            return None
        except UpstreamFailure as exc:
            self._fail(UPLOAD_FAILED, exc)
            return None
        self.set_image(url=result.url)
        self.error = ""
        return result.url

    # -- export ----------------------------------------------------------

    def preview(self) -> str:
        return compile_html(self.document, self.base_url)

    def download_name(self) -> str:
        return suggested_filename(self.document.title)

    def export(self, output_dir: str | Path) -> Optional[Path]:
        try:
            return export_html(self.document, self.base_url, output_dir)
        except OSError as exc:
            logger.error(f"{EXPORT_FAILED} ({exc})")
            self.error = EXPORT_FAILED
            return None
