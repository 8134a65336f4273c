"""File-backed store for saved email templates."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from loguru import logger

from .errors import StorageError, TemplateNotFoundError
from .models import StoredTemplate

if TYPE_CHECKING:
    from .uploads import ImageUploader


class TemplateStore:
    """Persistent list of templates kept in a single JSON file.

    Every call reads the file again, so a list issued after a save always
    observes it, including saves made through another store on the same file.
    """

    def __init__(self, path: str | Path,
                 uploader: Optional["ImageUploader"] = None) -> None:
        self.path = Path(path)
        self.uploader = uploader

    def _load(self) -> List[StoredTemplate]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(
                "Failed to read templates", {"path": str(self.path)}) from exc
        if not isinstance(data, list):
            raise StorageError(
                "Template store is corrupt", {"path": str(self.path)})
        records = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning(
                    f"Skipping malformed template entry {index} in {self.path}")
                continue
            records.append(StoredTemplate.from_dict(item))
        return records

    def _write(self, records: List[StoredTemplate]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(
                json.dumps([r.to_dict() for r in records],
                           indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            tmp.replace(self.path)
        except OSError as exc:
            raise StorageError(
                "Failed to write templates", {"path": str(self.path)}) from exc

    def save(self, title: str, content: str, image_url: str = "") -> StoredTemplate:
        if not title:
            raise StorageError("Template title is required")
        records = self._load()
        record = StoredTemplate(
            id=uuid.uuid4().hex,
            title=title,
            content=content,
            image_url=image_url or "",
            created_at=datetime.now(timezone.utc),
        )
        records.append(record)
        self._write(records)
        logger.info(f"Saved template '{title}' as {record.id}")
        return record

    def list(self) -> List[StoredTemplate]:
        """Return all templates, newest first."""

        indexed = sorted(enumerate(self._load()),
                         key=lambda pair: (pair[1].created_at, pair[0]),
                         reverse=True)
        return [record for _index, record in indexed]

    def get(self, template_id: str) -> StoredTemplate:
        for record in self._load():
            if record.id == template_id:
                return record
        raise TemplateNotFoundError(template_id)

    def delete(self, template_id: str) -> None:
        records = self._load()
        remaining = [r for r in records if r.id != template_id]
        if len(remaining) == len(records):
            raise TemplateNotFoundError(template_id)
        removed = next(r for r in records if r.id == template_id)
        self._write(remaining)
        if removed.image_url and self.uploader is not None:
            self.uploader.discard(removed.image_url)
        logger.info(f"Deleted template {template_id}")
