"""Image uploads for templates."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from loguru import logger

from .errors import ImageTooLargeError, UnsupportedImageTypeError, UploadError

ALLOWED_IMAGE_EXTS: set[str] = {".jpg", ".jpeg", ".png", ".gif"}

MAX_UPLOAD_SIZE = 5 * 1024 * 1024  # 5 MiB


@dataclass
class UploadResult:
    url: str
    filename: str
    size: int


class ImageUploader:
    """Stores uploaded images under ``upload_dir``.

    Returned urls are relative (``<url_prefix>/<generated name>``); the
    exporter turns them into absolute urls.
    """

    def __init__(
        self,
        upload_dir: str | Path,
        url_prefix: str = "/uploads",
        max_size: int = MAX_UPLOAD_SIZE,
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_size = max_size

    def _unique_name(self, ext: str) -> str:
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}{ext}"

    def upload(self, data: bytes, original_filename: str) -> UploadResult:
        if not data:
            raise UploadError("No image file uploaded")
        ext = PurePosixPath(original_filename.replace("\\", "/")).suffix.lower()
        if ext not in ALLOWED_IMAGE_EXTS:
            raise UnsupportedImageTypeError(original_filename)
        if len(data) > self.max_size:
            raise ImageTooLargeError(len(data), self.max_size)

        name = self._unique_name(ext)
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            (self.upload_dir / name).write_bytes(data)
        except OSError as exc:
            raise UploadError(
                "Failed to upload image", {"filename": original_filename}) from exc
        url = f"{self.url_prefix}/{name}"
        logger.info(f"Uploaded {original_filename} as {url} ({len(data)} bytes)")
        return UploadResult(url=url, filename=name, size=len(data))

    def path_for(self, url: str) -> Path | None:
        """Map an uploaded url back to its file, or None if it is not ours."""

        prefix = self.url_prefix + "/"
        if not url.startswith(prefix):
            return None
        name = url[len(prefix):]
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            return None
        return self.upload_dir / name

    def discard(self, url: str) -> bool:
        path = self.path_for(url)
        if path is None or not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.warning(f"Could not remove uploaded image {path}: {exc}")
            return False
        logger.debug(f"Removed uploaded image {path}")
        return True
