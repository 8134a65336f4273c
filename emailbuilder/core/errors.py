"""Exception hierarchy for the email template builder."""

from __future__ import annotations

from typing import Any, Dict, Optional


class EmailBuilderError(Exception):
    """Base class for all errors raised by the builder."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class UpstreamFailure(EmailBuilderError):
    """A storage or upload collaborator could not complete a request."""


class StorageError(UpstreamFailure):
    pass


class TemplateNotFoundError(StorageError):
    def __init__(self, template_id: str):
        super().__init__(f"Template '{template_id}' not found")
        self.template_id = template_id


class UploadError(UpstreamFailure):
    pass


class UnsupportedImageTypeError(UploadError):
    def __init__(self, filename: str):
        super().__init__(
            "Only image files are allowed!", {"filename": filename})
        self.filename = filename


class ImageTooLargeError(UploadError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            "Image exceeds the upload size limit",
            {"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit
