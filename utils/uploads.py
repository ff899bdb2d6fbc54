"""Local checks applied to files before they are uploaded."""

from __future__ import annotations

from constants import ALLOWED_EXTENSIONS, ALLOWED_MIME_TYPES, MAX_FILE_SIZE
from errors import ValidationError
from models import DocumentFile


def is_allowed_type(file: DocumentFile) -> bool:
    """Return True when the MIME type or the file extension is accepted."""
    if file.content_type and file.content_type.split(";")[0].strip().lower() in ALLOWED_MIME_TYPES:
        return True
    return file.filename.lower().endswith(ALLOWED_EXTENSIONS)


def _format_limit(max_bytes: int) -> str:
    megabytes = max_bytes / (1024 * 1024)
    if megabytes >= 1 and megabytes == int(megabytes):
        return f"{int(megabytes)}MB"
    if megabytes >= 1:
        return f"{megabytes:.1f}MB"
    return f"{max_bytes} bytes"


def validate_upload(file: DocumentFile, *, max_bytes: int = MAX_FILE_SIZE) -> DocumentFile:
    """Raise ValidationError if the file may not be uploaded.

    Returns the file unchanged so the call can be chained.
    """
    if not file.filename:
        raise ValidationError("Filename is required")
    if not is_allowed_type(file):
        raise ValidationError("Invalid file type. Allowed: PDF, TXT, MD, DOCX")
    if file.size > max_bytes:
        raise ValidationError(f"File size must be less than {_format_limit(max_bytes)}")
    return file
