"""
Validation utilities for quick-apply input.
"""
import re
from pathlib import Path
from typing import Any

from .error_handlers import FileUploadError, ValidationError, get_error_message

ALLOWED_RESUME_EXTENSIONS = {".pdf", ".doc", ".docx"}
TRACK_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{16,128}$")


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str) or not email.strip():
        raise ValidationError("Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise ValidationError("Email too long (max 255 characters)")

    # Basic email regex
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    if not re.match(pattern, email):
        raise ValidationError("Invalid email format")

    return email


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise ValidationError(f"{field_name} is required")

    if not required and not value:
        return ""

    if len(value) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if len(value) > max_length:
        raise ValidationError(f"{field_name} must not exceed {max_length} characters")

    if pattern and not re.match(pattern, value):
        raise ValidationError(f"{field_name} format is invalid")

    return value


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent directory traversal and other attacks."""
    if not filename:
        raise FileUploadError("Filename is required")

    # Remove any path separators
    filename = filename.replace("/", "_").replace("\\", "_")

    # Remove any null bytes
    filename = filename.replace("\x00", "")

    # Remove directory traversal sequences
    filename = filename.replace("..", "_")

    # Remove leading dots to prevent hidden files
    filename = filename.lstrip(".")

    if len(filename) > 255:
        raise FileUploadError("Filename too long")

    if not filename or filename == "_":
        raise FileUploadError("Invalid filename")

    return filename


def validate_resume_extension(filename: str) -> str:
    ext = Path(filename).suffix.lower()
    if ext and ext not in ALLOWED_RESUME_EXTENSIONS:
        raise FileUploadError(get_error_message("invalid_file_type"))
    return ext


def is_well_formed_track_token(token: Any) -> bool:
    return isinstance(token, str) and bool(TRACK_TOKEN_PATTERN.match(token))
