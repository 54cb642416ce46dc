"""
Centralized error handling and user-friendly error messages.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from .. import config

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Bad or missing caller input."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or get_error_message("not_found"), status_code=404, details=details)


class FileUploadError(AppError):
    """File upload error."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class FileTooLargeError(AppError):
    def __init__(self, message: str | None = None, details: dict | None = None, *, limit_bytes: int | None = None):
        if message is None:
            limit = config.MAX_RESUME_BYTES if limit_bytes is None else limit_bytes
            message = get_error_message("file_too_large").format(limit=format_size(limit))
        super().__init__(message, status_code=413, details=details)


class DuplicateApplicationError(AppError):
    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or get_error_message("already_applied"), status_code=409, details=details)


class StorageError(AppError):
    """Artifact write failure. Fatal for the current submission."""
    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or get_error_message("storage_failed"), status_code=500, details=details)


class PersistenceError(AppError):
    """Record store failure. Fatal, never retried automatically."""
    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(message, status_code=500, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # File uploads
    "file_required": "Please attach your resume.",
    "file_empty": "The uploaded resume is empty.",
    "file_too_large": "File is too large. Maximum size is {limit}.",
    "invalid_file_type": "Invalid file type. Please upload a PDF, DOC or DOCX file.",
    "storage_failed": "We could not store your resume. Please try again.",

    # Jobs
    "job_not_found": "Job posting not found or has been removed.",

    # Applications
    "already_applied": "You have already applied to this job.",
    "application_not_found": "Application not found. Please check your tracking link.",
    "application_failed": "Failed to submit application. Please try again.",
    "track_params_required": "token and email required",

    # General
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def format_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024 and num_bytes % (1024 * 1024) == 0:
        return f"{num_bytes // (1024 * 1024)}MB"
    if num_bytes >= 1024 and num_bytes % 1024 == 0:
        return f"{num_bytes // 1024}KB"
    return f"{num_bytes} bytes"


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
        "status_code": status_code,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return create_error_response(exc.status_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTPException with user-friendly messages."""
    return create_error_response(exc.status_code, exc.detail)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed requests (wrong field types, non-file `resume`) get the standard error body."""
    logger.info(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return create_error_response(
        400,
        get_error_message("validation_error"),
        {"errors": jsonable_encoder(exc.errors())},
    )


async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
    """Handle database operational errors."""
    logger.exception("Database OperationalError: %s", exc)
    return create_error_response(503, get_error_message("database_error"))


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general database errors."""
    logger.exception("Database SQLAlchemyError: %s", exc)
    return create_error_response(500, get_error_message("database_error"))


async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors globally."""
    logger.exception("Unhandled exception: %s", exc)
    return create_error_response(500, get_error_message("server_error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(OperationalError, sqlalchemy_operational_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
