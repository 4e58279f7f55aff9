"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from loguru import logger


class XenolexiaException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DatabaseError(XenolexiaException):
    """Database operation errors."""
    pass


class ValidationError(XenolexiaException):
    """Data validation errors."""
    pass


class DictionaryImportError(XenolexiaException):
    """Raised when a dictionary source cannot be read at all."""
    pass


class ChapterProcessingError(XenolexiaException):
    """Chapter content could not be turned into a reader payload."""
    pass


class ChapterProcessingCancelled(ChapterProcessingError):
    """A newer chapter or configuration superseded an in-flight run."""
    pass


class SchedulerIntegrityError(XenolexiaException, ValueError):
    """A stored review state violates the scheduler invariants."""
    pass


class NoItemsToExportError(XenolexiaException):
    """The export filter matched no vocabulary items."""

    def __init__(self, message: str = "No vocabulary items match the export criteria", details=None):
        super().__init__(message, details)


def handle_database_error(error: Exception) -> HTTPException:
    """Handle database errors and return appropriate HTTP response."""
    logger.error(f"Database error: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database operation failed. Please try again later."
    )


def handle_validation_error(error: ValidationError) -> HTTPException:
    """Handle validation errors."""
    logger.warning(f"Validation error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "message": error.message,
            "details": error.details
        }
    )


def handle_chapter_processing_error(error: ChapterProcessingError) -> HTTPException:
    """Handle chapter processing failures."""
    logger.error(f"Chapter processing error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "message": error.message,
            "details": error.details
        }
    )


def handle_scheduler_error(error: SchedulerIntegrityError) -> HTTPException:
    """Handle corrupted review state."""
    logger.error(f"Scheduler integrity error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=error.message
    )


def handle_export_error(error: NoItemsToExportError) -> HTTPException:
    """Handle exports that matched nothing."""
    logger.info(f"Export skipped: {error.message}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message
    )
