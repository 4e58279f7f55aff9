"""Utility helpers package."""

from xenolexia.utils.exceptions import (
    ChapterProcessingCancelled,
    ChapterProcessingError,
    DatabaseError,
    DictionaryImportError,
    NoItemsToExportError,
    SchedulerIntegrityError,
    ValidationError,
    XenolexiaException,
)

__all__ = [
    "ChapterProcessingCancelled",
    "ChapterProcessingError",
    "DatabaseError",
    "DictionaryImportError",
    "NoItemsToExportError",
    "SchedulerIntegrityError",
    "ValidationError",
    "XenolexiaException",
]
