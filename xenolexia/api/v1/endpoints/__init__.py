"""API endpoint modules for v1."""

from xenolexia.api.v1.endpoints import chapters, dictionary, vocabulary

__all__ = [
    "chapters",
    "dictionary",
    "vocabulary",
]
