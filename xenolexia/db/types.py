"""Custom database column types for cross-database compatibility."""
from __future__ import annotations

import json
from typing import Any, Iterable

from sqlalchemy.dialects.postgresql import ARRAY as PG_ARRAY
from sqlalchemy.types import Text, TypeDecorator


def _clean(values: Iterable[Any]) -> list[str]:
    cleaned: list[str] = []
    for value in values:
        text = str(value).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


class StringList(TypeDecorator):
    """Persist an ordered list of strings across PostgreSQL and SQLite.

    Blank and repeated items are dropped on write; order is preserved so the
    variant list of a word entry reads back exactly as it was declared.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_ARRAY(Text))
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return None
        if isinstance(value, str):
            value = json.loads(value) if value.startswith("[") else [value]
        items = _clean(value)
        if dialect.name == "postgresql":
            return items
        return json.dumps(items, ensure_ascii=False)

    def process_result_value(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return []
        if dialect.name == "postgresql":
            return list(value)
        try:
            decoded = json.loads(value)
        except (TypeError, ValueError):
            return []
        return decoded if isinstance(decoded, list) else []
