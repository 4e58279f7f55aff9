"""Parse dictionary files into raw rows for ``TranslationIndex.bulk_import``.

Supported sources:

* JSON: a list of objects, or an object with an ``entries`` list.
* CSV / TSV: a header row naming the columns (``source_word``/``source``,
  ``target_word``/``target``, ``part_of_speech``, ``frequency_rank``,
  ``proficiency``, ``variants``, ``pronunciation``), or two or more
  headerless columns read as source, target, part of speech, rank.
* Frequency lists: one ``word [count]`` per line, most frequent first. They
  carry no translations, so they only supply ranks to rows from another
  source via :func:`apply_frequency_ranks`.
"""
from __future__ import annotations

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from xenolexia.utils.exceptions import DictionaryImportError

KNOWN_COLUMNS = {
    "id",
    "source",
    "source_word",
    "word",
    "target",
    "target_word",
    "translation",
    "part_of_speech",
    "pos",
    "frequency_rank",
    "rank",
    "proficiency",
    "proficiency_level",
    "variants",
    "pronunciation",
}

POSITIONAL_COLUMNS = ("source_word", "target_word", "part_of_speech", "frequency_rank", "pronunciation")

FORMATS = {".json": "json", ".csv": "csv", ".tsv": "tsv", ".tab": "tsv", ".txt": "tsv"}

# JSON exports from other tools use camelCase keys
_CAMEL_KEYS = {
    "sourceWord": "source_word",
    "targetWord": "target_word",
    "partOfSpeech": "part_of_speech",
    "frequencyRank": "frequency_rank",
    "proficiencyLevel": "proficiency_level",
}


def _normalise_key(key: Any) -> str:
    text = str(key or "").strip()
    text = _CAMEL_KEYS.get(text, text)
    return text.lower().replace(" ", "_").replace("-", "_")


def parse_json(content: str) -> list[dict[str, Any]]:
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise DictionaryImportError("Invalid JSON dictionary", {"error": str(exc)}) from exc

    if isinstance(payload, dict):
        payload = payload.get("entries", payload.get("words"))
    if not isinstance(payload, list):
        raise DictionaryImportError("JSON dictionary must be a list of entries")

    rows: list[dict[str, Any]] = []
    for item in payload:
        if isinstance(item, dict):
            rows.append({_normalise_key(k): v for k, v in item.items()})
        else:
            # Keep a placeholder so row numbers in error messages stay aligned
            rows.append({})
    return rows


def parse_delimited(content: str, delimiter: str = ",") -> list[dict[str, Any]]:
    """Parse CSV/TSV text, with or without a header row."""

    reader = csv.reader(StringIO(content.lstrip("\ufeff")), delimiter=delimiter)
    records = [record for record in reader if any(cell.strip() for cell in record)]
    if not records:
        return []

    header = [_normalise_key(cell) for cell in records[0]]
    if KNOWN_COLUMNS.intersection(header):
        columns, body = header, records[1:]
    else:
        columns, body = list(POSITIONAL_COLUMNS), records

    rows = []
    for record in body:
        row = {}
        for column, value in zip(columns, record):
            if column:
                row[column] = value.strip()
        rows.append(row)
    return rows


def parse_frequency_list(content: str) -> dict[str, int]:
    """Map each word to its 1-based rank; blank and ``#`` lines are ignored."""

    ranks: dict[str, int] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        word = line.split()[0].lower()
        # Repeated words keep their first rank and do not shift later ones
        if word not in ranks:
            ranks[word] = len(ranks) + 1
    return ranks


def apply_frequency_ranks(rows: Iterable[dict[str, Any]], ranks: dict[str, int]) -> list[dict[str, Any]]:
    """Fill in missing ranks from a frequency list; unknown words are left alone."""

    ranked = []
    for row in rows:
        row = dict(row)
        source = str(row.get("source_word") or row.get("source") or row.get("word") or "").lower()
        if not row.get("frequency_rank") and not row.get("rank") and source in ranks:
            row["frequency_rank"] = ranks[source]
        ranked.append(row)
    return ranked


def parse_dictionary(content: str, fmt: str) -> list[dict[str, Any]]:
    fmt = fmt.lower()
    if fmt == "json":
        return parse_json(content)
    if fmt == "csv":
        return parse_delimited(content, ",")
    if fmt == "tsv":
        return parse_delimited(content, "\t")
    raise DictionaryImportError(f"Unsupported dictionary format: {fmt}", {"format": fmt})


def detect_format(path: Path) -> str:
    try:
        return FORMATS[path.suffix.lower()]
    except KeyError:
        raise DictionaryImportError(
            f"Cannot infer dictionary format from '{path.name}'", {"path": str(path)}
        ) from None


def load_dictionary_file(path: str | Path, fmt: str | None = None) -> list[dict[str, Any]]:
    """Read and parse a dictionary file into raw rows."""

    path = Path(path)
    fmt = fmt or detect_format(path)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise DictionaryImportError(f"Failed to read {path}", {"error": str(exc)}) from exc
    rows = parse_dictionary(content, fmt)
    logger.info(f"Parsed {len(rows)} dictionary rows from {path.name} ({fmt})")
    return rows


def load_frequency_file(path: str | Path) -> dict[str, int]:
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise DictionaryImportError(f"Failed to read {path}", {"error": str(exc)}) from exc
    return parse_frequency_list(content)
