"""Vocabulary export to CSV, Anki flashcard TSV and JSON backups."""
from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path
from typing import Any, Iterable, Literal, Sequence

from loguru import logger

from xenolexia.core.srs.sm2 import ensure_timezone
from xenolexia.utils.exceptions import NoItemsToExportError, ValidationError

ExportFormat = Literal["csv", "anki", "json"]

EXPORT_FORMAT_ID = "xenolexia-vocabulary-v1"

EXTENSIONS = {"csv": "csv", "anki": "txt", "json": "json"}
MIME_TYPES = {"csv": "text/csv", "anki": "text/tab-separated-values", "json": "application/json"}

ANKI_HEADER = "#separator:tab\n#html:true\n#tags column:3\n"


@dataclass(slots=True)
class ExportOptions:
    format: ExportFormat = "csv"
    include_context: bool = True
    include_book_info: bool = True
    include_srs_data: bool = False
    statuses: Sequence[str] = ()
    source_lang: str | None = None
    target_lang: str | None = None


@dataclass(slots=True)
class ExportResult:
    content: str
    filename: str
    item_count: int
    mime_type: str
    path: Path | None = field(default=None)


def suggested_filename(fmt: ExportFormat, now: datetime | None = None) -> str:
    """Default name offered to the user when saving an export."""

    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
    names = {
        "csv": f"xenolexia_vocabulary_{stamp}.csv",
        "anki": f"xenolexia_anki_{stamp}.txt",
        "json": f"xenolexia_backup_{stamp}.json",
    }
    return names.get(fmt, f"xenolexia_export_{stamp}")


def _iso(moment: datetime | None) -> str | None:
    return ensure_timezone(moment).isoformat() if moment else None


def _flashcard_field(value: str) -> str:
    # Tabs and newlines would break the column layout Anki expects
    return " ".join(str(value).replace("\t", " ").splitlines())


class ExportService:
    """Serialise a filtered vocabulary list; optionally write it to disk."""

    def __init__(self, export_dir: str | Path | None = None):
        self.export_dir = Path(export_dir) if export_dir else None

    @staticmethod
    def filter_items(items: Iterable[Any], options: ExportOptions) -> list[Any]:
        selected = []
        for item in items:
            if options.statuses and item.status not in options.statuses:
                continue
            if options.source_lang and item.source_lang != options.source_lang:
                continue
            if options.target_lang and item.target_lang != options.target_lang:
                continue
            selected.append(item)
        return selected

    def export(
        self,
        items: Iterable[Any],
        options: ExportOptions,
        *,
        now: datetime | None = None,
        write: bool = False,
    ) -> ExportResult:
        """Render the items matching ``options``.

        Raises:
            NoItemsToExportError: when the filters leave nothing to export.
            ValidationError: for an unknown format.
        """
        if options.format not in EXTENSIONS:
            raise ValidationError("Unsupported export format", {"format": options.format})

        selected = self.filter_items(items, options)
        if not selected:
            raise NoItemsToExportError()

        now = ensure_timezone(now) if now else datetime.now(timezone.utc)
        if options.format == "csv":
            content = self.to_csv(selected, options)
        elif options.format == "anki":
            content = self.to_anki(selected, options)
        else:
            content = self.to_json(selected, options, now=now)

        result = ExportResult(
            content=content,
            filename=f"xenolexia_vocabulary_{now.strftime('%Y-%m-%d_%H%M')}.{EXTENSIONS[options.format]}",
            item_count=len(selected),
            mime_type=MIME_TYPES[options.format],
        )
        if write:
            result.path = self.write(result)
        logger.info(f"Exported {result.item_count} vocabulary items as {options.format}")
        return result

    def write(self, result: ExportResult) -> Path:
        if self.export_dir is None:
            raise ValidationError("No export directory configured")
        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = self.export_dir / result.filename
        path.write_text(result.content, encoding="utf-8")
        return path

    @staticmethod
    def to_csv(items: Sequence[Any], options: ExportOptions) -> str:
        headers = ["source_word", "target_word", "source_language", "target_language"]
        if options.include_context:
            headers.append("context_sentence")
        if options.include_book_info:
            headers.append("book_title")
        if options.include_srs_data:
            headers.extend(["status", "review_count", "ease_factor", "interval", "added_at"])

        buffer = StringIO()
        # QUOTE_MINIMAL quotes exactly the fields holding a comma, quote or newline
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(headers)
        for item in items:
            row = [item.source_word, item.target_word, item.source_lang, item.target_lang]
            if options.include_context:
                row.append(item.context_sentence or "")
            if options.include_book_info:
                row.append(item.book_title or "")
            if options.include_srs_data:
                row.extend(
                    [
                        item.status,
                        str(item.review_count),
                        f"{item.ease_factor:.2f}",
                        str(item.interval),
                        ensure_timezone(item.added_at).strftime("%Y-%m-%d") if item.added_at else "",
                    ]
                )
            writer.writerow(row)
        return buffer.getvalue().rstrip("\n")

    @staticmethod
    def to_anki(items: Sequence[Any], options: ExportOptions) -> str:
        """Front is the foreign word, back the original plus optional context."""

        rows = []
        for item in items:
            back = item.source_word
            if options.include_context and item.context_sentence:
                back += f'<br><br><i>"{item.context_sentence}"</i>'
            if options.include_book_info and item.book_title:
                back += f"<br><small>From: {item.book_title}</small>"
            tags = f"{item.source_lang}-{item.target_lang} {item.status}"
            rows.append(
                "\t".join([_flashcard_field(item.target_word), _flashcard_field(back), tags])
            )
        return ANKI_HEADER + "\n".join(rows)

    @staticmethod
    def to_json(items: Sequence[Any], options: ExportOptions, *, now: datetime) -> str:
        exported = []
        for item in items:
            entry: dict[str, Any] = {
                "sourceWord": item.source_word,
                "targetWord": item.target_word,
                "sourceLanguage": item.source_lang,
                "targetLanguage": item.target_lang,
            }
            if options.include_context and item.context_sentence:
                entry["contextSentence"] = item.context_sentence
            if options.include_book_info:
                entry["bookId"] = item.book_id
                entry["bookTitle"] = item.book_title
            if options.include_srs_data:
                entry.update(
                    {
                        "status": item.status,
                        "reviewCount": item.review_count,
                        "easeFactor": item.ease_factor,
                        "interval": item.interval,
                        "addedAt": _iso(item.added_at),
                        "lastReviewedAt": _iso(item.last_reviewed_at),
                    }
                )
            exported.append(entry)

        payload = {
            "exportedAt": now.isoformat(),
            "itemCount": len(exported),
            "format": EXPORT_FORMAT_ID,
            "items": exported,
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)
