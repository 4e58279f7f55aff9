"""
Import a dictionary file into the word list for one language pair.

Usage examples:

  python scripts/import_dictionary.py --source en --target es --file en_es.csv

  python scripts/import_dictionary.py --source en --target de --file en_de.json \
      --frequency-list en_50k.txt

  python scripts/import_dictionary.py --source en --target fr --clear

The import goes through the same TranslationIndex as the /dictionary API, so
duplicate ids are skipped and malformed rows are reported without aborting.
"""
from __future__ import annotations

import argparse
import asyncio
import sys

from loguru import logger

from xenolexia.config import settings
from xenolexia.db.session import SessionLocal
from xenolexia.services.dictionary_import import (
    apply_frequency_ranks,
    load_dictionary_file,
    load_frequency_file,
)
from xenolexia.services.translation_index import TranslationIndex
from xenolexia.services.word_list import WordListRepository
from xenolexia.utils.exceptions import DictionaryImportError


async def _run(args: argparse.Namespace) -> int:
    index = TranslationIndex(WordListRepository(SessionLocal))

    if args.clear:
        removed = await index.clear_language_pair(args.source, args.target)
        print(f"Removed {removed} entries for {args.source}-{args.target}")
        if not args.file:
            return 0

    try:
        rows = load_dictionary_file(args.file, args.format)
        if args.frequency_list:
            rows = apply_frequency_ranks(rows, load_frequency_file(args.frequency_list))
    except DictionaryImportError as e:
        raise SystemExit(f"Import failed: {e.message}")

    result = await index.bulk_import(rows, args.source, args.target)

    print("Import completed:")
    print(f"  rows read:  {len(rows)}")
    print(f"  imported:   {result.imported}")
    print(f"  skipped:    {result.skipped}")
    print(f"  errors:     {len(result.errors)}")
    for error in result.errors[: args.show_errors]:
        print(f"    - {error}")
    return 0 if result.imported or not result.errors else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a dictionary for a language pair")
    parser.add_argument("--source", required=True, help="Source (book) language code, e.g. en")
    parser.add_argument("--target", required=True, help="Target (learned) language code, e.g. es")
    parser.add_argument("--file", help="Dictionary file (.json, .csv, .tsv or .txt)")
    parser.add_argument(
        "--format",
        choices=["json", "csv", "tsv"],
        default=None,
        help="Override the format inferred from the file extension",
    )
    parser.add_argument(
        "--frequency-list",
        default=None,
        help="Optional 'word count' list used to rank rows that lack a frequency rank",
    )
    parser.add_argument("--clear", action="store_true", help="Delete the pair before importing")
    parser.add_argument("--show-errors", type=int, default=20, help="Number of row errors to print")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)

    args = parser.parse_args()
    if not args.file and not args.clear:
        parser.error("either --file or --clear is required")

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    raise SystemExit(asyncio.run(_run(args)))


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
