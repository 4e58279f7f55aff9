"""Tests for the dictionary store queries."""
from __future__ import annotations

import pytest

from xenolexia.core.translation.types import WordEntry
from xenolexia.services import word_list
from xenolexia.services.word_list import WordListRepository


def word(entry_id: str, source: str, target: str, **fields) -> WordEntry:
    values = {
        "id": entry_id,
        "source_word": source,
        "target_word": target,
        "source_language": "en",
        "target_language": "es",
    }
    values.update(fields)
    return WordEntry(**values)


@pytest.fixture()
def repository(session_factory) -> WordListRepository:
    return WordListRepository(session_factory)


@pytest.fixture()
def converted_rows(monkeypatch) -> list[str]:
    seen: list[str] = []
    original = word_list.to_entry

    def counting(row):
        seen.append(row.id)
        return original(row)

    monkeypatch.setattr(word_list, "to_entry", counting)
    return seen


def test_variant_lookup_only_reads_matching_rows(repository: WordListRepository, converted_rows) -> None:
    entries = [word(f"w{n:04d}", f"word{n}", f"palabra{n}", variants=(f"words{n}",)) for n in range(300)]
    entries.append(word("go", "go", "ir", variants=("went", "goes")))
    assert repository.run_transaction(entries).imported == 301
    converted_rows.clear()

    assert repository.get_entry_by_variant("zzz", "en", "es") is None
    assert converted_rows == []

    found = repository.get_entry_by_variant("Went", "en", "es")
    assert found.source_word == "go"
    assert converted_rows == ["go"]


def test_variant_lookup_treats_wildcards_literally(repository: WordListRepository) -> None:
    repository.run_transaction(
        [
            word("rock", "rock", "roca", variants=("rockxn",)),
            word("pct", "percent", "por ciento", variants=("100%",)),
        ]
    )

    assert repository.get_entry_by_variant("rock_n", "en", "es") is None
    assert repository.get_entry_by_variant("100", "en", "es") is None
    assert repository.get_entry_by_variant("100%", "en", "es").id == "pct"
    assert repository.get_entry_by_variant("went", "en", "fr") is None


def test_ranked_entries_win_over_unranked_duplicates(repository: WordListRepository) -> None:
    repository.run_transaction(
        [
            word("a_house", "house", "vivienda", variants=("houses",)),
            word("b_house", "house", "casa", frequency_rank=120, variants=("houses",)),
            word("cat", "cat", "gato", frequency_rank=300),
        ]
    )

    assert repository.get_entry("house", "en", "es").id == "b_house"
    assert repository.get_entry_by_variant("houses", "en", "es").id == "b_house"
    assert [e.id for e in repository.get_by_langs("en", "es")] == ["b_house", "cat", "a_house"]
