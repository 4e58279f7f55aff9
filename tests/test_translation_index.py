"""Tests for the language-pair translation index."""
from __future__ import annotations

import asyncio
import time

import pytest
from sqlalchemy.exc import SQLAlchemyError

from xenolexia.core.translation.types import WordEntry
from xenolexia.services.translation_index import TranslationIndex
from xenolexia.services.word_list import ImportResult
from xenolexia.utils.exceptions import DatabaseError, ValidationError


def entry(word: str, target: str, *, variants: tuple[str, ...] = (), **fields) -> WordEntry:
    values = {
        "id": f"en_es_{word}",
        "source_word": word,
        "target_word": target,
        "source_language": "en",
        "target_language": "es",
        "variants": variants,
    }
    values.update(fields)
    return WordEntry(**values)


class FakeStore:
    """In-memory store that counts bulk loads and can fail on demand."""

    def __init__(self, entries: list[WordEntry]):
        self.entries = list(entries)
        self.load_calls = 0
        self.single_calls = 0
        self.fail_next_load = False

    def get_by_langs(self, source_language, target_language):
        self.load_calls += 1
        time.sleep(0.05)
        if self.fail_next_load:
            self.fail_next_load = False
            raise SQLAlchemyError("database is locked")
        return [
            e for e in self.entries
            if (e.source_language, e.target_language) == (source_language, target_language)
        ]

    def get_entry(self, word, source_language, target_language):
        self.single_calls += 1
        return next(
            (e for e in self.get_pair(source_language, target_language) if e.source_word == word),
            None,
        )

    def get_entry_by_variant(self, word, source_language, target_language):
        return next(
            (e for e in self.get_pair(source_language, target_language) if word in e.variants),
            None,
        )

    def get_pair(self, source_language, target_language):
        return [
            e for e in self.entries
            if (e.source_language, e.target_language) == (source_language, target_language)
        ]

    def run_transaction(self, entries):
        result = ImportResult()
        known = {e.id for e in self.entries}
        for item in entries:
            if item.id in known:
                result.skipped += 1
                continue
            self.entries.append(item)
            known.add(item.id)
            result.imported += 1
        return result

    def add_entry(self, item):
        self.entries.append(item)
        return item

    def delete_by_pair(self, source_language, target_language):
        before = len(self.entries)
        self.entries = [
            e for e in self.entries
            if (e.source_language, e.target_language) != (source_language, target_language)
        ]
        return before - len(self.entries)


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore(
        [
            entry("house", "casa", variants=("houses",)),
            entry("go", "ir", variants=("went", "goes")),
            entry("cat", "chat", id="en_fr_cat", target_language="fr"),
        ]
    )


@pytest.mark.asyncio
async def test_concurrent_batches_share_one_load(store: FakeStore) -> None:
    index = TranslationIndex(store)

    results = await asyncio.gather(
        *(index.lookup_words(["house", "went"], "en", "es") for _ in range(5))
    )

    assert store.load_calls == 1
    assert index.is_loaded("en", "es")
    for result in results:
        assert result["house"].target_word == "casa"
        assert result["went"].source_word == "go"


@pytest.mark.asyncio
async def test_lookup_words_preserves_order_and_reports_misses(store: FakeStore) -> None:
    index = TranslationIndex(store)

    result = await index.lookup_words(["went", "unknown", "House"], "en", "es")

    assert list(result) == ["went", "unknown", "House"]
    assert result["unknown"] is None
    assert result["House"].id == "en_es_house"


@pytest.mark.asyncio
async def test_pairs_are_kept_apart(store: FakeStore) -> None:
    index = TranslationIndex(store)

    assert (await index.lookup_words(["cat"], "en", "es"))["cat"] is None
    assert (await index.lookup_words(["cat"], "en", "fr"))["cat"].target_word == "chat"


@pytest.mark.asyncio
async def test_single_lookup_before_load_queries_the_store(store: FakeStore) -> None:
    index = TranslationIndex(store)

    found = await index.lookup_word("Houses", "en", "es")
    again = await index.lookup_word("houses", "en", "es")

    assert found is again
    assert found.source_word == "house"
    assert store.load_calls == 0
    # Direct miss on the variant, then the owning word
    assert store.single_calls == 2
    assert not index.is_loaded("en", "es")


@pytest.mark.asyncio
async def test_variants_can_be_excluded(store: FakeStore) -> None:
    index = TranslationIndex(store)
    await index.load_language_pair("en", "es")

    assert (await index.lookup_word("went", "en", "es")).source_word == "go"
    assert await index.lookup_word("went", "en", "es", include_variants=False) is None
    assert await index.lookup_word("   ", "en", "es") is None


@pytest.mark.asyncio
async def test_variants_of_a_duplicate_word_point_at_the_kept_entry() -> None:
    store = FakeStore(
        [
            entry("house", "casa", id="house_ranked", variants=("houses",), frequency_rank=120),
            entry("house", "vivienda", id="house_extra", variants=("housing",)),
        ]
    )

    cold = await TranslationIndex(store).lookup_word("housing", "en", "es")

    index = TranslationIndex(store)
    await index.load_language_pair("en", "es")
    loaded = await index.lookup_word("housing", "en", "es")

    assert cold.id == "house_ranked"
    assert loaded.id == "house_ranked"
    assert loaded is await index.lookup_word("house", "en", "es")


@pytest.mark.asyncio
async def test_failed_load_leaves_pair_empty_and_retries(store: FakeStore) -> None:
    index = TranslationIndex(store)
    store.fail_next_load = True

    with pytest.raises(DatabaseError):
        await index.load_language_pair("en", "es")
    assert index.pair_status("en", "es") == "empty"

    result = await index.lookup_words(["house"], "en", "es")
    assert result["house"] is not None
    assert store.load_calls == 2


@pytest.mark.asyncio
async def test_writes_invalidate_the_loaded_pair(store: FakeStore) -> None:
    index = TranslationIndex(store)
    await index.load_language_pair("en", "es")

    result = await index.install_dictionary("en", "es", [entry("river", "río")])

    assert result.imported == 1
    assert not index.is_loaded("en", "es")
    found = await index.lookup_words(["river"], "en", "es")
    assert found["river"].target_word == "río"
    assert store.load_calls == 2


@pytest.mark.asyncio
async def test_install_reports_invalid_entries(store: FakeStore) -> None:
    index = TranslationIndex(store)

    result = await index.install_dictionary(
        "en",
        "es",
        [
            entry("tree", "árbol"),
            entry("dog", "chien", target_language="fr"),
            entry("sun", ""),
        ],
    )

    assert result.imported == 1
    assert result.errors == [
        "Entry 2: language pair en-fr does not match en-es",
        "Entry 3: missing target word",
    ]


@pytest.mark.asyncio
async def test_add_word_validates(store: FakeStore) -> None:
    index = TranslationIndex(store)

    with pytest.raises(ValidationError):
        await index.add_word(entry("tree", "árbol", proficiency_level="expert"))

    await index.add_word(entry("tree", "árbol"))
    assert (await index.lookup_words(["tree"], "en", "es"))["tree"].target_word == "árbol"


@pytest.mark.asyncio
async def test_install_is_idempotent_against_the_database(translation_index: TranslationIndex) -> None:
    first = await translation_index.install_dictionary(
        "en", "es", [entry("house", "casa"), entry("cat", "gato"), entry("dog", "perro")]
    )
    second = await translation_index.install_dictionary(
        "en",
        "es",
        [entry("house", "casa"), entry("cat", "gato"), entry("tree", "árbol"), entry("tree", "árbol")],
    )

    assert (first.imported, first.skipped) == (3, 0)
    assert (second.imported, second.skipped) == (1, 3)
    stats = await translation_index.get_stats("en", "es")
    assert stats.total_words == 4


@pytest.mark.asyncio
async def test_bulk_import_fills_defaults_and_reports_bad_rows(translation_index: TranslationIndex) -> None:
    rows = [
        {"source": "House", "target": "casa", "variants": "houses|HOUSING"},
        {"source": "", "target": "nada"},
        {"word": "dog", "translation": "perro", "rank": "700", "pos": "Noun"},
        {"source_word": "tree", "target_word": "árbol", "frequency_rank": "often"},
    ]

    result = await translation_index.bulk_import(rows, "en", "es")

    assert result.imported == 2
    assert result.errors == [
        "Row 2: missing source or target word",
        "Row 4: invalid frequency rank",
    ]
    house = await translation_index.lookup_word("housing", "en", "es")
    assert house.id == "en_es_1"
    assert house.source_word == "house"
    assert house.proficiency_level == "beginner"
    dog = await translation_index.lookup_word("dog", "en", "es")
    assert (dog.id, dog.frequency_rank, dog.proficiency_level, dog.part_of_speech) == (
        "en_es_3",
        700,
        "intermediate",
        "noun",
    )


@pytest.mark.asyncio
async def test_queries_against_the_database(translation_index: TranslationIndex, spanish_word_list) -> None:
    matches = await translation_index.search_words("OUS", "en", "es")
    assert [e.source_word for e in matches] == ["house"]
    assert await translation_index.search_words("  ", "en", "es") == []

    beginner = await translation_index.get_words_by_proficiency("en", "es", "beginner")
    assert [e.source_word for e in beginner] == ["go", "house", "cat"]

    stats = await translation_index.get_stats("en", "es")
    assert stats.total_words == 4
    assert stats.by_proficiency == {"beginner": 3, "intermediate": 1, "advanced": 0}
    assert stats.by_part_of_speech == {"noun": 3, "verb": 1}
    assert stats.loaded is False


@pytest.mark.asyncio
async def test_clear_language_pair(translation_index: TranslationIndex, spanish_word_list) -> None:
    await translation_index.load_language_pair("en", "es")

    removed = await translation_index.clear_language_pair("en", "es")

    assert removed == 4
    assert not translation_index.is_loaded("en", "es")
    assert (await translation_index.lookup_words(["house"], "en", "es"))["house"] is None
