"""Tests for the sentence-aware word tokenizer."""
from __future__ import annotations

from xenolexia.core.translation.tokenizer import Tokenizer


def test_plain_text_splits_sentences_and_keeps_offsets() -> None:
    text = "The house is big. The cat sleeps!"
    stream = Tokenizer().tokenize(text, markup=False)

    assert [t.word for t in stream.tokens] == ["the", "house", "is", "big", "the", "cat", "sleeps"]
    assert len(stream.sentences) == 2
    assert [t.sentence for t in stream.tokens] == [0, 0, 0, 0, 1, 1, 1]
    for token in stream.tokens:
        assert text[token.start:token.end] == token.original


def test_numbers_and_punctuation_never_become_words() -> None:
    stream = Tokenizer().tokenize("In 1984, they didn't stay well-known.", markup=False)

    assert [t.original for t in stream.tokens] == ["In", "they", "didn't", "stay", "well-known"]


def test_abbreviations_and_names_are_protected() -> None:
    stream = Tokenizer().tokenize("Then Mr. Smith went home with Anna.", markup=False)
    by_word = {t.original: t for t in stream.tokens}

    assert len(stream.sentences) == 1
    assert by_word["Mr"].protection == "abbreviation"
    assert by_word["Smith"].protection == "name"
    assert by_word["Anna"].protection == "name"
    # Capitalised only because it starts the sentence
    assert not by_word["Then"].is_protected
    assert not by_word["went"].is_protected


def test_short_words_are_protected_by_length() -> None:
    stream = Tokenizer().tokenize("I saw a dog.", markup=False)
    protected = {t.original for t in stream.tokens if t.is_protected}

    assert protected == {"I", "a"}


def test_markup_skips_code_entities_and_tracks_blocks() -> None:
    html = "<p>Hello world.</p><pre>code here</pre><p>Next one &amp; more</p>"
    stream = Tokenizer().tokenize(html)

    assert [t.original for t in stream.tokens] == ["Hello", "world", "Next", "one", "more"]
    assert [t.block for t in stream.tokens] == [0, 0, 1, 1, 1]
    assert len(stream.sentences) == 2
    for token in stream.tokens:
        assert html[token.start:token.end] == token.original


def test_blank_lines_start_a_new_block_in_plain_text() -> None:
    stream = Tokenizer().tokenize("First part here\n\nsecond part here", markup=False)

    assert {t.block for t in stream.tokens[:3]} == {0}
    assert {t.block for t in stream.tokens[3:]} == {1}


def test_unique_words_skip_protected_tokens() -> None:
    stream = Tokenizer().tokenize("the cat saw the other cat near Paris.", markup=False)

    assert stream.unique_words() == ["the", "cat", "saw", "other", "near"]
