"""Split chapter text or markup into sentence-bounded word tokens.

Offsets always point into the string that was tokenized, so callers can
splice replacements back into the original markup without re-parsing it.
Text inside tags such as ``<script>`` or ``<code>`` is skipped, HTML entities
never produce words, and block-level tags close both the current sentence
and the current block (the unit used for tap context excerpts).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

# Tags whose text content is never tokenized
SKIP_TAGS = frozenset(
    {"script", "style", "code", "pre", "kbd", "samp", "var", "noscript", "svg", "math"}
)

BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "br", "dd", "div", "dl", "dt",
        "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header",
        "hr", "html", "li", "main", "nav", "ol", "p", "section", "table", "td", "th", "tr", "ul",
    }
)

NAME_PREFIXES = frozenset({"mr", "mrs", "ms", "dr", "prof", "sir", "lord", "lady"})

ABBREVIATIONS = frozenset(
    {"etc", "eg", "ie", "vs", "mr", "mrs", "ms", "dr", "jr", "sr", "inc", "ltd", "co", "corp"}
)

_MARKUP = re.compile(
    r"<!--.*?-->|<!\[CDATA\[.*?\]\]>|<![^>]*>|<\?.*?\?>|<(/?)([a-zA-Z][\w:-]*)[^>]*>",
    re.DOTALL,
)
_ENTITY = re.compile(r"&#?\w+;")
_WORD = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)?(?:-[^\W\d_]+)*")
_SENTENCE_END = re.compile(r"[.!?…。！？]")
_PARAGRAPH_BREAK = re.compile(r"\n[ \t\r\f\v]*\n")


@dataclass(slots=True)
class Token:
    """A single word occurrence."""

    word: str
    original: str
    start: int
    end: int
    position: int
    sentence: int
    block: int
    is_protected: bool = False
    protection: str | None = None


@dataclass(slots=True)
class Sentence:
    """Tokens that belong to one sentence, in reading order."""

    index: int
    block: int
    tokens: list[Token] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.tokens)


@dataclass(slots=True)
class TokenStream:
    """Result of tokenizing one passage."""

    tokens: list[Token]
    sentences: list[Sentence]

    def unique_words(self) -> list[str]:
        """Return normalised words of unprotected tokens, first occurrence first."""

        seen: dict[str, None] = {}
        for token in self.tokens:
            if not token.is_protected:
                seen.setdefault(token.word, None)
        return list(seen)

    def by_block(self) -> dict[int, list[Token]]:
        """Group tokens by block in one pass; each group is in reading order."""

        groups: dict[int, list[Token]] = {}
        for token in self.tokens:
            groups.setdefault(token.block, []).append(token)
        return groups


@dataclass(slots=True)
class _Segment:
    text: str
    start: int
    protected: bool
    block_break: bool


class Tokenizer:
    """Context-aware word tokenizer for plain text and HTML chapters."""

    def __init__(
        self,
        *,
        skip_names: bool = True,
        skip_code: bool = True,
        min_word_length: int = 2,
        max_word_length: int = 25,
    ) -> None:
        self.skip_names = skip_names
        self.skip_code = skip_code
        self.min_word_length = min_word_length
        self.max_word_length = max_word_length

    def tokenize(self, content: str, *, markup: bool = True) -> TokenStream:
        """Tokenize ``content``; set ``markup=False`` for plain text."""

        segments = self._segments(content) if markup else [_Segment(content, 0, False, False)]
        tokens: list[Token] = []
        sentences: list[Sentence] = []

        block = 0
        block_used = False
        gap = ""
        current: Sentence | None = None

        for segment in segments:
            if segment.block_break:
                if block_used:
                    block += 1
                    block_used = False
                current = None
                gap = ""
            if segment.protected and self.skip_code:
                continue

            entity_spans = [m.span() for m in _ENTITY.finditer(segment.text)]
            cursor = 0
            for match in _WORD.finditer(segment.text):
                if any(s <= match.start() < e for s, e in entity_spans):
                    continue
                gap += segment.text[cursor:match.start()]
                cursor = match.end()

                if not markup and block_used and _PARAGRAPH_BREAK.search(gap):
                    block += 1
                    block_used = False
                    current = None
                previous = current.tokens[-1] if current is not None and current.tokens else None
                if current is not None and previous is not None and self._ends_sentence(gap, previous):
                    current = None
                if current is None:
                    current = Sentence(index=len(sentences), block=block)
                    sentences.append(current)

                original = match.group(0)
                token = Token(
                    word=original.lower(),
                    original=original,
                    start=segment.start + match.start(),
                    end=segment.start + match.end(),
                    position=len(tokens),
                    sentence=current.index,
                    block=block,
                )
                self._protect(token, previous, at_sentence_start=not current.tokens)
                current.tokens.append(token)
                tokens.append(token)
                block_used = True
                gap = ""
            gap += segment.text[cursor:]

        return TokenStream(tokens=tokens, sentences=sentences)

    def _segments(self, html: str) -> list[_Segment]:
        segments: list[_Segment] = []
        skip_depth = 0
        skip_tag = ""
        pending_break = False
        cursor = 0

        for match in _MARKUP.finditer(html):
            if match.start() > cursor:
                segments.append(
                    _Segment(html[cursor:match.start()], cursor, skip_depth > 0, pending_break)
                )
                pending_break = False
            cursor = match.end()

            tag_name = (match.group(2) or "").lower()
            if not tag_name:
                continue
            closing = match.group(1) == "/"
            if tag_name in SKIP_TAGS:
                if not closing and not match.group(0).endswith("/>"):
                    if skip_depth == 0:
                        skip_tag = tag_name
                    if tag_name == skip_tag:
                        skip_depth += 1
                elif closing and tag_name == skip_tag:
                    skip_depth = max(0, skip_depth - 1)
            if tag_name in BLOCK_TAGS:
                pending_break = True

        if cursor < len(html):
            segments.append(_Segment(html[cursor:], cursor, skip_depth > 0, pending_break))
        return segments

    @staticmethod
    def _ends_sentence(gap: str, previous: Token) -> bool:
        if not _SENTENCE_END.search(gap):
            return False
        # "Mr. Smith" and friends do not end a sentence
        if previous.word in ABBREVIATIONS and gap.strip() == ".":
            return False
        return True

    def _protect(self, token: Token, previous: Token | None, *, at_sentence_start: bool) -> None:
        length = len(token.original)
        if length < self.min_word_length or length > self.max_word_length:
            token.is_protected = True
            token.protection = "length"
            return
        if token.word.replace(".", "") in ABBREVIATIONS:
            token.is_protected = True
            token.protection = "abbreviation"
            return
        if self.skip_names and self._looks_like_name(token, previous, at_sentence_start):
            token.is_protected = True
            token.protection = "name"

    @staticmethod
    def _looks_like_name(token: Token, previous: Token | None, at_sentence_start: bool) -> bool:
        word = token.original
        if not word[0].isupper():
            return False
        if previous is not None and previous.word in NAME_PREFIXES:
            return True
        if at_sentence_start:
            # Capitalised by grammar; only shouting or inner capitals suggest a name
            return (len(word) > 1 and word.isupper()) or any(ch.isupper() for ch in word[1:])
        return True
