"""
Query-relevant snippet extraction.

Picks the sentences of a document that mention the most query keywords
and joins them into a bounded excerpt.
"""

import re
from dataclasses import dataclass
from typing import Optional

from resume_rag.utils.constants import (
    MIN_KEYWORD_LENGTH,
    MIN_SENTENCE_LENGTH,
    NO_TEXT_PLACEHOLDER,
)

ELLIPSIS = "..."

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_EDGE_PUNCTUATION = ".,;:!?\"'()[]{}"


@dataclass
class ScoredSentence:
    """A candidate sentence and its keyword hit count."""

    text: str
    score: int
    position: int


class SnippetExtractor:
    """Extracts the most query-relevant excerpt from a document's text."""

    def __init__(self, default_length: int = 200):
        self.default_length = default_length

    @staticmethod
    def keywords(query: str) -> list[str]:
        """Lowercased query words longer than two characters, deduplicated."""
        words = []
        for raw in query.lower().split():
            word = raw.strip(_EDGE_PUNCTUATION)
            if len(word) > MIN_KEYWORD_LENGTH and word not in words:
                words.append(word)
        return words

    @staticmethod
    def _keyword_patterns(keywords: list[str]) -> list[re.Pattern]:
        # Lookarounds instead of \b so keywords such as "c++" still match whole
        return [re.compile(rf"(?<!\w){re.escape(k)}(?!\w)", re.IGNORECASE) for k in keywords]

    def score_sentences(self, text: str, query: str) -> list[ScoredSentence]:
        """Split text into sentences and score each by keyword occurrences."""
        patterns = self._keyword_patterns(self.keywords(query))
        scored = []
        for position, raw in enumerate(_SENTENCE_SPLIT.split(text)):
            sentence = raw.strip()
            if len(sentence) < MIN_SENTENCE_LENGTH:
                continue
            score = sum(len(p.findall(sentence)) for p in patterns)
            scored.append(ScoredSentence(text=sentence, score=score, position=position))
        return scored

    def extract(self, text: str, query: str, max_length: Optional[int] = None) -> str:
        """
        Extract the most relevant excerpt of ``text`` for ``query``.

        Args:
            text: Document text.
            query: Free-text query.
            max_length: Character budget for the chosen sentences, joining
                spaces excluded; also the length of the prefix fallback.

        Returns:
            A non-empty excerpt; a trailing ellipsis marks that the document
            is longer than the excerpt.
        """
        if not text:
            return NO_TEXT_PLACEHOLDER

        max_length = max_length or self.default_length
        sentences = self.score_sentences(text, query)

        if not sentences:
            return text[:max_length] + (ELLIPSIS if len(text) > max_length else "")

        # Stable sort keeps document order among equal scores
        ranked = sorted(sentences, key=lambda s: s.score, reverse=True)

        # The budget counts sentence text only; joining spaces are free and a
        # sentence must leave room (strictly under max_length) to be taken
        snippet = ""
        used = 0
        for sentence in ranked:
            if sentence.score <= 0:
                break
            if used + len(sentence.text) < max_length:
                snippet = f"{snippet} {sentence.text}" if snippet else sentence.text
                used += len(sentence.text)

        if not snippet:
            snippet = text[:max_length]

        return snippet + (ELLIPSIS if len(snippet) < len(text) else "")

