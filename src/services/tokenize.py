# src/services/tokenize.py
"""Text tokenization used by every text-similarity score."""
from __future__ import annotations

import re
from typing import Iterable

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "up", "about", "into", "through", "during",
    "before", "after", "above", "below", "between", "under", "again",
    "further", "then", "once", "here", "there", "when", "where", "why",
    "how", "all", "each", "few", "more", "most", "other", "some", "such",
    "no", "nor", "not", "only", "own", "same", "so", "than", "too", "very",
    "just", "also", "now", "add", "put", "use", "get", "make", "let",
    "is", "are", "was", "were", "be", "been", "being", "have", "has",
    "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "must", "shall", "can", "need", "it", "its", "this",
    "that", "these", "those", "i", "me", "my", "myself", "we", "our",
    "ours", "ourselves", "you", "your", "yours", "yourself", "yourselves",
    "he", "him", "his", "himself", "she", "her", "hers", "herself",
    "they", "them", "their", "theirs", "themselves", "what", "which",
    "who", "whom", "cup", "cups", "tbsp", "tsp", "oz", "lb", "minute",
    "minutes", "hour", "hours", "degrees", "inch", "inches",
})

# Evaluated top to bottom, first match wins.
STEM_RULES: tuple[tuple[str, str], ...] = (
    ("ing", ""),
    ("ed", ""),
    ("es", ""),
    ("s", ""),
    ("ly", ""),
    ("ness", ""),
    ("ment", ""),
    ("tion", ""),
)

_PUNCTUATION_RE = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str | None) -> list[str]:
    """Lowercase, strip punctuation and drop short tokens and stop words."""
    if not text:
        return []
    cleaned = _PUNCTUATION_RE.sub(" ", text.lower())
    return [
        word
        for word in _WHITESPACE_RE.split(cleaned)
        if len(word) > 2 and word not in STOP_WORDS
    ]


def tokenize_unique(text: str | None) -> list[str]:
    return list(dict.fromkeys(tokenize(text)))


def get_word_frequency(text: str | None) -> dict[str, int]:
    freq: dict[str, int] = {}
    for token in tokenize(text):
        freq[token] = freq.get(token, 0) + 1
    return freq


def stem(word: str) -> str:
    """Strip at most one suffix using STEM_RULES.

    This is a heuristic, not a linguistic stemmer: "dresses" -> "dress", and a
    second pass would turn it into "dres".
    """
    for suffix, replacement in STEM_RULES:
        if word.endswith(suffix):
            return word[: len(word) - len(suffix)] + replacement
    return word


def tokenize_stemmed(text: str | None) -> list[str]:
    return [stem(token) for token in tokenize(text)]


def ngrams(tokens: Iterable[str], n: int = 2) -> list[str]:
    items = list(tokens)
    if n < 1 or len(items) < n:
        return []
    return [" ".join(items[i : i + n]) for i in range(len(items) - n + 1)]
