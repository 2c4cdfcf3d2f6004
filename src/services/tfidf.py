# src/services/tfidf.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from src.services.tokenize import tokenize_stemmed


@dataclass
class TfidfVector:
    """Parallel term/value lists; terms are unique within one vector."""
    terms: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self.terms, self.values))


@dataclass
class TermScore:
    term: str
    score: float


def term_frequency(term: str, document: Sequence[str]) -> float:
    if not document:
        return 0.0
    return document.count(term) / len(document)


def inverse_document_frequency(term: str, documents: Sequence[Sequence[str]]) -> float:
    """ln(N / (1 + df)). Negative when the term is in every document; callers must not clamp it."""
    if not documents:
        return 0.0
    doc_count = sum(1 for doc in documents if term in doc)
    return math.log(len(documents) / (1 + doc_count))


def tfidf(term: str, document: Sequence[str], documents: Sequence[Sequence[str]]) -> float:
    return term_frequency(term, document) * inverse_document_frequency(term, documents)


def _vocabulary(documents: Sequence[Sequence[str]]) -> list[str]:
    vocabulary: dict[str, None] = {}
    for doc in documents:
        for term in doc:
            vocabulary.setdefault(term, None)
    return list(vocabulary)


def calculate_tfidf_vectors(texts: Sequence[str]) -> list[TfidfVector]:
    """One vector per text, all sharing the same vocabulary."""
    documents = [tokenize_stemmed(text) for text in texts]
    terms = _vocabulary(documents)
    return [
        TfidfVector(terms=list(terms), values=[tfidf(term, doc, documents) for term in terms])
        for doc in documents
    ]


def calculate_tfidf_vector(text: str, corpus: Sequence[str]) -> TfidfVector:
    """TF-IDF of ``text`` against ``corpus`` plus ``text`` itself."""
    document = tokenize_stemmed(text)
    documents = [tokenize_stemmed(entry) for entry in corpus]
    all_documents = [*documents, document]
    terms = _vocabulary(all_documents)
    values = [tfidf(term, document, all_documents) for term in terms]
    return TfidfVector(terms=terms, values=values)


def get_top_terms(text: str, corpus: Sequence[str], n: int = 10) -> list[TermScore]:
    vector = calculate_tfidf_vector(text, corpus)
    scored = [TermScore(term=term, score=value) for term, value in zip(vector.terms, vector.values)]
    # stable sort: equal scores keep first-seen vocabulary order
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[: max(n, 0)]
