# src/services/cosine.py
from __future__ import annotations

import math
from typing import Mapping, Sequence

from src.services.errors import VectorLengthMismatchError
from src.services.tfidf import TfidfVector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """(A · B) / (|A| |B|). Zero-norm vectors are treated as dissimilar rather than undefined."""
    if len(a) != len(b):
        raise VectorLengthMismatchError(len(a), len(b))
    if not a:
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def _aligned(a: Mapping[str, float], b: Mapping[str, float]) -> tuple[list[float], list[float]]:
    # sorted so that (a, b) and (b, a) sum in the same order
    terms = sorted(set(a) | set(b))
    return [a.get(term, 0.0) for term in terms], [b.get(term, 0.0) for term in terms]


def tfidf_cosine_similarity(a: TfidfVector, b: TfidfVector) -> float:
    vector_a, vector_b = _aligned(a.as_dict(), b.as_dict())
    return cosine_similarity(vector_a, vector_b)


def frequency_cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    vector_a, vector_b = _aligned(a, b)
    return cosine_similarity(vector_a, vector_b)


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise VectorLengthMismatchError(len(a), len(b))
    return math.sqrt(sum((x - y) * (x - y) for x, y in zip(a, b)))


def euclidean_to_similarity(distance: float) -> float:
    return 1 / (1 + distance)
