# src/app/services/similarity_scoring.py
"""
Pure pairwise recipe similarity.
This module has no infrastructure dependencies - only domain models.

total = 0.55 * ingredient Jaccard + 0.35 * text cosine + 0.10 * metadata match
"""
from __future__ import annotations

from itertools import combinations
from typing import Iterable, Optional, Sequence

from src.app.domain.models import Recipe, SimilarityExplanation, SimilarRecipe
from src.services.cosine import frequency_cosine_similarity
from src.services.jaccard import get_ingredient_overlap
from src.services.tokenize import get_word_frequency

DEFAULT_TOO_SIMILAR_THRESHOLD = 0.80


def get_time_bucket(total_time: Optional[int]) -> Optional[str]:
    if not total_time:
        return None
    if total_time <= 15:
        return "quick15"
    if total_time <= 30:
        return "quick30"
    if total_time <= 45:
        return "medium45"
    return "longer60"


def metadata_similarity(a: Recipe, b: Recipe) -> float:
    """
    Average match rate over cuisine, difficulty, time bucket and meal types.

    A signal only counts when at least one side has a value. Meal types add a
    fractional match: |A ∩ B| / max(|A|, |B|).
    """
    matches = 0.0
    total = 0

    if a.cuisine_type or b.cuisine_type:
        total += 1
        if a.cuisine_type == b.cuisine_type:
            matches += 1

    if a.difficulty or b.difficulty:
        total += 1
        if a.difficulty == b.difficulty:
            matches += 1

    bucket_a = get_time_bucket(a.total_time)
    bucket_b = get_time_bucket(b.total_time)
    if bucket_a or bucket_b:
        total += 1
        if bucket_a == bucket_b:
            matches += 1

    meal_a = set(a.meal_type)
    meal_b = set(b.meal_type)
    if meal_a or meal_b:
        total += 1
        overlap = meal_a & meal_b
        if overlap:
            matches += len(overlap) / max(len(meal_a), len(meal_b))

    return matches / total if total > 0 else 0.0


def calculate_similarity(a: Recipe, b: Recipe) -> SimilarityExplanation:
    overlap = get_ingredient_overlap(a.ingredients, b.ingredients)
    text_score = frequency_cosine_similarity(
        get_word_frequency(a.text_blob),
        get_word_frequency(b.text_blob),
    )
    return SimilarityExplanation.from_components(
        ingredient_score=overlap.score,
        text_score=text_score,
        metadata_score=metadata_similarity(a, b),
        common_ingredients=tuple(sorted(overlap.common_ingredients)),
    )


def rank_similar(target: Recipe, candidates: Iterable[Recipe]) -> list[SimilarRecipe]:
    """Score every candidate except the target itself, best first (ties keep candidate order)."""
    ranked: list[SimilarRecipe] = []
    for recipe in candidates:
        if recipe.id == target.id:
            continue
        explanation = calculate_similarity(target, recipe)
        ranked.append(SimilarRecipe(recipe=recipe, score=explanation.total_score, explanation=explanation))
    ranked.sort(key=lambda item: item.score, reverse=True)
    return ranked


def find_similar_recipes(
    target: Recipe,
    candidates: Iterable[Recipe],
    limit: int = 10,
) -> list[SimilarRecipe]:
    """Uncached comparison against an arbitrary candidate subset."""
    return rank_similar(target, candidates)[: max(limit, 0)]


def are_too_similar(a: Recipe, b: Recipe, threshold: float = DEFAULT_TOO_SIMILAR_THRESHOLD) -> bool:
    return calculate_similarity(a, b).total_score >= threshold


def calculate_pack_diversity(recipes: Sequence[Recipe]) -> float:
    """1 - mean pairwise similarity; fewer than two recipes are maximally diverse."""
    if len(recipes) < 2:
        return 1.0

    total = 0.0
    comparisons = 0
    for first, second in combinations(recipes, 2):
        total += calculate_similarity(first, second).total_score
        comparisons += 1

    return 1.0 - total / comparisons
