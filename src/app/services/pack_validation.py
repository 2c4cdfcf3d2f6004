# src/app/services/pack_validation.py
"""Checks a hand-assembled pack for near-duplicates and lopsided composition."""
from __future__ import annotations

import math
from collections import Counter
from itertools import combinations
from typing import Sequence

from src.app.domain.models import PackValidation, Recipe, SimilarityWarning
from src.app.services.similarity_scoring import (
    DEFAULT_TOO_SIMILAR_THRESHOLD,
    calculate_pack_diversity,
    calculate_similarity,
)

MAX_SAME_CUISINE_SHARE = 0.5
MAX_SAME_MEAL_TYPE_SHARE = 0.6
LOW_DIVERSITY = 0.4


def _percent(value: float) -> int:
    # half-up, "84.5" reads as 85
    return math.floor(value * 100 + 0.5)


def validate_pack(
    recipes: Sequence[Recipe],
    similarity_threshold: float = DEFAULT_TOO_SIMILAR_THRESHOLD,
) -> PackValidation:
    if not recipes:
        return PackValidation(is_valid=False, warnings=["Pack has no recipes"], diversity_score=0.0)

    warnings: list[str] = []
    similarity_warnings: list[SimilarityWarning] = []

    for first, second in combinations(recipes, 2):
        score = calculate_similarity(first, second).total_score
        if score >= similarity_threshold:
            similarity_warnings.append(
                SimilarityWarning(
                    recipe_a_id=first.id,
                    recipe_a_title=first.title,
                    recipe_b_id=second.id,
                    recipe_b_title=second.title,
                    similarity=score,
                )
            )
            warnings.append(f'"{first.title}" and "{second.title}" are {_percent(score)}% similar')

    cuisine_breakdown = dict(Counter(recipe.cuisine_type or "Unknown" for recipe in recipes))
    meal_type_breakdown = dict(Counter(meal for recipe in recipes for meal in recipe.meal_type))

    if len(recipes) > 2:
        for cuisine, count in cuisine_breakdown.items():
            share = count / len(recipes)
            if share > MAX_SAME_CUISINE_SHARE:
                warnings.append(f"{_percent(share)}% of recipes are {cuisine} cuisine")
        for meal_type, count in meal_type_breakdown.items():
            share = count / len(recipes)
            if share > MAX_SAME_MEAL_TYPE_SHARE:
                warnings.append(f"{_percent(share)}% of recipes are {meal_type}")

    diversity = calculate_pack_diversity(recipes)
    if diversity < LOW_DIVERSITY and len(recipes) > 3:
        warnings.append(f"Pack diversity is low ({_percent(diversity)}%)")

    return PackValidation(
        is_valid=not warnings,
        warnings=warnings,
        similarity_warnings=similarity_warnings,
        diversity_score=diversity,
        cuisine_breakdown=cuisine_breakdown,
        meal_type_breakdown=meal_type_breakdown,
    )


def get_diversity_suggestions(validation: PackValidation) -> list[str]:
    suggestions: list[str] = []
    if validation.similarity_warnings:
        suggestions.append("Consider removing one recipe from similar pairs")
    if len(validation.cuisine_breakdown) == 1:
        suggestions.append("Add recipes from different cuisines for variety")
    if len(validation.meal_type_breakdown) == 1:
        suggestions.append("Add recipes for different meal types")
    if validation.diversity_score < 0.5:
        suggestions.append("Mix recipes with different cooking techniques")
        suggestions.append("Include recipes with varying difficulty levels")
    return suggestions
