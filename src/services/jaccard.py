# src/services/jaccard.py
"""Set overlap between ingredient lists."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AbstractSet, Hashable, Iterable, Mapping

from src.services.tokenize import stem

if TYPE_CHECKING:
    from src.app.domain.models import Ingredient

MAIN_INGREDIENTS = ("chicken", "beef", "pork", "fish", "tofu", "rice", "pasta", "bread")

_NON_LETTER_RE = re.compile(r"[^a-z\s]")
_BULK_UNIT_RE = re.compile(r"lb|pound|cup", re.IGNORECASE)
_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


@dataclass
class IngredientOverlap:
    score: float
    common_ingredients: list[str] = field(default_factory=list)
    unique_to_a: list[str] = field(default_factory=list)
    unique_to_b: list[str] = field(default_factory=list)


def jaccard_similarity(set_a: AbstractSet[Hashable], set_b: AbstractSet[Hashable]) -> float:
    """|A ∩ B| / |A ∪ B|, with two empty sets counted as identical."""
    if not set_a and not set_b:
        return 1.0
    if not set_a or not set_b:
        return 0.0
    intersection = len(set_a & set_b)
    union = len(set_a) + len(set_b) - intersection
    return intersection / union if union > 0 else 0.0


def normalize_ingredient_item(item: str | None) -> str:
    """Reduce an ingredient line to sorted, stemmed words ("Chopped Onions" -> "chopp onion")."""
    if not item:
        return ""
    words = _NON_LETTER_RE.sub("", item.lower()).split()
    stemmed = [stem(word) for word in words]
    return " ".join(sorted(word for word in stemmed if len(word) > 2))


def _normalized_items(ingredients: Iterable["Ingredient"]) -> list[str]:
    # ordered and de-duplicated so the overlap lists come out deterministic
    items = (normalize_ingredient_item(ing.item) for ing in ingredients)
    return list(dict.fromkeys(item for item in items if item))


def ingredient_jaccard(a: Iterable["Ingredient"], b: Iterable["Ingredient"]) -> float:
    return jaccard_similarity(set(_normalized_items(a)), set(_normalized_items(b)))


def get_ingredient_overlap(a: Iterable["Ingredient"], b: Iterable["Ingredient"]) -> IngredientOverlap:
    items_a = _normalized_items(a)
    items_b = _normalized_items(b)
    set_a = set(items_a)
    set_b = set(items_b)
    return IngredientOverlap(
        score=jaccard_similarity(set_a, set_b),
        common_ingredients=[item for item in items_a if item in set_b],
        unique_to_a=[item for item in items_a if item not in set_b],
        unique_to_b=[item for item in items_b if item not in set_a],
    )


def weighted_jaccard_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """Generalised Jaccard: sum of minimums over sum of maximums."""
    keys = set(a) | set(b)
    if not keys:
        return 1.0
    min_sum = 0.0
    max_sum = 0.0
    for key in keys:
        value_a = a.get(key, 0.0)
        value_b = b.get(key, 0.0)
        min_sum += min(value_a, value_b)
        max_sum += max(value_a, value_b)
    return min_sum / max_sum if max_sum > 0 else 0.0


def _parse_quantity(quantity: str | None) -> float:
    # "2 cups" -> 2.0, "1/2" -> 1.0, "a pinch" -> 0.0
    if not quantity:
        return 0.0
    match = _LEADING_NUMBER_RE.match(str(quantity))
    if not match:
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        return 0.0


def get_ingredient_weights(ingredients: Iterable["Ingredient"]) -> dict[str, float]:
    """Importance per normalised item: proteins and starches count double, bulk quantities a bit more."""
    weights: dict[str, float] = {}
    for ing in ingredients:
        normalized = normalize_ingredient_item(ing.item)
        if not normalized:
            continue

        weight = 1.0
        if any(main in normalized for main in MAIN_INGREDIENTS):
            weight = 2.0

        if _parse_quantity(ing.quantity) > 1 or (ing.unit and _BULK_UNIT_RE.search(ing.unit)):
            weight += 0.5

        weights[normalized] = weight
    return weights
