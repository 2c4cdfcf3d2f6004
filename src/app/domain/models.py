# src/app/domain/models.py
"""
Domain models for the recipe similarity and pack-suggestion engine.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.app.domain.errors import ExplanationDecodeError

INGREDIENT_WEIGHT = 0.55
TEXT_WEIGHT = 0.35
METADATA_WEIGHT = 0.10


class PackTheme(str, Enum):
    """Canned themes for generate_themed_pack."""
    WEEKNIGHT = "weeknight"
    HEALTHY = "healthy"
    COMFORT = "comfort"
    PARTY = "party"
    BUDGET = "budget"


@dataclass(frozen=True)
class Ingredient:
    quantity: str = ""
    unit: str = ""
    item: str = ""
    notes: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class Recipe:
    """
    A recipe as handed over by the recipe source.
    The engine only reads it; text_blob is precomputed by the persistence layer.
    """
    id: str
    title: str
    description: Optional[str] = None
    ingredients: tuple[Ingredient, ...] = ()
    steps: tuple[str, ...] = ()
    cuisine_type: Optional[str] = None
    difficulty: Optional[str] = None
    total_time: Optional[int] = None  # minutes
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    image_uri: Optional[str] = None
    meal_type: tuple[str, ...] = ()
    dietary_tags: tuple[str, ...] = ()
    tips: Optional[str] = None
    editors_pick: bool = False
    text_blob: str = ""


@dataclass(frozen=True)
class RecipeFilters:
    query: Optional[str] = None
    cuisine_type: Optional[str] = None
    meal_type: Optional[str] = None
    dietary_tag: Optional[str] = None
    difficulty: Optional[str] = None
    max_time: Optional[int] = None


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class SimilarityExplanation:
    """Breakdown of a pairwise similarity score."""
    ingredient_score: float = 0.0
    text_score: float = 0.0
    metadata_score: float = 0.0
    common_ingredients: tuple[str, ...] = ()
    total_score: float = 0.0

    @classmethod
    def from_components(
        cls,
        ingredient_score: float,
        text_score: float,
        metadata_score: float,
        common_ingredients: tuple[str, ...] = (),
    ) -> "SimilarityExplanation":
        ingredient = _clamp(ingredient_score)
        text = _clamp(text_score)
        metadata = _clamp(metadata_score)
        total = ingredient * INGREDIENT_WEIGHT + text * TEXT_WEIGHT + metadata * METADATA_WEIGHT
        return cls(
            ingredient_score=ingredient,
            text_score=text,
            metadata_score=metadata,
            common_ingredients=tuple(common_ingredients),
            total_score=_clamp(total),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ingredientScore": self.ingredient_score,
            "textScore": self.text_score,
            "metadataScore": self.metadata_score,
            "commonIngredients": list(self.common_ingredients),
            "totalScore": self.total_score,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "SimilarityExplanation":
        common = payload.get("commonIngredients") or []
        return cls(
            ingredient_score=float(payload.get("ingredientScore") or 0),
            text_score=float(payload.get("textScore") or 0),
            metadata_score=float(payload.get("metadataScore") or 0),
            common_ingredients=tuple(str(item) for item in common) if isinstance(common, list) else (),
            total_score=float(payload.get("totalScore") or 0),
        )

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "SimilarityExplanation":
        """Missing fields read as zero; undecodable payloads raise ExplanationDecodeError."""
        if not raw:
            return cls()
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise ExplanationDecodeError(raw) from exc
        if not isinstance(payload, dict):
            raise ExplanationDecodeError(raw)
        try:
            return cls.from_dict(payload)
        except (TypeError, ValueError) as exc:
            raise ExplanationDecodeError(raw) from exc


@dataclass(frozen=True)
class SimilarRecipe:
    recipe: Recipe
    score: float
    explanation: SimilarityExplanation


@dataclass(frozen=True)
class CachedSimilarity:
    """A directional (recipe_id -> other_recipe_id) cache row."""
    recipe_id: str
    other_recipe_id: str
    score: float
    explain_json: Optional[str] = None


@dataclass(frozen=True)
class ScoredRecipe:
    recipe: Recipe
    score: float
    usage_count: int = 0


@dataclass(frozen=True)
class PackDraft:
    """Result of a pack builder before it gets a name and description."""
    recipes: tuple[Recipe, ...] = ()
    diversity_score: float = 1.0
    reasons: tuple[str, ...] = ()


@dataclass
class PackSuggestion:
    name: str
    description: str
    recipes: list[Recipe] = field(default_factory=list)
    diversity_score: float = 1.0
    reasons: list[str] = field(default_factory=list)

    @property
    def recipe_ids(self) -> list[str]:
        return [recipe.id for recipe in self.recipes]

    @classmethod
    def from_draft(
        cls,
        draft: PackDraft,
        name: str,
        description: str,
        extra_reasons: tuple[str, ...] = (),
    ) -> "PackSuggestion":
        return cls(
            name=name,
            description=description,
            recipes=list(draft.recipes),
            diversity_score=draft.diversity_score,
            reasons=[*draft.reasons, *extra_reasons],
        )


@dataclass(frozen=True)
class PackSuggestionOptions:
    pack_size: int = 10
    query: Optional[str] = None
    cuisine_type: Optional[str] = None
    meal_type: Optional[str] = None
    dietary_tag: Optional[str] = None
    difficulty: Optional[str] = None
    max_time: Optional[int] = None
    prefer_unused: bool = True
    maximize_diversity: bool = True

    @property
    def filters(self) -> RecipeFilters:
        return RecipeFilters(
            query=self.query,
            cuisine_type=self.cuisine_type,
            meal_type=self.meal_type,
            dietary_tag=self.dietary_tag,
            difficulty=self.difficulty,
            max_time=self.max_time,
        )


@dataclass(frozen=True)
class SimilarityWarning:
    recipe_a_id: str
    recipe_a_title: str
    recipe_b_id: str
    recipe_b_title: str
    similarity: float


@dataclass
class PackValidation:
    is_valid: bool
    warnings: list[str] = field(default_factory=list)
    similarity_warnings: list[SimilarityWarning] = field(default_factory=list)
    diversity_score: float = 0.0
    cuisine_breakdown: dict[str, int] = field(default_factory=dict)
    meal_type_breakdown: dict[str, int] = field(default_factory=dict)
