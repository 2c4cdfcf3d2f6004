# src/app/services/similarity_service.py
"""
Similar-recipe lookup backed by the similarity cache.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from src.app.domain.errors import ExplanationDecodeError
from src.app.domain.models import CachedSimilarity, Recipe, SimilarityExplanation, SimilarRecipe
from src.app.infra.db.base import RecipeRepository, SimilarityCacheRepository
from src.app.infra.db.supabase_recipes_repo import (
    SupabaseRecipeRepository,
    SupabaseSimilarityCacheRepository,
)
from src.app.services import similarity_scoring

logger = logging.getLogger(__name__)

DEFAULT_SIMILAR_LIMIT = 10


def decode_explanation(entry: CachedSimilarity) -> SimilarityExplanation:
    """Deserialize a cached explanation; unreadable payloads count as all-zero."""
    try:
        explanation = SimilarityExplanation.from_json(entry.explain_json)
    except ExplanationDecodeError as exc:
        logger.warning(
            "Corrupt similarity cache payload: recipe=%s, other=%s, reason=%s",
            entry.recipe_id,
            entry.other_recipe_id,
            exc.reason,
        )
        explanation = SimilarityExplanation()
    # the row score is authoritative for ranking
    return SimilarityExplanation(
        ingredient_score=explanation.ingredient_score,
        text_score=explanation.text_score,
        metadata_score=explanation.metadata_score,
        common_ingredients=explanation.common_ingredients,
        total_score=entry.score,
    )


class SimilarityService:
    """
    Service for similar-recipe lookups.

    Responsibilities:
    - Serve similar recipes from the cache when it has rows for the anchor
    - Compute, cache and rank against the whole library on a miss
    - Uncached comparisons against arbitrary candidate subsets
    - Cache invalidation on request
    """

    def __init__(
        self,
        recipe_repository: Optional[RecipeRepository] = None,
        cache_repository: Optional[SimilarityCacheRepository] = None,
    ):
        self._recipes = recipe_repository or SupabaseRecipeRepository()
        self._cache = cache_repository or SupabaseSimilarityCacheRepository()

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return self._recipes.get_recipe_by_id(recipe_id)

    def get_similar_recipes(self, recipe_id: str, limit: int = DEFAULT_SIMILAR_LIMIT) -> list[SimilarRecipe]:
        """
        Get the most similar recipes for a recipe, best first.

        Args:
            recipe_id: The anchor recipe
            limit: Max results to return

        Returns:
            Ranked similar recipes; empty when the recipe does not exist
        """
        target = self._recipes.get_recipe_by_id(recipe_id)
        if target is None:
            logger.info("Similar recipes requested for unknown recipe: %s", recipe_id)
            return []

        cached = self._cache.get_cached_similarities(recipe_id)
        if cached:
            logger.info("Similarity cache hit: recipe=%s, rows=%d", recipe_id, len(cached))
            return self._from_cache(cached, limit)

        logger.info("Similarity cache miss: recipe=%s", recipe_id)
        return self._compute_and_cache(target, limit)

    def find_similar_recipes(
        self,
        target: Recipe,
        candidates: Iterable[Recipe],
        limit: int = DEFAULT_SIMILAR_LIMIT,
    ) -> list[SimilarRecipe]:
        """Compare against a candidate subset without touching the cache."""
        return similarity_scoring.find_similar_recipes(target, candidates, limit)

    def invalidate(self, recipe_id: Optional[str] = None) -> None:
        """
        Drop cached scores involving recipe_id, or the whole cache when None.

        Args:
            recipe_id: The recipe whose content changed
        """
        self._cache.clear(recipe_id)

    def _from_cache(self, cached: list[CachedSimilarity], limit: int) -> list[SimilarRecipe]:
        ordered = sorted(cached, key=lambda entry: entry.score, reverse=True)
        results: list[SimilarRecipe] = []
        for entry in ordered:
            if len(results) >= limit:
                break
            recipe = self._recipes.get_recipe_by_id(entry.other_recipe_id)
            if recipe is None:
                logger.debug("Skipping cached row for missing recipe: %s", entry.other_recipe_id)
                continue
            results.append(
                SimilarRecipe(recipe=recipe, score=entry.score, explanation=decode_explanation(entry))
            )
        return results

    def _compute_and_cache(self, target: Recipe, limit: int) -> list[SimilarRecipe]:
        ranked = similarity_scoring.rank_similar(target, self._recipes.get_all_recipes())
        for item in ranked:
            # directional write only: lookups are always anchored at target.id
            self._cache.put_cached_similarity(target.id, item.recipe.id, item.score, item.explanation)
        logger.info("Similarity cache filled: recipe=%s, rows=%d", target.id, len(ranked))
        return ranked[: max(limit, 0)]
