# src/app/infra/db/base.py
"""
Abstract collaborators consumed by the similarity and pack-suggestion services.
These interfaces allow easy swapping between storage backends.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from src.app.domain.models import CachedSimilarity, Recipe, RecipeFilters, SimilarityExplanation


class RecipeRepository(ABC):
    """
    Read-only access to the recipe library.

    Implementations:
    - SupabaseRecipeRepository: recipes + usage_events tables in Supabase
    """

    @abstractmethod
    def list_recipes(self, filters: RecipeFilters) -> list[Recipe]:
        """
        List recipes matching every filter that is set.

        Args:
            filters: Optional cuisine/meal type/dietary tag/difficulty/time/query filters

        Returns:
            Matching recipes, newest first
        """
        pass

    @abstractmethod
    def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """
        Get a single recipe.

        Args:
            recipe_id: The recipe ID

        Returns:
            The recipe, or None if not found
        """
        pass

    @abstractmethod
    def get_all_recipes(self) -> list[Recipe]:
        """Every recipe in the library, newest first."""
        pass

    @abstractmethod
    def get_recipe_usage_count(self, recipe_id: str) -> int:
        """
        Count usage events (exports, features, campaigns) for a recipe.

        Args:
            recipe_id: The recipe ID

        Returns:
            Number of recorded usage events
        """
        pass


class SimilarityCacheRepository(ABC):
    """
    Directional (recipe_id, other_recipe_id) similarity score cache.
    Invalidation on recipe edits is the caller's responsibility.
    """

    @abstractmethod
    def get_cached_similarities(self, recipe_id: str) -> list[CachedSimilarity]:
        """
        Get every cached row anchored at recipe_id.

        Args:
            recipe_id: The anchor recipe

        Returns:
            Cached rows, in any order
        """
        pass

    @abstractmethod
    def put_cached_similarity(
        self,
        recipe_id: str,
        other_recipe_id: str,
        score: float,
        explanation: SimilarityExplanation,
    ) -> None:
        """
        Insert or replace one cache row.

        Args:
            recipe_id: The anchor recipe
            other_recipe_id: The compared recipe
            score: Total similarity score
            explanation: Score breakdown, serialized at the storage edge
        """
        pass

    @abstractmethod
    def clear(self, recipe_id: Optional[str] = None) -> None:
        """
        Drop cache rows where recipe_id is on either side, or every row when None.

        Args:
            recipe_id: The recipe whose content changed
        """
        pass


class PackRepository(ABC):
    """
    Storage for accepted pack suggestions.
    """

    @abstractmethod
    def create_pack(
        self,
        name: str,
        description: Optional[str],
        recipe_ids: Sequence[str],
    ) -> str:
        """
        Persist a pack and its ordered recipe list.

        Args:
            name: Pack name
            description: Optional description
            recipe_ids: Recipes in pack order

        Returns:
            The new pack ID
        """
        pass
