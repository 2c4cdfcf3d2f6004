# src/app/services/pack_suggestions.py
"""
Pack suggestion engine.

Pipeline per request: filter -> score -> greedy diverse selection ->
name/describe -> de-duplicate across strategies -> rank by diversity.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Optional, Sequence

from src.app.domain.errors import InvalidPackSizeError, RecipeNotFoundError, UnknownThemeError
from src.app.domain.models import (
    PackDraft,
    PackSuggestion,
    PackSuggestionOptions,
    PackTheme,
    Recipe,
    RecipeFilters,
    ScoredRecipe,
)
from src.app.infra.db.base import PackRepository, RecipeRepository
from src.app.infra.db.supabase_recipes_repo import SupabasePackRepository, SupabaseRecipeRepository
from src.app.services.similarity_scoring import calculate_pack_diversity

logger = logging.getLogger(__name__)

DIVERSITY_WEIGHT = 0.7
HEURISTIC_WEIGHT = 0.3

QUICK_MAX_MINUTES = 30
MIN_STRATEGY_CANDIDATES = 5
MIN_THEMED_RECIPES = 3

THEME_NAMES: dict[PackTheme, str] = {
    PackTheme.WEEKNIGHT: "Weeknight Winners",
    PackTheme.HEALTHY: "Healthy Eats",
    PackTheme.COMFORT: "Comfort Classics",
    PackTheme.PARTY: "Party Pleasers",
    PackTheme.BUDGET: "Budget Friendly",
}


def score_recipe(recipe: Recipe, usage_count: int, prefer_unused: bool) -> float:
    score = 1.0
    if prefer_unused and usage_count == 0:
        score += 0.5
    # completeness
    if recipe.image_uri:
        score += 0.1
    if recipe.description:
        score += 0.1
    if recipe.total_time:
        score += 0.1
    if recipe.servings:
        score += 0.1
    if recipe.editors_pick:
        score += 0.3
    return score


def _pack_reasons(selected: Sequence[Recipe], usage_by_id: dict[str, int]) -> tuple[str, ...]:
    reasons: list[str] = []

    cuisines = {recipe.cuisine_type for recipe in selected if recipe.cuisine_type}
    if len(cuisines) > 1:
        reasons.append(f"Includes {len(cuisines)} different cuisines")

    difficulties = {recipe.difficulty for recipe in selected if recipe.difficulty}
    if len(difficulties) > 1:
        reasons.append("Mix of difficulty levels")

    unused = sum(1 for recipe in selected if usage_by_id.get(recipe.id) == 0)
    if unused > len(selected) / 2:
        reasons.append(f"{unused} fresh/unused recipes")

    return tuple(reasons)


def _pick_next(
    selected: tuple[Recipe, ...],
    remaining: Sequence[ScoredRecipe],
    maximize_diversity: bool,
) -> Optional[ScoredRecipe]:
    if not remaining:
        return None
    if not maximize_diversity:
        return remaining[0]

    best: Optional[ScoredRecipe] = None
    best_value = float("-inf")
    for candidate in remaining:
        diversity = calculate_pack_diversity([*selected, candidate.recipe])
        value = diversity * DIVERSITY_WEIGHT + candidate.score * HEURISTIC_WEIGHT
        # strict comparison: the first candidate reaching the max wins
        if value > best_value:
            best_value = value
            best = candidate
    return best


def build_diverse_pack(
    scored_recipes: Sequence[ScoredRecipe],
    size: int,
    maximize_diversity: bool,
) -> PackDraft:
    """
    Greedy pack construction.

    Seeds with the highest-scored candidate, then repeatedly adds the
    candidate maximising 0.7 * pack diversity + 0.3 * heuristic score. With
    maximize_diversity off, candidates are taken in score order.
    """
    selected: tuple[Recipe, ...] = ()
    # stable: equal scores keep caller order
    remaining: tuple[ScoredRecipe, ...] = tuple(sorted(scored_recipes, key=lambda item: item.score, reverse=True))

    while len(selected) < size:
        if not selected:
            choice = remaining[0] if remaining else None
        else:
            choice = _pick_next(selected, remaining, maximize_diversity)
        if choice is None:
            break
        selected = (*selected, choice.recipe)
        remaining = tuple(item for item in remaining if item.recipe.id != choice.recipe.id)

    usage_by_id = {item.recipe.id: item.usage_count for item in scored_recipes}
    return PackDraft(
        recipes=selected,
        diversity_score=calculate_pack_diversity(selected),
        reasons=_pack_reasons(selected, usage_by_id),
    )


def build_cuisine_pack(scored_recipes: Sequence[ScoredRecipe], size: int, cuisine_type: str) -> PackDraft:
    selected = tuple(
        item.recipe for item in scored_recipes if item.recipe.cuisine_type == cuisine_type
    )[:size]
    return PackDraft(
        recipes=selected,
        diversity_score=calculate_pack_diversity(selected),
        reasons=(f"All {cuisine_type} cuisine", f"{len(selected)} recipes"),
    )


def generate_pack_name(recipes: Sequence[Recipe], prefix: str) -> str:
    counts = Counter(recipe.cuisine_type for recipe in recipes if recipe.cuisine_type)
    if counts:
        # most_common keeps first-seen order among equal counts
        top_cuisine, top_count = counts.most_common(1)[0]
        if top_count > len(recipes) / 3:
            return f"{prefix} {top_cuisine} Collection"
    return f"{prefix} Recipe Collection"


def generate_pack_description(recipes: Sequence[Recipe]) -> str:
    cuisines = list(dict.fromkeys(recipe.cuisine_type for recipe in recipes if recipe.cuisine_type))
    description = f"A curated collection of {len(recipes)} recipes"
    if cuisines:
        description += f" featuring {', '.join(cuisines[:3])}"
        if len(cuisines) > 3:
            description += " and more"
        description += " cuisines"
    return description


def deduplicate_suggestions(suggestions: Iterable[PackSuggestion]) -> list[PackSuggestion]:
    """Collapse suggestions holding the same set of recipes; the first one wins."""
    seen: set[frozenset[str]] = set()
    unique: list[PackSuggestion] = []
    for suggestion in suggestions:
        key = frozenset(suggestion.recipe_ids)
        if key in seen:
            continue
        seen.add(key)
        unique.append(suggestion)
    return unique


def _merge_unique(*groups: Iterable[Recipe]) -> list[Recipe]:
    merged: dict[str, Recipe] = {}
    for group in groups:
        for recipe in group:
            merged.setdefault(recipe.id, recipe)
    return list(merged.values())


class PackSuggestionService:
    """
    Service for building pack suggestions out of the recipe library.

    Responsibilities:
    - Filter candidates (relaxing filters when too few match)
    - Score candidates for inclusion
    - Run the named strategies and rank their packs
    - Build themed packs
    - Hand accepted suggestions over to pack storage
    """

    def __init__(
        self,
        recipe_repository: Optional[RecipeRepository] = None,
        pack_repository: Optional[PackRepository] = None,
    ):
        self._recipes = recipe_repository or SupabaseRecipeRepository()
        self._packs = pack_repository or SupabasePackRepository()

    def score_recipes(self, recipes: Iterable[Recipe], prefer_unused: bool) -> list[ScoredRecipe]:
        """
        Assign a heuristic inclusion score to each recipe.

        Args:
            recipes: Candidate recipes
            prefer_unused: Whether never-used recipes get a bonus

        Returns:
            Scored recipes, best first (ties keep input order)
        """
        scored: list[ScoredRecipe] = []
        for recipe in recipes:
            usage_count = self._recipes.get_recipe_usage_count(recipe.id)
            scored.append(
                ScoredRecipe(
                    recipe=recipe,
                    score=score_recipe(recipe, usage_count, prefer_unused),
                    usage_count=usage_count,
                )
            )
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored

    def generate_pack_suggestions(self, options: PackSuggestionOptions) -> list[PackSuggestion]:
        """
        Build pack suggestions for the given options.

        Args:
            options: Pack size, filters and strategy switches

        Returns:
            Suggestions ranked by diversity score; empty when the library is
            smaller than the requested pack size

        Raises:
            InvalidPackSizeError: If pack_size is below 1
        """
        pack_size = options.pack_size
        if pack_size < 1:
            raise InvalidPackSizeError(pack_size)

        candidates = self._recipes.list_recipes(options.filters)
        if len(candidates) < pack_size:
            logger.info(
                "Relaxing filters: matched=%d, pack_size=%d", len(candidates), pack_size
            )
            candidates = self._recipes.list_recipes(RecipeFilters())
        if len(candidates) < pack_size:
            logger.info("Not enough recipes for a pack: available=%d, pack_size=%d", len(candidates), pack_size)
            return []

        scored = self.score_recipes(candidates, options.prefer_unused)
        suggestions: list[PackSuggestion] = []

        diverse = build_diverse_pack(scored, pack_size, options.maximize_diversity)
        if len(diverse.recipes) >= pack_size:
            suggestions.append(
                PackSuggestion.from_draft(
                    diverse,
                    name=generate_pack_name(diverse.recipes, "Diverse"),
                    description=generate_pack_description(diverse.recipes),
                )
            )

        if options.cuisine_type:
            cuisine = build_cuisine_pack(scored, pack_size, options.cuisine_type)
            if len(cuisine.recipes) >= min(pack_size, MIN_STRATEGY_CANDIDATES):
                suggestions.append(
                    PackSuggestion.from_draft(
                        cuisine,
                        name=f"{options.cuisine_type} Favorites",
                        description=f"A collection of {options.cuisine_type} recipes",
                    )
                )
            else:
                logger.debug("Skipping cuisine pack: cuisine=%s, matched=%d", options.cuisine_type, len(cuisine.recipes))

        quick = [item for item in scored if item.recipe.total_time and item.recipe.total_time <= QUICK_MAX_MINUTES]
        if len(quick) >= MIN_STRATEGY_CANDIDATES:
            quick_pack = build_diverse_pack(quick, min(pack_size, len(quick)), True)
            suggestions.append(
                PackSuggestion.from_draft(
                    quick_pack,
                    name="Quick & Easy",
                    description=f"Recipes ready in {QUICK_MAX_MINUTES} minutes or less",
                    extra_reasons=(f"All recipes take {QUICK_MAX_MINUTES} minutes or less",),
                )
            )
        else:
            logger.debug("Skipping quick pack: qualifying=%d", len(quick))

        if options.prefer_unused:
            unused = [item for item in scored if item.usage_count == 0]
            if len(unused) >= MIN_STRATEGY_CANDIDATES:
                fresh_pack = build_diverse_pack(unused, min(pack_size, len(unused)), True)
                suggestions.append(
                    PackSuggestion.from_draft(
                        fresh_pack,
                        name="Fresh Picks",
                        description="Recipes that haven't been used yet",
                        extra_reasons=("All recipes are unused",),
                    )
                )
            else:
                logger.debug("Skipping fresh picks: unused=%d", len(unused))

        ranked = sorted(deduplicate_suggestions(suggestions), key=lambda s: s.diversity_score, reverse=True)
        logger.info("Generated %d pack suggestions from %d candidates", len(ranked), len(candidates))
        return ranked

    def generate_themed_pack(self, theme: PackTheme | str, size: int = 10) -> Optional[PackSuggestion]:
        """
        Build a pack for one of the canned themes.

        Args:
            theme: weeknight, healthy, comfort, party or budget
            size: Target pack size

        Returns:
            The themed pack, or None when fewer than three recipes qualify

        Raises:
            UnknownThemeError: If theme is not a known theme
            InvalidPackSizeError: If size is below 1
        """
        try:
            pack_theme = PackTheme(theme)
        except ValueError as exc:
            raise UnknownThemeError(str(theme)) from exc
        if size < 1:
            raise InvalidPackSizeError(size)

        recipes = self._themed_candidates(pack_theme, size)
        if len(recipes) < MIN_THEMED_RECIPES:
            logger.info("Not enough recipes for themed pack: theme=%s, available=%d", pack_theme.value, len(recipes))
            return None

        scored = self.score_recipes(recipes, prefer_unused=True)
        draft = build_diverse_pack(scored, min(size, len(recipes)), True)
        return PackSuggestion.from_draft(
            draft,
            name=THEME_NAMES[pack_theme],
            description=f"Perfect for {pack_theme.value} cooking",
        )

    def load_recipes(self, recipe_ids: Sequence[str]) -> list[Recipe]:
        """
        Resolve recipe IDs in order.

        Raises:
            RecipeNotFoundError: If any ID is unknown
        """
        recipes: list[Recipe] = []
        for recipe_id in dict.fromkeys(recipe_ids):
            recipe = self._recipes.get_recipe_by_id(recipe_id)
            if recipe is None:
                raise RecipeNotFoundError(recipe_id)
            recipes.append(recipe)
        return recipes

    def save_suggestion(self, suggestion: PackSuggestion) -> str:
        """
        Persist an accepted suggestion as a pack.

        Returns:
            The new pack ID
        """
        return self._packs.create_pack(suggestion.name, suggestion.description, suggestion.recipe_ids)

    def _themed_candidates(self, theme: PackTheme, size: int) -> list[Recipe]:
        list_recipes = self._recipes.list_recipes
        if theme is PackTheme.WEEKNIGHT:
            return list_recipes(RecipeFilters(max_time=QUICK_MAX_MINUTES))
        if theme is PackTheme.HEALTHY:
            recipes = list_recipes(RecipeFilters(dietary_tag="Healthy"))
            if len(recipes) < size:
                recipes = _merge_unique(recipes, list_recipes(RecipeFilters(dietary_tag="Low-Carb")))
            return recipes
        if theme is PackTheme.COMFORT:
            return _merge_unique(
                list_recipes(RecipeFilters(cuisine_type="American")),
                list_recipes(RecipeFilters(cuisine_type="Italian")),
            )
        if theme is PackTheme.PARTY:
            return _merge_unique(
                list_recipes(RecipeFilters(meal_type="Snack")),
                list_recipes(RecipeFilters(meal_type="Appetizer")),
            )
        return list_recipes(RecipeFilters())
