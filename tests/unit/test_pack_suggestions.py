from __future__ import annotations

from itertools import combinations

import pytest

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
from src.app.services.pack_suggestions import (
    PackSuggestionService,
    build_cuisine_pack,
    build_diverse_pack,
    deduplicate_suggestions,
    generate_pack_description,
    generate_pack_name,
    score_recipe,
)
from src.app.services.similarity_scoring import calculate_pack_diversity

from recipe_stubs import PackRepositoryStub, RecipeRepositoryStub, make_recipe


def _scored(recipes: list[Recipe], score: float = 1.0) -> list[ScoredRecipe]:
    return [ScoredRecipe(recipe=recipe, score=score) for recipe in recipes]


def _service(recipes: list[Recipe], usage: dict[str, int] | None = None) -> PackSuggestionService:
    return PackSuggestionService(
        recipe_repository=RecipeRepositoryStub(recipes, usage),
        pack_repository=PackRepositoryStub(),
    )


class TestScoreRecipe:
    def test_base_score(self) -> None:
        assert score_recipe(make_recipe("a"), usage_count=3, prefer_unused=True) == 1.0

    def test_every_bonus(self) -> None:
        recipe = make_recipe(
            "a",
            description="Weeknight favourite",
            total_time=20,
            image_uri="https://example.com/a.jpg",
            servings=4,
            editors_pick=True,
        )

        assert score_recipe(recipe, usage_count=0, prefer_unused=True) == pytest.approx(2.2)

    def test_unused_bonus_only_when_preferred(self) -> None:
        assert score_recipe(make_recipe("a"), usage_count=0, prefer_unused=False) == 1.0


class TestBuildDiversePack:
    def test_picks_distinct_recipes(self, library: list[Recipe]) -> None:
        draft = build_diverse_pack(_scored(library), 5, maximize_diversity=True)
        ids = [recipe.id for recipe in draft.recipes]

        assert len(ids) == 5
        assert len(set(ids)) == 5
        assert ids[0] == "it-1"
        assert len({recipe.cuisine_type for recipe in draft.recipes}) > 1

    def test_at_least_as_diverse_as_most_homogeneous_subset(self, library: list[Recipe]) -> None:
        draft = build_diverse_pack(_scored(library), 5, maximize_diversity=True)
        worst = min(calculate_pack_diversity(subset) for subset in combinations(library, 5))

        assert draft.diversity_score >= worst
        assert draft.diversity_score == pytest.approx(calculate_pack_diversity(draft.recipes))

    def test_without_diversity_takes_score_order(self, library: list[Recipe]) -> None:
        draft = build_diverse_pack(_scored(library), 3, maximize_diversity=False)

        assert [recipe.id for recipe in draft.recipes] == ["it-1", "it-2", "it-3"]

    def test_seeds_with_highest_score_from_unsorted_input(self, library: list[Recipe]) -> None:
        scored = [ScoredRecipe(recipe=library[0], score=1.0), ScoredRecipe(recipe=library[9], score=2.0)]

        draft = build_diverse_pack(scored, 1, maximize_diversity=True)

        assert [recipe.id for recipe in draft.recipes] == ["th-3"]

    def test_without_diversity_orders_unsorted_input_by_score(self, library: list[Recipe]) -> None:
        scored = [
            ScoredRecipe(recipe=library[0], score=1.0),
            ScoredRecipe(recipe=library[1], score=1.6),
            ScoredRecipe(recipe=library[2], score=1.2),
            ScoredRecipe(recipe=library[3], score=1.6),
        ]

        draft = build_diverse_pack(scored, 4, maximize_diversity=False)

        assert [recipe.id for recipe in draft.recipes] == ["it-2", "it-4", "it-3", "it-1"]

    def test_ties_keep_first_candidate(self) -> None:
        twins = [make_recipe(recipe_id, "Plain Rice", ["rice"], text_blob="plain rice") for recipe_id in "abcd"]

        draft = build_diverse_pack(_scored(twins), 3, maximize_diversity=True)

        assert [recipe.id for recipe in draft.recipes] == ["a", "b", "c"]

    def test_stops_when_candidates_run_out(self, library: list[Recipe]) -> None:
        draft = build_diverse_pack(_scored(library[:2]), 5, maximize_diversity=True)

        assert len(draft.recipes) == 2

    def test_empty_candidates(self) -> None:
        draft = build_diverse_pack([], 3, maximize_diversity=True)

        assert draft.recipes == ()
        assert draft.diversity_score == 1.0

    def test_reasons(self, library: list[Recipe]) -> None:
        scored = [ScoredRecipe(recipe=recipe, score=1.0, usage_count=0) for recipe in library]

        draft = build_diverse_pack(scored, 4, maximize_diversity=True)

        assert "4 fresh/unused recipes" in draft.reasons


class TestBuildCuisinePack:
    def test_keeps_score_order_within_cuisine(self, library: list[Recipe]) -> None:
        draft = build_cuisine_pack(_scored(library), 2, "Thai")

        assert [recipe.id for recipe in draft.recipes] == ["th-1", "th-2"]
        assert draft.reasons == ("All Thai cuisine", "2 recipes")


class TestNamingAndDescription:
    def test_dominant_cuisine_in_name(self, library: list[Recipe]) -> None:
        recipes = [library[0], library[1], library[2], library[4], library[7]]

        assert generate_pack_name(recipes, "Diverse") == "Diverse Italian Collection"

    def test_no_dominant_cuisine(self) -> None:
        recipes = [make_recipe(str(i), cuisine_type=cuisine) for i, cuisine in enumerate(["A", "B", "C", "D", "E"])]

        assert generate_pack_name(recipes, "Diverse") == "Diverse Recipe Collection"

    def test_no_cuisines(self) -> None:
        assert generate_pack_name([make_recipe("a")], "Weekly") == "Weekly Recipe Collection"

    def test_description_lists_first_three_cuisines(self) -> None:
        recipes = [
            make_recipe(str(i), cuisine_type=cuisine)
            for i, cuisine in enumerate(["Italian", "Mexican", "Italian", "Thai", "Indian"])
        ]

        assert generate_pack_description(recipes) == (
            "A curated collection of 5 recipes featuring Italian, Mexican, Thai and more cuisines"
        )

    def test_description_without_cuisines(self) -> None:
        assert generate_pack_description([make_recipe("a"), make_recipe("b")]) == "A curated collection of 2 recipes"


class TestDeduplicateSuggestions:
    def test_same_recipe_set_collapses_to_first(self, library: list[Recipe]) -> None:
        first = PackSuggestion(name="First", description="", recipes=[library[0], library[1]])
        second = PackSuggestion(name="Second", description="", recipes=[library[1], library[0]])
        third = PackSuggestion(name="Third", description="", recipes=[library[2]])

        unique = deduplicate_suggestions([first, second, third])

        assert [suggestion.name for suggestion in unique] == ["First", "Third"]


class TestGeneratePackSuggestions:
    def test_invalid_pack_size(self, library: list[Recipe]) -> None:
        with pytest.raises(InvalidPackSizeError) as exc_info:
            _service(library).generate_pack_suggestions(PackSuggestionOptions(pack_size=0))

        assert exc_info.value.size == 0

    def test_empty_library(self) -> None:
        assert _service([]).generate_pack_suggestions(PackSuggestionOptions(pack_size=3)) == []

    def test_library_smaller_than_pack(self, library: list[Recipe]) -> None:
        assert _service(library).generate_pack_suggestions(PackSuggestionOptions(pack_size=11)) == []

    def test_relaxes_filters_when_too_few_match(self, library: list[Recipe]) -> None:
        repo = RecipeRepositoryStub(library)
        service = PackSuggestionService(recipe_repository=repo, pack_repository=PackRepositoryStub())

        suggestions = service.generate_pack_suggestions(PackSuggestionOptions(pack_size=8, max_time=30))

        assert repo.list_calls == [RecipeFilters(max_time=30), RecipeFilters()]
        assert any(len(suggestion.recipes) == 8 for suggestion in suggestions)

    def test_difficulty_filter_reaches_repository(self, library: list[Recipe]) -> None:
        repo = RecipeRepositoryStub(library)
        service = PackSuggestionService(recipe_repository=repo, pack_repository=PackRepositoryStub())

        suggestions = service.generate_pack_suggestions(PackSuggestionOptions(pack_size=3, difficulty="easy"))

        assert repo.list_calls == [RecipeFilters(difficulty="easy")]
        assert suggestions
        assert all(recipe.difficulty == "easy" for suggestion in suggestions for recipe in suggestion.recipes)

    def test_fresh_picks_needs_five_unused(self, library: list[Recipe]) -> None:
        usage = {recipe.id: 2 for recipe in library[3:]}

        suggestions = _service(library, usage).generate_pack_suggestions(PackSuggestionOptions(pack_size=10))
        names = [suggestion.name for suggestion in suggestions]

        assert "Fresh Picks" not in names
        assert any(name.startswith("Diverse") for name in names)

    def test_fresh_picks_included(self, library: list[Recipe]) -> None:
        usage = {recipe.id: 1 for recipe in library[5:]}

        suggestions = _service(library, usage).generate_pack_suggestions(PackSuggestionOptions(pack_size=6))
        fresh = next(suggestion for suggestion in suggestions if suggestion.name == "Fresh Picks")

        assert {recipe.id for recipe in fresh.recipes} == {recipe.id for recipe in library[:5]}
        assert "All recipes are unused" in fresh.reasons

    def test_no_fresh_picks_when_not_preferred(self, library: list[Recipe]) -> None:
        suggestions = _service(library).generate_pack_suggestions(
            PackSuggestionOptions(pack_size=5, prefer_unused=False)
        )

        assert all(suggestion.name != "Fresh Picks" for suggestion in suggestions)

    def test_quick_pack(self, library: list[Recipe]) -> None:
        suggestions = _service(library).generate_pack_suggestions(PackSuggestionOptions(pack_size=4))
        quick = next(suggestion for suggestion in suggestions if suggestion.name == "Quick & Easy")

        assert all(recipe.total_time <= 30 for recipe in quick.recipes)
        assert "All recipes take 30 minutes or less" in quick.reasons

    def test_ranked_by_diversity(self, library: list[Recipe]) -> None:
        suggestions = _service(library).generate_pack_suggestions(PackSuggestionOptions(pack_size=5))
        scores = [suggestion.diversity_score for suggestion in suggestions]

        assert len(suggestions) >= 2
        assert scores == sorted(scores, reverse=True)

    def test_no_two_suggestions_share_a_recipe_set(self, library: list[Recipe]) -> None:
        suggestions = _service(library).generate_pack_suggestions(PackSuggestionOptions(pack_size=5))
        keys = [frozenset(suggestion.recipe_ids) for suggestion in suggestions]

        assert len(keys) == len(set(keys))

    def test_cuisine_pack_identical_to_diverse_pack_is_dropped(self, library: list[Recipe]) -> None:
        suggestions = _service(library).generate_pack_suggestions(
            PackSuggestionOptions(pack_size=4, cuisine_type="Italian")
        )

        assert [suggestion.name for suggestion in suggestions] == ["Diverse Italian Collection"]

    def test_cuisine_pack_skipped_when_too_few_match(self, library: list[Recipe]) -> None:
        suggestions = _service(library).generate_pack_suggestions(
            PackSuggestionOptions(pack_size=5, cuisine_type="Thai")
        )

        assert all(suggestion.name != "Thai Favorites" for suggestion in suggestions)


class TestGenerateThemedPack:
    def test_unknown_theme(self, library: list[Recipe]) -> None:
        with pytest.raises(UnknownThemeError) as exc_info:
            _service(library).generate_themed_pack("brunch")

        assert exc_info.value.theme == "brunch"

    def test_invalid_size(self, library: list[Recipe]) -> None:
        with pytest.raises(InvalidPackSizeError):
            _service(library).generate_themed_pack(PackTheme.BUDGET, size=0)

    def test_weeknight(self, library: list[Recipe]) -> None:
        suggestion = _service(library).generate_themed_pack("weeknight", size=10)

        assert suggestion is not None
        assert suggestion.name == "Weeknight Winners"
        assert suggestion.description == "Perfect for weeknight cooking"
        assert len(suggestion.recipes) == 6
        assert all(recipe.total_time <= 30 for recipe in suggestion.recipes)

    def test_too_few_recipes_returns_none(self, library: list[Recipe]) -> None:
        assert _service(library).generate_themed_pack(PackTheme.PARTY) is None

    def test_comfort_merges_without_duplicates(self) -> None:
        recipes = [
            make_recipe("us-1", "Mac and Cheese", ["macaroni", "cheddar"], cuisine_type="American"),
            make_recipe("us-2", "Meatloaf", ["ground beef", "breadcrumbs"], cuisine_type="American"),
            make_recipe("it-1", "Lasagna", ["lasagna sheets", "ricotta"], cuisine_type="Italian"),
            make_recipe("th-1", "Tom Yum", ["shrimp", "lemongrass"], cuisine_type="Thai"),
        ]

        suggestion = _service(recipes).generate_themed_pack(PackTheme.COMFORT, size=5)

        assert suggestion is not None
        assert suggestion.name == "Comfort Classics"
        assert sorted(suggestion.recipe_ids) == ["it-1", "us-1", "us-2"]

    def test_healthy_tops_up_with_low_carb(self) -> None:
        recipes = [
            make_recipe("r1", "Zucchini Noodles", ["zucchini"], dietary_tags=["Healthy", "Low-Carb"]),
            make_recipe("r2", "Quinoa Bowl", ["quinoa"], dietary_tags=["Healthy"]),
            make_recipe("r3", "Cauliflower Rice", ["cauliflower"], dietary_tags=["Low-Carb"]),
            make_recipe("r4", "Chocolate Cake", ["chocolate"]),
        ]

        suggestion = _service(recipes).generate_themed_pack("healthy", size=10)

        assert suggestion is not None
        assert sorted(suggestion.recipe_ids) == ["r1", "r2", "r3"]


class TestLoadAndSave:
    def test_load_recipes_in_order(self, library: list[Recipe]) -> None:
        recipes = _service(library).load_recipes(["th-1", "it-2", "th-1"])

        assert [recipe.id for recipe in recipes] == ["th-1", "it-2"]

    def test_load_unknown_recipe(self, library: list[Recipe]) -> None:
        with pytest.raises(RecipeNotFoundError) as exc_info:
            _service(library).load_recipes(["it-1", "nope"])

        assert exc_info.value.recipe_id == "nope"

    def test_save_suggestion(self, library: list[Recipe]) -> None:
        packs = PackRepositoryStub()
        service = PackSuggestionService(recipe_repository=RecipeRepositoryStub(library), pack_repository=packs)
        suggestion = PackSuggestion.from_draft(
            PackDraft(recipes=(library[0], library[5])),
            name="Date Night",
            description="Two courses",
        )

        pack_id = service.save_suggestion(suggestion)

        assert pack_id == "pack-1"
        assert packs.created == [("Date Night", "Two courses", ["it-1", "mx-2"])]
