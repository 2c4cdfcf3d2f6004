from __future__ import annotations

import logging

import pytest

from src.app.domain.models import CachedSimilarity, Recipe, SimilarityExplanation
from src.app.services.similarity_service import SimilarityService, decode_explanation

from recipe_stubs import RecipeRepositoryStub, SimilarityCacheStub, make_recipe


@pytest.fixture
def repo(library: list[Recipe]) -> RecipeRepositoryStub:
    return RecipeRepositoryStub(library)


@pytest.fixture
def cache() -> SimilarityCacheStub:
    return SimilarityCacheStub()


@pytest.fixture
def service(repo: RecipeRepositoryStub, cache: SimilarityCacheStub) -> SimilarityService:
    return SimilarityService(recipe_repository=repo, cache_repository=cache)


class TestGetSimilarRecipesCacheMiss:
    def test_unknown_recipe_returns_empty(self, service: SimilarityService, cache: SimilarityCacheStub) -> None:
        assert service.get_similar_recipes("missing") == []
        assert cache.rows == {}

    def test_writes_every_pair_anchored_at_target(
        self,
        service: SimilarityService,
        cache: SimilarityCacheStub,
        library: list[Recipe],
    ) -> None:
        results = service.get_similar_recipes("it-1", limit=3)

        assert len(results) == 3
        assert len(cache.rows) == len(library) - 1
        assert all(anchor == "it-1" for anchor, _ in cache.rows)
        assert ("it-1", "it-1") not in cache.rows

    def test_results_are_sorted_best_first(self, service: SimilarityService) -> None:
        results = service.get_similar_recipes("mx-1")
        scores = [item.score for item in results]

        assert scores == sorted(scores, reverse=True)
        assert len(results) == 9


class TestGetSimilarRecipesCacheHit:
    def test_reproduces_first_call(self, service: SimilarityService) -> None:
        first = service.get_similar_recipes("it-1", limit=5)
        second = service.get_similar_recipes("it-1", limit=5)

        assert [item.recipe.id for item in second] == [item.recipe.id for item in first]
        assert [item.score for item in second] == [item.score for item in first]
        assert [item.explanation for item in second] == [item.explanation for item in first]

    def test_does_not_recompute_on_hit(self, service: SimilarityService, cache: SimilarityCacheStub) -> None:
        service.get_similar_recipes("it-1")
        rows_before = dict(cache.rows)

        service.get_similar_recipes("it-1")

        assert cache.rows == rows_before

    def test_skips_rows_for_deleted_recipes(
        self,
        service: SimilarityService,
        cache: SimilarityCacheStub,
    ) -> None:
        cache.rows[("it-1", "gone")] = CachedSimilarity("it-1", "gone", 0.99, None)
        cache.rows[("it-1", "it-4")] = CachedSimilarity("it-1", "it-4", 0.5, None)

        results = service.get_similar_recipes("it-1")

        assert [item.recipe.id for item in results] == ["it-4"]

    def test_corrupt_payload_reads_as_zero_components(
        self,
        service: SimilarityService,
        cache: SimilarityCacheStub,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        cache.rows[("it-1", "it-2")] = CachedSimilarity("it-1", "it-2", 0.42, "{not json")

        with caplog.at_level(logging.WARNING):
            results = service.get_similar_recipes("it-1")

        assert len(results) == 1
        explanation = results[0].explanation
        assert explanation.ingredient_score == 0.0
        assert explanation.text_score == 0.0
        assert explanation.metadata_score == 0.0
        assert explanation.common_ingredients == ()
        assert results[0].score == 0.42
        assert "Corrupt similarity cache payload" in caplog.text

    def test_limit_applies_after_sorting(self, service: SimilarityService, cache: SimilarityCacheStub) -> None:
        cache.rows[("it-1", "it-2")] = CachedSimilarity("it-1", "it-2", 0.1, None)
        cache.rows[("it-1", "it-3")] = CachedSimilarity("it-1", "it-3", 0.7, None)
        cache.rows[("it-1", "it-4")] = CachedSimilarity("it-1", "it-4", 0.4, None)

        results = service.get_similar_recipes("it-1", limit=2)

        assert [item.recipe.id for item in results] == ["it-3", "it-4"]


class TestDecodeExplanation:
    def test_missing_fields_default_to_zero(self) -> None:
        entry = CachedSimilarity("a", "b", 0.3, '{"ingredientScore": 0.5}')

        explanation = decode_explanation(entry)

        assert explanation.ingredient_score == 0.5
        assert explanation.text_score == 0.0
        assert explanation.total_score == 0.3

    def test_row_score_overrides_stored_total(self) -> None:
        stored = SimilarityExplanation.from_components(1.0, 1.0, 1.0)
        entry = CachedSimilarity("a", "b", 0.25, stored.to_json())

        assert decode_explanation(entry).total_score == 0.25


class TestInvalidate:
    def test_clears_one_recipe(self, service: SimilarityService, cache: SimilarityCacheStub) -> None:
        service.get_similar_recipes("it-1")
        service.get_similar_recipes("mx-1")

        service.invalidate("it-1")

        assert cache.clear_calls == ["it-1"]
        assert all("it-1" not in key for key in cache.rows)
        assert cache.get_cached_similarities("mx-1") != []

    def test_clears_everything(self, service: SimilarityService, cache: SimilarityCacheStub) -> None:
        service.get_similar_recipes("it-1")

        service.invalidate()

        assert cache.rows == {}


class TestFindSimilarRecipes:
    def test_does_not_touch_cache(
        self,
        service: SimilarityService,
        cache: SimilarityCacheStub,
        library: list[Recipe],
    ) -> None:
        target = make_recipe("new", "Garlic Spaghetti", ["spaghetti", "garlic"], cuisine_type="Italian")

        results = service.find_similar_recipes(target, library, limit=2)

        assert len(results) == 2
        assert cache.rows == {}
