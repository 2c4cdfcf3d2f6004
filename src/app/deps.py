# src/app/deps.py (singleton client, exposed as dependencies)

from __future__ import annotations

from fastapi import Depends
from supabase import Client

from src.app.infra.db.base import PackRepository, RecipeRepository, SimilarityCacheRepository
from src.app.infra.db.supabase_recipes_repo import (
    SupabasePackRepository,
    SupabaseRecipeRepository,
    SupabaseSimilarityCacheRepository,
    create_supabase_client,
)
from src.app.services.pack_suggestions import PackSuggestionService
from src.app.services.similarity_service import SimilarityService

_client: Client | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_supabase_client()
    return _client


def get_recipe_repository(supa: Client = Depends(get_supabase)) -> RecipeRepository:
    return SupabaseRecipeRepository(supa)


def get_similarity_cache_repository(supa: Client = Depends(get_supabase)) -> SimilarityCacheRepository:
    return SupabaseSimilarityCacheRepository(supa)


def get_pack_repository(supa: Client = Depends(get_supabase)) -> PackRepository:
    return SupabasePackRepository(supa)


def get_similarity_service(
    recipes: RecipeRepository = Depends(get_recipe_repository),
    cache: SimilarityCacheRepository = Depends(get_similarity_cache_repository),
) -> SimilarityService:
    return SimilarityService(recipes, cache)


def get_pack_suggestion_service(
    recipes: RecipeRepository = Depends(get_recipe_repository),
    packs: PackRepository = Depends(get_pack_repository),
) -> PackSuggestionService:
    return PackSuggestionService(recipes, packs)
