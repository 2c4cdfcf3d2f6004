from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence
from uuid import uuid4

from supabase import Client, create_client

from src.app.config import get_settings
from src.app.domain.errors import RepositoryError
from src.app.domain.models import (
    CachedSimilarity,
    Ingredient,
    Recipe,
    RecipeFilters,
    SimilarityExplanation,
)
from src.app.infra.db.base import PackRepository, RecipeRepository, SimilarityCacheRepository

logger = logging.getLogger(__name__)

RECIPE_COLUMNS = (
    "id,title,description,ingredients,steps,cuisine_type,difficulty,total_time,prep_time,"
    "cook_time,servings,image_uri,meal_type,dietary_tags,tips,editors_pick,text_blob,created_at"
)
DEFAULT_PACK_VERSION = "1.0.0"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _safe_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _safe_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _str_list(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None and str(item).strip())


def _row_to_ingredient(entry: object) -> Ingredient | None:
    if isinstance(entry, str):
        return Ingredient(item=entry)
    if not isinstance(entry, dict):
        return None
    return Ingredient(
        quantity=str(entry.get("quantity") or ""),
        unit=str(entry.get("unit") or ""),
        item=str(entry.get("item") or ""),
        notes=_safe_str(entry.get("notes")),
        category=_safe_str(entry.get("category")),
    )


def _row_to_recipe(row: dict[str, Any]) -> Recipe:
    raw_ingredients = row.get("ingredients") if isinstance(row.get("ingredients"), list) else []
    ingredients = tuple(
        ingredient for ingredient in (_row_to_ingredient(entry) for entry in raw_ingredients) if ingredient
    )
    return Recipe(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        description=_safe_str(row.get("description")),
        ingredients=ingredients,
        steps=_str_list(row.get("steps")),
        cuisine_type=_safe_str(row.get("cuisine_type")),
        difficulty=_safe_str(row.get("difficulty")),
        total_time=_safe_int(row.get("total_time")),
        prep_time=_safe_int(row.get("prep_time")),
        cook_time=_safe_int(row.get("cook_time")),
        servings=_safe_int(row.get("servings")),
        image_uri=_safe_str(row.get("image_uri")),
        meal_type=_str_list(row.get("meal_type")),
        dietary_tags=_str_list(row.get("dietary_tags")),
        tips=_safe_str(row.get("tips")),
        editors_pick=bool(row.get("editors_pick")),
        text_blob=str(row.get("text_blob") or ""),
    )


def _row_to_cached_similarity(row: dict[str, Any]) -> CachedSimilarity:
    return CachedSimilarity(
        recipe_id=str(row["recipe_id"]),
        other_recipe_id=str(row["other_recipe_id"]),
        score=float(row.get("score") or 0),
        explain_json=row.get("explain_json"),
    )


def create_supabase_client() -> Client:
    settings = get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"
    USAGE_TABLE_NAME = "usage_events"

    def __init__(self, client: Client | None = None):
        self._client = client or create_supabase_client()

    def list_recipes(self, filters: RecipeFilters) -> list[Recipe]:
        query = self._client.table(self.TABLE_NAME).select(RECIPE_COLUMNS)

        if filters.query:
            term = filters.query.replace(",", " ")
            query = query.or_(f"title.ilike.%{term}%,text_blob.ilike.%{term}%")
        if filters.cuisine_type:
            query = query.eq("cuisine_type", filters.cuisine_type)
        if filters.difficulty:
            query = query.eq("difficulty", filters.difficulty)
        if filters.meal_type:
            query = query.contains("meal_type", [filters.meal_type])
        if filters.dietary_tag:
            query = query.contains("dietary_tags", [filters.dietary_tag])
        if filters.max_time:
            query = query.lte("total_time", filters.max_time)

        try:
            result = query.order("created_at", desc=True).execute()
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error listing recipes: %s", error)
            raise RepositoryError("list_recipes", str(error)) from error

        return [_row_to_recipe(row) for row in result.data or []]

    def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select(RECIPE_COLUMNS)
                .eq("id", recipe_id)
                .limit(1)
                .execute()
            )
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error fetching recipe %s: %s", recipe_id, error)
            raise RepositoryError("get_recipe_by_id", str(error)) from error

        rows = result.data or []
        return _row_to_recipe(rows[0]) if rows else None

    def get_all_recipes(self) -> list[Recipe]:
        return self.list_recipes(RecipeFilters())

    def get_recipe_usage_count(self, recipe_id: str) -> int:
        try:
            result = (
                self._client.table(self.USAGE_TABLE_NAME)
                .select("id", count="exact")
                .eq("recipe_id", recipe_id)
                .limit(1)
                .execute()
            )
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error counting usage for %s: %s", recipe_id, error)
            raise RepositoryError("get_recipe_usage_count", str(error)) from error

        return getattr(result, "count", 0) or 0


class SupabaseSimilarityCacheRepository(SimilarityCacheRepository):
    TABLE_NAME = "similarity_cache"

    def __init__(self, client: Client | None = None):
        self._client = client or create_supabase_client()

    def get_cached_similarities(self, recipe_id: str) -> list[CachedSimilarity]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("recipe_id,other_recipe_id,score,explain_json")
                .eq("recipe_id", recipe_id)
                .order("score", desc=True)
                .execute()
            )
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error reading similarity cache for %s: %s", recipe_id, error)
            raise RepositoryError("get_cached_similarities", str(error)) from error

        return [_row_to_cached_similarity(row) for row in result.data or []]

    def put_cached_similarity(
        self,
        recipe_id: str,
        other_recipe_id: str,
        score: float,
        explanation: SimilarityExplanation,
    ) -> None:
        payload = {
            "recipe_id": recipe_id,
            "other_recipe_id": other_recipe_id,
            "score": score,
            "explain_json": explanation.to_json(),
        }
        try:
            self._client.table(self.TABLE_NAME).upsert(
                payload, on_conflict="recipe_id,other_recipe_id"
            ).execute()
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error writing similarity cache %s->%s: %s", recipe_id, other_recipe_id, error)
            raise RepositoryError("put_cached_similarity", str(error)) from error

    def clear(self, recipe_id: Optional[str] = None) -> None:
        query = self._client.table(self.TABLE_NAME).delete()
        if recipe_id:
            query = query.or_(f"recipe_id.eq.{recipe_id},other_recipe_id.eq.{recipe_id}")
        else:
            # PostgREST refuses unfiltered deletes
            query = query.neq("recipe_id", "")
        try:
            query.execute()
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error clearing similarity cache: %s", error)
            raise RepositoryError("clear_similarity_cache", str(error)) from error
        logger.info("Similarity cache cleared: recipe=%s", recipe_id or "*")


class SupabasePackRepository(PackRepository):
    TABLE_NAME = "packs"
    ITEMS_TABLE_NAME = "pack_recipes"

    def __init__(self, client: Client | None = None):
        self._client = client or create_supabase_client()

    def create_pack(
        self,
        name: str,
        description: Optional[str],
        recipe_ids: Sequence[str],
    ) -> str:
        pack_id = str(uuid4())
        now = _now_utc().isoformat()
        pack_data = {
            "id": pack_id,
            "name": name,
            "description": description,
            "version": DEFAULT_PACK_VERSION,
            "created_at": now,
            "updated_at": now,
        }
        items = [
            {"pack_id": pack_id, "recipe_id": recipe_id, "order_index": index}
            for index, recipe_id in enumerate(recipe_ids)
        ]

        try:
            result = self._client.table(self.TABLE_NAME).insert(pack_data).execute()
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error creating pack: %s", error)
            raise RepositoryError("create_pack", str(error)) from error
        if not result.data:
            raise RepositoryError("create_pack", "insert returned no rows")

        if items:
            try:
                self._client.table(self.ITEMS_TABLE_NAME).insert(items).execute()
            except (ConnectionError, TimeoutError) as error:
                logger.error("Network error adding recipes to pack %s: %s", pack_id, error)
                self._delete_pack(pack_id)
                raise RepositoryError("create_pack", str(error)) from error

        logger.info("Created pack: id=%s, name=%s, recipes=%d", pack_id, name, len(items))
        return pack_id

    def _delete_pack(self, pack_id: str) -> None:
        # a pack without its recipe rows must not outlive a failed create
        try:
            self._client.table(self.TABLE_NAME).delete().eq("id", pack_id).execute()
        except (ConnectionError, TimeoutError) as error:
            logger.error("Failed to remove partially created pack %s: %s", pack_id, error)
