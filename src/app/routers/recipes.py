# src/app/routers/recipes.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from src.app.config import get_settings
from src.app.deps import get_similarity_service
from src.app.domain.errors import RepositoryError
from src.app.domain.models import Recipe, SimilarRecipe
from src.app.schemas.recipes import (
    IngredientItem,
    RecipeResponse,
    SimilarityExplanationResponse,
    SimilarRecipeResponse,
)
from src.app.services.similarity_service import SimilarityService

router = APIRouter(prefix="/recipes", tags=["recipes"])


def _recipe_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(
        id=recipe.id,
        title=recipe.title,
        description=recipe.description,
        cuisineType=recipe.cuisine_type,
        difficulty=recipe.difficulty,
        totalTime=recipe.total_time,
        servings=recipe.servings,
        imageUri=recipe.image_uri,
        mealType=list(recipe.meal_type),
        dietaryTags=list(recipe.dietary_tags),
        ingredients=[
            IngredientItem(
                item=ing.item,
                quantity=ing.quantity or None,
                unit=ing.unit or None,
                notes=ing.notes,
                category=ing.category,
            )
            for ing in recipe.ingredients
        ],
        editorsPick=recipe.editors_pick,
    )


def _similar_response(item: SimilarRecipe) -> SimilarRecipeResponse:
    return SimilarRecipeResponse(
        recipe=_recipe_response(item.recipe),
        score=item.score,
        explanation=SimilarityExplanationResponse(
            ingredientScore=item.explanation.ingredient_score,
            textScore=item.explanation.text_score,
            metadataScore=item.explanation.metadata_score,
            commonIngredients=list(item.explanation.common_ingredients),
        ),
    )


@router.get("/{recipe_id}/similar", response_model=list[SimilarRecipeResponse])
async def get_similar_recipes(
    recipe_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    service: SimilarityService = Depends(get_similarity_service),
) -> list[SimilarRecipeResponse]:
    try:
        if service.get_recipe(recipe_id) is None:
            raise HTTPException(status_code=404, detail="Recipe not found")
        similar = service.get_similar_recipes(recipe_id, limit or get_settings().SIMILAR_RECIPES_LIMIT)
    except RepositoryError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return [_similar_response(item) for item in similar]


@router.delete("/{recipe_id}/similar", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_similar_recipes(
    recipe_id: str,
    service: SimilarityService = Depends(get_similarity_service),
) -> Response:
    try:
        service.invalidate(recipe_id)
    except RepositoryError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
