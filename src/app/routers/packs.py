# src/app/routers/packs.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.app.config import get_settings
from src.app.deps import get_pack_suggestion_service
from src.app.domain.errors import (
    InvalidPackSizeError,
    RecipeNotFoundError,
    RepositoryError,
    UnknownThemeError,
)
from src.app.domain.models import PackSuggestion, PackSuggestionOptions
from src.app.routers.recipes import _recipe_response
from src.app.schemas.packs import (
    PackCreate,
    PackCreated,
    PackSuggestionRequest,
    PackSuggestionResponse,
    PackValidationRequest,
    PackValidationResponse,
    SimilarityWarningResponse,
)
from src.app.services.pack_suggestions import PackSuggestionService, generate_pack_description
from src.app.services.pack_validation import get_diversity_suggestions, validate_pack
from src.app.services.similarity_scoring import calculate_pack_diversity

router = APIRouter(prefix="/packs", tags=["packs"])


def _suggestion_response(suggestion: PackSuggestion) -> PackSuggestionResponse:
    return PackSuggestionResponse(
        name=suggestion.name,
        description=suggestion.description,
        recipes=[_recipe_response(recipe) for recipe in suggestion.recipes],
        diversityScore=suggestion.diversity_score,
        reasons=list(suggestion.reasons),
    )


def _resolve_pack_size(size: Optional[int]) -> int:
    settings = get_settings()
    if size is None:
        return settings.DEFAULT_PACK_SIZE
    max_size = settings.MAX_PACK_SIZE
    if size > max_size:
        raise HTTPException(status_code=400, detail=f"Pack size must be at most {max_size}")
    return size


@router.post("/suggestions", response_model=list[PackSuggestionResponse])
async def suggest_packs(
    payload: PackSuggestionRequest,
    service: PackSuggestionService = Depends(get_pack_suggestion_service),
) -> list[PackSuggestionResponse]:
    pack_size = _resolve_pack_size(payload.packSize)
    options = PackSuggestionOptions(
        pack_size=pack_size,
        query=payload.query,
        cuisine_type=payload.cuisineType,
        meal_type=payload.mealType,
        dietary_tag=payload.dietaryTag,
        difficulty=payload.difficulty,
        max_time=payload.maxTime,
        prefer_unused=payload.preferUnused,
        maximize_diversity=payload.maximizeDiversity,
    )
    try:
        suggestions = service.generate_pack_suggestions(options)
    except InvalidPackSizeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except RepositoryError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return [_suggestion_response(suggestion) for suggestion in suggestions]


@router.get("/themes/{theme}", response_model=PackSuggestionResponse)
async def themed_pack(
    theme: str,
    size: Optional[int] = Query(default=None, ge=1),
    service: PackSuggestionService = Depends(get_pack_suggestion_service),
) -> PackSuggestionResponse:
    pack_size = _resolve_pack_size(size)
    try:
        suggestion = service.generate_themed_pack(theme, pack_size)
    except UnknownThemeError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except RepositoryError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    if suggestion is None:
        raise HTTPException(status_code=404, detail="Not enough recipes for this theme")
    return _suggestion_response(suggestion)


@router.post("/validate", response_model=PackValidationResponse)
async def validate(
    payload: PackValidationRequest,
    service: PackSuggestionService = Depends(get_pack_suggestion_service),
) -> PackValidationResponse:
    try:
        recipes = service.load_recipes(payload.recipeIds)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except RepositoryError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    result = validate_pack(recipes, similarity_threshold=get_settings().SIMILARITY_THRESHOLD)
    return PackValidationResponse(
        isValid=result.is_valid,
        warnings=result.warnings,
        similarityWarnings=[
            SimilarityWarningResponse(
                recipeAId=warning.recipe_a_id,
                recipeATitle=warning.recipe_a_title,
                recipeBId=warning.recipe_b_id,
                recipeBTitle=warning.recipe_b_title,
                similarity=warning.similarity,
            )
            for warning in result.similarity_warnings
        ],
        diversityScore=result.diversity_score,
        cuisineBreakdown=result.cuisine_breakdown,
        mealTypeBreakdown=result.meal_type_breakdown,
        suggestions=get_diversity_suggestions(result),
    )


@router.post("", response_model=PackCreated, status_code=status.HTTP_201_CREATED)
async def create_pack(
    payload: PackCreate,
    service: PackSuggestionService = Depends(get_pack_suggestion_service),
) -> PackCreated:
    try:
        recipes = service.load_recipes(payload.recipeIds)
        suggestion = PackSuggestion(
            name=payload.name.strip(),
            description=payload.description or generate_pack_description(recipes),
            recipes=recipes,
            diversity_score=calculate_pack_diversity(recipes),
        )
        pack_id = service.save_suggestion(suggestion)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except RepositoryError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return PackCreated(id=pack_id, name=suggestion.name, recipeCount=len(recipes))
