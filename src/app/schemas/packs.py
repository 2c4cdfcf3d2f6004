# src/app/schemas/packs.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from src.app.schemas.recipes import RecipeResponse


class PackSuggestionRequest(BaseModel):
    packSize: Optional[int] = Field(default=None, ge=1, le=100)
    query: Optional[str] = Field(default=None, max_length=120)
    cuisineType: Optional[str] = None
    mealType: Optional[str] = None
    dietaryTag: Optional[str] = None
    difficulty: Optional[str] = None
    maxTime: Optional[int] = Field(default=None, ge=1)
    preferUnused: bool = True
    maximizeDiversity: bool = True


class PackSuggestionResponse(BaseModel):
    name: str
    description: str
    recipes: list[RecipeResponse] = Field(default_factory=list)
    diversityScore: float
    reasons: list[str] = Field(default_factory=list)


class PackValidationRequest(BaseModel):
    recipeIds: list[str] = Field(default_factory=list)


class SimilarityWarningResponse(BaseModel):
    recipeAId: str
    recipeATitle: str
    recipeBId: str
    recipeBTitle: str
    similarity: float


class PackValidationResponse(BaseModel):
    isValid: bool
    warnings: list[str] = Field(default_factory=list)
    similarityWarnings: list[SimilarityWarningResponse] = Field(default_factory=list)
    diversityScore: float
    cuisineBreakdown: dict[str, int] = Field(default_factory=dict)
    mealTypeBreakdown: dict[str, int] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)


class PackCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    recipeIds: list[str] = Field(..., min_length=1)


class PackCreated(BaseModel):
    id: str
    name: str
    recipeCount: int
