# src/app/schemas/recipes.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class IngredientItem(BaseModel):
    item: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None


class RecipeResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    cuisineType: Optional[str] = None
    difficulty: Optional[str] = None
    totalTime: Optional[int] = None
    servings: Optional[int] = None
    imageUri: Optional[str] = None
    mealType: list[str] = Field(default_factory=list)
    dietaryTags: list[str] = Field(default_factory=list)
    ingredients: list[IngredientItem] = Field(default_factory=list)
    editorsPick: bool = False


class SimilarityExplanationResponse(BaseModel):
    ingredientScore: float = 0.0
    textScore: float = 0.0
    metadataScore: float = 0.0
    commonIngredients: list[str] = Field(default_factory=list)


class SimilarRecipeResponse(BaseModel):
    recipe: RecipeResponse
    score: float
    explanation: SimilarityExplanationResponse
