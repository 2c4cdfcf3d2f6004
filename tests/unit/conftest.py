from __future__ import annotations

import pytest

from src.app.domain.models import Recipe

from recipe_stubs import make_recipe


@pytest.fixture
def library() -> list[Recipe]:
    """Ten recipes across three cuisines."""
    return [
        make_recipe(
            "it-1", "Spaghetti Carbonara", ["spaghetti", "eggs", "pancetta", "parmesan"],
            cuisine_type="Italian", difficulty="medium", total_time=25, meal_type=["Dinner"],
        ),
        make_recipe(
            "it-2", "Penne Arrabbiata", ["penne", "tomatoes", "garlic", "chili flakes"],
            cuisine_type="Italian", difficulty="easy", total_time=20, meal_type=["Dinner"],
        ),
        make_recipe(
            "it-3", "Mushroom Risotto", ["arborio rice", "mushrooms", "parmesan", "stock"],
            cuisine_type="Italian", difficulty="hard", total_time=50, meal_type=["Dinner"],
        ),
        make_recipe(
            "it-4", "Spaghetti Aglio e Olio", ["spaghetti", "garlic", "olive oil", "chili flakes"],
            cuisine_type="Italian", difficulty="easy", total_time=15, meal_type=["Dinner", "Lunch"],
        ),
        make_recipe(
            "mx-1", "Chicken Tacos", ["chicken thighs", "tortillas", "lime", "cilantro"],
            cuisine_type="Mexican", difficulty="easy", total_time=30, meal_type=["Dinner"],
        ),
        make_recipe(
            "mx-2", "Black Bean Quesadillas", ["black beans", "tortillas", "cheddar", "salsa"],
            cuisine_type="Mexican", difficulty="easy", total_time=15, meal_type=["Lunch"],
        ),
        make_recipe(
            "mx-3", "Pozole Rojo", ["pork shoulder", "hominy", "guajillo chiles", "onion"],
            cuisine_type="Mexican", difficulty="hard", total_time=180, meal_type=["Dinner"],
        ),
        make_recipe(
            "th-1", "Green Curry", ["chicken breast", "coconut milk", "green curry paste", "basil"],
            cuisine_type="Thai", difficulty="medium", total_time=35, meal_type=["Dinner"],
        ),
        make_recipe(
            "th-2", "Pad Thai", ["rice noodles", "shrimp", "peanuts", "tamarind"],
            cuisine_type="Thai", difficulty="medium", total_time=30, meal_type=["Dinner", "Lunch"],
        ),
        make_recipe(
            "th-3", "Mango Sticky Rice", ["glutinous rice", "mango", "coconut milk", "sugar"],
            cuisine_type="Thai", difficulty="easy", total_time=40, meal_type=["Dessert"],
        ),
    ]
