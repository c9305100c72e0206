"""Quick dish ideas offered when a reminder fires and the user hasn't eaten."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from nourish.meals import MealKind


@dataclass(frozen=True)
class Dish:
    name: str
    recipe: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "recipe": self.recipe}


DISHES: Dict[MealKind, Tuple[Dish, ...]] = {
    MealKind.BREAKFAST: (
        Dish(
            "Oats Upma",
            "1. Cook oats briefly. 2. Sauté veggies, add oats, salt, pepper. "
            "3. Toss, simmer for 2 min and serve.",
        ),
        Dish(
            "Banana Smoothie",
            "1. Blend banana, milk/yogurt, honey. 2. Add seeds/nuts. 3. Serve cold.",
        ),
    ),
    MealKind.LUNCH: (
        Dish(
            "Vegetable Stir Fry",
            "1. Chop mixed veggies. 2. Sauté in oil with garlic. "
            "3. Add soy sauce, toss 3-4 min, serve hot.",
        ),
        Dish(
            "Dal Rice",
            "1. Cook rice and dal separately. 2. Season dal with cumin, garlic, tomatoes. "
            "3. Serve dal over rice.",
        ),
    ),
    MealKind.DINNER: (
        Dish(
            "Paneer Salad",
            "1. Cube paneer and veggies. 2. Mix with salt, lemon, olive oil & herbs. "
            "3. Serve fresh.",
        ),
        Dish(
            "Tomato Soup & Toast",
            "1. Boil tomatoes with onion, blend, strain. 2. Simmer with spices. "
            "3. Serve hot with toast.",
        ),
    ),
}


def suggest_dishes(meal: MealKind) -> List[Dish]:
    return list(DISHES.get(MealKind(meal), ()))
