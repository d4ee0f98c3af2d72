"""Domain models for water and meal logging."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, get_args

MealType = Literal["Breakfast", "Lunch", "Dinner", "Snack"]

MEAL_TYPES: tuple[str, ...] = get_args(MealType)


@dataclass(frozen=True)
class WaterLog:
    """Water intake entry in millilitres."""

    id: str
    amount: int
    created_at: datetime


@dataclass(frozen=True)
class MealLog:
    """Meal entry with AI-estimated calories."""

    id: str
    description: str
    quantity: str
    meal_type: MealType
    calories: int
    created_at: datetime


@dataclass(frozen=True)
class DailyCalories:
    """Calories summed over one calendar day."""

    day: date
    total_calories: int

    @property
    def date(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class DailySummary:
    """Today's intake totals against the configured goals."""

    day: date
    water_ml: int
    calories: int
    water_goal_ml: int
    calorie_goal_kcal: int
    water_logs: list[WaterLog]
    meal_logs: list[MealLog]
