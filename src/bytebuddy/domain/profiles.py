"""Domain models for health profiles."""

from dataclasses import dataclass, fields
from typing import Literal

UnitSystem = Literal["Metric", "Imperial"]


@dataclass(frozen=True)
class Profile:
    """Per-account health attributes used to personalise generation."""

    age: str = ""
    gender: str = ""
    height: str = ""
    weight: str = ""
    units: UnitSystem = "Metric"
    activity_level: str = ""
    goal: str = ""
    restrictions: str = ""
    typical_foods: str = ""
    eating_habits: str = ""

    @property
    def height_unit(self) -> str:
        return "cm" if self.units == "Metric" else "in"

    @property
    def weight_unit(self) -> str:
        return "kg" if self.units == "Metric" else "lbs"

    def is_empty(self) -> bool:
        """Return True when no free-text attribute has a value."""
        return not any(
            getattr(self, field.name) for field in fields(self) if field.name != "units"
        )
