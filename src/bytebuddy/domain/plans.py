"""Domain models for dietary plans."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BmiResult:
    """Body mass index with a category and advice."""

    value: float
    category: str
    advice: str


@dataclass(frozen=True)
class WaterRecommendation:
    """Water intake lines parsed from a generated plan."""

    litres: str
    millilitres: str
    cups: str


@dataclass(frozen=True)
class DietaryPlan:
    """Generated 7-day plan with the BMI it was based on."""

    bmi: BmiResult
    markdown: str
    water: WaterRecommendation
