"""Dietary plan generation and meal analysis."""

import logging
import math
from dataclasses import dataclass

from bytebuddy.domain.errors import (
    GenerationError,
    InvalidInputError,
    PlanContractError,
)
from bytebuddy.domain.plans import BmiResult, DietaryPlan
from bytebuddy.domain.profiles import Profile
from bytebuddy.services.generation import GenerationService, validate_plan
from bytebuddy.services.inflight import InFlightGuard
from bytebuddy.services.profiles import ProfileService

PLAN_FAILURE_MESSAGE = "Failed to generate plan. Please try again."
ANALYSIS_FAILURE_MESSAGE = "Failed to analyze meal. Please try again."

IMPERIAL_BMI_FACTOR = 703
UNDERWEIGHT_BELOW = 18.5
HEALTHY_BELOW = 24.9
OVERWEIGHT_BELOW = 29.9

_logger = logging.getLogger(__name__)


@dataclass
class PlanService:
    """Generates dietary plans and meal analyses for one account."""

    account_id: str
    profiles: ProfileService
    generation: GenerationService
    guard: InFlightGuard

    async def generate_plan(self, profile: Profile) -> DietaryPlan:
        """Save the profile and return a validated 7-day plan."""
        bmi = calculate_bmi(profile)
        if bmi is None:
            raise InvalidInputError("Please enter valid height and weight.")
        with self.guard.hold(("plan", self.account_id)):
            self.profiles.save(self.account_id, profile)
            try:
                markdown = await self.generation.synthesize_plan(
                    build_profile_summary(profile)
                )
            except GenerationError as exc:
                raise GenerationError(PLAN_FAILURE_MESSAGE) from exc
        try:
            water = validate_plan(markdown)
        except PlanContractError:
            _logger.warning("Generated plan violated the output format")
            raise
        return DietaryPlan(bmi=bmi, markdown=markdown, water=water)

    async def analyze_meal(self, description: str) -> str:
        """Return a markdown nutritional analysis of a meal."""
        if not description.strip():
            raise InvalidInputError("Please describe your meal.")
        with self.guard.hold(("analysis", self.account_id)):
            try:
                return await self.generation.analyze_meal(description)
            except GenerationError as exc:
                raise GenerationError(ANALYSIS_FAILURE_MESSAGE) from exc


def calculate_bmi(profile: Profile) -> BmiResult | None:
    """Return the BMI for a profile, or None without a valid height and weight."""
    height = _positive_float(profile.height)
    weight = _positive_float(profile.weight)
    if height is None or weight is None:
        return None
    if profile.units == "Metric":
        value = weight / ((height / 100) ** 2)
    else:
        value = weight / (height**2) * IMPERIAL_BMI_FACTOR

    if value < UNDERWEIGHT_BELOW:
        category = "Underweight"
        advice = (
            "Consider speaking with a healthcare provider to ensure you are "
            "meeting your nutritional needs."
        )
    elif value < HEALTHY_BELOW:
        category = "Healthy Weight"
        advice = (
            "You are in a healthy weight range. Keep up the great work with a "
            "balanced diet and regular exercise!"
        )
    elif value < OVERWEIGHT_BELOW:
        category = "Overweight"
        advice = (
            "A balanced diet and increased physical activity can help you reach "
            "a healthier weight range."
        )
    else:
        category = "Obese"
        advice = (
            "It may be beneficial to consult with a doctor or dietitian to "
            "create a sustainable health plan."
        )
    return BmiResult(value=round(value, 1), category=category, advice=advice)


def build_profile_summary(profile: Profile) -> str:
    """Return the profile block sent with a plan request."""
    return "\n".join(
        [
            "User Profile:",
            f"- Age: {profile.age}",
            f"- Gender: {profile.gender}",
            f"- Height: {profile.height} {profile.height_unit}",
            f"- Weight: {profile.weight} {profile.weight_unit}",
            f"- Daily Activity Level: {profile.activity_level}",
            f"- Primary Goal: {profile.goal}",
            f"- Dietary Restrictions/Allergies: {profile.restrictions or 'None'}",
            f"- Typical Foods Eaten: {profile.typical_foods or 'Not specified'}",
            f"- Current Eating Habits: {profile.eating_habits or 'Not specified'}",
        ]
    )


def _positive_float(raw: str) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value
