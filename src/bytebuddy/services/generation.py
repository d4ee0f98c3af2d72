"""Prompts and fallbacks for the external text-generation service."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from bytebuddy.domain.chat import DEFAULT_TITLE, Message
from bytebuddy.domain.errors import GenerationError, PlanContractError
from bytebuddy.domain.generation import GenerationResult
from bytebuddy.domain.plans import WaterRecommendation
from bytebuddy.domain.profiles import Profile

PLAN_DISCLAIMER = (
    "[Disclaimer: This is an AI-generated plan and is not a substitute for "
    "professional medical advice. Consult with a healthcare provider before "
    "making any significant dietary changes.]"
)
WATER_HEADING = "### Daily Water Intake Recommendation"
ML_PER_CUP = 240
TITLE_MAX_WORDS = 5

CHAT_PERSONA = (
    "You are ByteBuddy, a helpful and friendly AI assistant focused on health "
    "and wellness. You must provide safe, general advice. Crucially, always "
    "include a reminder for the user to consult a healthcare professional for "
    "personal medical advice. Do not provide information that could be "
    "construed as a diagnosis or treatment plan."
)
PROFILE_PREAMBLE = (
    "Here is some information about the user you are talking to. Use this to "
    "personalize your responses. Do not mention that you have this data unless "
    "it's directly relevant to the user's question. Be subtle about how you "
    "use it."
)

_WATER_LINE_PATTERNS = (
    re.compile(r"^[-*\s]*\**\s*Litres?\s*:", re.IGNORECASE),
    re.compile(r"^[-*\s]*\**\s*Millilitres?\s*:", re.IGNORECASE),
    re.compile(r"^[-*\s]*\**\s*Cups?\s*:", re.IGNORECASE),
)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

_logger = logging.getLogger(__name__)


class GenerationClient(Protocol):
    """Interface for the remote text-generation API."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str | None,
        messages: list[dict[str, str]],
        web_search: bool,
        reasoning_effort: str | None,
        store: bool,
    ) -> GenerationResult:
        """Return generated text and any cited sources."""


@dataclass
class GenerationService:
    """Builds prompts, calls the client, and applies per-operation fallbacks."""

    client: GenerationClient
    model: str
    reasoning_effort: str | None = None
    store: bool = False
    web_search: bool = True

    async def chat_reply(
        self, history: Sequence[Message], profile: Profile | None = None
    ) -> GenerationResult:
        """Return the assistant reply to a conversation history."""
        messages = [{"role": m.role, "content": m.content} for m in history]
        return await self._generate(
            messages,
            instructions=build_chat_instructions(profile),
            web_search=self.web_search,
            action="chat reply",
        )

    async def synthesize_title(self, seed_text: str) -> str:
        """Return a short conversation title, or "New Chat" on failure."""
        prompt = (
            f"Generate a short, concise title (max {TITLE_MAX_WORDS} words) for "
            "this chat conversation. Return only the title text, nothing else. "
            f'Conversation starts with: "{seed_text}"'
        )
        try:
            result = await self._generate(_user_prompt(prompt), action="title")
        except GenerationError:
            return DEFAULT_TITLE
        return clean_title(result.text)

    async def synthesize_plan(self, profile_summary: str) -> str:
        """Return a markdown 7-day plan for a profile summary."""
        result = await self._generate(
            _user_prompt(build_plan_prompt(profile_summary)), action="dietary plan"
        )
        return result.text

    async def analyze_meal(self, description: str) -> str:
        """Return a markdown nutritional breakdown of a meal."""
        prompt = (
            "Analyze the following meal description and provide a nutritional "
            "breakdown.\nThe response should be in Markdown format.\n"
            "Start with an estimated calorie count. Then, provide a general "
            "overview of the macronutrients (protein, carbs, fat).\n"
            "Finally, offer some healthier alternatives or suggestions for "
            "improvement if applicable.\n"
            "Include a disclaimer that this is an estimation and a professional "
            "nutritionist should be consulted for accurate information.\n\n"
            f'Meal: "{description}"'
        )
        result = await self._generate(_user_prompt(prompt), action="meal analysis")
        return result.text

    async def estimate_calories(self, description: str, quantity: str) -> int:
        """Return estimated calories for a meal, or 0 on any failure."""
        prompt = (
            "Estimate the total calories for the following meal. Respond with "
            "only a single number, without any additional text, labels, or "
            f'units. Meal: "{quantity} of {description}"'
        )
        try:
            result = await self._generate(_user_prompt(prompt), action="calories")
        except GenerationError:
            return 0
        return parse_calories(result.text)

    async def complete(self, prompt: str) -> str:
        """Return the raw completion for a free-form prompt."""
        result = await self._generate(_user_prompt(prompt), action="completion")
        return result.text

    async def _generate(
        self,
        messages: list[dict[str, str]],
        *,
        action: str,
        instructions: str | None = None,
        web_search: bool = False,
    ) -> GenerationResult:
        try:
            return await self.client.generate(
                model=self.model,
                instructions=instructions,
                messages=messages,
                web_search=web_search,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
            )
        except Exception as exc:
            _logger.exception("Generation failed for %s", action)
            raise GenerationError(f"Generation failed for {action}") from exc


def build_chat_instructions(profile: Profile | None) -> str:
    """Return the chat steering instruction, personalised when possible."""
    if profile is None or profile.is_empty():
        return CHAT_PERSONA
    lines = [CHAT_PERSONA, "", PROFILE_PREAMBLE, "User Profile:"]
    if profile.age:
        lines.append(f"- Age: {profile.age}")
    if profile.gender:
        lines.append(f"- Gender: {profile.gender}")
    if profile.height:
        lines.append(f"- Height: {profile.height} {profile.height_unit}")
    if profile.weight:
        lines.append(f"- Weight: {profile.weight} {profile.weight_unit}")
    if profile.goal:
        lines.append(f"- Primary Goal: {profile.goal}")
    if profile.activity_level:
        lines.append(f"- Activity Level: {profile.activity_level}")
    if profile.restrictions:
        lines.append(f"- Dietary Restrictions: {profile.restrictions}")
    return "\n".join(lines)


def build_plan_prompt(profile_summary: str) -> str:
    """Return the dietary-plan prompt with its output contract."""
    return (
        "Based on the following user profile, generate a complete and "
        "personalized 7-day meal plan.\n\n"
        f"{profile_summary}\n\n"
        "**Instructions for Output:**\n"
        "1. **Disclaimer First:** The entire response MUST begin with the "
        "following disclaimer, exactly as written:\n"
        f'   "{PLAN_DISCLAIMER}"\n'
        "2. **Format:** The entire response must be in Markdown format. Use "
        "headings for each day.\n"
        "3. **Meal Plan:** Provide a detailed 7-day meal plan (Day 1 to Day 7) "
        "with breakfast, lunch, and dinner suggestions.\n"
        "4. **Water Intake Section:** After the 7-day plan, you MUST include a "
        f'new section titled "{WATER_HEADING}".\n'
        "5. **Water Intake Calculation:** In this section, calculate the user's "
        "recommended daily water intake based on their profile (especially "
        "weight and activity level).\n"
        "6. **Water Intake Format:** You MUST present this recommendation in "
        "three specific formats on separate lines:\n"
        "   - In litres (e.g., **Litres:** 2.5 L)\n"
        "   - In millilitres (e.g., **Millilitres:** 2500 ml)\n"
        "   - In cups (e.g., **Cups:** ~10 cups). You must assume 1 cup is "
        f"{ML_PER_CUP}ml for your calculation.\n"
    )


def clean_title(raw: str) -> str:
    """Strip quotes and cap a generated title at five words."""
    words = raw.replace('"', "").split()
    if not words:
        return DEFAULT_TITLE
    return " ".join(words[:TITLE_MAX_WORDS])


def parse_calories(raw: str) -> int:
    """Return the leading integer of a reply, or 0 when there is none."""
    match = _LEADING_INT.match(raw)
    if match is None:
        return 0
    return max(int(match.group(1)), 0)


def validate_plan(text: str) -> WaterRecommendation:
    """Check a generated plan against its format contract.

    The first non-blank line must be the disclaimer, and the water heading
    must be followed by the litres, millilitres, and cups lines in order.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines or lines[0] != PLAN_DISCLAIMER:
        raise PlanContractError("Plan does not begin with the required disclaimer.")
    try:
        heading_index = lines.index(WATER_HEADING)
    except ValueError as exc:
        raise PlanContractError("Plan is missing the water intake section.") from exc
    water_lines = lines[heading_index + 1 : heading_index + 4]
    if len(water_lines) < len(_WATER_LINE_PATTERNS) or not all(
        pattern.match(line)
        for pattern, line in zip(_WATER_LINE_PATTERNS, water_lines, strict=False)
    ):
        raise PlanContractError(
            "Water intake section must list litres, millilitres, and cups."
        )
    litres, millilitres, cups = (_line_value(line) for line in water_lines)
    return WaterRecommendation(litres=litres, millilitres=millilitres, cups=cups)


def _line_value(line: str) -> str:
    return line.split(":", 1)[1].strip(" *")


def _user_prompt(prompt: str) -> list[dict[str, str]]:
    return [{"role": "user", "content": prompt}]
