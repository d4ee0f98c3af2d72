"""Water and meal logging with daily and weekly aggregates."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from bytebuddy.domain.errors import InvalidAmountError, InvalidInputError
from bytebuddy.domain.logs import (
    MEAL_TYPES,
    DailyCalories,
    DailySummary,
    MealLog,
    MealType,
    WaterLog,
)

WEEK_DAYS = 7

CalorieEstimator = Callable[[str, str], Awaitable[object]]

_logger = logging.getLogger(__name__)


class LogRepository(Protocol):
    """Persistence interface for an account's water and meal logs."""

    def load_water_logs(self, account_id: str) -> list[WaterLog]:
        """Return stored water logs."""

    def save_water_logs(self, account_id: str, logs: list[WaterLog]) -> None:
        """Replace the stored water logs."""

    def load_meal_logs(self, account_id: str) -> list[MealLog]:
        """Return stored meal logs."""

    def save_meal_logs(self, account_id: str, logs: list[MealLog]) -> None:
        """Replace the stored meal logs."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DailyLogService:
    """Daily log store; aggregates are recomputed on every read."""

    account_id: str
    repository: LogRepository
    timezone_name: str = "UTC"
    water_goal_ml: int = 2500
    calorie_goal_kcal: int = 2000
    clock: Callable[[], datetime] = field(default=_utc_now)
    _water_logs: list[WaterLog] = field(default_factory=list, init=False)
    _meal_logs: list[MealLog] = field(default_factory=list, init=False)
    _detached: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self._tz = ZoneInfo(self.timezone_name)
        self.reload()

    def reload(self) -> None:
        """Replace in-memory logs with the stored collections."""
        try:
            self._water_logs = list(self.repository.load_water_logs(self.account_id))
        except Exception:
            _logger.exception("Failed to load water logs for %s", self.account_id)
            self._water_logs = []
        try:
            self._meal_logs = list(self.repository.load_meal_logs(self.account_id))
        except Exception:
            _logger.exception("Failed to load meal logs for %s", self.account_id)
            self._meal_logs = []

    def detach(self) -> None:
        """Stop writing to storage once the session has ended."""
        self._detached = True

    def log_water(self, amount: int) -> WaterLog:
        """Record a water intake in millilitres."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError()
        log = WaterLog(
            id=f"water-{uuid4().hex}", amount=amount, created_at=self.clock()
        )
        self._water_logs.append(log)
        self._persist_water()
        return log

    def delete_water(self, log_id: str) -> None:
        """Remove a water log; unknown ids are ignored."""
        remaining = [log for log in self._water_logs if log.id != log_id]
        if len(remaining) == len(self._water_logs):
            return
        self._water_logs = remaining
        self._persist_water()

    async def log_meal(
        self,
        description: str,
        quantity: str,
        meal_type: MealType,
        estimator: CalorieEstimator,
    ) -> MealLog:
        """Estimate calories for a meal and record it.

        The estimator is awaited once; errors and non-numeric results are
        recorded as 0 calories. Callers must not submit the same meal twice
        while an estimate is pending.
        """
        if not description.strip() or not quantity.strip():
            raise InvalidInputError("Please enter a meal description and amount.")
        if meal_type not in MEAL_TYPES:
            raise InvalidInputError(f"Unknown meal type: {meal_type}")
        try:
            estimate = await estimator(description, quantity)
        except Exception:
            _logger.exception("Calorie estimation failed; recording 0 calories")
            estimate = 0
        log = MealLog(
            id=f"meal-{uuid4().hex}",
            description=description,
            quantity=quantity,
            meal_type=meal_type,
            calories=_coerce_calories(estimate),
            created_at=self.clock(),
        )
        self._meal_logs.append(log)
        self._persist_meals()
        return log

    def todays_water_logs(self) -> list[WaterLog]:
        """Return today's water logs, newest first."""
        today = self._today()
        logs = [log for log in self._water_logs if self._local_day(log) == today]
        return sorted(logs, key=lambda log: log.created_at, reverse=True)

    def todays_meal_logs(self) -> list[MealLog]:
        """Return today's meal logs, newest first."""
        today = self._today()
        logs = [log for log in self._meal_logs if self._local_day(log) == today]
        return sorted(logs, key=lambda log: log.created_at, reverse=True)

    def todays_water(self) -> int:
        return sum(log.amount for log in self.todays_water_logs())

    def todays_calories(self) -> int:
        return sum(log.calories for log in self.todays_meal_logs())

    def weekly_calories(self) -> list[DailyCalories]:
        """Return calories for the last seven calendar days, oldest first."""
        today = self._today()
        totals: dict[date, int] = {}
        for log in self._meal_logs:
            day = self._local_day(log)
            totals[day] = totals.get(day, 0) + log.calories
        days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS)]
        return [
            DailyCalories(day=day, total_calories=totals.get(day, 0))
            for day in reversed(days)
        ]

    def today_summary(self) -> DailySummary:
        """Return today's totals, goals, and entries."""
        water_logs = self.todays_water_logs()
        meal_logs = self.todays_meal_logs()
        return DailySummary(
            day=self._today(),
            water_ml=sum(log.amount for log in water_logs),
            calories=sum(log.calories for log in meal_logs),
            water_goal_ml=self.water_goal_ml,
            calorie_goal_kcal=self.calorie_goal_kcal,
            water_logs=water_logs,
            meal_logs=meal_logs,
        )

    def _today(self) -> date:
        return self.clock().astimezone(self._tz).date()

    def _local_day(self, log: WaterLog | MealLog) -> date:
        return log.created_at.astimezone(self._tz).date()

    def _persist_water(self) -> None:
        if self._detached:
            return
        try:
            self.repository.save_water_logs(self.account_id, list(self._water_logs))
        except Exception:
            _logger.exception("Failed to persist water logs for %s", self.account_id)

    def _persist_meals(self) -> None:
        if self._detached:
            return
        try:
            self.repository.save_meal_logs(self.account_id, list(self._meal_logs))
        except Exception:
            _logger.exception("Failed to persist meal logs for %s", self.account_id)


def _coerce_calories(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0
