"""Key-value repository for water and meal logs."""

import logging
from dataclasses import dataclass

from bytebuddy.adapters.kv_documents import read_document, write_document
from bytebuddy.domain.logs import MEAL_TYPES, MealLog, WaterLog
from bytebuddy.services.logs import LogRepository
from bytebuddy.services.storage import (
    KeyValueStore,
    format_timestamp,
    meals_key,
    parse_timestamp,
    water_key,
)

_logger = logging.getLogger(__name__)


@dataclass
class KeyValueLogRepository(LogRepository):
    """Stores water and meal logs as JSON lists per account."""

    store: KeyValueStore

    def load_water_logs(self, account_id: str) -> list[WaterLog]:
        """Return stored water logs."""
        logs: list[WaterLog] = []
        for row in _rows(read_document(self.store, water_key(account_id), [])):
            try:
                logs.append(
                    WaterLog(
                        id=str(row["id"]),
                        amount=int(row["amount"]),
                        created_at=parse_timestamp(row["createdAt"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                _logger.warning("Skipping malformed water log for %s", account_id)
        return logs

    def save_water_logs(self, account_id: str, logs: list[WaterLog]) -> None:
        """Replace the stored water logs."""
        write_document(
            self.store,
            water_key(account_id),
            [
                {
                    "id": log.id,
                    "amount": log.amount,
                    "createdAt": format_timestamp(log.created_at),
                }
                for log in logs
            ],
        )

    def load_meal_logs(self, account_id: str) -> list[MealLog]:
        """Return stored meal logs."""
        logs: list[MealLog] = []
        for row in _rows(read_document(self.store, meals_key(account_id), [])):
            try:
                meal_type = row["mealType"]
                if meal_type not in MEAL_TYPES:
                    raise ValueError(meal_type)
                logs.append(
                    MealLog(
                        id=str(row["id"]),
                        description=str(row["description"]),
                        quantity=str(row.get("amount") or ""),
                        meal_type=meal_type,
                        calories=int(row.get("calories") or 0),
                        created_at=parse_timestamp(row["createdAt"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                _logger.warning("Skipping malformed meal log for %s", account_id)
        return logs

    def save_meal_logs(self, account_id: str, logs: list[MealLog]) -> None:
        """Replace the stored meal logs."""
        write_document(
            self.store,
            meals_key(account_id),
            [
                {
                    "id": log.id,
                    "description": log.description,
                    "amount": log.quantity,
                    "calories": log.calories,
                    "mealType": log.meal_type,
                    "createdAt": format_timestamp(log.created_at),
                }
                for log in logs
            ],
        )


def _rows(value: object) -> list[dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]
