"""Tests for logging configuration."""

import logging

from bytebuddy.api.app import create_app
from bytebuddy.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("bytebuddy")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_accepts_level_names() -> None:
    logger = configure_logging("debug")

    child = logging.getLogger("bytebuddy.services.chat")

    assert logger.level == logging.DEBUG
    assert child.getEffectiveLevel() == logging.DEBUG
    configure_logging()


def test_create_app_uses_configured_level(container) -> None:
    container.settings = container.settings.model_copy(update={"log_level": "warning"})

    create_app(container)

    assert logging.getLogger("bytebuddy").level == logging.WARNING
    configure_logging()
