"""Test the shared logger factory."""
import logging

from keypad_calculator.common.logger import LOG_LEVEL_ENV, build_logger


def test_level_from_environment(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    assert build_logger("keypad_calculator.test_env").level == logging.DEBUG


def test_unknown_level_falls_back_to_info(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
    assert build_logger("keypad_calculator.test_fallback").level == logging.INFO


def test_handlers_are_not_duplicated() -> None:
    log = build_logger("keypad_calculator.test_handlers")
    build_logger("keypad_calculator.test_handlers")
    assert len(log.handlers) == 1
