"""Tests for structured logging of calculator events."""

import logging

import structlog

from household_ledger.config import Settings
from household_ledger.domain.households import Household
from household_ledger.domain.periods import Period
from household_ledger.logging_config import (
    configure_logging,
    get_console_processors,
    get_json_processors,
    get_logger,
    period_context,
)
from household_ledger.services.unit_method import UnitMethodCalculator


class TestProcessors:
    def test_json_processors_end_with_renderer(self) -> None:
        assert isinstance(get_json_processors()[-1], structlog.processors.JSONRenderer)

    def test_console_processors_end_with_renderer(self) -> None:
        assert isinstance(
            get_console_processors(colors=False)[-1], structlog.dev.ConsoleRenderer
        )


class TestConfigureLogging:
    def test_level_override(self) -> None:
        configure_logging(Settings(_env_file=None, log_format="json"), level="debug")

        assert logging.getLogger("household_ledger").level == logging.DEBUG

    def test_settings_level(self) -> None:
        configure_logging(Settings(_env_file=None, log_level="ERROR"))

        assert logging.getLogger("household_ledger").level == logging.ERROR

    def test_get_logger(self) -> None:
        assert get_logger("household_ledger.tests") is not None


class TestPeriodContext:
    def test_binds_and_unbinds(self) -> None:
        with period_context("Maple House", "2026-01", run="manual"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["household"] == "Maple House"
            assert bound["period_label"] == "2026-01"
            assert bound["run"] == "manual"

        assert "household" not in structlog.contextvars.get_contextvars()


class TestCalculatorLogging:
    def test_deficit_is_logged(
        self, sample_household: Household, sample_period: Period, capsys, caplog
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="household_ledger"):
            UnitMethodCalculator().calculate(sample_household, sample_period)

        # structlog prints directly until configure_logging routes it through stdlib
        captured = capsys.readouterr()
        all_output = captured.out + captured.err + caplog.text
        assert "deficit_after_caps" in all_output
