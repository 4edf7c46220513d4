from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from household_ledger.config import Environment, LogLevel, Settings, get_settings


class TestSettingsDefaults:
    def test_defaults(self, settings: Settings) -> None:
        assert settings.app_name == "Household Ledger"
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.log_level == LogLevel.WARNING
        assert settings.log_format == "console"
        assert settings.allocation_tolerance == Decimal("0.01")
        assert settings.max_rebalance_iterations == 10
        assert settings.core_estimate_base == Decimal("2000")
        assert settings.long_horizon_months == 24
        assert settings.accelerated_horizon_months == 18

    def test_production_defaults_to_json_logs(self) -> None:
        assert Settings(_env_file=None, environment="production").log_format == "json"
        assert Settings(_env_file=None, environment="testing").log_format == "console"

    def test_explicit_log_format_wins_in_production(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HHL_ENVIRONMENT", "production")
        monkeypatch.setenv("HHL_LOG_FORMAT", "console")

        assert Settings(_env_file=None).log_format == "console"


class TestSettingsFromEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HHL_MAX_REBALANCE_ITERATIONS", "20")
        monkeypatch.setenv("HHL_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("HHL_ALLOCATION_TOLERANCE", "0.05")

        settings = Settings(_env_file=None)

        assert settings.max_rebalance_iterations == 20
        assert settings.log_level == LogLevel.DEBUG
        assert settings.allocation_tolerance == Decimal("0.05")

    @pytest.mark.parametrize("value", ["0", "101"])
    def test_rejects_out_of_range_iterations(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv("HHL_MAX_REBALANCE_ITERATIONS", value)

        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)

    def test_rejects_non_positive_tolerance(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, allocation_tolerance=Decimal("0"))


class TestGetSettings:
    def test_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_cache_clear_reloads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("HHL_APP_NAME", "Test Ledger")
        get_settings.cache_clear()

        assert get_settings() is not first
        assert get_settings().app_name == "Test Ledger"
