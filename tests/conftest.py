from collections.abc import Iterator
from decimal import Decimal
from typing import Any

import pytest

from household_ledger.config import Settings, get_settings
from household_ledger.domain.households import Adult, Household, SinkingFund
from household_ledger.domain.periods import Period


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def sample_adults() -> tuple[Adult, ...]:
    return (
        Adult(id="a1", name="Alex", net_income=Decimal("4500")),
        Adult(id="a2", name="Blair", net_income=Decimal("3200")),
        Adult(id="a3", name="Casey", net_income=Decimal("2800")),
    )


@pytest.fixture
def sample_household(sample_adults: tuple[Adult, ...]) -> Household:
    return Household(
        name="Maple House",
        adults=sample_adults,
        children_count=4,
        child_unit_weight=Decimal("0.6"),
        cap_percent=Decimal("0.30"),
        care_rate_per_hour=Decimal("20"),
        core_categories=("Housing", "Utilities", "Groceries"),
        sinking_funds=(
            SinkingFund(name="Vacation", annual_target=Decimal("1200")),
            SinkingFund(name="Home Repairs", annual_target=Decimal("2400")),
            SinkingFund(name="Medical Deductible", annual_target=Decimal("1800")),
        ),
    )


@pytest.fixture
def sample_period(sample_household: Household) -> Period:
    return Period.new_for(sample_household, "2026-01", Decimal("6000"))


@pytest.fixture
def small_household() -> Household:
    return Household(
        name="Cedar House",
        adults=(
            Adult(id="a1", name="Alex", net_income=Decimal("1000")),
            Adult(id="a2", name="Blair", net_income=Decimal("2000")),
            Adult(id="a3", name="Casey", net_income=Decimal("3000")),
        ),
        children_count=0,
        cap_percent=Decimal("0.3"),
    )


@pytest.fixture
def small_period(small_household: Household) -> Period:
    return Period.new_for(small_household, "2026-02", Decimal("1000"))


@pytest.fixture
def household_record() -> dict[str, Any]:
    return {
        "name": "Cedar House",
        "currency": "USD",
        "adults": [
            {"id": "a1", "name": "Alex", "netIncome": 1000},
            {"id": "a2", "name": "Blair", "netIncome": 2000},
            {"id": "a3", "name": "Casey", "netIncome": 3000},
        ],
        "childrenCount": 0,
        "childUnitWeight": 0.6,
        "capPercent": 0.3,
        "careModel": "credit",
        "careRatePerHour": 20,
        "coreCategories": ["Housing", "Groceries"],
        "visionAllocPercent": 0.1,
        "emergencyMonths": 4,
        "sinkingFunds": [
            {"name": "Vacation", "annualTarget": 1200},
            {"name": "Medical Deductible", "annualTarget": 600, "currentBalance": 100},
        ],
        "governance": {"routineQuorum": 2, "majorQuorum": 3},
    }


@pytest.fixture
def period_record() -> dict[str, Any]:
    return {
        "label": "2026-02",
        "coreTotal": 1000,
        "assignedChildUnits": {"a1": 0, "a2": 0, "a3": 0},
        "overrides": {"a2": None},
        "careEntries": [
            {
                "id": "c1",
                "adultId": "a1",
                "date": "2026-02-03",
                "task": "School pickup",
                "hours": 3,
            },
            {
                "id": "c2",
                "adultId": "a2",
                "date": "2026-02-10",
                "task": "Doctor visit",
                "hours": 1.5,
            },
        ],
        "decisions": [
            {
                "id": "d1",
                "title": "Switch internet provider",
                "date": "2026-02-12",
            }
        ],
        "amendments": [],
        "isLocked": False,
    }
