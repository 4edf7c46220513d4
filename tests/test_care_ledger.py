from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from household_ledger.domain.households import Household
from household_ledger.domain.periods import CareEntry, Period
from household_ledger.domain.value_objects import CareModel
from household_ledger.exceptions import UnsupportedCareModelError
from household_ledger.services.care_ledger import CareLedgerCalculator
from household_ledger.services.unit_method import UnitMethodCalculator, UnitMethodResult


@pytest.fixture
def care_period(small_period: Period) -> Period:
    period = small_period.add_care_entry("a1", "School pickup", "3", date(2026, 2, 3))
    return period.add_care_entry("a2", "Doctor visit", "1.5", date(2026, 2, 10))


@pytest.fixture
def unit_result(small_household: Household, care_period: Period) -> UnitMethodResult:
    return UnitMethodCalculator().calculate(small_household, care_period)


@pytest.fixture
def calculator() -> CareLedgerCalculator:
    return CareLedgerCalculator()


class TestCreditModel:
    def test_care_values(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        care_period: Period,
        unit_result: UnitMethodResult,
    ) -> None:
        result = calculator.apply_care_ledger(small_household, care_period, unit_result)

        assert result.care_model == CareModel.CREDIT
        assert result.value_for("a1") == Decimal("60.00")
        assert result.value_for("a2") == Decimal("30.00")
        assert result.value_for("a3") == Decimal("0.00")
        assert result.total_care_value == Decimal("90.00")

    def test_credits_reduce_next_period_shares(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        care_period: Period,
        unit_result: UnitMethodResult,
    ) -> None:
        result = calculator.apply_care_ledger(small_household, care_period, unit_result)

        assert result.next_month_core_credit == {
            "a1": Decimal("-60.00"),
            "a2": Decimal("-30.00"),
            "a3": Decimal("0"),
        }
        assert result.next_month_core_increase == Decimal("0")
        assert result.payees == []

        preview = result.preview
        assert preview.estimated_core_total == Decimal("1000")
        assert preview.adult_shares["a1"].estimated_share == Decimal("240.00")
        assert preview.adult_shares["a2"].estimated_share == Decimal("320.00")
        assert preview.adult_shares["a3"].estimated_share == Decimal("350.00")
        assert preview.total_shares == Decimal("910.00")
        assert "Alex: Share reduced by 60.00 USD for care credit" in preview.notes

    def test_current_period_is_untouched(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        care_period: Period,
        unit_result: UnitMethodResult,
    ) -> None:
        calculator.apply_care_ledger(small_household, care_period, unit_result)

        assert care_period.core_total == Decimal("1000")
        assert unit_result.final_shares["a1"] == Decimal("300.00")

    def test_preview_never_goes_negative(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        small_period: Period,
    ) -> None:
        period = small_period
        for day in range(1, 21):
            period = period.add_care_entry("a1", "Care", "24", date(2026, 2, day))
        unit_result = UnitMethodCalculator().calculate(small_household, period)

        result = calculator.apply_care_ledger(small_household, period, unit_result)

        assert result.preview.adult_shares["a1"].estimated_share == Decimal("0.00")


class TestStipendModel:
    def test_stipends_increase_next_core(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        care_period: Period,
        unit_result: UnitMethodResult,
    ) -> None:
        household = replace(small_household, care_model="stipend")

        result = calculator.apply_care_ledger(household, care_period, unit_result)

        assert result.care_model == CareModel.STIPEND
        assert result.next_month_core_increase == Decimal("90.00")
        assert [p.adult_id for p in result.payees] == ["a1", "a2"]
        assert result.payees[0].description == "Care work stipend for 2026-02"
        assert result.next_month_core_credit == {}
        assert result.preview.estimated_core_total == Decimal("1090.00")
        assert result.preview.total_shares == Decimal("1000.00")
        assert care_period.core_total == Decimal("1000")

    def test_no_entries_means_no_payees(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        small_period: Period,
    ) -> None:
        household = replace(small_household, care_model=CareModel.STIPEND)
        unit_result = UnitMethodCalculator().calculate(household, small_period)

        result = calculator.apply_care_ledger(household, small_period, unit_result)

        assert result.payees == []
        assert result.next_month_core_increase == Decimal("0")


class TestCareLedgerValidation:
    def test_unknown_model_raises(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        care_period: Period,
        unit_result: UnitMethodResult,
    ) -> None:
        household = replace(small_household, care_model="barter")

        with pytest.raises(UnsupportedCareModelError):
            calculator.apply_care_ledger(household, care_period, unit_result)

    def test_validate_reports_all_problems(
        self, calculator: CareLedgerCalculator, small_household: Household
    ) -> None:
        household = replace(small_household, care_model="barter")
        period = Period(
            label="2026-02",
            care_entries=(
                CareEntry(adult_id="a1", task="Pickup", hours=Decimal("-1"), date=date(2026, 2, 1)),
            ),
        )

        result = calculator.validate(household, period)

        assert not result.is_valid
        assert result.errors == (
            "Care entry 1 has invalid hours: -1",
            "Invalid care model: barter",
        )


class TestCareLedgerSerialization:
    def test_to_dict(
        self,
        calculator: CareLedgerCalculator,
        small_household: Household,
        care_period: Period,
        unit_result: UnitMethodResult,
    ) -> None:
        data = calculator.apply_care_ledger(
            small_household, care_period, unit_result
        ).to_dict()

        assert data["careValues"] == {"a1": 60, "a2": 30, "a3": 0}
        assert data["summary"]["model"] == "credit"
        assert data["summary"]["nextPeriodCorePreview"]["estimatedCoreTotal"] == 1000
