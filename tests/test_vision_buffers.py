from dataclasses import replace
from decimal import Decimal

import pytest

from household_ledger.config import Settings
from household_ledger.domain.households import Adult, Household, SinkingFund
from household_ledger.domain.value_objects import WarningKind
from household_ledger.services.vision_buffers import (
    FundPriority,
    VisionAndBuffersPlanner,
    classify_fund_priority,
    months_to_target,
    plan_vision_and_buffers,
)


@pytest.fixture
def planner() -> VisionAndBuffersPlanner:
    return VisionAndBuffersPlanner()


class TestFundPriority:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Emergency Fund", FundPriority.ESSENTIAL),
            ("Medical Deductible", FundPriority.ESSENTIAL),
            ("Home Repairs", FundPriority.MAINTENANCE),
            ("Vehicle Maintenance", FundPriority.MAINTENANCE),
            ("Vacation", FundPriority.DISCRETIONARY),
            ("Holiday Gifts", FundPriority.DISCRETIONARY),
        ],
    )
    def test_classification(self, name: str, expected: FundPriority) -> None:
        assert classify_fund_priority(name) == expected

    def test_funds_sorted_by_priority(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        plan = planner.plan_vision_and_buffers(sample_household)

        assert [fund.name for fund in plan.sinking_funds] == [
            "Medical Deductible",
            "Home Repairs",
            "Vacation",
        ]

    def test_ties_keep_configured_order(self, planner: VisionAndBuffersPlanner) -> None:
        household = Household(
            sinking_funds=(
                SinkingFund(name="Gifts", annual_target=Decimal("600")),
                SinkingFund(name="Travel", annual_target=Decimal("1200")),
            )
        )

        plan = planner.plan_vision_and_buffers(household)

        assert [fund.name for fund in plan.sinking_funds] == ["Gifts", "Travel"]


class TestMonthsToTarget:
    def test_already_met(self) -> None:
        assert months_to_target(Decimal("500"), Decimal("400"), Decimal("0")) == 0

    def test_rounds_up(self) -> None:
        assert months_to_target(Decimal("0"), Decimal("1000"), Decimal("300")) == 4

    def test_unreachable_without_transfer(self) -> None:
        assert months_to_target(Decimal("0"), Decimal("1000"), Decimal("0")) is None


class TestVisionPlan:
    def test_estimates_and_targets(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        plan = planner.plan_vision_and_buffers(sample_household)

        assert plan.estimated_monthly_core == Decimal("8000.00")
        assert plan.emergency_target == Decimal("32000.00")
        assert plan.monthly_vision_allocation == Decimal("87.50")

    def test_fund_transfers(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        plan = planner.plan_vision_and_buffers(sample_household)

        medical = plan.fund("Medical Deductible")
        assert medical.monthly_transfer == Decimal("150.00")
        assert medical.account == "HYSA"
        assert medical.months_to_target == 12
        assert medical.guidance == "On track to reach target in 12 months."
        assert plan.total_monthly_transfers == Decimal("450.00")

    def test_over_allocation_warns(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        plan = planner.plan_vision_and_buffers(sample_household)

        assert plan.is_over_allocated
        assert len(plan.notes) == 1
        note = plan.notes[0]
        assert note.kind == "insufficient_allocation"
        assert note.level == "warning"
        assert note.amount == Decimal("362.50")
        warning = plan.warnings[0]
        assert warning.kind == WarningKind.INSUFFICIENT_VISION_ALLOCATION
        assert warning.recommended == "increase_vision_percent"

    def test_remaining_allocation_note(self, planner: VisionAndBuffersPlanner) -> None:
        household = Household(
            adults=tuple(
                Adult(id=f"a{i}", name=f"Adult {i}", net_income=Decimal("3000"))
                for i in range(1, 4)
            ),
            vision_alloc_percent=Decimal("0.2"),
            sinking_funds=(SinkingFund(name="Vacation", annual_target=Decimal("1200")),),
        )

        plan = planner.plan_vision_and_buffers(household)

        assert not plan.is_over_allocated
        assert plan.remaining_allocation == Decimal("50.00")
        assert plan.notes[0].kind == "remaining_allocation"
        assert plan.warnings == []

    def test_recommendations(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        plan = planner.plan_vision_and_buffers(sample_household)

        assert [(r.type, r.priority) for r in plan.recommendations] == [
            ("emergency_fund", "high"),
            ("vision_allocation", "high"),
        ]

    def test_funded_target_guidance(self, planner: VisionAndBuffersPlanner) -> None:
        household = Household(
            sinking_funds=(
                SinkingFund(
                    name="Car",
                    annual_target=Decimal("600"),
                    current_balance=Decimal("800"),
                    account="Credit Union",
                ),
            )
        )

        fund = planner.plan_vision_and_buffers(household).sinking_funds[0]

        assert fund.is_funded
        assert fund.account == "Credit Union"
        assert fund.guidance.startswith("Fund target reached!")


class TestEmergencyFund:
    def test_building_by_default(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        status = planner.plan_vision_and_buffers(sample_household).emergency_fund

        assert status.status == "building"
        assert status.current_balance == Decimal("0")

    def test_fully_funded_from_emergency_fund_balance(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        household = replace(
            sample_household,
            sinking_funds=(
                SinkingFund(
                    name="Emergency Fund",
                    annual_target=Decimal("0"),
                    current_balance=Decimal("40000"),
                ),
            ),
        )

        status = planner.plan_vision_and_buffers(household).emergency_fund

        assert status.status == "fully_funded"


class TestPlannerSettings:
    def test_from_settings(self, sample_household: Household) -> None:
        settings = Settings(_env_file=None, core_estimate_base=Decimal("1000"))

        plan = plan_vision_and_buffers(sample_household, settings)

        assert plan.estimated_monthly_core == Decimal("4000.00")

    def test_to_dict(
        self, planner: VisionAndBuffersPlanner, sample_household: Household
    ) -> None:
        data = planner.plan_vision_and_buffers(sample_household).to_dict()

        breakdown = data["summary"]["visionAllocationBreakdown"]
        assert breakdown == {"total": 87.5, "sinkingFunds": 450, "remaining": -362.5}
        assert data["sinkingFunds"][0]["priority"] == 1
        assert data["warnings"][0]["type"] == "insufficient_vision_allocation"
