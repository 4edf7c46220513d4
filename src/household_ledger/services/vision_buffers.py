"""Vision allocation and buffer (emergency / sinking fund) planning.

The planner works from the household configuration alone. Monthly Core spend
is approximated from household size because no spending history is passed in,
so the output is guidance for the household council rather than a ledger entry.
"""

from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal
from enum import IntEnum
from typing import Any

from household_ledger.config import Settings, get_settings
from household_ledger.domain.households import Household, SinkingFund
from household_ledger.domain.value_objects import (
    ZERO,
    CalculationWarning,
    ResolutionOption,
    WarningKind,
    as_number,
    cents,
)
from household_ledger.logging_config import get_logger

logger = get_logger(__name__)


class FundPriority(IntEnum):
    ESSENTIAL = 1
    MAINTENANCE = 2
    DISCRETIONARY = 3


ESSENTIAL_KEYWORDS = ("emergency", "medical", "deductible")
MAINTENANCE_KEYWORDS = ("vehicle", "home", "maintenance")


def classify_fund_priority(name: str) -> FundPriority:
    """Rank a sinking fund by keywords in its name; lower ranks are funded first."""
    lowered = name.lower()
    if any(keyword in lowered for keyword in ESSENTIAL_KEYWORDS):
        return FundPriority.ESSENTIAL
    if any(keyword in lowered for keyword in MAINTENANCE_KEYWORDS):
        return FundPriority.MAINTENANCE
    return FundPriority.DISCRETIONARY


def months_to_target(
    current_balance: Decimal, annual_target: Decimal, monthly_transfer: Decimal
) -> int | None:
    """Months of transfers still needed; 0 when met, None when never reachable."""
    remaining = annual_target - current_balance
    if remaining <= 0:
        return 0
    if monthly_transfer <= 0:
        return None
    return int((remaining / monthly_transfer).to_integral_value(rounding=ROUND_CEILING))


@dataclass(frozen=True)
class FundPlan:
    name: str
    annual_target: Decimal
    monthly_transfer: Decimal
    current_balance: Decimal
    account: str
    priority: FundPriority
    months_to_target: int | None
    guidance: str

    @property
    def is_funded(self) -> bool:
        return self.months_to_target == 0

    def exceeds_horizon(self, months: int) -> bool:
        return self.months_to_target is None or self.months_to_target > months

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "annualTarget": as_number(self.annual_target),
            "monthlyTransfer": as_number(self.monthly_transfer),
            "currentBalance": as_number(self.current_balance),
            "account": self.account,
            "priority": int(self.priority),
            "monthsToTarget": self.months_to_target,
            "guidance": self.guidance,
        }


@dataclass(frozen=True)
class VisionNote:
    kind: str  # "insufficient_allocation" | "remaining_allocation"
    level: str  # "warning" | "info"
    message: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "level": self.level,
            "message": self.message,
            "amount": as_number(self.amount),
        }


@dataclass(frozen=True)
class Recommendation:
    type: str
    priority: str
    message: str
    action: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority,
            "message": self.message,
            "action": self.action,
        }


@dataclass(frozen=True)
class EmergencyFundStatus:
    target: Decimal
    current_balance: Decimal
    status: str  # "building" | "fully_funded"
    guidance: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": as_number(self.target),
            "currentBalance": as_number(self.current_balance),
            "status": self.status,
            "guidance": self.guidance,
        }


@dataclass
class VisionPlan:
    estimated_monthly_core: Decimal
    emergency_target: Decimal
    monthly_vision_allocation: Decimal
    sinking_funds: list[FundPlan] = field(default_factory=list)
    notes: list[VisionNote] = field(default_factory=list)
    warnings: list[CalculationWarning] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    guidance: list[str] = field(default_factory=list)
    emergency_fund: EmergencyFundStatus | None = None

    @property
    def total_monthly_transfers(self) -> Decimal:
        return sum((fund.monthly_transfer for fund in self.sinking_funds), ZERO)

    @property
    def remaining_allocation(self) -> Decimal:
        return self.monthly_vision_allocation - self.total_monthly_transfers

    @property
    def is_over_allocated(self) -> bool:
        return self.total_monthly_transfers > self.monthly_vision_allocation

    def fund(self, name: str) -> FundPlan | None:
        for plan in self.sinking_funds:
            if plan.name == name:
                return plan
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimatedMonthlyCore": as_number(self.estimated_monthly_core),
            "emergencyTarget": as_number(self.emergency_target),
            "monthlyVisionAllocation": as_number(self.monthly_vision_allocation),
            "sinkingFunds": [plan.to_dict() for plan in self.sinking_funds],
            "notes": [note.to_dict() for note in self.notes],
            "warnings": [item.to_dict() for item in self.warnings],
            "summary": {
                "emergencyFundStatus": (
                    self.emergency_fund.to_dict() if self.emergency_fund else None
                ),
                "visionAllocationBreakdown": {
                    "total": as_number(self.monthly_vision_allocation),
                    "sinkingFunds": as_number(self.total_monthly_transfers),
                    "remaining": as_number(self.remaining_allocation),
                },
                "recommendations": [rec.to_dict() for rec in self.recommendations],
            },
            "guidance": list(self.guidance),
        }


class VisionAndBuffersPlanner:
    def __init__(
        self,
        core_estimate_base: Decimal = Decimal("2000"),
        adult_factor: Decimal = Decimal("0.8"),
        child_factor: Decimal = Decimal("0.4"),
        long_horizon_months: int = 24,
        accelerated_horizon_months: int = 18,
    ) -> None:
        self.core_estimate_base = Decimal(str(core_estimate_base))
        self.adult_factor = Decimal(str(adult_factor))
        self.child_factor = Decimal(str(child_factor))
        self.long_horizon_months = long_horizon_months
        self.accelerated_horizon_months = accelerated_horizon_months

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "VisionAndBuffersPlanner":
        settings = settings or get_settings()
        return cls(
            core_estimate_base=settings.core_estimate_base,
            adult_factor=settings.core_estimate_adult_factor,
            child_factor=settings.core_estimate_child_factor,
            long_horizon_months=settings.long_horizon_months,
            accelerated_horizon_months=settings.accelerated_horizon_months,
        )

    def estimate_monthly_core(self, household: Household) -> Decimal:
        """Approximate monthly Core spend from household size."""
        multiplier = (
            household.adult_count * self.adult_factor
            + household.children_count * self.child_factor
        )
        return cents(self.core_estimate_base * multiplier)

    def plan_vision_and_buffers(self, household: Household) -> VisionPlan:
        currency = household.currency
        monthly_core = self.estimate_monthly_core(household)
        plan = VisionPlan(
            estimated_monthly_core=monthly_core,
            emergency_target=cents(monthly_core * household.emergency_months),
            monthly_vision_allocation=cents(household.monthly_vision_allocation),
        )
        plan.guidance.append(
            f"Emergency fund target: {household.emergency_months} months x "
            f"{monthly_core} {currency} = {plan.emergency_target} {currency}"
        )
        plan.guidance.append(
            f"Monthly vision allocation: {household.vision_alloc_percent * 100:.1f}% of "
            f"{household.total_net_income} {currency} = "
            f"{plan.monthly_vision_allocation} {currency}/month"
        )

        plan.sinking_funds = sorted(
            (self._plan_fund(fund) for fund in household.sinking_funds),
            key=lambda fund_plan: fund_plan.priority,
        )
        self._append_allocation_note(plan, currency)
        plan.emergency_fund = self._emergency_fund_status(household, plan)
        plan.recommendations = self._recommendations(household, plan)

        logger.info(
            "vision_plan_created",
            funds=len(plan.sinking_funds),
            emergency_target=str(plan.emergency_target),
            monthly_vision_allocation=str(plan.monthly_vision_allocation),
            over_allocated=plan.is_over_allocated,
        )
        return plan

    def _plan_fund(self, fund: SinkingFund) -> FundPlan:
        raw_transfer = fund.annual_target / 12
        months = months_to_target(fund.current_balance, fund.annual_target, raw_transfer)
        return FundPlan(
            name=fund.name,
            annual_target=fund.annual_target,
            monthly_transfer=cents(raw_transfer),
            current_balance=fund.current_balance,
            account=fund.account or "HYSA",
            priority=classify_fund_priority(fund.name),
            months_to_target=months,
            guidance=self._fund_guidance(months),
        )

    def _fund_guidance(self, months: int | None) -> str:
        if months == 0:
            return (
                "Fund target reached! Consider increasing annual target or "
                "redirecting monthly transfer."
            )
        if months is None:
            return "No monthly transfer configured; set an annual target to start funding."
        if months <= 12:
            return f"On track to reach target in {months} months."
        if months <= self.long_horizon_months:
            return (
                f"Will reach target in {months} months. Consider increasing monthly "
                "transfer to reach target sooner."
            )
        return (
            f"Will take {months} months to reach target. Consider increasing monthly "
            "transfer or reducing annual target."
        )

    def _append_allocation_note(self, plan: VisionPlan, currency: str) -> None:
        total = plan.total_monthly_transfers
        allocation = plan.monthly_vision_allocation
        if total > allocation:
            shortfall = total - allocation
            message = (
                f"Total sinking fund transfers ({total} {currency}/month) exceed "
                f"monthly vision allocation ({allocation} {currency}/month) by "
                f"{shortfall} {currency}. Consider reducing annual targets or "
                "increasing vision allocation percentage."
            )
            plan.notes.append(
                VisionNote(
                    kind="insufficient_allocation",
                    level="warning",
                    message=message,
                    amount=shortfall,
                )
            )
            plan.warnings.append(
                CalculationWarning(
                    kind=WarningKind.INSUFFICIENT_VISION_ALLOCATION,
                    message=message,
                    details={"shortfall": shortfall, "totalTransfers": total},
                    options=(
                        ResolutionOption(
                            id="increase_vision_percent",
                            label="Increase vision allocation percentage",
                            description=(
                                f"Raise the vision allocation to cover {shortfall} "
                                f"{currency}/month"
                            ),
                        ),
                        ResolutionOption(
                            id="reduce_fund_targets",
                            label="Reduce sinking fund targets",
                            description="Lower annual targets of lower-priority funds",
                        ),
                    ),
                    recommended="increase_vision_percent",
                )
            )
            logger.warning(
                "vision_allocation_insufficient",
                total_transfers=str(total),
                allocation=str(allocation),
            )
        else:
            remaining = allocation - total
            plan.notes.append(
                VisionNote(
                    kind="remaining_allocation",
                    level="info",
                    message=(
                        f"Total sinking fund transfers: {total} {currency}/month. "
                        f"Remaining vision allocation: {remaining} {currency}/month."
                    ),
                    amount=remaining,
                )
            )

    def _emergency_fund_status(
        self, household: Household, plan: VisionPlan
    ) -> EmergencyFundStatus:
        # Balances held in emergency-named sinking funds count toward the target
        balance = sum(
            (
                fund.current_balance
                for fund in household.sinking_funds
                if "emergency" in fund.name.lower()
            ),
            ZERO,
        )
        if plan.emergency_target > 0 and balance >= plan.emergency_target:
            return EmergencyFundStatus(
                target=plan.emergency_target,
                current_balance=balance,
                status="fully_funded",
                guidance="Emergency fund is fully funded; maintain the balance",
            )
        return EmergencyFundStatus(
            target=plan.emergency_target,
            current_balance=balance,
            status="building",
            guidance="Continue building emergency fund to reach target",
        )

    def _recommendations(
        self, household: Household, plan: VisionPlan
    ) -> list[Recommendation]:
        currency = household.currency
        recommendations: list[Recommendation] = []

        if plan.emergency_target > 0:
            recommendations.append(
                Recommendation(
                    type="emergency_fund",
                    priority="high",
                    message=(
                        f"Build emergency fund to {plan.emergency_target} {currency} "
                        f"({household.emergency_months} months of core expenses)"
                    ),
                    action="Allocate additional funds to emergency savings",
                )
            )

        horizon = self.accelerated_horizon_months
        for fund in plan.sinking_funds:
            if not fund.exceeds_horizon(self.long_horizon_months):
                continue
            suggested = cents(fund.annual_target / horizon)
            recommendations.append(
                Recommendation(
                    type="sinking_fund",
                    priority="medium",
                    message=(
                        f"{fund.name}: Consider increasing monthly transfer from "
                        f"{fund.monthly_transfer} to {suggested} {currency} to reach "
                        f"target in {horizon} months"
                    ),
                    action=f"Review and adjust {fund.name} monthly transfer",
                )
            )

        if plan.is_over_allocated:
            recommendations.append(
                Recommendation(
                    type="vision_allocation",
                    priority="high",
                    message=(
                        "Monthly vision allocation insufficient for all sinking funds. "
                        "Consider increasing allocation percentage or reducing fund "
                        "targets."
                    ),
                    action="Review vision allocation percentage and fund targets",
                )
            )

        return recommendations


def plan_vision_and_buffers(
    household: Household, settings: Settings | None = None
) -> VisionPlan:
    return VisionAndBuffersPlanner.from_settings(settings).plan_vision_and_buffers(
        household
    )


__all__ = [
    "EmergencyFundStatus",
    "FundPlan",
    "FundPriority",
    "Recommendation",
    "VisionAndBuffersPlanner",
    "VisionNote",
    "VisionPlan",
    "classify_fund_priority",
    "months_to_target",
    "plan_vision_and_buffers",
]
