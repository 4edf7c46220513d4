"""Household configuration for cost sharing and savings planning.

A Household is an immutable snapshot: members, child weighting, affordability
cap, care compensation model and vision/emergency parameters. Callers produce a
new snapshot with ``dataclasses.replace`` when configuration changes.
"""

from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Any

from household_ledger.domain.value_objects import (
    ZERO,
    CareModel,
    ValidationResult,
    to_decimal,
)

MIN_ADULTS = 3
MAX_ADULTS = 5
CHILD_UNIT_WEIGHT_RANGE = (Decimal("0.1"), Decimal("1.0"))
CAP_PERCENT_RANGE = (Decimal("0.05"), Decimal("0.6"))
VISION_ALLOC_PERCENT_RANGE = (Decimal("0"), Decimal("0.5"))
EMERGENCY_MONTHS_RANGE = (1, 12)

_SPLIT_QUANTUM = Decimal("0.0001")


@dataclass(frozen=True)
class Adult:
    id: str
    name: str
    net_income: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "net_income", to_decimal(self.net_income))


@dataclass(frozen=True)
class SinkingFund:
    """A named savings target funded monthly from the vision allocation."""

    name: str
    annual_target: Decimal
    current_balance: Decimal = ZERO
    account: str = "HYSA"

    def __post_init__(self) -> None:
        object.__setattr__(self, "annual_target", to_decimal(self.annual_target))
        object.__setattr__(self, "current_balance", to_decimal(self.current_balance))


@dataclass(frozen=True)
class GovernanceSettings:
    # Carried for the voting layer; the engine only checks the bounds.
    routine_quorum: int | None = None
    major_quorum: int | None = None


@dataclass(frozen=True)
class Household:
    name: str = "Household"
    currency: str = "USD"
    adults: tuple[Adult, ...] = ()
    children_count: int = 0
    child_unit_weight: Decimal = Decimal("0.6")
    cap_percent: Decimal = Decimal("0.30")
    care_model: CareModel | str = CareModel.CREDIT
    care_rate_per_hour: Decimal = Decimal("20")
    core_categories: tuple[str, ...] = ()
    vision_alloc_percent: Decimal = Decimal("0.10")
    emergency_months: int = 4
    sinking_funds: tuple[SinkingFund, ...] = ()
    governance: GovernanceSettings = field(default_factory=GovernanceSettings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "adults", tuple(self.adults))
        object.__setattr__(self, "sinking_funds", tuple(self.sinking_funds))
        object.__setattr__(self, "core_categories", tuple(self.core_categories))
        for name in (
            "child_unit_weight",
            "cap_percent",
            "care_rate_per_hour",
            "vision_alloc_percent",
        ):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        # Unknown care models are kept as raw strings so validate() can report them
        if not isinstance(self.care_model, CareModel):
            try:
                object.__setattr__(self, "care_model", CareModel(self.care_model))
            except ValueError:
                pass

    # ------------------------------------------------------------------
    # Derived aggregates
    # ------------------------------------------------------------------

    @property
    def adult_count(self) -> int:
        return len(self.adults)

    @property
    def adult_ids(self) -> list[str]:
        return [adult.id for adult in self.adults]

    @property
    def total_net_income(self) -> Decimal:
        return sum((adult.net_income for adult in self.adults), ZERO)

    @property
    def total_child_units(self) -> Decimal:
        return self.children_count * self.child_unit_weight

    @property
    def total_units(self) -> Decimal:
        return self.adult_count + self.total_child_units

    @property
    def monthly_vision_allocation(self) -> Decimal:
        return self.total_net_income * self.vision_alloc_percent / 12

    def get_adult(self, adult_id: str) -> Adult | None:
        for adult in self.adults:
            if adult.id == adult_id:
                return adult
        return None

    def adult_name(self, adult_id: str) -> str:
        adult = self.get_adult(adult_id)
        return adult.name if adult is not None else adult_id

    def equal_child_unit_split(self) -> dict[str, Decimal]:
        """Spread total child units evenly; the rounding remainder goes to the first adult."""
        if not self.adults:
            return {}
        total = self.total_child_units
        each = (total / self.adult_count).quantize(_SPLIT_QUANTUM, rounding=ROUND_DOWN)
        split = {adult.id: each for adult in self.adults}
        first = self.adults[0].id
        split[first] = total - each * (self.adult_count - 1)
        return split

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        errors: list[str] = []

        if not MIN_ADULTS <= self.adult_count <= MAX_ADULTS:
            errors.append(
                f"Household must have {MIN_ADULTS}-{MAX_ADULTS} adults, "
                f"found {self.adult_count}"
            )

        seen: set[str] = set()
        for index, adult in enumerate(self.adults, start=1):
            if not adult.id or not adult.name:
                errors.append(f"Adult {index} missing required id or name")
            if adult.id and adult.id in seen:
                errors.append(f"Adult id {adult.id} is not unique")
            seen.add(adult.id)
            if adult.net_income < 0:
                errors.append(
                    f"Adult {adult.name or index} has invalid netIncome: {adult.net_income}"
                )

        if self.children_count < 0:
            errors.append(
                f"childrenCount must be non-negative, found {self.children_count}"
            )

        errors.extend(
            _check_range("childUnitWeight", self.child_unit_weight, CHILD_UNIT_WEIGHT_RANGE)
        )
        errors.extend(_check_range("capPercent", self.cap_percent, CAP_PERCENT_RANGE))

        if not isinstance(self.care_model, CareModel):
            errors.append(
                f'careModel must be "credit" or "stipend", found {self.care_model}'
            )
        if self.care_rate_per_hour <= 0:
            errors.append(
                f"careRatePerHour must be positive, found {self.care_rate_per_hour}"
            )

        errors.extend(
            _check_range(
                "visionAllocPercent", self.vision_alloc_percent, VISION_ALLOC_PERCENT_RANGE
            )
        )
        errors.extend(
            _check_range("emergencyMonths", self.emergency_months, EMERGENCY_MONTHS_RANGE)
        )

        for fund in self.sinking_funds:
            if not fund.name:
                errors.append("Sinking fund missing required name")
            if fund.annual_target < 0:
                errors.append(
                    f"Sinking fund {fund.name} has negative annualTarget: {fund.annual_target}"
                )
            if fund.current_balance < 0:
                errors.append(
                    f"Sinking fund {fund.name} has negative currentBalance: "
                    f"{fund.current_balance}"
                )

        for label, quorum in (
            ("routineQuorum", self.governance.routine_quorum),
            ("majorQuorum", self.governance.major_quorum),
        ):
            if quorum is None:
                continue
            if quorum > self.adult_count:
                errors.append(f"{label} cannot exceed number of adults")
            elif quorum < 1:
                errors.append(f"{label} must be at least 1, found {quorum}")

        return ValidationResult(tuple(errors))


def _check_range(label: str, value: Any, bounds: tuple[Any, Any]) -> list[str]:
    low, high = bounds
    if low <= value <= high:
        return []
    return [f"{label} must be between {low} and {high}, found {value}"]


__all__ = [
    "Adult",
    "GovernanceSettings",
    "Household",
    "MAX_ADULTS",
    "MIN_ADULTS",
    "SinkingFund",
]
