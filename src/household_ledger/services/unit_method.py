"""Unit method apportionment of the shared Core budget.

Each adult carries one unit plus the child units assigned to them for the
period. The Core total is priced per unit, every adult's preliminary share is
capped at a fraction of their net income, and any shortfall the caps leave
behind is redistributed across the adults who are neither capped nor
overridden, in proportion to their preliminary shares.

Overrides bypass the cap and are never touched by rebalancing.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from household_ledger.config import Settings, get_settings
from household_ledger.domain.households import (
    MAX_ADULTS,
    MIN_ADULTS,
    Adult,
    Household,
)
from household_ledger.domain.periods import Period
from household_ledger.domain.value_objects import (
    ZERO,
    CalculationWarning,
    ResolutionOption,
    WarningKind,
    as_number,
    cents,
)
from household_ledger.exceptions import ValidationError
from household_ledger.logging_config import get_logger

logger = get_logger(__name__)

ADULT_UNITS = Decimal("1.0")
CAP_ADJUST_STEP = Decimal("0.05")


@dataclass
class AdultShare:
    """Per-adult working record; built fresh for every calculation."""

    adult_id: str
    adult_name: str
    adult_units: Decimal
    assigned_child_units: Decimal
    total_units: Decimal
    net_income: Decimal
    prelim_share: Decimal
    cap_amount: Decimal
    override: Decimal | None
    final_share: Decimal
    capped: bool = False

    @property
    def is_overridden(self) -> bool:
        return self.override is not None

    @property
    def is_rebalanceable(self) -> bool:
        return not self.capped and self.override is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "adultId": self.adult_id,
            "adultName": self.adult_name,
            "adultUnits": as_number(self.adult_units),
            "assignedChildUnits": as_number(self.assigned_child_units),
            "totalUnits": as_number(self.total_units),
            "netIncome": as_number(self.net_income),
            "prelimShare": as_number(self.prelim_share),
            "capAmount": as_number(self.cap_amount),
            "override": as_number(self.override),
            "finalShare": as_number(self.final_share),
            "cappedFlag": self.capped,
        }


@dataclass
class ShareTotals:
    sum_prelim: Decimal = ZERO
    sum_final: Decimal = ZERO
    diff_from_core: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "sumPrelim": as_number(self.sum_prelim),
            "sumFinal": as_number(self.sum_final),
            "diffFromCore": as_number(self.diff_from_core),
        }


@dataclass
class UnitMethodResult:
    period_label: str
    core_total: Decimal
    total_units: Decimal
    unit_cost: Decimal
    adults: list[AdultShare] = field(default_factory=list)
    totals: ShareTotals = field(default_factory=ShareTotals)
    audit_trail: list[str] = field(default_factory=list)
    warnings: list[CalculationWarning] = field(default_factory=list)
    rebalance_iterations: int = 0
    converged: bool = True

    def share_for(self, adult_id: str) -> AdultShare | None:
        for share in self.adults:
            if share.adult_id == adult_id:
                return share
        return None

    @property
    def final_shares(self) -> dict[str, Decimal]:
        return {share.adult_id: share.final_share for share in self.adults}

    @property
    def capped_adult_ids(self) -> list[str]:
        return [share.adult_id for share in self.adults if share.capped]

    def warning(self, kind: WarningKind) -> CalculationWarning | None:
        for item in self.warnings:
            if item.kind == kind:
                return item
        return None

    @property
    def has_deficit(self) -> bool:
        return self.warning(WarningKind.DEFICIT_AFTER_CAPS) is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "periodLabel": self.period_label,
            "coreTotal": as_number(self.core_total),
            "totalUnits": as_number(self.total_units),
            "unitCost": as_number(self.unit_cost),
            "adults": [share.to_dict() for share in self.adults],
            "totals": self.totals.to_dict(),
            "rebalanceIterations": self.rebalance_iterations,
            "converged": self.converged,
            "auditTrail": list(self.audit_trail),
            "warnings": [item.to_dict() for item in self.warnings],
        }


class UnitMethodCalculator:
    """Apportions a period's Core total across a household's adults.

    The calculator holds only its tolerance and iteration limit, so one
    instance can serve any number of households and periods concurrently.
    """

    def __init__(
        self,
        tolerance: Decimal = Decimal("0.01"),
        max_iterations: int = 10,
    ) -> None:
        self.tolerance = Decimal(str(tolerance))
        self.max_iterations = max_iterations

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "UnitMethodCalculator":
        settings = settings or get_settings()
        return cls(
            tolerance=settings.allocation_tolerance,
            max_iterations=settings.max_rebalance_iterations,
        )

    def validate_inputs(self, household: Household, period: Period) -> list[str]:
        """Check the preconditions of calculate(); returns every violation found."""
        errors: list[str] = []

        if not MIN_ADULTS <= household.adult_count <= MAX_ADULTS:
            errors.append(
                f"Household must have {MIN_ADULTS}-{MAX_ADULTS} adults, "
                f"found {household.adult_count}"
            )

        if period.core_total <= 0:
            errors.append(f"Core total must be positive, found {period.core_total}")

        total_assigned = sum(period.assigned_child_units.values(), ZERO)
        expected = household.total_child_units
        if abs(total_assigned - expected) > self.tolerance:
            errors.append(
                f"Assigned child units ({total_assigned}) must equal expected total "
                f"({expected})"
            )

        if not Decimal("0.05") <= household.cap_percent <= Decimal("0.6"):
            errors.append(
                f"Cap percent must be between 0.05 and 0.6, found {household.cap_percent}"
            )

        return errors

    def calculate(self, household: Household, period: Period) -> UnitMethodResult:
        errors = self.validate_inputs(household, period)
        if errors:
            raise ValidationError("Unit method input", errors)

        total_units = household.total_units
        raw_unit_cost = period.core_total / total_units
        result = UnitMethodResult(
            period_label=period.label,
            core_total=period.core_total,
            total_units=total_units,
            unit_cost=cents(raw_unit_cost),
        )
        trail = result.audit_trail
        trail.append(
            f"Total units: {total_units} ({household.adult_count} adults + "
            f"{household.total_child_units} child units)"
        )
        trail.append(
            f"Unit cost: {period.core_total} / {total_units} = {result.unit_cost}"
        )

        for adult in household.adults:
            share = self._resolve_share(household, period, adult, raw_unit_cost)
            if share.is_overridden:
                trail.append(f"{share.adult_name}: Override set to {share.final_share}")
            elif share.capped:
                trail.append(
                    f"{share.adult_name}: Capped at {share.cap_amount} "
                    f"({household.cap_percent * 100:.0f}% of income)"
                )
            result.adults.append(share)

        self._recompute_totals(result)
        result.totals.sum_prelim = sum((s.prelim_share for s in result.adults), ZERO)
        trail.append(f"Sum of preliminary shares: {result.totals.sum_prelim}")
        trail.append(f"Sum of final shares: {result.totals.sum_final}")
        trail.append(f"Difference from Core total: {result.totals.diff_from_core}")

        if abs(result.totals.diff_from_core) > self.tolerance:
            self._rebalance(result)

        if result.totals.diff_from_core < -self.tolerance:
            deficit_warning = self._deficit_after_caps(household, result)
            result.warnings.append(deficit_warning)
            logger.warning(
                "deficit_after_caps",
                period=period.label,
                deficit=str(deficit_warning.details["deficit"]),
                deficit_percent=str(deficit_warning.details["deficitPercent"]),
            )

        logger.info(
            "unit_method_calculated",
            period=period.label,
            unit_cost=str(result.unit_cost),
            sum_final=str(result.totals.sum_final),
            diff_from_core=str(result.totals.diff_from_core),
            capped=len(result.capped_adult_ids),
            iterations=result.rebalance_iterations,
        )
        return result

    def _resolve_share(
        self,
        household: Household,
        period: Period,
        adult: Adult,
        unit_cost: Decimal,
    ) -> AdultShare:
        assigned = period.assigned_child_units.get(adult.id, ZERO)
        units = ADULT_UNITS + assigned
        prelim = unit_cost * units
        cap_amount = household.cap_percent * adult.net_income
        override = period.override_for(adult.id)

        capped = False
        if override is not None:
            final = override
        elif prelim <= cap_amount:
            final = prelim
        else:
            final = cap_amount
            capped = True

        return AdultShare(
            adult_id=adult.id,
            adult_name=adult.name,
            adult_units=ADULT_UNITS,
            assigned_child_units=assigned,
            total_units=units,
            net_income=adult.net_income,
            prelim_share=cents(prelim),
            cap_amount=cents(cap_amount),
            override=cents(override) if override is not None else None,
            final_share=cents(final),
            capped=capped,
        )

    def _recompute_totals(self, result: UnitMethodResult) -> None:
        result.totals.sum_final = sum((s.final_share for s in result.adults), ZERO)
        result.totals.diff_from_core = cents(result.totals.sum_final - result.core_total)

    def _rebalance(self, result: UnitMethodResult) -> None:
        trail = result.audit_trail
        trail.append("Starting rebalancing process...")
        # Adults pushed to zero by a surplus cannot absorb any more of it
        exhausted: set[str] = set()

        while (
            abs(result.totals.diff_from_core) > self.tolerance
            and result.rebalance_iterations < self.max_iterations
        ):
            eligible = [
                s
                for s in result.adults
                if s.is_rebalanceable and s.adult_id not in exhausted
            ]
            if not eligible:
                trail.append(
                    "No adults available for rebalancing (all capped or overridden)"
                )
                break

            eligible_prelim = sum((s.prelim_share for s in eligible), ZERO)
            if eligible_prelim <= 0:
                trail.append(
                    "No preliminary share left to rebalance against "
                    f"(eligible total {eligible_prelim})"
                )
                break

            result.rebalance_iterations += 1
            iteration = result.rebalance_iterations
            ratio = -result.totals.diff_from_core / eligible_prelim
            trail.append(f"Rebalancing iteration {iteration}")
            trail.append(f"Adjustment ratio: {ratio:.4f}")

            for share in eligible:
                adjustment = share.prelim_share * ratio
                share.final_share = cents(share.final_share + adjustment)
                trail.append(
                    f"{share.adult_name}: Adjusted by {cents(adjustment)} "
                    f"to {share.final_share}"
                )
                if share.final_share > share.cap_amount:
                    share.final_share = share.cap_amount
                    share.capped = True
                    trail.append(
                        f"{share.adult_name}: Capped at {share.cap_amount} during rebalancing"
                    )
                elif share.final_share < 0:
                    share.final_share = cents(ZERO)
                    exhausted.add(share.adult_id)
                    trail.append(f"{share.adult_name}: Floored at 0.00 during rebalancing")

            self._recompute_totals(result)
            trail.append(
                f"After iteration {iteration}: sumFinal = {result.totals.sum_final}, "
                f"diffFromCore = {result.totals.diff_from_core}"
            )
            logger.debug(
                "rebalance_iteration",
                period=result.period_label,
                iteration=iteration,
                ratio=f"{ratio:.6f}",
                diff_from_core=str(result.totals.diff_from_core),
            )

        result.converged = abs(result.totals.diff_from_core) <= self.tolerance
        if not result.converged and result.rebalance_iterations >= self.max_iterations:
            trail.append("Warning: Maximum rebalancing iterations reached")
            result.warnings.append(
                CalculationWarning(
                    kind=WarningKind.REBALANCE_NOT_CONVERGED,
                    message=(
                        f"Rebalancing stopped after {self.max_iterations} iterations "
                        f"with {result.totals.diff_from_core} unresolved"
                    ),
                    details={
                        "iterations": self.max_iterations,
                        "diffFromCore": result.totals.diff_from_core,
                    },
                )
            )
            logger.warning(
                "rebalance_not_converged",
                period=result.period_label,
                iterations=self.max_iterations,
                diff_from_core=str(result.totals.diff_from_core),
            )

    def _deficit_after_caps(
        self, household: Household, result: UnitMethodResult
    ) -> CalculationWarning:
        deficit = abs(result.totals.diff_from_core)
        deficit_percent = (deficit / result.core_total * 100).quantize(Decimal("0.1"))
        raised_cap = household.cap_percent + CAP_ADJUST_STEP
        return CalculationWarning(
            kind=WarningKind.DEFICIT_AFTER_CAPS,
            message=(
                f"Deficit after caps: {deficit} ({deficit_percent}% of core total)"
            ),
            details={"deficit": deficit, "deficitPercent": deficit_percent},
            options=(
                ResolutionOption(
                    id="increase_core",
                    label="Increase core total",
                    description=(
                        f"Add {deficit} to core total or reclassify items to "
                        "Personal/Vision"
                    ),
                ),
                ResolutionOption(
                    id="adjust_cap",
                    label="Temporarily adjust cap percent",
                    description=(
                        f"Increase cap percent to {raised_cap:.2f} with logged consent"
                    ),
                ),
                ResolutionOption(
                    id="use_overrides",
                    label="Enter overrides",
                    description=(
                        "Set manual overrides for some adults and rebalance remaining"
                    ),
                ),
            ),
            recommended="increase_core",
        )


def calculate_unit_method(
    household: Household, period: Period, settings: Settings | None = None
) -> UnitMethodResult:
    return UnitMethodCalculator.from_settings(settings).calculate(household, period)


__all__ = [
    "AdultShare",
    "ShareTotals",
    "UnitMethodCalculator",
    "UnitMethodResult",
    "calculate_unit_method",
]
