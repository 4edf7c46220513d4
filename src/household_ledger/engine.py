"""Plain-function entry points over the household allocation engine.

Each function builds its calculator from settings and returns a fresh result.
Nothing here keeps state between calls, so independent household/period pairs
can be processed concurrently.
"""

from dataclasses import dataclass
from typing import Any

from household_ledger.config import Settings, get_settings
from household_ledger.domain.households import Household
from household_ledger.domain.periods import Period
from household_ledger.domain.value_objects import CalculationWarning, ValidationResult
from household_ledger.exceptions import ValidationError
from household_ledger.logging_config import get_logger, period_context
from household_ledger.services.care_ledger import CareLedgerCalculator, CareLedgerResult
from household_ledger.services.reporting import build_period_report
from household_ledger.services.unit_method import UnitMethodCalculator, UnitMethodResult
from household_ledger.services.vision_buffers import VisionAndBuffersPlanner, VisionPlan

logger = get_logger(__name__)


def validate_household(household: Household) -> ValidationResult:
    return household.validate()


def validate_period(
    period: Period, household: Household, settings: Settings | None = None
) -> ValidationResult:
    settings = settings or get_settings()
    return period.validate(household, tolerance=settings.allocation_tolerance)


def calculate_unit_method(
    household: Household, period: Period, settings: Settings | None = None
) -> UnitMethodResult:
    return UnitMethodCalculator.from_settings(settings).calculate(household, period)


def apply_care_ledger(
    household: Household,
    period: Period,
    unit_result: UnitMethodResult,
    settings: Settings | None = None,
) -> CareLedgerResult:
    return CareLedgerCalculator.from_settings(settings).apply_care_ledger(
        household, period, unit_result
    )


def plan_vision_and_buffers(
    household: Household, settings: Settings | None = None
) -> VisionPlan:
    return VisionAndBuffersPlanner.from_settings(settings).plan_vision_and_buffers(
        household
    )


def require_valid_household(household: Household) -> None:
    result = validate_household(household)
    if not result.is_valid:
        raise ValidationError("Household", list(result.errors))


def require_valid_period(
    period: Period, household: Household, settings: Settings | None = None
) -> None:
    result = validate_period(period, household, settings)
    if not result.is_valid:
        raise ValidationError(f"Period {period.label}", list(result.errors))


@dataclass
class PeriodRun:
    """Results of running all three calculators over one period."""

    household: Household
    period: Period
    unit_method: UnitMethodResult
    care_ledger: CareLedgerResult
    vision: VisionPlan

    @property
    def warnings(self) -> list[CalculationWarning]:
        return [*self.unit_method.warnings, *self.vision.warnings]

    def to_report(self) -> dict[str, Any]:
        return build_period_report(
            self.household,
            self.period,
            self.unit_method,
            self.care_ledger,
            self.vision,
        )


def run_period(
    household: Household, period: Period, settings: Settings | None = None
) -> PeriodRun:
    """Validate both entities, then run unit method, care ledger and vision planning.

    Raises:
        ValidationError: listing every problem found in the household and period.
    """
    settings = settings or get_settings()
    errors = list(validate_household(household).errors)
    errors.extend(validate_period(period, household, settings).errors)
    if errors:
        logger.warning("period_run_rejected", period=period.label, errors=len(errors))
        raise ValidationError(f"Period {period.label}", errors)

    with period_context(household.name, period.label):
        unit_result = calculate_unit_method(household, period, settings)
        care_result = apply_care_ledger(household, period, unit_result, settings)
        vision_result = plan_vision_and_buffers(household, settings)

        logger.info(
            "period_run_completed",
            period=period.label,
            warnings=len(unit_result.warnings) + len(vision_result.warnings),
        )
    return PeriodRun(
        household=household,
        period=period,
        unit_method=unit_result,
        care_ledger=care_result,
        vision=vision_result,
    )


__all__ = [
    "PeriodRun",
    "apply_care_ledger",
    "calculate_unit_method",
    "plan_vision_and_buffers",
    "require_valid_household",
    "require_valid_period",
    "run_period",
    "validate_household",
    "validate_period",
]
