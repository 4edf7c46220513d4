"""Care ledger valuation.

Logged care hours are valued at the household's hourly rate and compensated
through one of two models:

- credit: each adult's care value reduces that adult's own share next period.
- stipend: care values are paid out of Core, so next period's Core grows by
  their sum.

The next-period preview is an estimate built on the current unit method
result; mismatches are noted, never raised.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from household_ledger.config import Settings, get_settings
from household_ledger.domain.households import Household
from household_ledger.domain.periods import Period, validate_care_entries
from household_ledger.domain.value_objects import (
    ZERO,
    CareModel,
    ValidationResult,
    as_number,
    cents,
)
from household_ledger.exceptions import UnsupportedCareModelError
from household_ledger.logging_config import get_logger
from household_ledger.services.unit_method import UnitMethodResult

logger = get_logger(__name__)

MODEL_DESCRIPTIONS = {
    CareModel.CREDIT: "Care work credits reduce next month's core contributions",
    CareModel.STIPEND: "Care work stipends are paid from core budget",
}


@dataclass(frozen=True)
class AdultCareValue:
    adult_id: str
    adult_name: str
    entry_count: int
    hours: Decimal
    value: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "adultId": self.adult_id,
            "adultName": self.adult_name,
            "entryCount": self.entry_count,
            "hours": as_number(self.hours),
            "value": as_number(self.value),
        }


@dataclass(frozen=True)
class StipendPayee:
    adult_id: str
    adult_name: str
    amount: Decimal
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "adultId": self.adult_id,
            "adultName": self.adult_name,
            "amount": as_number(self.amount),
            "description": self.description,
        }


@dataclass(frozen=True)
class PreviewShare:
    adult_id: str
    adult_name: str
    base_share: Decimal
    care_adjustment: Decimal
    estimated_share: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "adultName": self.adult_name,
            "baseShare": as_number(self.base_share),
            "careAdjustment": as_number(self.care_adjustment),
            "estimatedShare": as_number(self.estimated_share),
        }


@dataclass
class NextPeriodPreview:
    estimated_core_total: Decimal
    adult_shares: dict[str, PreviewShare] = field(default_factory=dict)
    total_shares: Decimal = ZERO
    notes: list[str] = field(default_factory=list)

    @property
    def difference(self) -> Decimal:
        return self.total_shares - self.estimated_core_total

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimatedCoreTotal": as_number(self.estimated_core_total),
            "adultShares": {k: v.to_dict() for k, v in self.adult_shares.items()},
            "totalShares": as_number(self.total_shares),
            "notes": list(self.notes),
        }


@dataclass
class CareLedgerResult:
    period_label: str
    care_model: CareModel
    description: str
    care_values: list[AdultCareValue] = field(default_factory=list)
    next_month_core_credit: dict[str, Decimal] = field(default_factory=dict)
    next_month_core_increase: Decimal = ZERO
    payees: list[StipendPayee] = field(default_factory=list)
    preview: NextPeriodPreview | None = None
    audit_trail: list[str] = field(default_factory=list)

    @property
    def total_care_value(self) -> Decimal:
        return sum((item.value for item in self.care_values), ZERO)

    def value_for(self, adult_id: str) -> Decimal:
        for item in self.care_values:
            if item.adult_id == adult_id:
                return item.value
        return ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "periodLabel": self.period_label,
            "careValues": {
                item.adult_id: as_number(item.value) for item in self.care_values
            },
            "nextMonthCoreCredit": {
                k: as_number(v) for k, v in self.next_month_core_credit.items()
            },
            "nextMonthCoreIncrease": as_number(self.next_month_core_increase),
            "payees": [payee.to_dict() for payee in self.payees],
            "summary": {
                "model": self.care_model.value,
                "description": self.description,
                "nextPeriodCorePreview": (
                    self.preview.to_dict() if self.preview is not None else None
                ),
            },
            "auditTrail": list(self.audit_trail),
        }


class CareLedgerCalculator:
    def __init__(self, tolerance: Decimal = Decimal("0.01")) -> None:
        self.tolerance = Decimal(str(tolerance))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CareLedgerCalculator":
        settings = settings or get_settings()
        return cls(tolerance=settings.allocation_tolerance)

    def validate(self, household: Household, period: Period) -> ValidationResult:
        """Check care entries, care model and rate, reporting every problem together."""
        errors = validate_care_entries(period.care_entries)
        if not isinstance(household.care_model, CareModel):
            errors.append(f"Invalid care model: {household.care_model}")
        if household.care_rate_per_hour <= 0:
            errors.append(f"Care rate must be positive: {household.care_rate_per_hour}")
        return ValidationResult(tuple(errors))

    def apply_care_ledger(
        self,
        household: Household,
        period: Period,
        unit_result: UnitMethodResult,
    ) -> CareLedgerResult:
        if not isinstance(household.care_model, CareModel):
            raise UnsupportedCareModelError(str(household.care_model))

        model = household.care_model
        currency = household.currency
        result = CareLedgerResult(
            period_label=period.label,
            care_model=model,
            description=MODEL_DESCRIPTIONS[model],
        )
        trail = result.audit_trail

        for adult in household.adults:
            entries = period.entries_for(adult.id)
            hours = period.care_hours_for(adult.id)
            value = cents(hours * household.care_rate_per_hour)
            result.care_values.append(
                AdultCareValue(
                    adult_id=adult.id,
                    adult_name=adult.name,
                    entry_count=len(entries),
                    hours=hours,
                    value=value,
                )
            )
            trail.append(
                f"{adult.name}: {len(entries)} entries, {hours} hours = {value} {currency}"
            )

        if model == CareModel.CREDIT:
            trail.append("Applying CREDIT model:")
            for item in result.care_values:
                result.next_month_core_credit[item.adult_id] = -item.value
                if item.value > 0:
                    trail.append(
                        f"{item.adult_name}: {item.value} {currency} credit to next "
                        "month's core share"
                    )
        else:
            trail.append("Applying STIPEND model:")
            for item in result.care_values:
                if item.value <= 0:
                    continue
                result.payees.append(
                    StipendPayee(
                        adult_id=item.adult_id,
                        adult_name=item.adult_name,
                        amount=item.value,
                        description=f"Care work stipend for {period.label}",
                    )
                )
                trail.append(f"{item.adult_name}: {item.value} {currency} stipend payment")
            result.next_month_core_increase = sum(
                (payee.amount for payee in result.payees), ZERO
            )
            trail.append(
                f"Total stipend payments: {result.next_month_core_increase} {currency}"
            )
            trail.append(
                "Next month's core total will increase by: "
                f"{result.next_month_core_increase} {currency}"
            )

        result.preview = self._next_period_preview(household, period, unit_result, result)

        logger.info(
            "care_ledger_applied",
            period=period.label,
            model=model.value,
            total_care_value=str(result.total_care_value),
            next_month_core_increase=str(result.next_month_core_increase),
        )
        return result

    def _next_period_preview(
        self,
        household: Household,
        period: Period,
        unit_result: UnitMethodResult,
        care_result: CareLedgerResult,
    ) -> NextPeriodPreview:
        currency = household.currency
        preview = NextPeriodPreview(estimated_core_total=period.core_total)

        if care_result.care_model == CareModel.STIPEND:
            preview.estimated_core_total = cents(
                period.core_total + care_result.next_month_core_increase
            )
            preview.notes.append(
                f"Core total increased by {care_result.next_month_core_increase} "
                f"{currency} for care stipends"
            )

        for share in unit_result.adults:
            adjustment = ZERO
            if care_result.care_model == CareModel.CREDIT:
                adjustment = care_result.next_month_core_credit.get(share.adult_id, ZERO)
                if adjustment < 0:
                    preview.notes.append(
                        f"{share.adult_name}: Share reduced by {abs(adjustment)} "
                        f"{currency} for care credit"
                    )
            estimated = max(ZERO, cents(share.final_share + adjustment))
            preview.adult_shares[share.adult_id] = PreviewShare(
                adult_id=share.adult_id,
                adult_name=share.adult_name,
                base_share=share.final_share,
                care_adjustment=adjustment,
                estimated_share=estimated,
            )
            preview.total_shares += estimated

        if abs(preview.difference) > self.tolerance:
            preview.notes.append(
                f"Note: Total shares ({preview.total_shares}) differs from estimated "
                f"core ({preview.estimated_core_total}) by {cents(preview.difference)} "
                f"{currency}"
            )
        return preview


def apply_care_ledger(
    household: Household,
    period: Period,
    unit_result: UnitMethodResult,
    settings: Settings | None = None,
) -> CareLedgerResult:
    return CareLedgerCalculator.from_settings(settings).apply_care_ledger(
        household, period, unit_result
    )


__all__ = [
    "AdultCareValue",
    "CareLedgerCalculator",
    "CareLedgerResult",
    "NextPeriodPreview",
    "PreviewShare",
    "StipendPayee",
    "apply_care_ledger",
]
