"""Monthly accounting period owned by a household.

Periods are immutable snapshots. Every mutating operation returns a new
Period with ``updated_at`` refreshed, and fails with PeriodLockedError once the
period has been locked at month-close. Locking is terminal; the next month
starts from a fresh Period.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import uuid4

from household_ledger.domain.households import Household
from household_ledger.domain.value_objects import ZERO, ValidationResult, to_decimal
from household_ledger.exceptions import PeriodLockedError

LABEL_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
MAX_CARE_HOURS = Decimal("24")
DEFAULT_TOLERANCE = Decimal("0.01")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return f"p_{uuid4().hex}"


@dataclass(frozen=True)
class CareEntry:
    adult_id: str
    task: str
    hours: Decimal
    date: date | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hours", to_decimal(self.hours))


@dataclass(frozen=True)
class Decision:
    title: str
    date: date | None = None
    description: str = ""
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class Amendment:
    description: str
    date: date | None = None
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class Period:
    label: str
    core_total: Decimal = ZERO
    assigned_child_units: Mapping[str, Decimal] = field(default_factory=dict)
    overrides: Mapping[str, Decimal] = field(default_factory=dict)
    care_entries: tuple[CareEntry, ...] = ()
    decisions: tuple[Decision, ...] = ()
    amendments: tuple[Amendment, ...] = ()
    is_locked: bool = False
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "core_total", to_decimal(self.core_total))
        object.__setattr__(
            self,
            "assigned_child_units",
            {k: to_decimal(v) for k, v in self.assigned_child_units.items()},
        )
        # An override of None means "no override" for that adult
        object.__setattr__(
            self,
            "overrides",
            {k: to_decimal(v) for k, v in self.overrides.items() if v is not None},
        )
        object.__setattr__(self, "care_entries", tuple(self.care_entries))
        object.__setattr__(self, "decisions", tuple(self.decisions))
        object.__setattr__(self, "amendments", tuple(self.amendments))

    @classmethod
    def new_for(
        cls, household: Household, label: str, core_total: Decimal | int | str = ZERO
    ) -> "Period":
        """Open a period with child units split evenly across the household's adults."""
        return cls(
            label=label,
            core_total=to_decimal(core_total),
            assigned_child_units=household.equal_child_unit_split(),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def override_for(self, adult_id: str) -> Decimal | None:
        return self.overrides.get(adult_id)

    def entries_for(self, adult_id: str) -> list[CareEntry]:
        return [entry for entry in self.care_entries if entry.adult_id == adult_id]

    def care_hours_for(self, adult_id: str) -> Decimal:
        return sum((entry.hours for entry in self.entries_for(adult_id)), ZERO)

    def care_value_for(self, adult_id: str, rate_per_hour: Decimal) -> Decimal:
        return self.care_hours_for(adult_id) * to_decimal(rate_per_hour)

    def care_values(self, rate_per_hour: Decimal) -> dict[str, Decimal]:
        values: dict[str, Decimal] = {}
        for entry in self.care_entries:
            values[entry.adult_id] = values.get(entry.adult_id, ZERO) + entry.hours
        rate = to_decimal(rate_per_hour)
        return {adult_id: hours * rate for adult_id, hours in values.items()}

    # ------------------------------------------------------------------
    # Mutations (each returns a new snapshot)
    # ------------------------------------------------------------------

    def _mutate(self, operation: str, **changes: object) -> "Period":
        if self.is_locked:
            raise PeriodLockedError(self.label, operation)
        return replace(self, updated_at=_utc_now(), **changes)

    def with_core_total(self, core_total: Decimal | int | str) -> "Period":
        return self._mutate("set core total", core_total=to_decimal(core_total))

    def with_assigned_child_units(
        self, assigned: Mapping[str, Decimal | int | str]
    ) -> "Period":
        return self._mutate("assign child units", assigned_child_units=dict(assigned))

    def with_override(self, adult_id: str, amount: Decimal | int | str) -> "Period":
        overrides = dict(self.overrides)
        overrides[adult_id] = to_decimal(amount)
        return self._mutate("set override", overrides=overrides)

    def without_override(self, adult_id: str) -> "Period":
        overrides = {k: v for k, v in self.overrides.items() if k != adult_id}
        return self._mutate("clear override", overrides=overrides)

    def add_care_entry(
        self,
        adult_id: str,
        task: str,
        hours: Decimal | int | str,
        entry_date: date | None = None,
    ) -> "Period":
        entry = CareEntry(
            adult_id=adult_id,
            task=task,
            hours=to_decimal(hours),
            date=entry_date or date.today(),
        )
        return self._mutate("add care entry", care_entries=self.care_entries + (entry,))

    def add_decision(
        self, title: str, description: str = "", decision_date: date | None = None
    ) -> "Period":
        decision = Decision(
            title=title,
            description=description,
            date=decision_date or date.today(),
        )
        return self._mutate("add decision", decisions=self.decisions + (decision,))

    def add_amendment(
        self, description: str, amendment_date: date | None = None
    ) -> "Period":
        amendment = Amendment(
            description=description,
            date=amendment_date or date.today(),
        )
        return self._mutate("add amendment", amendments=self.amendments + (amendment,))

    def lock(self) -> "Period":
        return self._mutate("lock", is_locked=True)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self, household: Household, tolerance: Decimal = DEFAULT_TOLERANCE
    ) -> ValidationResult:
        errors: list[str] = []
        known_ids = set(household.adult_ids)

        if not LABEL_PATTERN.match(self.label or ""):
            errors.append(
                f"Period label must be in YYYY-MM format, found {self.label!r}"
            )

        if self.core_total <= 0:
            errors.append(f"Core total must be positive, found {self.core_total}")

        total_assigned = sum(self.assigned_child_units.values(), ZERO)
        expected = household.total_child_units
        if abs(total_assigned - expected) > tolerance:
            errors.append(
                f"Assigned child units ({total_assigned}) must equal expected total "
                f"({expected})"
            )

        for adult in household.adults:
            if adult.id not in self.assigned_child_units:
                errors.append(f"Adult {adult.name} missing assigned child units")
        for adult_id in self.assigned_child_units:
            if adult_id not in known_ids:
                errors.append(f"Assigned child units reference unknown adult {adult_id}")

        for adult_id, amount in self.overrides.items():
            if adult_id not in known_ids:
                errors.append(f"Override references unknown adult {adult_id}")
            if amount < 0:
                errors.append(f"Override for {adult_id} must be non-negative, found {amount}")

        errors.extend(validate_care_entries(self.care_entries, known_ids))

        for index, decision in enumerate(self.decisions, start=1):
            if not decision.id or not decision.title or decision.date is None:
                errors.append(f"Decision {index} missing required fields")

        for index, amendment in enumerate(self.amendments, start=1):
            if not amendment.id or not amendment.description or amendment.date is None:
                errors.append(f"Amendment {index} missing required fields")

        return ValidationResult(tuple(errors))


def validate_care_entries(
    entries: tuple[CareEntry, ...], known_adult_ids: set[str] | None = None
) -> list[str]:
    errors: list[str] = []
    for index, entry in enumerate(entries, start=1):
        if not entry.adult_id or entry.date is None or not entry.task:
            errors.append(f"Care entry {index} missing required fields")
        if entry.hours <= 0:
            errors.append(f"Care entry {index} has invalid hours: {entry.hours}")
        elif entry.hours > MAX_CARE_HOURS:
            errors.append(f"Care entry {index} has unrealistic hours: {entry.hours}")
        if (
            known_adult_ids is not None
            and entry.adult_id
            and entry.adult_id not in known_adult_ids
        ):
            errors.append(f"Care entry {index} references unknown adult {entry.adult_id}")
    return errors


__all__ = [
    "Amendment",
    "CareEntry",
    "Decision",
    "Period",
    "validate_care_entries",
]
