"""Pydantic v2 schemas for the plain JSON records of households and periods.

Records use the camelCase field names of the exported documents
(``netIncome``, ``assignedChildUnits``...). Parsing only checks structure and
types; range and cross-field rules live in the domain ``validate()`` methods so
that every violation is reported together.
"""

import datetime as dt
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from household_ledger.domain.households import (
    Adult,
    GovernanceSettings,
    Household,
    SinkingFund,
)
from household_ledger.domain.periods import Amendment, CareEntry, Decision, Period
from household_ledger.domain.value_objects import CareModel
from household_ledger.exceptions import InvalidRecordError


class RecordModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        allow_inf_nan=False,
        extra="ignore",
    )


def _as_str_id(value: Any) -> Any:
    # Numeric member ids from older exports are accepted as strings
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


MemberId = Annotated[str, BeforeValidator(_as_str_id)]


# Household Schemas
class AdultRecord(RecordModel):
    id: MemberId
    name: str = ""
    net_income: float = 0.0


class SinkingFundRecord(RecordModel):
    name: str
    annual_target: float = 0.0
    current_balance: float = 0.0
    account: str = "HYSA"


class GovernanceRecord(RecordModel):
    routine_quorum: int | None = None
    major_quorum: int | None = None


class HouseholdRecord(RecordModel):
    name: str = "Household"
    currency: str = Field(default="USD", min_length=3, max_length=3)
    adults: list[AdultRecord] = Field(default_factory=list)
    children_count: int = 0
    child_unit_weight: float = 0.6
    cap_percent: float = 0.30
    care_model: str = CareModel.CREDIT.value
    care_rate_per_hour: float = 20.0
    core_categories: list[str] = Field(default_factory=list)
    vision_alloc_percent: float = 0.10
    emergency_months: int = 4
    sinking_funds: list[SinkingFundRecord] = Field(default_factory=list)
    governance: GovernanceRecord = Field(default_factory=GovernanceRecord)


# Period Schemas
class CareEntryRecord(RecordModel):
    id: str | None = None
    adult_id: MemberId
    date: dt.date | None = None
    task: str = ""
    hours: float


class DecisionRecord(RecordModel):
    id: str | None = None
    title: str = ""
    description: str = ""
    date: dt.date | None = None


class AmendmentRecord(RecordModel):
    id: str | None = None
    description: str = ""
    date: dt.date | None = None


class PeriodRecord(RecordModel):
    label: str = ""
    core_total: float = 0.0
    assigned_child_units: dict[str, float] = Field(default_factory=dict)
    overrides: dict[str, float | None] = Field(default_factory=dict)
    care_entries: list[CareEntryRecord] = Field(default_factory=list)
    decisions: list[DecisionRecord] = Field(default_factory=list)
    amendments: list[AmendmentRecord] = Field(default_factory=list)
    is_locked: bool = False
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


def _parse(model: type[RecordModel], data: Mapping[str, Any], subject: str) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or subject}: {error['msg']}"
            for error in exc.errors()
        ]
        raise InvalidRecordError(subject, errors) from exc


def _with_id(record: Any, **fields: Any) -> dict[str, Any]:
    if record.id:
        fields["id"] = record.id
    return fields


# Household conversion
def household_from_record(data: Mapping[str, Any]) -> Household:
    record: HouseholdRecord = _parse(HouseholdRecord, data, "Household record")
    return Household(
        name=record.name,
        currency=record.currency,
        adults=tuple(
            Adult(id=a.id, name=a.name, net_income=a.net_income) for a in record.adults
        ),
        children_count=record.children_count,
        child_unit_weight=record.child_unit_weight,
        cap_percent=record.cap_percent,
        care_model=record.care_model,
        care_rate_per_hour=record.care_rate_per_hour,
        core_categories=tuple(record.core_categories),
        vision_alloc_percent=record.vision_alloc_percent,
        emergency_months=record.emergency_months,
        sinking_funds=tuple(
            SinkingFund(
                name=f.name,
                annual_target=f.annual_target,
                current_balance=f.current_balance,
                account=f.account,
            )
            for f in record.sinking_funds
        ),
        governance=GovernanceSettings(
            routine_quorum=record.governance.routine_quorum,
            major_quorum=record.governance.major_quorum,
        ),
    )


def household_to_record(household: Household) -> dict[str, Any]:
    care_model = household.care_model
    record = HouseholdRecord(
        name=household.name,
        currency=household.currency,
        adults=[
            AdultRecord(id=a.id, name=a.name, net_income=float(a.net_income))
            for a in household.adults
        ],
        children_count=household.children_count,
        child_unit_weight=float(household.child_unit_weight),
        cap_percent=float(household.cap_percent),
        care_model=care_model.value if isinstance(care_model, CareModel) else care_model,
        care_rate_per_hour=float(household.care_rate_per_hour),
        core_categories=list(household.core_categories),
        vision_alloc_percent=float(household.vision_alloc_percent),
        emergency_months=household.emergency_months,
        sinking_funds=[
            SinkingFundRecord(
                name=f.name,
                annual_target=float(f.annual_target),
                current_balance=float(f.current_balance),
                account=f.account,
            )
            for f in household.sinking_funds
        ],
        governance=GovernanceRecord(
            routine_quorum=household.governance.routine_quorum,
            major_quorum=household.governance.major_quorum,
        ),
    )
    return record.model_dump(mode="json", by_alias=True)


# Period conversion
def period_from_record(data: Mapping[str, Any]) -> Period:
    record: PeriodRecord = _parse(PeriodRecord, data, "Period record")
    timestamps: dict[str, dt.datetime] = {}
    if record.created_at is not None:
        timestamps["created_at"] = record.created_at
    if record.updated_at is not None:
        timestamps["updated_at"] = record.updated_at

    return Period(
        label=record.label,
        core_total=record.core_total,
        assigned_child_units=dict(record.assigned_child_units),
        overrides=dict(record.overrides),
        care_entries=tuple(
            CareEntry(
                **_with_id(
                    entry,
                    adult_id=entry.adult_id,
                    task=entry.task,
                    hours=entry.hours,
                    date=entry.date,
                )
            )
            for entry in record.care_entries
        ),
        decisions=tuple(
            Decision(
                **_with_id(
                    d, title=d.title, description=d.description, date=d.date
                )
            )
            for d in record.decisions
        ),
        amendments=tuple(
            Amendment(**_with_id(a, description=a.description, date=a.date))
            for a in record.amendments
        ),
        is_locked=record.is_locked,
        **timestamps,
    )


def period_to_record(period: Period) -> dict[str, Any]:
    record = PeriodRecord(
        label=period.label,
        core_total=float(period.core_total),
        assigned_child_units={k: float(v) for k, v in period.assigned_child_units.items()},
        overrides={k: float(v) for k, v in period.overrides.items()},
        care_entries=[
            CareEntryRecord(
                id=e.id,
                adult_id=e.adult_id,
                date=e.date,
                task=e.task,
                hours=float(e.hours),
            )
            for e in period.care_entries
        ],
        decisions=[
            DecisionRecord(id=d.id, title=d.title, description=d.description, date=d.date)
            for d in period.decisions
        ],
        amendments=[
            AmendmentRecord(id=a.id, description=a.description, date=a.date)
            for a in period.amendments
        ],
        is_locked=period.is_locked,
        created_at=period.created_at,
        updated_at=period.updated_at,
    )
    return record.model_dump(mode="json", by_alias=True)


__all__ = [
    "HouseholdRecord",
    "PeriodRecord",
    "household_from_record",
    "household_to_record",
    "period_from_record",
    "period_to_record",
]
