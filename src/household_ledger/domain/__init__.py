from household_ledger.domain.households import (
    MAX_ADULTS,
    MIN_ADULTS,
    Adult,
    GovernanceSettings,
    Household,
    SinkingFund,
)
from household_ledger.domain.periods import (
    Amendment,
    CareEntry,
    Decision,
    Period,
    validate_care_entries,
)
from household_ledger.domain.value_objects import (
    CalculationWarning,
    CareModel,
    ResolutionOption,
    ValidationResult,
    WarningKind,
    cents,
)

__all__ = [
    "MAX_ADULTS",
    "MIN_ADULTS",
    "Adult",
    "Amendment",
    "CalculationWarning",
    "CareEntry",
    "CareModel",
    "Decision",
    "GovernanceSettings",
    "Household",
    "Period",
    "ResolutionOption",
    "SinkingFund",
    "ValidationResult",
    "WarningKind",
    "cents",
    "validate_care_entries",
]
