from household_ledger.domain.households import (
    Adult,
    GovernanceSettings,
    Household,
    SinkingFund,
)
from household_ledger.domain.periods import Amendment, CareEntry, Decision, Period
from household_ledger.domain.value_objects import (
    CalculationWarning,
    CareModel,
    ValidationResult,
    WarningKind,
)

__all__ = [
    "Adult",
    "Amendment",
    "CalculationWarning",
    "CareEntry",
    "CareModel",
    "Decision",
    "GovernanceSettings",
    "Household",
    "Period",
    "SinkingFund",
    "ValidationResult",
    "WarningKind",
]

__version__ = "0.1.0"
