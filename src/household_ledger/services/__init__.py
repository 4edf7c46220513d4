from household_ledger.services.care_ledger import (
    CareLedgerCalculator,
    CareLedgerResult,
    NextPeriodPreview,
)
from household_ledger.services.reporting import (
    build_period_report,
    council_agenda,
    export_care_ledger_csv,
    export_shares_csv,
)
from household_ledger.services.unit_method import (
    AdultShare,
    UnitMethodCalculator,
    UnitMethodResult,
)
from household_ledger.services.vision_buffers import (
    FundPlan,
    FundPriority,
    VisionAndBuffersPlanner,
    VisionPlan,
)

__all__ = [
    "AdultShare",
    "CareLedgerCalculator",
    "CareLedgerResult",
    "FundPlan",
    "FundPriority",
    "NextPeriodPreview",
    "UnitMethodCalculator",
    "UnitMethodResult",
    "VisionAndBuffersPlanner",
    "VisionPlan",
    "build_period_report",
    "council_agenda",
    "export_care_ledger_csv",
    "export_shares_csv",
]
