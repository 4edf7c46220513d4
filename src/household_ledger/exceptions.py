"""Exception hierarchy for the household allocation engine.

All engine exceptions inherit from HouseholdLedgerError so callers can catch
everything the engine raises with one base class. Input problems are normally
reported as collected ``ValidationResult`` lists; the exceptions below cover the
cases where a caller asked for work that cannot proceed.
"""

from typing import Any


class HouseholdLedgerError(Exception):
    """Base exception for all household ledger errors.

    Carries a machine-readable error_code and extra context so the CLI and
    JSON reports can show the failure without parsing the message.
    """

    error_code: str = "HHL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a JSON-ready dictionary for reports and CLI output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(HouseholdLedgerError):
    """Raised when input fails validation.

    ``errors`` always lists every violated constraint, not only the first.
    """

    error_code = "VALIDATION_ERROR"

    def __init__(self, subject: str, errors: list[str]) -> None:
        super().__init__(
            f"{subject} validation failed: {'; '.join(errors)}",
            context={"subject": subject, "errors": list(errors)},
        )
        self.subject = subject
        self.errors = list(errors)


class InvalidRecordError(ValidationError):
    """Raised when a plain record cannot be parsed into a domain object."""

    error_code = "INVALID_RECORD"


class UnsupportedCareModelError(HouseholdLedgerError):
    """Raised when a care ledger is applied with an unknown care model."""

    error_code = "UNSUPPORTED_CARE_MODEL"

    def __init__(self, care_model: str) -> None:
        super().__init__(
            f'careModel must be "credit" or "stipend", found {care_model}',
            context={"care_model": care_model},
        )


# =============================================================================
# Period Errors
# =============================================================================


class PeriodError(HouseholdLedgerError):
    """Base exception for period-related errors."""

    error_code = "PERIOD_ERROR"


class PeriodLockedError(PeriodError):
    """Raised when attempting to modify a locked period."""

    error_code = "PERIOD_LOCKED"

    def __init__(self, label: str, operation: str) -> None:
        super().__init__(
            f"Cannot modify locked period {label}: {operation} rejected",
            context={"period": label, "operation": operation},
        )


# =============================================================================
# Input Errors
# =============================================================================


class InputFileError(HouseholdLedgerError):
    """Raised when an input document cannot be read as a JSON object."""

    error_code = "INPUT_FILE_ERROR"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path}", context={"path": path})
        self.path = path
