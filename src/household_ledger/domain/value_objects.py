from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


class CareModel(str, Enum):
    CREDIT = "credit"
    STIPEND = "stipend"


class WarningKind(str, Enum):
    DEFICIT_AFTER_CAPS = "deficit_after_caps"
    REBALANCE_NOT_CONVERGED = "rebalance_not_converged"
    INSUFFICIENT_VISION_ALLOCATION = "insufficient_vision_allocation"


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a number to Decimal going through str so floats keep their printed value."""
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    result = value if isinstance(value, Decimal) else Decimal(str(value))
    if not result.is_finite():
        raise ValueError(f"Expected a finite number, got {value!r}")
    return result


def cents(value: Decimal | int | float | str) -> Decimal:
    """Round a monetary amount half-up to two decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation pass: every violated constraint, never just the first."""

    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.errors + other.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


@dataclass(frozen=True)
class ResolutionOption:
    id: str
    label: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "description": self.description}


@dataclass(frozen=True)
class CalculationWarning:
    """A valid-but-undesirable outcome attached to a result, never raised."""

    kind: WarningKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    options: tuple[ResolutionOption, ...] = ()
    recommended: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "message": self.message,
            "details": {k: as_number(v) for k, v in self.details.items()},
            "options": [option.to_dict() for option in self.options],
            "recommended": self.recommended,
        }


def as_number(value: Any) -> Any:
    """Render Decimals as JSON numbers; other values pass through."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


__all__ = [
    "CENT",
    "ZERO",
    "CalculationWarning",
    "CareModel",
    "ResolutionOption",
    "ValidationResult",
    "WarningKind",
    "as_number",
    "cents",
    "to_decimal",
]
