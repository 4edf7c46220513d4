"""Command-line interface for Household Ledger."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from household_ledger import __version__
from household_ledger.config import LogLevel, get_settings
from household_ledger.domain.households import Household
from household_ledger.domain.periods import Period
from household_ledger.engine import (
    apply_care_ledger,
    calculate_unit_method,
    plan_vision_and_buffers,
    require_valid_household,
    require_valid_period,
    run_period,
    validate_household,
    validate_period,
)
from household_ledger.exceptions import (
    HouseholdLedgerError,
    InputFileError,
    ValidationError,
)
from household_ledger.logging_config import configure_logging
from household_ledger.schemas import household_from_record, period_from_record
from household_ledger.services.reporting import (
    care_ledger_summary,
    council_agenda,
    export_care_ledger_csv,
    export_shares_csv,
    unit_method_summary,
    vision_plan_summary,
)


def read_json_file(path: str) -> dict[str, Any]:
    """Read a JSON object from disk."""
    file_path = Path(path)
    if not file_path.exists():
        raise InputFileError(path, "File not found")
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InputFileError(path, f"Invalid JSON ({e.msg} at line {e.lineno})") from e
    if not isinstance(data, dict):
        raise InputFileError(path, "Expected a JSON object")
    return data


def load_household(path: str) -> Household:
    return household_from_record(read_json_file(path))


def load_period(path: str) -> Period:
    return period_from_record(read_json_file(path))


def _load_checked(args: argparse.Namespace) -> tuple[Household, Period]:
    household = load_household(args.household)
    period = load_period(args.period)
    require_valid_household(household)
    require_valid_period(period, household)
    return household, period


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _print_validation(subject: str, errors: tuple[str, ...] | list[str]) -> None:
    print(f"{subject} is invalid:")
    for error in errors:
        print(f"  - {error}")


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a household file and, optionally, a period file against it."""
    household = load_household(args.household)
    exit_code = 0

    result = validate_household(household)
    if result.is_valid:
        print(f"Household {household.name} is valid")
    else:
        _print_validation(f"Household {household.name}", result.errors)
        exit_code = 1

    if args.period:
        period = load_period(args.period)
        period_result = validate_period(period, household)
        if period_result.is_valid:
            print(f"Period {period.label} is valid")
        else:
            _print_validation(f"Period {period.label}", period_result.errors)
            exit_code = 1

    return exit_code


def cmd_calculate(args: argparse.Namespace) -> int:
    """Apportion the period's core total across the household's adults."""
    household, period = _load_checked(args)
    result = calculate_unit_method(household, period)

    if args.json:
        _print_json(result.to_dict())
    else:
        print(unit_method_summary(result, household.currency))
        if args.audit:
            print()
            print("Audit trail:")
            for line in result.audit_trail:
                print(f"  {line}")
    return 0


def cmd_care(args: argparse.Namespace) -> int:
    """Value the period's care entries and preview next period's shares."""
    household, period = _load_checked(args)
    unit_result = calculate_unit_method(household, period)
    result = apply_care_ledger(household, period, unit_result)

    if args.json:
        _print_json(result.to_dict())
    else:
        print(care_ledger_summary(result, household.currency))
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Plan emergency fund, vision allocation and sinking fund transfers."""
    household = load_household(args.household)
    require_valid_household(household)
    plan = plan_vision_and_buffers(household)

    if args.json:
        _print_json(plan.to_dict())
    else:
        print(vision_plan_summary(plan, household.currency))
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Run every calculator for the period and print the combined report."""
    household = load_household(args.household)
    period = load_period(args.period)
    run = run_period(household, period)

    if args.format == "json":
        output = json.dumps(run.to_report(), indent=2)
    else:
        currency = household.currency
        output = "\n\n".join(
            [
                unit_method_summary(run.unit_method, currency),
                care_ledger_summary(run.care_ledger, currency),
                vision_plan_summary(run.vision, currency),
                council_agenda(
                    household, period, run.unit_method, run.care_ledger, run.vision
                ),
            ]
        )

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"Report written to {args.output}")
    else:
        print(output)
    return 0


def cmd_export_shares(args: argparse.Namespace) -> int:
    """Write the per-adult share breakdown to CSV."""
    household, period = _load_checked(args)
    result = calculate_unit_method(household, period)
    path = export_shares_csv(result, args.output)
    print(f"Exported {len(result.adults)} shares to {path}")
    return 0


def cmd_export_care(args: argparse.Namespace) -> int:
    """Write the period's valued care entries to CSV."""
    household, period = _load_checked(args)
    path = export_care_ledger_csv(household, period, args.output)
    print(f"Exported {len(period.care_entries)} care entries to {path}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"{get_settings().app_name} v{__version__}")
    return 0


def _add_inputs(parser: argparse.ArgumentParser, period: bool = True) -> None:
    parser.add_argument("household", help="Household JSON file")
    if period:
        parser.add_argument("period", help="Period JSON file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hhl",
        description="Household Ledger - shared budget apportionment for multi-adult households",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        type=str.upper,
        default=None,
        help="Override the configured log level (logs go to stderr)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate household and period files"
    )
    validate_parser.add_argument("household", help="Household JSON file")
    validate_parser.add_argument(
        "--period", "-p", default=None, help="Period JSON file to validate as well"
    )
    validate_parser.set_defaults(func=cmd_validate)

    # calculate command
    calculate_parser = subparsers.add_parser(
        "calculate", help="Run the unit method for a period"
    )
    _add_inputs(calculate_parser)
    calculate_parser.add_argument("--json", action="store_true", help="Output JSON")
    calculate_parser.add_argument(
        "--audit", action="store_true", help="Print the audit trail"
    )
    calculate_parser.set_defaults(func=cmd_calculate)

    # care command
    care_parser = subparsers.add_parser("care", help="Apply the care ledger for a period")
    _add_inputs(care_parser)
    care_parser.add_argument("--json", action="store_true", help="Output JSON")
    care_parser.set_defaults(func=cmd_care)

    # plan command
    plan_parser = subparsers.add_parser(
        "plan", help="Plan vision allocation and sinking funds"
    )
    _add_inputs(plan_parser, period=False)
    plan_parser.add_argument("--json", action="store_true", help="Output JSON")
    plan_parser.set_defaults(func=cmd_plan)

    # report command
    report_parser = subparsers.add_parser(
        "report", help="Full period report with council agenda"
    )
    _add_inputs(report_parser)
    report_parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    report_parser.add_argument(
        "--output", "-o", default=None, help="Write the report to a file"
    )
    report_parser.set_defaults(func=cmd_report)

    # export-shares command
    shares_parser = subparsers.add_parser(
        "export-shares", help="Export per-adult shares to CSV"
    )
    _add_inputs(shares_parser)
    shares_parser.add_argument("output", help="CSV file to write")
    shares_parser.set_defaults(func=cmd_export_shares)

    # export-care command
    care_export_parser = subparsers.add_parser(
        "export-care", help="Export valued care entries to CSV"
    )
    _add_inputs(care_export_parser)
    care_export_parser.add_argument("output", help="CSV file to write")
    care_export_parser.set_defaults(func=cmd_export_care)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(level=args.log_level)

    try:
        result: int = args.func(args)
    except ValidationError as e:
        _print_validation(e.subject, e.errors)
        return 1
    except HouseholdLedgerError as e:
        print(f"Error: {e.message}")
        return 1
    except OSError as e:
        print(f"Error: {e}")
        return 1
    return result


if __name__ == "__main__":
    sys.exit(main())
