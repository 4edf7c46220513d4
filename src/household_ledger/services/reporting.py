"""Reporting and exports for a calculated period."""

from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path
from typing import Any

from household_ledger.domain.households import Household
from household_ledger.domain.periods import Period
from household_ledger.domain.value_objects import CareModel, as_number, cents
from household_ledger.logging_config import get_logger
from household_ledger.services.care_ledger import CareLedgerResult
from household_ledger.services.unit_method import UnitMethodResult
from household_ledger.services.vision_buffers import VisionPlan

logger = get_logger(__name__)

CARE_LEDGER_COLUMNS = ["Date", "Member", "Task", "Hours", "Rate", "Value"]
SHARES_COLUMNS = [
    "Member",
    "Units",
    "Net Income",
    "Prelim Share",
    "Cap",
    "Override",
    "Final Share",
    "Capped",
]


def _money(amount: Decimal, currency: str) -> str:
    return f"{cents(amount):.2f} {currency}"


def unit_method_summary(result: UnitMethodResult, currency: str = "USD") -> str:
    lines = [
        f"Unit method for {result.period_label}",
        f"  Core total: {_money(result.core_total, currency)}",
        f"  Total units: {result.total_units}",
        f"  Unit cost: {_money(result.unit_cost, currency)}",
        "",
    ]
    for share in result.adults:
        flags = []
        if share.capped:
            flags.append("capped")
        if share.is_overridden:
            flags.append("override")
        suffix = f" ({', '.join(flags)})" if flags else ""
        lines.append(
            f"  {share.adult_name}: {_money(share.final_share, currency)}"
            f" [prelim {share.prelim_share:.2f}, cap {share.cap_amount:.2f}]{suffix}"
        )
    lines.append("")
    lines.append(f"  Sum of shares: {_money(result.totals.sum_final, currency)}")
    lines.append(f"  Difference from core: {_money(result.totals.diff_from_core, currency)}")
    for warning in result.warnings:
        lines.append(f"  WARNING: {warning.message}")
    return "\n".join(lines)


def care_ledger_summary(result: CareLedgerResult, currency: str = "USD") -> str:
    lines = [
        f"Care ledger for {result.period_label} ({result.care_model.value} model)",
        f"  {result.description}",
    ]
    for item in result.care_values:
        lines.append(
            f"  {item.adult_name}: {item.hours} hours = {_money(item.value, currency)}"
        )
    if result.care_model == CareModel.STIPEND:
        lines.append(
            f"  Next month core increase: {_money(result.next_month_core_increase, currency)}"
        )
    if result.preview is not None:
        lines.append(
            "  Next month core preview: "
            f"{_money(result.preview.estimated_core_total, currency)}"
        )
        for note in result.preview.notes:
            lines.append(f"  - {note}")
    return "\n".join(lines)


def vision_plan_summary(plan: VisionPlan, currency: str = "USD") -> str:
    lines = [
        "Vision and buffers",
        f"  Estimated monthly core: {_money(plan.estimated_monthly_core, currency)}",
        f"  Emergency target: {_money(plan.emergency_target, currency)}",
        f"  Monthly vision allocation: {_money(plan.monthly_vision_allocation, currency)}",
    ]
    if plan.sinking_funds:
        lines.append("  Sinking funds (by priority):")
    for fund in plan.sinking_funds:
        months = "n/a" if fund.months_to_target is None else str(fund.months_to_target)
        lines.append(
            f"    {fund.name}: {_money(fund.monthly_transfer, currency)}/month "
            f"into {fund.account}, {months} months to target"
        )
    for note in plan.notes:
        lines.append(f"  {note.level.upper()}: {note.message}")
    for rec in plan.recommendations:
        lines.append(f"  [{rec.priority}] {rec.message}")
    return "\n".join(lines)


def export_care_ledger_csv(
    household: Household, period: Period, output_path: str | Path
) -> str:
    """Write the period's care entries with their valuation to CSV."""
    rate = household.care_rate_per_hour
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CARE_LEDGER_COLUMNS)
        writer.writeheader()
        for entry in period.care_entries:
            writer.writerow(
                {
                    "Date": entry.date.isoformat() if entry.date else "",
                    "Member": household.adult_name(entry.adult_id),
                    "Task": entry.task,
                    "Hours": str(entry.hours),
                    "Rate": f"{cents(rate):.2f}",
                    "Value": f"{cents(entry.hours * rate):.2f}",
                }
            )
    logger.info(
        "care_ledger_exported",
        period=period.label,
        entries=len(period.care_entries),
        path=str(output_path),
    )
    return str(output_path)


def export_shares_csv(result: UnitMethodResult, output_path: str | Path) -> str:
    """Write the per-adult share breakdown to CSV."""
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=SHARES_COLUMNS)
        writer.writeheader()
        for share in result.adults:
            writer.writerow(
                {
                    "Member": share.adult_name,
                    "Units": str(share.total_units),
                    "Net Income": f"{share.net_income:.2f}",
                    "Prelim Share": f"{share.prelim_share:.2f}",
                    "Cap": f"{share.cap_amount:.2f}",
                    "Override": "" if share.override is None else f"{share.override:.2f}",
                    "Final Share": f"{share.final_share:.2f}",
                    "Capped": "yes" if share.capped else "no",
                }
            )
    logger.info(
        "shares_exported",
        period=result.period_label,
        adults=len(result.adults),
        path=str(output_path),
    )
    return str(output_path)


def council_agenda(
    household: Household,
    period: Period,
    unit_result: UnitMethodResult,
    care_result: CareLedgerResult,
    vision_result: VisionPlan,
) -> str:
    """Render the monthly household council agenda as Markdown."""
    currency = household.currency
    lines = [
        f"# Household Council Agenda - {period.label}",
        "",
        "**Duration:** 60 minutes",
        "**Date:** [To be scheduled]",
        "",
        "## 1. Quick Wins (5 min)",
        "- Review completed tasks and achievements",
        "- Celebrate financial milestones",
        "",
        "## 2. Core Account Health (10 min)",
        f"- Core total: {_money(period.core_total, currency)}",
        f"- Total shares: {_money(unit_result.totals.sum_final, currency)}",
        f"- Balance: {_money(unit_result.totals.diff_from_core, currency)}",
    ]
    for warning in unit_result.warnings:
        lines.append(f"- Attention: {warning.message}")

    lines += ["", "## 3. Care Ledger Adjustments (10 min)"]
    lines.append(f"- Model: {care_result.care_model.value}")
    if care_result.care_model == CareModel.CREDIT:
        lines.append("- Credits applied to next month's core shares")
    else:
        lines.append(
            f"- Stipend payments: {_money(care_result.next_month_core_increase, currency)}"
        )
    if care_result.preview is not None:
        lines.append(
            "- Next month core preview: "
            f"{_money(care_result.preview.estimated_core_total, currency)}"
        )

    lines += [
        "",
        "## 4. Upcoming Expenses (10 min)",
        "- Review planned purchases and their thresholds",
        "- Discuss any large purchase requests",
        "- Plan for seasonal expenses",
        "",
        "## 5. Vision Progress (10 min)",
        f"- Emergency fund target: {_money(vision_result.emergency_target, currency)}",
        "- Monthly vision allocation: "
        f"{_money(vision_result.monthly_vision_allocation, currency)}",
        "- Sinking fund priorities and progress",
        "",
        "## 6. Open Floor (10 min)",
        "- New business and concerns",
        "- Process improvements and feedback",
        "- Upcoming decisions and votes",
        "",
        "## 7. Decision List (5 min)",
        "- Review pending decisions",
    ]
    for decision in period.decisions:
        when = f" ({decision.date.isoformat()})" if decision.date else ""
        lines.append(f"  - {decision.title}{when}")
    lines += [
        "- Schedule votes for next meeting",
        "- Assign action items and responsibilities",
        "",
        "---",
        f"*Generated for {household.name}*",
        "",
    ]
    return "\n".join(lines)


def build_period_report(
    household: Household,
    period: Period,
    unit_result: UnitMethodResult,
    care_result: CareLedgerResult,
    vision_result: VisionPlan,
) -> dict[str, Any]:
    """Aggregate the three calculation results into one JSON-compatible dict."""
    return {
        "household": household.name,
        "currency": household.currency,
        "periodLabel": period.label,
        "isLocked": period.is_locked,
        "coreTotal": as_number(period.core_total),
        "unitMethod": unit_result.to_dict(),
        "careLedger": care_result.to_dict(),
        "visionAndBuffers": vision_result.to_dict(),
        "councilAgendaMd": council_agenda(
            household, period, unit_result, care_result, vision_result
        ),
        "nextSteps": [
            "Review calculations and adjust if needed",
            "Lock period to prevent further changes",
            "Generate exports and schedule council meeting",
        ],
    }


__all__ = [
    "build_period_report",
    "care_ledger_summary",
    "council_agenda",
    "export_care_ledger_csv",
    "export_shares_csv",
    "unit_method_summary",
    "vision_plan_summary",
]
