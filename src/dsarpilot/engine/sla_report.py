"""
DSARPilot SLA Report

Tenant-wide SLA compliance summary and per-case export rows.
"""
from __future__ import annotations

import csv
import io
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from ..models import Case, CaseDeadline, CaseStatus, RiskLevel
from .deadline_calculator import ONE_DAY


@dataclass
class SlaReportRow:
    """One exported case line."""
    case_number: str
    status: str
    received_at: str
    effective_due_at: str
    extension_used: str
    extension_days: int
    paused_duration_days: int
    current_risk: str
    days_remaining: Any
    assigned_to: str


@dataclass
class SlaSummary:
    """Dashboard counters over open cases."""
    total_open: int = 0
    overdue: int = 0
    due_in_7: int = 0
    due_in_14: int = 0
    due_in_30: int = 0
    avg_days_to_close: int = 0
    extension_rate: int = 0
    risk_distribution: dict[str, int] = field(
        default_factory=lambda: {"green": 0, "yellow": 0, "red": 0}
    )


@dataclass
class SlaReport:
    summary: SlaSummary
    rows: list[SlaReportRow]

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": asdict(self.summary),
            "cases": [asdict(r) for r in self.rows],
        }


def _date_str(moment: Optional[datetime]) -> str:
    return moment.date().isoformat() if moment else ""


def build_sla_report(
    cases: Iterable[Case],
    deadlines: Mapping[str, CaseDeadline],
    now: Optional[datetime] = None,
) -> SlaReport:
    """
    Build the SLA report for a tenant.

    Args:
        cases: All cases of the tenant
        deadlines: Deadlines keyed by case id (cases may have none yet)
        now: Reference time for the due-window counters

    Due windows are inclusive and only count cases not yet overdue. A case
    without a deadline counts as GREEN and is left out of due windows. The
    close-time average covers CLOSED cases with a known `closed_at`.
    """
    now = now or datetime.now(timezone.utc)
    cases = list(cases)
    summary = SlaSummary()
    rows: list[SlaReportRow] = []
    with_extension = 0
    close_days: list[float] = []

    for case in cases:
        if case.status == CaseStatus.CLOSED and case.closed_at is not None:
            close_days.append((case.closed_at - case.received_at) / ONE_DAY)

        deadline = deadlines.get(case.id)
        if deadline is not None and deadline.extension_days > 0:
            with_extension += 1

        rows.append(SlaReportRow(
            case_number=case.case_number,
            status=case.status.value,
            received_at=_date_str(case.received_at),
            effective_due_at=_date_str(deadline.effective_due_at if deadline else None),
            extension_used="Yes" if deadline and deadline.extension_days else "No",
            extension_days=deadline.extension_days if deadline else 0,
            paused_duration_days=deadline.total_paused_days if deadline else 0,
            current_risk=deadline.current_risk.value if deadline else "N/A",
            days_remaining=deadline.days_remaining if deadline else "N/A",
            assigned_to=case.assigned_to_user_id or "Unassigned",
        ))

        if case.is_closed:
            continue

        summary.total_open += 1
        risk = deadline.current_risk if deadline else RiskLevel.GREEN
        summary.risk_distribution[risk.value.lower()] += 1

        if deadline is None:
            continue

        diff_days = (deadline.effective_due_at - now) / ONE_DAY
        if diff_days < 0:
            summary.overdue += 1
            continue
        summary.due_in_7 += int(diff_days <= 7)
        summary.due_in_14 += int(diff_days <= 14)
        summary.due_in_30 += int(diff_days <= 30)

    if cases:
        summary.extension_rate = round(with_extension / len(cases) * 100)
    if close_days:
        summary.avg_days_to_close = round(sum(close_days) / len(close_days))

    return SlaReport(summary=summary, rows=rows)


def rows_to_csv(rows: Iterable[SlaReportRow]) -> str:
    """Render report rows as CSV with a header line; empty string for no rows."""
    rows = list(rows)
    if not rows:
        return ""

    buffer = io.StringIO()
    fieldnames = list(asdict(rows[0]).keys())
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow(asdict(row))
    return buffer.getvalue()
