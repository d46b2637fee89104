"""
DSARPilot Engine

Core services for the DSAR case lifecycle and deadline SLA engine.

Services:
- CaseStateMachine: Validate case status transitions
- DeadlineCalculator: Legal/effective due dates, days remaining, extensions
- RiskClassifier: GREEN/YELLOW/RED deadline risk with reasons
- EscalationCoordinator: Escalations and recipient notifications
- DeadlineService: Initialize, extend, pause and resume deadlines
- ReconciliationDriver: Periodic risk recompute for a tenant
- build_sla_report: SLA compliance summary and CSV export

Usage:
    from dsarpilot.engine import (
        CaseStateMachine,
        DeadlineCalculator,
        RiskClassifier,
        EscalationCoordinator,
    )
"""
from __future__ import annotations

from .state_machine import (
    DEFAULT_STATE_MACHINE,
    STATUS_LABELS,
    TRANSITIONS,
    CaseStateMachine,
    get_allowed_transitions,
    is_valid_transition,
)
from .deadline_calculator import (
    DeadlineCalculator,
    ExtensionValidation,
    add_business_days,
    add_calendar_days,
    calculate_days_remaining,
    calculate_legal_due_date,
    calculate_paused_days,
    compute_effective_due_date,
    count_business_days,
    is_business_day,
    is_holiday,
    is_weekend,
    validate_extension,
)
from .risk_classifier import (
    DEFAULT_RULES,
    RiskClassifier,
    RiskFinding,
    RiskInput,
    RiskResult,
    compute_risk,
)
from .escalation_coordinator import (
    DispatchResult,
    EscalationCoordinator,
    EscalationPlan,
    build_idempotency_key,
    resolve_recipient_roles,
    risk_to_escalation_severity,
    should_escalate,
)
from .deadline_service import DeadlineService
from .reconciliation import (
    CaseOutcome,
    ReconciliationDriver,
    ReconciliationSummary,
)
from .sla_report import (
    SlaReport,
    SlaReportRow,
    SlaSummary,
    build_sla_report,
    rows_to_csv,
)

__all__ = [
    # State machine
    "CaseStateMachine",
    "DEFAULT_STATE_MACHINE",
    "STATUS_LABELS",
    "TRANSITIONS",
    "get_allowed_transitions",
    "is_valid_transition",
    # Deadlines
    "DeadlineCalculator",
    "ExtensionValidation",
    "add_business_days",
    "add_calendar_days",
    "calculate_days_remaining",
    "calculate_legal_due_date",
    "calculate_paused_days",
    "compute_effective_due_date",
    "count_business_days",
    "is_business_day",
    "is_holiday",
    "is_weekend",
    "validate_extension",
    # Risk
    "DEFAULT_RULES",
    "RiskClassifier",
    "RiskFinding",
    "RiskInput",
    "RiskResult",
    "compute_risk",
    # Escalation
    "DispatchResult",
    "EscalationCoordinator",
    "EscalationPlan",
    "build_idempotency_key",
    "resolve_recipient_roles",
    "risk_to_escalation_severity",
    "should_escalate",
    # Lifecycle and jobs
    "CaseOutcome",
    "DeadlineService",
    "ReconciliationDriver",
    "ReconciliationSummary",
    # Reporting
    "SlaReport",
    "SlaReportRow",
    "SlaSummary",
    "build_sla_report",
    "rows_to_csv",
]
