"""
DSARPilot Reconciliation Driver

Periodic job that recomputes days remaining and risk for every deadline of
a tenant, persists changes and raises escalations.

Per case:
    1. Paused deadlines keep their frozen days_remaining; others recompute
    2. Classify risk from the deadline, its milestones and the case status
    3. If the level changed into YELLOW/RED, record an escalation and
       notify recipients (idempotent on case, pre-save revision and level)
    4. If the level or the day count changed, save with compare-and-swap

A failure for one case is logged and recorded; the batch continues. A
failed notification leaves the stored level as it was, so the next run
escalates again.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional

from ..calendars import HolidaySource
from ..exceptions import CaseNotFoundError, ConcurrentUpdateError, DSARPilotError
from ..models import DEFAULT_SLA_CONFIG, Case, CaseDeadline, SlaConfig
from ..store.protocols import (
    CaseRepository,
    DeadlineRepository,
    EscalationStore,
    NotificationDispatcher,
    UserDirectory,
)
from .deadline_calculator import DeadlineCalculator
from .escalation_coordinator import EscalationCoordinator
from .risk_classifier import RiskClassifier, RiskInput, RiskResult


logger = logging.getLogger(__name__)


@dataclass
class CaseOutcome:
    """What happened to one case during a run."""
    case_id: str
    updated: bool = False
    escalated: bool = False
    duplicate: bool = False
    conflict: bool = False
    error: Optional[str] = None


@dataclass
class ReconciliationSummary:
    """Counters for one reconciliation run."""
    tenant_id: str
    total: int = 0
    updated: int = 0
    escalated: int = 0
    duplicates: int = 0
    conflicts: int = 0
    failed: int = 0
    errors: dict[str, str] = field(default_factory=dict)

    def record(self, outcome: CaseOutcome) -> None:
        self.total += 1
        self.updated += int(outcome.updated)
        self.escalated += int(outcome.escalated)
        self.duplicates += int(outcome.duplicate)
        self.conflicts += int(outcome.conflict)
        if outcome.error is not None:
            self.failed += 1
            self.errors[outcome.case_id] = outcome.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "total": self.total,
            "updated": self.updated,
            "escalated": self.escalated,
            "duplicates": self.duplicates,
            "conflicts": self.conflicts,
            "failed": self.failed,
            "errors": dict(self.errors),
        }


@dataclass
class ReconciliationDriver:
    """
    Recomputes risk for all deadlines of a tenant.

    Usage:
        driver = ReconciliationDriver.for_store(store, config=tenant_config)
        summary = driver.run("tenant-1")
        print(summary.updated, summary.escalated)
    """

    deadlines: DeadlineRepository
    cases: CaseRepository
    escalations: EscalationStore
    users: UserDirectory
    notifier: NotificationDispatcher
    config: SlaConfig = field(default_factory=lambda: DEFAULT_SLA_CONFIG)
    calculator: DeadlineCalculator = field(default_factory=DeadlineCalculator)
    classifier: RiskClassifier = field(default_factory=RiskClassifier)
    coordinator: EscalationCoordinator = field(default_factory=EscalationCoordinator)

    @classmethod
    def for_store(
        cls,
        store: Any,
        config: SlaConfig = DEFAULT_SLA_CONFIG,
        holidays: HolidaySource = None,
    ) -> ReconciliationDriver:
        """Driver whose collaborators are all the same store object."""
        return cls(
            deadlines=store,
            cases=store,
            escalations=store,
            users=store,
            notifier=store,
            config=config,
            calculator=DeadlineCalculator.for_config(config, holidays),
            classifier=RiskClassifier(config=config.risk_config()),
            coordinator=EscalationCoordinator(config=config),
        )

    def run(self, tenant_id: str, now: Optional[datetime] = None) -> ReconciliationSummary:
        """Reconcile every deadline of the tenant."""
        now = now or datetime.now(timezone.utc)
        started = time.time()
        summary = ReconciliationSummary(tenant_id=tenant_id)

        for deadline in self.deadlines.list_open_deadlines(tenant_id):
            try:
                outcome = self.reconcile_case(deadline, now)
            except DSARPilotError as e:
                logger.warning(
                    "Reconciliation failed for case: %s", e,
                    extra={"tenant_id": tenant_id, "case_id": deadline.case_id},
                )
                outcome = CaseOutcome(case_id=deadline.case_id, error=str(e))
            except Exception as e:
                logger.exception(
                    "Unexpected error reconciling case",
                    extra={"tenant_id": tenant_id, "case_id": deadline.case_id},
                )
                outcome = CaseOutcome(case_id=deadline.case_id, error=f"{type(e).__name__}: {e}")
            summary.record(outcome)

        logger.info(
            "Reconciliation complete: %d total, %d updated, %d escalated, %d failed",
            summary.total, summary.updated, summary.escalated, summary.failed,
            extra={
                "tenant_id": tenant_id,
                "duration_ms": int((time.time() - started) * 1000),
            },
        )
        return summary

    def reconcile_case(self, deadline: CaseDeadline, now: datetime) -> CaseOutcome:
        """
        Reconcile one deadline.

        Raises:
            CaseNotFoundError: the deadline's case does not exist
        """
        case = self.cases.get_case(deadline.case_id)
        if case is None:
            raise CaseNotFoundError(
                message="Case not found for deadline",
                case_id=deadline.case_id,
            )

        outcome = CaseOutcome(case_id=deadline.case_id)
        days_remaining, result = self.assess(case, deadline, now)

        if result.level == deadline.current_risk and days_remaining == deadline.days_remaining:
            return outcome

        # The stored level moves only after every recipient was notified
        plan = self.coordinator.plan(case, deadline, result, is_overdue=days_remaining < 0, now=now)
        if plan is not None:
            dispatched = self.coordinator.dispatch(plan, self.escalations, self.users, self.notifier)
            if dispatched.duplicate:
                outcome.duplicate = True
            else:
                outcome.escalated = True
                logger.info(
                    "Escalation %s raised, %d notification(s)",
                    plan.escalation.severity.value, len(dispatched.notifications),
                    extra={"tenant_id": case.tenant_id, "case_id": case.id},
                )

        changed = replace(
            deadline,
            current_risk=result.level,
            risk_reasons=list(result.reasons),
            days_remaining=days_remaining,
        )
        try:
            self.deadlines.save_deadline(changed, expected_revision=deadline.risk_revision)
        except ConcurrentUpdateError:
            # Another run already wrote this revision
            logger.info(
                "Deadline changed concurrently, skipping",
                extra={"tenant_id": deadline.tenant_id, "case_id": deadline.case_id},
            )
            outcome.conflict = True
            return outcome
        outcome.updated = True
        return outcome

    def assess(self, case: Case, deadline: CaseDeadline, now: datetime) -> tuple[int, RiskResult]:
        """Days remaining and risk for a case as of `now`; nothing is written."""
        if deadline.is_paused:
            days_remaining = deadline.days_remaining
        else:
            days_remaining = self.calculator.calculate_days_remaining(deadline.effective_due_at, now)

        result = self.classifier.compute_risk(RiskInput(
            days_remaining=days_remaining,
            is_overdue=days_remaining < 0,
            is_paused=deadline.is_paused,
            extension_pending=deadline.extension_pending,
            milestones=self.deadlines.list_milestones(deadline.case_id),
            is_closed=case.is_closed,
            now=now,
        ))
        return days_remaining, result
