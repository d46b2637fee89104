"""
DSARPilot Escalation Coordinator

Decides whether a risk-level change warrants an escalation and, if so,
who must be told.

Key features:
- Escalate on any change into a non-GREEN level
- Map risk level + overdue flag to an escalation severity
- Resolve recipient roles from tenant configuration
- Idempotent dispatch keyed on (case, risk revision, level)

Planning is pure. `dispatch` is the only place that writes an escalation
or sends notifications, and it does so through the collaborator
protocols.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..models import (
    DEFAULT_SLA_CONFIG,
    Case,
    CaseDeadline,
    Escalation,
    EscalationSeverity,
    Notification,
    NotificationType,
    RiskLevel,
    SlaConfig,
)
from ..store.protocols import EscalationStore, NotificationDispatcher, UserDirectory
from .risk_classifier import RiskResult


# =============================================================================
# Decision Functions
# =============================================================================

def should_escalate(previous: RiskLevel, current: RiskLevel) -> bool:
    """
    Escalate when the level changed and the new level is not GREEN.

    An improvement such as RED → YELLOW also escalates.
    """
    return current != RiskLevel.GREEN and current != previous


def risk_to_escalation_severity(level: RiskLevel, is_overdue: bool) -> EscalationSeverity:
    """Overdue wins; otherwise RED → RED_ALERT and anything else → YELLOW_WARNING."""
    if is_overdue:
        return EscalationSeverity.OVERDUE_BREACH
    if level == RiskLevel.RED:
        return EscalationSeverity.RED_ALERT
    return EscalationSeverity.YELLOW_WARNING


def resolve_recipient_roles(
    severity: EscalationSeverity,
    config: Optional[SlaConfig] = None,
) -> list[str]:
    """Roles to notify for a severity, from tenant config or the defaults."""
    return (config or DEFAULT_SLA_CONFIG).roles_for(severity)


def build_idempotency_key(case_id: str, risk_revision: int, level: RiskLevel) -> str:
    return f"{case_id}:{risk_revision}:{level.value}"


# =============================================================================
# Plan / Dispatch Results
# =============================================================================

@dataclass(frozen=True)
class EscalationPlan:
    """
    Everything needed to record one escalation and notify its recipients.

    Nothing has been written when a plan exists; see EscalationCoordinator.dispatch.
    """
    escalation: Escalation
    notification_type: NotificationType
    title: str
    message: str
    link_url: str

    @property
    def recipient_roles(self) -> tuple[str, ...]:
        return self.escalation.recipient_roles

    def notification_for(self, user_id: str) -> Notification:
        return Notification(
            tenant_id=self.escalation.tenant_id,
            recipient_user_id=user_id,
            type=self.notification_type,
            title=self.title,
            message=self.message,
            link_url=self.link_url,
        )


@dataclass
class DispatchResult:
    """Outcome of dispatching a plan."""
    escalation: Escalation
    notifications: list[Notification] = field(default_factory=list)
    duplicate: bool = False


# =============================================================================
# Escalation Coordinator
# =============================================================================

@dataclass
class EscalationCoordinator:
    """
    Turns risk changes into escalations and notifications.

    Usage:
        coordinator = EscalationCoordinator(config=tenant_config)

        plan = coordinator.plan(case, deadline, result, is_overdue=days < 0)
        if plan is not None:
            outcome = coordinator.dispatch(plan, store, store, store)
            if outcome.duplicate:
                ...  # another run already escalated this change
    """

    config: SlaConfig = field(default_factory=lambda: DEFAULT_SLA_CONFIG)

    def plan(
        self,
        case: Case,
        deadline: CaseDeadline,
        result: RiskResult,
        is_overdue: bool,
        now: Optional[datetime] = None,
    ) -> Optional[EscalationPlan]:
        """
        Plan the escalation for a freshly computed risk result.

        `deadline` is the stored state the result was computed from: its
        `current_risk` is the previous level and its `risk_revision` feeds
        the idempotency key.

        Returns:
            EscalationPlan, or None when the change does not warrant one
        """
        if not should_escalate(deadline.current_risk, result.level):
            return None

        severity = risk_to_escalation_severity(result.level, is_overdue)
        message = "; ".join(result.reasons)

        escalation = Escalation(
            tenant_id=case.tenant_id,
            case_id=case.id,
            severity=severity,
            reason=message,
            recipient_roles=tuple(resolve_recipient_roles(severity, self.config)),
            idempotency_key=build_idempotency_key(
                case.id, deadline.risk_revision, result.level
            ),
            created_at=now or datetime.now(timezone.utc),
        )

        return EscalationPlan(
            escalation=escalation,
            notification_type=(
                NotificationType.OVERDUE if is_overdue else NotificationType.ESCALATION
            ),
            title=f"{severity.display_name}: {case.case_number}",
            message=message,
            link_url=f"/cases/{case.id}",
        )

    def dispatch(
        self,
        plan: EscalationPlan,
        escalations: EscalationStore,
        users: UserDirectory,
        notifier: NotificationDispatcher,
    ) -> DispatchResult:
        """
        Record the escalation and notify every user holding a recipient role.

        When the idempotency key was already recorded nothing is sent and
        the result is flagged as a duplicate. If sending fails the record is
        released before the error propagates, so the next run retries it.
        """
        escalation = plan.escalation
        if not escalations.record_escalation(escalation):
            return DispatchResult(escalation=escalation, duplicate=True)

        try:
            recipients = users.find_users_by_roles(escalation.tenant_id, escalation.recipient_roles)
            notifications = [plan.notification_for(user.id) for user in recipients]
            for notification in notifications:
                notifier.send(notification)
        except Exception:
            escalations.release_escalation(escalation.idempotency_key)
            raise

        return DispatchResult(escalation=escalation, notifications=notifications)
