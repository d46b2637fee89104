"""
DSARPilot Case Models

Records read and written around the case lifecycle and the deadline engine.

Key components:
- Case: the DSAR case itself (only `status` matters to the engine)
- StateTransition: record of a validated status change
- CaseDeadline: legal/effective due dates, extension and pause state, risk
- Milestone: internal sub-deadline used as an early-warning signal
- Escalation: write-once alert produced on a risk-level change
- Notification: per-recipient message emitted alongside an escalation
- DeadlineEvent: audit trail entry for deadline mutations
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from .enums import (
    CaseStatus,
    DeadlineEventType,
    EscalationSeverity,
    MilestoneType,
    NotificationType,
    RiskLevel,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Case
# =============================================================================

@dataclass
class Case:
    """
    A DSAR case.

    Owned by the case-management subsystem. The engine reads `status`
    and never mutates a Case in place.
    """
    id: str
    tenant_id: str
    case_number: str
    status: CaseStatus
    received_at: datetime
    assigned_to_user_id: Optional[str] = None
    # Set when the case enters CLOSED or REJECTED
    closed_at: Optional[datetime] = None

    @property
    def is_closed(self) -> bool:
        """Closed for deadline purposes (CLOSED or REJECTED)."""
        return self.status in (CaseStatus.CLOSED, CaseStatus.REJECTED)


@dataclass(frozen=True)
class StateTransition:
    """A validated status change, ready to be persisted with the case."""
    case_id: str
    from_status: CaseStatus
    to_status: CaseStatus
    changed_by_user_id: str
    reason: str
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "changed_by_user_id": self.changed_by_user_id,
            "reason": self.reason,
            "created_at": self.created_at.isoformat(),
        }


# =============================================================================
# Deadline
# =============================================================================

@dataclass
class CaseDeadline:
    """
    Deadline state of a case.

    `legal_due_at` is fixed at intake. Extensions and pauses only move
    `effective_due_at`.

    Attributes:
        case_id: Associated case
        tenant_id: Owning tenant
        received_at: When the request was received
        legal_due_at: received_at + initial deadline (never changes)
        effective_due_at: legal_due_at shifted by extension and paused days
        extension_days: Cumulative extension granted
        total_paused_days: Sum of completed pause intervals
        paused_at: Start of the current pause, None when running
        current_risk: Last persisted risk level
        risk_reasons: Reasons behind current_risk
        days_remaining: Last persisted days-remaining (frozen while paused)
        risk_revision: Compare-and-swap token, bumped on every risk write
    """
    case_id: str
    tenant_id: str
    received_at: datetime
    legal_due_at: datetime
    effective_due_at: datetime
    extension_days: int = 0
    extension_reason: Optional[str] = None
    extension_applied_at: Optional[datetime] = None
    total_paused_days: int = 0
    paused_at: Optional[datetime] = None
    pause_reason: Optional[str] = None
    pause_approved_by: Optional[str] = None
    current_risk: RiskLevel = RiskLevel.GREEN
    risk_reasons: list[str] = field(default_factory=list)
    days_remaining: int = 0
    extension_notification_required: bool = False
    extension_notification_sent_at: Optional[datetime] = None
    risk_revision: int = 0

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    @property
    def extension_pending(self) -> bool:
        """Extension applied but the data subject has not been told yet."""
        return (
            self.extension_days > 0
            and self.extension_notification_required
            and self.extension_notification_sent_at is None
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "case_id": self.case_id,
            "tenant_id": self.tenant_id,
            "received_at": self.received_at.isoformat(),
            "legal_due_at": self.legal_due_at.isoformat(),
            "effective_due_at": self.effective_due_at.isoformat(),
            "extension_days": self.extension_days,
            "total_paused_days": self.total_paused_days,
            "paused_at": self.paused_at.isoformat() if self.paused_at else None,
            "current_risk": self.current_risk.value,
            "risk_reasons": list(self.risk_reasons),
            "days_remaining": self.days_remaining,
            "extension_pending": self.extension_pending,
        }


@dataclass
class Milestone:
    """An internal sub-deadline within a case."""
    case_id: str
    type: MilestoneType
    planned_due_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    def is_overdue(self, now: datetime) -> bool:
        """Incomplete and past its planned due time."""
        return self.completed_at is None and self.planned_due_at < now


# =============================================================================
# Escalation and Notification
# =============================================================================

@dataclass(frozen=True)
class Escalation:
    """
    Alert generated when a case's risk level changes.

    Append-only; only the EscalationCoordinator creates these.
    """
    tenant_id: str
    case_id: str
    severity: EscalationSeverity
    reason: str
    recipient_roles: tuple[str, ...]
    idempotency_key: str
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "case_id": self.case_id,
            "severity": self.severity.value,
            "reason": self.reason,
            "recipient_roles": list(self.recipient_roles),
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Notification:
    """A message for one recipient; delivery is the dispatcher's job."""
    tenant_id: str
    recipient_user_id: str
    type: NotificationType
    title: str
    message: str
    link_url: str


@dataclass(frozen=True)
class User:
    """Minimal user view needed to resolve escalation recipients."""
    id: str
    tenant_id: str
    role: str
    name: str = ""


# =============================================================================
# Deadline Events
# =============================================================================

@dataclass(frozen=True)
class DeadlineEvent:
    """Audit trail entry describing one deadline mutation."""
    case_id: str
    event_type: DeadlineEventType
    description: str
    metadata: dict[str, Any] = field(default_factory=dict)
    actor_user_id: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
