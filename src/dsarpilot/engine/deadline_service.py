"""
DSARPilot Deadline Service

Lifecycle operations on a case deadline: initialize at intake, extend,
pause and resume the clock, and record that the data subject was told
about an extension.

Every operation takes the current deadline and returns an updated copy
plus the DeadlineEvent describing what happened. Persisting both, and
writing the audit log entry, is the caller's job.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from ..calendars import HolidaySource
from ..exceptions import DeadlineStateError
from ..models import (
    DEFAULT_SLA_CONFIG,
    Case,
    CaseDeadline,
    DeadlineEvent,
    DeadlineEventType,
    Milestone,
    SlaConfig,
)
from .deadline_calculator import DeadlineCalculator, add_calendar_days, validate_extension
from .risk_classifier import RiskClassifier, RiskInput


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DeadlineService:
    """
    Applies deadline lifecycle operations for one tenant.

    Usage:
        service = DeadlineService.for_config(tenant_config, holidays)

        deadline, milestones, event = service.initialize(case)
        deadline, event = service.extend(deadline, 30, "Complex request", actor_user_id=user.id)
        deadline, event = service.pause(deadline, "Awaiting ID documents")
        deadline, event = service.resume(deadline)
    """

    config: SlaConfig = field(default_factory=lambda: DEFAULT_SLA_CONFIG)
    calculator: DeadlineCalculator = field(default_factory=DeadlineCalculator)
    classifier: RiskClassifier = field(default_factory=RiskClassifier)

    @classmethod
    def for_config(cls, config: SlaConfig, holidays: HolidaySource = None) -> DeadlineService:
        return cls(
            config=config,
            calculator=DeadlineCalculator.for_config(config, holidays),
            classifier=RiskClassifier(config=config.risk_config()),
        )

    # -------------------------------------------------------------------------
    # Initialize
    # -------------------------------------------------------------------------

    def initialize(
        self,
        case: Case,
        now: Optional[datetime] = None,
        actor_user_id: Optional[str] = None,
    ) -> tuple[CaseDeadline, list[Milestone], DeadlineEvent]:
        """
        Create the deadline and milestones for a newly received case.

        Milestones are plain calendar offsets from receipt, regardless of
        the tenant's counting mode.
        """
        now = now or _utcnow()
        received_at = case.received_at
        legal_due_at = self.calculator.calculate_legal_due_date(received_at, self.config)
        days_remaining = self.calculator.calculate_days_remaining(legal_due_at, now)

        milestones = [
            Milestone(
                case_id=case.id,
                type=milestone_type,
                planned_due_at=add_calendar_days(received_at, offset),
            )
            for milestone_type, offset in self.config.milestone_offsets().items()
        ]

        result = self.classifier.compute_risk(RiskInput(
            days_remaining=days_remaining,
            is_overdue=days_remaining < 0,
            milestones=milestones,
            is_closed=case.is_closed,
            now=now,
        ))

        deadline = CaseDeadline(
            case_id=case.id,
            tenant_id=case.tenant_id,
            received_at=received_at,
            legal_due_at=legal_due_at,
            effective_due_at=legal_due_at,
            current_risk=result.level,
            risk_reasons=list(result.reasons),
            days_remaining=days_remaining,
        )

        event = DeadlineEvent(
            case_id=case.id,
            event_type=DeadlineEventType.CREATED,
            description=f"Deadline initialized: due {legal_due_at.date().isoformat()}",
            metadata={
                "legal_due_at": legal_due_at.isoformat(),
                "days_remaining": days_remaining,
            },
            actor_user_id=actor_user_id,
            created_at=now,
        )
        return deadline, milestones, event

    # -------------------------------------------------------------------------
    # Extend
    # -------------------------------------------------------------------------

    def extend(
        self,
        deadline: CaseDeadline,
        extension_days: int,
        reason: str,
        notification_required: bool = True,
        now: Optional[datetime] = None,
        actor_user_id: Optional[str] = None,
    ) -> tuple[CaseDeadline, DeadlineEvent]:
        """
        Grant additional days.

        The effective date is recomputed from legal_due_at with the new
        cumulative extension and the paused days so far.

        Raises:
            InvalidExtensionError: non-positive request or cap exceeded
        """
        validation = validate_extension(
            extension_days,
            deadline.extension_days,
            self.config.extension_max_days,
        )
        validation.raise_for_invalid(case_id=deadline.case_id)

        now = now or _utcnow()
        total_extension = validation.total_after
        effective = self._effective_due(deadline.legal_due_at, total_extension, deadline.total_paused_days)

        updated = replace(
            deadline,
            effective_due_at=effective,
            extension_days=total_extension,
            extension_reason=reason,
            extension_applied_at=now,
            extension_notification_required=notification_required,
            days_remaining=self.calculator.calculate_days_remaining(effective, now),
        )

        event = DeadlineEvent(
            case_id=deadline.case_id,
            event_type=DeadlineEventType.EXTENDED,
            description=(
                f"Extension of {extension_days} days applied "
                f"(total: {total_extension}). Reason: {reason}"
            ),
            metadata={
                "extension_days": extension_days,
                "total_extension": total_extension,
                "reason": reason,
            },
            actor_user_id=actor_user_id,
            created_at=now,
        )
        return updated, event

    # -------------------------------------------------------------------------
    # Pause / Resume
    # -------------------------------------------------------------------------

    def pause(
        self,
        deadline: CaseDeadline,
        reason: str,
        approved_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[CaseDeadline, DeadlineEvent]:
        """
        Stop the clock. days_remaining stays frozen until resume.

        Raises:
            DeadlineStateError: clock is already paused
        """
        if deadline.is_paused:
            raise DeadlineStateError(
                message="Clock is already paused",
                case_id=deadline.case_id,
            )

        now = now or _utcnow()
        updated = replace(
            deadline,
            paused_at=now,
            pause_reason=reason,
            pause_approved_by=approved_by,
        )
        event = DeadlineEvent(
            case_id=deadline.case_id,
            event_type=DeadlineEventType.PAUSED,
            description=f"Clock paused. Reason: {reason}",
            metadata={"reason": reason},
            actor_user_id=approved_by,
            created_at=now,
        )
        return updated, event

    def resume(
        self,
        deadline: CaseDeadline,
        now: Optional[datetime] = None,
        actor_user_id: Optional[str] = None,
    ) -> tuple[CaseDeadline, DeadlineEvent]:
        """
        Restart the clock and push the effective date out by the paused days.

        Raises:
            DeadlineStateError: clock is not paused
        """
        if deadline.paused_at is None:
            raise DeadlineStateError(
                message="Clock is not paused",
                case_id=deadline.case_id,
            )

        now = now or _utcnow()
        paused_days = self.calculator.calculate_paused_days(deadline.paused_at, now=now)
        total_paused = deadline.total_paused_days + paused_days
        effective = self._effective_due(deadline.legal_due_at, deadline.extension_days, total_paused)

        updated = replace(
            deadline,
            paused_at=None,
            pause_reason=None,
            pause_approved_by=None,
            total_paused_days=total_paused,
            effective_due_at=effective,
            days_remaining=self.calculator.calculate_days_remaining(effective, now),
        )
        event = DeadlineEvent(
            case_id=deadline.case_id,
            event_type=DeadlineEventType.RESUMED,
            description=(
                f"Clock resumed after {paused_days} day(s) pause. "
                f"Due date shifted to {effective.date().isoformat()}"
            ),
            metadata={
                "paused_days": paused_days,
                "total_paused": total_paused,
                "new_effective": effective.isoformat(),
            },
            actor_user_id=actor_user_id,
            created_at=now,
        )
        return updated, event

    # -------------------------------------------------------------------------
    # Extension notice
    # -------------------------------------------------------------------------

    def mark_extension_notified(
        self,
        deadline: CaseDeadline,
        sent_at: Optional[datetime] = None,
        actor_user_id: Optional[str] = None,
    ) -> tuple[CaseDeadline, DeadlineEvent]:
        """Record that the data subject was informed of the extension."""
        sent_at = sent_at or _utcnow()
        updated = replace(deadline, extension_notification_sent_at=sent_at)
        event = DeadlineEvent(
            case_id=deadline.case_id,
            event_type=DeadlineEventType.EXTENSION_NOTIFIED,
            description="Extension notification sent to data subject",
            metadata={"sent_at": sent_at.isoformat()},
            actor_user_id=actor_user_id,
            created_at=sent_at,
        )
        return updated, event

    def _effective_due(self, legal_due_at: datetime, extension_days: int, paused_days: int) -> datetime:
        return self.calculator.compute_effective_due_date(
            legal_due_at,
            extension_days=extension_days,
            total_paused_days=paused_days,
            use_business_days=self.config.use_business_days,
        )
