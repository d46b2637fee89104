"""
Tests for deadline lifecycle operations.

Tests cover:
- Initialization with milestones and initial risk
- Extensions (validation, effective date, pending notice)
- Pause and resume accounting
- The worked example from intake to RED risk
"""
import pytest

from dsarpilot.calendars import GermanyCalendar
from dsarpilot.engine import DeadlineService, RiskInput, compute_risk
from dsarpilot.exceptions import DeadlineStateError, InvalidExtensionError
from dsarpilot.models import (
    CaseStatus,
    DeadlineEventType,
    MilestoneType,
    RiskLevel,
    SlaConfig,
)

from tests.conftest import make_case, make_deadline, utc


# =============================================================================
# Initialize Tests
# =============================================================================

class TestInitialize:
    """Tests for deadline initialization."""

    def test_calendar_mode_deadline(self):
        """Test a 30-day deadline from 2026-01-01."""
        service = DeadlineService()
        deadline, _, event = service.initialize(make_case(), now=utc(2026, 1, 2), actor_user_id="u1")

        assert deadline.legal_due_at == utc(2026, 1, 31)
        assert deadline.effective_due_at == utc(2026, 1, 31)
        assert deadline.days_remaining == 29
        assert deadline.current_risk == RiskLevel.GREEN
        assert deadline.risk_reasons == ["On track"]
        assert deadline.extension_days == 0
        assert deadline.risk_revision == 0

        assert event.event_type == DeadlineEventType.CREATED
        assert event.description == "Deadline initialized: due 2026-01-31"
        assert event.actor_user_id == "u1"

    def test_milestones_are_calendar_offsets(self):
        """Test milestones ignore business-day mode."""
        service = DeadlineService(config=SlaConfig(use_business_days=True))
        _, milestones, _ = service.initialize(make_case(), now=utc(2026, 1, 2))

        assert [(m.type, m.planned_due_at) for m in milestones] == [
            (MilestoneType.IDV, utc(2026, 1, 8)),
            (MilestoneType.COLLECTION, utc(2026, 1, 15)),
            (MilestoneType.DRAFT, utc(2026, 1, 22)),
            (MilestoneType.LEGAL, utc(2026, 1, 26)),
        ]
        assert all(m.case_id == "case-1" and m.completed_at is None for m in milestones)

    def test_business_mode_with_tenant_calendar(self):
        """Test business-day deadline in the tenant's zone."""
        config = SlaConfig(use_business_days=True, timezone="Europe/Berlin")
        service = DeadlineService.for_config(config, GermanyCalendar())
        case = make_case(received_at=utc(2026, 1, 5, 9))

        deadline, _, _ = service.initialize(case, now=utc(2026, 1, 5, 9))

        assert deadline.legal_due_at == utc(2026, 2, 16, 9)

    def test_late_intake_picks_up_overdue_milestones(self):
        """Test a case initialized late already carries milestone risk."""
        service = DeadlineService()
        deadline, _, _ = service.initialize(make_case(), now=utc(2026, 1, 10))

        assert deadline.current_risk == RiskLevel.YELLOW
        assert deadline.risk_reasons == ["Milestone overdue: IDV"]

    def test_closed_case_initializes_green(self):
        service = DeadlineService()
        deadline, _, _ = service.initialize(make_case(status=CaseStatus.REJECTED), now=utc(2026, 3, 1))
        assert deadline.current_risk == RiskLevel.GREEN
        assert deadline.days_remaining < 0


# =============================================================================
# Extension Tests
# =============================================================================

class TestExtend:
    """Tests for extensions."""

    def test_worked_example(self):
        """Test intake, 15-day extension and RED risk five days before the new date."""
        service = DeadlineService()
        deadline, _, _ = service.initialize(make_case(), now=utc(2026, 1, 1))
        assert deadline.legal_due_at == utc(2026, 1, 31)

        extended, event = service.extend(
            deadline, 15, "Complex request", now=utc(2026, 2, 10), actor_user_id="dpo",
        )

        assert extended.effective_due_at == utc(2026, 2, 15)
        assert extended.legal_due_at == utc(2026, 1, 31)
        assert extended.days_remaining == 5
        assert extended.extension_days == 15
        assert extended.extension_reason == "Complex request"
        assert extended.extension_applied_at == utc(2026, 2, 10)
        assert event.event_type == DeadlineEventType.EXTENDED
        assert event.description == "Extension of 15 days applied (total: 15). Reason: Complex request"

        result = compute_risk(RiskInput(days_remaining=extended.days_remaining, now=utc(2026, 2, 10)))
        assert result.level == RiskLevel.RED
        assert result.reasons == ("Only 5 day(s) remaining (red threshold: 7)",)

    def test_cumulative_extensions(self):
        service = DeadlineService()
        deadline = make_deadline()
        deadline, _ = service.extend(deadline, 20, "First", now=utc(2026, 1, 5))
        deadline, event = service.extend(deadline, 40, "Second", now=utc(2026, 1, 6))

        assert deadline.extension_days == 60
        assert deadline.effective_due_at == utc(2026, 4, 1)
        assert event.description == "Extension of 40 days applied (total: 60). Reason: Second"

    def test_exceeding_cap_rejected(self):
        """Test the cap is enforced and the deadline is not changed."""
        service = DeadlineService()
        deadline = make_deadline(extension_days=50)

        with pytest.raises(InvalidExtensionError) as exc_info:
            service.extend(deadline, 11, "Too much", now=utc(2026, 1, 5))

        assert exc_info.value.case_id == "case-1"
        assert exc_info.value.details["existing_extension_days"] == 50
        assert deadline.extension_days == 50

    def test_non_positive_rejected(self):
        with pytest.raises(InvalidExtensionError):
            DeadlineService().extend(make_deadline(), 0, "Nothing", now=utc(2026, 1, 5))

    def test_extension_keeps_paused_days(self):
        """Test the recompute includes previously paused days."""
        service = DeadlineService()
        deadline = make_deadline(total_paused_days=3, effective_due_at=utc(2026, 2, 3))

        extended, _ = service.extend(deadline, 10, "More systems", now=utc(2026, 1, 5))

        assert extended.effective_due_at == utc(2026, 2, 13)

    def test_notice_pending_until_marked(self):
        """Test the extension notice lifecycle."""
        service = DeadlineService()
        extended, _ = service.extend(make_deadline(), 10, "Volume", now=utc(2026, 1, 5))
        assert extended.extension_pending

        notified, event = service.mark_extension_notified(extended, sent_at=utc(2026, 1, 6), actor_user_id="dpo")
        assert not notified.extension_pending
        assert notified.extension_notification_sent_at == utc(2026, 1, 6)
        assert event.event_type == DeadlineEventType.EXTENSION_NOTIFIED

    def test_notice_not_required(self):
        extended, _ = DeadlineService().extend(
            make_deadline(), 10, "Volume", notification_required=False, now=utc(2026, 1, 5),
        )
        assert not extended.extension_pending


# =============================================================================
# Pause / Resume Tests
# =============================================================================

class TestPauseResume:
    """Tests for stopping and restarting the clock."""

    def test_pause_freezes_days(self):
        service = DeadlineService()
        deadline = make_deadline(days_remaining=21)

        paused, event = service.pause(deadline, "Awaiting ID", approved_by="dpo", now=utc(2026, 1, 10))

        assert paused.is_paused
        assert paused.paused_at == utc(2026, 1, 10)
        assert paused.pause_approved_by == "dpo"
        assert paused.days_remaining == 21
        assert paused.effective_due_at == deadline.effective_due_at
        assert event.event_type == DeadlineEventType.PAUSED

    def test_double_pause_rejected(self):
        service = DeadlineService()
        paused, _ = service.pause(make_deadline(), "Awaiting ID", now=utc(2026, 1, 10))

        with pytest.raises(DeadlineStateError) as exc_info:
            service.pause(paused, "Again", now=utc(2026, 1, 11))

        assert exc_info.value.message == "Clock is already paused"

    def test_resume_shifts_due_date(self):
        """Test a 3.5-day pause counts as 4 days."""
        service = DeadlineService()
        paused, _ = service.pause(make_deadline(), "Awaiting ID", now=utc(2026, 1, 10))

        resumed, event = service.resume(paused, now=utc(2026, 1, 13, 12), actor_user_id="dpo")

        assert not resumed.is_paused
        assert resumed.pause_reason is None
        assert resumed.total_paused_days == 4
        assert resumed.effective_due_at == utc(2026, 2, 4)
        assert resumed.days_remaining == 22
        assert event.description == (
            "Clock resumed after 4 day(s) pause. Due date shifted to 2026-02-04"
        )

    def test_pauses_accumulate(self):
        service = DeadlineService()
        deadline = make_deadline()
        for start, end in [(utc(2026, 1, 5), utc(2026, 1, 7)), (utc(2026, 1, 12), utc(2026, 1, 13))]:
            deadline, _ = service.pause(deadline, "Waiting", now=start)
            deadline, _ = service.resume(deadline, now=end)

        assert deadline.total_paused_days == 3
        assert deadline.effective_due_at == utc(2026, 2, 3)

    def test_resume_without_pause_rejected(self):
        with pytest.raises(DeadlineStateError) as exc_info:
            DeadlineService().resume(make_deadline(), now=utc(2026, 1, 10))
        assert exc_info.value.code == "DP_DEADLINE_STATE"

    def test_resume_keeps_extension(self):
        service = DeadlineService()
        extended, _ = service.extend(make_deadline(), 15, "Complex", now=utc(2026, 1, 5))
        paused, _ = service.pause(extended, "Waiting", now=utc(2026, 1, 6))
        resumed, _ = service.resume(paused, now=utc(2026, 1, 8))

        assert resumed.effective_due_at == utc(2026, 2, 17)
