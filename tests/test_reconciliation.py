"""
Tests for the periodic reconciliation job.

Tests cover:
- Risk updates and escalations across runs
- Paused and closed deadlines
- Compare-and-swap conflicts and duplicate escalations
- Per-case failure isolation
"""
import logging
from dataclasses import replace

from dsarpilot.engine import ReconciliationDriver, build_idempotency_key
from dsarpilot.models import (
    CaseStatus,
    Escalation,
    EscalationSeverity,
    NotificationType,
    RiskLevel,
)
from dsarpilot.store import InMemoryStore

from tests.conftest import (
    TENANT_ID,
    FlakyNotifierStore,
    make_case,
    make_deadline,
    make_milestone,
    make_store,
    utc,
)


def run(store, now, tenant_id=TENANT_ID):
    return ReconciliationDriver.for_store(store).run(tenant_id, now=now)


class FailingMilestoneStore(InMemoryStore):
    """Store whose milestone lookup breaks for one case."""

    def list_milestones(self, case_id):
        if case_id == "case-broken":
            raise RuntimeError("milestone table unavailable")
        return super().list_milestones(case_id)


# =============================================================================
# Update and Escalation Tests
# =============================================================================

class TestRiskUpdates:
    """Tests for recompute and escalation across runs."""

    def test_green_to_yellow_escalates(self, store):
        """Test 10 days left moves GREEN to YELLOW and notifies DPO and case manager."""
        summary = run(store, utc(2026, 1, 21))

        deadline = store.get_deadline("case-1")
        assert deadline.current_risk == RiskLevel.YELLOW
        assert deadline.days_remaining == 10
        assert deadline.risk_reasons == ["10 day(s) remaining (yellow threshold: 14)"]
        assert deadline.risk_revision == 1

        assert summary.total == 1
        assert summary.updated == 1
        assert summary.escalated == 1
        assert summary.failed == 0

        escalation = store.list_escalations("case-1")[0]
        assert escalation.severity == EscalationSeverity.YELLOW_WARNING
        assert escalation.idempotency_key == "case-1:0:YELLOW"
        assert sorted(n.recipient_user_id for n in store.sent) == ["dpo", "manager"]

    def test_unchanged_rerun_is_quiet(self, store):
        """Test a second run at the same time writes and sends nothing."""
        run(store, utc(2026, 1, 21))
        summary = run(store, utc(2026, 1, 21, 12))

        assert summary.updated == 0
        assert summary.escalated == 0
        assert store.get_deadline("case-1").risk_revision == 1
        assert len(store.escalations) == 1
        assert len(store.sent) == 2

    def test_day_change_updates_without_escalating(self, store):
        """Test a new day count is saved even when the level is unchanged."""
        run(store, utc(2026, 1, 21))
        summary = run(store, utc(2026, 1, 22))

        assert summary.updated == 1
        assert summary.escalated == 0
        assert store.get_deadline("case-1").days_remaining == 9
        assert len(store.escalations) == 1

    def test_yellow_to_red_escalates_again(self, store):
        run(store, utc(2026, 1, 21))
        summary = run(store, utc(2026, 1, 25))

        assert summary.escalated == 1
        latest = store.list_escalations("case-1")[-1]
        assert latest.severity == EscalationSeverity.RED_ALERT
        assert latest.idempotency_key == "case-1:1:RED"
        assert sorted(n.recipient_user_id for n in store.sent[2:]) == ["admin", "dpo"]

    def test_overdue_breach(self, store):
        """Test an overdue deadline raises an OVERDUE_BREACH."""
        summary = run(store, utc(2026, 2, 2))

        deadline = store.get_deadline("case-1")
        assert deadline.days_remaining == -2
        assert deadline.current_risk == RiskLevel.RED
        assert deadline.risk_reasons == ["Legal deadline overdue"]
        assert summary.escalated == 1
        assert store.escalations[0].severity == EscalationSeverity.OVERDUE_BREACH
        assert {n.type for n in store.sent} == {NotificationType.OVERDUE}

    def test_milestones_are_considered(self, users):
        """Test overdue milestones from the repository feed the classifier."""
        store = make_store(
            cases=[make_case()],
            deadlines=[make_deadline(days_remaining=30)],
            milestones={"case-1": [make_milestone(planned_due_at=utc(2026, 1, 8))]},
            users=users,
        )
        run(store, utc(2026, 1, 10))

        deadline = store.get_deadline("case-1")
        assert deadline.current_risk == RiskLevel.YELLOW
        assert deadline.risk_reasons == ["Milestone overdue: IDV"]

    def test_only_requested_tenant(self, store):
        store.add_case(make_case(id="case-x", tenant_id="tenant-2"))
        store.add_deadline(make_deadline(case_id="case-x", tenant_id="tenant-2", days_remaining=30))

        summary = run(store, utc(2026, 1, 21))

        assert summary.total == 1
        assert store.get_deadline("case-x").risk_revision == 0


# =============================================================================
# Paused and Closed Tests
# =============================================================================

class TestFrozenDeadlines:
    """Tests for paused clocks and closed cases."""

    def test_paused_keeps_frozen_days(self, users):
        """Test a paused deadline is GREEN and its day count does not move."""
        deadline = make_deadline(
            paused_at=utc(2026, 1, 20),
            days_remaining=12,
            current_risk=RiskLevel.YELLOW,
        )
        store = make_store(cases=[make_case()], deadlines=[deadline], users=users)

        summary = run(store, utc(2026, 3, 1))

        saved = store.get_deadline("case-1")
        assert saved.days_remaining == 12
        assert saved.current_risk == RiskLevel.GREEN
        assert saved.risk_reasons == ["Clock is paused"]
        assert summary.updated == 1
        assert summary.escalated == 0
        assert store.sent == []

    def test_closed_case_goes_green(self, users):
        """Test closing a RED case resets it to GREEN without escalating."""
        store = make_store(
            cases=[make_case(status=CaseStatus.CLOSED)],
            deadlines=[make_deadline(current_risk=RiskLevel.RED, days_remaining=5)],
            users=users,
        )

        summary = run(store, utc(2026, 2, 10))

        saved = store.get_deadline("case-1")
        assert saved.current_risk == RiskLevel.GREEN
        assert saved.risk_reasons == ["Case is closed"]
        assert summary.escalated == 0
        assert store.escalations == []


# =============================================================================
# Concurrency and Failure Tests
# =============================================================================

class TestConcurrencyAndFailures:
    """Tests for conflicts, duplicates and failure isolation."""

    def test_stale_revision_is_a_conflict(self, store):
        """Test a deadline read before another writer saved is skipped."""
        stale = store.get_deadline("case-1")
        driver = ReconciliationDriver.for_store(store)
        driver.reconcile_case(stale, utc(2026, 1, 21))

        outcome = driver.reconcile_case(stale, utc(2026, 1, 21))

        assert outcome.conflict
        assert not outcome.updated
        assert not outcome.escalated
        assert len(store.escalations) == 1
        assert store.get_deadline("case-1").risk_revision == 1

    def test_already_recorded_escalation_is_duplicate(self, store):
        """Test a pre-existing idempotency key suppresses notifications."""
        store.record_escalation(Escalation(
            tenant_id=TENANT_ID,
            case_id="case-1",
            severity=EscalationSeverity.YELLOW_WARNING,
            reason="earlier run",
            recipient_roles=("DPO",),
            idempotency_key=build_idempotency_key("case-1", 0, RiskLevel.YELLOW),
        ))

        summary = run(store, utc(2026, 1, 21))

        assert summary.updated == 1
        assert summary.duplicates == 1
        assert summary.escalated == 0
        assert store.sent == []

    def test_failed_notification_escalates_on_next_run(self, users):
        """Test a transport failure keeps the old level so the next run escalates."""
        store = make_store(
            cases=[make_case()],
            deadlines=[make_deadline(days_remaining=30)],
            users=users,
            store_cls=FlakyNotifierStore,
        )

        first = run(store, utc(2026, 1, 21))

        assert first.failed == 1
        assert first.errors == {"case-1": "RuntimeError: transport down"}
        deadline = store.get_deadline("case-1")
        assert deadline.current_risk == RiskLevel.GREEN
        assert deadline.risk_revision == 0
        assert store.escalations == []

        second = run(store, utc(2026, 1, 21))

        assert second.failed == 0
        assert second.updated == 1
        assert second.escalated == 1
        assert store.get_deadline("case-1").current_risk == RiskLevel.YELLOW
        assert store.list_escalations("case-1")[0].idempotency_key == "case-1:0:YELLOW"
        assert sorted(n.recipient_user_id for n in store.sent) == ["dpo", "manager"]

    def test_missing_case_recorded_and_batch_continues(self, store):
        store.add_deadline(make_deadline(case_id="case-orphan", days_remaining=30))

        summary = run(store, utc(2026, 1, 21))

        assert summary.total == 2
        assert summary.failed == 1
        assert "DP_CASE_NOT_FOUND" in summary.errors["case-orphan"]
        assert store.get_deadline("case-1").current_risk == RiskLevel.YELLOW

    def test_unexpected_error_isolated(self, users, caplog):
        """Test an unexpected exception fails only its own case."""
        store = FailingMilestoneStore()
        for case_id in ("case-broken", "case-1"):
            store.add_case(make_case(id=case_id))
            store.add_deadline(make_deadline(case_id=case_id, days_remaining=30))
        for user in users:
            store.add_user(user)

        with caplog.at_level(logging.INFO, logger="dsarpilot"):
            summary = run(store, utc(2026, 1, 21))

        assert summary.failed == 1
        assert summary.updated == 1
        assert summary.errors == {"case-broken": "RuntimeError: milestone table unavailable"}
        assert any(r.levelno == logging.ERROR and r.case_id == "case-broken" for r in caplog.records)

    def test_summary_logged(self, store, caplog):
        with caplog.at_level(logging.INFO, logger="dsarpilot"):
            run(store, utc(2026, 1, 21))

        summary_records = [r for r in caplog.records if r.getMessage().startswith("Reconciliation complete")]
        assert len(summary_records) == 1
        assert summary_records[0].tenant_id == TENANT_ID
        assert summary_records[0].duration_ms >= 0

    def test_summary_to_dict(self, store):
        data = run(store, utc(2026, 1, 21)).to_dict()
        assert data == {
            "tenant_id": TENANT_ID,
            "total": 1,
            "updated": 1,
            "escalated": 1,
            "duplicates": 0,
            "conflicts": 0,
            "failed": 0,
            "errors": {},
        }

    def test_save_replaces_only_risk_fields(self, store):
        """Test reconciliation leaves extension and pause state untouched."""
        original = replace(store.get_deadline("case-1"))
        run(store, utc(2026, 1, 21))
        saved = store.get_deadline("case-1")

        assert saved.effective_due_at == original.effective_due_at
        assert saved.extension_days == original.extension_days
        assert saved.total_paused_days == original.total_paused_days
