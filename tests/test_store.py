"""
Tests for the in-memory store.
"""
import threading

import pytest

from dsarpilot.exceptions import ConcurrentUpdateError, DeadlineAlreadyInitializedError
from dsarpilot.models import Escalation, EscalationSeverity
from dsarpilot.store import (
    CaseRepository,
    DeadlineRepository,
    EscalationStore,
    InMemoryStore,
    NotificationDispatcher,
    UserDirectory,
)

from tests.conftest import make_deadline, make_store, make_user


def escalation(key):
    return Escalation(
        tenant_id="tenant-1",
        case_id="case-1",
        severity=EscalationSeverity.RED_ALERT,
        reason="Only 5 day(s) remaining (red threshold: 7)",
        recipient_roles=("DPO",),
        idempotency_key=key,
    )


class TestInMemoryStore:
    """Tests for the store's persistence guarantees."""

    def test_implements_every_protocol(self):
        store = InMemoryStore()
        for protocol in (CaseRepository, DeadlineRepository, EscalationStore,
                         UserDirectory, NotificationDispatcher):
            assert isinstance(store, protocol)

    def test_save_bumps_revision(self, store):
        deadline = store.get_deadline("case-1")
        saved = store.save_deadline(deadline, expected_revision=0)
        assert saved.risk_revision == 1
        assert store.get_deadline("case-1").risk_revision == 1

    def test_stale_save_rejected(self, store):
        deadline = store.get_deadline("case-1")
        store.save_deadline(deadline, expected_revision=0)

        with pytest.raises(ConcurrentUpdateError) as exc_info:
            store.save_deadline(deadline, expected_revision=0)

        assert exc_info.value.details == {"expected_revision": 0, "current_revision": 1}

    def test_deadline_initialized_once(self, store):
        with pytest.raises(DeadlineAlreadyInitializedError):
            store.add_deadline(make_deadline())

    def test_escalation_key_unique(self):
        store = InMemoryStore()
        assert store.record_escalation(escalation("case-1:0:RED"))
        assert not store.record_escalation(escalation("case-1:0:RED"))
        assert store.record_escalation(escalation("case-1:1:RED"))
        assert len(store.list_escalations("case-1")) == 2

    def test_find_users_by_roles(self):
        store = make_store(users=[
            make_user("dpo", "DPO"),
            make_user("analyst", "ANALYST"),
            make_user("other-dpo", "DPO", tenant_id="tenant-2"),
        ])
        found = store.find_users_by_roles("tenant-1", ["DPO", "TENANT_ADMIN"])
        assert [u.id for u in found] == ["dpo"]

    def test_milestones_are_copied(self, store):
        store.list_milestones("case-1").append("junk")
        assert store.list_milestones("case-1") == []

    def test_released_key_can_be_recorded_again(self):
        store = InMemoryStore()
        store.record_escalation(escalation("case-1:0:RED"))
        store.record_escalation(escalation("case-1:1:RED"))

        store.release_escalation("case-1:0:RED")

        assert [e.idempotency_key for e in store.list_escalations("case-1")] == ["case-1:1:RED"]
        assert store.record_escalation(escalation("case-1:0:RED"))

    @pytest.mark.parametrize("read", [
        lambda s: s.get_case("case-1"),
        lambda s: s.get_deadline("case-1"),
        lambda s: s.list_milestones("case-1"),
        lambda s: s.list_escalations("case-1"),
        lambda s: s.find_users_by_roles("tenant-1", ["DPO"]),
    ])
    def test_reads_wait_for_writers(self, store, read):
        """Test every read blocks while another thread holds the store lock."""
        results = []
        reader = threading.Thread(target=lambda: results.append(read(store)))

        with store._lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()

        reader.join(timeout=5)
        assert not reader.is_alive()
        assert len(results) == 1
