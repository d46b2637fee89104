"""
Pytest configuration and fixtures for DSARPilot tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import pytest
from datetime import datetime, timedelta, timezone
from typing import Optional

from dsarpilot.models import (
    Case,
    CaseDeadline,
    CaseStatus,
    Milestone,
    MilestoneType,
    Notification,
    RiskLevel,
    User,
)
from dsarpilot.store import InMemoryStore


TENANT_ID = "tenant-1"


# =============================================================================
# Factory Helpers
# =============================================================================

def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Timezone-aware UTC datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_case(
    id: str = "case-1",
    tenant_id: str = TENANT_ID,
    case_number: str = "DSAR-2026-0001",
    status: CaseStatus = CaseStatus.DATA_COLLECTION,
    received_at: Optional[datetime] = None,
    assigned_to_user_id: Optional[str] = None,
    closed_at: Optional[datetime] = None,
) -> Case:
    """Create a Case with required fields."""
    return Case(
        id=id,
        tenant_id=tenant_id,
        case_number=case_number,
        status=status,
        received_at=received_at or utc(2026, 1, 1),
        assigned_to_user_id=assigned_to_user_id,
        closed_at=closed_at,
    )


def make_deadline(
    case_id: str = "case-1",
    tenant_id: str = TENANT_ID,
    received_at: Optional[datetime] = None,
    legal_due_at: Optional[datetime] = None,
    effective_due_at: Optional[datetime] = None,
    **overrides,
) -> CaseDeadline:
    """
    Create a CaseDeadline.

    Defaults to a 30-calendar-day deadline from 2026-01-01, unextended and
    running, with GREEN risk.
    """
    received_at = received_at or utc(2026, 1, 1)
    legal_due_at = legal_due_at or received_at + timedelta(days=30)
    return CaseDeadline(
        case_id=case_id,
        tenant_id=tenant_id,
        received_at=received_at,
        legal_due_at=legal_due_at,
        effective_due_at=effective_due_at or legal_due_at,
        **overrides,
    )


def make_milestone(
    type: MilestoneType = MilestoneType.IDV,
    planned_due_at: Optional[datetime] = None,
    completed_at: Optional[datetime] = None,
    case_id: str = "case-1",
) -> Milestone:
    """Create a Milestone."""
    return Milestone(
        case_id=case_id,
        type=type,
        planned_due_at=planned_due_at or utc(2026, 1, 8),
        completed_at=completed_at,
    )


def make_user(id: str, role: str, tenant_id: str = TENANT_ID) -> User:
    """Create a User."""
    return User(id=id, tenant_id=tenant_id, role=role, name=id.title())


def make_store(
    cases: Optional[list[Case]] = None,
    deadlines: Optional[list[CaseDeadline]] = None,
    milestones: Optional[dict[str, list[Milestone]]] = None,
    users: Optional[list[User]] = None,
    store_cls: type[InMemoryStore] = InMemoryStore,
) -> InMemoryStore:
    """Create an InMemoryStore (or subclass) seeded with cases, deadlines and users."""
    store = store_cls()
    for case in cases or []:
        store.add_case(case)
    for deadline in deadlines or []:
        store.add_deadline(deadline, (milestones or {}).get(deadline.case_id, []))
    for user in users or []:
        store.add_user(user)
    return store


class FlakyNotifierStore(InMemoryStore):
    """Store whose first notification send fails with a transport error."""

    send_failures_left = 1

    def send(self, notification: Notification) -> None:
        if self.send_failures_left:
            self.send_failures_left -= 1
            raise RuntimeError("transport down")
        super().send(notification)


def default_users(tenant_id: str = TENANT_ID) -> list[User]:
    """One user per escalation-relevant role, plus an analyst who never receives escalations."""
    return [
        make_user("admin", "TENANT_ADMIN", tenant_id),
        make_user("dpo", "DPO", tenant_id),
        make_user("manager", "CASE_MANAGER", tenant_id),
        make_user("analyst", "ANALYST", tenant_id),
    ]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def received_at():
    """Receipt time used by the worked examples."""
    return utc(2026, 1, 1)


@pytest.fixture
def users():
    return default_users()


@pytest.fixture
def store(users):
    """Store with one open case, its deadline and the default users."""
    return make_store(
        cases=[make_case()],
        deadlines=[make_deadline(current_risk=RiskLevel.GREEN, days_remaining=30)],
        users=users,
    )
