"""
DSARPilot In-Memory Store

Reference implementation of every collaborator protocol, used by tests and
the preview API. Enforces the same guarantees a real persistence layer
must give: compare-and-swap on deadline revisions and a unique escalation
idempotency key.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from ..exceptions import ConcurrentUpdateError, DeadlineAlreadyInitializedError
from ..models import Case, CaseDeadline, Escalation, Milestone, Notification, User


@dataclass
class InMemoryStore:
    """
    Thread-safe in-memory persistence and notification sink.

    Usage:
        store = InMemoryStore()
        store.add_case(case)
        store.add_deadline(deadline, milestones)
        store.add_user(User(id="u1", tenant_id="t1", role="DPO"))
    """

    cases: dict[str, Case] = field(default_factory=dict)
    deadlines: dict[str, CaseDeadline] = field(default_factory=dict)
    milestones: dict[str, list[Milestone]] = field(default_factory=dict)
    escalations: list[Escalation] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    sent: list[Notification] = field(default_factory=list)
    _escalation_keys: set[str] = field(default_factory=set, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def add_case(self, case: Case) -> None:
        with self._lock:
            self.cases[case.id] = case

    def add_deadline(
        self,
        deadline: CaseDeadline,
        milestones: Optional[Iterable[Milestone]] = None,
    ) -> None:
        with self._lock:
            if deadline.case_id in self.deadlines:
                raise DeadlineAlreadyInitializedError(
                    message="Deadline already initialized for this case",
                    case_id=deadline.case_id,
                )
            self.deadlines[deadline.case_id] = deadline
            self.milestones[deadline.case_id] = list(milestones or [])

    def add_user(self, user: User) -> None:
        with self._lock:
            self.users.append(user)

    # -------------------------------------------------------------------------
    # CaseRepository
    # -------------------------------------------------------------------------

    def get_case(self, case_id: str) -> Optional[Case]:
        with self._lock:
            return self.cases.get(case_id)

    # -------------------------------------------------------------------------
    # DeadlineRepository
    # -------------------------------------------------------------------------

    def list_open_deadlines(self, tenant_id: str) -> list[CaseDeadline]:
        """Deadlines of the tenant; closed cases are still returned for recompute."""
        with self._lock:
            return [d for d in self.deadlines.values() if d.tenant_id == tenant_id]

    def get_deadline(self, case_id: str) -> Optional[CaseDeadline]:
        with self._lock:
            return self.deadlines.get(case_id)

    def list_milestones(self, case_id: str) -> list[Milestone]:
        with self._lock:
            return list(self.milestones.get(case_id, []))

    def save_deadline(self, deadline: CaseDeadline, expected_revision: int) -> CaseDeadline:
        with self._lock:
            stored = self.deadlines.get(deadline.case_id)
            current_revision = stored.risk_revision if stored else 0
            if current_revision != expected_revision:
                raise ConcurrentUpdateError(
                    message=(
                        f"Deadline revision is {current_revision}, "
                        f"expected {expected_revision}"
                    ),
                    details={
                        "expected_revision": expected_revision,
                        "current_revision": current_revision,
                    },
                    case_id=deadline.case_id,
                )
            saved = replace(deadline, risk_revision=expected_revision + 1)
            self.deadlines[deadline.case_id] = saved
            return saved

    # -------------------------------------------------------------------------
    # EscalationStore
    # -------------------------------------------------------------------------

    def record_escalation(self, escalation: Escalation) -> bool:
        with self._lock:
            if escalation.idempotency_key in self._escalation_keys:
                return False
            self._escalation_keys.add(escalation.idempotency_key)
            self.escalations.append(escalation)
            return True

    def release_escalation(self, idempotency_key: str) -> None:
        with self._lock:
            self._escalation_keys.discard(idempotency_key)
            self.escalations = [
                e for e in self.escalations if e.idempotency_key != idempotency_key
            ]

    def list_escalations(self, case_id: str) -> list[Escalation]:
        with self._lock:
            return [e for e in self.escalations if e.case_id == case_id]

    # -------------------------------------------------------------------------
    # UserDirectory / NotificationDispatcher
    # -------------------------------------------------------------------------

    def find_users_by_roles(self, tenant_id: str, roles: Iterable[str]) -> list[User]:
        wanted = set(roles)
        with self._lock:
            return [u for u in self.users if u.tenant_id == tenant_id and u.role in wanted]

    def send(self, notification: Notification) -> None:
        with self._lock:
            self.sent.append(notification)
