"""
DSARPilot Collaborator Protocols

Interfaces of the external collaborators the engine talks to. The engine
never depends on a storage technology or a delivery transport, only on
these shapes.
"""
from __future__ import annotations

from typing import Iterable, Optional, Protocol, runtime_checkable

from ..models import Case, CaseDeadline, Escalation, Milestone, Notification, User


@runtime_checkable
class CaseRepository(Protocol):
    """Read access to cases."""

    def get_case(self, case_id: str) -> Optional[Case]:
        ...


@runtime_checkable
class DeadlineRepository(Protocol):
    """
    Read/write access to case deadlines and milestones.

    `save_deadline` is a compare-and-swap on `risk_revision`: it must fail
    with ConcurrentUpdateError when the stored revision differs from
    `expected_revision`, and store the deadline with the revision bumped
    otherwise.
    """

    def list_open_deadlines(self, tenant_id: str) -> list[CaseDeadline]:
        ...

    def get_deadline(self, case_id: str) -> Optional[CaseDeadline]:
        ...

    def list_milestones(self, case_id: str) -> list[Milestone]:
        ...

    def save_deadline(self, deadline: CaseDeadline, expected_revision: int) -> CaseDeadline:
        ...


@runtime_checkable
class EscalationStore(Protocol):
    """
    Escalation log keyed by idempotency key.

    `record_escalation` enforces uniqueness of `idempotency_key` and returns
    False when the key was already recorded. `release_escalation` removes a
    record whose notifications could not be delivered, so a later run can
    raise it again.
    """

    def record_escalation(self, escalation: Escalation) -> bool:
        ...

    def release_escalation(self, idempotency_key: str) -> None:
        ...

    def list_escalations(self, case_id: str) -> list[Escalation]:
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """Resolves recipient roles to users of a tenant."""

    def find_users_by_roles(self, tenant_id: str, roles: Iterable[str]) -> list[User]:
        ...


@runtime_checkable
class NotificationDispatcher(Protocol):
    """Delivers notifications asynchronously; how is not our concern."""

    def send(self, notification: Notification) -> None:
        ...
