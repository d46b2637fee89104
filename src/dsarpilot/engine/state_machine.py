"""
DSARPilot Case State Machine

Validates case status transitions against a fixed directed graph.

Workflow:
    NEW → IDENTITY_VERIFICATION → INTAKE_TRIAGE → DATA_COLLECTION
        → REVIEW_LEGAL → RESPONSE_PREPARATION → RESPONSE_SENT → CLOSED

    NEW may skip identity verification; early states may reject;
    REVIEW_LEGAL may send a case back to DATA_COLLECTION;
    REJECTED → CLOSED; CLOSED is terminal.

The machine is stateless. Callers must check a transition before
persisting any status change.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Union

from ..exceptions import InvalidTransitionError, TransitionReasonRequiredError
from ..models import Case, CaseStatus, StateTransition


StatusLike = Union[CaseStatus, str]


# =============================================================================
# Transition Table
# =============================================================================

TRANSITIONS: Mapping[CaseStatus, tuple[CaseStatus, ...]] = MappingProxyType({
    CaseStatus.NEW: (
        CaseStatus.IDENTITY_VERIFICATION,
        CaseStatus.INTAKE_TRIAGE,
        CaseStatus.REJECTED,
    ),
    CaseStatus.IDENTITY_VERIFICATION: (
        CaseStatus.INTAKE_TRIAGE,
        CaseStatus.REJECTED,
    ),
    CaseStatus.INTAKE_TRIAGE: (
        CaseStatus.DATA_COLLECTION,
        CaseStatus.REJECTED,
    ),
    CaseStatus.DATA_COLLECTION: (
        CaseStatus.REVIEW_LEGAL,
    ),
    CaseStatus.REVIEW_LEGAL: (
        CaseStatus.RESPONSE_PREPARATION,
        CaseStatus.DATA_COLLECTION,  # Send back
    ),
    CaseStatus.RESPONSE_PREPARATION: (
        CaseStatus.RESPONSE_SENT,
    ),
    CaseStatus.RESPONSE_SENT: (
        CaseStatus.CLOSED,
    ),
    CaseStatus.REJECTED: (
        CaseStatus.CLOSED,
    ),
    CaseStatus.CLOSED: (),
})

STATUS_LABELS: Mapping[CaseStatus, str] = MappingProxyType({
    CaseStatus.NEW: "New",
    CaseStatus.IDENTITY_VERIFICATION: "Identity Verification",
    CaseStatus.INTAKE_TRIAGE: "Intake & Triage",
    CaseStatus.DATA_COLLECTION: "Data Collection",
    CaseStatus.REVIEW_LEGAL: "Legal Review",
    CaseStatus.RESPONSE_PREPARATION: "Response Preparation",
    CaseStatus.RESPONSE_SENT: "Response Sent",
    CaseStatus.CLOSED: "Closed",
    CaseStatus.REJECTED: "Rejected",
})


def _coerce_status(status: StatusLike) -> Optional[CaseStatus]:
    """Enum member for a status or its string value; None if unknown."""
    if isinstance(status, CaseStatus):
        return status
    try:
        return CaseStatus(status)
    except ValueError:
        return None


# =============================================================================
# State Machine
# =============================================================================

@dataclass(frozen=True)
class CaseStateMachine:
    """
    Stateless validator over the case transition table.

    Usage:
        machine = CaseStateMachine()

        if not machine.is_valid_transition(case.status, target):
            ...

        updated_case, transition = machine.apply_transition(
            case, target, changed_by_user_id=user.id, reason="IDV passed",
        )
    """

    transitions: Mapping[CaseStatus, tuple[CaseStatus, ...]] = field(
        default_factory=lambda: TRANSITIONS
    )

    def get_allowed_transitions(self, current: StatusLike) -> list[CaseStatus]:
        """
        Valid target states from `current`, in table order.

        Empty for CLOSED and for unknown statuses.
        """
        status = _coerce_status(current)
        if status is None:
            return []
        return list(self.transitions.get(status, ()))

    def is_valid_transition(self, from_status: StatusLike, to_status: StatusLike) -> bool:
        """Check whether from_status → to_status is an edge of the table."""
        source = _coerce_status(from_status)
        target = _coerce_status(to_status)
        if source is None or target is None:
            return False
        return target in self.transitions.get(source, ())

    def assert_transition(
        self,
        from_status: StatusLike,
        to_status: StatusLike,
        case_id: Optional[str] = None,
    ) -> None:
        """
        Raise InvalidTransitionError unless the edge exists.

        The error names the attempted edge and lists the allowed targets.
        """
        if not self.is_valid_transition(from_status, to_status):
            raise InvalidTransitionError.for_edge(
                from_status=_status_value(from_status),
                to_status=_status_value(to_status),
                allowed=[s.value for s in self.get_allowed_transitions(from_status)],
                case_id=case_id,
            )

    def apply_transition(
        self,
        case: Case,
        to_status: StatusLike,
        changed_by_user_id: str,
        reason: str,
    ) -> tuple[Case, StateTransition]:
        """
        Validate a transition and produce the records to persist.

        The given case is never modified; on success a new Case with the
        target status is returned together with the transition record.
        Entering CLOSED or REJECTED stamps `closed_at`.

        Raises:
            InvalidTransitionError: edge not in the transition table
            TransitionReasonRequiredError: blank reason
        """
        self.assert_transition(case.status, to_status, case_id=case.id)
        if not reason or not reason.strip():
            raise TransitionReasonRequiredError(
                message="Reason is required for status transitions",
                case_id=case.id,
            )

        target = _coerce_status(to_status)
        transition = StateTransition(
            case_id=case.id,
            from_status=case.status,
            to_status=target,
            changed_by_user_id=changed_by_user_id,
            reason=reason.strip(),
        )
        if self.is_closed(target):
            return replace(case, status=target, closed_at=transition.created_at), transition
        return replace(case, status=target), transition

    def is_terminal(self, status: StatusLike) -> bool:
        """True when no transition leaves this status."""
        return not self.get_allowed_transitions(status)

    def is_closed(self, status: StatusLike) -> bool:
        """Closed for deadline purposes: CLOSED or REJECTED."""
        return _coerce_status(status) in (CaseStatus.CLOSED, CaseStatus.REJECTED)


def _status_value(status: StatusLike) -> str:
    return status.value if isinstance(status, CaseStatus) else str(status)


# =============================================================================
# Convenience Functions
# =============================================================================

DEFAULT_STATE_MACHINE = CaseStateMachine()


def get_allowed_transitions(current: StatusLike) -> list[CaseStatus]:
    """Valid target states from `current`."""
    return DEFAULT_STATE_MACHINE.get_allowed_transitions(current)


def is_valid_transition(from_status: StatusLike, to_status: StatusLike) -> bool:
    """Check whether a status transition is allowed."""
    return DEFAULT_STATE_MACHINE.is_valid_transition(from_status, to_status)
