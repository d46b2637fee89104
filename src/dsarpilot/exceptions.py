"""
DSARPilot Exception Hierarchy

Domain-specific exceptions for the case lifecycle and deadline engine.
All exceptions include error codes so the calling layer can translate them
into 4xx responses.

Exception codes follow the pattern: DP_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class DSARPilotError(Exception):
    """
    Base exception for all DSARPilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (DP_*)
        details: Additional context about the error
        case_id: Associated case ID if applicable
    """
    message: str
    code: str = "DP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    case_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.case_id:
            parts.append(f"(case: {self.case_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.case_id:
            result["case_id"] = self.case_id
        return result


# =============================================================================
# Case Lifecycle Errors
# =============================================================================

@dataclass
class InvalidTransitionError(DSARPilotError):
    """Attempted status edge is not in the transition table."""
    code: str = "DP_INVALID_TRANSITION"

    @classmethod
    def for_edge(
        cls,
        from_status: str,
        to_status: str,
        allowed: list[str],
        case_id: Optional[str] = None,
    ) -> InvalidTransitionError:
        return cls(
            message=f"Invalid status transition from {from_status} to {to_status}",
            details={
                "from_status": from_status,
                "to_status": to_status,
                "allowed_transitions": allowed,
            },
            case_id=case_id,
        )

    @property
    def from_status(self) -> Optional[str]:
        return self.details.get("from_status")

    @property
    def to_status(self) -> Optional[str]:
        return self.details.get("to_status")

    @property
    def allowed(self) -> list[str]:
        return self.details.get("allowed_transitions", [])


@dataclass
class TransitionReasonRequiredError(DSARPilotError):
    """Status transitions must carry a reason."""
    code: str = "DP_TRANSITION_REASON_REQUIRED"


@dataclass
class CaseNotFoundError(DSARPilotError):
    """Referenced case does not exist."""
    code: str = "DP_CASE_NOT_FOUND"


# =============================================================================
# Deadline Errors
# =============================================================================

@dataclass
class InvalidExtensionError(DSARPilotError):
    """Requested extension is non-positive or exceeds the configured cap."""
    code: str = "DP_INVALID_EXTENSION"

    @property
    def requested_days(self) -> Optional[int]:
        return self.details.get("requested_days")

    @property
    def existing_extension_days(self) -> Optional[int]:
        return self.details.get("existing_extension_days")

    @property
    def max_extension_days(self) -> Optional[int]:
        return self.details.get("max_extension_days")


@dataclass
class DeadlineStateError(DSARPilotError):
    """Deadline operation not allowed in the current clock state."""
    code: str = "DP_DEADLINE_STATE"


@dataclass
class DeadlineAlreadyInitializedError(DSARPilotError):
    """A deadline already exists for this case."""
    code: str = "DP_DEADLINE_EXISTS"


@dataclass
class DeadlineNotFoundError(DSARPilotError):
    """No deadline has been initialized for this case."""
    code: str = "DP_DEADLINE_NOT_FOUND"


@dataclass
class ConcurrentUpdateError(DSARPilotError):
    """Stored deadline changed since it was read (compare-and-swap failed)."""
    code: str = "DP_CONCURRENT_UPDATE"


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigLoadError(DSARPilotError):
    """Failed to load tenant SLA configuration from file."""
    code: str = "DP_CONFIG_LOAD_ERROR"


@dataclass
class ConfigValidationError(DSARPilotError):
    """Tenant SLA configuration failed schema validation."""
    code: str = "DP_CONFIG_VALIDATION_ERROR"
