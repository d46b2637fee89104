"""
DSARPilot Enumerations

All enumeration types used throughout the DSARPilot system.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Case Lifecycle
# =============================================================================

class CaseStatus(str, Enum):
    """Lifecycle states of a DSAR case."""
    NEW = "NEW"
    IDENTITY_VERIFICATION = "IDENTITY_VERIFICATION"
    INTAKE_TRIAGE = "INTAKE_TRIAGE"
    DATA_COLLECTION = "DATA_COLLECTION"
    REVIEW_LEGAL = "REVIEW_LEGAL"
    RESPONSE_PREPARATION = "RESPONSE_PREPARATION"
    RESPONSE_SENT = "RESPONSE_SENT"
    CLOSED = "CLOSED"                  # Terminal
    REJECTED = "REJECTED"              # Can only move on to CLOSED


# =============================================================================
# Risk and Escalation
# =============================================================================

class RiskLevel(str, Enum):
    """
    Deadline risk of a case.

    Ordered GREEN < YELLOW < RED; use `rank` for comparisons.
    """
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.GREEN: 0,
    RiskLevel.YELLOW: 1,
    RiskLevel.RED: 2,
}


class EscalationSeverity(str, Enum):
    """Severity of a generated escalation record."""
    YELLOW_WARNING = "YELLOW_WARNING"
    RED_ALERT = "RED_ALERT"
    OVERDUE_BREACH = "OVERDUE_BREACH"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ")


class RecipientRole(str, Enum):
    """Tenant roles that can receive escalations."""
    SUPER_ADMIN = "SUPER_ADMIN"
    TENANT_ADMIN = "TENANT_ADMIN"
    DPO = "DPO"
    CASE_MANAGER = "CASE_MANAGER"
    ANALYST = "ANALYST"
    AUDITOR = "AUDITOR"
    CONTRIBUTOR = "CONTRIBUTOR"
    READ_ONLY = "READ_ONLY"


class NotificationType(str, Enum):
    """In-app notification categories produced by escalations."""
    ESCALATION = "ESCALATION"
    OVERDUE = "OVERDUE"


# =============================================================================
# Deadlines and Milestones
# =============================================================================

class MilestoneType(str, Enum):
    """Internal sub-deadlines of a case."""
    IDV = "IDV"                        # Identity verification complete
    COLLECTION = "COLLECTION"          # Data collection complete
    DRAFT = "DRAFT"                    # Draft response ready
    LEGAL = "LEGAL"                    # Legal review done


class DeadlineEventType(str, Enum):
    """Audit trail entries for deadline mutations."""
    CREATED = "CREATED"
    EXTENDED = "EXTENDED"
    PAUSED = "PAUSED"
    RESUMED = "RESUMED"
    EXTENSION_NOTIFIED = "EXTENSION_NOTIFIED"
