"""
DSARPilot Models

Domain records and configuration for the case lifecycle and deadline engine.

Usage:
    from dsarpilot.models import (
        Case, CaseDeadline, Milestone, CaseStatus, RiskLevel, SlaConfig,
    )
"""
from __future__ import annotations

from .enums import (
    CaseStatus,
    DeadlineEventType,
    EscalationSeverity,
    MilestoneType,
    NotificationType,
    RecipientRole,
    RiskLevel,
)
from .case import (
    Case,
    CaseDeadline,
    DeadlineEvent,
    Escalation,
    Milestone,
    Notification,
    StateTransition,
    User,
)
from .sla import (
    DEFAULT_RISK_CONFIG,
    DEFAULT_SLA_CONFIG,
    RiskConfig,
    SlaConfig,
)

__all__ = [
    # Enums
    "CaseStatus",
    "DeadlineEventType",
    "EscalationSeverity",
    "MilestoneType",
    "NotificationType",
    "RecipientRole",
    "RiskLevel",
    # Records
    "Case",
    "CaseDeadline",
    "DeadlineEvent",
    "Escalation",
    "Milestone",
    "Notification",
    "StateTransition",
    "User",
    # Configuration
    "DEFAULT_RISK_CONFIG",
    "DEFAULT_SLA_CONFIG",
    "RiskConfig",
    "SlaConfig",
]
