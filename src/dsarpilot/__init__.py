"""
DSARPilot - GDPR Data Subject Access Request Deadline Engine

DSARPilot tracks a DSAR case through its lifecycle and keeps the statutory
response deadline in view: it validates status changes, computes legal and
effective due dates, classifies deadline risk and escalates when risk
changes.

Core Principle: "The engine computes and flags. People decide and respond."

Key Features:
- Fixed case workflow with validated transitions
- GDPR Art. 12 deadlines in calendar or business days
- Holiday calendars (tenant dates, German public holidays)
- Extensions, clock pauses and milestone tracking
- GREEN/YELLOW/RED risk with human-readable reasons
- Idempotent escalations with per-role notifications

Quick Start:
    from dsarpilot.models import Case, CaseStatus
    from dsarpilot.engine import (
        CaseStateMachine, DeadlineService, ReconciliationDriver,
    )
    from dsarpilot.store import InMemoryStore

    # Initialize a deadline for a received case
    service = DeadlineService()
    deadline, milestones, event = service.initialize(case)

    # Periodically reconcile risk and escalate
    store = InMemoryStore()
    store.add_case(case)
    store.add_deadline(deadline, milestones)
    summary = ReconciliationDriver.for_store(store).run(case.tenant_id)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "DSARPilot Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    CaseStatus,
    DeadlineEventType,
    EscalationSeverity,
    MilestoneType,
    NotificationType,
    RecipientRole,
    RiskLevel,
    # Records
    Case,
    CaseDeadline,
    DeadlineEvent,
    Escalation,
    Milestone,
    Notification,
    StateTransition,
    User,
    # Configuration
    DEFAULT_SLA_CONFIG,
    RiskConfig,
    SlaConfig,
)

# =============================================================================
# Engine Services
# =============================================================================
from .engine import (
    CaseStateMachine,
    DeadlineCalculator,
    DeadlineService,
    EscalationCoordinator,
    ReconciliationDriver,
    RiskClassifier,
    RiskInput,
    RiskResult,
    compute_risk,
    validate_extension,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    DSARPilotError,
    InvalidExtensionError,
    InvalidTransitionError,
)

__all__ = [
    "__version__",
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
    "DEFAULT_SLA_CONFIG",
    "RiskConfig",
    "SlaConfig",
    # Engine
    "CaseStateMachine",
    "DeadlineCalculator",
    "DeadlineService",
    "EscalationCoordinator",
    "ReconciliationDriver",
    "RiskClassifier",
    "RiskInput",
    "RiskResult",
    "compute_risk",
    "validate_extension",
    # Exceptions
    "DSARPilotError",
    "InvalidExtensionError",
    "InvalidTransitionError",
]
