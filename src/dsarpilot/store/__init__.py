"""
DSARPilot Store

Collaborator protocols (persistence, user directory, notification
dispatch) and an in-memory reference implementation.
"""
from __future__ import annotations

from .memory import InMemoryStore
from .protocols import (
    CaseRepository,
    DeadlineRepository,
    EscalationStore,
    NotificationDispatcher,
    UserDirectory,
)

__all__ = [
    "CaseRepository",
    "DeadlineRepository",
    "EscalationStore",
    "InMemoryStore",
    "NotificationDispatcher",
    "UserDirectory",
]
