"""Response schemas for the API."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TransitionsResponse(BaseModel):
    """Allowed targets from a status."""
    status: str
    label: str
    allowed_transitions: list[str]
    terminal: bool


class TransitionValidateResponse(BaseModel):
    valid: bool
    from_status: str
    to_status: str


class MilestonePreview(BaseModel):
    type: str
    planned_due_at: datetime


class DeadlinePreviewResponse(BaseModel):
    """Computed due dates for a hypothetical case."""
    received_at: datetime
    legal_due_at: datetime
    effective_due_at: datetime
    days_remaining: int
    is_overdue: bool
    use_business_days: bool
    timezone: str
    milestones: list[MilestonePreview]


class ExtensionValidateResponse(BaseModel):
    valid: bool
    requested_days: int
    existing_extension_days: int
    max_extension_days: int
    total_after: int
    error: Optional[str] = None


class RiskPreviewResponse(BaseModel):
    level: str  # GREEN|YELLOW|RED
    reasons: list[str]


class ReconcileResponse(BaseModel):
    """Counters from one reconciliation run."""
    tenant_id: str
    total: int
    updated: int
    escalated: int
    duplicates: int
    conflicts: int
    failed: int
    errors: dict[str, str]
