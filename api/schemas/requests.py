"""Request schemas for the API."""

from datetime import date, datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from dsarpilot.models import MilestoneType


def assume_utc(value: datetime) -> datetime:
    """Offset-less timestamps are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(assume_utc)]


class TransitionValidateRequest(BaseModel):
    """A proposed case status change."""
    from_status: str = Field(..., description="Current status, e.g. 'NEW'")
    to_status: str = Field(..., description="Target status, e.g. 'IDENTITY_VERIFICATION'")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"from_status": "REVIEW_LEGAL", "to_status": "DATA_COLLECTION"},
            ]
        }
    }


class DeadlinePreviewRequest(BaseModel):
    """Compute due dates for a hypothetical case."""
    received_at: UtcDatetime = Field(..., description="When the request was received (ISO 8601)")
    tenant_id: Optional[str] = Field(None, description="Tenant whose SLA config applies")
    extension_days: int = Field(0, ge=0, description="Cumulative extension granted")
    total_paused_days: int = Field(0, ge=0, description="Completed pause days")
    use_business_days: Optional[bool] = Field(None, description="Override tenant counting mode")
    initial_deadline_days: Optional[int] = Field(None, ge=1, description="Override tenant deadline")
    holidays: list[date] = Field(default=[], description="Extra non-working days")
    now: Optional[UtcDatetime] = Field(None, description="Reference time (defaults to now)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "received_at": "2026-01-05T10:00:00Z",
                    "extension_days": 30,
                    "use_business_days": False,
                }
            ]
        }
    }


class ExtensionValidateRequest(BaseModel):
    """Check an extension request against the tenant cap."""
    requested_days: int = Field(..., description="Additional days requested")
    existing_extension_days: Optional[int] = Field(None, description="Extension already granted")
    max_extension_days: Optional[int] = Field(None, description="Override tenant cap")
    tenant_id: Optional[str] = None


class MilestoneInput(BaseModel):
    """A milestone of the case under assessment."""
    type: MilestoneType
    planned_due_at: UtcDatetime
    completed_at: Optional[UtcDatetime] = None


class RiskPreviewRequest(BaseModel):
    """Classify deadline risk for a hypothetical case state."""
    days_remaining: int
    is_overdue: Optional[bool] = Field(None, description="Defaults to days_remaining < 0")
    is_paused: bool = False
    extension_pending: bool = False
    is_closed: bool = False
    milestones: list[MilestoneInput] = Field(default=[])
    now: Optional[UtcDatetime] = None
    tenant_id: Optional[str] = None
    yellow_threshold_days: Optional[int] = Field(None, ge=0)
    red_threshold_days: Optional[int] = Field(None, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"days_remaining": 5, "extension_pending": True},
            ]
        }
    }
