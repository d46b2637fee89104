"""Deadline preview endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from api.schemas.requests import DeadlinePreviewRequest, ExtensionValidateRequest
from api.schemas.responses import (
    DeadlinePreviewResponse,
    ExtensionValidateResponse,
    MilestonePreview,
)
from dsarpilot.calendars import combine_calendars
from dsarpilot.config import TenantConfigLoader
from dsarpilot.engine import DeadlineCalculator, add_calendar_days, validate_extension

router = APIRouter(prefix="/deadlines", tags=["Deadlines"])

# Shared config loader (set by main.py)
config_loader: TenantConfigLoader = TenantConfigLoader()


def set_loader(loader: TenantConfigLoader):
    global config_loader
    config_loader = loader


@router.post("/preview", response_model=DeadlinePreviewResponse)
async def preview_deadline(request: DeadlinePreviewRequest):
    """
    Compute legal and effective due dates for a received date.

    Tenant settings apply unless overridden in the request.
    """
    config = config_loader.get_config(request.tenant_id or "").with_overrides(
        use_business_days=request.use_business_days,
        initial_deadline_days=request.initial_deadline_days,
    )
    calendar = combine_calendars(config_loader.get_calendar(request.tenant_id or ""), request.holidays)
    calculator = DeadlineCalculator.for_config(config, calendar)

    legal_due_at = calculator.calculate_legal_due_date(request.received_at, config)
    effective_due_at = calculator.compute_effective_due_date(
        legal_due_at,
        extension_days=request.extension_days,
        total_paused_days=request.total_paused_days,
        use_business_days=config.use_business_days,
    )
    now = request.now or datetime.now(timezone.utc)
    days_remaining = calculator.calculate_days_remaining(effective_due_at, now)

    return DeadlinePreviewResponse(
        received_at=request.received_at,
        legal_due_at=legal_due_at,
        effective_due_at=effective_due_at,
        days_remaining=days_remaining,
        is_overdue=days_remaining < 0,
        use_business_days=config.use_business_days,
        timezone=config.timezone,
        milestones=[
            MilestonePreview(
                type=milestone_type.value,
                planned_due_at=add_calendar_days(request.received_at, offset),
            )
            for milestone_type, offset in config.milestone_offsets().items()
        ],
    )


@router.post("/extension/validate", response_model=ExtensionValidateResponse)
async def validate_extension_request(request: ExtensionValidateRequest):
    """Check an extension against the cap; 400 with the three numbers when rejected."""
    max_days = request.max_extension_days
    if max_days is None:
        max_days = config_loader.get_config(request.tenant_id or "").extension_max_days

    result = validate_extension(request.requested_days, request.existing_extension_days, max_days)
    result.raise_for_invalid()

    return ExtensionValidateResponse(
        valid=result.valid,
        requested_days=result.requested_days,
        existing_extension_days=result.existing_extension_days,
        max_extension_days=result.max_extension_days,
        total_after=result.total_after,
    )
