"""Risk classification endpoint."""

from fastapi import APIRouter

from api.schemas.requests import RiskPreviewRequest
from api.schemas.responses import RiskPreviewResponse
from dsarpilot.config import TenantConfigLoader
from dsarpilot.engine import RiskInput, compute_risk
from dsarpilot.models import Milestone, RiskConfig

router = APIRouter(prefix="/risk", tags=["Risk"])

# Shared config loader (set by main.py)
config_loader: TenantConfigLoader = TenantConfigLoader()


def set_loader(loader: TenantConfigLoader):
    global config_loader
    config_loader = loader


@router.post("/preview", response_model=RiskPreviewResponse)
async def preview_risk(request: RiskPreviewRequest):
    """Classify a case state as GREEN, YELLOW or RED with reasons."""
    tenant_risk = config_loader.get_config(request.tenant_id or "").risk_config()
    thresholds = RiskConfig(
        yellow_threshold_days=(
            request.yellow_threshold_days
            if request.yellow_threshold_days is not None
            else tenant_risk.yellow_threshold_days
        ),
        red_threshold_days=(
            request.red_threshold_days
            if request.red_threshold_days is not None
            else tenant_risk.red_threshold_days
        ),
    )

    is_overdue = request.is_overdue
    if is_overdue is None:
        is_overdue = request.days_remaining < 0

    result = compute_risk(
        RiskInput(
            days_remaining=request.days_remaining,
            is_overdue=is_overdue,
            is_paused=request.is_paused,
            extension_pending=request.extension_pending,
            milestones=[
                Milestone(
                    case_id="",
                    type=m.type,
                    planned_due_at=m.planned_due_at,
                    completed_at=m.completed_at,
                )
                for m in request.milestones
            ],
            is_closed=request.is_closed,
            now=request.now,
        ),
        thresholds,
    )
    return RiskPreviewResponse(level=result.level.value, reasons=list(result.reasons))
