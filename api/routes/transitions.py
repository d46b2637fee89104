"""Case status transition endpoints."""

from fastapi import APIRouter, HTTPException

from api.schemas.requests import TransitionValidateRequest
from api.schemas.responses import TransitionsResponse, TransitionValidateResponse
from dsarpilot.engine import DEFAULT_STATE_MACHINE, STATUS_LABELS
from dsarpilot.models import CaseStatus

router = APIRouter(prefix="/transitions", tags=["Transitions"])


@router.get("/{status}", response_model=TransitionsResponse)
async def get_transitions(status: str):
    """List the statuses a case may move to from `status`."""
    try:
        current = CaseStatus(status.upper())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown status '{status}'")

    allowed = DEFAULT_STATE_MACHINE.get_allowed_transitions(current)
    return TransitionsResponse(
        status=current.value,
        label=STATUS_LABELS[current],
        allowed_transitions=[s.value for s in allowed],
        terminal=not allowed,
    )


@router.post("/validate", response_model=TransitionValidateResponse)
async def validate_transition(request: TransitionValidateRequest):
    """
    Check a proposed status change.

    Returns 400 with the allowed targets when the edge does not exist.
    """
    DEFAULT_STATE_MACHINE.assert_transition(request.from_status, request.to_status)
    return TransitionValidateResponse(
        valid=True,
        from_status=request.from_status,
        to_status=request.to_status,
    )
