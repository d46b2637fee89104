"""Reconciliation trigger endpoint."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter

from api.schemas.responses import ReconcileResponse
from dsarpilot.config import TenantConfigLoader
from dsarpilot.engine import ReconciliationDriver
from dsarpilot.store import InMemoryStore

router = APIRouter(prefix="/reconcile", tags=["Reconciliation"])

# Shared store and config loader (set by main.py)
store: InMemoryStore = InMemoryStore()
config_loader: TenantConfigLoader = TenantConfigLoader()


def set_store(s: InMemoryStore, loader: TenantConfigLoader):
    global store, config_loader
    store = s
    config_loader = loader


@router.post("/{tenant_id}", response_model=ReconcileResponse)
async def reconcile_tenant(tenant_id: str, now: Optional[datetime] = None):
    """
    Recompute risk for every deadline of a tenant.

    Persists changed risk levels and raises escalations with notifications.
    """
    driver = ReconciliationDriver.for_store(
        store,
        config=config_loader.get_config(tenant_id),
        holidays=config_loader.get_calendar(tenant_id),
    )
    summary = driver.run(tenant_id, now=now)
    return ReconcileResponse(**summary.to_dict())
