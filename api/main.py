"""
DSARPilot API

Preview service for the DSAR case lifecycle and deadline SLA engine.
"""

import json
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dsarpilot import __version__
from dsarpilot.config import TenantConfigLoader
from dsarpilot.exceptions import (
    CaseNotFoundError,
    ConcurrentUpdateError,
    DeadlineAlreadyInitializedError,
    DeadlineNotFoundError,
    DSARPilotError,
)
from dsarpilot.store import InMemoryStore

from api.routes import deadlines, reconcile, risk, transitions


# =============================================================================
# Configuration
# =============================================================================

DP_LOG_LEVEL = os.getenv("DP_LOG_LEVEL", "INFO")
DP_CONFIG_DIR = os.getenv("DP_CONFIG_DIR", "")


# =============================================================================
# Logging Setup (Structured JSON)
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    EXTRA_FIELDS = ("tenant_id", "case_id", "duration_ms", "error_code")

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


logger = logging.getLogger("dsarpilot")
logger.setLevel(getattr(logging, DP_LOG_LEVEL.upper(), logging.INFO))
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

api_logger = logging.getLogger("dsarpilot.api")


# =============================================================================
# Shared State
# =============================================================================

config_loader = TenantConfigLoader()
store = InMemoryStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load tenant configurations on startup."""
    if DP_CONFIG_DIR:
        loaded = config_loader.load_directory(DP_CONFIG_DIR)
        api_logger.info(f"Tenant configurations loaded: {loaded}")
    else:
        api_logger.info("DP_CONFIG_DIR not set, using default SLA configuration")

    # Share loader and store with routes
    deadlines.set_loader(config_loader)
    risk.set_loader(config_loader)
    reconcile.set_store(store, config_loader)

    yield

    api_logger.info("DSARPilot shutting down")


# Create app
app = FastAPI(
    title="DSARPilot API",
    description="""
**GDPR DSAR case lifecycle and deadline SLA engine.**

Validates case status transitions, computes legal and effective due dates,
classifies deadline risk and raises escalations when risk changes.

## Quick Start

1. `GET /transitions/NEW` - See where a new case can go
2. `POST /deadlines/preview` - Compute due dates for a received date
3. `POST /risk/preview` - Classify a case state
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(transitions.router)
app.include_router(deadlines.router)
app.include_router(risk.router)
app.include_router(reconcile.router)


# =============================================================================
# Error Handling
# =============================================================================

def status_code_for(exc: DSARPilotError) -> int:
    """HTTP status for a domain error; validation-type errors are 400."""
    if isinstance(exc, (CaseNotFoundError, DeadlineNotFoundError)):
        return 404
    if isinstance(exc, (DeadlineAlreadyInitializedError, ConcurrentUpdateError)):
        return 409
    if exc.code == "DP_INTERNAL_ERROR":
        return 500
    return 400


@app.exception_handler(DSARPilotError)
async def dsarpilot_error_handler(request: Request, exc: DSARPilotError):
    api_logger.warning(exc.message, extra={"error_code": exc.code, "case_id": exc.case_id})
    return JSONResponse(status_code=status_code_for(exc), content=exc.to_dict())


@app.get("/health", tags=["Health"])
async def health():
    """Health check endpoint."""
    return {
        "healthy": True,
        "version": __version__,
        "tenants_loaded": len(config_loader.list_tenants()),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
