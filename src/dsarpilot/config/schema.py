"""
DSARPilot Tenant Configuration Schemas

Pydantic models for validating tenant SLA configuration YAML/JSON files.

These schemas map to the domain models in dsarpilot.models (SlaConfig) and
dsarpilot.calendars (holiday calendars).

Schema versioning:
- schema_version field tracks breaking changes
- Loaders reject files whose major version differs
"""
from __future__ import annotations

import datetime
from typing import Any, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

RecipientRoleValue = Literal[
    "SUPER_ADMIN", "TENANT_ADMIN", "DPO", "CASE_MANAGER",
    "ANALYST", "AUDITOR", "CONTRIBUTOR", "READ_ONLY",
]

HolidayCalendarValue = Literal["none", "germany"]


# =============================================================================
# SLA Settings
# =============================================================================

class SlaSchema(BaseModel):
    """SLA settings block of a tenant file; every field has the GDPR default."""
    initial_deadline_days: int = Field(30, ge=1, description="Days from receipt to legal due date")
    extension_max_days: int = Field(60, ge=0, description="Cap on cumulative extension")
    use_business_days: bool = Field(False, description="Count business days instead of calendar days")
    timezone: str = Field("Europe/Berlin", description="IANA timezone of the tenant")

    yellow_threshold_days: int = Field(14, ge=0)
    red_threshold_days: int = Field(7, ge=0)

    milestone_idv_days: int = Field(7, ge=0)
    milestone_collection_days: int = Field(14, ge=0)
    milestone_draft_days: int = Field(21, ge=0)
    milestone_legal_days: int = Field(25, ge=0)

    escalation_yellow_roles: list[RecipientRoleValue] = Field(
        default_factory=lambda: ["DPO", "CASE_MANAGER"]
    )
    escalation_red_roles: list[RecipientRoleValue] = Field(
        default_factory=lambda: ["TENANT_ADMIN", "DPO"]
    )
    escalation_overdue_roles: list[RecipientRoleValue] = Field(
        default_factory=lambda: ["TENANT_ADMIN", "DPO"]
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @model_validator(mode="after")
    def validate_thresholds(self) -> "SlaSchema":
        if self.red_threshold_days > self.yellow_threshold_days:
            raise ValueError(
                "red_threshold_days must not exceed yellow_threshold_days "
                f"({self.red_threshold_days} > {self.yellow_threshold_days})"
            )
        return self

    model_config = {
        "extra": "forbid",
    }


class HolidaySchema(BaseModel):
    """A tenant-specific non-working day."""
    date: datetime.date
    name: Optional[str] = None

    model_config = {
        "extra": "forbid",
    }


# =============================================================================
# Top-level Tenant Schema
# =============================================================================

class TenantConfigSchema(BaseModel):
    """
    Top-level schema for a tenant configuration file.

    `holiday_calendar` selects a built-in public-holiday calendar; `holidays`
    adds tenant dates on top of it.
    """
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    tenant_id: str = Field(..., min_length=1)
    name: Optional[str] = None

    sla: SlaSchema = Field(default_factory=SlaSchema)
    holiday_calendar: HolidayCalendarValue = "none"
    holidays: list[HolidaySchema] = Field(default_factory=list)

    model_config = {
        "extra": "forbid",
    }


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_tenant_config(data: dict[str, Any]) -> TenantConfigSchema:
    """
    Validate a tenant configuration dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return TenantConfigSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """True when the file's major schema version matches ours."""
    file_version = str(data.get("schema_version", SCHEMA_VERSION))
    return file_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
