"""
DSARPilot Configuration

Tenant SLA configuration files: pydantic schemas and the YAML/JSON loader.

Usage:
    from dsarpilot.config import load_tenant_config

    tenant = load_tenant_config("config/tenants/acme-de.yaml")
    service = DeadlineService.for_config(tenant.sla, tenant.calendar)
"""
from __future__ import annotations

from .loader import (
    TenantConfig,
    TenantConfigLoader,
    load_tenant_config,
    load_tenant_config_from_string,
)
from .schema import (
    SCHEMA_VERSION,
    HolidaySchema,
    SlaSchema,
    TenantConfigSchema,
    check_schema_version,
    validate_tenant_config,
)

__all__ = [
    # Loader
    "TenantConfig",
    "TenantConfigLoader",
    "load_tenant_config",
    "load_tenant_config_from_string",
    # Schemas
    "SCHEMA_VERSION",
    "HolidaySchema",
    "SlaSchema",
    "TenantConfigSchema",
    "check_schema_version",
    "validate_tenant_config",
]
