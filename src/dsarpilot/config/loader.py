"""
DSARPilot Tenant Configuration Loader

Loads and validates tenant SLA configuration from YAML or JSON files.

Converts Pydantic schema models to DSARPilot domain models.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..calendars import (
    FixedHolidayCalendar,
    GermanyCalendar,
    HolidayCalendar,
    NoHolidayCalendar,
    combine_calendars,
)
from ..exceptions import ConfigLoadError, ConfigValidationError
from ..models import DEFAULT_SLA_CONFIG, SlaConfig
from .schema import (
    SCHEMA_VERSION,
    SlaSchema,
    TenantConfigSchema,
    check_schema_version,
    validate_tenant_config,
)


logger = logging.getLogger(__name__)


@dataclass
class TenantConfig:
    """A tenant's SLA settings and the holiday calendar they count against."""
    tenant_id: str
    sla: SlaConfig = field(default_factory=lambda: DEFAULT_SLA_CONFIG)
    calendar: HolidayCalendar = field(default_factory=NoHolidayCalendar)
    name: Optional[str] = None


# =============================================================================
# Schema → Domain Conversion
# =============================================================================

def _convert_sla(schema: SlaSchema) -> SlaConfig:
    return SlaConfig(
        initial_deadline_days=schema.initial_deadline_days,
        extension_max_days=schema.extension_max_days,
        use_business_days=schema.use_business_days,
        timezone=schema.timezone,
        yellow_threshold_days=schema.yellow_threshold_days,
        red_threshold_days=schema.red_threshold_days,
        milestone_idv_days=schema.milestone_idv_days,
        milestone_collection_days=schema.milestone_collection_days,
        milestone_draft_days=schema.milestone_draft_days,
        milestone_legal_days=schema.milestone_legal_days,
        escalation_yellow_roles=tuple(schema.escalation_yellow_roles),
        escalation_red_roles=tuple(schema.escalation_red_roles),
        escalation_overdue_roles=tuple(schema.escalation_overdue_roles),
    )


def _convert_calendar(schema: TenantConfigSchema) -> HolidayCalendar:
    extra_dates = [h.date for h in schema.holidays]
    if schema.holiday_calendar == "germany":
        return combine_calendars(GermanyCalendar(), extra_dates)
    if extra_dates:
        return FixedHolidayCalendar(holidays=frozenset(extra_dates))
    return NoHolidayCalendar()


def _convert_tenant_config(schema: TenantConfigSchema) -> TenantConfig:
    return TenantConfig(
        tenant_id=schema.tenant_id,
        sla=_convert_sla(schema.sla),
        calendar=_convert_calendar(schema),
        name=schema.name,
    )


def _parse(data: Any, source: str) -> TenantConfig:
    if not isinstance(data, dict):
        raise ConfigValidationError(
            message="Tenant configuration must be a mapping",
            details={"path": source},
        )

    if not check_schema_version(data):
        file_version = data.get("schema_version", "unknown")
        raise ConfigValidationError(
            message=f"Schema version mismatch: file has {file_version}, expected {SCHEMA_VERSION}",
            details={
                "path": source,
                "file_version": file_version,
                "expected_version": SCHEMA_VERSION,
            },
        )

    try:
        schema = validate_tenant_config(data)
    except ValidationError as e:
        raise ConfigValidationError(
            message=f"Tenant configuration validation failed: {e.error_count()} errors",
            details={
                "errors": [
                    {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                    for err in e.errors()
                ],
                "path": source,
            },
        )

    return _convert_tenant_config(schema)


# =============================================================================
# Loader
# =============================================================================

class TenantConfigLoader:
    """
    Loads tenant configuration files and caches them by tenant.

    Usage:
        loader = TenantConfigLoader()
        tenant = loader.load("config/tenants/acme.yaml")
        config = loader.get_config("acme")   # SlaConfig, default if unknown
    """

    def __init__(self):
        self._tenants: dict[str, TenantConfig] = {}

    def load(self, path: Union[str, Path]) -> TenantConfig:
        """
        Load a tenant configuration from a file.

        Raises:
            ConfigLoadError: If the file cannot be read or parsed
            ConfigValidationError: If validation fails
        """
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigLoadError(
                message=f"Failed to load tenant configuration: {e}",
                details={"path": str(path), "error": str(e)},
            )

        tenant = _parse(data, str(path))
        self._tenants[tenant.tenant_id] = tenant
        logger.info("Loaded tenant configuration %s from %s", tenant.tenant_id, path)
        return tenant

    def load_directory(self, directory: Union[str, Path]) -> int:
        """Load every .yaml/.yml/.json file in a directory; returns the count."""
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigLoadError(
                message=f"Configuration directory not found: {directory}",
                details={"path": str(directory)},
            )

        loaded = 0
        for path in sorted(directory.iterdir()):
            if path.suffix.lower() in {".yaml", ".yml", ".json"}:
                self.load(path)
                loaded += 1
        return loaded

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def get_tenant(self, tenant_id: str) -> Optional[TenantConfig]:
        return self._tenants.get(tenant_id)

    def get_config(self, tenant_id: str) -> SlaConfig:
        """SLA config for a tenant, falling back to the defaults."""
        tenant = self._tenants.get(tenant_id)
        return tenant.sla if tenant else DEFAULT_SLA_CONFIG

    def get_calendar(self, tenant_id: str) -> HolidayCalendar:
        tenant = self._tenants.get(tenant_id)
        return tenant.calendar if tenant else NoHolidayCalendar()

    def list_tenants(self) -> list[str]:
        return list(self._tenants.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_tenant_config(path: Union[str, Path]) -> TenantConfig:
    """Load a tenant configuration file with a temporary loader."""
    return TenantConfigLoader().load(path)


def load_tenant_config_from_string(content: str, format: str = "yaml") -> TenantConfig:
    """
    Load a tenant configuration from a string.

    Raises:
        ConfigLoadError: If the content cannot be parsed
        ConfigValidationError: If validation fails
    """
    try:
        if format.lower() == "json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigLoadError(
            message=f"Failed to parse tenant configuration: {e}",
            details={"format": format, "error": str(e)},
        )
    return _parse(data, "<string>")
