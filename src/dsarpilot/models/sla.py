"""
DSARPilot SLA Configuration Models

Per-tenant service-level settings for the GDPR Art. 12 response window.

Defaults follow the regulation: respond within 30 calendar days of receipt,
extendable by up to 60 further days for complex or numerous requests.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .enums import EscalationSeverity, MilestoneType, RecipientRole


DEFAULT_YELLOW_ROLES: tuple[str, ...] = (
    RecipientRole.DPO.value,
    RecipientRole.CASE_MANAGER.value,
)
DEFAULT_RED_ROLES: tuple[str, ...] = (
    RecipientRole.TENANT_ADMIN.value,
    RecipientRole.DPO.value,
)
DEFAULT_OVERDUE_ROLES: tuple[str, ...] = DEFAULT_RED_ROLES


@dataclass(frozen=True)
class RiskConfig:
    """Day thresholds used by the risk classifier (both inclusive)."""
    yellow_threshold_days: int = 14
    red_threshold_days: int = 7


@dataclass(frozen=True)
class SlaConfig:
    """
    Tenant SLA configuration.

    Attributes:
        initial_deadline_days: Days from receipt to the legal due date
        extension_max_days: Cap on cumulative extension
        use_business_days: Count business days instead of calendar days
        timezone: IANA zone used to decide which local date a timestamp is on
        yellow_threshold_days: Days remaining at or below which risk is YELLOW
        red_threshold_days: Days remaining at or below which risk is RED
        milestone_*_days: Calendar offsets from receipt for each milestone
        escalation_*_roles: Recipient roles per escalation severity
    """
    initial_deadline_days: int = 30
    extension_max_days: int = 60
    use_business_days: bool = False
    timezone: str = "Europe/Berlin"
    yellow_threshold_days: int = 14
    red_threshold_days: int = 7
    milestone_idv_days: int = 7
    milestone_collection_days: int = 14
    milestone_draft_days: int = 21
    milestone_legal_days: int = 25
    escalation_yellow_roles: tuple[str, ...] = field(default=DEFAULT_YELLOW_ROLES)
    escalation_red_roles: tuple[str, ...] = field(default=DEFAULT_RED_ROLES)
    escalation_overdue_roles: tuple[str, ...] = field(default=DEFAULT_OVERDUE_ROLES)

    def risk_config(self) -> RiskConfig:
        return RiskConfig(
            yellow_threshold_days=self.yellow_threshold_days,
            red_threshold_days=self.red_threshold_days,
        )

    def milestone_offsets(self) -> dict[MilestoneType, int]:
        """Calendar-day offset from receipt for each milestone, in order."""
        return {
            MilestoneType.IDV: self.milestone_idv_days,
            MilestoneType.COLLECTION: self.milestone_collection_days,
            MilestoneType.DRAFT: self.milestone_draft_days,
            MilestoneType.LEGAL: self.milestone_legal_days,
        }

    def roles_for(self, severity: EscalationSeverity) -> list[str]:
        """Recipient roles configured for an escalation severity."""
        if severity == EscalationSeverity.YELLOW_WARNING:
            return list(self.escalation_yellow_roles)
        if severity == EscalationSeverity.RED_ALERT:
            return list(self.escalation_red_roles)
        return list(self.escalation_overdue_roles)

    def with_overrides(self, **overrides: Any) -> SlaConfig:
        """Copy with some fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_SLA_CONFIG = SlaConfig()
DEFAULT_RISK_CONFIG = DEFAULT_SLA_CONFIG.risk_config()
