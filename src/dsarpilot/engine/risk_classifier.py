"""
DSARPilot Risk Classifier

Derives a deadline risk level and human-readable reasons for a case.

Risk levels:
    GREEN:  more than yellow_threshold_days remaining, no blockers
    YELLOW: at most yellow_threshold_days remaining, OR one milestone
            overdue, OR extension notification still pending
    RED:    at most red_threshold_days remaining, OR legal deadline
            overdue, OR more than one milestone overdue

Closed cases and paused clocks are always GREEN.

Each rule is an independent check producing zero or more findings. The
result level is the highest finding level and the reasons are the finding
reasons in rule order, so a later rule can never lower an earlier level.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence

from ..models import DEFAULT_RISK_CONFIG, RiskConfig, RiskLevel


class MilestoneLike(Protocol):
    """Anything carrying a milestone's type and dates."""
    type: Any
    planned_due_at: datetime
    completed_at: Optional[datetime]


@dataclass
class RiskInput:
    """
    Current state of a case as seen by the classifier.

    Attributes:
        days_remaining: Days until the effective due date (negative = overdue)
        is_overdue: Legal deadline has passed
        is_paused: Clock is paused
        extension_pending: Extension applied but notification not yet sent
        milestones: Milestones of the case, fully materialised
        is_closed: Case is CLOSED or REJECTED
        now: Reference time for milestone checks (defaults to current UTC;
             naive timestamps here and on milestones are read as UTC)
    """
    days_remaining: int
    is_overdue: bool = False
    is_paused: bool = False
    extension_pending: bool = False
    milestones: Sequence[MilestoneLike] = field(default_factory=list)
    is_closed: bool = False
    now: Optional[datetime] = None


@dataclass(frozen=True)
class RiskFinding:
    """One rule's contribution: the minimum level it demands and why."""
    level: RiskLevel
    reason: str


@dataclass(frozen=True)
class RiskResult:
    """Computed risk level and the reasons behind it."""
    level: RiskLevel
    reasons: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level.value, "reasons": list(self.reasons)}


RiskRule = Callable[[RiskInput, RiskConfig, datetime], list[RiskFinding]]


def _milestone_label(milestone: MilestoneLike) -> str:
    kind = milestone.type
    return kind.value if isinstance(kind, Enum) else str(kind)


def _as_utc(moment: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# =============================================================================
# Rules
# =============================================================================

def check_legal_overdue(risk_input: RiskInput, config: RiskConfig, now: datetime) -> list[RiskFinding]:
    if risk_input.is_overdue:
        return [RiskFinding(RiskLevel.RED, "Legal deadline overdue")]
    return []


def check_days_remaining(risk_input: RiskInput, config: RiskConfig, now: datetime) -> list[RiskFinding]:
    # Overdue is already reported as such
    if risk_input.is_overdue:
        return []

    days = risk_input.days_remaining
    if days <= config.red_threshold_days:
        return [RiskFinding(
            RiskLevel.RED,
            f"Only {days} day(s) remaining (red threshold: {config.red_threshold_days})",
        )]
    if days <= config.yellow_threshold_days:
        return [RiskFinding(
            RiskLevel.YELLOW,
            f"{days} day(s) remaining (yellow threshold: {config.yellow_threshold_days})",
        )]
    return []


def check_milestones(risk_input: RiskInput, config: RiskConfig, now: datetime) -> list[RiskFinding]:
    now = _as_utc(now)
    overdue = [
        m for m in risk_input.milestones
        if m.completed_at is None and _as_utc(m.planned_due_at) < now
    ]

    if len(overdue) > 1:
        labels = ", ".join(_milestone_label(m) for m in overdue)
        return [RiskFinding(RiskLevel.RED, f"{len(overdue)} milestones overdue: {labels}")]
    if len(overdue) == 1:
        return [RiskFinding(RiskLevel.YELLOW, f"Milestone overdue: {_milestone_label(overdue[0])}")]
    return []


def check_extension_pending(risk_input: RiskInput, config: RiskConfig, now: datetime) -> list[RiskFinding]:
    if risk_input.extension_pending:
        return [RiskFinding(RiskLevel.YELLOW, "Extension notification pending")]
    return []


DEFAULT_RULES: tuple[RiskRule, ...] = (
    check_legal_overdue,
    check_days_remaining,
    check_milestones,
    check_extension_pending,
)


# =============================================================================
# Classifier
# =============================================================================

@dataclass
class RiskClassifier:
    """
    Classifies case deadline risk.

    Usage:
        classifier = RiskClassifier()
        result = classifier.compute_risk(
            RiskInput(days_remaining=5, milestones=milestones),
            RiskConfig(yellow_threshold_days=14, red_threshold_days=7),
        )
        print(result.level, result.reasons)
    """

    config: RiskConfig = field(default_factory=lambda: DEFAULT_RISK_CONFIG)
    rules: tuple[RiskRule, ...] = DEFAULT_RULES

    def compute_risk(
        self,
        risk_input: RiskInput,
        config: Optional[RiskConfig] = None,
    ) -> RiskResult:
        """
        Compute the risk level and reasons for a case.

        Args:
            risk_input: Current case state
            config: Threshold override (defaults to the classifier's config)

        Returns:
            RiskResult with reasons in the order the checks fired
        """
        if risk_input.is_closed:
            return RiskResult(RiskLevel.GREEN, ("Case is closed",))

        if risk_input.is_paused:
            return RiskResult(RiskLevel.GREEN, ("Clock is paused",))

        thresholds = config or self.config
        now = risk_input.now or datetime.now(timezone.utc)

        findings = [
            finding
            for rule in self.rules
            for finding in rule(risk_input, thresholds, now)
        ]

        if not findings:
            return RiskResult(RiskLevel.GREEN, ("On track",))

        level = max((f.level for f in findings), key=lambda lvl: lvl.rank)
        return RiskResult(level, tuple(f.reason for f in findings))


def compute_risk(
    risk_input: RiskInput,
    config: Optional[RiskConfig] = None,
) -> RiskResult:
    """
    Compute the risk level for a case.

    Convenience function that creates a temporary classifier.
    """
    return RiskClassifier().compute_risk(risk_input, config)
