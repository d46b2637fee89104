"""
DSARPilot Deadline Calculator

Computes legal due dates, effective due dates and remaining-day counts for
DSAR cases.

GDPR Art. 12: respond within one month of receipt; the controller may
extend by up to two further months for complex or numerous requests.

Key features:
- Calendar-day or business-day counting
- Holiday exclusion in business-day mode (any HolidayCalendar or date set)
- Tenant timezone decides which local date a timestamp falls on
- Extension validation against the tenant cap
- Paused-clock accounting

Everything here is pure date arithmetic: no I/O, no logging, no raising
over well-typed inputs (validate_extension reports, it does not raise).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from ..calendars import HolidayCalendar, HolidaySource, NoHolidayCalendar, as_calendar
from ..exceptions import InvalidExtensionError
from ..models import SlaConfig


ONE_DAY = timedelta(days=1)


def _ceil_days(delta: timedelta) -> int:
    """ceil(delta / 1 day) without float rounding."""
    return -((-delta) // ONE_DAY)


def _now_for(reference: datetime) -> datetime:
    """Current time, aware or naive to match the reference."""
    now = datetime.now(timezone.utc)
    if reference.tzinfo is None:
        return now.replace(tzinfo=None)
    return now


# =============================================================================
# Extension Validation
# =============================================================================

@dataclass(frozen=True)
class ExtensionValidation:
    """
    Outcome of an extension request check.

    Carries all three contributing numbers so the caller can render an
    exact message.
    """
    valid: bool
    requested_days: int
    existing_extension_days: int
    max_extension_days: int
    error: Optional[str] = None

    @property
    def total_after(self) -> int:
        return self.existing_extension_days + self.requested_days

    def to_details(self) -> dict[str, int]:
        return {
            "requested_days": self.requested_days,
            "existing_extension_days": self.existing_extension_days,
            "max_extension_days": self.max_extension_days,
        }

    def raise_for_invalid(self, case_id: Optional[str] = None) -> None:
        """Raise InvalidExtensionError if the request was rejected."""
        if not self.valid:
            raise InvalidExtensionError(
                message=self.error or "Invalid extension request",
                details=self.to_details(),
                case_id=case_id,
            )


def validate_extension(
    requested_days: int,
    existing_extension_days: Optional[int],
    max_extension_days: int,
) -> ExtensionValidation:
    """
    Validate an extension request.

    Rejects non-positive requests and requests that would push the
    cumulative extension above the cap. Reaching the cap exactly is valid.

    Args:
        requested_days: Additional days requested
        existing_extension_days: Extension already granted (None means 0)
        max_extension_days: Tenant cap on cumulative extension

    Returns:
        ExtensionValidation
    """
    existing = existing_extension_days or 0
    total_after = existing + requested_days

    if requested_days <= 0:
        return ExtensionValidation(
            valid=False,
            requested_days=requested_days,
            existing_extension_days=existing,
            max_extension_days=max_extension_days,
            error="Extension days must be positive",
        )

    if total_after > max_extension_days:
        return ExtensionValidation(
            valid=False,
            requested_days=requested_days,
            existing_extension_days=existing,
            max_extension_days=max_extension_days,
            error=(
                f"Extension would exceed maximum of {max_extension_days} days "
                f"(current: {existing}, requested: {requested_days})"
            ),
        )

    return ExtensionValidation(
        valid=True,
        requested_days=requested_days,
        existing_extension_days=existing,
        max_extension_days=max_extension_days,
    )


# =============================================================================
# Deadline Calculator
# =============================================================================

@dataclass
class DeadlineCalculator:
    """
    Calculates DSAR deadlines over a holiday calendar.

    Calendar-day offsets are plain `timedelta` additions with no calendar
    awareness. Business-day offsets walk forward one day at a time and
    never count the start date.

    When `tz` is set, business-day stepping happens on that zone's wall
    clock and the result is expressed in that zone, so weekend and holiday
    checks see the tenant's local date.

    Usage:
        calculator = DeadlineCalculator.for_config(config, holidays)

        legal_due_at = calculator.calculate_legal_due_date(received_at, config)
        effective = calculator.compute_effective_due_date(
            legal_due_at, extension_days=15, total_paused_days=0,
            use_business_days=config.use_business_days,
        )
        remaining = calculator.calculate_days_remaining(effective)
    """

    # Calendar for holiday checks in business-day mode
    calendar: HolidayCalendar = field(default_factory=NoHolidayCalendar)

    # Tenant timezone (None = use timestamps as given)
    tz: Optional[tzinfo] = None

    @classmethod
    def for_config(
        cls,
        config: SlaConfig,
        holidays: HolidaySource = None,
    ) -> DeadlineCalculator:
        """Build a calculator for a tenant's configuration and holidays."""
        return cls(calendar=as_calendar(holidays), tz=ZoneInfo(config.timezone))

    # -------------------------------------------------------------------------
    # Day classification
    # -------------------------------------------------------------------------

    def local_date(self, moment: datetime) -> date:
        """The tenant-local calendar date of a timestamp."""
        if self.tz is not None and moment.tzinfo is not None:
            return moment.astimezone(self.tz).date()
        return moment.date()

    def is_business_day(self, d: date) -> bool:
        """Check if a date is a business day under the calendar's weekend and holidays."""
        return self.calendar.is_business_day(d)

    # -------------------------------------------------------------------------
    # Day addition
    # -------------------------------------------------------------------------

    def add_business_days(self, start: datetime, days: int) -> datetime:
        """
        Add business days, skipping weekends and holidays.

        Args:
            start: Starting timestamp (its date is never counted)
            days: Business days to add (zero or less returns start)

        Returns:
            Timestamp on the last counted business day, same wall-clock time
        """
        if days <= 0:
            return start

        current = start
        if self.tz is not None and start.tzinfo is not None:
            current = start.astimezone(self.tz)

        remaining = days
        while remaining > 0:
            current += ONE_DAY
            if self.is_business_day(current.date()):
                remaining -= 1

        return current

    def count_business_days(self, start: datetime, end: datetime) -> int:
        """
        Count business days in (start, end], by tenant-local date.

        Exact inverse of add_business_days for positive counts.
        """
        start_day = self.local_date(start)
        end_day = self.local_date(end)
        if start_day >= end_day:
            return 0

        count = 0
        current = start_day + ONE_DAY
        while current <= end_day:
            if self.is_business_day(current):
                count += 1
            current += ONE_DAY

        return count

    def add_days(self, start: datetime, days: int, use_business_days: bool) -> datetime:
        """Add days using the configured counting mode."""
        if use_business_days:
            return self.add_business_days(start, days)
        return add_calendar_days(start, days)

    # -------------------------------------------------------------------------
    # Due dates
    # -------------------------------------------------------------------------

    def calculate_legal_due_date(self, received_at: datetime, config: SlaConfig) -> datetime:
        """
        Calculate the legal due date from the received date.

        Computed once at intake; never recalculated afterwards.
        """
        return self.add_days(
            received_at,
            config.initial_deadline_days,
            config.use_business_days,
        )

    def compute_effective_due_date(
        self,
        legal_due_at: datetime,
        extension_days: Optional[int] = None,
        total_paused_days: Optional[int] = None,
        use_business_days: bool = False,
    ) -> datetime:
        """
        Compute the effective due date considering extensions and pauses.

        Extension days are applied first, then paused days, each with the
        same day-addition rule. The result is never before legal_due_at.
        """
        effective = legal_due_at

        if extension_days and extension_days > 0:
            effective = self.add_days(effective, extension_days, use_business_days)

        if total_paused_days and total_paused_days > 0:
            effective = self.add_days(effective, total_paused_days, use_business_days)

        return effective

    # -------------------------------------------------------------------------
    # Remaining time
    # -------------------------------------------------------------------------

    def calculate_days_remaining(
        self,
        effective_due_at: datetime,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Whole days remaining until the effective due date, rounded up.

        A negative result means overdue by that many days.
        """
        current = now if now is not None else _now_for(effective_due_at)
        return _ceil_days(effective_due_at - current)

    def calculate_paused_days(
        self,
        paused_at: datetime,
        resumed_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Days a clock has been paused, rounded up, never negative.

        Args:
            paused_at: Start of the pause
            resumed_at: End of the pause (None = still paused, use now)
            now: Override for the current time
        """
        end = resumed_at
        if end is None:
            end = now if now is not None else _now_for(paused_at)
        return max(0, _ceil_days(end - paused_at))


# =============================================================================
# Convenience Functions
# =============================================================================

def add_calendar_days(start: datetime, days: int) -> datetime:
    """Plain date offset; no weekend or holiday awareness."""
    return start + timedelta(days=days)


def add_business_days(
    start: datetime,
    days: int,
    holidays: HolidaySource = None,
) -> datetime:
    """
    Add business days to a timestamp.

    Convenience function that creates a temporary calculator.
    """
    return DeadlineCalculator(calendar=as_calendar(holidays)).add_business_days(start, days)


def count_business_days(
    start: datetime,
    end: datetime,
    holidays: HolidaySource = None,
) -> int:
    """Count business days in (start, end]."""
    return DeadlineCalculator(calendar=as_calendar(holidays)).count_business_days(start, end)


def is_weekend(d: date) -> bool:
    return NoHolidayCalendar().is_weekend(d)


def is_holiday(d: date, holidays: HolidaySource = None) -> bool:
    return as_calendar(holidays).is_holiday(d)


def is_business_day(d: date, holidays: HolidaySource = None) -> bool:
    return DeadlineCalculator(calendar=as_calendar(holidays)).is_business_day(d)


def calculate_legal_due_date(
    received_at: datetime,
    config: SlaConfig,
    holidays: HolidaySource = None,
) -> datetime:
    """Calculate the legal due date from the received date."""
    calc = DeadlineCalculator(calendar=as_calendar(holidays))
    return calc.calculate_legal_due_date(received_at, config)


def compute_effective_due_date(
    legal_due_at: datetime,
    extension_days: Optional[int] = None,
    total_paused_days: Optional[int] = None,
    use_business_days: bool = False,
    holidays: HolidaySource = None,
) -> datetime:
    """Compute the effective due date considering extensions and pauses."""
    calc = DeadlineCalculator(calendar=as_calendar(holidays))
    return calc.compute_effective_due_date(
        legal_due_at,
        extension_days=extension_days,
        total_paused_days=total_paused_days,
        use_business_days=use_business_days,
    )


def calculate_days_remaining(
    effective_due_at: datetime,
    now: Optional[datetime] = None,
) -> int:
    """Days remaining until the effective due date (negative = overdue)."""
    return DeadlineCalculator().calculate_days_remaining(effective_due_at, now)


def calculate_paused_days(
    paused_at: datetime,
    resumed_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> int:
    """Days between pause start and resume (or now), never negative."""
    return DeadlineCalculator().calculate_paused_days(paused_at, resumed_at, now)
