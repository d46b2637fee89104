"""
DSARPilot Calendars

Holiday calendars for business-day deadline calculations.

Provides:
- HolidayCalendar protocol for custom implementations
- BaseCalendar with configurable weekend days
- FixedHolidayCalendar for tenant-maintained holiday lists
- GermanyCalendar for nationwide German public holidays

Usage:
    from dsarpilot.calendars import FixedHolidayCalendar, GermanyCalendar

    tenant_calendar = FixedHolidayCalendar.from_dates(date(2026, 5, 1))
    tenant_calendar.is_business_day(date(2026, 5, 1))  # False
"""
from __future__ import annotations

from .base import (
    BaseCalendar,
    FixedHolidayCalendar,
    HolidayCalendar,
    HolidaySource,
    NoHolidayCalendar,
    as_calendar,
    combine_calendars,
)
from .germany import (
    GERMANY_CALENDAR,
    GermanyCalendar,
    get_german_holidays,
    is_german_holiday,
)

__all__ = [
    # Protocols and base classes
    "HolidayCalendar",
    "HolidaySource",
    "BaseCalendar",
    "NoHolidayCalendar",
    "FixedHolidayCalendar",
    "as_calendar",
    "combine_calendars",
    # Germany
    "GermanyCalendar",
    "GERMANY_CALENDAR",
    "get_german_holidays",
    "is_german_holiday",
]
