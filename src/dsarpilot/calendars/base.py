"""
DSARPilot Holiday Calendar Base

Holiday calendars decide which dates are non-working for business-day
deadline counting. Stepping over dates is done by the deadline calculator
on the tenant's wall clock; a calendar only classifies single dates.

Tenants either maintain their own dates (FixedHolidayCalendar) or use a
built-in jurisdiction calendar, optionally topped up with extra dates.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Protocol, Union, runtime_checkable


@runtime_checkable
class HolidayCalendar(Protocol):
    """Anything that can classify a date as holiday and as business day."""

    def is_holiday(self, d: date) -> bool:
        ...

    def is_business_day(self, d: date) -> bool:
        """A weekday that is not a holiday."""
        ...


@dataclass
class BaseCalendar(ABC):
    """
    Weekend handling shared by all calendars.

    Subclasses implement `is_holiday()`; weekends come from `weekend_days`
    (0=Monday, 6=Sunday).
    """

    weekend_days: frozenset[int] = field(default_factory=lambda: frozenset({5, 6}))

    @abstractmethod
    def is_holiday(self, d: date) -> bool:
        ...

    def is_weekend(self, d: date) -> bool:
        return d.weekday() in self.weekend_days

    def is_business_day(self, d: date) -> bool:
        return not (self.is_weekend(d) or self.is_holiday(d))


@dataclass
class NoHolidayCalendar(BaseCalendar):
    """Weekends only."""

    def is_holiday(self, d: date) -> bool:
        return False


@dataclass
class FixedHolidayCalendar(BaseCalendar):
    """Tenant-maintained list of non-working dates."""

    holidays: frozenset[date] = field(default_factory=frozenset)

    def is_holiday(self, d: date) -> bool:
        return d in self.holidays

    @classmethod
    def from_dates(cls, *dates: date) -> FixedHolidayCalendar:
        return cls(holidays=frozenset(dates))


HolidaySource = Union[HolidayCalendar, Iterable[date], None]


def as_calendar(holidays: HolidaySource = None) -> HolidayCalendar:
    """
    Normalize a holiday argument into a calendar.

    Accepts an existing calendar, any iterable of dates, or None
    (weekends only).
    """
    if holidays is None:
        return NoHolidayCalendar()
    if isinstance(holidays, HolidayCalendar):
        return holidays
    return FixedHolidayCalendar(holidays=frozenset(holidays))


def combine_calendars(
    primary: HolidayCalendar,
    extra_dates: Optional[Iterable[date]] = None,
) -> HolidayCalendar:
    """Calendar that treats a day as a holiday if either source does."""
    extra = frozenset(extra_dates or ())
    if not extra:
        return primary
    return _UnionCalendar(primary=primary, extra=extra)


@dataclass
class _UnionCalendar(BaseCalendar):
    primary: HolidayCalendar = field(default_factory=NoHolidayCalendar)
    extra: frozenset[date] = field(default_factory=frozenset)

    def is_holiday(self, d: date) -> bool:
        return d in self.extra or self.primary.is_holiday(d)

    def is_business_day(self, d: date) -> bool:
        # Weekends are whatever the primary calendar says they are
        return d not in self.extra and self.primary.is_business_day(d)
