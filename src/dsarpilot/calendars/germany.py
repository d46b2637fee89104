"""
Germany Public Holiday Calendar

Implements the nationwide German public holidays for business day
calculations. Tenants default to the Europe/Berlin timezone.

Nationwide holidays:
- New Year's Day (January 1)
- Good Friday (Friday before Easter Sunday)
- Easter Monday (day after Easter Sunday)
- Labour Day (May 1)
- Ascension Day (39 days after Easter Sunday)
- Whit Monday (50 days after Easter Sunday)
- German Unity Day (October 3)
- Christmas Day (December 25)
- Second Day of Christmas (December 26)

There is no weekend substitution: a holiday falling on a Saturday or
Sunday is simply lost.

State holidays (Epiphany, Corpus Christi, Reformation Day, ...) are added
per tenant through `extra_holidays`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from functools import lru_cache
from typing import Optional

from .base import BaseCalendar


def _calculate_easter(year: int) -> date:
    """
    Calculate Easter Sunday using the Anonymous Gregorian algorithm.
    """
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


@dataclass
class GermanyCalendar(BaseCalendar):
    """
    German nationwide public holiday calendar.

    Attributes:
        extra_holidays: Additional (state or company) holiday dates
    """

    extra_holidays: frozenset[date] = field(default_factory=frozenset)

    # Cache for computed holidays
    _holiday_cache: dict[int, dict[date, str]] = field(default_factory=dict, repr=False)

    def _compute_holidays_for_year(self, year: int) -> dict[date, str]:
        easter = _calculate_easter(year)
        return {
            date(year, 1, 1): "Neujahr",
            easter - timedelta(days=2): "Karfreitag",
            easter + timedelta(days=1): "Ostermontag",
            date(year, 5, 1): "Tag der Arbeit",
            easter + timedelta(days=39): "Christi Himmelfahrt",
            easter + timedelta(days=50): "Pfingstmontag",
            date(year, 10, 3): "Tag der Deutschen Einheit",
            date(year, 12, 25): "1. Weihnachtstag",
            date(year, 12, 26): "2. Weihnachtstag",
        }

    def _get_holidays_for_year(self, year: int) -> dict[date, str]:
        if year not in self._holiday_cache:
            self._holiday_cache[year] = self._compute_holidays_for_year(year)
        return self._holiday_cache[year]

    def is_holiday(self, d: date) -> bool:
        """Check if a date is a German public holiday."""
        return d in self.extra_holidays or d in self._get_holidays_for_year(d.year)

    def get_holiday_name(self, d: date) -> Optional[str]:
        """Name of the holiday on a date, None otherwise."""
        name = self._get_holidays_for_year(d.year).get(d)
        if name is None and d in self.extra_holidays:
            return "Additional holiday"
        return name

    def get_holidays_for_year(self, year: int) -> list[tuple[date, str]]:
        """All nationwide holidays for a year as (date, name), sorted."""
        return sorted(self._get_holidays_for_year(year).items())


GERMANY_CALENDAR = GermanyCalendar()


@lru_cache(maxsize=128)
def get_german_holidays(year: int) -> frozenset[date]:
    """Nationwide German holidays for a year (cached)."""
    return frozenset(GERMANY_CALENDAR._get_holidays_for_year(year))


def is_german_holiday(d: date) -> bool:
    return GERMANY_CALENDAR.is_holiday(d)
