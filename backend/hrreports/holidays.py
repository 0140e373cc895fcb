"""
Week-off and government holiday calendar.

Two week-off regimes exist, selected by exact project name:
  * standard:  Sundays plus the 2nd and 4th Saturday of every month;
  * exception: Sundays only, every Saturday is a working day.

Government holidays come from a fixed, hand-maintained table and are observed
under both regimes. Dates outside the table never match by list.
"""

from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterable
from datetime import date
from enum import Enum

SUNDAY = 6
SATURDAY = 5

# --- Government holidays (exact dates, not recurring rules) ---

GOVT_HOLIDAYS: dict[date, str] = {
    date(2024, 1, 26): "Republic Day",
    date(2024, 8, 15): "Independence Day",

    date(2025, 1, 14): "Makar Sankranti",
    date(2025, 1, 26): "Republic Day",
    date(2025, 2, 26): "Maha Shivratri",
    date(2025, 3, 30): "Ugadi",
    date(2025, 3, 31): "Eid al Fitr",
    date(2025, 4, 10): "Mahavira Janma Kalyanaka",
    date(2025, 4, 14): "Ambedkar Jayanti",
    date(2025, 5, 1): "Labour Day",
    date(2025, 8, 8): "Varamahalakshmi",
    date(2025, 8, 15): "Independence Day",
    date(2025, 8, 27): "Ganesh Chaturthi",
    date(2025, 10, 2): "Gandhi Jayanti",
}


class ProjectPolicy(str, Enum):
    """Week-off regime applied to a project."""

    STANDARD = "standard"
    EXCEPTION = "exception"


def policy_for_project(
    project_name: str | None, exception_projects: Iterable[str]
) -> ProjectPolicy:
    """Exact-name lookup; anything not listed gets the standard regime."""
    if project_name is not None and project_name in set(exception_projects):
        return ProjectPolicy.EXCEPTION
    return ProjectPolicy.STANDARD


def saturday_ordinal(d: date) -> int:
    """1-based occurrence of this weekday within its month (1st, 2nd, ...)."""
    return (d.day - 1) // 7 + 1


def is_second_or_fourth_saturday(d: date) -> bool:
    return d.weekday() == SATURDAY and saturday_ordinal(d) in (2, 4)


def holiday_name(d: date) -> str | None:
    return GOVT_HOLIDAYS.get(d)


def is_week_off(d: date, policy: ProjectPolicy) -> bool:
    """Weekday rule only, without the government holiday table."""
    if d.weekday() == SUNDAY:
        return True
    if policy is ProjectPolicy.EXCEPTION:
        return False
    return is_second_or_fourth_saturday(d)


def is_non_working_day(d: date, policy: ProjectPolicy) -> bool:
    """
    True for week-offs under the given policy and for listed government holidays.

    The holiday table applies to the exception policy as well, so a listed
    holiday on a weekday is non-working even where Saturdays are worked.
    """
    if not isinstance(d, date):
        raise TypeError(f"expected a date, got {type(d).__name__}")
    return is_week_off(d, policy) or d in GOVT_HOLIDAYS


def week_off_count(year: int, month: int, policy: ProjectPolicy) -> int:
    """Calendar-only count of week-off days in a month (no holiday table)."""
    _, last = monthrange(year, month)
    return sum(
        1 for day in range(1, last + 1) if is_week_off(date(year, month, day), policy)
    )


def day_type(d: date, policy: ProjectPolicy) -> str:
    """Label shown in calendar and detail views."""
    name = holiday_name(d)
    if name is not None:
        return name
    if d.weekday() == SUNDAY:
        return "Sunday"
    if policy is ProjectPolicy.STANDARD and is_second_or_fourth_saturday(d):
        return "2nd Saturday" if saturday_ordinal(d) == 2 else "4th Saturday"
    return "Working Day"


def month_days(year: int, month: int) -> list[date]:
    _, last = monthrange(year, month)
    return [date(year, month, day) for day in range(1, last + 1)]
