"""
Per-day attendance status.

Rules, first match wins:
  1. date after today          → "" (future, no status yet)
  2. approved leave on the day → "CFL" for comp-off leave, else the leave type as-is
  3. week-off or holiday       → "CF" when both punches exist, else "H"
  4. working day               → "P" when marked Present with punch-in and either
                                 punch-out or the day is today, else "A"
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum

from hrreports.holidays import ProjectPolicy, is_non_working_day
from hrreports.schemas.employee import LeaveInterval


class InvalidAttendanceInput(ValueError):
    """Raised for inputs the resolver refuses to coerce into a status."""


class AttendanceStatusCode(str, Enum):
    PRESENT = "P"
    ABSENT = "A"
    HOLIDAY = "H"
    COMP_OFF = "CF"
    COMP_OFF_LEAVE = "CFL"
    EARNED_LEAVE = "EL"
    SICK_LEAVE = "SL"
    CASUAL_LEAVE = "CL"
    FUTURE = ""


_COMP_OFF_LEAVE_TYPES = frozenset({"compoff", "cfl", "compoffleave"})
_LEAVE_CODES = frozenset({"EL", "SL", "CL"})


def normalize_leave_type(leave_type: str | None) -> str:
    return "".join((leave_type or "").split()).lower()


def _as_date(value: object, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidAttendanceInput(f"{name} must be a date, got {value!r}")


def find_approved_leave(
    d: date, leaves: Iterable[LeaveInterval]
) -> LeaveInterval | None:
    """First approved interval covering ``d`` in the given order."""
    for leave in leaves:
        if leave.end_date < leave.start_date:
            raise InvalidAttendanceInput(
                f"leave {leave.leave_id or '?'} ends before it starts"
            )
        if leave.is_approved and leave.covers(d):
            return leave
    return None


def resolve_status(
    d: date,
    leaves: Iterable[LeaveInterval],
    policy: ProjectPolicy,
    raw_status: str | None = None,
    punch_in: datetime | None = None,
    punch_out: datetime | None = None,
    *,
    today: date,
) -> str:
    """
    Status code for one employee on one day.

    Returns an ``AttendanceStatusCode`` member, or the raw leave type string
    for approved leave types outside the known codes.
    """
    d = _as_date(d, "date")
    if today is None:
        raise InvalidAttendanceInput("today is required")
    today = _as_date(today, "today")

    if d > today:
        return AttendanceStatusCode.FUTURE

    leave = find_approved_leave(d, leaves)
    if leave is not None:
        if not (leave.leave_type or "").strip():
            raise InvalidAttendanceInput(
                f"leave {leave.leave_id or '?'} has no leave type"
            )
        if normalize_leave_type(leave.leave_type) in _COMP_OFF_LEAVE_TYPES:
            return AttendanceStatusCode.COMP_OFF_LEAVE
        if leave.leave_type in _LEAVE_CODES:
            return AttendanceStatusCode(leave.leave_type)
        return leave.leave_type

    # Sundays are non-working under both policies, so the exception-project
    # Sunday rule is covered here as well.
    if is_non_working_day(d, policy):
        if punch_in and punch_out:
            return AttendanceStatusCode.COMP_OFF
        return AttendanceStatusCode.HOLIDAY

    if raw_status == "Present" and punch_in and (punch_out or d == today):
        return AttendanceStatusCode.PRESENT
    return AttendanceStatusCode.ABSENT
