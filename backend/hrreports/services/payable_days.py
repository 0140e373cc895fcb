"""
Monthly counters, payable days and loss-of-pay.

Payable statuses: P, H, CF, CFL, EL, SL, CL. Days after ``today`` are left out
of every counter; LOP is always taken against the calendar length of the month.
"""

from __future__ import annotations

from calendar import monthrange
from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime

from hrreports.holidays import ProjectPolicy, week_off_count
from hrreports.schemas.report import CompOffReconciliation, MonthlySummary
from hrreports.services.attendance_status import AttendanceStatusCode as Code

PAYABLE_STATUSES: frozenset[str] = frozenset(
    c.value for c in (
        Code.PRESENT, Code.HOLIDAY, Code.COMP_OFF, Code.COMP_OFF_LEAVE,
        Code.EARNED_LEAVE, Code.SICK_LEAVE, Code.CASUAL_LEAVE,
    )
)

_COUNTER_FIELDS: dict[str, str] = {
    Code.PRESENT.value: "present",
    Code.ABSENT.value: "absent",
    Code.HOLIDAY.value: "holiday",
    Code.COMP_OFF.value: "comp_off",
    Code.COMP_OFF_LEAVE.value: "comp_off_leave",
    Code.EARNED_LEAVE.value: "earned_leave",
    Code.SICK_LEAVE.value: "sick_leave",
    Code.CASUAL_LEAVE.value: "casual_leave",
}

FULL_DAY_HOURS = 7.0
HALF_DAY_HOURS = 4.5


def _code(status: str) -> str:
    return status.value if isinstance(status, Code) else status


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def aggregate_month(
    year: int,
    month: int,
    statuses: Sequence[str],
    *,
    policy: ProjectPolicy = ProjectPolicy.STANDARD,
    today: date | None = None,
) -> MonthlySummary:
    """
    Fold one month of daily status codes into a ``MonthlySummary``.

    ``statuses[i]`` belongs to day ``i + 1``. With ``today`` given, days after
    it are skipped by date; otherwise the empty (future) code marks them.
    Unknown leave types land in ``other_leave`` and are not payable.
    """
    total_days = days_in_month(year, month)
    counts: Counter[str] = Counter()
    future = 0

    for day, status in enumerate(statuses, start=1):
        is_future = (
            date(year, month, day) > today if today is not None
            else _code(status) == Code.FUTURE.value
        )
        if is_future:
            future += 1
            continue
        counts[_code(status)] += 1

    fields = {name: counts.get(code, 0) for code, name in _COUNTER_FIELDS.items()}
    other = sum(n for code, n in counts.items() if code not in _COUNTER_FIELDS)
    payable = sum(n for code, n in counts.items() if code in PAYABLE_STATUSES)

    return MonthlySummary(
        year=year,
        month=month,
        days_in_month=total_days,
        other_leave=other,
        future_days=future,
        week_off_count=week_off_count(year, month, policy),
        payable_days=payable,
        lop=total_days - payable,
        **fields,
    )


def reconcile_comp_off(
    summary: MonthlySummary, comp_off_used: float = 0
) -> CompOffReconciliation:
    """
    Offset absences with comp-off days earned in the same month.

    Matched CF days become payable in place of the absences they cover; the
    rest stay as earned balance. ``comp_off_used`` is the leave-balance count
    of comp-off days already drawn.
    """
    matched = min(summary.absent, summary.comp_off)
    payable = (
        summary.present
        + summary.holiday
        + summary.earned_leave
        + summary.sick_leave
        + summary.casual_leave
        + matched
        + max(comp_off_used, 0.0)
    )
    return CompOffReconciliation(
        payable_days=payable,
        absent=summary.absent - matched,
        cf_matched=matched,
        cf_remaining=summary.comp_off - matched,
        comp_off_used=max(comp_off_used, 0.0),
    )


def worked_hours(punch_in: datetime | None, punch_out: datetime | None) -> float:
    if punch_in is None or punch_out is None:
        return 0.0
    return round(abs((punch_out - punch_in).total_seconds()) / 3600, 2)


def hours_band(hours: float) -> str:
    if hours >= FULL_DAY_HOURS:
        return "Present"
    if hours >= HALF_DAY_HOURS:
        return "Half Day"
    return "Absent"
