"""
Monthly attendance report assembly.

Data flow: roster + leave history + punch records → one status per employee
per calendar day → monthly counters. All upstream data is collected before any
status is resolved; resolution itself is pure and per employee.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

from hrreports.core.config import settings
from hrreports.holidays import ProjectPolicy, day_type, month_days, policy_for_project
from hrreports.schemas.employee import Employee, LeaveInterval, PunchRecord
from hrreports.schemas.report import (
    DailyStatus,
    EmployeeLeaveReport,
    EmployeeMonthDetail,
    EmployeeMonthRow,
    PayableRow,
)
from hrreports.services.attendance_status import AttendanceStatusCode, resolve_status
from hrreports.services.payable_days import (
    aggregate_month,
    hours_band,
    reconcile_comp_off,
    worked_hours,
)
from hrreports.services.zenapi_client import ZenApiClient

logger = logging.getLogger(__name__)

PunchIndex = dict[str, dict[date, PunchRecord]]


def local_today() -> date:
    """Current date in the configured business timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


@dataclass
class MonthInputs:
    """Everything fetched from the API for one report month."""

    employees: list[Employee]
    leaves: dict[str, list[LeaveInterval]] = field(default_factory=dict)
    punches: PunchIndex = field(default_factory=dict)


def project_policy(employee: Employee) -> ProjectPolicy:
    return policy_for_project(employee.project_name, settings.EXCEPTION_PROJECTS)


def index_punches(
    records: Iterable[PunchRecord], year: int, month: int
) -> PunchIndex:
    """Group the month's punch records by employee and date; first record wins."""
    index: PunchIndex = defaultdict(dict)
    for rec in records:
        if rec.date.year != year or rec.date.month != month:
            continue
        index[rec.employee_id].setdefault(rec.date, rec)
    return dict(index)


def build_days(
    employee: Employee,
    leaves: Sequence[LeaveInterval],
    punches: Mapping[date, PunchRecord],
    year: int,
    month: int,
    today: date,
) -> list[DailyStatus]:
    policy = project_policy(employee)
    days: list[DailyStatus] = []
    for d in month_days(year, month):
        rec = punches.get(d)
        punch_in = rec.punch_in_time if rec else None
        punch_out = rec.punch_out_time if rec else None
        status = resolve_status(
            d,
            leaves,
            policy,
            rec.status if rec else None,
            punch_in,
            punch_out,
            today=today,
        )
        if isinstance(status, AttendanceStatusCode):
            status = status.value
        hours = worked_hours(punch_in, punch_out)
        days.append(
            DailyStatus(
                date=d,
                status=status,
                day_type=day_type(d, policy),
                punch_in_time=punch_in,
                punch_out_time=punch_out,
                worked_hours=hours,
                hours_band=hours_band(hours) if rec else None,
            )
        )
    return days


def build_employee_detail(
    employee: Employee,
    leaves: Sequence[LeaveInterval],
    punches: Mapping[date, PunchRecord],
    year: int,
    month: int,
    today: date,
) -> EmployeeMonthDetail:
    policy = project_policy(employee)
    days = build_days(employee, leaves, punches, year, month, today)
    summary = aggregate_month(
        year, month, [day.status for day in days], policy=policy, today=today
    )
    return EmployeeMonthDetail(
        employee=employee, policy=policy.value, days=days, summary=summary
    )


def build_rows(
    inputs: MonthInputs, year: int, month: int, today: date
) -> list[EmployeeMonthRow]:
    rows: list[EmployeeMonthRow] = []
    for emp in inputs.employees:
        detail = build_employee_detail(
            emp,
            inputs.leaves.get(emp.employee_id, []),
            inputs.punches.get(emp.employee_id, {}),
            year,
            month,
            today,
        )
        rows.append(
            EmployeeMonthRow(
                employee=emp,
                policy=detail.policy,
                statuses=[day.status for day in detail.days],
                summary=detail.summary,
            )
        )
    logger.info(
        "Attendance report %04d-%02d built for %d employees (as of %s)",
        year, month, len(rows), today,
    )
    return rows


def build_payable_rows(
    rows: Sequence[EmployeeMonthRow], comp_off_used: Mapping[str, float]
) -> list[PayableRow]:
    return [
        PayableRow(
            employee_id=row.employee.employee_id,
            full_name=row.employee.full_name,
            project_name=row.employee.project_name,
            summary=row.summary,
            reconciliation=reconcile_comp_off(
                row.summary, comp_off_used.get(row.employee.employee_id, 0.0)
            ),
        )
        for row in rows
    ]


async def load_month_inputs(
    client: ZenApiClient,
    employees: Sequence[Employee],
    year: int,
    month: int,
    token: str | None = None,
) -> MonthInputs:
    """Fetch leave history for every employee plus the month's punch records."""
    ids = [emp.employee_id for emp in employees]
    leaves = await client.fetch_all(
        ids, lambda eid: client.get_leave_history(eid, token)
    )
    records = await client.get_attendance(token)
    return MonthInputs(
        employees=list(employees),
        leaves=leaves,
        punches=index_punches(records, year, month),
    )


async def load_comp_off_used(
    client: ZenApiClient, employees: Sequence[Employee], token: str | None = None
) -> dict[str, float]:
    balances = await client.fetch_all(
        [emp.employee_id for emp in employees],
        lambda eid: client.get_leave_balance(eid, token),
    )
    return {eid: sheet.used("CompOff") for eid, sheet in balances.items()}


async def load_leave_report(
    client: ZenApiClient, employees: Sequence[Employee], token: str | None = None
) -> list[EmployeeLeaveReport]:
    """Leave balances and full leave history for every employee, roster order kept."""
    ids = [emp.employee_id for emp in employees]
    balances = await client.fetch_all(
        ids, lambda eid: client.get_leave_balance(eid, token)
    )
    histories = await client.fetch_all(
        ids, lambda eid: client.get_leave_history(eid, token)
    )
    rows = [
        EmployeeLeaveReport(
            employee=emp,
            balance=balances[emp.employee_id],
            history=histories[emp.employee_id],
        )
        for emp in employees
    ]
    logger.info("Leave report built for %d employees", len(rows))
    return rows
