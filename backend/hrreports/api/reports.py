"""
Attendance report API routes.

Every request pulls fresh data from the external workforce API; nothing is
cached between requests.
"""

import math
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from hrreports.core.config import settings
from hrreports.core.middleware import CurrentUser, require_role
from hrreports.schemas.employee import Employee
from hrreports.schemas.report import (
    AttendanceReportPage,
    EmployeeLeaveReport,
    EmployeeMonthDetail,
    EmployeeMonthRow,
    PayableRow,
)
from hrreports.services.exporters import (
    EXPORT_MEDIA_TYPES,
    EXPORTERS,
    LEAVE_EXPORTERS,
    leave_report_filename,
    report_filename,
)
from hrreports.services.fuzzy_matcher import filter_employees
from hrreports.services.report_builder import (
    build_employee_detail,
    build_payable_rows,
    build_rows,
    index_punches,
    load_comp_off_used,
    load_leave_report,
    load_month_inputs,
    local_today,
)
from hrreports.services.zenapi_client import ZenApiClient, get_zenapi_client

router = APIRouter()

_UNSCOPED_ROLES = ("Admin", "HR")


@router.get(
    "/attendance",
    response_model=AttendanceReportPage,
    summary="Monthly attendance grid with per-employee counters",
)
async def get_attendance_report(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    search: str | None = Query(default=None),
    employee_ids: list[str] | None = Query(default=None),
    as_of: date | None = Query(default=None, description="Evaluation date, ISO YYYY-MM-DD"),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=500),
    client: ZenApiClient = Depends(get_zenapi_client),
    current_user: CurrentUser = Depends(require_role()),
) -> AttendanceReportPage:
    today = as_of or local_today()
    y, m = _resolve_month(year, month, today)
    size = page_size or settings.REPORT_PAGE_SIZE

    employees = await _load_employees(
        client, current_user, project, designation, search, employee_ids
    )
    total = len(employees)
    pages = max(math.ceil(total / size), 1)
    page_employees = employees[(page - 1) * size: page * size]

    inputs = await load_month_inputs(client, page_employees, y, m, current_user.token)
    rows = build_rows(inputs, y, m, today)

    return AttendanceReportPage(
        year=y,
        month=m,
        as_of=today,
        items=rows,
        total=total,
        page=page,
        page_size=size,
        pages=pages,
    )


@router.get(
    "/attendance/export",
    summary="Download the monthly attendance grid as xlsx, csv or pdf",
)
async def export_attendance_report(
    format: str = Query(default="xlsx", pattern="^(xlsx|csv|pdf)$"),
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    search: str | None = Query(default=None),
    employee_ids: list[str] | None = Query(default=None),
    as_of: date | None = Query(default=None),
    client: ZenApiClient = Depends(get_zenapi_client),
    current_user: CurrentUser = Depends(require_role()),
) -> Response:
    today = as_of or local_today()
    y, m = _resolve_month(year, month, today)

    employees = await _load_employees(
        client, current_user, project, designation, search, employee_ids
    )
    inputs = await load_month_inputs(client, employees, y, m, current_user.token)
    rows: list[EmployeeMonthRow] = build_rows(inputs, y, m, today)

    content = EXPORTERS[format](rows, y, m)
    filename = report_filename(y, m, format)
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/payable",
    response_model=list[PayableRow],
    summary="Payable days with absences offset by earned comp-offs",
)
async def get_payable_report(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    project: str | None = Query(default=None),
    as_of: date | None = Query(default=None),
    client: ZenApiClient = Depends(get_zenapi_client),
    current_user: CurrentUser = Depends(require_role()),
) -> list[PayableRow]:
    today = as_of or local_today()
    y, m = _resolve_month(year, month, today)

    employees = await _load_employees(client, current_user, project, None, None, None)
    inputs = await load_month_inputs(client, employees, y, m, current_user.token)
    comp_off_used = await load_comp_off_used(client, employees, current_user.token)
    return build_payable_rows(build_rows(inputs, y, m, today), comp_off_used)


@router.get(
    "/leave",
    response_model=list[EmployeeLeaveReport],
    summary="Leave balances per type and leave history per employee",
)
async def get_leave_report(
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    search: str | None = Query(default=None),
    employee_ids: list[str] | None = Query(default=None),
    client: ZenApiClient = Depends(get_zenapi_client),
    current_user: CurrentUser = Depends(require_role()),
) -> list[EmployeeLeaveReport]:
    employees = await _load_employees(
        client, current_user, project, designation, search, employee_ids
    )
    return await load_leave_report(client, employees, current_user.token)


@router.get(
    "/leave/export",
    summary="Download leave balances and history as xlsx, csv or pdf",
)
async def export_leave_report(
    format: str = Query(default="xlsx", pattern="^(xlsx|csv|pdf)$"),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    search: str | None = Query(default=None),
    employee_ids: list[str] | None = Query(default=None),
    as_of: date | None = Query(default=None),
    client: ZenApiClient = Depends(get_zenapi_client),
    current_user: CurrentUser = Depends(require_role()),
) -> Response:
    employees = await _load_employees(
        client, current_user, project, designation, search, employee_ids
    )
    rows = await load_leave_report(client, employees, current_user.token)

    content = LEAVE_EXPORTERS[format](rows)
    filename = leave_report_filename(as_of or local_today(), format)
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/attendance/{employee_id}",
    response_model=EmployeeMonthDetail,
    summary="Day-by-day attendance for one employee",
)
async def get_employee_attendance(
    employee_id: str,
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    as_of: date | None = Query(default=None),
    client: ZenApiClient = Depends(get_zenapi_client),
    current_user: CurrentUser = Depends(require_role()),
) -> EmployeeMonthDetail:
    today = as_of or local_today()
    y, m = _resolve_month(year, month, today)

    roster = await client.get_roster(current_user.token)
    employee = next((e for e in roster if e.employee_id == employee_id), None)
    if employee is None or not _in_scope(employee, current_user):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee '{employee_id}' not found",
        )

    leaves = await client.get_leave_history(employee_id, current_user.token)
    records = await client.get_attendance(current_user.token)
    punches = index_punches(
        (r for r in records if r.employee_id == employee_id), y, m
    ).get(employee_id, {})
    return build_employee_detail(employee, leaves, punches, y, m, today)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_month(year: int | None, month: int | None, today: date) -> tuple[int, int]:
    return year or today.year, month or today.month


def _resolve_project(requested: str | None, current_user: CurrentUser) -> str | None:
    """
    Admins and HR may query any project; None means all projects.
    Other roles are pinned to their own project when the token carries one.
    """
    if current_user.role in _UNSCOPED_ROLES or not current_user.project_name:
        return requested
    return current_user.project_name


def _in_scope(employee: Employee, current_user: CurrentUser) -> bool:
    project = _resolve_project(None, current_user)
    return project is None or employee.project_name == project


async def _load_employees(
    client: ZenApiClient,
    current_user: CurrentUser,
    project: str | None,
    designation: str | None,
    search: str | None,
    employee_ids: list[str] | None,
) -> list[Employee]:
    roster = await client.get_roster(current_user.token)
    return filter_employees(
        roster,
        search=search,
        project=_resolve_project(project, current_user),
        designation=designation,
        employee_ids=employee_ids,
    )
