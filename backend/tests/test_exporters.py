"""Export layout checks that do not need the API."""

from __future__ import annotations

from hrreports.schemas.employee import Employee, LeaveBalanceSheet
from hrreports.schemas.report import EmployeeLeaveReport
from hrreports.services.exporters import (
    LEAVE_HISTORY_COLUMNS,
    SUMMARY_COLUMNS,
    export_csv,
    leave_frames,
    report_filename,
    to_frame,
)


def test_filename() -> None:
    assert report_filename(2024, 2, "xlsx") == "Attendance_Report_February_2024.xlsx"


def test_empty_month_keeps_layout() -> None:
    frame = to_frame([], 2024, 2)
    assert frame.empty
    assert list(frame.columns[:4]) == ["Employee ID", "Employee Name", "Designation", "Project"]
    assert "29" in frame.columns
    assert len(frame.columns) == 4 + 29 + len(SUMMARY_COLUMNS)


def test_empty_csv_is_header_only() -> None:
    lines = export_csv([], 2024, 4).decode("utf-8").splitlines()
    assert len(lines) == 1
    assert lines[0].split(",")[-1] == "LOP"


def test_leave_frames_fill_missing_types_and_keep_extra() -> None:
    row = EmployeeLeaveReport(
        employee=Employee(employee_id="EMP100", full_name="Lata Rao"),
        balance=LeaveBalanceSheet(
            balances={
                "Comp Off": {"allocated": 2, "used": 0.5, "remaining": 1.5},
                "Maternity": {"allocated": 180, "used": 0, "remaining": 180},
            }
        ),
        history=[],
    )
    balances, history = leave_frames([row])

    assert list(balances["Leave Type"]) == ["EL", "SL", "CL", "CompOff", "Maternity"]
    comp_off = balances[balances["Leave Type"] == "CompOff"].iloc[0]
    assert comp_off["Used"] == 0.5
    assert balances[balances["Leave Type"] == "EL"].iloc[0]["Allocated"] == 0
    assert history.empty
    assert list(history.columns) == LEAVE_HISTORY_COLUMNS
