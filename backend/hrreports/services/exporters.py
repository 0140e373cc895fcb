"""
Report exports: Excel and CSV through pandas, PDF through reportlab.

The attendance grid shares one column layout across formats: employee columns,
one column per day of the month, then the monthly counters. The leave report
has a balance table (one row per employee and leave type) and a history table.
"""

from __future__ import annotations

import io
import logging
from calendar import month_name
from collections.abc import Sequence
from datetime import date

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from hrreports.schemas.report import EmployeeLeaveReport, EmployeeMonthRow
from hrreports.services.payable_days import days_in_month

logger = logging.getLogger(__name__)

EXPORT_MEDIA_TYPES: dict[str, str] = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
    "pdf": "application/pdf",
}

SUMMARY_COLUMNS: list[tuple[str, str]] = [
    ("P", "present"),
    ("A", "absent"),
    ("H", "holiday"),
    ("CF", "comp_off"),
    ("CFL", "comp_off_leave"),
    ("EL", "earned_leave"),
    ("SL", "sick_leave"),
    ("CL", "casual_leave"),
    ("Week Offs", "week_off_count"),
    ("Payable Days", "payable_days"),
    ("LOP", "lop"),
]

# Cell colours for the PDF day grid
_STATUS_FILL: dict[str, colors.Color] = {
    "P": colors.HexColor("#E8F5E9"),
    "A": colors.HexColor("#FDE8E8"),
    "H": colors.HexColor("#EDE7F6"),
    "CF": colors.HexColor("#E0F7FA"),
    "CFL": colors.HexColor("#BBDEFB"),
    "EL": colors.HexColor("#FFF8E1"),
    "SL": colors.HexColor("#FFF8E1"),
    "CL": colors.HexColor("#FFF8E1"),
}


def report_filename(year: int, month: int, fmt: str) -> str:
    return f"Attendance_Report_{month_name[month]}_{year}.{fmt}"


def _grid_style(font_size: int) -> list[tuple]:
    return [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2980B9")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTSIZE", (0, 0), (-1, -1), font_size),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#E2E8F0")),
    ]


def to_frame(rows: Sequence[EmployeeMonthRow], year: int, month: int) -> pd.DataFrame:
    records = []
    for row in rows:
        rec: dict[str, object] = {
            "Employee ID": row.employee.employee_id,
            "Employee Name": row.employee.full_name,
            "Designation": row.employee.designation or "",
            "Project": row.employee.project_name or "",
        }
        for day, status in enumerate(row.statuses, start=1):
            rec[str(day)] = status or "-"
        summary = row.summary.model_dump()
        for label, key in SUMMARY_COLUMNS:
            rec[label] = summary[key]
        records.append(rec)

    frame = pd.DataFrame.from_records(records)
    if frame.empty:
        days = days_in_month(year, month)
        columns = ["Employee ID", "Employee Name", "Designation", "Project"]
        columns += [str(d) for d in range(1, days + 1)]
        columns += [label for label, _ in SUMMARY_COLUMNS]
        frame = pd.DataFrame(columns=columns)
    return frame


def export_excel(rows: Sequence[EmployeeMonthRow], year: int, month: int) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        to_frame(rows, year, month).to_excel(
            writer, sheet_name="Overall Attendance", index=False
        )
    return buffer.getvalue()


def export_csv(rows: Sequence[EmployeeMonthRow], year: int, month: int) -> bytes:
    return to_frame(rows, year, month).to_csv(index=False).encode("utf-8")


def export_pdf(rows: Sequence[EmployeeMonthRow], year: int, month: int) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=10 * mm,
        bottomMargin=10 * mm,
    )
    styles = getSampleStyleSheet()
    frame = to_frame(rows, year, month).drop(columns=["Designation", "Project"])

    header = [str(c) for c in frame.columns]
    body = [[str(v) for v in values] for values in frame.itertuples(index=False)]
    fixed = [18 * mm, 36 * mm]
    narrow = (doc.width - sum(fixed)) / (len(header) - len(fixed))
    table = Table(
        [header, *body],
        colWidths=fixed + [narrow] * (len(header) - len(fixed)),
        repeatRows=1,
    )

    style = _grid_style(font_size=6)
    first_day_col = 2
    for r, row in enumerate(rows, start=1):
        for c, status in enumerate(row.statuses, start=first_day_col):
            fill = _STATUS_FILL.get(status)
            if fill is not None:
                style.append(("BACKGROUND", (c, r), (c, r), fill))
    table.setStyle(TableStyle(style))

    story = [
        Paragraph("Monthly Attendance Report", styles["Title"]),
        Paragraph(f"{month_name[month]} {year}", styles["Heading3"]),
        Spacer(1, 4 * mm),
        table,
    ]
    doc.build(story)
    logger.info("PDF export %04d-%02d: %d employees", year, month, len(rows))
    return buffer.getvalue()



# --- Leave report ---

# Columns shown for every employee even when the API has no entry for the type
LEAVE_TYPES: tuple[str, ...] = ("EL", "SL", "CL", "CompOff")

LEAVE_BALANCE_COLUMNS = [
    "Employee ID", "Employee Name", "Project", "Leave Type",
    "Allocated", "Used", "Remaining", "Pending",
]
LEAVE_HISTORY_COLUMNS = [
    "Employee ID", "Employee Name", "Leave Type", "Start Date", "End Date",
    "Days", "Status", "Reason",
]


def leave_report_filename(as_of: date, fmt: str) -> str:
    return f"Leave_Report_{as_of.isoformat()}.{fmt}"


def _leave_types(row: EmployeeLeaveReport) -> list[str]:
    known = {"".join(t.split()).lower() for t in LEAVE_TYPES}
    extra = [t for t in row.balance.balances if "".join(t.split()).lower() not in known]
    return [*LEAVE_TYPES, *extra]


def leave_frames(rows: Sequence[EmployeeLeaveReport]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """(balances, history) frames; one balance row per employee and leave type."""
    balance_records = []
    history_records = []
    for row in rows:
        emp = row.employee
        for leave_type in _leave_types(row):
            bal = row.balance.get(leave_type)
            balance_records.append([
                emp.employee_id, emp.full_name, emp.project_name or "", leave_type,
                bal.allocated, bal.used, bal.remaining, bal.pending,
            ])
        for leave in row.history:
            history_records.append([
                emp.employee_id, emp.full_name, leave.leave_type,
                leave.start_date.isoformat(), leave.end_date.isoformat(),
                leave.number_of_days, leave.status, leave.reason or "",
            ])
    return (
        pd.DataFrame(balance_records, columns=LEAVE_BALANCE_COLUMNS),
        pd.DataFrame(history_records, columns=LEAVE_HISTORY_COLUMNS),
    )


def export_leave_excel(rows: Sequence[EmployeeLeaveReport]) -> bytes:
    balances, history = leave_frames(rows)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        balances.to_excel(writer, sheet_name="Leave Balance", index=False)
        history.to_excel(writer, sheet_name="Leave History", index=False)
    return buffer.getvalue()


def export_leave_csv(rows: Sequence[EmployeeLeaveReport]) -> bytes:
    balances, _ = leave_frames(rows)
    return balances.to_csv(index=False).encode("utf-8")


def _frame_table(frame: pd.DataFrame) -> Table:
    header = [str(c) for c in frame.columns]
    body = [["" if pd.isna(v) else str(v) for v in values] for values in frame.itertuples(index=False)]
    table = Table([header, *body], repeatRows=1)
    table.setStyle(TableStyle(_grid_style(font_size=7)))
    return table


def export_leave_pdf(rows: Sequence[EmployeeLeaveReport]) -> bytes:
    balances, history = leave_frames(rows)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=10 * mm,
        bottomMargin=10 * mm,
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph("Leave Report", styles["Title"]),
        Paragraph("Leave Balance Summary", styles["Heading3"]),
        _frame_table(balances),
        Spacer(1, 6 * mm),
        Paragraph("Leave History", styles["Heading3"]),
        _frame_table(history),
    ]
    doc.build(story)
    logger.info("Leave PDF export: %d employees", len(rows))
    return buffer.getvalue()


EXPORTERS = {
    "xlsx": export_excel,
    "csv": export_csv,
    "pdf": export_pdf,
}

LEAVE_EXPORTERS = {
    "xlsx": export_leave_excel,
    "csv": export_leave_csv,
    "pdf": export_leave_pdf,
}
