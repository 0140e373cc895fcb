from datetime import date, datetime

from pydantic import BaseModel

from hrreports.schemas.employee import Employee, LeaveBalanceSheet, LeaveInterval


class MonthlySummary(BaseModel):
    year: int
    month: int
    days_in_month: int
    present: int = 0
    absent: int = 0
    holiday: int = 0
    comp_off: int = 0
    comp_off_leave: int = 0
    earned_leave: int = 0
    sick_leave: int = 0
    casual_leave: int = 0
    other_leave: int = 0
    future_days: int = 0
    week_off_count: int = 0
    payable_days: int = 0
    lop: int = 0


class CompOffReconciliation(BaseModel):
    # Leave balances can hold half days, so payable days may be fractional
    payable_days: float
    absent: int
    cf_matched: int
    cf_remaining: int
    comp_off_used: float


class DailyStatus(BaseModel):
    date: date
    status: str
    day_type: str
    punch_in_time: datetime | None = None
    punch_out_time: datetime | None = None
    worked_hours: float = 0.0
    hours_band: str | None = None


class EmployeeMonthRow(BaseModel):
    employee: Employee
    policy: str
    statuses: list[str]
    summary: MonthlySummary


class EmployeeMonthDetail(BaseModel):
    employee: Employee
    policy: str
    days: list[DailyStatus]
    summary: MonthlySummary


class AttendanceReportPage(BaseModel):
    year: int
    month: int
    as_of: date
    items: list[EmployeeMonthRow]
    total: int
    page: int
    page_size: int
    pages: int


class PayableRow(BaseModel):
    employee_id: str
    full_name: str
    project_name: str | None
    summary: MonthlySummary
    reconciliation: CompOffReconciliation


class CalendarDay(BaseModel):
    date: date
    weekday: str
    day_type: str
    non_working: bool


class MonthCalendar(BaseModel):
    year: int
    month: int
    policy: str
    week_off_count: int
    days: list[CalendarDay]


class EmployeeLeaveReport(BaseModel):
    employee: Employee
    balance: LeaveBalanceSheet
    history: list[LeaveInterval]
