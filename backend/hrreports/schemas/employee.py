"""Wire models for records returned by the external workforce API."""

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from hrreports.core.config import settings

_timestamp = TypeAdapter(datetime)


def _calendar_date(value: Any) -> Any:
    """
    Reduce timestamps to the calendar day they fall on in the business timezone.

    '2024-02-06T18:30:00.000Z' is midnight IST on the 7th, so it becomes
    2024-02-07. Naive timestamps are taken as already local; plain
    'YYYY-MM-DD' strings and dates pass through.
    """
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        value = _timestamp.validate_python(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(settings.TIMEZONE))
        return value.date()
    return value


class Employee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: str = Field(alias="employeeId")
    full_name: str = Field(default="", alias="fullName")
    designation: str | None = None
    project_name: str | None = Field(default=None, alias="projectName")
    image_url: str | None = Field(default=None, alias="employeeImage")

    @field_validator("employee_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("employeeId must not be empty")
        return v.strip()


class LeaveInterval(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    leave_id: str | None = Field(default=None, alias="leaveId")
    employee_id: str | None = Field(default=None, alias="employeeId")
    leave_type: str = Field(alias="leaveType")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    number_of_days: float | None = Field(default=None, alias="numberOfDays")
    status: str = ""
    reason: str | None = None
    applied_on: datetime | None = Field(default=None, alias="appliedOn")

    @field_validator("leave_type")
    @classmethod
    def leave_type_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("leaveType must not be empty")
        return v.strip()

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _calendar_date(v)

    @model_validator(mode="after")
    def check_range(self) -> "LeaveInterval":
        if self.end_date < self.start_date:
            raise ValueError(
                f"leave ends before it starts: {self.start_date} > {self.end_date}"
            )
        return self

    @property
    def is_approved(self) -> bool:
        return self.status == "Approved"

    def covers(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date


class PunchRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: str = Field(alias="employeeId")
    date: date
    project_name: str | None = Field(default=None, alias="projectName")
    status: str | None = None
    punch_in_time: datetime | None = Field(default=None, alias="punchInTime")
    punch_out_time: datetime | None = Field(default=None, alias="punchOutTime")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return _calendar_date(v)


class LeaveBalance(BaseModel):
    allocated: float = 0
    used: float = 0
    remaining: float = 0
    pending: float = 0


class LeaveBalanceSheet(BaseModel):
    """Per-type balances plus the totals the API reports alongside them."""

    model_config = ConfigDict(populate_by_name=True)

    total_allocated: float = Field(default=0, alias="totalAllocated")
    total_used: float = Field(default=0, alias="totalUsed")
    total_remaining: float = Field(default=0, alias="totalRemaining")
    total_pending: float = Field(default=0, alias="totalPending")
    balances: dict[str, LeaveBalance] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("balances", "leaveBalances"),
    )

    @field_validator("total_allocated", "total_used", "total_remaining", "total_pending", mode="before")
    @classmethod
    def none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("balances", mode="before")
    @classmethod
    def parse_balances(cls, v: Any) -> Any:
        # Older records carry a bare number of used days per type
        if not v:
            return {}
        return {
            leave_type: {"used": value} if isinstance(value, (int, float)) else value
            for leave_type, value in v.items()
        }

    def get(self, leave_type: str) -> LeaveBalance:
        """Balance for a type, matched ignoring case and spaces; zeros when absent."""
        wanted = _type_key(leave_type)
        for name, balance in self.balances.items():
            if _type_key(name) == wanted:
                return balance
        return LeaveBalance()

    def used(self, leave_type: str) -> float:
        return self.get(leave_type).used


def _type_key(leave_type: str) -> str:
    return "".join(leave_type.split()).lower()
