from fastapi import APIRouter, Depends, Path, Query

from hrreports.core.config import settings
from hrreports.core.middleware import CurrentUser, get_current_user
from hrreports.holidays import (
    ProjectPolicy,
    day_type,
    is_non_working_day,
    month_days,
    policy_for_project,
    week_off_count,
)
from hrreports.schemas.report import CalendarDay, MonthCalendar

router = APIRouter()


def month_calendar(year: int, month: int, policy: ProjectPolicy) -> MonthCalendar:
    return MonthCalendar(
        year=year,
        month=month,
        policy=policy.value,
        week_off_count=week_off_count(year, month, policy),
        days=[
            CalendarDay(
                date=d,
                weekday=d.strftime("%A"),
                day_type=day_type(d, policy),
                non_working=is_non_working_day(d, policy),
            )
            for d in month_days(year, month)
        ],
    )


@router.get(
    "/{year}/{month}",
    response_model=MonthCalendar,
    summary="Week-offs and government holidays for a month",
)
async def get_month_calendar(
    year: int = Path(ge=2000, le=2100),
    month: int = Path(ge=1, le=12),
    project: str | None = Query(default=None, description="Project name; selects the week-off policy"),
    _current_user: CurrentUser = Depends(get_current_user),
) -> MonthCalendar:
    policy = policy_for_project(project, settings.EXCEPTION_PROJECTS)
    return month_calendar(year, month, policy)
