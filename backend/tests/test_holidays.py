"""
Week-off policy and government holiday calendar.

February 2024 starts on a Thursday: Sundays 4/11/18/25, Saturdays 3/10/17/24.
February 2032 starts on a Sunday: five Sundays, Saturdays 7/14/21/28.
"""

from __future__ import annotations

from datetime import date

import pytest

from hrreports.holidays import (
    GOVT_HOLIDAYS,
    ProjectPolicy,
    day_type,
    holiday_name,
    is_non_working_day,
    is_second_or_fourth_saturday,
    policy_for_project,
    week_off_count,
)

STD = ProjectPolicy.STANDARD
EXC = ProjectPolicy.EXCEPTION


class TestPolicyLookup:
    def test_exact_match_selects_exception(self) -> None:
        assert policy_for_project("Exozen - Ops", ["Exozen - Ops"]) is EXC

    @pytest.mark.parametrize("name", ["exozen - ops", "Exozen - Ops ", "Exozen", None])
    def test_anything_else_is_standard(self, name: str | None) -> None:
        assert policy_for_project(name, ["Exozen - Ops"]) is STD


class TestStandardPolicy:
    @pytest.mark.parametrize("day", [4, 11, 18, 25])
    def test_sundays_are_off(self, day: int) -> None:
        assert is_non_working_day(date(2024, 2, day), STD)

    @pytest.mark.parametrize("day,off", [(3, False), (10, True), (17, False), (24, True)])
    def test_only_second_and_fourth_saturdays_are_off(self, day: int, off: bool) -> None:
        assert is_non_working_day(date(2024, 2, day), STD) is off

    def test_fifth_saturday_is_working(self) -> None:
        # March 2024 Saturdays: 2, 9, 16, 23, 30
        assert not is_second_or_fourth_saturday(date(2024, 3, 30))
        assert is_second_or_fourth_saturday(date(2024, 3, 9))
        assert is_second_or_fourth_saturday(date(2024, 3, 23))

    def test_listed_holiday_on_weekday(self) -> None:
        republic_day = date(2024, 1, 26)  # Friday
        assert is_non_working_day(republic_day, STD)
        assert holiday_name(republic_day) == "Republic Day"

    def test_ordinary_weekday_is_working(self) -> None:
        assert not is_non_working_day(date(2024, 2, 7), STD)

    def test_dates_beyond_table_only_match_weekday_rules(self) -> None:
        assert max(GOVT_HOLIDAYS).year == 2025
        # Republic Day 2030 is a Saturday, but the 4th one, so off by weekday rule
        assert is_non_working_day(date(2030, 1, 26), STD)
        # Independence Day 2030 is a Thursday and not listed
        assert not is_non_working_day(date(2030, 8, 15), STD)


class TestHolidayTable:
    @pytest.mark.parametrize(
        "d,name",
        [
            (date(2024, 1, 26), "Republic Day"),
            (date(2024, 8, 15), "Independence Day"),
            (date(2025, 1, 14), "Makar Sankranti"),
            (date(2025, 3, 31), "Eid al Fitr"),
            (date(2025, 8, 27), "Ganesh Chaturthi"),
            (date(2025, 10, 2), "Gandhi Jayanti"),
        ],
    )
    def test_listed_dates_are_non_working(self, d: date, name: str) -> None:
        assert holiday_name(d) == name
        assert is_non_working_day(d, STD)
        assert is_non_working_day(d, EXC)

    @pytest.mark.parametrize(
        "d",
        [date(2024, 3, 25), date(2024, 11, 14), date(2025, 11, 3), date(2025, 12, 25)],
    )
    def test_unlisted_festival_dates_are_working(self, d: date) -> None:
        assert holiday_name(d) is None
        assert not is_non_working_day(d, STD)

    def test_table_is_in_date_order(self) -> None:
        assert list(GOVT_HOLIDAYS) == sorted(GOVT_HOLIDAYS)


class TestExceptionPolicy:
    @pytest.mark.parametrize("day", [3, 10, 17, 24])
    def test_all_saturdays_are_working(self, day: int) -> None:
        assert not is_non_working_day(date(2024, 2, day), EXC)

    def test_sunday_is_off(self) -> None:
        assert is_non_working_day(date(2024, 2, 11), EXC)

    def test_listed_holiday_still_observed(self) -> None:
        assert is_non_working_day(date(2024, 1, 26), EXC)

    def test_rejects_non_dates(self) -> None:
        with pytest.raises(TypeError):
            is_non_working_day("2024-02-11", EXC)  # type: ignore[arg-type]


class TestWeekOffCount:
    @pytest.mark.parametrize(
        "year,month,policy,expected",
        [
            (2024, 2, STD, 6),
            (2024, 2, EXC, 4),
            (2032, 2, STD, 7),
            (2032, 2, EXC, 5),
            (2024, 3, STD, 7),  # 5 Sundays (3,10,17,24,31) + 9th and 23rd
        ],
    )
    def test_counts(self, year: int, month: int, policy: ProjectPolicy, expected: int) -> None:
        assert week_off_count(year, month, policy) == expected

    def test_ignores_holiday_table(self) -> None:
        # Jan 2024 has Republic Day on a Friday; it is not a week-off
        assert week_off_count(2024, 1, STD) == 4 + 2


class TestDayType:
    def test_labels(self) -> None:
        assert day_type(date(2024, 2, 4), STD) == "Sunday"
        assert day_type(date(2024, 2, 10), STD) == "2nd Saturday"
        assert day_type(date(2024, 2, 24), STD) == "4th Saturday"
        assert day_type(date(2024, 2, 3), STD) == "Working Day"
        assert day_type(date(2024, 8, 15), STD) == "Independence Day"

    def test_exception_policy_has_no_saturday_labels(self) -> None:
        assert day_type(date(2024, 2, 10), EXC) == "Working Day"
        assert day_type(date(2024, 2, 4), EXC) == "Sunday"
