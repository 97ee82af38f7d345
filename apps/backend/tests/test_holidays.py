"""
공휴일 테이블 테스트
"""

from datetime import date

import pytest

from gagyebu.utils.holidays import (
    FIXED_HOLIDAYS,
    LUNAR_HOLIDAYS,
    get_holiday_days_in_month,
    get_holidays,
    is_holiday,
)


class TestGetHolidays:
    @pytest.mark.parametrize("year", [2020, 2024, 2025, 2030, 2035])
    def test_fixed_holidays_exactly_once(self, year):
        holidays = get_holidays(year)
        for (month, day), name in FIXED_HOLIDAYS.items():
            matches = [h for h in holidays if h.date == date(year, month, day) and h.name == name]
            assert len(matches) == 1

    def test_sorted_by_date(self):
        holidays = get_holidays(2026)
        assert [h.date for h in holidays] == sorted(h.date for h in holidays)

    def test_lunar_years(self):
        assert sorted(LUNAR_HOLIDAYS) == list(range(2024, 2031))
        for year in LUNAR_HOLIDAYS:
            names = {h.name for h in get_holidays(year)}
            assert {"설날", "추석", "부처님오신날"} <= names

    def test_out_of_table_year_has_only_fixed(self):
        assert len(get_holidays(2023)) == len(FIXED_HOLIDAYS)

    def test_shared_date_keeps_both_entries(self):
        """2025-05-05 어린이날 + 부처님오신날"""
        may5 = [h for h in get_holidays(2025) if h.date == date(2025, 5, 5)]
        assert [h.name for h in may5] == ["어린이날", "부처님오신날"]
        assert len(get_holidays(2025)) == len(FIXED_HOLIDAYS) + len(LUNAR_HOLIDAYS[2025])

    def test_seollal_2025(self):
        names = {h.date: h.name for h in get_holidays(2025) if h.date.month == 1}
        assert names[date(2025, 1, 29)] == "설날"
        assert names[date(2025, 1, 28)] == "설날 연휴"


class TestDerivedLookups:
    def test_days_in_month(self):
        assert get_holiday_days_in_month(2025, 10) == {3, 5, 6, 7, 8, 9}
        assert get_holiday_days_in_month(2025, 4) == set()

    def test_is_holiday(self):
        assert is_holiday(2025, 10, 6)
        assert is_holiday(2031, 12, 25)
        assert not is_holiday(2025, 10, 10)

    @pytest.mark.parametrize("year", [2024, 2027, 2032])
    def test_consistent_with_get_holidays(self, year):
        dates = {h.date for h in get_holidays(year)}
        for month in range(1, 13):
            days = get_holiday_days_in_month(year, month)
            assert days == {d.day for d in dates if d.month == month}
            for day in days:
                assert is_holiday(year, month, day)


def test_holidays_endpoint(client):
    r = client.get("/api/holidays", params={"year": 2025, "month": 5})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["year"] == 2025
    assert data["month"] == 5
    assert data["holiday_days"] == [5]
    assert [h["name"] for h in data["holidays"]] == ["어린이날", "부처님오신날"]
