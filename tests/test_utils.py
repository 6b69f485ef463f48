from datetime import date

import pytest

from amort_calc.utils import add_months


class TestAddMonths:
    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (date(2024, 1, 15), 1, date(2024, 2, 15)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2023, 1, 31), 1, date(2023, 2, 28)),
            (date(2024, 11, 30), 3, date(2025, 2, 28)),
            (date(2024, 12, 1), 0, date(2024, 12, 1)),
            (date(2024, 3, 31), -1, date(2024, 2, 29)),
        ],
    )
    def test_shift(self, start, months, expected):
        assert add_months(start, months) == expected

    def test_day_is_not_lost_after_short_month(self):
        start = date(2024, 1, 31)
        assert add_months(start, 2) == date(2024, 3, 31)
