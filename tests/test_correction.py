from datetime import date
from decimal import Decimal

from amort_calc.correction import month_key, resolve_correction

TABLE = {"2024-01": Decimal("0.000605"), "2024-02": Decimal("0.0008")}
AVERAGE = Decimal("0.0007")


class TestMonthKey:
    def test_pads_month(self):
        assert month_key(date(2024, 3, 31)) == "2024-03"


class TestResolveCorrection:
    def test_no_table_disables_correction(self):
        assert resolve_correction("2024-01", None, AVERAGE) == 0

    def test_no_key_uses_average(self):
        assert resolve_correction(None, TABLE, AVERAGE) == AVERAGE

    def test_known_month_uses_entry(self):
        assert resolve_correction("2024-02", TABLE, AVERAGE) == Decimal("0.0008")

    def test_future_month_uses_average(self):
        assert resolve_correction("2031-07", TABLE, AVERAGE) == AVERAGE

    def test_empty_table_still_enables_correction(self):
        assert resolve_correction("2024-01", {}, AVERAGE) == AVERAGE

    def test_float_entries_are_normalized(self):
        value = resolve_correction("2024-01", {"2024-01": 0.001}, AVERAGE)
        assert value == Decimal("0.001")
