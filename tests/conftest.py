"""Shared loan fixtures.

Fixture loan: 100,000.00 at 1 % a month over 12 months, no fee, no
correction and no extras.
"""

import pytest
from decimal import Decimal

from amort_calc.data_models import AmortizationSystem, LoanParameters


def make_params(**overrides) -> LoanParameters:
    values = dict(
        principal=Decimal("100000.00"),
        rate=Decimal("0.01"),
        term=12,
        system=AmortizationSystem.PRICE,
    )
    values.update(overrides)
    return LoanParameters(**values)


@pytest.fixture
def sac_params() -> LoanParameters:
    return make_params(system=AmortizationSystem.SAC)


@pytest.fixture
def price_params() -> LoanParameters:
    return make_params(system=AmortizationSystem.PRICE)


@pytest.fixture
def tr_history_file(tmp_path):
    path = tmp_path / "tr_historico.csv"
    path.write_text(
        "01/11/2023;01/01/2024;0,0605\n"
        "01/02/2024;01/02/2024;0,0800\n"
        "\n"
        "garbage line\n",
        encoding="utf-8",
    )
    return path
