"""Unit tests for fixed-rate amortization"""

import pytest

from homeloan_gateway.domain.amortization import amortize, quote_for_property


def test_standard_thirty_year_loan():
    """200,000 at 6.5% over 30 years"""
    result = amortize(200000, 6.5, 30)

    assert round(result.monthly_payment, 2) == 1264.14
    # Identity holds on unrounded values
    assert result.monthly_payment * 360 - 200000 == pytest.approx(result.total_interest)
    assert result.total_payment == pytest.approx(result.monthly_payment * 360)


def test_zero_rate_splits_principal_evenly():
    result = amortize(120000, 0, 10)

    assert result.monthly_payment == 1000.0
    assert result.total_interest == 0.0


def test_ratios_absent_without_property_value():
    result = amortize(150000, 5, 20)

    assert result.loan_to_value_percent is None
    assert result.down_payment_percent is None


def test_insurance_added_to_total_monthly_payment():
    result = amortize(120000, 0, 10, monthly_insurance=45.5)

    assert result.total_monthly_payment == pytest.approx(1045.5)
    assert result.rounded().total_monthly_payment == 1045.5


def test_quote_for_property_reports_ratios():
    result = quote_for_property(250000, 50000, 6.5, 30)

    assert result.principal == 200000
    assert result.loan_to_value_percent == pytest.approx(80.0)
    assert result.down_payment_percent == pytest.approx(20.0)
    assert result.rounded().monthly_payment == 1264.14


@pytest.mark.parametrize(
    "principal,rate,term",
    [(0, 6.5, 30), (-100, 6.5, 30), (100000, -1, 30), (100000, 5, 0)],
)
def test_amortize_rejects_invalid_input(principal, rate, term):
    with pytest.raises(ValueError):
        amortize(principal, rate, term)


def test_down_payment_cannot_cover_whole_property():
    with pytest.raises(ValueError):
        quote_for_property(200000, 200000, 5, 20)
