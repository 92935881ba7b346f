"""Fixed-rate amortization arithmetic for loan quotes"""

from homeloan_gateway.domain.models import AmortizationResult


def amortize(
    principal: float,
    annual_rate_percent: float,
    term_years: int,
    property_value: float | None = None,
    monthly_insurance: float = 0.0,
) -> AmortizationResult:
    """
    Quote equal monthly payments for a fixed-rate loan.

    Formula:
    - r = annual_rate_percent / 100 / 12, n = term_years * 12
    - r == 0: payment = principal / n
    - otherwise: payment = principal * r * (1+r)^n / ((1+r)^n - 1)

    Loan-to-value and down-payment ratios need a property value; without one
    (pre-approval requests) they are reported as None, not zero.

    Values are computed without intermediate rounding. Call .rounded() on the
    result for 2-decimal display figures.

    Example:
        200,000 at 6.5% over 30 years -> 1,264.14 / month
        120,000 at 0% over 10 years   -> 1,000.00 / month
    """
    if principal <= 0:
        raise ValueError("principal must be positive")
    if term_years <= 0:
        raise ValueError("term_years must be positive")
    if annual_rate_percent < 0:
        raise ValueError("annual_rate_percent cannot be negative")

    monthly_rate = annual_rate_percent / 100 / 12
    num_payments = term_years * 12

    if monthly_rate == 0:
        monthly_payment = principal / num_payments
    else:
        compound = (1 + monthly_rate) ** num_payments
        monthly_payment = principal * monthly_rate * compound / (compound - 1)

    total_payment = monthly_payment * num_payments
    total_interest = total_payment - principal

    loan_to_value = None
    down_payment_ratio = None
    if property_value:
        loan_to_value = principal / property_value * 100
        down_payment_ratio = (property_value - principal) / property_value * 100

    return AmortizationResult(
        principal=principal,
        annual_rate_percent=annual_rate_percent,
        term_years=term_years,
        monthly_payment=monthly_payment,
        total_interest=total_interest,
        total_payment=total_payment,
        loan_to_value_percent=loan_to_value,
        down_payment_percent=down_payment_ratio,
        monthly_insurance=monthly_insurance,
        total_monthly_payment=monthly_payment + monthly_insurance,
    )


def quote_for_property(
    property_value: float,
    down_payment: float,
    annual_rate_percent: float,
    term_years: int,
    monthly_insurance: float = 0.0,
) -> AmortizationResult:
    """Quote a purchase: the loan covers the property value less the down payment"""
    if down_payment < 0 or down_payment >= property_value:
        raise ValueError("down_payment must be between 0 and the property value")

    return amortize(
        principal=property_value - down_payment,
        annual_rate_percent=annual_rate_percent,
        term_years=term_years,
        property_value=property_value,
        monthly_insurance=monthly_insurance,
    )
