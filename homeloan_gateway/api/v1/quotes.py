"""POST /v1/loan-quotes - Loan simulator (monthly payment, interest, LTV)"""

from fastapi import APIRouter, HTTPException

from homeloan_gateway.api.v1.schemas import LoanQuoteRequest, LoanQuoteResponse
from homeloan_gateway.config import settings
from homeloan_gateway.domain.amortization import amortize, quote_for_property

router = APIRouter()


@router.post("/loan-quotes", response_model=LoanQuoteResponse)
def quote_loan(request_body: LoanQuoteRequest):
    """
    Quote a fixed-rate loan without storing anything.

    With a property value the principal is the value less the down payment
    and LTV is reported; with only a loan amount (pre-approval) the LTV and
    down-payment ratios are null.
    """
    rate = request_body.interest_rate
    if rate is None:
        rate = settings.default_interest_rate_percent

    try:
        if request_body.property_value is not None:
            result = quote_for_property(
                property_value=request_body.property_value,
                down_payment=request_body.down_payment,
                annual_rate_percent=rate,
                term_years=request_body.loan_term_years,
                monthly_insurance=request_body.monthly_insurance,
            )
        elif request_body.loan_amount is not None:
            result = amortize(
                principal=request_body.loan_amount,
                annual_rate_percent=rate,
                term_years=request_body.loan_term_years,
                monthly_insurance=request_body.monthly_insurance,
            )
        else:
            raise HTTPException(status_code=422, detail="Provide loan_amount or property_value")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    display = result.rounded()
    return LoanQuoteResponse(**vars(display))
