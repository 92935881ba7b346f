"""Loan application lifecycle: buyer submission, optional review step, bank agent decision"""

import math
from datetime import datetime
from typing import Dict, Optional

from homeloan_gateway.domain.amortization import amortize
from homeloan_gateway.domain.exceptions import (
    FieldValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
    StaleStateError,
)
from homeloan_gateway.domain.models import (
    ApplicationStatus,
    LoanApplication,
    LoanApplicationRequest,
    StatusChange,
)
from homeloan_gateway.domain.ports import LoanApplicationStore
from homeloan_gateway.domain.validation import (
    parse_non_negative_number,
    parse_positive_int,
    parse_positive_number,
    required_non_empty,
)
from homeloan_gateway.utils.date_utils import utcnow

ENTITY = "loan_application"

# A bank agent may decide straight from pending or after flagging the file as under review
VALID_TRANSITIONS: Dict[ApplicationStatus, frozenset] = {
    ApplicationStatus.PENDING: frozenset(
        {ApplicationStatus.UNDER_REVIEW, ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
    ),
    ApplicationStatus.UNDER_REVIEW: frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}),
    ApplicationStatus.APPROVED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}

FINAL_OUTCOMES = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


class LoanApplicationWorkflow:
    """
    Governs loan applications from submission to final decision.

    Interest rate and monthly payment are always computed here at submission
    and are never taken from the buyer. The default rate and the default
    reviewer are injected so deployments and tests can vary them.
    """

    def __init__(
        self,
        store: LoanApplicationStore,
        default_interest_rate: float = 6.5,
        default_bank_agent_id: str | None = None,
        max_term_years: int = 40,
    ):
        self.store = store
        self.default_interest_rate = default_interest_rate
        self.default_bank_agent_id = default_bank_agent_id
        self.max_term_years = max_term_years

    def validate(self, request: LoanApplicationRequest) -> Dict[str, str]:
        """Return field -> reason for every problem with the request (empty when valid)"""
        financials = request.financials
        errors: Dict[str, str] = {}

        for field_name in required_non_empty(
            {"applicant_id": request.applicant_id, "employment_status": financials.employment_status}
        ):
            errors[field_name] = "This field is required"

        if parse_positive_number(financials.loan_amount) is None:
            errors["loan_amount"] = "Loan amount must be a positive number"
        term_years = parse_positive_int(financials.loan_term_years)
        if term_years is None:
            errors["loan_term_years"] = "Loan term must be a positive whole number of years"
        elif term_years > self.max_term_years:
            errors["loan_term_years"] = f"Loan term cannot exceed {self.max_term_years} years"
        if parse_non_negative_number(financials.annual_income) is None:
            errors["annual_income"] = "Annual income is required"

        if required_non_empty({"identity_card_image": request.documents.identity_card_image}):
            errors["identity_card_image"] = "Identity card image is required"
        if required_non_empty({"proof_of_income_image": request.documents.proof_of_income_image}):
            errors["proof_of_income_image"] = "Proof of income is required"

        if required_non_empty({"bank_id": request.bank.bank_id}):
            errors["selected_bank_id"] = "Select a bank"
        rate = request.bank.interest_rate
        if rate is not None and (not math.isfinite(rate) or rate < 0):
            errors["interest_rate"] = "Interest rate must be a finite, non-negative percentage"

        insurance = request.insurance
        if insurance is not None and insurance.include:
            if parse_positive_number(insurance.monthly_amount) is None:
                errors["monthly_insurance_amount"] = "Monthly insurance amount must be greater than zero"

        return errors

    def submit(self, request: LoanApplicationRequest, now: datetime | None = None) -> LoanApplication:
        """
        Validate, price and store a new pending application.

        Raises:
            FieldValidationError: One or more fields are invalid (nothing stored)
        """
        errors = self.validate(request)
        if errors:
            raise FieldValidationError(errors)

        now = now or utcnow()
        financials = request.financials
        loan_amount = parse_positive_number(financials.loan_amount)
        term_years = parse_positive_int(financials.loan_term_years)

        interest_rate = request.bank.interest_rate
        if interest_rate is None:
            interest_rate = self.default_interest_rate

        include_insurance = bool(request.insurance and request.insurance.include)
        monthly_insurance = parse_positive_number(request.insurance.monthly_amount) if include_insurance else None

        quote = amortize(loan_amount, interest_rate, term_years)

        application = LoanApplication(
            applicant_id=request.applicant_id.strip(),
            property_id=request.property_id or None,
            selected_bank_id=request.bank.bank_id,
            bank_agent_id=request.bank.bank_agent_id or self.default_bank_agent_id,
            loan_amount=loan_amount,
            loan_term_years=term_years,
            interest_rate=interest_rate,
            monthly_payment=round(quote.monthly_payment, 2),
            employment_status=financials.employment_status.strip(),
            annual_income=parse_non_negative_number(financials.annual_income),
            include_insurance=include_insurance,
            monthly_insurance_amount=monthly_insurance,
            identity_card_image=request.documents.identity_card_image,
            proof_of_income_image=request.documents.proof_of_income_image,
            status=ApplicationStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        return self.store.insert(application)

    def decide(
        self,
        application_id: str,
        outcome: ApplicationStatus,
        decision_text: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> LoanApplication:
        """
        Record a bank agent's final decision.

        Raises:
            InvalidTransitionError: Outcome is not final, or the application is already decided
        """
        return self._decide(application_id, outcome, decision_text, notes, now).application

    def mark_under_review(self, application_id: str, now: datetime | None = None) -> LoanApplication:
        """Optional step before a decision; only from pending"""
        return self._transition(application_id, ApplicationStatus.UNDER_REVIEW, {}, now).application

    def change_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        decision_text: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> StatusChange:
        """
        Single entry point for decision requests that may also target under_review.

        Returns the updated application together with the status it moved
        from, as matched by the conditional write.
        """
        status = ApplicationStatus(status)
        if status == ApplicationStatus.UNDER_REVIEW:
            return self._transition(application_id, ApplicationStatus.UNDER_REVIEW, {}, now)
        return self._decide(application_id, status, decision_text, notes, now)

    def _decide(
        self,
        application_id: str,
        outcome: ApplicationStatus,
        decision_text: str | None,
        notes: str | None,
        now: datetime | None,
    ) -> StatusChange:
        outcome = ApplicationStatus(outcome)
        if outcome not in FINAL_OUTCOMES:
            raise InvalidTransitionError(ENTITY, self._current_status(application_id).value, outcome.value)

        return self._transition(
            application_id,
            outcome,
            {
                "bank_agent_decision": decision_text or outcome.value,
                "bank_agent_notes": notes,
            },
            now,
        )

    def _current_status(self, application_id: str) -> ApplicationStatus:
        application = self.store.get(application_id)
        if application is None:
            raise RecordNotFoundError(ENTITY, application_id)
        return application.status

    def _transition(
        self,
        application_id: str,
        target: ApplicationStatus,
        changes: Dict[str, Optional[str]],
        now: datetime | None,
    ) -> StatusChange:
        application = self.store.get(application_id)
        if application is None:
            raise RecordNotFoundError(ENTITY, application_id)

        current = application.status
        if target not in VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(ENTITY, current.value, target.value)

        now = now or utcnow()
        values = dict(changes)
        values["status"] = target
        values["updated_at"] = max(now, application.created_at)

        updated = self.store.update_if_status(application_id, current, values)
        if updated is None:
            raise StaleStateError(ENTITY, application_id, current.value)
        return StatusChange(application=updated, previous_status=current)
