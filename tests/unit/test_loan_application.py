"""Unit tests for the loan application workflow"""

from dataclasses import replace
from datetime import timedelta

import pytest

from factories import NOW, make_loan_request
from homeloan_gateway.domain.exceptions import (
    FieldValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
    StaleStateError,
)
from homeloan_gateway.domain.models import ApplicationStatus


def test_submit_prices_with_default_rate_and_agent(loan_workflow):
    application = loan_workflow.submit(make_loan_request(), now=NOW)

    assert application.status == ApplicationStatus.PENDING
    assert application.interest_rate == 6.5
    assert application.monthly_payment == 1264.14
    assert application.loan_term_years == 30
    assert application.bank_agent_id == "agent-default"
    assert application.created_at == application.updated_at == NOW


def test_bank_rate_and_agent_override_defaults(loan_workflow):
    application = loan_workflow.submit(
        make_loan_request(interest_rate=0.0, bank_agent_id="agent-7", loan_amount="120000", loan_term_years="10"),
        now=NOW,
    )

    assert application.interest_rate == 0.0
    assert application.monthly_payment == 1000.0
    assert application.bank_agent_id == "agent-7"


def test_insurance_amount_must_be_positive_when_included(loan_workflow):
    with pytest.raises(FieldValidationError) as exc_info:
        loan_workflow.submit(make_loan_request(include_insurance=True, monthly_insurance_amount="0"))
    assert set(exc_info.value.errors) == {"monthly_insurance_amount"}

    application = loan_workflow.submit(make_loan_request(include_insurance=True, monthly_insurance_amount="150"))
    assert application.include_insurance
    assert application.monthly_insurance_amount == 150.0


def test_insurance_amount_ignored_when_not_included(loan_workflow):
    application = loan_workflow.submit(make_loan_request(include_insurance=False, monthly_insurance_amount="0"))
    assert application.monthly_insurance_amount is None


def test_validation_collects_every_field_error(loan_workflow):
    request = make_loan_request(
        applicant_id=" ",
        loan_amount="-5",
        loan_term_years="12.5",
        annual_income=None,
        employment_status="",
    )
    request.documents.proof_of_income_image = None
    request.bank.bank_id = ""

    errors = loan_workflow.validate(request)

    assert set(errors) == {
        "applicant_id",
        "loan_amount",
        "loan_term_years",
        "annual_income",
        "employment_status",
        "proof_of_income_image",
        "selected_bank_id",
    }


def test_loan_term_capped_at_maximum(loan_workflow):
    assert loan_workflow.validate(make_loan_request(loan_term_years="40")) == {}

    with pytest.raises(FieldValidationError) as exc_info:
        loan_workflow.submit(make_loan_request(loan_term_years="100000"))
    assert set(exc_info.value.errors) == {"loan_term_years"}
    assert loan_workflow.store.list_all() == []


@pytest.mark.parametrize("rate", [float("nan"), float("inf"), -0.5])
def test_bank_rate_must_be_finite_and_non_negative(loan_workflow, rate):
    with pytest.raises(FieldValidationError) as exc_info:
        loan_workflow.submit(make_loan_request(interest_rate=rate))
    assert set(exc_info.value.errors) == {"interest_rate"}
    assert loan_workflow.store.list_all() == []


def test_decide_from_pending(loan_workflow):
    application = loan_workflow.submit(make_loan_request(), now=NOW)

    approved = loan_workflow.decide(application.id, ApplicationStatus.APPROVED, now=NOW + timedelta(days=1))

    assert approved.status == ApplicationStatus.APPROVED
    assert approved.bank_agent_decision == "approved"
    assert approved.updated_at == NOW + timedelta(days=1)


def test_decide_after_review(loan_workflow):
    application = loan_workflow.submit(make_loan_request(), now=NOW)

    reviewing = loan_workflow.change_status(application.id, ApplicationStatus.UNDER_REVIEW, now=NOW)
    assert reviewing.application.status == ApplicationStatus.UNDER_REVIEW
    assert reviewing.previous_status == ApplicationStatus.PENDING

    change = loan_workflow.change_status(
        application.id,
        ApplicationStatus.REJECTED,
        decision_text="Debt ratio above 40%",
        notes="Income too low for requested amount",
        now=NOW,
    )
    assert change.previous_status == ApplicationStatus.UNDER_REVIEW
    rejected = change.application
    assert rejected.status == ApplicationStatus.REJECTED
    assert rejected.bank_agent_decision == "Debt ratio above 40%"
    assert rejected.bank_agent_notes == "Income too low for requested amount"


def test_final_states_are_terminal(loan_workflow):
    application = loan_workflow.submit(make_loan_request(), now=NOW)
    loan_workflow.decide(application.id, ApplicationStatus.REJECTED, now=NOW)

    with pytest.raises(InvalidTransitionError):
        loan_workflow.decide(application.id, ApplicationStatus.APPROVED)
    with pytest.raises(InvalidTransitionError):
        loan_workflow.mark_under_review(application.id)
    assert loan_workflow.store.get(application.id).status == ApplicationStatus.REJECTED


def test_under_review_cannot_repeat(loan_workflow):
    application = loan_workflow.submit(make_loan_request(), now=NOW)
    loan_workflow.mark_under_review(application.id, now=NOW)

    with pytest.raises(InvalidTransitionError):
        loan_workflow.mark_under_review(application.id, now=NOW)


def test_decide_rejects_non_final_outcome(loan_workflow):
    application = loan_workflow.submit(make_loan_request(), now=NOW)
    with pytest.raises(InvalidTransitionError):
        loan_workflow.decide(application.id, ApplicationStatus.PENDING)


def test_unknown_application(loan_workflow):
    with pytest.raises(RecordNotFoundError):
        loan_workflow.decide("00000000-0000-0000-0000-000000000000", ApplicationStatus.APPROVED)


def test_concurrent_decision_raises_stale_state(loan_workflow, monkeypatch):
    application = loan_workflow.submit(make_loan_request(), now=NOW)
    stale_snapshot = replace(application)
    loan_workflow.decide(application.id, ApplicationStatus.APPROVED, now=NOW)

    monkeypatch.setattr(loan_workflow.store, "get", lambda application_id: stale_snapshot)
    with pytest.raises(StaleStateError):
        loan_workflow.decide(application.id, ApplicationStatus.REJECTED, now=NOW)

    monkeypatch.undo()
    assert loan_workflow.store.get(application.id).status == ApplicationStatus.APPROVED
