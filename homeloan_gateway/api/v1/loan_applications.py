"""Loan application endpoints: buyer submission, bank agent decision, lookup and listing"""

import time
import logging
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homeloan_gateway.api.v1.schemas import (
    LoanApplicationCreate,
    LoanApplicationListResponse,
    LoanApplicationResponse,
    LoanApplicationSubmittedResponse,
    LoanDecisionRequest,
)
from homeloan_gateway.api.dependencies import get_loan_application_repository, get_loan_workflow, get_request_id
from homeloan_gateway.infrastructure.database.session import get_db
from homeloan_gateway.infrastructure.database.repositories import LoanApplicationRepository
from homeloan_gateway.domain.loan_application import LoanApplicationWorkflow
from homeloan_gateway.domain.exceptions import (
    FieldValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
    StaleStateError,
)
from homeloan_gateway.domain.models import ApplicationStatus
from homeloan_gateway.infrastructure.observability.metrics import (
    loan_application_status_counter,
    record_loan_submission,
    stale_state_counter,
    validation_failure_counter,
)
from homeloan_gateway.infrastructure.observability.logging import log_application_event

router = APIRouter()


@router.post("/loan-applications", response_model=LoanApplicationSubmittedResponse, status_code=201)
def submit_loan_application(
    request_body: LoanApplicationCreate,
    request: Request,
    db: Session = Depends(get_db),
    workflow: LoanApplicationWorkflow = Depends(get_loan_workflow),
):
    """
    Submit a loan application.

    Flow:
    1. Validate financial, document, bank and insurance fields
    2. Price the loan (bank rate, else the default rate) and compute the monthly payment
    3. Persist the application as pending, routed to the bank's agent or the default reviewer
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        application = workflow.submit(request_body.to_domain())
        db.commit()

    except FieldValidationError as e:
        db.rollback()
        validation_failure_counter.labels(operation="submit_loan_application").inc()
        logging.warning(f"Loan application rejected: {e}", extra={"request_id": request_id})
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error while submitting loan application: {e}", extra={"request_id": request_id})
        raise

    duration_ms = (time.time() - start_time) * 1000
    record_loan_submission(application.monthly_payment)
    log_application_event(
        request_id,
        application.id,
        application.applicant_id,
        None,
        application.status.value,
        duration_ms,
        monthly_payment=application.monthly_payment,
    )

    return LoanApplicationSubmittedResponse(
        id=application.id,
        status=application.status.value,
        interest_rate=application.interest_rate,
        monthly_payment=application.monthly_payment,
    )


@router.post("/loan-applications/{application_id}/decision", response_model=LoanApplicationResponse)
def decide_loan_application(
    application_id: str,
    request_body: LoanDecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
    workflow: LoanApplicationWorkflow = Depends(get_loan_workflow),
):
    """
    Move an application to under_review, approved or rejected.

    Approved and rejected are final; a second decision fails with 409.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        change = workflow.change_status(
            application_id,
            ApplicationStatus(request_body.status),
            decision_text=request_body.decision_text,
            notes=request_body.notes,
        )
        application = change.application
        db.commit()

    except StaleStateError as e:
        db.rollback()
        stale_state_counter.labels(entity="loan_application").inc()
        logging.warning(f"Concurrent loan decision: {e}", extra={"request_id": request_id})
        raise

    except (InvalidTransitionError, RecordNotFoundError) as e:
        db.rollback()
        logging.warning(f"Loan decision refused: {e}", extra={"request_id": request_id})
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error while deciding loan application: {e}", extra={"request_id": request_id})
        raise

    duration_ms = (time.time() - start_time) * 1000
    loan_application_status_counter.labels(status=application.status.value).inc()
    log_application_event(
        request_id,
        application.id,
        application.applicant_id,
        change.previous_status.value,
        application.status.value,
        duration_ms,
    )

    return LoanApplicationResponse.from_domain(application)


@router.get("/loan-applications/{application_id}", response_model=LoanApplicationResponse)
def get_loan_application(
    application_id: str,
    repository: LoanApplicationRepository = Depends(get_loan_application_repository),
):
    """Retrieve one loan application"""
    application = repository.get(application_id)
    if application is None:
        raise RecordNotFoundError("loan_application", application_id)

    return LoanApplicationResponse.from_domain(application)


@router.get("/loan-applications", response_model=LoanApplicationListResponse)
def list_loan_applications(
    applicant_id: str | None = Query(None, description="Buyer's own applications"),
    bank_agent_id: str | None = Query(None, description="Applications routed to this reviewer"),
    status: ApplicationStatus | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    repository: LoanApplicationRepository = Depends(get_loan_application_repository),
):
    """List loan applications, newest first"""
    applications = repository.list_applications(
        applicant_id=applicant_id,
        bank_agent_id=bank_agent_id,
        status=status,
        limit=limit,
    )

    return LoanApplicationListResponse(
        applications=[LoanApplicationResponse.from_domain(a) for a in applications]
    )
