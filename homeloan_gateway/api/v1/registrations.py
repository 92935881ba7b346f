"""Bank-agent registration endpoints: submit, admin decision, lookup and listing"""

import time
import logging
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homeloan_gateway.api.v1.schemas import (
    RegistrationDecisionRequest,
    RegistrationListResponse,
    RegistrationRequest,
    RegistrationResponse,
    RegistrationSubmittedResponse,
)
from homeloan_gateway.api.dependencies import get_registration_repository, get_registration_workflow, get_request_id
from homeloan_gateway.config import settings
from homeloan_gateway.infrastructure.database.session import get_db
from homeloan_gateway.infrastructure.database.repositories import RegistrationRepository
from homeloan_gateway.domain.registration import RegistrationWorkflow
from homeloan_gateway.domain.exceptions import (
    DuplicateRegistrationError,
    FieldValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
    StaleStateError,
)
from homeloan_gateway.domain.models import RegistrationStatus
from homeloan_gateway.infrastructure.observability.metrics import (
    record_registration_decision,
    registration_submitted_counter,
    stale_state_counter,
    validation_failure_counter,
)
from homeloan_gateway.infrastructure.observability.logging import log_registration_event

router = APIRouter()


@router.post("/registrations", response_model=RegistrationSubmittedResponse, status_code=201)
def submit_registration(
    request_body: RegistrationRequest,
    request: Request,
    db: Session = Depends(get_db),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
):
    """
    Submit a bank-agent registration for admin review.

    Flow:
    1. Refuse users who already have a pending or approved registration
    2. Validate every personal, employment and document field
    3. Persist the registration as pending
    """
    start_time = time.time()
    request_id = get_request_id(request)
    candidate = request_body.to_domain()

    try:
        if workflow.has_existing_registration(candidate.user_id):
            raise DuplicateRegistrationError(candidate.user_id)

        registration = workflow.submit(candidate)
        db.commit()

    except FieldValidationError as e:
        db.rollback()
        validation_failure_counter.labels(operation="submit_registration").inc()
        logging.warning(f"Registration rejected: {e}", extra={"request_id": request_id})
        raise

    except DuplicateRegistrationError as e:
        db.rollback()
        logging.warning(f"Duplicate registration: {e}", extra={"request_id": request_id})
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error while submitting registration: {e}", extra={"request_id": request_id})
        raise

    duration_ms = (time.time() - start_time) * 1000
    registration_submitted_counter.inc()
    log_registration_event(request_id, registration.id, registration.user_id, None, registration.status.value, duration_ms)

    return RegistrationSubmittedResponse(id=registration.id, status=registration.status.value)


@router.post("/registrations/{registration_id}/decision", response_model=RegistrationResponse)
def decide_registration(
    registration_id: str,
    request_body: RegistrationDecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
):
    """
    Approve or reject a pending registration.

    Rejections must carry a reason. A registration is decided once; later
    attempts fail with 409 and leave the first decision in place.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        registration = workflow.decide(
            registration_id,
            RegistrationStatus(request_body.outcome),
            notes=request_body.notes,
            rejection_reason=request_body.rejection_reason,
            reviewed_by=request_body.reviewed_by,
        )
        db.commit()

    except FieldValidationError as e:
        db.rollback()
        validation_failure_counter.labels(operation="decide_registration").inc()
        logging.warning(f"Registration decision rejected: {e}", extra={"request_id": request_id})
        raise

    except StaleStateError as e:
        db.rollback()
        stale_state_counter.labels(entity="registration").inc()
        logging.warning(f"Concurrent registration decision: {e}", extra={"request_id": request_id})
        raise

    except (InvalidTransitionError, RecordNotFoundError) as e:
        db.rollback()
        logging.warning(f"Registration decision refused: {e}", extra={"request_id": request_id})
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Database error while deciding registration: {e}", extra={"request_id": request_id})
        raise

    duration_ms = (time.time() - start_time) * 1000
    record_registration_decision(registration.status.value)
    log_registration_event(
        request_id,
        registration.id,
        registration.user_id,
        RegistrationStatus.PENDING.value,
        registration.status.value,
        duration_ms,
    )

    return RegistrationResponse.from_domain(registration, workflow.age(registration))


@router.get("/registrations/{registration_id}", response_model=RegistrationResponse)
def get_registration(
    registration_id: str,
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
):
    """Retrieve one registration with its computed age"""
    registration = workflow.store.get(registration_id)
    if registration is None:
        raise RecordNotFoundError("registration", registration_id)

    return RegistrationResponse.from_domain(registration, workflow.age(registration))


@router.get("/registrations", response_model=RegistrationListResponse)
def list_registrations(
    user_id: str | None = Query(None, description="Only this user's registrations"),
    status: RegistrationStatus | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.registration_page_size, ge=1, le=100),
    repository: RegistrationRepository = Depends(get_registration_repository),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
):
    """
    List registrations for the admin review queue, newest first.

    Returns:
        One page of registrations plus the total matching the filters
    """
    registrations, total = repository.list_registrations(
        user_id=user_id,
        status=status,
        offset=(page - 1) * limit,
        limit=limit,
    )

    return RegistrationListResponse(
        registrations=[RegistrationResponse.from_domain(r, workflow.age(r)) for r in registrations],
        total=total,
        page=page,
        limit=limit,
    )
