"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from homeloan_gateway.config import settings
from homeloan_gateway.domain.loan_application import LoanApplicationWorkflow
from homeloan_gateway.domain.registration import RegistrationWorkflow
from homeloan_gateway.infrastructure.database.repositories import LoanApplicationRepository, RegistrationRepository
from homeloan_gateway.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_registration_repository(db: Session = Depends(get_db)) -> RegistrationRepository:
    return RegistrationRepository(db)


def get_loan_application_repository(db: Session = Depends(get_db)) -> LoanApplicationRepository:
    return LoanApplicationRepository(db)


def get_registration_workflow(
    repository: RegistrationRepository = Depends(get_registration_repository),
) -> RegistrationWorkflow:
    """Registration state machine bound to the request's session"""
    return RegistrationWorkflow(repository, minimum_age=settings.minimum_agent_age)


def get_loan_workflow(
    repository: LoanApplicationRepository = Depends(get_loan_application_repository),
) -> LoanApplicationWorkflow:
    """Loan application state machine with the deployment's rate and reviewer defaults"""
    return LoanApplicationWorkflow(
        repository,
        default_interest_rate=settings.default_interest_rate_percent,
        default_bank_agent_id=settings.default_bank_agent_id,
        max_term_years=settings.max_loan_term_years,
    )
