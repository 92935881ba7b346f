"""Pytest fixtures for testing"""

import os

# Point settings at SQLite before any application module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from homeloan_gateway.api.main import create_app
from homeloan_gateway.infrastructure.database.models import Base
from homeloan_gateway.infrastructure.database.session import enable_sqlite_savepoints, get_db
from homeloan_gateway.infrastructure.database.repositories import LoanApplicationRepository, RegistrationRepository
from homeloan_gateway.domain.loan_application import LoanApplicationWorkflow
from homeloan_gateway.domain.registration import RegistrationWorkflow

# Test database: one shared in-memory connection
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)

@pytest.fixture
def registration_workflow(db: Session) -> RegistrationWorkflow:
    return RegistrationWorkflow(RegistrationRepository(db), minimum_age=20)

@pytest.fixture
def loan_workflow(db: Session) -> LoanApplicationWorkflow:
    return LoanApplicationWorkflow(
        LoanApplicationRepository(db),
        default_interest_rate=6.5,
        default_bank_agent_id="agent-default",
    )

@pytest.fixture
def registration_payload() -> dict:
    """JSON body for POST /v1/registrations"""
    return {
        "user_id": "user-api",
        "personal_info": {
            "first_name": "Youssef",
            "last_name": "Trabelsi",
            "date_of_birth": "02/07/1988",
            "national_id": "07654321",
            "phone": "98765432",
            "address": "5 Avenue Habib Bourguiba",
            "city": "Sfax",
            "postal_code": "3000",
        },
        "bank_info": {
            "bank_name": "Attijari Bank",
            "position": "Loan Advisor",
            "employee_id": "552201",
            "department": "Mortgages",
            "supervisor_phone": "74222333",
        },
        "documents": {
            "national_id_document": "docs/user-api/id.jpg",
            "bank_employment_letter": "docs/user-api/letter.jpg",
        },
    }

@pytest.fixture
def loan_payload() -> dict:
    """JSON body for POST /v1/loan-applications"""
    return {
        "applicant_id": "buyer-api",
        "property_id": "property-7",
        "loan_amount": "200000",
        "loan_term_years": "30",
        "employment_status": "employed",
        "annual_income": "52000",
        "identity_card_image": "uploads/id.jpg",
        "proof_of_income_image": "uploads/income.jpg",
        "selected_bank_id": "bank-stb",
        "bank_agent_id": "agent-1",
    }
