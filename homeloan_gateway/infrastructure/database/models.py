"""SQLAlchemy ORM models for the registration and loan application tables"""

import uuid
from sqlalchemy import Column, Boolean, Float, DateTime, Date, Index, Integer, Text, Uuid, text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

_ACTIVE_STATUS_PREDICATE = text("status IN ('pending', 'approved')")


class BankAgentRegistrationRecord(Base):
    """Bank-agent candidate credentials awaiting or past admin review"""

    __tablename__ = "bank_agent_registration"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)

    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    national_id = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    postal_code = Column(Text, nullable=True)

    bank_name = Column(Text, nullable=False)
    position = Column(Text, nullable=False)
    employee_id = Column(Text, nullable=False)
    department = Column(Text, nullable=False)
    work_address = Column(Text, nullable=True)
    supervisor_name = Column(Text, nullable=True)
    supervisor_phone = Column(Text, nullable=False)

    national_id_document = Column(Text, nullable=True)
    bank_employment_letter = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default="pending", index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # At most one pending/approved registration per user; makes submission an atomic insert-if-absent
    __table_args__ = (
        Index(
            "uq_bank_agent_registration_active_user",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_STATUS_PREDICATE,
            sqlite_where=_ACTIVE_STATUS_PREDICATE,
        ),
    )


class LoanApplicationRecord(Base):
    """Buyer loan request awaiting or past a bank agent decision"""

    __tablename__ = "loan_application"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    applicant_id = Column(Text, nullable=False, index=True)
    property_id = Column(Text, nullable=True)
    selected_bank_id = Column(Text, nullable=True)
    bank_agent_id = Column(Text, nullable=True, index=True)

    loan_amount = Column(Float, nullable=False)
    loan_term_years = Column(Integer, nullable=False)
    interest_rate = Column(Float, nullable=True)
    monthly_payment = Column(Float, nullable=True)
    employment_status = Column(Text, nullable=False)
    annual_income = Column(Float, nullable=False)

    include_insurance = Column(Boolean, nullable=False, default=False)
    monthly_insurance_amount = Column(Float, nullable=True)

    identity_card_image = Column(Text, nullable=True)
    proof_of_income_image = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default="pending", index=True)
    bank_agent_decision = Column(Text, nullable=True)
    bank_agent_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
