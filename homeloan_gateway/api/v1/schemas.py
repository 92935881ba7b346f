"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from homeloan_gateway.config import settings
from homeloan_gateway.domain.models import (
    BankAgentRegistration,
    BankSelection,
    EmploymentInfo,
    InsuranceRider,
    LoanApplication,
    LoanApplicationRequest,
    LoanDocuments,
    LoanFinancials,
    PersonalInfo,
    RegistrationCandidate,
    RegistrationDocuments,
    WorkflowSummary,
)

# Form fields are accepted as typed; the domain validator reports bad values per field
FormNumber = Optional[Union[float, str]]


# --- Registrations -----------------------------------------------------------


class PersonalInfoSchema(BaseModel):
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = Field("", description="DD/MM/YYYY")
    national_id: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""


class BankInfoSchema(BaseModel):
    bank_name: str = ""
    position: str = ""
    employee_id: str = ""
    department: str = ""
    work_address: str = ""
    supervisor_name: str = ""
    supervisor_phone: str = ""


class RegistrationDocumentsSchema(BaseModel):
    national_id_document: Optional[str] = None
    bank_employment_letter: Optional[str] = None


class RegistrationRequest(BaseModel):
    """Request body for POST /v1/registrations"""

    user_id: str = Field(..., min_length=1, description="Candidate user identifier")
    personal_info: PersonalInfoSchema = Field(default_factory=PersonalInfoSchema)
    bank_info: BankInfoSchema = Field(default_factory=BankInfoSchema)
    documents: RegistrationDocumentsSchema = Field(default_factory=RegistrationDocumentsSchema)

    def to_domain(self) -> RegistrationCandidate:
        return RegistrationCandidate(
            user_id=self.user_id,
            personal=PersonalInfo(**self.personal_info.model_dump()),
            employment=EmploymentInfo(**self.bank_info.model_dump()),
            documents=RegistrationDocuments(**self.documents.model_dump()),
        )


class RegistrationSubmittedResponse(BaseModel):
    """Response for POST /v1/registrations"""

    id: str
    status: str


class RegistrationDecisionRequest(BaseModel):
    """Request body for POST /v1/registrations/{id}/decision"""

    outcome: Literal["approved", "rejected"]
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None


class RegistrationResponse(BaseModel):
    id: str
    user_id: str
    full_name: str
    first_name: str
    last_name: str
    date_of_birth: date
    age: int
    national_id: str
    phone: str
    address: str
    city: str
    postal_code: Optional[str] = None
    bank_name: str
    position: str
    employee_id: str
    department: str
    work_address: Optional[str] = None
    supervisor_name: Optional[str] = None
    supervisor_phone: str
    national_id_document: Optional[str] = None
    bank_employment_letter: Optional[str] = None
    status: str
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None

    @classmethod
    def from_domain(cls, registration: BankAgentRegistration, age: int) -> "RegistrationResponse":
        return cls(
            id=registration.id,
            user_id=registration.user_id,
            full_name=registration.full_name,
            first_name=registration.first_name,
            last_name=registration.last_name,
            date_of_birth=registration.date_of_birth,
            age=age,
            national_id=registration.national_id,
            phone=registration.phone,
            address=registration.address,
            city=registration.city,
            postal_code=registration.postal_code,
            bank_name=registration.bank_name,
            position=registration.position,
            employee_id=registration.employee_id,
            department=registration.department,
            work_address=registration.work_address,
            supervisor_name=registration.supervisor_name,
            supervisor_phone=registration.supervisor_phone,
            national_id_document=registration.national_id_document,
            bank_employment_letter=registration.bank_employment_letter,
            status=registration.status.value,
            submitted_at=registration.submitted_at,
            reviewed_at=registration.reviewed_at,
            reviewed_by=registration.reviewed_by,
            admin_notes=registration.admin_notes,
            rejection_reason=registration.rejection_reason,
        )


class RegistrationListResponse(BaseModel):
    """Response for GET /v1/registrations"""

    registrations: List[RegistrationResponse]
    total: int
    page: int
    limit: int


# --- Loan applications -------------------------------------------------------


class InsuranceSchema(BaseModel):
    include: bool = False
    monthly_amount: FormNumber = None


class LoanApplicationCreate(BaseModel):
    """Request body for POST /v1/loan-applications"""

    applicant_id: str = Field(..., min_length=1)
    property_id: Optional[str] = None
    loan_amount: FormNumber = None
    loan_term_years: FormNumber = None
    employment_status: str = ""
    annual_income: FormNumber = None
    identity_card_image: Optional[str] = None
    proof_of_income_image: Optional[str] = None
    selected_bank_id: Optional[str] = None
    bank_interest_rate: Optional[float] = Field(None, description="Rate quoted by the selected bank, in percent")
    bank_agent_id: Optional[str] = None
    insurance: Optional[InsuranceSchema] = None

    def to_domain(self) -> LoanApplicationRequest:
        return LoanApplicationRequest(
            applicant_id=self.applicant_id,
            property_id=self.property_id,
            financials=LoanFinancials(
                loan_amount=self.loan_amount,
                loan_term_years=self.loan_term_years,
                employment_status=self.employment_status,
                annual_income=self.annual_income,
            ),
            documents=LoanDocuments(
                identity_card_image=self.identity_card_image,
                proof_of_income_image=self.proof_of_income_image,
            ),
            bank=BankSelection(
                bank_id=self.selected_bank_id,
                interest_rate=self.bank_interest_rate,
                bank_agent_id=self.bank_agent_id,
            ),
            insurance=(
                InsuranceRider(include=self.insurance.include, monthly_amount=self.insurance.monthly_amount)
                if self.insurance
                else None
            ),
        )


class LoanApplicationSubmittedResponse(BaseModel):
    """Response for POST /v1/loan-applications"""

    id: str
    status: str
    interest_rate: float
    monthly_payment: float


class LoanDecisionRequest(BaseModel):
    """Request body for POST /v1/loan-applications/{id}/decision"""

    status: Literal["approved", "rejected", "under_review"]
    decision_text: Optional[str] = None
    notes: Optional[str] = None


class LoanApplicationResponse(BaseModel):
    id: str
    applicant_id: str
    property_id: Optional[str] = None
    selected_bank_id: Optional[str] = None
    bank_agent_id: Optional[str] = None
    loan_amount: float
    loan_term_years: int
    interest_rate: Optional[float] = None
    monthly_payment: Optional[float] = None
    employment_status: str
    annual_income: float
    include_insurance: bool
    monthly_insurance_amount: Optional[float] = None
    identity_card_image: Optional[str] = None
    proof_of_income_image: Optional[str] = None
    status: str
    bank_agent_decision: Optional[str] = None
    bank_agent_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, application: LoanApplication) -> "LoanApplicationResponse":
        data = dict(vars(application))
        data["status"] = application.status.value
        return cls(**data)


class LoanApplicationListResponse(BaseModel):
    applications: List[LoanApplicationResponse]


# --- Quotes ------------------------------------------------------------------


class LoanQuoteRequest(BaseModel):
    """Request body for POST /v1/loan-quotes; give either loan_amount or property_value"""

    loan_amount: Optional[float] = Field(None, gt=0)
    property_value: Optional[float] = Field(None, gt=0)
    down_payment: float = Field(0.0, ge=0)
    interest_rate: Optional[float] = Field(None, ge=0, description="Annual rate in percent; default applies when omitted")
    loan_term_years: int = Field(..., gt=0, le=settings.max_loan_term_years)
    monthly_insurance: float = Field(0.0, ge=0)


class LoanQuoteResponse(BaseModel):
    principal: float
    annual_rate_percent: float
    term_years: int
    monthly_payment: float
    total_interest: float
    total_payment: float
    loan_to_value_percent: Optional[float] = None
    down_payment_percent: Optional[float] = None
    monthly_insurance: float
    total_monthly_payment: float


# --- Summary -----------------------------------------------------------------


class AgentPerformanceSchema(BaseModel):
    bank_agent_id: str
    agent_name: Optional[str] = None
    bank_name: Optional[str] = None
    total_applications: int
    approved: int
    rejected: int
    pending: int
    approval_rate: Optional[float] = None


class RecentActivitySchema(BaseModel):
    registrations: int
    loan_applications: int


class SummaryResponse(BaseModel):
    """Response for GET /v1/summary"""

    total_registrations: int
    total_loan_applications: int
    registration_status_counts: Dict[str, int]
    loan_application_status_counts: Dict[str, int]
    top_performers: List[AgentPerformanceSchema]
    agents_with_applications: int
    recent_activity: RecentActivitySchema

    @classmethod
    def from_domain(cls, summary: WorkflowSummary) -> "SummaryResponse":
        return cls(
            total_registrations=summary.total_registrations,
            total_loan_applications=summary.total_loan_applications,
            registration_status_counts=summary.registration_status_counts,
            loan_application_status_counts=summary.loan_application_status_counts,
            top_performers=[
                AgentPerformanceSchema(
                    bank_agent_id=agent.bank_agent_id,
                    agent_name=agent.agent_name,
                    bank_name=agent.bank_name,
                    total_applications=agent.total_applications,
                    approved=agent.approved,
                    rejected=agent.rejected,
                    pending=agent.pending,
                    approval_rate=agent.approval_rate,
                )
                for agent in summary.top_performers
            ],
            agents_with_applications=summary.agents_with_applications,
            recent_activity=RecentActivitySchema(
                registrations=summary.recent_activity.registrations,
                loan_applications=summary.recent_activity.loan_applications,
            ),
        )
