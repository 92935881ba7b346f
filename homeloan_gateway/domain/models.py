"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Union


# Numbers typed into forms arrive as strings
NumberInput = Union[str, int, float, None]


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


# Registrations that block a second submission by the same user
ACTIVE_REGISTRATION_STATUSES = frozenset({RegistrationStatus.PENDING, RegistrationStatus.APPROVED})


# --- Bank-agent registration -------------------------------------------------


@dataclass
class PersonalInfo:
    """Candidate identity as typed into the registration form"""

    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""  # DD/MM/YYYY
    national_id: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""


@dataclass
class EmploymentInfo:
    """Bank employment details"""

    bank_name: str = ""
    position: str = ""
    employee_id: str = ""
    department: str = ""
    supervisor_phone: str = ""
    work_address: str = ""
    supervisor_name: str = ""


@dataclass
class RegistrationDocuments:
    """Opaque references to uploaded scans"""

    national_id_document: Optional[str] = None
    bank_employment_letter: Optional[str] = None


@dataclass
class RegistrationCandidate:
    """Input to a bank-agent registration submission"""

    user_id: str
    personal: PersonalInfo
    employment: EmploymentInfo
    documents: RegistrationDocuments


@dataclass
class BankAgentRegistration:
    """Persisted bank-agent registration"""

    user_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    national_id: str
    phone: str
    address: str
    city: str
    bank_name: str
    position: str
    employee_id: str
    department: str
    supervisor_phone: str
    submitted_at: datetime
    status: RegistrationStatus = RegistrationStatus.PENDING
    postal_code: Optional[str] = None
    work_address: Optional[str] = None
    supervisor_name: Optional[str] = None
    national_id_document: Optional[str] = None
    bank_employment_letter: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    id: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# --- Loan application --------------------------------------------------------


@dataclass
class LoanFinancials:
    """Loan and income figures; form input arrives as strings"""

    loan_amount: NumberInput = None
    loan_term_years: NumberInput = None
    employment_status: str = ""
    annual_income: NumberInput = None


@dataclass
class LoanDocuments:
    identity_card_image: Optional[str] = None
    proof_of_income_image: Optional[str] = None


@dataclass
class BankSelection:
    """Bank chosen by the buyer; a bank may quote its own rate"""

    bank_id: Optional[str] = None
    interest_rate: Optional[float] = None
    bank_agent_id: Optional[str] = None


@dataclass
class InsuranceRider:
    include: bool = False
    monthly_amount: NumberInput = None


@dataclass
class LoanApplicationRequest:
    """Input to a loan application submission"""

    applicant_id: str
    financials: LoanFinancials
    documents: LoanDocuments
    bank: BankSelection
    property_id: Optional[str] = None
    insurance: Optional[InsuranceRider] = None


@dataclass
class LoanApplication:
    """Persisted loan application"""

    applicant_id: str
    loan_amount: float
    loan_term_years: int
    employment_status: str
    annual_income: float
    interest_rate: float
    monthly_payment: float
    created_at: datetime
    updated_at: datetime
    status: ApplicationStatus = ApplicationStatus.PENDING
    property_id: Optional[str] = None
    selected_bank_id: Optional[str] = None
    bank_agent_id: Optional[str] = None
    include_insurance: bool = False
    monthly_insurance_amount: Optional[float] = None
    identity_card_image: Optional[str] = None
    proof_of_income_image: Optional[str] = None
    bank_agent_decision: Optional[str] = None
    bank_agent_notes: Optional[str] = None
    id: Optional[str] = None


@dataclass
class StatusChange:
    """Result of a loan application transition; previous_status is the one the swap matched"""

    application: LoanApplication
    previous_status: ApplicationStatus


# --- Calculation and reporting outputs --------------------------------------


@dataclass
class AmortizationResult:
    """Fixed-rate loan quote; values are unrounded, use rounded() for display"""

    principal: float
    annual_rate_percent: float
    term_years: int
    monthly_payment: float
    total_interest: float
    total_payment: float
    loan_to_value_percent: Optional[float] = None  # None when no property value is known
    down_payment_percent: Optional[float] = None
    monthly_insurance: float = 0.0
    total_monthly_payment: float = 0.0

    def rounded(self) -> "AmortizationResult":
        def r2(value: Optional[float]) -> Optional[float]:
            return None if value is None else round(value, 2)

        return AmortizationResult(
            principal=round(self.principal, 2),
            annual_rate_percent=self.annual_rate_percent,
            term_years=self.term_years,
            monthly_payment=round(self.monthly_payment, 2),
            total_interest=round(self.total_interest, 2),
            total_payment=round(self.total_payment, 2),
            loan_to_value_percent=r2(self.loan_to_value_percent),
            down_payment_percent=r2(self.down_payment_percent),
            monthly_insurance=round(self.monthly_insurance, 2),
            total_monthly_payment=round(self.total_monthly_payment, 2),
        )


@dataclass
class AgentPerformance:
    """Decision tally for one bank agent"""

    bank_agent_id: str
    total_applications: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    agent_name: Optional[str] = None
    bank_name: Optional[str] = None

    @property
    def approval_rate(self) -> Optional[float]:
        decided = self.approved + self.rejected
        return self.approved / decided if decided else None


@dataclass
class RecentActivity:
    registrations: int = 0
    loan_applications: int = 0


@dataclass
class WorkflowSummary:
    """Read-only projection over registrations and loan applications"""

    total_registrations: int
    total_loan_applications: int
    registration_status_counts: Dict[str, int]
    loan_application_status_counts: Dict[str, int]
    top_performers: List[AgentPerformance] = field(default_factory=list)
    agents_with_applications: int = 0
    recent_activity: RecentActivity = field(default_factory=RecentActivity)
