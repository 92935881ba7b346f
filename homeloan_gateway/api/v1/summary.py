"""GET /v1/summary - Admin dashboard counts and top performing bank agents"""

from fastapi import APIRouter, Depends

from homeloan_gateway.api.v1.schemas import SummaryResponse
from homeloan_gateway.api.dependencies import get_loan_application_repository, get_registration_repository
from homeloan_gateway.config import settings
from homeloan_gateway.domain.reporting import build_summary
from homeloan_gateway.infrastructure.database.repositories import LoanApplicationRepository, RegistrationRepository

router = APIRouter()


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    registrations: RegistrationRepository = Depends(get_registration_repository),
    applications: LoanApplicationRepository = Depends(get_loan_application_repository),
):
    """
    Recompute the dashboard from current records.

    Returns:
        Status counts for both workflows, recent activity and the top agents
        ranked by approval rate
    """
    summary = build_summary(
        registrations.list_all(),
        applications.list_all(),
        top_n=settings.top_performers_limit,
        recent_days=settings.recent_activity_days,
    )
    return SummaryResponse.from_domain(summary)
