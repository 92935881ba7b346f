"""Unit tests for dashboard aggregation"""

from datetime import date, timedelta

from factories import NOW
from homeloan_gateway.domain.models import (
    AgentPerformance,
    ApplicationStatus,
    BankAgentRegistration,
    LoanApplication,
    RegistrationStatus,
)
from homeloan_gateway.domain.reporting import agent_performance, build_summary, rank_agents


def _application(agent_id, status, created_at=NOW):
    return LoanApplication(
        applicant_id="buyer",
        loan_amount=100000,
        loan_term_years=20,
        employment_status="employed",
        annual_income=40000,
        interest_rate=6.5,
        monthly_payment=745.57,
        created_at=created_at,
        updated_at=created_at,
        status=status,
        bank_agent_id=agent_id,
    )


def _registration(status, submitted_at=NOW, user_id="user"):
    return BankAgentRegistration(
        user_id=user_id,
        first_name="Amira",
        last_name="Ben Salah",
        date_of_birth=date(1990, 3, 14),
        national_id="09876543",
        phone="22123456",
        address="12 Rue de Marseille",
        city="Tunis",
        bank_name="Banque de Tunisie",
        position="Credit Officer",
        employee_id="104233",
        department="Retail Lending",
        supervisor_phone="71345678",
        submitted_at=submitted_at,
        status=status,
    )


def test_agent_performance_counts_under_review_as_pending():
    stats = agent_performance(
        [
            _application("agent-a", ApplicationStatus.APPROVED),
            _application("agent-a", ApplicationStatus.UNDER_REVIEW),
            _application("agent-a", ApplicationStatus.PENDING),
            _application(None, ApplicationStatus.APPROVED),
        ]
    )

    assert len(stats) == 1
    assert stats[0].total_applications == 3
    assert stats[0].approved == 1
    assert stats[0].pending == 2


def test_rate_beats_volume():
    """3 approved / 1 rejected (75%) ranks below 1 approved / 0 rejected (100%)"""
    busy = AgentPerformance("agent-a", total_applications=4, approved=3, rejected=1)
    perfect = AgentPerformance("agent-b", total_applications=1, approved=1)

    ranked = rank_agents([busy, perfect])

    assert [agent.bank_agent_id for agent in ranked] == ["agent-b", "agent-a"]


def test_agents_without_decisions_rank_last():
    undecided = AgentPerformance("agent-a", total_applications=9, pending=9)
    rejecting = AgentPerformance("agent-b", total_applications=1, rejected=1)

    ranked = rank_agents([undecided, rejecting])

    assert undecided.approval_rate is None
    assert rejecting.approval_rate == 0.0
    assert [agent.bank_agent_id for agent in ranked] == ["agent-b", "agent-a"]


def test_ties_broken_by_volume_then_id():
    agents = [
        AgentPerformance("agent-c", total_applications=2, approved=1, rejected=1),
        AgentPerformance("agent-b", total_applications=4, approved=2, rejected=2),
        AgentPerformance("agent-a", total_applications=2, approved=1, rejected=1),
        AgentPerformance("agent-d", total_applications=1, approved=1),
    ]

    ranked = rank_agents(agents, limit=3)

    assert [agent.bank_agent_id for agent in ranked] == ["agent-d", "agent-b", "agent-a"]


def test_build_summary_counts_and_recent_activity():
    old = NOW - timedelta(days=30)
    summary = build_summary(
        registrations=[
            _registration(RegistrationStatus.PENDING),
            _registration(RegistrationStatus.APPROVED, submitted_at=old),
        ],
        applications=[
            _application("agent-a", ApplicationStatus.APPROVED),
            _application("agent-b", ApplicationStatus.REJECTED, created_at=old),
            _application("agent-b", ApplicationStatus.UNDER_REVIEW),
        ],
        now=NOW,
    )

    assert summary.total_registrations == 2
    assert summary.total_loan_applications == 3
    assert summary.registration_status_counts == {"pending": 1, "approved": 1, "rejected": 0}
    assert summary.loan_application_status_counts == {
        "pending": 0,
        "under_review": 1,
        "approved": 1,
        "rejected": 1,
    }
    assert summary.recent_activity.registrations == 1
    assert summary.recent_activity.loan_applications == 2
    assert summary.agents_with_applications == 2
    assert summary.top_performers[0].bank_agent_id == "agent-a"


def test_build_summary_empty():
    summary = build_summary([], [], now=NOW)

    assert summary.total_registrations == 0
    assert summary.top_performers == []
    assert all(count == 0 for count in summary.loan_application_status_counts.values())


def test_agent_profile_comes_from_approved_registration():
    stats = agent_performance(
        [
            _application("agent-a", ApplicationStatus.APPROVED),
            _application("agent-b", ApplicationStatus.APPROVED),
            _application("agent-c", ApplicationStatus.APPROVED),
        ],
        registrations=[
            _registration(RegistrationStatus.APPROVED, user_id="agent-a"),
            _registration(RegistrationStatus.PENDING, user_id="agent-b"),
        ],
    )

    by_id = {agent.bank_agent_id: agent for agent in stats}
    assert by_id["agent-a"].agent_name == "Amira Ben Salah"
    assert by_id["agent-a"].bank_name == "Banque de Tunisie"
    assert by_id["agent-b"].agent_name is None  # Not yet verified
    assert by_id["agent-c"].bank_name is None
