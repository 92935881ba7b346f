"""Read-only summary of registrations and loan applications for the admin dashboard"""

from collections import Counter
from datetime import datetime
from typing import Dict, List, Sequence

from homeloan_gateway.domain.models import (
    AgentPerformance,
    ApplicationStatus,
    BankAgentRegistration,
    LoanApplication,
    RecentActivity,
    RegistrationStatus,
    WorkflowSummary,
)
from homeloan_gateway.utils.date_utils import days_ago


def count_by_status(statuses: Sequence[str], all_statuses: Sequence[str]) -> Dict[str, int]:
    """Tally statuses; every known status is present, zero when unused"""
    counts = Counter(statuses)
    return {status: counts.get(status, 0) for status in all_statuses}


def agent_performance(
    applications: Sequence[LoanApplication],
    registrations: Sequence[BankAgentRegistration] = (),
) -> List[AgentPerformance]:
    """
    Tally outcomes per bank agent.

    Applications without an assigned agent are ignored. under_review counts
    as pending: both are still undecided.

    An agent is identified with an approved registration whose id or user_id
    equals the application's bank_agent_id; that registration supplies the
    agent name and bank name. Unmatched agents keep both as None.
    """
    profiles: Dict[str, BankAgentRegistration] = {}
    for registration in registrations:
        if registration.status == RegistrationStatus.APPROVED:
            profiles[registration.user_id] = registration
            if registration.id:
                profiles[registration.id] = registration

    by_agent: Dict[str, AgentPerformance] = {}
    for application in applications:
        if not application.bank_agent_id:
            continue
        stats = by_agent.get(application.bank_agent_id)
        if stats is None:
            profile = profiles.get(application.bank_agent_id)
            stats = by_agent[application.bank_agent_id] = AgentPerformance(
                application.bank_agent_id,
                agent_name=profile.full_name if profile else None,
                bank_name=profile.bank_name if profile else None,
            )
        stats.total_applications += 1
        if application.status == ApplicationStatus.APPROVED:
            stats.approved += 1
        elif application.status == ApplicationStatus.REJECTED:
            stats.rejected += 1
        else:
            stats.pending += 1
    return list(by_agent.values())


def rank_agents(agents: Sequence[AgentPerformance], limit: int = 3) -> List[AgentPerformance]:
    """
    Order agents by approval rate, then by total application volume.

    Agents with no decided applications have no rate and sort after every
    agent that has one. Agent id breaks remaining ties so output is stable.
    """

    def sort_key(agent: AgentPerformance):
        rate = agent.approval_rate
        return (
            rate is None,
            -(rate or 0.0),
            -agent.total_applications,
            agent.bank_agent_id,
        )

    return sorted(agents, key=sort_key)[:limit]


def build_summary(
    registrations: Sequence[BankAgentRegistration],
    applications: Sequence[LoanApplication],
    top_n: int = 3,
    recent_days: int = 7,
    now: datetime | None = None,
) -> WorkflowSummary:
    """Recompute the whole dashboard from current records"""
    cutoff = days_ago(recent_days, now)
    agents = agent_performance(applications, registrations)

    return WorkflowSummary(
        total_registrations=len(registrations),
        total_loan_applications=len(applications),
        registration_status_counts=count_by_status(
            [r.status.value for r in registrations],
            [s.value for s in RegistrationStatus],
        ),
        loan_application_status_counts=count_by_status(
            [a.status.value for a in applications],
            [s.value for s in ApplicationStatus],
        ),
        top_performers=rank_agents(agents, limit=top_n),
        agents_with_applications=len(agents),
        recent_activity=RecentActivity(
            registrations=sum(1 for r in registrations if r.submitted_at >= cutoff),
            loan_applications=sum(1 for a in applications if a.created_at >= cutoff),
        ),
    )
