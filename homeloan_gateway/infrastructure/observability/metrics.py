"""Prometheus metrics for registration and loan workflow throughput, outcomes and conflicts"""

from prometheus_client import Counter, Histogram

# Registration metrics
registration_submitted_counter = Counter(
    "homeloan_registration_submitted_total",
    "Bank-agent registrations accepted for review",
)

registration_decision_counter = Counter(
    "homeloan_registration_decision_total",
    "Admin decisions on bank-agent registrations",
    ["outcome"],  # approved | rejected
)

# Loan application metrics
loan_application_submitted_counter = Counter(
    "homeloan_loan_application_submitted_total",
    "Loan applications accepted",
)

loan_application_status_counter = Counter(
    "homeloan_loan_application_status_change_total",
    "Loan application status changes",
    ["status"],  # under_review | approved | rejected
)

monthly_payment_histogram = Histogram(
    "homeloan_quoted_monthly_payment",
    "Monthly payment computed at loan submission",
    buckets=[250, 500, 1000, 1500, 2500, 5000, 10000],
)

# Failure metrics
validation_failure_counter = Counter(
    "homeloan_validation_failures_total",
    "Submissions or decisions rejected by field validation",
    ["operation"],
)

stale_state_counter = Counter(
    "homeloan_stale_state_conflicts_total",
    "Conditional status updates lost to a concurrent writer",
    ["entity"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_registration_decision(outcome: str) -> None:
    registration_decision_counter.labels(outcome=outcome).inc()


def record_loan_submission(monthly_payment: float) -> None:
    """Count the submission and track the distribution of quoted payments"""
    loan_application_submitted_counter.inc()
    monthly_payment_histogram.observe(monthly_payment)
