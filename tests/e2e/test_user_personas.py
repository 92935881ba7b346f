"""
E2E tests walking the platform's personas through both workflows over HTTP.

User personas:
- candidate: bank employee applying to become a verified bank agent
- admin: reviews agent registrations and reads the dashboard
- buyer: prices a loan, then applies for it
- bank agent: reviews and decides the buyer's application
"""

import pytest
from fastapi.testclient import TestClient


@pytest.mark.integration
def test_candidate_rejected_then_approved(client: TestClient, registration_payload):
    """
    candidate: first attempt rejected for a missing signature, second approved
    Expected: resubmission allowed after rejection, blocked after approval
    """
    first = client.post("/v1/registrations", json=registration_payload).json()
    rejected = client.post(
        f"/v1/registrations/{first['id']}/decision",
        json={"outcome": "rejected", "rejection_reason": "Employment letter is not signed", "reviewed_by": "admin-1"},
    )
    assert rejected.json()["status"] == "rejected"

    second = client.post("/v1/registrations", json=registration_payload)
    assert second.status_code == 201

    approved = client.post(
        f"/v1/registrations/{second.json()['id']}/decision",
        json={"outcome": "approved", "reviewed_by": "admin-1"},
    )
    assert approved.json()["status"] == "approved"

    third = client.post("/v1/registrations", json=registration_payload)
    assert third.status_code == 409

    history = client.get("/v1/registrations", params={"user_id": registration_payload["user_id"]}).json()
    assert history["total"] == 2
    assert {r["status"] for r in history["registrations"]} == {"rejected", "approved"}


@pytest.mark.integration
def test_buyer_quotes_applies_and_agent_approves(client: TestClient, loan_payload):
    """
    buyer: quotes a 250,000 property with 50,000 down, applies for the 200,000 balance
    bank agent: puts the file under review, then approves
    Expected: stored payment matches the quote; dashboard credits the agent
    """
    quote = client.post(
        "/v1/loan-quotes",
        json={"property_value": 250000, "down_payment": 50000, "loan_term_years": 30},
    ).json()
    assert quote["loan_to_value_percent"] == 80.0

    submitted = client.post("/v1/loan-applications", json=loan_payload).json()
    assert submitted["monthly_payment"] == quote["monthly_payment"]

    application_id = submitted["id"]
    client.post(f"/v1/loan-applications/{application_id}/decision", json={"status": "under_review"})
    decided = client.post(
        f"/v1/loan-applications/{application_id}/decision",
        json={"status": "approved", "decision_text": "Approved at 6.5% fixed"},
    ).json()
    assert decided["status"] == "approved"

    queue = client.get("/v1/loan-applications", params={"bank_agent_id": "agent-1"}).json()["applications"]
    assert [a["status"] for a in queue] == ["approved"]

    summary = client.get("/v1/summary").json()
    assert summary["top_performers"][0]["bank_agent_id"] == "agent-1"
    assert summary["top_performers"][0]["approval_rate"] == 1.0


@pytest.mark.integration
def test_buyer_without_documents_cannot_apply(client: TestClient, loan_payload):
    """
    buyer: forgets the proof of income
    Expected: 422 naming the field, nothing stored
    """
    loan_payload["proof_of_income_image"] = None

    response = client.post("/v1/loan-applications", json=loan_payload)

    assert response.status_code == 422
    assert "proof_of_income_image" in response.json()["errors"]
    assert client.get("/v1/loan-applications").json()["applications"] == []
