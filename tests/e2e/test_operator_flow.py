"""
E2E test of a full operator session against the mock identity server.

The mock server app runs in-process through httpx.ASGITransport, so no
external service is needed. Flow:
- sign in with the mock server's default operator
- register a debtor and a project, open a debt
- confirm every installment, check the dashboard
- sign out and verify the token is revoked

Token refresh and single-use refresh tokens are covered separately.
"""

import httpx
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from comissio_ledger.api.main import create_app
from comissio_ledger.infrastructure.clients.identity import IdentityClient
from mock_servers.auth_server.main import app as mock_auth_app


@pytest.fixture
def e2e_client(db) -> TestClient:
    identity = IdentityClient(
        base_url="http://mock-auth/auth/v1",
        transport=httpx.ASGITransport(app=mock_auth_app),
    )
    return TestClient(create_app(identity=identity))


@pytest.mark.integration
def test_operator_collects_full_commission(e2e_client: TestClient):
    login = e2e_client.post("/v1/auth/login", json={"email": "admin@comissio.local", "password": "admin"})
    assert login.status_code == 200, login.text
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    debtor = e2e_client.post("/v1/debtors", json={"name": "Paula Nunes"}, headers=headers).json()
    project = e2e_client.post(
        "/v1/projects",
        json={"name": "Edifício Horizonte", "tower": "1", "unit": "804", "vgv": "100000.00"},
        headers=headers,
    ).json()
    debt = e2e_client.post(
        "/v1/debts",
        json={
            "debtor_id": debtor["id"],
            "project_id": project["id"],
            "commission_rate": "3",
            "installment_count": 7,
            "start_date": "2024-01-31",
        },
        headers=headers,
    ).json()

    assert Decimal(debt["commission_value"]) == Decimal("3000.00")
    assert sum(Decimal(i["amount"]) for i in debt["installments"]) == Decimal("3000.00")
    assert debt["installments"][1]["due_date"] == "2024-02-29"

    for inst in debt["installments"]:
        response = e2e_client.post(
            f"/v1/debts/{debt['id']}/installments/{inst['id']}/toggle",
            json={"expected_version": inst["version"]},
            headers=headers,
        )
        assert response.status_code == 200

    detail = response.json()
    assert detail["debt"]["status"] == "QUITADA"
    assert Decimal(detail["ledger"]["total_pending"]) == Decimal("0")

    dashboard = e2e_client.get("/v1/dashboard", params={"year": 2024}, headers=headers).json()
    assert dashboard["status_distribution"]["QUITADA"] == 1
    assert Decimal(dashboard["total_received"]) == Decimal("3000.00")
    assert dashboard["upcoming"] == []

    assert e2e_client.post("/v1/auth/logout", headers=headers).status_code == 204
    assert e2e_client.get("/v1/debts", headers=headers).status_code == 401


@pytest.mark.integration
def test_wrong_password_is_reported_on_login(e2e_client: TestClient):
    response = e2e_client.post("/v1/auth/login", json={"email": "admin@comissio.local", "password": "guess"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid e-mail or password"


@pytest.mark.integration
def test_refresh_token_extends_session(e2e_client: TestClient):
    login = e2e_client.post("/v1/auth/login", json={"email": "admin@comissio.local", "password": "admin"}).json()

    refreshed = e2e_client.post("/v1/auth/refresh", json={"refresh_token": login["refresh_token"]})

    assert refreshed.status_code == 200, refreshed.text
    session = refreshed.json()
    assert session["user_id"] == login["user_id"]
    assert session["access_token"] != login["access_token"]
    assert session["refresh_token"] != login["refresh_token"]

    headers = {"Authorization": f"Bearer {session['access_token']}"}
    assert e2e_client.get("/v1/auth/session", headers=headers).json()["email"] == "admin@comissio.local"
    assert e2e_client.get("/v1/debts", headers=headers).status_code == 200

    # Refresh tokens are single use
    reused = e2e_client.post("/v1/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert reused.status_code == 401
    assert reused.json()["category"] == "auth"
