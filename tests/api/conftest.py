"""HTTP fixtures: an app bound to a throwaway SQLite file per test."""

import pytest
from fastapi.testclient import TestClient

from ledger_api.app import create_app
from ledger_config.schema import LedgerSettings

PASSWORD = "Str0ng#Pass"


@pytest.fixture
def api_settings(tmp_path):
    return LedgerSettings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        report_dir=str(tmp_path / "reports"),
        report_base_url="/reports",
        global_categories={"INCOME": ("Salary",), "EXPENSE": ("Groceries", "Rent")},
    )


@pytest.fixture
def client(api_settings):
    with TestClient(create_app(api_settings)) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Register a user and return the X-User-Id headers for them."""

    def _signup(email: str = "asha@example.com", first_name: str = "Asha"):
        response = client.post(
            "/api/auth/signup",
            json={
                "firstName": first_name,
                "lastName": "Rao",
                "email": email,
                "password": PASSWORD,
                "confirmPassword": PASSWORD,
            },
        )
        assert response.status_code == 201, response.json()
        return {"X-User-Id": response.json()["data"]["userId"]}

    return _signup


@pytest.fixture
def auth(signup):
    return signup()


@pytest.fixture
def make_account(client, auth):
    def _make(name="Checking", account_type="CHECKING", balance="1000", headers=None):
        response = client.post(
            "/api/accounts",
            json={
                "name": name,
                "type": account_type,
                "currency": "USD",
                "initialBalance": balance,
            },
            headers=headers or auth,
        )
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _make


@pytest.fixture
def category_ids(client, auth):
    data = client.get("/api/categories", headers=auth).json()["data"]
    return {c["name"]: c["id"] for c in data}


@pytest.fixture
def post_transaction(client, auth):
    """POST an income or expense; returns the raw response."""

    def _post(account_id, amount, kind, category_id=None, when="2024-03-15T10:00:00Z"):
        body = {
            "accountId": account_id,
            "amount": amount,
            "type": kind,
            "transactionDate": when,
            "paymentMode": "CARD",
        }
        if category_id is not None:
            body["categoryId"] = category_id
        return client.post("/api/transactions", json=body, headers=auth)

    return _post
