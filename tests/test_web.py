from decimal import Decimal

import pytest

from mortgage_split_web.app import create_app
from mortgage_split_web.config import Settings
from mortgage_split_web.split_store import SplitStore

DEAL_FORM = {
    "nickname": "Maple St",
    "original_loan_amount": "300000",
    "interest_rate": "6",
    "loan_term_months": "360",
    "close_date": "2023-11-15",
    "first_payment_date": "2024-01-01",
    "payment_frequency": "monthly",
    "rental_monthly_taxes": "250",
    "rental_monthly_insurance": "100",
    "payment_date": "2024-01-01",
    "amount": "2148.65",
    "mode": "auto",
}


@pytest.fixture
def store(tmp_path):
    return SplitStore(f"sqlite:///{tmp_path / 'web.sqlite3'}")


@pytest.fixture
def client(store):
    app = create_app(Settings(), store=store)
    app.config["TESTING"] = True
    return app.test_client()


def user_token(client):
    with client.session_transaction() as sess:
        return sess["user_token"]


def test_index_renders(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Mortgage payment split" in response.data
    assert b"No saved splits yet." in response.data


def test_auto_preview(client):
    response = client.post("/", data=DEAL_FORM)
    assert response.status_code == 200
    assert b"Auto split - Maple St" in response.data
    assert b"1500.00" in response.data
    assert b"298.65" in response.data


def test_manual_preview_error_is_shown(client):
    form = dict(DEAL_FORM, mode="manual", amount="1000", interest="900", escrow="200")
    response = client.post("/", data=form)
    assert response.status_code == 200
    assert b"cannot be greater" in response.data


def test_auto_preview_requires_payment_date(client):
    response = client.post("/", data=dict(DEAL_FORM, payment_date=""))
    assert b"Invalid date" in response.data


def test_save_remove_and_clear(client, store):
    client.post("/", data=dict(DEAL_FORM, action="save"))
    client.post("/", data=dict(DEAL_FORM, action="save", payment_date="2024-02-01"))
    token = user_token(client)
    saved = store.saved_previews(token)
    assert len(saved) == 2
    assert saved[0]["payment_date"] == "2024-01-01"

    response = client.post("/splits/remove", data={"split_id": saved[0]["id"]})
    assert response.status_code == 302
    assert len(store.saved_previews(token)) == 1

    client.post("/splits/clear")
    assert store.saved_previews(token) == []


def test_api_split(client):
    response = client.post("/api/split", json=dict(DEAL_FORM, payment_date="2024-02-01"))
    assert response.status_code == 200
    data = response.get_json()
    assert data["payment_number"] == 2
    assert data["is_auto_calculated"] is True
    assert abs(data["principal"] + data["interest"] + data["escrow"] - 2148.65) < 0.011


def test_api_split_rejects_bad_input(client):
    response = client.post("/api/split", json={"amount": "-5"})
    assert response.status_code == 400
    assert "positive" in response.get_json()["error"]

    response = client.post("/api/split", data="not json", content_type="text/plain")
    assert response.status_code == 400


def test_api_split_reports_inferred_escrow_and_frequency(client):
    form = dict(DEAL_FORM, rental_monthly_taxes="", rental_monthly_insurance="", amount="1898.65")
    data = client.post("/api/split", json=form).get_json()
    assert data["escrow_inferred"] is True
    assert data["frequency"] == "monthly"
    assert data["escrow_taxes"] == 100.0

    manual = client.post("/api/split", json=dict(DEAL_FORM, mode="manual", interest="1500")).get_json()
    assert manual["escrow_inferred"] is False
    assert manual["frequency"] is None


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "-inf"])
def test_api_split_rejects_non_finite_amount(client, amount):
    response = client.post("/api/split", json=dict(DEAL_FORM, amount=amount))
    assert response.status_code == 400
    assert "Invalid numeric value" in response.get_json()["error"]


def test_form_rejects_non_finite_rate(client):
    response = client.post("/", data=dict(DEAL_FORM, interest_rate="nan"))
    assert response.status_code == 200
    assert b"Invalid numeric value: nan" in response.data


def test_saved_nickname_is_escaped(client):
    nickname = "</script><script>alert(1)</script>"
    client.post("/", data=dict(DEAL_FORM, nickname=nickname, action="save"))
    response = client.get("/")
    assert b"<script>alert(1)</script>" not in response.data
    assert b"&lt;script&gt;alert(1)&lt;/script&gt;" in response.data


def test_non_finite_tolerance_setting_falls_back(monkeypatch):
    monkeypatch.setenv("MORTGAGE_SPLIT_TOLERANCE", "nan")
    assert Settings().split_tolerance == Decimal("0.02")
    monkeypatch.setenv("MORTGAGE_SPLIT_TOLERANCE", "0.05")
    assert Settings().split_tolerance == Decimal("0.05")
