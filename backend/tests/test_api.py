import pytest
from fastapi.testclient import TestClient

from swap_pricer.main import app
from swap_pricer.api.endpoints import swaps
from swap_pricer.api.endpoints.swaps import get_ai_service, get_deal_book
from swap_pricer.services.ai_service import AIService, ANALYSIS_MISSING_KEY, CODE_MISSING_KEY
from swap_pricer.services.swap_service import DealBook, sample_deals


SCENARIO = {
    "valueDate": "2024-09-27",
    "startDate": "2024-10-01",
    "endDate": "2025-04-01",
    "leg1": {"currency": "USD", "notional": 1000000, "rate": 4, "type": "Fixed",
             "frequency": "Quarterly", "convention": "Actual/365"},
    "leg2": {"currency": "EUR", "notional": 1000000, "rate": 4, "type": "Fixed",
             "frequency": "Semi-Annual", "convention": "30/360"},
}

FLOATING = {
    "valueDate": "2024-09-27",
    "startDate": "2024-10-01",
    "endDate": "2029-10-01",
    "leg1": {"currency": "BRL", "notional": 10000000, "rate": 1.25, "type": "Floating",
             "frequency": "Quarterly", "convention": "Actual/365"},
    "leg2": {"currency": "USD", "notional": 1850000, "rate": 3.75, "type": "Fixed",
             "frequency": "Semi-Annual", "convention": "30/360"},
}


@pytest.fixture
def client(no_ai_keys):
    book = DealBook(sample_deals())
    ai = AIService()
    app.dependency_overrides[get_deal_book] = lambda: book
    app.dependency_overrides[get_ai_service] = lambda: ai
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_price_books_deal(client):
    response = client.post("/api/price", json=SCENARIO)

    assert response.status_code == 200
    body = response.json()
    assert body["tradeInfo"]["id"] == "SWP-004"
    assert body["tradeInfo"]["status"] == "Active"
    assert [row["date"] for row in body["cashflows"]] == ["2025-01-01", "2025-04-01"]
    assert body["cashflows"][0]["leg1Flow"] == pytest.approx(10_000)
    assert body["cashflows"][0]["leg2Flow"] == pytest.approx(-10_000)
    assert body["summary"]["leg1Npv"] == pytest.approx(20_000)
    assert body["summary"]["principal"] == 1_000_000
    assert body["summary"]["npvTotalFormatted"].startswith("USD ")

    deals = client.get("/api/deals").json()
    assert [deal["id"] for deal in deals][:2] == ["SWP-004", "SWP-001"]


def test_price_without_saving(client):
    body = client.post("/api/price", json={**SCENARIO, "save": False}).json()
    assert body["tradeInfo"]["id"] is None
    assert len(client.get("/api/deals").json()) == 3


def test_seeded_pricing_is_reproducible(client):
    payload = {**FLOATING, "seed": 42, "save": False}
    first = client.post("/api/price", json=payload).json()
    second = client.post("/api/price", json=payload).json()
    assert first["cashflows"] == second["cashflows"]
    assert len(first["cashflows"]) == 20


def test_bad_inputs_do_not_fail(client):
    payload = {
        **SCENARIO,
        "startDate": "not-a-date",
        "save": False,
    }
    body = client.post("/api/price", json=payload).json()
    assert body["cashflows"] == []
    assert body["summary"]["npvTotal"] == 0

    payload = {**SCENARIO, "leg1": {**SCENARIO["leg1"], "notional": "ten million"}, "save": False}
    body = client.post("/api/price", json=payload).json()
    assert len(body["cashflows"]) == 2
    assert body["cashflows"][0]["leg1Flow"] is None
    assert body["summary"]["npvTotal"] is None


def test_search_and_get_deals(client):
    assert [deal["id"] for deal in client.get("/api/deals", params={"q": "gbp"}).json()] == ["SWP-003"]

    deal = client.get("/api/deals/SWP-002").json()
    assert deal["leg2"]["currency"] == "JPY"
    assert deal["startDate"] == "2024-02-17"

    assert client.get("/api/deals/SWP-999").status_code == 404


def test_reprice_booked_deal(client):
    response = client.post("/api/deals/SWP-003/price", json={"seed": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["tradeInfo"]["id"] == "SWP-003"
    assert [row["date"] for row in body["cashflows"]] == ["2024-09-01"]

    assert client.post("/api/deals/SWP-999/price").status_code == 404


def test_analyze_without_key(client):
    response = client.post("/api/analyze", json=FLOATING)
    assert response.status_code == 200
    assert response.json() == {"analysis": ANALYSIS_MISSING_KEY}


def test_analyze_unknown_provider(client):
    response = client.post("/api/analyze", json={**FLOATING, "provider": "Mistral"})
    assert response.status_code == 400


def test_generate_code(client):
    response = client.post("/api/generate-code", json={**FLOATING, "language": "cpp"})
    assert response.status_code == 200
    assert response.json() == {"code": CODE_MISSING_KEY}

    response = client.post("/api/generate-code", json={**FLOATING, "language": "rust"})
    assert response.status_code == 400


def test_booked_deal_with_unparseable_notional_reads_back(client):
    payload = {**SCENARIO, "leg1": {**SCENARIO["leg1"], "notional": "ten million"}}
    assert client.post("/api/price", json=payload).status_code == 200

    response = client.get("/api/deals/SWP-004")
    assert response.status_code == 200
    assert response.json()["leg1"]["notional"] is None

    listed = client.get("/api/deals").json()
    assert listed[0]["id"] == "SWP-004"
    assert listed[0]["leg1"]["notional"] is None


def test_failed_pricing_books_nothing(client, monkeypatch):
    def broken_pricing(deal, rng=None):
        raise RuntimeError("pricing unavailable")

    monkeypatch.setattr(swaps, "price_deal", broken_pricing)

    response = client.post("/api/price", json=SCENARIO)

    assert response.status_code == 500
    assert len(client.get("/api/deals").json()) == 3
