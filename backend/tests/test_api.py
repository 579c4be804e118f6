"""
HTTP tests for the CRUD endpoints, the summary and the quote endpoint.
"""

import pytest
from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from tinigom.core.timeutils import utcnow
from tinigom.models.finance import Person, TransactionType
from tinigom.services.gateway import Collection


def post_tx(client, amount, type, user, **extra):
    body = {"amount": amount, "type": type, "user": user, **extra}
    return client.post("/api/transactions", json=body)


class TestTransactionsAPI:
    """Create, list and delete transactions."""

    def test_create_transaction(self, client):
        r = post_tx(client, "250.5", "income", "Nuone", category="Salary")
        assert r.status_code == 200
        tx = r.json()["transaction"]
        assert tx["amount"] == 250.5
        assert tx["type"] == "income"
        assert tx["user"] == "Nuone"
        assert tx["category"] == "Salary"
        assert tx["reason"] is None

    def test_category_and_reason_are_independent(self, client):
        r = post_tx(client, 90, "withdrawal", "Kate", category="Food", reason="Dinner")
        tx = r.json()["transaction"]
        assert tx["category"] == "Food"
        assert tx["reason"] == "Dinner"

    def test_missing_fields(self, client):
        r = client.post("/api/transactions", json={"amount": 10})
        assert r.status_code == 400
        assert r.json()["error"] == "Missing required fields: type, user"

    @pytest.mark.parametrize("body", [
        {"amount": 10, "type": "gift", "user": "Nuone"},
        {"amount": 10, "type": "income", "user": "Bob"},
        {"amount": 0, "type": "income", "user": "Kate"},
        {"amount": -5, "type": "income", "user": "Kate"},
        {"amount": "lots", "type": "income", "user": "Kate"},
        {"amount": "inf", "type": "income", "user": "Kate"},
        {"amount": "Infinity", "type": "income", "user": "Kate"},
    ])
    def test_invalid_payloads(self, client, body):
        r = client.post("/api/transactions", json=body)
        assert r.status_code == 400
        assert "error" in r.json()

    def test_list_newest_first(self, client):
        first = post_tx(client, 100, "income", "Nuone").json()["transaction"]
        second = post_tx(client, 200, "savings", "Kate").json()["transaction"]
        ids = [t["id"] for t in client.get("/api/transactions").json()["transactions"]]
        assert ids == [second["id"], first["id"]]

    def test_list_filters_and_pages(self, client, gateway):
        base = datetime(2025, 3, 10)
        for i in range(7):
            gateway.transactions.insert({
                "amount": 100 + i,
                "type": TransactionType.INCOME,
                "user": Person.NUONE,
                "date": base + timedelta(days=i),
            })
        gateway.transactions.insert({
            "amount": 50, "type": TransactionType.WITHDRAWAL, "user": Person.KATE, "date": datetime(2025, 4, 2),
        })

        r = client.get("/api/transactions", params={"user": "Nuone", "month": 3, "page": 2})
        data = r.json()
        assert data["total"] == 7
        assert data["total_pages"] == 2
        assert data["page"] == 2
        assert [t["amount"] for t in data["transactions"]] == [101, 100]

        r = client.get("/api/transactions", params={"type": "withdrawal"})
        assert [t["user"] for t in r.json()["transactions"]] == ["Kate"]

    def test_invalid_month(self, client):
        assert client.get("/api/transactions", params={"month": 13}).status_code == 400

    def test_delete(self, client):
        tx = post_tx(client, 100, "income", "Kate").json()["transaction"]
        r = client.delete("/api/transactions", params={"id": tx["id"]})
        assert r.status_code == 200
        assert r.json() == {"success": True}
        assert client.get("/api/transactions").json()["transactions"] == []

    def test_delete_requires_id(self, client):
        r = client.delete("/api/transactions")
        assert r.status_code == 400
        assert r.json()["error"] == "Transaction ID required"

    def test_delete_unknown(self, client):
        assert client.delete("/api/transactions", params={"id": 999}).status_code == 404

    def test_infinite_amount_is_not_stored(self, client, gateway):
        r = post_tx(client, "inf", "income", "Kate")
        assert r.status_code == 400
        assert gateway.transactions.count() == 0
        assert client.get("/api/transactions").status_code == 200

    def test_storage_failure_is_500(self, client, monkeypatch):
        def broken_list(self, *args, **kwargs):
            self._fail("list", OperationalError("SELECT 1", {}, Exception("database is down")))

        monkeypatch.setattr(Collection, "list", broken_list)
        r = client.get("/api/transactions")
        assert r.status_code == 500
        assert "database is down" in r.json()["error"]


class TestSettingsAPI:
    """The singleton goal row."""

    def test_get_default_settings(self, client):
        settings = client.get("/api/settings").json()["settings"]
        assert settings["id"] == 1
        assert settings["savings_goal"] == 150000
        assert settings["target_months"] is None

    def test_update_goal(self, client):
        r = client.put("/api/settings", json={"savings_goal": "200000"})
        assert r.status_code == 200
        assert r.json()["settings"]["savings_goal"] == 200000
        assert client.get("/api/settings").json()["settings"]["savings_goal"] == 200000

    def test_update_target_pair(self, client):
        r = client.put("/api/settings", json={
            "savings_goal": 100000,
            "target_months": 10,
            "target_start_date": "2025-05-01T00:00:00Z",
        })
        settings = r.json()["settings"]
        assert settings["target_months"] == 10
        assert settings["target_start_date"].startswith("2025-05-01T00:00:00")

    @pytest.mark.parametrize("body", [
        {},
        {"savings_goal": "abc"},
        {"savings_goal": 0},
        {"savings_goal": "inf"},
        {"savings_goal": 1000, "target_months": None},
        {"savings_goal": 1000, "target_months": 10},
        {"savings_goal": 1000, "target_start_date": "2025-05-01T00:00:00"},
    ])
    def test_invalid_settings(self, client, body):
        r = client.put("/api/settings", json=body)
        assert r.status_code == 400
        assert "error" in r.json()

    def test_goal_only_update_keeps_target(self, client):
        client.put("/api/settings", json={
            "savings_goal": 100000,
            "target_months": 10,
            "target_start_date": "2025-05-01T00:00:00",
        })
        r = client.put("/api/settings", json={"savings_goal": 120000})
        settings = r.json()["settings"]
        assert settings["savings_goal"] == 120000
        assert settings["target_months"] == 10
        assert settings["target_start_date"].startswith("2025-05-01T00:00:00")

    def test_null_pair_clears_target(self, client):
        client.put("/api/settings", json={
            "savings_goal": 100000,
            "target_months": 10,
            "target_start_date": "2025-05-01T00:00:00",
        })
        r = client.put("/api/settings", json={
            "savings_goal": 100000,
            "target_months": None,
            "target_start_date": None,
        })
        settings = r.json()["settings"]
        assert settings["target_months"] is None
        assert settings["target_start_date"] is None


class TestTodosAPI:
    """Shared to-do list."""

    def test_create_and_list(self, client):
        r = client.post("/api/todos", json={"text": "  Buy groceries ", "assigned_to": "K"})
        assert r.status_code == 200
        todo = r.json()["todo"]
        assert todo["text"] == "Buy groceries"
        assert todo["completed"] is False
        assert todo["assigned_to"] == "K"
        assert [t["id"] for t in client.get("/api/todos").json()["todos"]] == [todo["id"]]

    @pytest.mark.parametrize("body", [
        {"text": "   ", "assigned_to": "N"},
        {"text": "Pay rent", "assigned_to": "X"},
        {"text": "Pay rent"},
    ])
    def test_invalid_todo(self, client, body):
        assert client.post("/api/todos", json=body).status_code == 400

    def test_toggle_stamps_updated_at(self, client):
        todo = client.post("/api/todos", json={"text": "Call bank", "assigned_to": "N"}).json()["todo"]
        assert todo["updated_at"] is None

        r = client.put("/api/todos", json={"id": todo["id"], "completed": True})
        updated = r.json()["todo"]
        assert updated["completed"] is True
        assert updated["updated_at"] is not None

        r = client.put("/api/todos", json={"id": todo["id"]})
        assert r.json()["todo"]["completed"] is True

    def test_update_requires_id(self, client):
        assert client.put("/api/todos", json={"completed": True}).status_code == 400

    def test_update_unknown(self, client):
        assert client.put("/api/todos", json={"id": 42, "completed": True}).status_code == 404

    def test_delete(self, client):
        todo = client.post("/api/todos", json={"text": "Call bank", "assigned_to": "N"}).json()["todo"]
        assert client.delete("/api/todos", params={"id": todo["id"]}).json() == {"success": True}
        assert client.delete("/api/todos").status_code == 400


class TestProgressAPI:
    """Dashboard summary."""

    def test_summary_scenario(self, client):
        post_tx(client, 50000, "income", "Nuone")
        post_tx(client, 30000, "savings", "Kate")
        post_tx(client, 10000, "withdrawal", "Nuone")

        data = client.get("/api/progress").json()
        assert data["user_totals"] == {"Nuone": 40000, "Kate": 30000}
        assert data["grand_total"] == 70000
        assert data["progress_percentage"] == pytest.approx(46.67, abs=0.01)
        assert data["contributions"]["Nuone"] == pytest.approx(26.67, abs=0.01)
        assert data["total_income"] == 50000
        assert data["total_withdrawals"] == 10000
        assert data["prediction"] is None
        assert data["success_likelihood"] == 50

    def test_summary_with_target(self, client):
        start = (utcnow() - timedelta(days=60)).isoformat()
        client.put("/api/settings", json={"savings_goal": 100000, "target_months": 10, "target_start_date": start})
        post_tx(client, 30000, "income", "Kate")

        data = client.get("/api/progress").json()
        prediction = data["prediction"]
        assert prediction["remaining_amount"] == 70000
        assert prediction["current_monthly_saving"] == pytest.approx(10000)
        assert 10 <= data["success_likelihood"] <= 95


class TestQuoteAPI:
    """GET /motivational-quote."""

    def test_single_variant_caches(self, client, fake_generator):
        first = client.get("/api/motivational-quote").json()
        second = client.get("/api/motivational-quote").json()
        assert first["generated"] is True
        assert second["cached"] is True
        assert second["quote"] == first["quote"]
        assert len(fake_generator.prompts) == 1

    def test_fallback_without_credential(self, client, fake_generator):
        fake_generator.configured = False
        data = client.get("/api/motivational-quote").json()
        assert data == {"quote": "Wealth begins where impulse ends.", "cached": False, "fallback": True}
        assert fake_generator.prompts == []

    def test_dual_variant(self, client, app_settings):
        app_settings.QUOTE_STRATEGY = "dual"
        data = client.get("/api/motivational-quote").json()
        assert data["generated"] is True
        assert data["nuoneQuote"] == "Quote number 1"
        assert data["kateQuote"] == "Quote number 2"


class TestHealthAPI:
    def test_connection(self, client, gateway):
        gateway.transactions.insert({"amount": 10, "type": TransactionType.INCOME, "user": Person.KATE})
        data = client.get("/api/test-connection").json()
        assert data["success"] is True
        assert data["details"]["transactionCount"] == 1
        assert data["details"]["settingsTableExists"] is True
        assert data["details"]["generationConfigured"] is True
