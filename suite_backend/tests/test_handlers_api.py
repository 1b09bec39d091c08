import json

import pytest

from suite_api.generate_openapi import generate_openapi
from suite_api.main import ALLOW_HEADERS, app, openapi_tags
from suite_api.settings import get_settings
from suite_api.store import InMemoryStore, StoreError, get_store


class DownStore(InMemoryStore):
    def select(self, query):
        raise StoreError("connection refused", 503)


def create_task_payload(title="Test Task", **fields):
    payload = {"title": title, "user_id": "user-1"}
    payload.update(fields)
    return payload


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] == "memory"


class TestCors:
    def test_every_response_carries_cors_headers(self, client):
        res = client.get("/api/risks")
        assert res.headers["Access-Control-Allow-Origin"] == "*"
        assert res.headers["Access-Control-Allow-Headers"] == ALLOW_HEADERS

    @pytest.mark.parametrize("path", ["/api/taskmaster/tasks", "/api/validate", "/not/a/route"])
    def test_options_short_circuits(self, client, path):
        res = client.options(path)
        assert res.status_code == 200
        assert res.text == "ok"
        assert res.headers["Access-Control-Allow-Headers"] == ALLOW_HEADERS

    def test_configured_origins(self, client, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")
        get_settings.cache_clear()

        listed = client.get("/api/risks", headers={"Origin": "https://b.example"})
        assert listed.headers["Access-Control-Allow-Origin"] == "https://b.example"

        unknown = client.get("/api/risks", headers={"Origin": "https://evil.example"})
        assert unknown.headers["Access-Control-Allow-Origin"] == "https://a.example"


class TestErrors:
    def test_validation_error_is_400_envelope(self, client):
        res = client.post("/api/taskmaster/tasks", json={"title": "   "})
        assert res.status_code == 400
        body = res.json()
        assert body["success"] is False
        assert body["error"] == "Request validation failed"
        assert isinstance(body["detail"], list)

    def test_bad_due_date_is_400(self, client):
        res = client.post("/api/taskmaster/tasks", json=create_task_payload(due_date="not-a-date"))
        assert res.status_code == 400

    def test_store_error_is_500_with_message(self, client):
        app.dependency_overrides[get_store] = lambda: DownStore()
        res = client.get("/api/taskmaster/tasks")
        assert res.status_code == 500
        assert res.json() == {"success": False, "error": "connection refused", "data": []}


class TestTasks:
    def test_crud(self, client, store):
        res = client.post("/api/taskmaster/tasks", json=create_task_payload("  Draft roadmap  ", due_date="2099-12-25"))
        assert res.status_code == 200
        task = res.json()["data"]
        assert task["title"] == "Draft roadmap"
        assert task["status"] == "todo"
        assert task["due_date"].startswith("2099-12-25T00:00:00")
        tid = task["id"]

        res = client.put(f"/api/taskmaster/tasks?id={tid}", json={"status": "completed"})
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "completed"
        assert res.json()["data"]["title"] == "Draft roadmap"

        res = client.delete(f"/api/taskmaster/tasks?id={tid}")
        assert res.json() == {"success": True, "message": "Task deleted successfully"}
        assert store.rows("tasks") == []

    def test_list_filters_and_pagination_fields(self, client, store):
        store.seed(
            "tasks",
            [
                {"title": "a", "user_id": "user-1", "priority": "high", "created_at": "2025-01-01"},
                {"title": "b", "user_id": "user-1", "priority": "low", "created_at": "2025-01-02"},
                {"title": "c", "user_id": "user-2", "priority": "high", "created_at": "2025-01-03"},
            ],
        )
        body = client.get("/api/taskmaster/tasks?user_id=user-1").json()
        assert [t["title"] for t in body["data"]] == ["b", "a"]
        assert body["total"] == 2
        assert body["page"] == 1
        assert body["per_page"] == 50

        body = client.get("/api/taskmaster/tasks?priority=high").json()
        assert [t["title"] for t in body["data"]] == ["c", "a"]

    def test_id_required(self, client):
        assert client.put("/api/taskmaster/tasks", json={"status": "x"}).json()["error"] == "Task ID is required"
        res = client.delete("/api/taskmaster/tasks")
        assert res.status_code == 400

    def test_not_found(self, client):
        assert client.put("/api/taskmaster/tasks?id=missing", json={"status": "x"}).status_code == 404
        assert client.delete("/api/taskmaster/tasks?id=missing").status_code == 404


class TestClients:
    def test_crud(self, client, store):
        created = client.post("/api/clients/contacts", json={"name": "Acme", "user_id": "user-1"}).json()["data"]
        assert created["name"] == "Acme"

        updated = client.put(f"/api/clients/contacts?id={created['id']}", json={"email": "hi@acme.test"})
        assert updated.json()["data"]["email"] == "hi@acme.test"

        listed = client.get("/api/clients/contacts?user_id=user-1").json()["data"]
        assert [c["name"] for c in listed] == ["Acme"]

        assert client.delete(f"/api/clients/contacts?id={created['id']}").json()["success"] is True
        assert store.rows("clients") == []

    def test_id_required(self, client):
        res = client.delete("/api/clients/contacts")
        assert res.status_code == 400
        assert res.json()["error"] == "Client ID is required"


class TestRisks:
    def test_score_computed_and_recomputed(self, client):
        created = client.post("/api/risks", json={"description": "Vendor slip", "probability": 0.5, "impact": 4})
        risk = created.json()["data"]
        assert risk["risk_score"] == 2.0
        assert risk["status"] == "open"

        updated = client.put(f"/api/risks?id={risk['id']}", json={"probability": 1}).json()["data"]
        assert updated["risk_score"] == 4.0

        client.post("/api/risks", json={"description": "Minor", "probability": 0.1, "impact": 1})
        listed = client.get("/api/risks").json()["data"]
        assert [r["description"] for r in listed] == ["Vendor slip", "Minor"]

    def test_score_not_client_settable(self, client):
        risk = client.post("/api/risks", json={"description": "x", "risk_score": 99}).json()["data"]
        assert risk["risk_score"] == 0

    def test_id_required(self, client):
        assert client.put("/api/risks", json={}).json()["error"] == "Risk ID is required"


class TestKnowledge:
    def test_slug_and_archive(self, client):
        page = client.post("/api/knowledge/pages", json={"title": "Hello, World!"}).json()["data"]
        assert page["slug"] == "hello-world"

        renamed = client.put(f"/api/knowledge/pages?id={page['id']}", json={"title": "Onboarding Guide"})
        assert renamed.json()["data"]["slug"] == "onboarding-guide"

        kept = client.put(f"/api/knowledge/pages?id={page['id']}", json={"title": "Other", "slug": "custom"})
        assert kept.json()["data"]["slug"] == "custom"

        assert len(client.get("/api/knowledge/pages").json()["data"]) == 1
        res = client.delete(f"/api/knowledge/pages?id={page['id']}")
        assert res.json() == {"success": True, "message": "Page archived successfully"}
        assert client.get("/api/knowledge/pages").json()["data"] == []

    def test_id_required(self, client):
        assert client.delete("/api/knowledge/pages").json()["error"] == "Page ID is required"


class TestBudget:
    def test_budgets_are_reshaped(self, client, store):
        store.seed(
            "budgets",
            [
                {"id": "b1", "project_id": "p1", "total": 1000, "spent": 950, "updated_at": "2025-01-02"},
                {"id": "b2", "project_id": "p2", "total": 1000, "spent": 900, "updated_at": "2025-01-01"},
            ],
        )
        body = client.get("/api/budget/budgets").json()
        assert body["total"] == 2
        first, second = body["data"]
        assert first["status"] == "over-budget"
        assert first["remaining_amount"] == 50.0
        assert first["currency"] == "USD"
        assert first["period"] == "monthly"
        assert second["status"] == "on-track"

    def test_expenses_total_rounds_half_up(self, client, store):
        store.seed("expenses", [{"amount": 10.0, "date": "2025-01-01"}, {"amount": 5.125, "date": "2025-01-02"}])
        body = client.get("/api/budget/expenses").json()
        assert body["total"] == 2
        assert body["total_amount"] == 15.13
        assert body["data"][0]["date"] == "2025-01-02"


class TestTimetrack:
    def test_entries_and_summary(self, client, store):
        store.seed(
            "time_entries",
            [
                {"user_id": "user-1", "project_id": "p1", "date": "2025-01-02", "time_spent": 30},
                {"user_id": "user-2", "project_id": "p1", "date": "2025-01-03", "time_spent": 30},
            ],
        )
        body = client.get("/api/timetrack/entries?user_id=user-1").json()
        assert body["total"] == 1

        summary = client.get("/api/timetrack/summary").json()["data"]
        assert set(summary) == {
            "total_hours_today",
            "total_hours_week",
            "billable_hours_week",
            "active_timer",
            "productivity_score",
        }
        assert 60 <= summary["productivity_score"] <= 95


class TestCollab:
    def test_channels_member_counts(self, client, store):
        store.seed(
            "channels",
            [
                {"id": "c1", "name": "general", "created_at": "2025-01-02"},
                {"id": "c2", "name": "quiet", "created_at": "2025-01-01"},
            ],
        )
        store.seed(
            "messages",
            [
                {"channel_id": "c1", "user_id": "a", "content": "hi"},
                {"channel_id": "c1", "user_id": "b", "content": "hello"},
                {"channel_id": "c1", "user_id": "a", "content": "again"},
            ],
        )
        body = client.get("/api/collab/channels").json()
        assert body["total"] == 2
        assert {c["id"]: c["member_count"] for c in body["data"]} == {"c1": 2, "c2": 1}

    def test_messages_are_reshaped(self, client, store):
        store.seed(
            "messages",
            [
                {"channel_id": "c1", "user_id": "a", "content": None, "parent_id": "m0"},
                {"channel_id": "c2", "user_id": "b", "content": "elsewhere"},
            ],
        )
        body = client.get("/api/collab/messages?channel_id=c1").json()
        assert body["total"] == 1
        message = body["data"][0]
        assert message["content"] == "Message content"
        assert message["message_type"] == "text"
        assert message["thread_id"] == "m0"
        assert message["mentions"] == []

    def test_send_message(self, client, store, auth_headers):
        res = client.post("/api/collab/messages", json={"channel_id": "c1", "content": "hi"}, headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["data"]["user_id"] == "user-1"
        assert store.rows("messages")[0]["content"] == "hi"

    def test_send_message_requires_session(self, client):
        res = client.post("/api/collab/messages", json={"channel_id": "c1", "content": "hi"})
        assert res.status_code == 401


class TestMethodNotAllowed:
    @pytest.mark.parametrize(
        "path",
        ["/api/taskmaster/tasks", "/api/clients/contacts", "/api/risks", "/api/knowledge/pages"],
    )
    def test_patch_names_every_served_method(self, client, path):
        res = client.patch(path, json={})
        assert res.status_code == 405
        assert res.headers["Allow"] == "GET, POST, PUT, DELETE"
        assert res.json() == {"success": False, "error": "Method not allowed", "data": None}

    def test_read_only_route(self, client):
        res = client.post("/api/budget/budgets")
        assert res.status_code == 405
        assert res.headers["Allow"] == "GET"
        assert res.json()["error"] == "Method not allowed"


class TestDueDates:
    @pytest.mark.parametrize(
        "due_date, stored",
        [
            ("2099-12-25", "2099-12-25T00:00:00"),
            ("2099-12-25T13:45:00", "2099-12-25T13:45:00"),
            ("2099-12-25T13:45:00Z", "2099-12-25T13:45:00"),
        ],
    )
    def test_accepted_forms(self, client, due_date, stored):
        task = client.post("/api/taskmaster/tasks", json=create_task_payload(due_date=due_date)).json()["data"]
        assert task["due_date"].startswith(stored)

    def test_empty_string_clears(self, client):
        task = client.post("/api/taskmaster/tasks", json=create_task_payload(due_date="2099-12-25")).json()["data"]
        res = client.put(f"/api/taskmaster/tasks?id={task['id']}", json={"due_date": ""})
        assert res.status_code == 200
        assert res.json()["data"]["due_date"] is None


class TestOpenApiExport:
    def test_writes_schema_with_all_tags(self, tmp_path):
        out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))

        with open(out, encoding="utf-8") as f:
            schema = json.load(f)
        assert {t["name"] for t in schema["tags"]} == {t["name"] for t in openapi_tags}
        assert "/api/files/upload" in schema["paths"]
