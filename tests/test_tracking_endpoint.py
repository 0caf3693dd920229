from fastapi.testclient import TestClient

from engagement_engine.db import get_supabase
from engagement_engine.main import app
from engagement_engine.observability import metrics_snapshot, reset_metrics
from engagement_engine.routers import tracking as tracking_router


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, table_name: str, db: "FakeSupabase"):
        self.table_name = table_name
        self.db = db
        self.operation = "select"
        self.filters = []
        self.insert_payload = None

    def select(self, _fields: str):
        self.operation = "select"
        return self

    def insert(self, payload: dict):
        self.operation = "insert"
        self.insert_payload = payload
        return self

    def eq(self, key: str, value):
        self.filters.append(("eq", key, value))
        return self

    def is_(self, key: str, value):
        self.filters.append(("is", key, value))
        return self

    def execute(self):
        table = self.db.tables.setdefault(self.table_name, [])
        if self.operation == "insert":
            row = dict(self.insert_payload or {})
            row.setdefault("id", f"{self.table_name}-{len(table) + 1}")
            table.append(row)
            return FakeResponse([row])
        rows = list(table)
        for kind, key, value in self.filters:
            if kind == "eq":
                rows = [row for row in rows if row.get(key) == value]
            elif kind == "is" and value == "null":
                rows = [row for row in rows if row.get(key) is None]
        return FakeResponse(rows)


class FakeSupabase:
    def __init__(self):
        self.tables = {
            "events": [
                {"id": "evt-live", "published_at": "2025-01-01T00:00:00Z", "deleted_at": None},
                {"id": "evt-draft", "published_at": None, "deleted_at": None},
            ],
            "analytics_events": [],
        }

    def table(self, table_name: str):
        return FakeQuery(table_name, self)


def _client(fake_db: FakeSupabase) -> TestClient:
    app.dependency_overrides[get_supabase] = lambda: fake_db
    return TestClient(app)


def _clear():
    app.dependency_overrides.clear()


def test_track_page_view_is_recorded():
    reset_metrics()
    fake_db = FakeSupabase()
    client = _client(fake_db)
    response = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-live", "type": "page_view", "session_id": "s-1", "data": {"path": "/e/party"}},
    )
    _clear()

    assert response.status_code == 201
    assert response.json() == {"id": "analytics_events-1"}
    stored = fake_db.tables["analytics_events"][0]
    assert stored["event_id"] == "evt-live"
    assert stored["type"] == "page_view"
    assert stored["session_id"] == "s-1"
    assert stored["data"] == {"path": "/e/party"}
    assert metrics_snapshot()["analytics.track.events|type=page_view"] == 1
    reset_metrics()


def test_track_does_not_require_auth_header():
    client = _client(FakeSupabase())
    response = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-live", "type": "rsvp_form_started", "session_id": "s-9"},
    )
    _clear()

    assert response.status_code == 201


def test_track_unknown_event_is_not_found():
    client = _client(FakeSupabase())
    response = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-missing", "type": "page_view", "session_id": "s-1"},
    )
    _clear()

    assert response.status_code == 404


def test_track_rejects_unknown_type_and_empty_session():
    client = _client(FakeSupabase())
    bad_type = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-live", "type": "button_clicked", "session_id": "s-1"},
    )
    empty_session = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-live", "type": "page_view", "session_id": ""},
    )
    _clear()

    assert bad_type.status_code == 422
    assert empty_session.status_code == 422


def test_track_unpublished_event_allowed_outside_production(monkeypatch):
    monkeypatch.setattr(tracking_router.settings, "environment", "development")
    client = _client(FakeSupabase())
    response = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-draft", "type": "page_view", "session_id": "s-1"},
    )
    _clear()

    assert response.status_code == 201


def test_track_unpublished_event_rejected_in_production(monkeypatch):
    monkeypatch.setattr(tracking_router.settings, "environment", "production")
    fake_db = FakeSupabase()
    client = _client(fake_db)
    response = client.post(
        "/api/analytics/track",
        json={"event_id": "evt-draft", "type": "page_view", "session_id": "s-1"},
    )
    _clear()

    assert response.status_code == 400
    assert response.json()["detail"] == "Event not published"
    assert fake_db.tables["analytics_events"] == []


def test_track_accepts_camel_case_body():
    fake_db = FakeSupabase()
    client = _client(fake_db)
    response = client.post(
        "/api/analytics/track",
        json={"eventId": "evt-live", "type": "page_view", "sessionId": "s-1"},
    )
    _clear()

    assert response.status_code == 201
    stored = fake_db.tables["analytics_events"][0]
    assert stored["event_id"] == "evt-live"
    assert stored["session_id"] == "s-1"
    assert stored["data"] is None
