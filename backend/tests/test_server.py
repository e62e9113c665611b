"""Tests for FastAPI server endpoints."""

import pytest
from fastapi.testclient import TestClient
from concierge.agent import ListingConcierge
from concierge.errors import BackendError, BackendUnavailable
from concierge.server import app, get_concierge, reset_concierge

from conftest import FakeGenerator, FakeStore, LAKE_VIEW_VILLA


@pytest.fixture
def make_client():
    """Build a test client around a concierge with fake collaborators."""

    def _make(settings, store=None, generator=None, **client_kwargs):
        concierge = ListingConcierge(settings, store or FakeStore([LAKE_VIEW_VILLA]), generator or FakeGenerator())
        app.dependency_overrides[get_concierge] = lambda: concierge
        return TestClient(app, **client_kwargs)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_ok(self, client):
        """Health endpoint should return healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "listing-concierge"


class TestRootEndpoint:
    """Tests for / endpoint."""

    def test_root_returns_api_info(self, client):
        """Root endpoint should return API information."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Listing Concierge API"
        assert "/assistant/message" in data["endpoints"]


class TestAssistantMessage:
    """Tests for POST /assistant/message."""

    def test_success_returns_text(self, make_client, settings):
        """Should return the generated text with status 200."""
        generator = FakeGenerator()
        client = make_client(settings, generator=generator)

        response = client.post("/assistant/message", json={"message": "Show me houses in Pune"})

        assert response.status_code == 200
        assert response.json() == {"text": generator.reply}
        assert "Lake View Villa" in generator.prompts[0]

    def test_accepts_client_history_without_using_it(self, make_client, settings):
        """History in the web client's shape is accepted but not folded into the prompt."""
        generator = FakeGenerator()
        client = make_client(settings, generator=generator)

        response = client.post(
            "/assistant/message",
            json={
                "message": "Tell me more",
                "history": [
                    {"role": "user", "text": "Any villas near the lake?"},
                    {"role": "model", "parts": "Earlier answer about Sunset Cottage"},
                ],
            },
        )

        assert response.status_code == 200
        assert "Any villas near the lake?" not in generator.prompts[0]
        assert "Sunset Cottage" not in generator.prompts[0]

    def test_missing_credential_never_calls_generator(self, make_client, settings_without_key):
        """ConfigurationMissing is returned with zero generation calls."""
        generator = FakeGenerator()
        client = make_client(settings_without_key, generator=generator)

        response = client.post("/assistant/message", json={"message": "Show me houses"})

        assert response.status_code == 500
        assert response.json()["code"] == "ConfigurationMissing"
        assert len(generator.prompts) == 0

    def test_store_failure_is_data_unavailable(self, make_client, settings, failing_store):
        """Store failures surface as DataUnavailable without any listing titles."""
        generator = FakeGenerator()
        client = make_client(settings, store=failing_store, generator=generator)

        response = client.post("/assistant/message", json={"message": "Show me houses"})

        assert response.status_code == 503
        data = response.json()
        assert data["code"] == "DataUnavailable"
        assert data["text"] == "I'm having trouble accessing our listings right now."
        assert "Lake View Villa" not in data["text"]
        assert generator.prompts == []

    @pytest.mark.parametrize(
        "error,status,code",
        [
            (BackendError("upstream 500: secret-body"), 502, "BackendError"),
            (BackendUnavailable("dns failure"), 503, "BackendUnavailable"),
        ],
    )
    def test_backend_failures_are_generic(self, make_client, settings, error, status, code):
        """Backend failures map to a retryable status and never leak detail."""
        client = make_client(settings, generator=FakeGenerator(error=error))

        response = client.post("/assistant/message", json={"message": "hello"})

        assert response.status_code == status
        data = response.json()
        assert data["code"] == code
        assert "trouble connecting" in data["text"]
        assert "secret-body" not in data["text"]
        assert "dns" not in data["text"]

    def test_unexpected_failure_is_internal_error(self, make_client, settings):
        """Unexpected exceptions become a generic InternalError payload."""
        client = make_client(settings, generator=FakeGenerator(error=RuntimeError("key=sk-live-123")))

        response = client.post("/assistant/message", json={"message": "hello"})

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "InternalError"
        assert "sk-live-123" not in data["text"]

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"message": "   "},
            {"history": [{"role": "user", "text": "hi"}]},
            {"message": "hi", "history": [{"role": "system", "text": "x"}]},
            {"message": ["not", "a", "string"]},
        ],
    )
    def test_malformed_input_rejected_before_io(self, make_client, settings, body):
        """Bad bodies are rejected with MalformedInput before the store is read."""
        store = FakeStore([LAKE_VIEW_VILLA])
        client = make_client(settings, store=store)

        response = client.post("/assistant/message", json=body)

        assert response.status_code == 400
        assert response.json()["code"] == "MalformedInput"
        assert store.calls == []


class TestAssistantInventory:
    """Tests for GET /assistant/inventory."""

    def test_returns_ledger_preview(self, make_client, settings):
        client = make_client(settings)

        response = client.get("/assistant/inventory")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["entries"][0]["title"] == "Lake View Villa"
        assert data["entries"][0]["normalizedPrice"] == 4500000
        assert data["ledger"].startswith("- Lake View Villa (House): ₹4500000")

    def test_empty_inventory_returns_sentinel(self, make_client, settings):
        client = make_client(settings, store=FakeStore([]))
        data = client.get("/assistant/inventory").json()
        assert data["count"] == 0
        assert data["ledger"] == "No properties currently listed."

    def test_store_failure_is_503(self, make_client, settings, failing_store):
        client = make_client(settings, store=failing_store)
        response = client.get("/assistant/inventory")
        assert response.status_code == 503
        assert response.json()["code"] == "DataUnavailable"


class TestUnexpectedFailures:
    """Failures outside the assistant pipeline still return {text, code}."""

    @pytest.fixture
    def fresh_concierge(self, monkeypatch):
        """Force get_concierge to rebuild settings from the environment."""
        monkeypatch.setattr("concierge.config.load_dotenv", lambda *args, **kwargs: False)
        reset_concierge()
        yield monkeypatch
        reset_concierge()

    def test_invalid_settings_return_json_payload(self, fresh_concierge):
        """A bad SNAPSHOT_LIMIT surfaces as InternalError, not a plain-text 500."""
        fresh_concierge.setenv("SNAPSHOT_LIMIT", "abc")
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post("/assistant/message", json={"message": "hi"})

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "InternalError"
        assert "SNAPSHOT_LIMIT" not in data["text"]

    def test_inventory_unexpected_failure_returns_json_payload(self, make_client, settings):
        """Non-assistant errors on the inventory route use the same failure shape."""
        client = make_client(
            settings,
            store=FakeStore(error=RuntimeError("postgrest exploded")),
            raise_server_exceptions=False,
        )

        response = client.get("/assistant/inventory")

        assert response.status_code == 500
        assert response.json() == {
            "text": "Something went wrong. Please try again later.",
            "code": "InternalError",
        }
