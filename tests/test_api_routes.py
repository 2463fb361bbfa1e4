"""Tests for the HTTP API, using a fake model provider and an in-memory store."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from cemtras.ai.chat.dependencies import ChatSessionRegistry, get_session_registry
from cemtras.db.dependencies import get_history_repository, get_storage
from cemtras.db.kv_store import InMemoryKeyValueStore
from cemtras.exceptions import ConfigurationError
from cemtras.main import app

REGISTRATION = {
    "full_name": "Ravi Kumar",
    "email": "ravi@cemtras-demo.com",
    "mobile": "9999999999",
    "password": "secret",
    "confirm_password": "secret",
}

SECOND_REGISTRATION = {
    "full_name": "Asha Patel",
    "email": "asha@cemtras-demo.com",
    "mobile": "8888888888",
    "password": "kiln-pass",
    "confirm_password": "kiln-pass",
}


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def app_overrides(storage, fake_provider, monkeypatch):
    """Isolate storage, chat sessions and the model provider per test."""
    registry = ChatSessionRegistry(maxsize=100, ttl_seconds=3600)
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_session_registry] = lambda: registry
    monkeypatch.setattr("cemtras.ai.chat.dependencies._provider", fake_provider)

    yield

    app.dependency_overrides.clear()


@pytest.fixture
def client(app_overrides):
    with TestClient(app) as test_client:
        yield test_client


def sign_in(client: TestClient, registration: dict = REGISTRATION) -> dict:
    response = client.post("/api/auth/register", json=registration)
    assert response.status_code == 200
    otp = response.json()["otp"]

    response = client.post("/api/auth/otp/verify", json={"otp": otp})
    assert response.status_code == 200
    return response.json()


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_healthcheck(self, client):
        response = client.get("/healthcheck")
        assert response.status_code == 200


class TestAuthRoutes:
    """Test suite for registration, login and OTP routes."""

    def test_register_and_verify(self, client):
        response = client.post("/api/auth/register", json=REGISTRATION)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["otp_sent"] is True
        assert len(data["otp"]) == 6

        assert client.get("/api/auth/me").status_code == 401

        response = client.post("/api/auth/otp/verify", json={"otp": data["otp"]})
        assert response.status_code == 200
        assert response.json()["email"] == REGISTRATION["email"]

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["mobile"] == "9999999999"

    def test_password_mismatch(self, client):
        response = client.post(
            "/api/auth/register", json={**REGISTRATION, "confirm_password": "other"}
        )
        assert response.status_code == 422

    def test_invalid_email(self, client):
        response = client.post("/api/auth/register", json={**REGISTRATION, "email": "not-an-email"})
        assert response.status_code == 422

    def test_duplicate_registration(self, client):
        sign_in(client)
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 409

    def test_login_flow(self, client):
        sign_in(client)
        assert client.post("/api/auth/logout").status_code == 200
        assert client.get("/api/auth/me").status_code == 401

        response = client.post(
            "/api/auth/login",
            json={"email_or_mobile": "9999999999", "password": "secret"},
        )
        assert response.status_code == 200

        response = client.post("/api/auth/otp/verify", json={"otp": response.json()["otp"]})
        assert response.status_code == 200

    def test_login_wrong_password(self, client):
        sign_in(client)
        response = client.post(
            "/api/auth/login",
            json={"email_or_mobile": REGISTRATION["email"], "password": "wrong"},
        )
        assert response.status_code == 401

    def test_wrong_otp(self, client, monkeypatch):
        monkeypatch.setattr("cemtras.auth.otp.generate_code", lambda: "123456")
        client.post("/api/auth/register", json=REGISTRATION)

        assert client.post("/api/auth/otp/verify", json={"otp": "654321"}).status_code == 401
        assert client.post("/api/auth/otp/verify", json={"otp": "12ab56"}).status_code == 422
        assert client.post("/api/auth/otp/verify", json={"otp": "123456"}).status_code == 200

    def test_login_email_is_case_insensitive(self, client):
        sign_in(client)
        client.post("/api/auth/logout")

        response = client.post(
            "/api/auth/login",
            json={"email_or_mobile": "Ravi@Cemtras-Demo.com", "password": "secret"},
        )
        assert response.status_code == 200

        response = client.post("/api/auth/otp/verify", json={"otp": response.json()["otp"]})
        assert response.status_code == 200
        assert response.json()["email"] == REGISTRATION["email"]

    def test_duplicate_email_in_other_case(self, client):
        sign_in(client)
        response = client.post(
            "/api/auth/register",
            json={**REGISTRATION, "email": "RAVI@cemtras-demo.com", "mobile": "9000000000"},
        )
        assert response.status_code == 409

    def test_resend_without_pending_login(self, client):
        assert client.post("/api/auth/otp/resend").status_code == 400

    def test_users_are_scoped_to_the_client(self, client, app_overrides):
        sign_in(client)

        with TestClient(app) as other_client:
            assert other_client.get("/api/auth/me").status_code == 401
            response = other_client.post(
                "/api/auth/login",
                json={"email_or_mobile": REGISTRATION["email"], "password": "secret"},
            )
            assert response.status_code == 401


class TestChatRoutes:
    """Test suite for chat session routes."""

    def test_roles(self, client):
        response = client.get("/api/chat/roles")

        assert response.status_code == 200
        roles = response.json()
        assert len(roles) == 7
        assert roles[0]["role"] == "Operations"
        general = [r for r in roles if r["role"] == "General AI"][0]
        assert general["requires_auth"] is True

    def test_initial_session(self, client):
        data = client.get("/api/chat/session").json()

        assert data["messages"] == []
        assert data["selected_role"] == "Operations"
        assert data["is_loading"] is False
        assert data["error"] is None

    def test_send_message(self, client, fake_provider):
        response = client.post("/api/chat/messages", json={"content": "Why is the kiln shell hot?"})

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is True
        user_message, reply = data["messages"]
        assert user_message["role"] == "user"
        assert user_message["formatted"] is None
        assert reply["role"] == "assistant"
        assert reply["formatted"]["is_structured"] is True
        assert [s["kind"] for s in reply["formatted"]["sections"]] == [
            "problem",
            "analysis",
            "solution",
            "safety",
        ]
        assert len(fake_provider.calls) == 1

    def test_blank_message_is_not_accepted(self, client):
        data = client.post("/api/chat/messages", json={"content": "   "}).json()

        assert data["accepted"] is False
        assert data["messages"] == []

    def test_transport_error_and_dismiss(self, client, fake_provider):
        fake_provider.error = RuntimeError("connection reset")

        data = client.post("/api/chat/messages", json={"content": "hello"}).json()
        assert data["error"]["kind"] == "transport"
        assert data["error"]["dismissable"] is True

        data = client.post("/api/chat/error/dismiss").json()
        assert data["accepted"] is True
        assert data["error"] is None

    def test_missing_api_key(self, client, monkeypatch):
        def unconfigured():
            raise ConfigurationError("GEMINI_API_KEY is not configured.")

        monkeypatch.setattr("cemtras.ai.chat.dependencies._provider", None)
        monkeypatch.setattr("cemtras.ai.chat.dependencies.get_gemini_client", unconfigured)

        data = client.post("/api/chat/messages", json={"content": "hello"}).json()
        assert data["accepted"] is False
        assert data["error"]["kind"] == "configuration"
        assert data["error"]["dismissable"] is False

        data = client.post("/api/chat/error/dismiss").json()
        assert data["accepted"] is False
        assert data["error"] is not None

    def test_select_role(self, client, fake_provider):
        data = client.post("/api/chat/role", json={"role": "Engineering & Design"}).json()
        assert data["selected_role"] == "Engineering & Design"

        client.post("/api/chat/messages", json={"content": "Size a preheater fan"})
        assert fake_provider.calls[0].role.value == "Engineering & Design"

    def test_unknown_role(self, client):
        assert client.post("/api/chat/role", json={"role": "Finance"}).status_code == 422

    def test_guest_cannot_use_general_ai(self, client):
        response = client.post("/api/chat/role", json={"role": "General AI"})
        assert response.status_code == 403

        sign_in(client)
        response = client.post("/api/chat/role", json={"role": "General AI"})
        assert response.status_code == 200

    def test_guest_cannot_attach_files(self, client):
        response = client.post("/api/chat/files", json={"name": "kiln.pdf"})
        assert response.status_code == 401

        sign_in(client)
        response = client.post("/api/chat/files", json={"name": "kiln.pdf", "size_bytes": 2048})
        assert response.status_code == 200
        assert response.json()["uploaded_files"][0]["name"] == "kiln.pdf"

    def test_logout_resets_session(self, client):
        sign_in(client)
        client.post("/api/chat/messages", json={"content": "Ravi's private question"})

        assert client.post("/api/auth/logout").status_code == 200

        data = client.get("/api/chat/session").json()
        assert data["messages"] == []
        assert data["current_chat_id"] is None

    def test_general_ai_is_dropped_on_logout(self, client, fake_provider):
        sign_in(client)
        assert client.post("/api/chat/role", json={"role": "General AI"}).status_code == 200
        client.post("/api/chat/files", json={"name": "kiln.pdf"})

        client.post("/api/auth/logout")

        data = client.post("/api/chat/messages", json={"content": "hello"}).json()
        assert data["accepted"] is True
        assert data["selected_role"] == "Operations"
        assert data["uploaded_files"] == []
        assert fake_provider.calls[-1].role.value == "Operations"

    def test_new_chat(self, client):
        client.post("/api/chat/messages", json={"content": "hello"})
        data = client.post("/api/chat/new").json()

        assert data["messages"] == []
        assert data["current_chat_id"] is None


class TestHistoryRoutes:
    """Test suite for chat history routes."""

    def test_requires_sign_in(self, client):
        assert client.get("/api/histories").status_code == 401
        assert client.delete("/api/histories").status_code == 401

    def test_exchange_is_saved_and_listed(self, client):
        sign_in(client)
        session = client.post(
            "/api/chat/messages", json={"content": "Why is the raw mill vibrating so much today?"}
        ).json()

        data = client.get("/api/histories").json()
        assert data["total"] == 1
        assert data["max_histories"] == 10
        summary = data["histories"][0]
        assert summary["id"] == session["current_chat_id"]
        assert summary["title"] == "Why is the raw mill vibrating ..."
        assert summary["message_count"] == 2

        history = client.get(f"/api/histories/{summary['id']}").json()
        assert len(history["messages"]) == 2

        messages = client.get(f"/api/histories/{summary['id']}/messages").json()
        assert messages[1]["formatted"]["is_structured"] is True

    def test_load_history(self, client):
        sign_in(client)
        client.post("/api/chat/role", json={"role": "Procurement"})
        chat_id = client.post("/api/chat/messages", json={"content": "Vendor scoring"}).json()[
            "current_chat_id"
        ]
        client.post("/api/chat/new")
        client.post("/api/chat/role", json={"role": "Operations"})

        data = client.post(f"/api/chat/load/{chat_id}").json()

        assert data["accepted"] is True
        assert data["current_chat_id"] == chat_id
        assert data["selected_role"] == "Procurement"
        assert len(data["messages"]) == 2

    def test_load_unknown_history(self, client):
        sign_in(client)
        data = client.post("/api/chat/load/chat_missing").json()

        assert data["accepted"] is False
        assert data["messages"] == []

    def test_get_unknown_history(self, client):
        sign_in(client)
        assert client.get("/api/histories/chat_missing").status_code == 404

    def test_delete_and_clear(self, client):
        sign_in(client)
        chat_id = client.post("/api/chat/messages", json={"content": "hello"}).json()[
            "current_chat_id"
        ]

        assert client.delete(f"/api/histories/{chat_id}").status_code == 204
        assert client.get("/api/histories").json()["total"] == 0
        assert client.get("/api/chat/session").json()["current_chat_id"] is None
        assert client.delete("/api/histories/chat_missing").status_code == 204

        client.post("/api/chat/messages", json={"content": "again"})
        assert client.get("/api/histories").json()["total"] == 1
        assert client.delete("/api/histories").status_code == 204
        assert client.get("/api/histories").json()["total"] == 0

    def test_next_user_does_not_inherit_conversation(self, client):
        sign_in(client)
        client.post("/api/chat/messages", json={"content": "Ravi's private question"})
        client.post("/api/auth/logout")

        sign_in(client, SECOND_REGISTRATION)
        client.post("/api/chat/messages", json={"content": "Asha's question"})

        data = client.get("/api/histories").json()
        assert data["total"] == 1
        history = client.get(f"/api/histories/{data['histories'][0]['id']}").json()
        contents = [message["content"] for message in history["messages"]]
        assert contents[0] == "Asha's question"
        assert "Ravi's private question" not in contents

    def test_switching_user_without_logout(self, client):
        sign_in(client)
        client.post("/api/chat/messages", json={"content": "Ravi's private question"})

        sign_in(client, SECOND_REGISTRATION)
        assert client.get("/api/chat/session").json()["messages"] == []
        client.post("/api/chat/messages", json={"content": "Asha's question"})

        histories = client.get("/api/histories").json()["histories"]
        assert [summary["title"] for summary in histories] == ["Asha's question..."]

        client.post("/api/auth/logout")
        response = client.post(
            "/api/auth/login",
            json={"email_or_mobile": REGISTRATION["email"], "password": "secret"},
        )
        client.post("/api/auth/otp/verify", json={"otp": response.json()["otp"]})

        histories = client.get("/api/histories").json()["histories"]
        assert [summary["title"] for summary in histories] == ["Ravi's private question..."]

    def test_storage_failure_returns_500(self, client):
        sign_in(client)
        failing = MagicMock()
        failing.list_histories.side_effect = Exception("Failed to read key: Table missing")
        app.dependency_overrides[get_history_repository] = lambda: failing

        response = client.get("/api/histories")

        assert response.status_code == 500
        assert "Table missing" in response.json()["detail"]
