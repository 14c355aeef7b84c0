"""
API tests - the HTTP endpoints end to end over a temporary document store
and a mocked LLM provider.
"""

import asyncio
import json
import pytest
from datetime import date, timedelta
from unittest.mock import patch
from fastapi.testclient import TestClient

from healthlink.main import app
from healthlink.api.chat import stream_chat_history
from healthlink.api.deps import get_llm_provider, get_store
from healthlink.core import PersistenceError, RecordManager
from healthlink.llm.base import LLMResponse

from conftest import CHAT_ANSWER, METRICS, PREDICTION_ANSWER, make_llm


@pytest.fixture
def llm():
    return make_llm(PREDICTION_ANSWER)


@pytest.fixture
def client(store, llm):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_llm_provider] = lambda: llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user(client):
    """Register and log in a user; returns the profile plus auth headers."""
    response = client.post("/auth/register", json={
        "name": "Ann Smith", "email": "ann@example.com", "password": "secret123",
    })
    assert response.status_code == 201
    profile = response.json()

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]
    return {**profile, "headers": {"Authorization": f"Bearer {token}"}}


def _answer(llm, payload):
    llm.chat_completion.return_value = LLMResponse(content=json.dumps(payload), model="stub")


class TestAuthAPI:
    """Tests for signup, login and the current user."""

    def test_register_and_me(self, client, user):
        assert user["email"] == "ann@example.com"
        assert user["name"] == "Ann Smith"

        response = client.get("/auth/me", headers=user["headers"])
        assert response.status_code == 200
        assert response.json()["uid"] == user["uid"]

    def test_duplicate_email(self, client, user):
        response = client.post("/auth/register", json={
            "name": "Other", "email": "ANN@example.com", "password": "secret456",
        })
        assert response.status_code == 400

    def test_wrong_password(self, client, user):
        response = client.post("/auth/login", json={"email": "ann@example.com", "password": "wrong-pass"})
        assert response.status_code == 401

    def test_invalid_signup(self, client):
        response = client.post("/auth/register", json={
            "name": "Ann", "email": "not-an-email", "password": "secret123",
        })
        assert response.status_code == 422
        assert [v["field"] for v in response.json()["violations"]] == ["email"]

    def test_requires_token(self, client):
        assert client.get("/dashboard").status_code in (401, 403)

    def test_bad_token(self, client):
        response = client.get("/dashboard", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestProfileAPI:

    def test_update_profile(self, client, user):
        response = client.put("/profile", headers=user["headers"], json={
            "name": "Ann Jones", "age": 31, "email": "changed@example.com",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ann Jones"
        assert data["age"] == 31
        assert data["email"] == "ann@example.com"

        assert client.get("/profile", headers=user["headers"]).json()["name"] == "Ann Jones"


class TestPredictionAPI:
    """Tests for health predictions and daily health logs."""

    def test_prediction_end_to_end(self, client, user, store):
        response = client.post("/predictions", headers=user["headers"], json=METRICS)
        assert response.status_code == 200
        assert response.json() == PREDICTION_ANSWER

        today = date.today().isoformat()
        log = client.get(f"/health-logs/{today}", headers=user["headers"]).json()
        assert log == {"date": today, "heartRate": 80, "steps": 5000, "calories": 1200}

        prediction = client.get(f"/predictions/{today}", headers=user["headers"]).json()
        assert prediction["inputStats"] == METRICS
        assert prediction["predictionReport"] == "Risk: mild dehydration"
        assert prediction["doctorReference"] == PREDICTION_ANSWER["doctorReference"]
        assert prediction["timestamp"]

        dashboard = client.get("/dashboard", headers=user["headers"]).json()
        assert dashboard["name"] == "Ann Smith"
        assert dashboard["quickStats"] == {"heartRate": 80, "steps": 5000, "calories": 1200}

    def test_out_of_range_metrics(self, client, user, llm):
        response = client.post("/predictions", headers=user["headers"], json={**METRICS, "heartRate": 250})
        assert response.status_code == 422
        violations = response.json()["violations"]
        assert violations[0]["field"] == "heartRate"
        assert violations[0]["constraint"] == "max"
        llm.chat_completion.assert_not_called()

    def test_invalid_model_answer(self, client, user, llm):
        _answer(llm, {"prediction": "Fine"})
        response = client.post("/predictions", headers=user["headers"], json=METRICS)
        assert response.status_code == 502

        today = date.today().isoformat()
        assert client.get(f"/health-logs/{today}", headers=user["headers"]).status_code == 404

    def test_llm_not_configured(self, client, user):
        app.dependency_overrides[get_llm_provider] = lambda: None
        response = client.post("/predictions", headers=user["headers"], json=METRICS)
        assert response.status_code == 502

    def test_missing_prediction(self, client, user):
        response = client.get("/predictions/2024-05-01", headers=user["headers"])
        assert response.status_code == 404

    def test_empty_dashboard(self, client, user):
        dashboard = client.get("/dashboard", headers=user["headers"]).json()
        assert dashboard["quickStats"] == {"heartRate": 0, "steps": 0, "calories": 0}


class TestChatAPI:
    """Tests for the assistant chat."""

    def test_chat_end_to_end(self, client, user, llm, store):
        _answer(llm, CHAT_ANSWER)
        response = client.post("/chat/message", headers=user["headers"], json={
            "message": "How can I sleep better?",
        })
        assert response.status_code == 200
        assert response.json() == CHAT_ANSWER

        history = client.get("/chat/history", headers=user["headers"]).json()
        assert [(m["sender"], m["content"]) for m in history] == [
            ("user", "How can I sleep better?"),
            ("assistant", "Try a consistent bedtime."),
        ]

    def test_stored_turn(self, client, user, llm, store):
        _answer(llm, CHAT_ANSWER)
        client.post("/chat/message", headers=user["headers"], json={"message": "How can I sleep better?"})

        snapshots = asyncio.run(store.list_documents(f"users/{user['uid']}/chatHistory"))
        assert len(snapshots) == 1
        assert snapshots[0].data["prompt"] == "How can I sleep better?"
        assert snapshots[0].data["response"] == "Try a consistent bedtime."

    def test_history_fed_back_into_prompt(self, client, user, llm):
        _answer(llm, {"response": "Hello!"})
        client.post("/chat/message", headers=user["headers"], json={"message": "Hi"})
        client.post("/chat/message", headers=user["headers"], json={"message": "And now?"})

        prompt = llm.chat_completion.call_args.args[0][-1].content
        assert "user: Hi\nassistant: Hello!" in prompt

    def test_explicit_history_used_verbatim(self, client, user, llm):
        _answer(llm, {"response": "Sure."})
        client.post("/chat/message", headers=user["headers"], json={
            "message": "Remind me", "chatHistory": "custom history",
        })
        prompt = llm.chat_completion.call_args.args[0][-1].content
        assert "Here is the user's chat history: custom history" in prompt

    def test_welcome_message(self, client, user):
        history = client.get("/chat/history", headers=user["headers"]).json()
        assert len(history) == 1
        assert history[0]["id"] == "welcome-message"
        assert history[0]["sender"] == "assistant"

    def test_blank_message(self, client, user, llm):
        response = client.post("/chat/message", headers=user["headers"], json={"message": "  "})
        assert response.status_code == 422
        llm.chat_completion.assert_not_called()

    def test_failed_answer_keeps_prompt(self, client, user, llm):
        _answer(llm, "not json at all")
        response = client.post("/chat/message", headers=user["headers"], json={"message": "Hi"})
        assert response.status_code == 502

        history = client.get("/chat/history", headers=user["headers"]).json()
        assert [(m["sender"], m["content"]) for m in history] == [("user", "Hi")]


class TestChatHistoryStream:
    """Tests for the server-sent chat history stream."""

    @staticmethod
    def _event(chunk):
        assert chunk.startswith("data: ") and chunk.endswith("\n\n")
        return json.loads(chunk[len("data: "):])

    @pytest.mark.asyncio
    async def test_snapshots_until_closed(self, store):
        records = RecordManager(store, "user-1")
        response = await stream_chat_history(records)
        assert response.media_type == "text/event-stream"
        events = response.body_iterator

        first = self._event(await events.__anext__())
        assert first["type"] == "snapshot"
        assert [m["id"] for m in first["messages"]] == ["welcome-message"]

        turn_id = await records.start_chat_turn("How can I sleep better?")
        pending = self._event(await asyncio.wait_for(events.__anext__(), timeout=1))
        assert [(m["sender"], m["content"]) for m in pending["messages"]] == [
            ("user", "How can I sleep better?"),
        ]

        await records.complete_chat_turn(turn_id, "Try a consistent bedtime.")
        done = self._event(await asyncio.wait_for(events.__anext__(), timeout=1))
        assert [(m["id"], m["sender"]) for m in done["messages"]] == [
            (turn_id, "user"), (f"{turn_id}-ai", "assistant"),
        ]

        await events.aclose()
        key = str(store._collection_dir(records.chat_history_path))
        assert not store._subscriptions.get(key)

    @pytest.mark.asyncio
    async def test_nothing_subscribed_before_streaming(self, store):
        records = RecordManager(store, "user-1")
        response = await stream_chat_history(records)
        assert store._subscriptions == {}
        await response.body_iterator.aclose()
        assert store._subscriptions == {}

class TestTodoAPI:
    """Tests for daily to-do lists."""

    def test_task_lifecycle(self, client, user):
        headers = user["headers"]
        response = client.post("/todos/2024-05-01/tasks", headers=headers, json={"taskText": "Walk"})
        assert response.status_code == 201
        task = response.json()
        assert task["taskText"] == "Walk"
        assert task["isCompleted"] is False

        toggled = client.post(f"/todos/2024-05-01/tasks/{task['id']}/toggle", headers=headers).json()
        assert toggled["isCompleted"] is True

        todo = client.get("/todos/2024-05-01", headers=headers).json()
        assert (todo["completed"], todo["total"], todo["progress"]) == (1, 1, 100.0)

        edited = client.patch(
            f"/todos/2024-05-01/tasks/{task['id']}", headers=headers, json={"taskText": "Run"}
        ).json()
        assert edited["taskText"] == "Run"

        response = client.delete(f"/todos/2024-05-01/tasks/{task['id']}", headers=headers)
        assert response.status_code == 204
        assert client.get("/todos/2024-05-01", headers=headers).json()["tasks"] == []

    def test_unknown_task(self, client, user):
        response = client.post("/todos/2024-05-01/tasks/missing/toggle", headers=user["headers"])
        assert response.status_code == 404

    def test_blank_task(self, client, user):
        response = client.post("/todos/2024-05-01/tasks", headers=user["headers"], json={"taskText": "   "})
        assert response.status_code == 422
        assert response.json()["violations"][0]["field"] == "taskText"

    def test_invalid_date(self, client, user):
        response = client.get("/todos/2024-13-01", headers=user["headers"])
        assert response.status_code == 422

    def test_store_failure(self, client, user, store):
        with patch.object(store, "set_document", side_effect=PersistenceError("disk full")):
            response = client.post("/todos/2024-05-01/tasks", headers=user["headers"], json={"taskText": "Walk"})
        assert response.status_code == 503


class TestHistoryAPI:
    """Tests for the per-date history view."""

    def test_empty_day(self, client, user):
        response = client.get("/history/2020-01-01", headers=user["headers"])
        assert response.status_code == 200
        assert response.json() == {"date": "2020-01-01", "metrics": None, "prediction": None, "tasks": None}

    def test_before_start(self, client, user):
        response = client.get("/history/2019-12-31", headers=user["headers"])
        assert response.status_code == 422
        assert response.json()["violations"][0]["constraint"] == "min"

    def test_future_date(self, client, user):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        response = client.get(f"/history/{tomorrow}", headers=user["headers"])
        assert response.status_code == 422

    def test_recorded_day(self, client, user):
        client.post("/predictions", headers=user["headers"], json=METRICS)
        today = date.today().isoformat()
        data = client.get(f"/history/{today}", headers=user["headers"]).json()
        assert data["metrics"]["steps"] == 5000
        assert data["prediction"]["suggestedMedication"] == "Drink water"
        assert data["tasks"] is None


class TestAppEndpoints:

    def test_root(self, client):
        assert client.get("/").json()["app"] == "HealthLink"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
