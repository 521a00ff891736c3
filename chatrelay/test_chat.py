import requests
from sqlmodel import SQLModel

from chatrelay.provider import PLACEHOLDER_REPLY, Success, Unconfigured


def test_chat_returns_both_stored_messages(make_client, stub_client):
    client = stub_client(Success("Hi there!"))
    with make_client(client) as api:
        resp = api.post("/api/chat", json={"message": "Hello"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["userMessage"]["role"] == "user"
        assert data["userMessage"]["content"] == "Hello"
        assert data["aiMessage"]["role"] == "assistant"
        assert data["aiMessage"]["content"] == "Hi there!"
        assert data["aiMessage"]["id"] == data["userMessage"]["id"] + 1
        assert "timestamp" in data["aiMessage"]

        history = api.get("/api/history").json()
        assert [(m["role"], m["content"]) for m in history] == [
            ("user", "Hello"), ("assistant", "Hi there!"),
        ]
        assert history[0]["id"] == data["userMessage"]["id"]


def test_empty_message_is_400(make_client, stub_client):
    client = stub_client(Success("unused"))
    with make_client(client) as api:
        for body in ({"message": ""}, {"message": "   "}, {}):
            resp = api.post("/api/chat", json=body)
            assert resp.status_code == 400
            assert resp.json() == {"error": "Message cannot be empty"}
        assert api.get("/api/history").json() == []
    assert client.calls == []


def test_non_string_message_is_400(make_client, stub_client):
    with make_client(stub_client(Success("unused"))) as api:
        resp = api.post("/api/chat", json={"message": 42})
        assert resp.status_code == 400
        assert "error" in resp.json()


def test_unconfigured_provider_reply(make_client, stub_client):
    client = stub_client(Success("unused"))
    with make_client(client, provider_config=Unconfigured()) as api:
        resp = api.post("/api/chat", json={"message": "Hello"})
        assert resp.status_code == 200
        assert resp.json()["aiMessage"]["content"] == PLACEHOLDER_REPLY
        assert api.get("/healthz").json()["provider"] == "unconfigured"
    assert client.calls == []


def test_provider_outage_still_succeeds(make_client, stub_client):
    client = stub_client(error=requests.ConnectionError("Name or service not known"))
    with make_client(client) as api:
        resp = api.post("/api/chat", json={"message": "Hello"})
        assert resp.status_code == 200
        assert resp.json()["aiMessage"]["content"].startswith("Error connecting to AI:")
        assert len(api.get("/api/history").json()) == 2


def test_storage_fault_is_500_without_details(engine, make_client, stub_client):
    with make_client(stub_client(Success("hi"))) as api:
        SQLModel.metadata.drop_all(engine)
        resp = api.post("/api/chat", json={"message": "Hello"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to process message"}

        resp = api.get("/api/history")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch chat history"}


def test_health(make_client, stub_client):
    with make_client(stub_client(Success("hi"))) as api:
        api.post("/api/chat", json={"message": "Hello"})
        data = api.get("/healthz").json()
        assert data["ok"] is True
        assert data["messages"] == 2
        assert data["provider"] == "configured"


def test_index_page_is_served(make_client, stub_client):
    with make_client(stub_client(Success("hi"))) as api:
        resp = api.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
