from __future__ import annotations

import asyncio
import json
from pathlib import Path

from fastapi.testclient import TestClient

from chat_rpc.models import GREETING_TEXT
from chat_rpc.server import create_app
from chat_rpc.store import DEFAULT_SEED, MessageStore


def _data(resp):
    body = resp.json()
    assert body["result"]["type"] == "data"
    return body["result"]["data"]


def test_root_banner_and_health(client: TestClient, store: MessageStore):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Hello from api-server"

    store.append("A", "hi")
    assert client.get("/health").json() == {"ok": True, "messages": 1}


def test_greeting_endpoint(client: TestClient, store: MessageStore):
    r1 = client.get("/trpc/greeting")
    r2 = client.get("/trpc/greeting")
    assert r1.status_code == 200
    assert _data(r1) == {"message": GREETING_TEXT}
    assert r1.json() == r2.json()
    assert len(store) == 0


def test_add_then_get_roundtrip(client: TestClient, store: MessageStore):
    r = client.post("/trpc/addMessage", json={"user": "A", "message": "hi"})
    assert r.status_code == 200
    # The mutation echoes the accepted input, without the generated id.
    assert _data(r) == {"user": "A", "message": "hi"}

    r = client.get("/trpc/getMessages", params={"input": "1"})
    [entry] = _data(r)
    assert entry["user"] == "A"
    assert entry["message"] == "hi"
    assert entry["id"] == next(iter(store)).id


def test_get_messages_limits(client: TestClient, store: MessageStore):
    for i in range(12):
        store.append("u", f"m{i}")

    default = _data(client.get("/trpc/getMessages"))
    assert [m["message"] for m in default] == [f"m{i}" for i in range(2, 12)]

    assert _data(client.get("/trpc/getMessages", params={"input": "0"})) == []
    assert len(_data(client.get("/trpc/getMessages", params={"input": "10.0"}))) == 10
    assert len(_data(client.get("/trpc/getMessages", params={"input": "50"}))) == 12


def test_missing_field_is_bad_request(client: TestClient, store: MessageStore):
    r = client.post("/trpc/addMessage", json={"user": "A"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == -32600
    assert err["data"]["code"] == "BAD_REQUEST"
    assert err["data"]["httpStatus"] == 400
    assert err["data"]["path"] == "addMessage"
    assert [i["path"] for i in err["data"]["issues"]] == [["message"]]
    assert len(store) == 0


def test_non_numeric_limit_is_bad_request(client: TestClient):
    r = client.get("/trpc/getMessages", params={"input": json.dumps("ten")})
    assert r.status_code == 400
    assert r.json()["error"]["data"]["code"] == "BAD_REQUEST"


def test_malformed_json_is_bad_request(client: TestClient, store: MessageStore):
    r = client.get("/trpc/getMessages", params={"input": "{not json"})
    assert r.status_code == 400

    # Past the interpreter's int digit limit.
    r = client.get("/trpc/getMessages", params={"input": "9" * 5000})
    assert r.status_code == 400
    assert r.json()["error"]["data"]["issues"][0]["code"] == "json_invalid"

    for body in (b"{nope", b"[" * 100000, b'{"user": "\xff", "message": "hi"}'):
        r = client.post(
            "/trpc/addMessage",
            content=body,
            headers={"content-type": "application/json"},
        )
        assert r.status_code == 400
        assert r.json()["error"]["data"]["code"] == "BAD_REQUEST"
    assert len(store) == 0


def test_hello_returns_plain_greeting(client: TestClient):
    r = client.get("/trpc/hello")
    assert r.status_code == 200
    assert _data(r) == GREETING_TEXT


def test_unknown_procedure_is_not_found(client: TestClient):
    r = client.get("/trpc/deleteMessage")
    assert r.status_code == 404
    assert r.json()["error"]["data"]["code"] == "NOT_FOUND"


def test_wrong_method_is_rejected(client: TestClient, store: MessageStore):
    r = client.get("/trpc/addMessage", params={"input": json.dumps({"user": "A", "message": "hi"})})
    assert r.status_code == 405
    assert r.json()["error"]["data"]["code"] == "METHOD_NOT_SUPPORTED"

    r = client.post("/trpc/getMessages", json=1)
    assert r.status_code == 405
    assert len(store) == 0


def test_default_app_is_seeded(clean_env, config_path: Path):
    app = create_app(str(config_path))
    with TestClient(app) as c:
        data = _data(c.get("/trpc/getMessages"))
    assert [(m["user"], m["message"]) for m in data] == list(DEFAULT_SEED)
    assert len({m["id"] for m in data}) == 2


def test_seed_can_be_disabled(clean_env, monkeypatch, tmp_path: Path):
    monkeypatch.setenv("CHAT_RPC__MESSAGES__SEED", "false")
    app = create_app(str(tmp_path / "missing.yaml"))
    assert len(app.state.store) == 0


def test_custom_base_path(clean_env, tmp_path: Path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("server:\n  base_path: api/rpc/\n", encoding="utf-8")
    with TestClient(create_app(str(cfg), store=MessageStore())) as c:
        assert c.get("/api/rpc/greeting").status_code == 200
        assert c.get("/trpc/greeting").status_code == 404


def test_mutation_runs_off_the_event_loop(client: TestClient, store: MessageStore, monkeypatch):
    seen = []
    append = store.append

    def recording_append(user, message):
        try:
            asyncio.get_running_loop()
            seen.append("loop")
        except RuntimeError:
            seen.append("worker")
        return append(user, message)

    monkeypatch.setattr(store, "append", recording_append)
    r = client.post("/trpc/addMessage", json={"user": "A", "message": "hi"})
    assert r.status_code == 200
    assert seen == ["worker"]
