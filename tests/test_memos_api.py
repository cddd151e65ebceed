"""Tests for the /memos store endpoints."""
from datetime import datetime


def _form(**over):
    body = {"title": "Deploy plan", "content": "Roll out v2 on Friday", "category": "work", "tags": ["infra"]}
    body.update(over)
    return body


def test_create_memo(client):
    r = client.post("/memos", json=_form(tags=["infra", "  ", " ops "]))
    assert r.status_code == 201

    data = r.json()
    assert data["title"] == "Deploy plan"
    assert data["category"] == "work"
    assert data["tags"] == ["infra", "ops"]
    assert data["summary"] is None
    assert len(data["id"]) == 32
    assert data["created_at"] == data["updated_at"]


def test_create_memo_rejects_missing_fields(client):
    assert client.post("/memos", json={"content": "x", "category": "work"}).status_code == 422
    assert client.post("/memos", json=_form(title="   ")).status_code == 422
    assert client.post("/memos", json=_form(category="all")).status_code == 422


def test_list_is_newest_first(client):
    first = client.post("/memos", json=_form(title="first")).json()
    second = client.post("/memos", json=_form(title="second")).json()

    r = client.get("/memos")
    assert r.status_code == 200
    assert [m["id"] for m in r.json()["items"]] == [second["id"], first["id"]]


def test_get_unknown_memo_is_404(client):
    assert client.get("/memos/nope").status_code == 404


def test_update_bumps_updated_at_and_keeps_summary(client):
    memo = client.post("/memos", json=_form()).json()
    client.put(f"/memos/{memo['id']}/summary", json={"summary": "Ship v2 Friday."})

    r = client.put(f"/memos/{memo['id']}", json=_form(title="Deploy plan v2"))
    assert r.status_code == 200
    updated = r.json()
    assert updated["title"] == "Deploy plan v2"
    assert updated["summary"] == "Ship v2 Friday."
    assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(memo["updated_at"])
    assert updated["created_at"] == memo["created_at"]


def test_update_unknown_memo_is_404(client):
    assert client.put("/memos/nope", json=_form()).status_code == 404


def test_delete_memo(client):
    memo = client.post("/memos", json=_form()).json()

    assert client.delete(f"/memos/{memo['id']}").status_code == 204
    assert client.get(f"/memos/{memo['id']}").status_code == 404
    assert client.delete(f"/memos/{memo['id']}").status_code == 404


def test_assign_summary(client):
    memo = client.post("/memos", json=_form()).json()

    r = client.put(f"/memos/{memo['id']}/summary", json={"summary": "  Ship v2 Friday.  "})
    assert r.status_code == 200
    assert r.json()["summary"] == "Ship v2 Friday."
    assert client.put(f"/memos/{memo['id']}/summary", json={"summary": "   "}).status_code == 400
    assert client.put("/memos/nope/summary", json={"summary": "x"}).status_code == 404
