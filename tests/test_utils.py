from datetime import datetime, timezone

import mongomock
import pytest
from bson import ObjectId
from fastapi import HTTPException

from conftest import API
from utils import objid, paginate, to_str_id


def test_objid_rejects_malformed_ids():
    oid = ObjectId()
    assert objid(str(oid)) == oid
    with pytest.raises(HTTPException) as exc:
        objid("123", "video ID")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid video ID"


def test_to_str_id_serialises_nested_documents():
    oid, other = ObjectId(), ObjectId()
    when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    doc = {
        "_id": oid,
        "created_at": when,
        "owner": {"_id": other, "username": "bob"},
        "refresh_token": "token",
        "videos": [other],
    }
    assert to_str_id(doc) == {
        "id": str(oid),
        "created_at": when.isoformat(),
        "owner": {"id": str(other), "username": "bob"},
        "refresh_token": "token",
        "videos": [str(other)],
    }


def test_paginate_metadata():
    coll = mongomock.MongoClient()["t"]["items"]
    coll.insert_many([{"n": i} for i in range(5)])
    page = paginate(coll, [{"$sort": {"n": 1}}], {}, page=2, limit=2, docs_label="items", total_label="total")
    assert [d["n"] for d in page["items"]] == [2, 3]
    assert page["total"] == 5
    assert page["total_pages"] == 3
    assert page["paging_counter"] == 3
    assert (page["prev_page"], page["next_page"]) == (1, 3)

    empty = paginate(coll, [], {"n": -1}, page=1, limit=10)
    assert empty["docs"] == []
    assert empty["total_pages"] == 0
    assert empty["has_next_page"] is False
    assert empty["next_page"] is None


def test_error_envelope_and_request_id(client):
    r = client.get(f"{API}/videos/not-valid", headers={"X-Request-ID": "abc123"})
    assert r.status_code == 400
    assert r.headers["X-Request-ID"] == "abc123"
    assert r.json() == {
        "status_code": 400,
        "data": None,
        "message": "Invalid video ID",
        "success": False,
        "errors": [],
    }


def test_healthcheck_and_root(client):
    r = client.get(f"{API}/healthcheck")
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "ok"
    assert client.get("/").status_code == 200


def test_unexpected_error_keeps_request_id(client, caplog):
    from database import get_db
    from main import app

    def broken_db():
        raise RuntimeError("boom")

    app.dependency_overrides[get_db] = broken_db
    r = client.get(f"{API}/videos", headers={"X-Request-ID": "req-500"})
    assert r.status_code == 500
    assert r.headers["X-Request-ID"] == "req-500"
    assert r.json()["message"] == "Something went wrong"
    assert r.json()["success"] is False
    assert any("request_failed" in rec.getMessage() and "req-500" in rec.getMessage() for rec in caplog.records)
