import os

# must be set before the app modules read their settings
os.environ["DATABASE_URL"] = ""
os.environ["DATABASE_NAME"] = ""
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("COOKIE_SECURE", "false")

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes, get_db
from main import app

API = "/api/v1"


@pytest.fixture()
def db():
    """A fresh in-memory database per test, with the production indexes."""
    database = mongomock.MongoClient()["videotube_test"]
    ensure_indexes(database)
    return database


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(client):
    """Register and log in a user; returns its id, bearer headers and tokens."""

    def _make(username, password="secret123"):
        body = {
            "full_name": username.title(),
            "email": f"{username}@example.com",
            "username": username,
            "password": password,
            "avatar": f"https://cdn.example.com/{username}.png",
        }
        r = client.post(f"{API}/users/register", json=body)
        assert r.status_code == 201, r.text
        login = client.post(f"{API}/users/login", json={"username": username, "password": password})
        assert login.status_code == 200, login.text
        # later requests authenticate with the header of whichever user they act as
        client.cookies.clear()
        data = login.json()["data"]
        return {
            "id": data["user"]["id"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
            "access_token": data["access_token"],
            "refresh_token": data["refresh_token"],
        }

    return _make


@pytest.fixture()
def make_video(client):
    def _make(user, title="My video", duration=60, is_published=True):
        body = {
            "title": title,
            "description": f"About {title}",
            "video_file": "https://cdn.example.com/v.mp4",
            "thumbnail": "https://cdn.example.com/t.png",
            "duration": duration,
            "is_published": is_published,
        }
        r = client.post(f"{API}/videos", json=body, headers=user["headers"])
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _make
