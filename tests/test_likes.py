import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from conftest import API
from routers.likes import toggle_like


def test_toggle_video_like_flips(client, db, make_user, make_video):
    alice = make_user("alice")
    video = make_video(alice)
    url = f"{API}/likes/toggle/v/{video['id']}"

    first = client.post(url, headers=alice["headers"])
    assert first.status_code == 201
    assert first.json()["data"] == {"is_liked": True}
    assert db["like"].count_documents({}) == 1

    second = client.post(url, headers=alice["headers"])
    assert second.status_code == 200
    assert second.json()["data"] == {"is_liked": False}
    assert db["like"].count_documents({}) == 0

    assert client.post(url, headers=alice["headers"]).status_code == 201
    assert db["like"].count_documents({}) == 1


def test_like_documents_are_unique_per_user_and_target(db, make_user, make_video):
    alice = make_user("alice")
    video = make_video(alice)
    vid, uid = ObjectId(video["id"]), ObjectId(alice["id"])

    assert toggle_like(db, "video", vid, uid) is True
    with pytest.raises(DuplicateKeyError):
        db["like"].insert_one({"video": vid, "liked_by": uid})
    # same user, different target
    db["like"].insert_one({"tweet": ObjectId(), "liked_by": uid})
    assert db["like"].count_documents({"liked_by": uid}) == 2


class _RacingLikes:
    """Collection where another request inserts the like first."""

    class _Deleted:
        deleted_count = 0

    def delete_one(self, _filter):
        return self._Deleted()

    def insert_one(self, _doc):
        raise DuplicateKeyError("E11000 duplicate key error")


def test_toggle_like_treats_concurrent_insert_as_liked():
    assert toggle_like({"like": _RacingLikes()}, "video", ObjectId(), ObjectId()) is True


def test_toggle_comment_and_tweet_likes(client, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    video = make_video(alice)
    comment = client.post(
        f"{API}/comments/{video['id']}", json={"content": "c"}, headers=alice["headers"]
    ).json()["data"]
    tweet = client.post(f"{API}/tweets", json={"content": "t"}, headers=alice["headers"]).json()["data"]

    assert client.post(f"{API}/likes/toggle/c/{comment['id']}", headers=bob["headers"]).status_code == 201
    assert client.post(f"{API}/likes/toggle/t/{tweet['id']}", headers=bob["headers"]).status_code == 201
    assert client.post(f"{API}/likes/toggle/t/{tweet['id']}", headers=bob["headers"]).status_code == 200


def test_toggle_like_errors(client, make_user):
    alice = make_user("alice")
    missing = "64b7f0c2a1b2c3d4e5f60718"
    assert client.post(f"{API}/likes/toggle/v/{missing}").status_code == 401
    assert client.post(f"{API}/likes/toggle/v/bad", headers=alice["headers"]).status_code == 400
    assert client.post(f"{API}/likes/toggle/v/{missing}", headers=alice["headers"]).status_code == 404
    assert client.post(f"{API}/likes/toggle/c/{missing}", headers=alice["headers"]).status_code == 404
    assert client.post(f"{API}/likes/toggle/t/{missing}", headers=alice["headers"]).status_code == 404


def test_liked_videos_lists_video_with_owner(client, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    v1 = make_video(alice, title="One")
    v2 = make_video(alice, title="Two")
    for v in (v1, v2):
        client.post(f"{API}/likes/toggle/v/{v['id']}", headers=bob["headers"])
    tweet = client.post(f"{API}/tweets", json={"content": "t"}, headers=alice["headers"]).json()["data"]
    client.post(f"{API}/likes/toggle/t/{tweet['id']}", headers=bob["headers"])

    r = client.get(f"{API}/likes/videos", headers=bob["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total_liked_videos"] == 2
    assert [item["video"]["title"] for item in data["liked_videos"]] == ["Two", "One"]
    owner = data["liked_videos"][0]["video"]["owner"]
    assert owner["username"] == "alice"
    assert "password_hash" not in owner


def test_drafts_cannot_be_liked_and_leave_liked_list(client, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    draft = make_video(alice, is_published=False)
    assert client.post(f"{API}/likes/toggle/v/{draft['id']}", headers=bob["headers"]).status_code == 404
    assert client.post(f"{API}/likes/toggle/v/{draft['id']}", headers=alice["headers"]).status_code == 201

    video = make_video(alice, title="Liked then hidden")
    client.post(f"{API}/likes/toggle/v/{video['id']}", headers=bob["headers"])
    client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=alice["headers"])
    data = client.get(f"{API}/likes/videos", headers=bob["headers"]).json()["data"]
    assert data["liked_videos"] == []
    assert data["total_liked_videos"] == 0
