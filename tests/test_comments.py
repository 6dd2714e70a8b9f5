from conftest import API


def test_add_and_list_comments(client, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    video = make_video(alice)
    url = f"{API}/comments/{video['id']}"

    assert client.post(url, json={"content": "   "}, headers=bob["headers"]).status_code == 400
    r = client.post(url, json={"content": "  first!  "}, headers=bob["headers"])
    assert r.status_code == 201
    comment = r.json()["data"]
    assert comment["content"] == "first!"
    assert comment["owner"]["username"] == "bob"
    client.post(url, json={"content": "second"}, headers=alice["headers"])

    listing = client.get(url, params={"limit": 10}).json()["data"]
    assert listing["total_comments"] == 2
    assert [c["content"] for c in listing["comments"]] == ["second", "first!"]
    assert listing["comments"][1]["owner"]["username"] == "bob"
    assert listing["comments"][1]["likes_count"] == 0


def test_comment_on_missing_video(client, make_user):
    alice = make_user("alice")
    missing = "64b7f0c2a1b2c3d4e5f60718"
    assert client.post(f"{API}/comments/{missing}", json={"content": "x"}, headers=alice["headers"]).status_code == 404
    assert client.get(f"{API}/comments/{missing}").status_code == 404
    assert client.get(f"{API}/comments/bad-id").status_code == 400


def test_update_and_delete_comment_ownership(client, db, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    video = make_video(alice)
    comment = client.post(
        f"{API}/comments/{video['id']}", json={"content": "hello"}, headers=bob["headers"]
    ).json()["data"]
    url = f"{API}/comments/c/{comment['id']}"

    assert client.patch(url, json={"content": "edited"}, headers=alice["headers"]).status_code == 403
    r = client.patch(url, json={"content": "edited"}, headers=bob["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["content"] == "edited"

    client.post(f"{API}/likes/toggle/c/{comment['id']}", headers=alice["headers"])
    assert client.delete(url, headers=alice["headers"]).status_code == 403
    assert client.delete(url, headers=bob["headers"]).status_code == 200
    assert client.delete(url, headers=bob["headers"]).status_code == 404
    assert db["like"].count_documents({}) == 0


def test_comments_on_drafts_are_owner_only(client, make_user, make_video):
    alice = make_user("alice")
    bob = make_user("bob")
    draft = make_video(alice, is_published=False)
    url = f"{API}/comments/{draft['id']}"
    assert client.post(url, json={"content": "hi"}, headers=bob["headers"]).status_code == 404
    assert client.get(url).status_code == 404
    assert client.post(url, json={"content": "note"}, headers=alice["headers"]).status_code == 201
    assert client.get(url, headers=alice["headers"]).json()["data"]["total_comments"] == 1
