from conftest import API


def test_create_and_list_tweets(client, make_user):
    alice = make_user("alice")
    assert client.post(f"{API}/tweets", json={"content": ""}, headers=alice["headers"]).status_code == 400
    for text in ("one", "two", "three"):
        r = client.post(f"{API}/tweets", json={"content": text}, headers=alice["headers"])
        assert r.status_code == 201
    assert r.json()["data"]["owner"]["username"] == "alice"

    page = client.get(f"{API}/tweets/user/{alice['id']}", params={"page": 2, "limit": 2}).json()["data"]
    assert page["total_tweets"] == 3
    assert page["page"] == 2
    assert page["paging_counter"] == 3
    assert page["prev_page"] == 1
    assert [t["content"] for t in page["tweets"]] == ["one"]
    assert page["tweets"][0]["likes_count"] == 0


def test_list_tweets_of_unknown_user(client):
    assert client.get(f"{API}/tweets/user/64b7f0c2a1b2c3d4e5f60718").status_code == 404


def test_update_and_delete_tweet_ownership(client, db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    tweet = client.post(f"{API}/tweets", json={"content": "hi"}, headers=alice["headers"]).json()["data"]
    url = f"{API}/tweets/{tweet['id']}"

    assert client.patch(url, json={"content": "pwned"}, headers=bob["headers"]).status_code == 403
    r = client.patch(url, json={"content": "hello"}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["content"] == "hello"

    client.post(f"{API}/likes/toggle/t/{tweet['id']}", headers=bob["headers"])
    assert client.delete(url, headers=bob["headers"]).status_code == 403
    assert client.delete(url, headers=alice["headers"]).status_code == 200
    assert db["tweet"].count_documents({}) == 0
    assert db["like"].count_documents({}) == 0
