"""
tests/test_bookmarks_subscribers.py
"""
from __future__ import annotations


# ────────────────────────── bookmarks ──────────────────────────
def test_bookmark_toggle_and_status(client, make_user, make_post):
    _, author = make_user()
    _, reader = make_user()
    post = make_post(author, title="Keep me")

    rv = client.post(f"/api/bookmarks/{post['id']}", headers=reader)
    assert rv.get_json()["isBookmarked"] is True
    assert client.get(f"/api/bookmarks/{post['id']}", headers=reader).get_json() == {"isBookmarked": True}

    saved = client.get("/api/bookmarks", headers=reader).get_json()
    assert [p["title"] for p in saved] == ["Keep me"]

    rv = client.post(f"/api/bookmarks/{post['id']}", headers=reader)
    assert rv.get_json()["isBookmarked"] is False
    assert client.get("/api/bookmarks", headers=reader).get_json() == []


def test_bookmark_delete_is_idempotent(client, make_user, make_post):
    _, hdr = make_user()
    post = make_post(hdr)

    for _ in range(2):
        rv = client.delete(f"/api/bookmarks/{post['id']}", headers=hdr)
        assert rv.status_code == 200
        assert rv.get_json()["isBookmarked"] is False


def test_bookmark_unknown_post(client, make_user):
    _, hdr = make_user()
    assert client.post("/api/bookmarks/424242", headers=hdr).status_code == 404


# ───────────────────────── subscriptions ───────────────────────
def test_subscribe_toggle_and_count(client, make_user):
    creator, _ = make_user()
    fan, fan_hdr = make_user()

    assert client.get(f"/api/subscribers/{creator['id']}/count").get_json() == 0

    rv = client.post(f"/api/subscribers/{creator['id']}", headers=fan_hdr)
    assert rv.get_json()["isSubscribed"] is True
    assert client.get(f"/api/subscribers/{creator['id']}/count").get_json() == 1
    assert client.get(f"/api/subscribers/{creator['id']}", headers=fan_hdr).get_json() == {"isSubscribed": True}

    following = client.get("/api/subscribers", headers=fan_hdr).get_json()
    assert [u["id"] for u in following] == [creator["id"]]

    rv = client.post(f"/api/subscribers/{creator['id']}", headers=fan_hdr)
    assert rv.get_json()["isSubscribed"] is False
    assert client.get(f"/api/subscribers/{creator['id']}/count").get_json() == 0


def test_my_subscribers(client, make_user):
    creator, creator_hdr = make_user()
    fan, fan_hdr = make_user()
    client.post(f"/api/subscribers/{creator['id']}", headers=fan_hdr)

    followers = client.get("/api/subscribers/subscribers", headers=creator_hdr).get_json()
    assert [u["username"] for u in followers] == [fan["username"]]


def test_self_subscription_is_rejected(client, make_user):
    me, hdr = make_user()
    rv = client.post(f"/api/subscribers/{me['id']}", headers=hdr, json={"anything": "at all"})
    assert rv.status_code == 400
    assert rv.get_json()["error"] == "Cannot subscribe to yourself"
    assert client.get(f"/api/subscribers/{me['id']}/count").get_json() == 0


def test_subscribe_to_unknown_creator(client, make_user):
    _, hdr = make_user()
    assert client.post("/api/subscribers/no-such-user", headers=hdr).status_code == 404


def test_unsubscribe_via_delete(client, make_user):
    creator, _ = make_user()
    _, fan_hdr = make_user()
    client.post(f"/api/subscribers/{creator['id']}", headers=fan_hdr)

    rv = client.delete(f"/api/subscribers/{creator['id']}", headers=fan_hdr)
    assert rv.get_json()["isSubscribed"] is False
    assert client.get(f"/api/subscribers/{creator['id']}/count").get_json() == 0
