"""
tests/test_posting.py
"""
from __future__ import annotations


def test_create_and_fetch_post(client, make_user, make_post):
    me, hdr = make_user()
    post = make_post(hdr, title="First", content="Body", tags=[" a ", "a", "b"], categories=["Tech"])
    assert post["user_id"] == me["id"]
    assert post["tags"] == ["a", "b"]

    rv = client.get(f"/api/posts/{post['id']}")
    assert rv.status_code == 200
    assert rv.get_json()["title"] == "First"


def test_create_post_validation(client, make_user):
    _, hdr = make_user()
    rv = client.post("/api/posts", json={"title": "", "content": "x"}, headers=hdr)
    assert rv.status_code == 400
    assert "title" in rv.get_json()["error"]

    rv = client.post("/api/posts", json={"title": "t", "content": "x"})
    assert rv.status_code == 401


def test_only_owner_can_edit_or_delete(client, make_user, make_post):
    _, owner = make_user()
    _, other = make_user()
    post = make_post(owner)

    rv = client.put(f"/api/posts/{post['id']}", json={"title": "hijack", "content": "x"}, headers=other)
    assert rv.status_code == 403
    assert client.delete(f"/api/posts/{post['id']}", headers=other).status_code == 403

    rv = client.put(f"/api/posts/{post['id']}", json={"title": "Edited", "content": "x"}, headers=owner)
    assert rv.get_json()["title"] == "Edited"


def test_delete_post_cascades(client, make_user, make_post):
    _, owner = make_user()
    _, fan = make_user()
    post = make_post(owner)
    client.post(f"/api/posts/{post['id']}/like", headers=fan)
    client.post(f"/api/bookmarks/{post['id']}", headers=fan)
    client.post("/api/comments", json={"post_id": post["id"], "content": "nice"}, headers=fan)

    assert client.delete(f"/api/posts/{post['id']}", headers=owner).status_code == 200
    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert client.get(f"/api/posts/{post['id']}/likes/count").get_json() == 0
    assert client.get("/api/bookmarks", headers=fan).get_json() == []
    assert client.get(f"/api/comments/post/{post['id']}").get_json() == []


def test_missing_post_is_404(client):
    rv = client.get("/api/posts/555")
    assert rv.status_code == 404
    assert rv.get_json() == {"error": "Post not found"}


# ─────────────────────────── comments ───────────────────────────
def test_comment_lifecycle(client, make_user, make_post):
    _, author = make_user()
    commenter, c_hdr = make_user()
    _, stranger = make_user()
    post = make_post(author)

    rv = client.post("/api/comments", json={"post_id": post["id"], "content": "First!"}, headers=c_hdr)
    assert rv.status_code == 201
    comment = rv.get_json()
    assert comment["username"] == commenter["username"]

    listed = client.get(f"/api/posts/{post['id']}/comments").get_json()
    assert [c["content"] for c in listed] == ["First!"]

    rv = client.put(f"/api/comments/{comment['id']}", json={"content": "edit"}, headers=stranger)
    assert rv.status_code == 403
    rv = client.put(f"/api/comments/{comment['id']}", json={"content": "Edited"}, headers=c_hdr)
    assert rv.get_json()["content"] == "Edited"

    assert client.delete(f"/api/comments/{comment['id']}", headers=c_hdr).status_code == 200
    assert client.delete(f"/api/comments/{comment['id']}", headers=c_hdr).status_code == 404


def test_both_comment_listings_agree(client, make_user, make_post):
    _, hdr = make_user()
    post = make_post(hdr)
    for text in ("one", "two"):
        client.post("/api/comments", json={"post_id": post["id"], "content": text}, headers=hdr)

    nested = client.get(f"/api/posts/{post['id']}/comments").get_json()
    flat = client.get(f"/api/comments/post/{post['id']}").get_json()
    assert nested == flat
    assert [c["content"] for c in nested] == ["one", "two"]

    # only the post-scoped route checks that the post exists
    assert client.get("/api/posts/999/comments").status_code == 404
    assert client.get("/api/comments/post/999").get_json() == []


def test_comment_on_unknown_post(client, make_user):
    _, hdr = make_user()
    rv = client.post("/api/comments", json={"post_id": 999, "content": "hi"}, headers=hdr)
    assert rv.status_code == 404
