"""
tests/test_client.py

The HTTP client is exercised against the Flask test client through a tiny
adapter, so no server or network is needed.
"""
from __future__ import annotations

import datetime as _dt
import json

import jwt
import pytest

from client import ApiClientError, AuthSession, BlogClient


class _Response:
    def __init__(self, flask_response):
        self.status_code = flask_response.status_code
        self._data = flask_response.get_data(as_text=True)

    def json(self):
        return json.loads(self._data)


class _FlaskHttp:
    """Stands in for requests.Session and forwards to the Flask test client."""

    def __init__(self, client):
        self.client = client

    def request(self, method, url, headers=None, timeout=None, params=None, json=None):
        path = url.replace("http://blog.test", "")
        rv = self.client.open(path, method=method, headers=headers, query_string=params, json=json)
        return _Response(rv)


def _token(hours):
    exp = _dt.datetime.now(_dt.timezone.utc) + _dt.timedelta(hours=hours)
    return jwt.encode({"sub": "u1", "exp": exp}, "whatever", algorithm="HS256")


@pytest.fixture
def blog(client, tmp_path):
    session = AuthSession(tmp_path / "session.json")
    return BlogClient("http://blog.test", session=session, http=_FlaskHttp(client))


# ─────────────────────────── session ────────────────────────────
def test_session_lifecycle(tmp_path):
    path = tmp_path / "session.json"
    s = AuthSession(path)
    s.start(_token(hours=1), {"id": "u1"})
    assert path.exists()

    restored = AuthSession(path).hydrate()
    assert restored.is_authenticated
    assert restored.user == {"id": "u1"}

    restored.clear()
    assert not path.exists()
    assert not restored.is_authenticated


def test_expired_session_is_dropped_on_hydrate(tmp_path):
    path = tmp_path / "session.json"
    AuthSession(path).start(_token(hours=-1), {"id": "u1"})

    s = AuthSession(path).hydrate()
    assert s.token is None
    assert not path.exists()


def test_garbage_token_counts_as_expired():
    assert AuthSession(token="not-a-jwt").is_expired()


# ─────────────────────────── client ─────────────────────────────
def test_client_end_to_end(blog, client):
    author = BlogClient("http://blog.test", http=_FlaskHttp(client))
    author.register("writer@example.com", "secret1", "writer")
    post = client.post("/api/posts", json={"title": "Hi", "content": "there"},
                       headers=author.session.headers()).get_json()

    blog.register("reader@example.com", "secret1", "reader")
    assert blog.toggle_like(post["id"])["liked"] is True
    assert blog.toggle_bookmark(post["id"])["isBookmarked"] is True
    assert blog.toggle_subscription(author.session.user["id"])["isSubscribed"] is True
    assert blog.register_view(post["id"]) == 1
    assert blog.register_view(post["id"]) == 1

    [item] = blog.feed(query="hi")
    assert item["likes_count"] == 1
    assert item["username"] == "writer"


def test_logged_out_client_refuses_mutations(blog):
    with pytest.raises(ApiClientError) as exc:
        blog.toggle_like(1)
    assert exc.value.status == 401


def test_server_error_message_is_surfaced(blog):
    blog.register("me@example.com", "secret1", "me")
    with pytest.raises(ApiClientError) as exc:
        blog.toggle_subscription(blog.session.user["id"])
    assert exc.value.status == 400
    assert exc.value.message == "Cannot subscribe to yourself"


def test_logout_clears_session(blog):
    blog.register("bye@example.com", "secret1", "bye")
    blog.logout()
    assert not blog.session.is_authenticated
    assert not blog.session.path.exists()
