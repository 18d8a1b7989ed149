"""
tests/conftest.py
"""
from __future__ import annotations

import itertools
import sqlite3
from pathlib import Path
from typing import Generator

import pytest
from flask.testing import FlaskClient

from app import app
from database import init_db

_names = itertools.count()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """A fresh schema for every test."""
    path = tmp_path / "test.sqlite3"
    init_db(str(path))
    return path


@pytest.fixture
def client(db_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[FlaskClient, None, None]:
    monkeypatch.setitem(app.config, "TESTING", True)
    monkeypatch.setitem(app.config, "DB_PATH", str(db_path))
    monkeypatch.setitem(app.config, "SECRET_KEY", "test-secret")
    with app.test_client() as client:
        yield client


@pytest.fixture
def db(db_path: Path) -> Generator[sqlite3.Connection, None, None]:
    """Raw connection for service-level tests."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    yield conn
    conn.close()


@pytest.fixture
def make_user(client: FlaskClient):
    """Registers a user and returns ``(user, auth_headers)``."""
    def _make(username: str | None = None):
        name = username or f"user{next(_names)}"
        rv = client.post("/api/auth/register", json={
            "email": f"{name}@example.com",
            "password": "hunter22",
            "username": name,
        })
        assert rv.status_code == 201, rv.get_json()
        data = rv.get_json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}
    return _make


@pytest.fixture
def make_post(client: FlaskClient):
    def _make(headers, **fields):
        payload = {"title": "A post", "content": "Some content", "tags": [], "categories": []}
        payload.update(fields)
        rv = client.post("/api/posts", json=payload, headers=headers)
        assert rv.status_code == 201, rv.get_json()
        return rv.get_json()
    return _make
