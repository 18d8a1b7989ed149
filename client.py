"""
Small HTTP client for the blog API.

Authentication state lives in an explicit ``AuthSession`` handed to the
client, not in globals: hydrate it on startup, save it after login, clear it
on logout or once the token has expired.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import jwt
import requests

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """A request failed; ``message`` is what should be shown to the user."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status


class AuthSession:
    def __init__(self, path=None, token=None, user=None):
        self.path = Path(path) if path else None
        self.token = token
        self.user = user

    @property
    def is_authenticated(self):
        return bool(self.token) and not self.is_expired()

    def expires_at(self):
        if not self.token:
            return None
        try:
            # Only the server can check the signature; the client just reads exp
            claims = jwt.decode(self.token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None
        exp = claims.get('exp')
        return datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None

    def is_expired(self, now=None):
        expires = self.expires_at()
        if expires is None:
            return True
        return (now or datetime.now(timezone.utc)) >= expires

    def hydrate(self):
        """Loads a saved session; an expired or unreadable one is discarded."""
        if not self.path or not self.path.exists():
            return self
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            self.clear()
            return self
        self.token = data.get('token')
        self.user = data.get('user')
        if self.is_expired():
            logger.info("Stored session has expired")
            self.clear()
        return self

    def start(self, token, user):
        self.token = token
        self.user = user
        self.save()

    def save(self):
        if self.path:
            self.path.write_text(json.dumps({"token": self.token, "user": self.user}))

    def clear(self):
        self.token = None
        self.user = None
        if self.path and self.path.exists():
            self.path.unlink()

    def headers(self):
        return {"Authorization": f"Bearer {self.token}"} if self.is_authenticated else {}


class BlogClient:
    def __init__(self, base_url, session=None, http=None, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.session = session or AuthSession()
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, auth=False, **kwargs):
        if self.session.token and self.session.is_expired():
            self.session.clear()
        if auth and not self.session.is_authenticated:
            raise ApiClientError("You must be logged in to do that", status=401)

        headers = dict(kwargs.pop('headers', {}), **self.session.headers())
        try:
            resp = self.http.request(method, self.base_url + path, headers=headers,
                                     timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiClientError("Could not reach the server") from e

        if resp.status_code == 401:
            self.session.clear()
        if resp.status_code >= 400:
            try:
                message = resp.json().get('error')
            except ValueError:
                message = None
            raise ApiClientError(message or f"Request failed ({resp.status_code})",
                                 status=resp.status_code)
        return resp.json()

    # --- auth ---

    def register(self, email, password, username):
        data = self._request('POST', '/api/auth/register',
                             json={"email": email, "password": password, "username": username})
        self.session.start(data['token'], data['user'])
        return data['user']

    def login(self, email, password):
        data = self._request('POST', '/api/auth/login', json={"email": email, "password": password})
        self.session.start(data['token'], data['user'])
        return data['user']

    def logout(self):
        self.session.clear()

    def delete_account(self):
        result = self._request('DELETE', '/api/users/profile', auth=True)
        self.session.clear()
        return result

    # --- reading ---

    def feed(self, query='', sort='newest', category='all'):
        params = {"q": query, "sort": sort, "category": category}
        return self._request('GET', '/api/posts', params=params)

    def post(self, post_id):
        return self._request('GET', f'/api/posts/{post_id}')

    # --- engagement ---

    def toggle_like(self, post_id):
        return self._request('POST', f'/api/posts/{post_id}/like', auth=True)

    def toggle_bookmark(self, post_id):
        return self._request('POST', f'/api/bookmarks/{post_id}', auth=True)

    def toggle_subscription(self, creator_id):
        return self._request('POST', f'/api/subscribers/{creator_id}', auth=True)

    def register_view(self, post_id):
        body = {"userId": self.session.user['id']} if self.session.is_authenticated and self.session.user else {}
        return self._request('POST', f'/api/posts/{post_id}/view', json=body)['views']
