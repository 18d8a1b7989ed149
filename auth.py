"""
Bearer-token authentication.

Tokens are HS256 JWTs whose ``sub`` is the user id. ``login_required``
guards the mutating endpoints; ``current_user_id`` lets anonymous callers
through (view registration).
"""
import functools
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app, g, request

from database import get_db
from errors import Unauthorized


def create_token(user_id):
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'iat': now,
        'exp': now + timedelta(hours=current_app.config['JWT_EXPIRES_HOURS']),
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'],
                      algorithm=current_app.config['JWT_ALGORITHM'])


def decode_token(token):
    """Returns the user id inside ``token`` or None if it is not valid."""
    try:
        payload = jwt.decode(token, current_app.config['SECRET_KEY'],
                             algorithms=[current_app.config['JWT_ALGORITHM']])
    except jwt.ExpiredSignatureError:
        current_app.logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None
    return payload.get('sub')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    return header.split(' ', 1)[1].strip() or None


def current_user_id():
    """Id of the authenticated caller, or None for anonymous requests."""
    if 'user_id' not in g:
        token = _bearer_token()
        g.user_id = decode_token(token) if token else None
    return g.user_id


def login_required(f):
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        if not _bearer_token():
            raise Unauthorized('Access denied')
        user_id = current_user_id()
        if user_id is None:
            raise Unauthorized('Invalid or expired token')
        row = get_db().execute('SELECT 1 FROM users WHERE id = ?', (user_id,)).fetchone()
        if row is None:
            raise Unauthorized('User not found')
        return f(*args, **kwargs)
    return wrapper
