import sqlite3
import uuid

from flask import Blueprint, current_app, jsonify
from werkzeug.security import check_password_hash, generate_password_hash

from auth import create_token, current_user_id, login_required
from database import get_db, now_str
from errors import BadRequest
from schemas import LoginRequest, RegisterRequest, parse_body

auth_bp = Blueprint('auth', __name__)


def _public_user(row):
    return {"id": row['id'], "email": row['email'], "username": row['username'],
            "bio": row['bio'], "avatar_url": row['avatar_url']}


@auth_bp.route('/auth/register', methods=['POST'])
def register():
    body = parse_body(RegisterRequest)
    db = get_db()

    taken = db.execute('SELECT email, username FROM users WHERE email = ? OR username = ?',
                       (body.email, body.username)).fetchone()
    if taken is not None:
        field = 'Email' if taken['email'] == body.email else 'Username'
        raise BadRequest(f'{field} is already registered')

    user_id = str(uuid.uuid4())
    try:
        with db:
            db.execute(
                '''INSERT INTO users (id, username, email, password_hash, created_at)
                   VALUES (?, ?, ?, ?, ?)''',
                (user_id, body.username, body.email, generate_password_hash(body.password), now_str()))
    except sqlite3.IntegrityError:
        # A concurrent registration took the email or username after the check above
        current_app.logger.info("Registration race lost for %s", body.email)
        raise BadRequest('Email or username is already registered')

    current_app.logger.info("Registered user %s (%s)", user_id, body.username)
    row = db.execute('SELECT * FROM users WHERE id = ?', (user_id,)).fetchone()
    return jsonify({"token": create_token(user_id), "user": _public_user(row)}), 201


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    body = parse_body(LoginRequest)
    row = get_db().execute('SELECT * FROM users WHERE email = ?',
                           (body.email.strip().lower(),)).fetchone()
    if row is None or not check_password_hash(row['password_hash'], body.password):
        raise BadRequest('Invalid credentials')
    return jsonify({"token": create_token(row['id']), "user": _public_user(row)})


@auth_bp.route('/auth/me', methods=['GET'])
@login_required
def me():
    """Lets a client check a stored token and refresh its cached profile."""
    row = get_db().execute('SELECT * FROM users WHERE id = ?', (current_user_id(),)).fetchone()
    return jsonify(_public_user(row))
