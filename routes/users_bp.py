from flask import Blueprint, current_app, jsonify

from auth import current_user_id, login_required
from database import get_db, now_str
from errors import BadRequest, Forbidden, NotFound
from schemas import ProfileUpdate, parse_body
from services.feed import default_avatar, enrich_posts, post_to_dict

users_bp = Blueprint('users', __name__)

PUBLIC_FIELDS = 'id, username, avatar_url, bio, created_at'


def _get_user_or_404(user_id):
    row = get_db().execute(f'SELECT {PUBLIC_FIELDS} FROM users WHERE id = ?', (user_id,)).fetchone()
    if row is None:
        raise NotFound('User not found')
    return dict(row)


def _posts_by(user_id):
    db = get_db()
    rows = db.execute('SELECT * FROM posts WHERE user_id = ? ORDER BY created_at DESC, id DESC',
                      (user_id,)).fetchall()
    return enrich_posts(db, [post_to_dict(row) for row in rows])


# --- PROFILE ---

@users_bp.route('/users/profile', methods=['PUT'])
@login_required
def update_profile():
    body = parse_body(ProfileUpdate)
    changes = body.model_dump(exclude_unset=True)
    if changes.get('username', '') is None:
        del changes['username']
    if not changes:
        raise BadRequest('Nothing to update')

    db = get_db()
    if 'username' in changes:
        clash = db.execute('SELECT 1 FROM users WHERE username = ? AND id != ?',
                           (changes['username'], current_user_id())).fetchone()
        if clash:
            raise BadRequest('Username is already taken')

    assignments = ', '.join(f'{field} = ?' for field in changes)
    with db:
        db.execute(f'UPDATE users SET {assignments}, updated_at = ? WHERE id = ?',
                   (*changes.values(), now_str(), current_user_id()))
    return jsonify(_get_user_or_404(current_user_id()))


@users_bp.route('/users/profile', methods=['DELETE'])
@login_required
def delete_account():
    """
    Removes the caller's account. Their posts, comments, likes, bookmarks and
    subscriptions (in both directions) are removed with it by the schema.
    """
    db = get_db()
    with db:
        db.execute('DELETE FROM users WHERE id = ?', (current_user_id(),))
    current_app.logger.info("Deleted account %s", current_user_id())
    return jsonify({"message": "Account deleted successfully"})


@users_bp.route('/users/<user_id>', methods=['GET'])
def get_user(user_id):
    user = _get_user_or_404(user_id)
    user['posts'] = _posts_by(user_id)
    return jsonify(user)


@users_bp.route('/users/<user_id>/avatar', methods=['GET'])
def get_avatar(user_id):
    user = _get_user_or_404(user_id)
    return jsonify({"avatar_url": user['avatar_url'] or default_avatar(user['username'])})


# --- ACTIVITY ---

@users_bp.route('/users/<user_id>/posts', methods=['GET'])
def get_user_posts(user_id):
    _get_user_or_404(user_id)
    return jsonify(_posts_by(user_id))


@users_bp.route('/users/<user_id>/likes', methods=['GET'])
@login_required
def get_liked_posts(user_id):
    # Likes are private to their owner
    if user_id != current_user_id():
        raise Forbidden('Not authorized to view these likes')
    db = get_db()
    rows = db.execute(
        '''SELECT p.* FROM likes l JOIN posts p ON p.id = l.post_id
           WHERE l.user_id = ? ORDER BY l.id DESC''',
        (user_id,)).fetchall()
    return jsonify(enrich_posts(db, [post_to_dict(row) for row in rows]))


@users_bp.route('/users/<user_id>/comments', methods=['GET'])
def get_user_comments(user_id):
    _get_user_or_404(user_id)
    rows = get_db().execute(
        '''SELECT c.*, p.title AS post_title, u.username, u.avatar_url
           FROM comments c
           JOIN posts p ON p.id = c.post_id
           JOIN users u ON u.id = c.user_id
           WHERE c.user_id = ? ORDER BY c.created_at DESC, c.id DESC''',
        (user_id,)).fetchall()
    return jsonify([dict(row) for row in rows])
