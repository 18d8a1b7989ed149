from flask import Blueprint, jsonify

from auth import current_user_id, login_required
from database import get_db, now_str
from errors import Forbidden, NotFound
from schemas import CommentRequest, CommentUpdate, parse_body

comments_bp = Blueprint('comments', __name__)

COMMENT_WITH_AUTHOR = '''
    SELECT c.*, u.username, u.avatar_url
    FROM comments c LEFT JOIN users u ON u.id = c.user_id
'''


def _load_comment(comment_id):
    row = get_db().execute(COMMENT_WITH_AUTHOR + ' WHERE c.id = ?', (comment_id,)).fetchone()
    if row is None:
        raise NotFound('Comment not found')
    return dict(row)


def _own_comment(comment_id):
    comment = _load_comment(comment_id)
    if comment['user_id'] != current_user_id():
        raise Forbidden('Not authorized')
    return comment


def comments_for_post(post_id):
    """Comments on a post with their authors, oldest first."""
    rows = get_db().execute(
        COMMENT_WITH_AUTHOR + ' WHERE c.post_id = ? ORDER BY c.created_at ASC, c.id ASC',
        (post_id,)).fetchall()
    return [dict(row) for row in rows]


@comments_bp.route('/comments/post/<int:post_id>', methods=['GET'])
def list_comments(post_id):
    return jsonify(comments_for_post(post_id))


@comments_bp.route('/comments', methods=['POST'])
@login_required
def create_comment():
    body = parse_body(CommentRequest)
    db = get_db()
    if db.execute('SELECT 1 FROM posts WHERE id = ?', (body.post_id,)).fetchone() is None:
        raise NotFound('Post not found')

    with db:
        cur = db.execute(
            'INSERT INTO comments (post_id, user_id, content, created_at) VALUES (?, ?, ?, ?)',
            (body.post_id, current_user_id(), body.content, now_str()))
    return jsonify(_load_comment(cur.lastrowid)), 201


@comments_bp.route('/comments/<int:comment_id>', methods=['PUT'])
@login_required
def update_comment(comment_id):
    _own_comment(comment_id)
    body = parse_body(CommentUpdate)
    db = get_db()
    with db:
        db.execute('UPDATE comments SET content = ?, updated_at = ? WHERE id = ?',
                   (body.content, now_str(), comment_id))
    return jsonify(_load_comment(comment_id))


@comments_bp.route('/comments/<int:comment_id>', methods=['DELETE'])
@login_required
def delete_comment(comment_id):
    _own_comment(comment_id)
    db = get_db()
    with db:
        db.execute('DELETE FROM comments WHERE id = ?', (comment_id,))
    return jsonify({"message": "Comment deleted successfully"})
