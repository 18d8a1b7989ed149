from flask import Blueprint, jsonify

from auth import current_user_id, login_required
from database import get_db
from errors import NotFound
from services import engagement
from services.feed import enrich_posts, post_to_dict

bookmarks_bp = Blueprint('bookmarks', __name__)


def _require_post(post_id):
    if get_db().execute('SELECT 1 FROM posts WHERE id = ?', (post_id,)).fetchone() is None:
        raise NotFound('Post not found')


@bookmarks_bp.route('/bookmarks', methods=['GET'])
@login_required
def list_bookmarks():
    """The caller's bookmarked posts, most recently bookmarked first."""
    db = get_db()
    rows = db.execute(
        '''SELECT p.* FROM bookmarks b JOIN posts p ON p.id = b.post_id
           WHERE b.user_id = ? ORDER BY b.id DESC''',
        (current_user_id(),)).fetchall()
    return jsonify(enrich_posts(db, [post_to_dict(row) for row in rows]))


@bookmarks_bp.route('/bookmarks/<int:post_id>', methods=['GET'])
@login_required
def bookmark_status(post_id):
    active = engagement.is_active(get_db(), engagement.BOOKMARKS, current_user_id(), post_id)
    return jsonify({"isBookmarked": active})


@bookmarks_bp.route('/bookmarks/<int:post_id>', methods=['POST'])
@login_required
def toggle_bookmark(post_id):
    _require_post(post_id)
    result = engagement.toggle(get_db(), engagement.BOOKMARKS, current_user_id(), post_id)
    message = "Post bookmarked successfully" if result.active else "Bookmark removed successfully"
    return jsonify({"message": message, "isBookmarked": result.active})


@bookmarks_bp.route('/bookmarks/<int:post_id>', methods=['DELETE'])
@login_required
def remove_bookmark(post_id):
    engagement.remove(get_db(), engagement.BOOKMARKS, current_user_id(), post_id)
    return jsonify({"message": "Bookmark removed successfully", "isBookmarked": False})
