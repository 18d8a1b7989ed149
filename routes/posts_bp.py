import json
from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request

from auth import current_user_id, login_required
from database import get_db, now_str
from errors import Forbidden, NotFound
from routes.comments_bp import comments_for_post
from schemas import PostRequest, ViewRequest, parse_body
from services import engagement, search, views
from services.feed import enrich_posts, post_to_dict

posts_bp = Blueprint('posts', __name__)


# --- HELPER FUNCTIONS ---

def get_post_or_404(post_id):
    row = get_db().execute('SELECT * FROM posts WHERE id = ?', (post_id,)).fetchone()
    if row is None:
        raise NotFound('Post not found')
    return post_to_dict(row)


def get_own_post(post_id):
    """Loads a post the caller is allowed to change."""
    post = get_post_or_404(post_id)
    if post['user_id'] != current_user_id():
        raise Forbidden('Not authorized to modify this post')
    return post


# --- MAIN POST ROUTES ---

@posts_bp.route('/posts', methods=['GET'])
def list_posts():
    """
    Feed, explore and search in one endpoint.

    Query args: ``q`` (search text), ``sort`` (newest, oldest, most_likes,
    most_views) and ``category``.
    """
    db = get_db()
    query = request.args.get('q', '')
    sort_key = request.args.get('sort', 'newest')
    category = request.args.get('category', 'all')

    posts = [post_to_dict(row) for row in
             db.execute('SELECT * FROM posts ORDER BY created_at DESC, id DESC').fetchall()]

    # Filter by category if the user clicked a specific tab
    if category != 'all':
        posts = [p for p in posts if category in p['categories']]

    posts = search.filter_posts(enrich_posts(db, posts), query)
    posts = search.sort_posts(posts, sort_key)

    window = current_app.config['SNIPPET_WINDOW']
    length = current_app.config['PREVIEW_LENGTH']
    for post in posts:
        post['snippet'] = search.preview(post, query, window=window, length=length)
    return jsonify(posts)


@posts_bp.route('/posts/<int:post_id>', methods=['GET'])
def get_post(post_id):
    post = get_post_or_404(post_id)
    return jsonify(enrich_posts(get_db(), [post])[0])


@posts_bp.route('/posts', methods=['POST'])
@login_required
def create_post():
    body = parse_body(PostRequest)
    db = get_db()
    with db:
        cur = db.execute(
            '''INSERT INTO posts (user_id, title, content, tags, categories, created_at)
               VALUES (?, ?, ?, ?, ?, ?)''',
            (current_user_id(), body.title, body.content,
             json.dumps(body.tags), json.dumps(body.categories), now_str()))
    current_app.logger.info("User %s created post %s", current_user_id(), cur.lastrowid)
    return jsonify(get_post_or_404(cur.lastrowid)), 201


@posts_bp.route('/posts/<int:post_id>', methods=['PUT'])
@login_required
def update_post(post_id):
    get_own_post(post_id)
    body = parse_body(PostRequest)
    db = get_db()
    with db:
        db.execute(
            '''UPDATE posts SET title = ?, content = ?, tags = ?, categories = ?, updated_at = ?
               WHERE id = ?''',
            (body.title, body.content, json.dumps(body.tags),
             json.dumps(body.categories), now_str(), post_id))
    return jsonify(get_post_or_404(post_id))


@posts_bp.route('/posts/<int:post_id>', methods=['DELETE'])
@login_required
def delete_post(post_id):
    get_own_post(post_id)
    db = get_db()
    # Likes, bookmarks, comments and views go with it (ON DELETE CASCADE)
    with db:
        db.execute('DELETE FROM posts WHERE id = ?', (post_id,))
    current_app.logger.info("User %s deleted post %s", current_user_id(), post_id)
    return jsonify({"message": "Post deleted successfully"})


@posts_bp.route('/posts/<int:post_id>/comments', methods=['GET'])
def post_comments(post_id):
    get_post_or_404(post_id)
    return jsonify(comments_for_post(post_id))


# --- ENGAGEMENT & ANALYTICS ---

@posts_bp.route('/posts/<int:post_id>/likes', methods=['GET'])
def get_likers(post_id):
    """Ids of the users who liked the post."""
    get_post_or_404(post_id)
    return jsonify(engagement.actors(get_db(), engagement.LIKES, post_id))


@posts_bp.route('/posts/<int:post_id>/likes/count', methods=['GET'])
def get_like_count(post_id):
    return jsonify(engagement.count(get_db(), engagement.LIKES, post_id))


@posts_bp.route('/posts/<int:post_id>/like', methods=['POST'])
@login_required
def toggle_like(post_id):
    get_post_or_404(post_id)
    db = get_db()
    result = engagement.toggle(db, engagement.LIKES, current_user_id(), post_id)
    return jsonify({
        "message": "Post liked successfully" if result.active else "Post unliked successfully",
        "liked": result.active,
        "likes": engagement.count(db, engagement.LIKES, post_id),
    })


@posts_bp.route('/posts/<int:post_id>/view', methods=['POST'])
def register_view(post_id):
    """
    Counts a view at most once per viewer per day. Anonymous callers are
    told apart by their address.
    """
    get_post_or_404(post_id)
    body = parse_body(ViewRequest)
    db = get_db()

    # The token wins over the body; either way the id must name a real user
    user_id = current_user_id() or body.userId
    if user_id is not None:
        row = db.execute('SELECT id FROM users WHERE id = ?', (user_id,)).fetchone()
        user_id = row['id'] if row else None

    viewer = views.viewer_identifier(user_id, request.remote_addr)
    window = timedelta(hours=current_app.config['VIEW_WINDOW_HOURS'])
    count = views.register_view(db, post_id, viewer, user_id=user_id, window=window)
    return jsonify({"views": count})


@posts_bp.route('/posts/<int:post_id>/views', methods=['GET'])
def get_view_count(post_id):
    return jsonify(views.view_count(get_db(), post_id))
