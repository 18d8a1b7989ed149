from flask import Blueprint, current_app, jsonify

from auth import current_user_id, login_required
from database import get_db
from errors import BadRequest, NotFound
from services import engagement

subscribers_bp = Blueprint('subscribers', __name__)


def _require_creator(creator_id):
    if get_db().execute('SELECT 1 FROM users WHERE id = ?', (creator_id,)).fetchone() is None:
        raise NotFound('User not found')


@subscribers_bp.route('/subscribers', methods=['GET'])
@login_required
def my_subscriptions():
    """Creators the caller is subscribed to."""
    rows = get_db().execute(
        '''SELECT u.id, u.username, u.avatar_url
           FROM subscribers s JOIN users u ON u.id = s.creator_id
           WHERE s.subscriber_id = ? ORDER BY s.id DESC''',
        (current_user_id(),)).fetchall()
    return jsonify([dict(row) for row in rows])


@subscribers_bp.route('/subscribers/subscribers', methods=['GET'])
@login_required
def my_subscribers():
    """Users subscribed to the caller."""
    rows = get_db().execute(
        '''SELECT u.id, u.username, u.avatar_url
           FROM subscribers s JOIN users u ON u.id = s.subscriber_id
           WHERE s.creator_id = ? ORDER BY s.id DESC''',
        (current_user_id(),)).fetchall()
    return jsonify([dict(row) for row in rows])


@subscribers_bp.route('/subscribers/<creator_id>', methods=['GET'])
@login_required
def subscription_status(creator_id):
    active = engagement.is_active(get_db(), engagement.SUBSCRIPTIONS, current_user_id(), creator_id)
    return jsonify({"isSubscribed": active})


@subscribers_bp.route('/subscribers/<creator_id>/count', methods=['GET'])
def subscriber_count(creator_id):
    return jsonify(engagement.count(get_db(), engagement.SUBSCRIPTIONS, creator_id))


@subscribers_bp.route('/subscribers/<creator_id>', methods=['POST'])
@login_required
def toggle_subscription(creator_id):
    # Self-subscription is rejected before anything is looked up
    if creator_id == current_user_id():
        raise BadRequest('Cannot subscribe to yourself')
    _require_creator(creator_id)

    result = engagement.toggle(get_db(), engagement.SUBSCRIPTIONS, current_user_id(), creator_id)
    current_app.logger.info("User %s %s %s", current_user_id(),
                            "subscribed to" if result.active else "unsubscribed from", creator_id)
    message = "Subscribed successfully" if result.active else "Unsubscribed successfully"
    return jsonify({"message": message, "isSubscribed": result.active})


@subscribers_bp.route('/subscribers/<creator_id>', methods=['DELETE'])
@login_required
def unsubscribe(creator_id):
    engagement.remove(get_db(), engagement.SUBSCRIPTIONS, current_user_id(), creator_id)
    return jsonify({"message": "Unsubscribed successfully", "isSubscribed": False})
