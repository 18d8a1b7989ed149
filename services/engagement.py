"""
Likes, bookmarks and subscriptions.

All three are the same thing: a binary relation between an actor and a
target, stored as at most one row per pair. Toggling removes the row if it
is there and inserts it otherwise, inside a single transaction. The UNIQUE
constraint on the table settles races between concurrent toggles: a losing
insert means the relation is already active, which is what the caller asked
for, so it is reported as success.
"""
import logging
import sqlite3
from collections import namedtuple

from errors import BadRequest
from schemas import ToggleResult

logger = logging.getLogger(__name__)

Relation = namedtuple('Relation', 'table actor_col target_col')

LIKES = Relation('likes', 'user_id', 'post_id')
BOOKMARKS = Relation('bookmarks', 'user_id', 'post_id')
SUBSCRIPTIONS = Relation('subscribers', 'subscriber_id', 'creator_id')


def _is_unique_violation(err):
    return 'UNIQUE constraint failed' in str(err)


def _check_pair(relation, actor_id, target_id):
    if actor_id is None or target_id is None:
        raise BadRequest('Both actor and target are required')
    if relation is SUBSCRIPTIONS and str(actor_id) == str(target_id):
        raise BadRequest('Cannot subscribe to yourself')


def _insert(db, relation, actor_id, target_id):
    """Inserts the pair; returns False if it was already there."""
    try:
        db.execute(
            f'INSERT INTO {relation.table} ({relation.actor_col}, {relation.target_col}) VALUES (?, ?)',
            (actor_id, target_id))
    except sqlite3.IntegrityError as e:
        if not _is_unique_violation(e):
            raise
        logger.debug("%s already has (%s, %s)", relation.table, actor_id, target_id)
        return False
    return True


def _delete(db, relation, actor_id, target_id):
    cur = db.execute(
        f'DELETE FROM {relation.table} WHERE {relation.actor_col} = ? AND {relation.target_col} = ?',
        (actor_id, target_id))
    return cur.rowcount > 0


def toggle(db, relation, actor_id, target_id):
    """Flips the relation and reports the state it ended up in."""
    _check_pair(relation, actor_id, target_id)
    with db:
        if _delete(db, relation, actor_id, target_id):
            return ToggleResult(active=False)
        _insert(db, relation, actor_id, target_id)
    return ToggleResult(active=True)


def remove(db, relation, actor_id, target_id):
    _check_pair(relation, actor_id, target_id)
    with db:
        _delete(db, relation, actor_id, target_id)
    return ToggleResult(active=False)


def is_active(db, relation, actor_id, target_id):
    row = db.execute(
        f'SELECT 1 FROM {relation.table} WHERE {relation.actor_col} = ? AND {relation.target_col} = ?',
        (actor_id, target_id)).fetchone()
    return row is not None


def count(db, relation, target_id):
    """Number of actors related to ``target_id``. Never negative."""
    row = db.execute(
        f'SELECT COUNT(*) FROM {relation.table} WHERE {relation.target_col} = ?',
        (target_id,)).fetchone()
    return row[0] or 0


def actors(db, relation, target_id):
    rows = db.execute(
        f'SELECT {relation.actor_col} FROM {relation.table} WHERE {relation.target_col} = ? ORDER BY id',
        (target_id,)).fetchall()
    return [row[0] for row in rows]
