"""
View counting.

A view is recorded at most once per (post, viewer) inside a rolling window
(24 hours by default). The returned count is the total number of recorded
views for the post, so it never goes down.

Anonymous visitors are identified by a hash of their network address, which
means people sharing an address are counted as one viewer.
"""
import hashlib
import logging
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


def utc_now():
    return datetime.now(timezone.utc)


def _stamp(dt):
    # Fixed-width ISO strings so the window comparison can be done in SQL
    return dt.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')


def viewer_identifier(user_id=None, remote_addr=None):
    """The key views are deduplicated on."""
    if user_id:
        return str(user_id)
    digest = hashlib.sha256((remote_addr or 'unknown').encode('utf-8')).hexdigest()
    return f"anon:{digest[:16]}"


def view_count(db, post_id):
    row = db.execute('SELECT COUNT(*) FROM views WHERE post_id = ?', (post_id,)).fetchone()
    return row[0] or 0


def register_view(db, post_id, viewer, user_id=None, window=DEFAULT_WINDOW):
    """Records a view unless ``viewer`` already has one inside ``window``.

    Returns the post's total view count after the call.
    """
    now = utc_now()
    with db:
        # Take the write lock before the lookup so two concurrent requests
        # from the same viewer cannot both miss and both insert.
        if not db.in_transaction:
            db.execute('BEGIN IMMEDIATE')
        recent = db.execute(
            '''SELECT 1 FROM views
               WHERE post_id = ? AND viewer_identifier = ? AND created_at > ?
               LIMIT 1''',
            (post_id, viewer, _stamp(now - window))).fetchone()
        if recent is None:
            db.execute(
                'INSERT INTO views (post_id, user_id, viewer_identifier, created_at) VALUES (?, ?, ?, ?)',
                (post_id, user_id, viewer, _stamp(now)))
        else:
            logger.debug("Repeat view of post %s by %s ignored", post_id, viewer)
    return view_count(db, post_id)
