"""
Builds the post view-models the front end renders: each post merged with its
author's display data and its like and view counts.

Lookups are batched (one query per kind for the whole page) and each kind
fails on its own: if the author lookup breaks, the page still renders with
placeholder authors and real counts.
"""
import json
import logging
import sqlite3

logger = logging.getLogger(__name__)

UNKNOWN_USER = 'Unknown User'

DEFAULT_AVATARS = [
    '/woman.png',
    '/woman (1).png',
    '/man.png',
    '/man (1).png',
    '/man (2).png',
    '/human.png',
]


def default_avatar(username):
    """Same username always gets the same stock avatar."""
    index = sum(ord(ch) for ch in (username or '')) % len(DEFAULT_AVATARS)
    return DEFAULT_AVATARS[index]


def _labels(raw):
    if not raw:
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []


def post_to_dict(row):
    post = dict(row)
    post['tags'] = _labels(post.get('tags'))
    post['categories'] = _labels(post.get('categories'))
    return post


def _placeholders(ids):
    return ', '.join('?' for _ in ids)


def _authors(db, user_ids):
    if not user_ids:
        return {}
    rows = db.execute(
        f'SELECT id, username, avatar_url FROM users WHERE id IN ({_placeholders(user_ids)})',
        list(user_ids)).fetchall()
    return {row['id']: dict(row) for row in rows}


def _counts(db, table, post_ids):
    if not post_ids:
        return {}
    rows = db.execute(
        f'SELECT post_id, COUNT(*) AS n FROM {table} '
        f'WHERE post_id IN ({_placeholders(post_ids)}) GROUP BY post_id',
        list(post_ids)).fetchall()
    return {row['post_id']: row['n'] for row in rows}


def _lookup(name, fn, *args):
    try:
        return fn(*args)
    except sqlite3.Error:
        logger.warning("%s lookup failed, using placeholders", name, exc_info=True)
        return {}


def enrich_posts(db, posts):
    """Returns new dicts with username, avatar_url, likes_count and view_count."""
    posts = list(posts)
    user_ids = {p.get('user_id') for p in posts if p.get('user_id')}
    post_ids = {p.get('id') for p in posts if p.get('id') is not None}

    authors = _lookup('author', _authors, db, user_ids)
    likes = _lookup('like count', _counts, db, 'likes', post_ids)
    views = _lookup('view count', _counts, db, 'views', post_ids)

    enriched = []
    for post in posts:
        author = authors.get(post.get('user_id'))
        username = author['username'] if author else UNKNOWN_USER
        avatar = author['avatar_url'] if author else None
        enriched.append(dict(
            post,
            username=username,
            avatar_url=avatar or (default_avatar(username) if author else None),
            likes_count=likes.get(post.get('id'), 0),
            view_count=views.get(post.get('id'), 0),
        ))
    return enriched
