"""
In-memory search and ordering over enriched post dicts.
"""
import re
from datetime import datetime, timezone

SORT_KEYS = ('newest', 'oldest', 'most_likes', 'most_views')


def _contains(value, needle):
    return bool(value) and needle in value.lower()


def matches(post, query):
    """True if ``query`` appears, ignoring case, in any searchable field."""
    needle = query.strip().lower()
    if not needle:
        return True
    return (_contains(post.get('title'), needle)
            or _contains(post.get('content'), needle)
            or any(_contains(tag, needle) for tag in post.get('tags') or [])
            or any(_contains(cat, needle) for cat in post.get('categories') or [])
            or _contains(post.get('username'), needle))


def filter_posts(posts, query):
    """
    Returns copies of the posts matching ``query``.

    Each returned post carries ``is_content_match`` so the caller knows
    whether to show a snippet around the hit instead of the usual preview.
    """
    needle = (query or '').strip().lower()
    if not needle:
        return [dict(post, is_content_match=False) for post in posts]

    hits = []
    for post in posts:
        if matches(post, needle):
            hits.append(dict(post, is_content_match=_contains(post.get('content'), needle)))
    return hits


def content_snippet(content, term, window=30):
    """
    Cuts ``content`` down to the first occurrence of ``term`` plus ``window``
    characters either side, marking cut ends with '...'.
    """
    if not content or not term:
        return content
    # Offsets come from the original string; lower() can change its length
    match = re.search(re.escape(term), content, re.IGNORECASE)
    if match is None:
        return content

    start = max(0, match.start() - window)
    end = min(len(content), match.end() + window)
    snippet = content[start:end]
    if start > 0:
        snippet = '...' + snippet
    if end < len(content):
        snippet = snippet + '...'
    return snippet


def preview(post, query=None, window=30, length=120):
    content = post.get('content') or ''
    if query and post.get('is_content_match'):
        return content_snippet(content, query.strip(), window)
    if len(content) > length:
        return content[:length] + '...'
    return content


def _created(post):
    value = post.get('created_at')
    if not value:
        return datetime.min
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return datetime.min
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sort_posts(posts, key='newest'):
    """Orders posts by one of SORT_KEYS; unknown keys fall back to newest."""
    if key == 'oldest':
        return sorted(posts, key=_created)
    if key == 'most_likes':
        return sorted(posts, key=lambda p: p.get('likes_count') or 0, reverse=True)
    if key == 'most_views':
        return sorted(posts, key=lambda p: p.get('view_count') or 0, reverse=True)
    return sorted(posts, key=_created, reverse=True)
