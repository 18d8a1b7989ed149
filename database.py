import logging
import sqlite3
from datetime import datetime, timezone

from flask import current_app, g

from config import Config

logger = logging.getLogger(__name__)


def get_db():
    """
    Opens a new database connection if there is none yet for the
    current application context.
    """
    if 'db' not in g:
        # Increase timeout to 30s to prevent 'Database is locked' errors under load
        g.db = sqlite3.connect(current_app.config['DB_PATH'], timeout=30, check_same_thread=False)
        g.db.row_factory = sqlite3.Row
        # Cascades on user/post deletion depend on this being on for every connection
        g.db.execute('PRAGMA foreign_keys = ON')
    return g.db


def now_str():
    """Current UTC time in the format every table stores."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def close_db(exc=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(db_path=None):
    """
    Initializes the database with the required schema.
    Run this once (or on app startup) to ensure tables exist.
    """
    conn = sqlite3.connect(db_path or Config.DB_PATH)
    c = conn.cursor()

    # 1. USERS TABLE
    # Ids are uuid strings so they can be handed out before the row exists.
    c.execute('''CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        bio TEXT DEFAULT '',
        avatar_url TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )''')

    # 2. POSTS TABLE
    # tags and categories are stored as JSON arrays.
    c.execute('''CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        tags TEXT NOT NULL DEFAULT '[]',
        categories TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    )''')

    # 3. COMMENTS TABLE
    c.execute('''CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id INTEGER NOT NULL,
        user_id TEXT NOT NULL,
        content TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        FOREIGN KEY(post_id) REFERENCES posts(id) ON DELETE CASCADE,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    )''')

    # 4. ENGAGEMENT TABLES
    # At most one row per (actor, target) pair; the UNIQUE constraint is what
    # makes concurrent toggles safe.
    c.execute('''CREATE TABLE IF NOT EXISTS likes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id INTEGER NOT NULL,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(post_id, user_id),
        FOREIGN KEY(post_id) REFERENCES posts(id) ON DELETE CASCADE,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    )''')

    c.execute('''CREATE TABLE IF NOT EXISTS bookmarks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        post_id INTEGER NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(user_id, post_id),
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY(post_id) REFERENCES posts(id) ON DELETE CASCADE
    )''')

    c.execute('''CREATE TABLE IF NOT EXISTS subscribers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        subscriber_id TEXT NOT NULL,
        creator_id TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(subscriber_id, creator_id),
        CHECK(subscriber_id <> creator_id),
        FOREIGN KEY(subscriber_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY(creator_id) REFERENCES users(id) ON DELETE CASCADE
    )''')

    # 5. VIEW EVENTS
    # One row per counted view. viewer_identifier is the user id, or a hash of
    # the caller's address for anonymous visitors.
    c.execute('''CREATE TABLE IF NOT EXISTS views (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id INTEGER NOT NULL,
        user_id TEXT,
        viewer_identifier TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(post_id) REFERENCES posts(id) ON DELETE CASCADE,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE SET NULL
    )''')
    c.execute('''CREATE INDEX IF NOT EXISTS idx_views_viewer
                 ON views (post_id, viewer_identifier, created_at)''')

    conn.commit()
    conn.close()
    logger.info("Database initialized at %s", db_path or Config.DB_PATH)


# Allow running this file directly to reset/init DB: `python database.py`
if __name__ == '__main__':
    logging.basicConfig(level=Config.LOG_LEVEL)
    init_db()
