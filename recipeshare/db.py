"""
SQLite storage: connection per request, schema, reference data.

Parameterized queries only (? placeholders). The schema carries the
integrity backstops the application logic relies on: rating bounds,
non-empty comment text, one rated comment per (user, recipe), one
favorite per (user, recipe), cascading deletes from recipes.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager

from flask import current_app, g

from recipeshare.errors import TransientError

logger = logging.getLogger(__name__)

# Millisecond timestamps keep comment ordering stable within a second.
_NOW = "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"

SCHEMA = f'''
CREATE TABLE IF NOT EXISTS users (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    email         TEXT UNIQUE NOT NULL,
    username      TEXT UNIQUE NOT NULL,
    full_name     TEXT,
    avatar_url    TEXT,
    bio           TEXT,
    password_hash TEXT NOT NULL,
    created_at    TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS categories (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT UNIQUE NOT NULL,
    slug        TEXT UNIQUE NOT NULL,
    emoji       TEXT,
    description TEXT
);

CREATE TABLE IF NOT EXISTS recipes (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id      INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    title        TEXT NOT NULL CHECK (length(title) > 0),
    description  TEXT,
    ingredients  TEXT NOT NULL DEFAULT '[]',
    instructions TEXT NOT NULL DEFAULT '[]',
    image_url    TEXT,
    category_id  INTEGER REFERENCES categories (id) ON DELETE SET NULL,
    time_minutes INTEGER CHECK (time_minutes IS NULL OR time_minutes > 0),
    created_at   TEXT NOT NULL DEFAULT {_NOW},
    updated_at   TEXT NOT NULL DEFAULT {_NOW}
);
CREATE INDEX IF NOT EXISTS ix_recipes_user ON recipes (user_id);
CREATE INDEX IF NOT EXISTS ix_recipes_category ON recipes (category_id);

CREATE TABLE IF NOT EXISTS comments (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id    INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    recipe_id  INTEGER NOT NULL REFERENCES recipes (id) ON DELETE CASCADE,
    content    TEXT NOT NULL CHECK (length(content) > 0),
    rating     INTEGER CHECK (rating IS NULL OR rating BETWEEN 1 AND 5),
    created_at TEXT NOT NULL DEFAULT {_NOW}
);
CREATE INDEX IF NOT EXISTS ix_comments_recipe ON comments (recipe_id, created_at);
-- A user holds at most one rated comment (review) per recipe.
CREATE UNIQUE INDEX IF NOT EXISTS ux_comments_one_review
    ON comments (user_id, recipe_id) WHERE rating IS NOT NULL;

CREATE TABLE IF NOT EXISTS favorites (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id    INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    recipe_id  INTEGER NOT NULL REFERENCES recipes (id) ON DELETE CASCADE,
    created_at TEXT NOT NULL DEFAULT {_NOW},
    UNIQUE (user_id, recipe_id)
);
'''

# (name, slug, emoji, description)
DEFAULT_CATEGORIES = (
    ('Breakfast', 'breakfast', '🍳', 'Start the day right.'),
    ('Lunch', 'lunch', '🥪', 'Midday meals, quick or leisurely.'),
    ('Dinner', 'dinner', '🍝', 'Evening mains for any night of the week.'),
    ('Desserts', 'desserts', '🍰', 'Cakes, puddings and other sweet things.'),
    ('Vegetarian', 'vegetarian', '🥦', 'Meat-free dishes.'),
    ('Soups', 'soups', '🍲', 'Broths, stews and chowders.'),
    ('Salads', 'salads', '🥗', 'Fresh bowls and sides.'),
    ('Baking', 'baking', '🥖', 'Breads, pastries and bakes.'),
    ('Drinks', 'drinks', '🍹', 'Smoothies, cocktails and warm mugs.'),
    ('Snacks', 'snacks', '🥨', 'Small bites.'),
)


def connect(db_path: str) -> sqlite3.Connection:
    """Open a connection with row access by name and foreign keys enforced."""
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')
    return conn


def database_path(app) -> str:
    return os.path.join(app.instance_path, app.config['DATABASE_NAME'])


def get_db() -> sqlite3.Connection:
    """
    Get the database connection for the current request.

    Stored on Flask's g object and closed by close_db at teardown.
    """
    if 'db' not in g:
        g.db = connect(database_path(current_app))
        g.db.execute('PRAGMA journal_mode=WAL')
    return g.db


def close_db(exception=None) -> None:
    """Close the database connection at the end of the request."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(app) -> None:
    """
    Create tables and seed the category reference data.

    Idempotent: safe on every start-up.
    """
    conn = connect(database_path(app))
    try:
        conn.executescript(SCHEMA)
        conn.executemany(
            'INSERT OR IGNORE INTO categories (name, slug, emoji, description) '
            'VALUES (?, ?, ?, ?)',
            DEFAULT_CATEGORIES,
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def storage_errors(action: str):
    """
    Translate storage failures into TransientError.

    IntegrityError passes through untouched: callers map constraint
    violations to domain errors themselves.
    """
    try:
        yield
    except sqlite3.IntegrityError:
        raise
    except sqlite3.Error as exc:
        logger.exception('Storage failure while %s', action)
        raise TransientError() from exc
