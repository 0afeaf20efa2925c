"""
User store.

Parameterized queries only. Emails are stored lower-cased; usernames
are unique as typed.
"""

import sqlite3
from typing import Optional

from recipeshare.db import get_db, storage_errors
from recipeshare.errors import NotFoundError, ValidationError

_PUBLIC_COLUMNS = 'id, email, username, full_name, avatar_url, bio, created_at'


def get_user_by_id(user_id) -> Optional[sqlite3.Row]:
    with storage_errors('loading a user'):
        return get_db().execute(
            f'SELECT {_PUBLIC_COLUMNS} FROM users WHERE id = ?', (user_id,),
        ).fetchone()


def get_user_by_email(email: str) -> Optional[sqlite3.Row]:
    """Look up a user with their password hash, for sign-in."""
    with storage_errors('loading a user'):
        return get_db().execute(
            f'SELECT {_PUBLIC_COLUMNS}, password_hash FROM users WHERE email = ?',
            (email,),
        ).fetchone()


def username_taken(username: str) -> bool:
    with storage_errors('checking a username'):
        row = get_db().execute(
            'SELECT 1 FROM users WHERE username = ?', (username,),
        ).fetchone()
    return row is not None


def email_taken(email: str) -> bool:
    with storage_errors('checking an email'):
        row = get_db().execute(
            'SELECT 1 FROM users WHERE email = ?', (email,),
        ).fetchone()
    return row is not None


def create_user(*, email: str, username: str, password_hash: str,
                full_name: Optional[str] = None) -> int:
    """
    Insert a user and return the new id.

    The form checks uniqueness first; a race between two sign-ups with
    the same email or username still ends in a ValidationError here.
    """
    db = get_db()
    with storage_errors('creating a user'):
        try:
            with db:
                cursor = db.execute(
                    'INSERT INTO users (email, username, full_name, password_hash) '
                    'VALUES (?, ?, ?, ?)',
                    (email, username, full_name or None, password_hash),
                )
        except sqlite3.IntegrityError as exc:
            if 'users.username' in str(exc):
                raise ValidationError('That username is already taken.') from exc
            raise ValidationError('An account with that email already exists.') from exc
    return cursor.lastrowid


def update_profile(user_id, *, full_name: Optional[str], bio: Optional[str],
                   avatar_url: Optional[str]) -> None:
    db = get_db()
    with storage_errors('updating a profile'):
        with db:
            cursor = db.execute(
                'UPDATE users SET full_name = ?, bio = ?, avatar_url = ? WHERE id = ?',
                (full_name or None, bio or None, avatar_url or None, user_id),
            )
    if cursor.rowcount == 0:
        raise NotFoundError('User not found.')
