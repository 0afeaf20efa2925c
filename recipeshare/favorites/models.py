"""
Favorite storage: one row per (user, recipe), enforced by a UNIQUE key.
"""

import sqlite3
from typing import Dict, Iterable, Set

from recipeshare.db import get_db, storage_errors
from recipeshare.errors import AlreadyFavoritedError, NotFoundError


def add_favorite(user_id, recipe_id) -> None:
    """
    Save a recipe for a user.

    Raises:
        AlreadyFavoritedError: the pair already exists.
        NotFoundError: the recipe is gone.
    """
    db = get_db()
    with storage_errors('adding a favorite'):
        try:
            with db:
                db.execute(
                    'INSERT INTO favorites (user_id, recipe_id) VALUES (?, ?)',
                    (user_id, recipe_id),
                )
        except sqlite3.IntegrityError as exc:
            if 'UNIQUE' in str(exc):
                raise AlreadyFavoritedError() from exc
            raise NotFoundError('Recipe not found.') from exc


def remove_favorite(user_id, recipe_id) -> bool:
    """Delete the pair. Returns False when there was nothing to delete."""
    db = get_db()
    with storage_errors('removing a favorite'):
        with db:
            cursor = db.execute(
                'DELETE FROM favorites WHERE user_id = ? AND recipe_id = ?',
                (user_id, recipe_id),
            )
    return cursor.rowcount > 0


def is_favorited(user_id, recipe_id) -> bool:
    with storage_errors('checking a favorite'):
        row = get_db().execute(
            'SELECT 1 FROM favorites WHERE user_id = ? AND recipe_id = ?',
            (user_id, recipe_id),
        ).fetchone()
    return row is not None


def count_for_recipe(recipe_id) -> int:
    with storage_errors('counting favorites'):
        row = get_db().execute(
            'SELECT COUNT(*) FROM favorites WHERE recipe_id = ?', (recipe_id,),
        ).fetchone()
    return row[0]


def count_for_user(user_id) -> int:
    with storage_errors('counting favorites'):
        row = get_db().execute(
            'SELECT COUNT(*) FROM favorites WHERE user_id = ?', (user_id,),
        ).fetchone()
    return row[0]


def counts_by_recipe(recipe_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(recipe_ids)
    counts = {recipe_id: 0 for recipe_id in ids}
    if not ids:
        return counts
    placeholders = ', '.join('?' for _ in ids)
    with storage_errors('counting favorites'):
        rows = get_db().execute(
            f'SELECT recipe_id, COUNT(*) AS n FROM favorites '
            f'WHERE recipe_id IN ({placeholders}) GROUP BY recipe_id',
            ids,
        ).fetchall()
    for row in rows:
        counts[row['recipe_id']] = row['n']
    return counts


def favorited_ids(user_id, recipe_ids: Iterable[int]) -> Set[int]:
    """Which of recipe_ids the user has saved."""
    ids = list(recipe_ids)
    if not ids:
        return set()
    placeholders = ', '.join('?' for _ in ids)
    with storage_errors('checking favorites'):
        rows = get_db().execute(
            f'SELECT recipe_id FROM favorites WHERE user_id = ? AND recipe_id IN ({placeholders})',
            [user_id, *ids],
        ).fetchall()
    return {row['recipe_id'] for row in rows}
