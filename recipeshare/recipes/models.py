"""
Recipe and category storage.

Ingredients and instructions have exactly one stored shape: a JSON
array of non-empty strings. encode_items() enforces it on the way in
and decode_items() on the way out; anything else is a data error.
"""

import json
import sqlite3
from typing import Dict, List, Optional

from recipeshare.db import get_db, storage_errors
from recipeshare.errors import NotFoundError, PermissionDeniedError, ValidationError

_RECIPE_SELECT = '''
    SELECT r.*,
           u.username, u.full_name, u.avatar_url,
           c.name AS category_name, c.slug AS category_slug, c.emoji AS category_emoji
    FROM recipes r
    JOIN users u ON u.id = r.user_id
    LEFT JOIN categories c ON c.id = r.category_id
'''


# --- Ordered lists ---

def clean_items(items) -> List[str]:
    """Strip each item and drop blanks, keeping order."""
    return [item.strip() for item in items if item and item.strip()]


def split_lines(text: Optional[str]) -> List[str]:
    """One item per line, as typed into the recipe form."""
    return clean_items((text or '').splitlines())


def encode_items(items) -> str:
    if not isinstance(items, (list, tuple)):
        raise ValidationError('Expected a list of items.')
    if not all(isinstance(item, str) and item.strip() for item in items):
        raise ValidationError('Items must be non-empty text.')
    return json.dumps(list(items))


def decode_items(raw: str) -> List[str]:
    try:
        items = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError('Stored recipe data is malformed.') from exc
    if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
        raise ValidationError('Stored recipe data is malformed.')
    return items


def _recipe(row: sqlite3.Row) -> Dict:
    recipe = dict(row)
    recipe['ingredients'] = decode_items(row['ingredients'])
    recipe['instructions'] = decode_items(row['instructions'])
    recipe['author_name'] = row['full_name'] or row['username']
    return recipe


def _like_pattern(term: str) -> str:
    escaped = term.lower().replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


# --- Recipes ---

def get_recipe(recipe_id) -> Optional[Dict]:
    with storage_errors('loading a recipe'):
        row = get_db().execute(_RECIPE_SELECT + ' WHERE r.id = ?', (recipe_id,)).fetchone()
    return _recipe(row) if row is not None else None


def get_owned_recipe(recipe_id, user_id) -> Dict:
    """The recipe if user_id owns it; NotFoundError or PermissionDeniedError otherwise."""
    recipe = get_recipe(recipe_id)
    if recipe is None:
        raise NotFoundError('Recipe not found.')
    if recipe['user_id'] != user_id:
        raise PermissionDeniedError("You don't have permission to change this recipe")
    return recipe


def list_recipes(*, category_id=None, search: Optional[str] = None, user_id=None,
                 exclude_user_id=None, limit: Optional[int] = None) -> List[Dict]:
    """
    Recipes newest first.

    Args:
        category_id: only this category.
        search: case-insensitive substring of title or description.
        user_id: only this owner's recipes.
        exclude_user_id: skip this owner's recipes.
        limit: maximum number of rows.
    """
    clauses, params = [], []
    if category_id is not None:
        clauses.append('r.category_id = ?')
        params.append(category_id)
    if user_id is not None:
        clauses.append('r.user_id = ?')
        params.append(user_id)
    if exclude_user_id is not None:
        clauses.append('r.user_id != ?')
        params.append(exclude_user_id)
    if search and search.strip():
        pattern = _like_pattern(search.strip())
        clauses.append(
            "(lower(r.title) LIKE ? ESCAPE '\\' OR lower(coalesce(r.description, '')) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern, pattern])

    query = _RECIPE_SELECT
    if clauses:
        query += ' WHERE ' + ' AND '.join(clauses)
    query += ' ORDER BY r.created_at DESC, r.id DESC'
    if limit is not None:
        query += ' LIMIT ?'
        params.append(limit)

    with storage_errors('listing recipes'):
        rows = get_db().execute(query, params).fetchall()
    return [_recipe(row) for row in rows]


def list_saved_recipes(user_id) -> List[Dict]:
    """Recipes the user has favorited, most recently saved first."""
    query = (
        _RECIPE_SELECT
        + ' JOIN favorites f ON f.recipe_id = r.id'
        + ' WHERE f.user_id = ? ORDER BY f.created_at DESC, f.id DESC'
    )
    with storage_errors('listing saved recipes'):
        rows = get_db().execute(query, (user_id,)).fetchall()
    return [_recipe(row) for row in rows]


def count_for_user(user_id) -> int:
    with storage_errors('counting recipes'):
        row = get_db().execute('SELECT COUNT(*) FROM recipes WHERE user_id = ?', (user_id,)).fetchone()
    return row[0]


def create_recipe(*, user_id, title: str, description: Optional[str], ingredients, instructions,
                  category_id=None, time_minutes=None, image_url=None) -> int:
    db = get_db()
    with storage_errors('creating a recipe'):
        try:
            with db:
                cursor = db.execute(
                    '''INSERT INTO recipes
                       (user_id, title, description, ingredients, instructions,
                        category_id, time_minutes, image_url)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)''',
                    (user_id, title, description or None, encode_items(ingredients),
                     encode_items(instructions), category_id, time_minutes, image_url),
                )
        except sqlite3.IntegrityError as exc:
            raise ValidationError('The recipe could not be saved.') from exc
    return cursor.lastrowid


def update_recipe(recipe_id, *, user_id, title: str, description: Optional[str], ingredients,
                  instructions, category_id=None, time_minutes=None, image_url=None) -> None:
    """Owner-only update; the WHERE clause repeats the ownership check."""
    get_owned_recipe(recipe_id, user_id)
    db = get_db()
    with storage_errors('updating a recipe'):
        try:
            with db:
                db.execute(
                    '''UPDATE recipes
                       SET title = ?, description = ?, ingredients = ?, instructions = ?,
                           category_id = ?, time_minutes = ?, image_url = ?,
                           updated_at = strftime('%Y-%m-%d %H:%M:%f', 'now')
                       WHERE id = ? AND user_id = ?''',
                    (title, description or None, encode_items(ingredients),
                     encode_items(instructions), category_id, time_minutes, image_url,
                     recipe_id, user_id),
                )
        except sqlite3.IntegrityError as exc:
            raise ValidationError('The recipe could not be saved.') from exc


def delete_recipe(recipe_id, *, user_id) -> None:
    """Owner-only delete; comments and favorites go with it (ON DELETE CASCADE)."""
    get_owned_recipe(recipe_id, user_id)
    db = get_db()
    with storage_errors('deleting a recipe'):
        with db:
            db.execute('DELETE FROM recipes WHERE id = ? AND user_id = ?', (recipe_id, user_id))


# --- Categories ---

def list_categories() -> List[sqlite3.Row]:
    with storage_errors('listing categories'):
        return get_db().execute('SELECT * FROM categories ORDER BY name').fetchall()


def list_categories_with_counts() -> List[sqlite3.Row]:
    with storage_errors('listing categories'):
        return get_db().execute(
            '''SELECT c.*, COUNT(r.id) AS recipe_count
               FROM categories c
               LEFT JOIN recipes r ON r.category_id = c.id
               GROUP BY c.id
               ORDER BY c.name'''
        ).fetchall()


def get_category_by_slug(slug: str) -> Optional[sqlite3.Row]:
    with storage_errors('loading a category'):
        return get_db().execute('SELECT * FROM categories WHERE slug = ?', (slug,)).fetchone()
