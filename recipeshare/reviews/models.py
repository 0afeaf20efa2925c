"""
Comment storage.

CommentStore wraps one sqlite3 connection. A write that demotes the
user's previous review runs the demotion and the new write in a single
transaction: either both land or neither does.
"""

import sqlite3
from typing import Dict, Iterable, List, Optional

from recipeshare.db import storage_errors
from recipeshare.errors import NotFoundError, TransientError, ValidationError
from recipeshare.reviews.comment import Comment

_SELECT = '''
    SELECT c.id, c.user_id, c.recipe_id, c.content, c.rating, c.created_at,
           u.username, u.full_name, u.avatar_url
    FROM comments c
    JOIN users u ON u.id = c.user_id
'''


def _integrity_error(exc: sqlite3.IntegrityError):
    """Map a constraint violation to the domain error it stands for."""
    message = str(exc)
    if 'ux_comments_one_review' in message or 'comments.user_id, comments.recipe_id' in message:
        # Another session saved a review for this user in the meantime.
        return TransientError(
            'Your review was changed in another window. Reload the page and try again.'
        )
    if 'FOREIGN KEY' in message:
        return NotFoundError('Recipe not found.')
    return ValidationError('The comment could not be saved.')


class CommentStore:
    """Persistence calls for comments: list, get, create, update, delete."""

    def __init__(self, db: sqlite3.Connection):
        self.db = db

    def list_for_recipe(self, recipe_id) -> List[Comment]:
        """All comments on a recipe, newest first."""
        with storage_errors('listing comments'):
            rows = self.db.execute(
                _SELECT + ' WHERE c.recipe_id = ? ORDER BY c.created_at DESC, c.id DESC',
                (recipe_id,),
            ).fetchall()
        return [Comment.from_row(row) for row in rows]

    def get(self, comment_id) -> Optional[Comment]:
        with storage_errors('loading a comment'):
            row = self.db.execute(_SELECT + ' WHERE c.id = ?', (comment_id,)).fetchone()
        return Comment.from_row(row) if row is not None else None

    def count_for_recipe(self, recipe_id) -> int:
        with storage_errors('counting comments'):
            row = self.db.execute(
                'SELECT COUNT(*) FROM comments WHERE recipe_id = ?', (recipe_id,),
            ).fetchone()
        return row[0]

    def counts_by_recipe(self, recipe_ids: Iterable[int]) -> Dict[int, int]:
        ids = list(recipe_ids)
        counts = {recipe_id: 0 for recipe_id in ids}
        if not ids:
            return counts
        placeholders = ', '.join('?' for _ in ids)
        with storage_errors('counting comments'):
            rows = self.db.execute(
                f'SELECT recipe_id, COUNT(*) AS n FROM comments '
                f'WHERE recipe_id IN ({placeholders}) GROUP BY recipe_id',
                ids,
            ).fetchall()
        for row in rows:
            counts[row['recipe_id']] = row['n']
        return counts

    def ratings_by_recipe(self, recipe_ids: Iterable[int]) -> Dict[int, List[int]]:
        """Present ratings grouped by recipe, for list pages."""
        ids = list(recipe_ids)
        ratings: Dict[int, List[int]] = {recipe_id: [] for recipe_id in ids}
        if not ids:
            return ratings
        placeholders = ', '.join('?' for _ in ids)
        with storage_errors('loading ratings'):
            rows = self.db.execute(
                f'SELECT recipe_id, rating FROM comments '
                f'WHERE rating IS NOT NULL AND recipe_id IN ({placeholders})',
                ids,
            ).fetchall()
        for row in rows:
            ratings[row['recipe_id']].append(row['rating'])
        return ratings

    def _clear_rating(self, comment_id, user_id) -> None:
        self.db.execute(
            'UPDATE comments SET rating = NULL WHERE id = ? AND user_id = ?',
            (comment_id, user_id),
        )

    def create(self, *, recipe_id, user_id, content: str, rating: Optional[int] = None,
               demote_id=None) -> Comment:
        """
        Insert a comment, first clearing the rating of demote_id if given.

        Raises:
            NotFoundError: the recipe is gone.
            TransientError: storage failure or a concurrent review.
            ValidationError: any other constraint violation.
        """
        with storage_errors('creating a comment'):
            try:
                with self.db:
                    if demote_id is not None:
                        self._clear_rating(demote_id, user_id)
                    cursor = self.db.execute(
                        'INSERT INTO comments (user_id, recipe_id, content, rating) '
                        'VALUES (?, ?, ?, ?)',
                        (user_id, recipe_id, content, rating),
                    )
            except sqlite3.IntegrityError as exc:
                raise _integrity_error(exc) from exc
        return self.get(cursor.lastrowid)

    def update(self, comment_id, *, user_id, content: str, rating: Optional[int] = None,
               demote_id=None) -> Comment:
        """
        Rewrite the text and rating of the user's comment.

        Raises:
            NotFoundError: no such comment owned by user_id.
            TransientError, ValidationError: as create().
        """
        with storage_errors('updating a comment'):
            try:
                with self.db:
                    if demote_id is not None:
                        self._clear_rating(demote_id, user_id)
                    cursor = self.db.execute(
                        'UPDATE comments SET content = ?, rating = ? WHERE id = ? AND user_id = ?',
                        (content, rating, comment_id, user_id),
                    )
                    if cursor.rowcount == 0:
                        # Rolls back the demotion too.
                        raise NotFoundError('Comment not found.')
            except sqlite3.IntegrityError as exc:
                raise _integrity_error(exc) from exc
        return self.get(comment_id)

    def delete(self, comment_id, *, user_id) -> None:
        """Delete the user's comment. NotFoundError if it is not theirs or is gone."""
        with storage_errors('deleting a comment'):
            with self.db:
                cursor = self.db.execute(
                    'DELETE FROM comments WHERE id = ? AND user_id = ?',
                    (comment_id, user_id),
                )
        if cursor.rowcount == 0:
            raise NotFoundError('Comment not found.')
