"""Comment record shared by the store, the resolver and the templates."""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class Comment:
    id: int
    user_id: int
    recipe_id: int
    content: str
    rating: Optional[int] = None
    created_at: str = ''
    # Author display fields, joined from users.
    username: str = ''
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def is_review(self) -> bool:
        """A comment carrying a rating is the author's review."""
        return self.rating is not None

    @property
    def author_name(self) -> str:
        return self.full_name or self.username or 'Anonymous'

    def without_rating(self) -> 'Comment':
        return replace(self, rating=None)

    @classmethod
    def from_row(cls, row) -> 'Comment':
        keys = row.keys()
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            recipe_id=row['recipe_id'],
            content=row['content'],
            rating=row['rating'],
            created_at=row['created_at'],
            username=row['username'] if 'username' in keys else '',
            full_name=row['full_name'] if 'full_name' in keys else None,
            avatar_url=row['avatar_url'] if 'avatar_url' in keys else None,
        )
