"""
Review resolution — at most one rated comment per user per recipe.

A user may post any number of comments on a recipe, but only one of
them carries a rating at a time. Rating a new comment, or adding a
rating to a plain comment, replaces the user's previous review: the old
comment keeps its text and loses its rating. Recipe owners never rate
their own recipe; a rating they submit is dropped and the comment is
saved as a plain comment.

Everything here is pure: the functions take the comment list last read
from storage and return what to write and what the list looks like
afterwards. Nothing is persisted and nothing is fetched.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from recipeshare.errors import (
    AuthenticationRequiredError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from recipeshare.reviews.comment import Comment

RATING_MIN = 1
RATING_MAX = 5
DEFAULT_MAX_LENGTH = 2000


@dataclass(frozen=True)
class ReviewPlan:
    """What to persist for one create or edit."""

    content: str
    rating: Optional[int]
    # The user's other review, whose rating is cleared before the write.
    demote: Optional[Comment] = None
    # Comment being edited; None when creating.
    target: Optional[Comment] = None
    # True when an owner's rating was dropped by the self-rating policy.
    rating_dropped: bool = False

    @property
    def demote_id(self) -> Optional[int]:
        return self.demote.id if self.demote is not None else None


@dataclass(frozen=True)
class Resolution:
    """Comment list after a write, and the acting user's current review."""

    comments: Tuple[Comment, ...]
    current_review: Optional[Comment]


def validate_content(content: Optional[str], max_length: int = DEFAULT_MAX_LENGTH) -> str:
    text = (content or '').strip()
    if not text:
        raise ValidationError('Please enter a comment')
    if len(text) > max_length:
        raise ValidationError(f'Comments are limited to {max_length} characters.')
    return text


def validate_rating(rating) -> Optional[int]:
    """None means no rating; anything else must be an integer 1-5."""
    if rating is None:
        return None
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError('Rating must be a whole number of stars.')
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError(f'Rating must be between {RATING_MIN} and {RATING_MAX} stars.')
    return rating


def may_rate(user_id, owner_id) -> bool:
    return user_id is not None and user_id != owner_id


def find_review(comments: Iterable[Comment], user_id) -> Optional[Comment]:
    """The user's rated comment, or None."""
    if user_id is None:
        return None
    for comment in comments:
        if comment.user_id == user_id and comment.is_review:
            return comment
    return None


def _require_actor(user_id) -> None:
    if user_id is None:
        raise AuthenticationRequiredError('Please log in to comment')


def _owned_comment(comments: Iterable[Comment], comment_id, user_id) -> Comment:
    for comment in comments:
        if comment.id == comment_id:
            if comment.user_id != user_id:
                raise PermissionDeniedError('You can only change your own comments.')
            return comment
    raise NotFoundError('Comment not found.')


def _effective_rating(rating, user_id, owner_id) -> Tuple[Optional[int], bool]:
    rating = validate_rating(rating)
    if rating is not None and not may_rate(user_id, owner_id):
        return None, True
    return rating, False


def plan_create(
    comments: Sequence[Comment],
    *,
    user_id,
    owner_id,
    content: Optional[str],
    rating=None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> ReviewPlan:
    """
    Plan a new comment.

    Raises:
        AuthenticationRequiredError: no acting user.
        ValidationError: empty or oversized text, rating outside 1-5.
    """
    _require_actor(user_id)
    text = validate_content(content, max_length)
    rating, dropped = _effective_rating(rating, user_id, owner_id)

    demote = find_review(comments, user_id) if rating is not None else None
    return ReviewPlan(content=text, rating=rating, demote=demote, rating_dropped=dropped)


def plan_edit(
    comments: Sequence[Comment],
    *,
    comment_id,
    user_id,
    owner_id,
    content: Optional[str],
    rating=None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> ReviewPlan:
    """
    Plan an edit of one of the user's comments.

    The submitted rating replaces the comment's rating outright: None
    removes it. Giving a plain comment a rating demotes the user's other
    review, if any.

    Raises:
        AuthenticationRequiredError, ValidationError as plan_create.
        NotFoundError: comment_id is not in the list.
        PermissionDeniedError: the comment belongs to someone else.
    """
    _require_actor(user_id)
    target = _owned_comment(comments, comment_id, user_id)
    text = validate_content(content, max_length)
    rating, dropped = _effective_rating(rating, user_id, owner_id)

    demote = None
    if rating is not None:
        current = find_review(comments, user_id)
        if current is not None and current.id != target.id:
            demote = current
    return ReviewPlan(
        content=text, rating=rating, demote=demote, target=target, rating_dropped=dropped,
    )


def plan_delete(comments: Sequence[Comment], *, comment_id, user_id) -> Comment:
    """Return the comment to delete after the ownership checks."""
    _require_actor(user_id)
    return _owned_comment(comments, comment_id, user_id)


def apply_saved(comments: Sequence[Comment], plan: ReviewPlan, saved: Comment) -> Resolution:
    """
    Fold a persisted create or edit back into the list.

    New comments go first (the list is newest first); an edited comment
    keeps its position; the demoted review loses its rating.
    """
    updated = [] if plan.target is not None else [saved]
    for comment in comments:
        if plan.target is not None and comment.id == plan.target.id:
            updated.append(saved)
        elif plan.demote is not None and comment.id == plan.demote.id:
            updated.append(comment.without_rating())
        else:
            updated.append(comment)
    return Resolution(tuple(updated), find_review(updated, saved.user_id))


def apply_delete(comments: Sequence[Comment], deleted: Comment) -> Resolution:
    """Drop a deleted comment. Earlier, replaced reviews stay plain comments."""
    updated = tuple(c for c in comments if c.id != deleted.id)
    return Resolution(updated, find_review(updated, deleted.user_id))
