"""
Comment thread for one recipe, as seen by one user.

Loads the full comment list, then for every submit, edit or delete:
resolves the review rule, persists through the store, folds the result
back into the list, recomputes the aggregate from scratch and notifies
the page through the two callbacks.
"""

from typing import Callable, Optional, Sequence, Tuple

from recipeshare.reviews import resolver
from recipeshare.reviews.aggregate import NO_RATINGS, RatingSummary, summarize
from recipeshare.reviews.comment import Comment


class CommentThread:
    """
    Args:
        store: a CommentStore (or anything with the same methods).
        recipe: mapping with at least 'id' and 'user_id' (the owner).
        actor: the signed-in user mapping, or None.
        on_comments_count_change: called with the new count after a
            create or delete.
        on_rating_change: called after any write that changed the aggregate.
        max_length: comment length limit.
    """

    def __init__(
        self,
        store,
        recipe,
        actor=None,
        *,
        on_comments_count_change: Optional[Callable[[int], None]] = None,
        on_rating_change: Optional[Callable[[], None]] = None,
        max_length: int = resolver.DEFAULT_MAX_LENGTH,
    ):
        self.store = store
        self.recipe_id = recipe['id']
        self.owner_id = recipe['user_id']
        self.actor_id = actor['id'] if actor is not None else None
        self.on_comments_count_change = on_comments_count_change
        self.on_rating_change = on_rating_change
        self.max_length = max_length

        self.comments: Tuple[Comment, ...] = ()
        self.summary: RatingSummary = NO_RATINGS
        self.user_review: Optional[Comment] = None

    # --- State ---

    def load(self) -> 'CommentThread':
        """Fetch the comment list and derive aggregate and user review."""
        self.comments = tuple(self.store.list_for_recipe(self.recipe_id))
        self.summary = summarize(self.comments)
        self.user_review = resolver.find_review(self.comments, self.actor_id)
        return self

    @property
    def can_rate(self) -> bool:
        return resolver.may_rate(self.actor_id, self.owner_id)

    @property
    def reviews(self) -> Tuple[Comment, ...]:
        """The "reviews only" view."""
        return tuple(c for c in self.comments if c.is_review)

    def visible(self, tab: str) -> Sequence[Comment]:
        return self.reviews if tab == 'reviews' else self.comments

    # --- Mutations ---

    def submit(self, content, rating=None) -> Tuple[Comment, resolver.ReviewPlan]:
        """Add a comment, optionally rated. Returns the saved comment and the plan."""
        plan = resolver.plan_create(
            self.comments,
            user_id=self.actor_id,
            owner_id=self.owner_id,
            content=content,
            rating=rating,
            max_length=self.max_length,
        )
        saved = self.store.create(
            recipe_id=self.recipe_id,
            user_id=self.actor_id,
            content=plan.content,
            rating=plan.rating,
            demote_id=plan.demote_id,
        )
        self._apply(resolver.apply_saved(self.comments, plan, saved))
        return saved, plan

    def edit(self, comment_id, content, rating=None) -> Tuple[Comment, resolver.ReviewPlan]:
        """Rewrite one of the actor's comments; rating None removes the rating."""
        plan = resolver.plan_edit(
            self.comments,
            comment_id=comment_id,
            user_id=self.actor_id,
            owner_id=self.owner_id,
            content=content,
            rating=rating,
            max_length=self.max_length,
        )
        saved = self.store.update(
            comment_id,
            user_id=self.actor_id,
            content=plan.content,
            rating=plan.rating,
            demote_id=plan.demote_id,
        )
        self._apply(resolver.apply_saved(self.comments, plan, saved))
        return saved, plan

    def delete(self, comment_id) -> Comment:
        """Delete one of the actor's comments. Returns the deleted comment."""
        target = resolver.plan_delete(self.comments, comment_id=comment_id, user_id=self.actor_id)
        self.store.delete(comment_id, user_id=self.actor_id)
        self._apply(resolver.apply_delete(self.comments, target))
        return target

    def _apply(self, resolution: resolver.Resolution) -> None:
        previous_count = len(self.comments)
        previous_summary = self.summary

        self.comments = resolution.comments
        self.user_review = resolution.current_review
        self.summary = summarize(self.comments)

        if len(self.comments) != previous_count and self.on_comments_count_change:
            self.on_comments_count_change(len(self.comments))
        if self.summary != previous_summary and self.on_rating_change:
            self.on_rating_change()
