"""
Comment routes — add, edit and delete comments and star ratings.

POST flow for every route:
1. Rate limiter (per IP)
2. CSRF validation (flask-wtf before_request hook)
3. Form parsing
4. CommentThread: review rule, then one storage transaction
5. Audit logging, flash, redirect back to the comment section

Validation, permission and storage errors come back as a flash message
on the recipe page. A missing recipe is a 404.
"""

from flask import abort, current_app, flash, g, redirect, request, url_for

from recipeshare.auth.session import login_required
from recipeshare.db import get_db
from recipeshare.errors import AuthenticationRequiredError, RecipeShareError
from recipeshare.extensions import limiter
from recipeshare.logging_config import audit_log
from recipeshare.recipes.models import get_recipe
from recipeshare.reviews import reviews_bp
from recipeshare.reviews.forms import CommentForm
from recipeshare.reviews.models import CommentStore
from recipeshare.reviews.thread import CommentThread

_comment_limit = limiter.limit(
    lambda: current_app.config.get('COMMENT_RATE_LIMIT', '30/minute'),
    error_message='You are commenting too quickly. Please wait a moment.',
)


def _load_thread(recipe_id) -> CommentThread:
    recipe = get_recipe(recipe_id)
    if recipe is None:
        abort(404)

    def comments_changed(count):
        audit_log(
            'comments_count_changed',
            f'Recipe now has {count} comments',
            recipe_id=recipe_id,
            count=count,
        )

    def rating_changed():
        audit_log(
            'rating_changed',
            f'Rating now {thread.summary.label} from {thread.summary.count} reviews',
            recipe_id=recipe_id,
            count=thread.summary.count,
            mean=thread.summary.mean,
        )

    thread = CommentThread(
        CommentStore(get_db()),
        recipe,
        g.user,
        on_comments_count_change=comments_changed,
        on_rating_change=rating_changed,
        max_length=current_app.config['COMMENT_MAX_LENGTH'],
    )
    return thread.load()


def _back(recipe_id, tab=None):
    return redirect(url_for('recipes.detail', recipe_id=recipe_id, tab=tab, _anchor='comments'))


def _flash_form_errors(form) -> None:
    for errors in form.errors.values():
        for error in errors:
            flash(error, 'error')


def _tab():
    return 'reviews' if request.form.get('tab') == 'reviews' else None


def _log_replacement(plan, saved) -> None:
    if plan.demote is None:
        return
    audit_log(
        'review_replaced',
        'Previous review lost its rating',
        user_id=saved.user_id,
        recipe_id=saved.recipe_id,
        comment_id=plan.demote.id,
        rating=saved.rating,
    )


@reviews_bp.route('/recipes/<int:recipe_id>/comments', methods=['POST'])
@_comment_limit
def create_comment(recipe_id):
    """Post a comment, optionally with a 1-5 rating that replaces any earlier review."""
    thread = _load_thread(recipe_id)
    form = CommentForm()
    if not form.validate_on_submit():
        _flash_form_errors(form)
        return _back(recipe_id, _tab())

    try:
        saved, plan = thread.submit(form.content.data, form.rating.data)
    except AuthenticationRequiredError as exc:
        flash(exc.message, 'info')
        return redirect(url_for('auth.login', next=url_for('recipes.detail', recipe_id=recipe_id)))
    except RecipeShareError as exc:
        flash(exc.message, 'error')
        return _back(recipe_id, _tab())

    audit_log(
        'comment_created',
        'Comment added',
        user_id=saved.user_id,
        recipe_id=recipe_id,
        comment_id=saved.id,
        rating=saved.rating,
    )
    _log_replacement(plan, saved)

    if plan.rating_dropped:
        flash("You can't rate your own recipe. Your comment was posted without a rating.", 'info')
    elif plan.demote is not None:
        flash('Review updated! Your previous rating was replaced.', 'success')
    else:
        flash('Comment added successfully!', 'success')
    return _back(recipe_id, _tab())


@reviews_bp.route('/recipes/<int:recipe_id>/comments/<int:comment_id>/edit', methods=['POST'])
@_comment_limit
@login_required
def edit_comment(recipe_id, comment_id):
    """Rewrite one of your comments. An empty rating removes the rating."""
    thread = _load_thread(recipe_id)
    form = CommentForm(prefix='edit')
    if not form.validate_on_submit():
        _flash_form_errors(form)
        return _back(recipe_id, _tab())

    try:
        saved, plan = thread.edit(comment_id, form.content.data, form.rating.data)
    except RecipeShareError as exc:
        flash(exc.message, 'error')
        return _back(recipe_id, _tab())

    audit_log(
        'comment_updated',
        'Comment edited',
        user_id=saved.user_id,
        recipe_id=recipe_id,
        comment_id=saved.id,
        rating=saved.rating,
    )
    _log_replacement(plan, saved)

    if plan.rating_dropped:
        flash("You can't rate your own recipe. Your comment was saved without a rating.", 'info')
    else:
        flash('Comment updated!', 'success')
    return _back(recipe_id, _tab())


@reviews_bp.route('/recipes/<int:recipe_id>/comments/<int:comment_id>/delete', methods=['POST'])
@_comment_limit
@login_required
def delete_comment(recipe_id, comment_id):
    thread = _load_thread(recipe_id)
    try:
        deleted = thread.delete(comment_id)
    except RecipeShareError as exc:
        flash(exc.message, 'error')
        return _back(recipe_id, _tab())

    audit_log(
        'comment_deleted',
        'Comment deleted',
        user_id=g.user['id'],
        recipe_id=recipe_id,
        comment_id=deleted.id,
        rating=deleted.rating,
    )
    flash('Comment deleted.', 'info')
    return _back(recipe_id, _tab())
