"""
Favorite routes.

The heart button posts the action the page was rendered with
(action=add or action=remove). A second "add" from a stale page hits
the UNIQUE key and is reported, not toggled back off.
"""

from flask import abort, flash, g, redirect, render_template, request, url_for

from recipeshare.auth.session import is_safe_next, login_required
from recipeshare.errors import AlreadyFavoritedError
from recipeshare.favorites import favorites_bp
from recipeshare.favorites.models import add_favorite, is_favorited, remove_favorite
from recipeshare.logging_config import audit_log
from recipeshare.recipes.models import get_recipe, list_saved_recipes


@favorites_bp.route('/recipes/<int:recipe_id>/favorite', methods=['POST'])
@login_required
def toggle(recipe_id):
    if get_recipe(recipe_id) is None:
        abort(404)

    user_id = g.user['id']
    action = request.form.get('action')
    if action not in ('add', 'remove'):
        action = 'remove' if is_favorited(user_id, recipe_id) else 'add'

    if action == 'add':
        try:
            add_favorite(user_id, recipe_id)
        except AlreadyFavoritedError as exc:
            flash(exc.message, 'info')
        else:
            audit_log('favorite_added', 'Recipe saved', user_id=user_id, recipe_id=recipe_id)
            flash('Added to favorites!', 'success')
    elif remove_favorite(user_id, recipe_id):
        audit_log('favorite_removed', 'Recipe unsaved', user_id=user_id, recipe_id=recipe_id)
        flash('Removed from favorites', 'info')
    else:
        flash('Recipe is not in your favorites', 'info')

    target = request.form.get('next')
    if is_safe_next(target):
        return redirect(target)
    return redirect(url_for('recipes.detail', recipe_id=recipe_id))


@favorites_bp.route('/profile/favorites')
@login_required
def saved():
    """Recipes the signed-in user has saved, most recent first."""
    return render_template('favorites/list.html', recipes=list_saved_recipes(g.user['id']))
