"""
Recipe routes — home, dashboard, browsing, create/edit/delete, categories.

Domain errors raised here are handled by the app-level handlers in
recipeshare/__init__.py: NotFoundError renders the 404 page, anything
else becomes a flash message and a redirect back.
"""

from flask import abort, current_app, flash, g, redirect, render_template, request, \
    send_from_directory, url_for

from recipeshare.auth.session import login_required
from recipeshare.db import get_db
from recipeshare.errors import RecipeShareError, TransientError
from recipeshare.favorites.models import count_for_recipe, counts_by_recipe, favorited_ids, \
    is_favorited
from recipeshare.logging_config import audit_log
from recipeshare.recipes import recipes_bp
from recipeshare.recipes.forms import RecipeForm
from recipeshare.recipes.models import (
    create_recipe,
    delete_recipe,
    get_category_by_slug,
    get_owned_recipe,
    get_recipe,
    list_categories,
    list_categories_with_counts,
    list_recipes,
    update_recipe,
)
from recipeshare.reviews.aggregate import summarize_ratings
from recipeshare.reviews.forms import CommentForm
from recipeshare.reviews.models import CommentStore
from recipeshare.reviews.thread import CommentThread
from recipeshare.storage import bucket_path, discard_recipe_image, save_recipe_image


def _annotate(recipes, with_counts=False):
    """Attach the rating summary (and optionally counts and saved flag) to list rows."""
    ids = [recipe['id'] for recipe in recipes]
    store = CommentStore(get_db())
    ratings = store.ratings_by_recipe(ids)
    for recipe in recipes:
        recipe['summary'] = summarize_ratings(ratings[recipe['id']])

    if with_counts:
        favorites = counts_by_recipe(ids)
        comments = store.counts_by_recipe(ids)
        saved = favorited_ids(g.user['id'], ids) if g.user else set()
        for recipe in recipes:
            recipe['favorites_count'] = favorites[recipe['id']]
            recipe['comments_count'] = comments[recipe['id']]
            recipe['is_favorited'] = recipe['id'] in saved
    return recipes


def _store_upload(form, current_url=None):
    """
    Save a newly uploaded image, if any.

    A failed upload keeps the previous image and warns; the recipe itself
    is still saved.
    """
    upload = form.image.data
    if not upload:
        return current_url
    try:
        return save_recipe_image(upload, g.user['id'])
    except TransientError:
        flash('Failed to upload image. The recipe was saved without the new image.', 'warning')
        return current_url


def _recipe_fields(form):
    return {
        'title': form.title.data.strip(),
        'description': (form.description.data or '').strip(),
        'ingredients': form.ingredient_list,
        'instructions': form.instruction_list,
        'category_id': form.category_id.data,
        'time_minutes': form.time_minutes.data,
    }


# --- Landing pages ---

@recipes_bp.route('/')
def index():
    """Landing page: newest recipes and the category grid."""
    recipes = list_recipes(limit=current_app.config['HOME_RECIPE_LIMIT'])
    return render_template(
        'recipes/index.html',
        recipes=_annotate(recipes),
        categories=list_categories_with_counts(),
    )


@recipes_bp.route('/dashboard')
@login_required
def dashboard():
    """Newest recipes from other users, with favorite and comment counts."""
    recipes = list_recipes(
        exclude_user_id=g.user['id'],
        limit=current_app.config['DASHBOARD_RECIPE_LIMIT'],
    )
    return render_template('recipes/dashboard.html', recipes=_annotate(recipes, with_counts=True))


@recipes_bp.route('/recipes')
def browse():
    """All recipes, optionally filtered by ?q= search text and ?category= slug."""
    query = request.args.get('q', '').strip()
    slug = request.args.get('category', '').strip()

    category = None
    if slug:
        category = get_category_by_slug(slug)
        if category is None:
            abort(404)

    recipes = list_recipes(
        search=query or None,
        category_id=category['id'] if category else None,
    )
    return render_template(
        'recipes/list.html',
        recipes=_annotate(recipes),
        query=query,
        category=category,
        categories=list_categories(),
    )


@recipes_bp.route('/profile/recipes')
@login_required
def my_recipes():
    recipes = list_recipes(user_id=g.user['id'])
    return render_template('recipes/my_recipes.html', recipes=_annotate(recipes, with_counts=True))


# --- Recipe CRUD ---

@recipes_bp.route('/recipes/create', methods=['GET', 'POST'])
@login_required
def create():
    form = RecipeForm()
    form.set_categories(list_categories())

    if form.validate_on_submit():
        image_url = _store_upload(form)
        try:
            recipe_id = create_recipe(user_id=g.user['id'], image_url=image_url, **_recipe_fields(form))
        except RecipeShareError:
            discard_recipe_image(image_url)
            raise
        audit_log(
            'recipe_created',
            f"Recipe created: {form.title.data.strip()}",
            user_id=g.user['id'],
            recipe_id=recipe_id,
        )
        flash('Recipe created successfully!', 'success')
        return redirect(url_for('recipes.detail', recipe_id=recipe_id))

    return render_template('recipes/form.html', form=form, recipe=None)


@recipes_bp.route('/recipes/<int:recipe_id>')
def detail(recipe_id):
    """
    Recipe page with its comment thread.

    ?tab=reviews shows only rated comments; ?edit=<comment_id> opens the
    inline editor for one of the viewer's own comments.
    """
    recipe = get_recipe(recipe_id)
    if recipe is None:
        abort(404)

    thread = CommentThread(
        CommentStore(get_db()),
        recipe,
        g.user,
        max_length=current_app.config['COMMENT_MAX_LENGTH'],
    ).load()
    tab = 'reviews' if request.args.get('tab') == 'reviews' else 'all'

    edit_form = None
    editing = request.args.get('edit', type=int)
    if editing is not None and g.user is not None:
        comment = next(
            (c for c in thread.comments if c.id == editing and c.user_id == g.user['id']),
            None,
        )
        if comment is not None:
            edit_form = CommentForm(
                prefix='edit',
                data={'content': comment.content, 'rating': comment.rating},
            )
        else:
            editing = None

    return render_template(
        'recipes/detail.html',
        recipe=recipe,
        thread=thread,
        tab=tab,
        comment_form=CommentForm(),
        edit_form=edit_form,
        editing=editing,
        favorites_count=count_for_recipe(recipe_id),
        is_favorited=bool(g.user) and is_favorited(g.user['id'], recipe_id),
        is_owner=bool(g.user) and g.user['id'] == recipe['user_id'],
    )


@recipes_bp.route('/recipes/<int:recipe_id>/edit', methods=['GET', 'POST'])
@login_required
def edit(recipe_id):
    recipe = get_owned_recipe(recipe_id, g.user['id'])

    # Submitted values take precedence over these defaults on POST.
    form = RecipeForm(data={
        'title': recipe['title'],
        'description': recipe['description'],
        'category_id': recipe['category_id'],
        'time_minutes': recipe['time_minutes'],
        'ingredients': '\n'.join(recipe['ingredients']),
        'instructions': '\n'.join(recipe['instructions']),
    })
    form.set_categories(list_categories())

    if form.validate_on_submit():
        image_url = _store_upload(form, current_url=recipe['image_url'])
        try:
            update_recipe(recipe_id, user_id=g.user['id'], image_url=image_url, **_recipe_fields(form))
        except RecipeShareError:
            if image_url != recipe['image_url']:
                discard_recipe_image(image_url)
            raise
        audit_log('recipe_updated', 'Recipe updated', user_id=g.user['id'], recipe_id=recipe_id)
        flash('Recipe updated successfully!', 'success')
        return redirect(url_for('recipes.detail', recipe_id=recipe_id))

    return render_template('recipes/form.html', form=form, recipe=recipe)


@recipes_bp.route('/recipes/<int:recipe_id>/delete', methods=['POST'])
@login_required
def delete(recipe_id):
    delete_recipe(recipe_id, user_id=g.user['id'])
    audit_log('recipe_deleted', 'Recipe deleted', user_id=g.user['id'], recipe_id=recipe_id)
    flash('Recipe deleted.', 'info')
    return redirect(url_for('recipes.my_recipes'))


# --- Categories ---

@recipes_bp.route('/categories')
def categories():
    return render_template('categories/index.html', categories=list_categories_with_counts())


@recipes_bp.route('/categories/<slug>')
def category(slug):
    found = get_category_by_slug(slug)
    if found is None:
        abort(404)
    recipes = list_recipes(category_id=found['id'])
    return render_template('categories/detail.html', category=found, recipes=_annotate(recipes))


# --- Images ---

@recipes_bp.route('/uploads/recipe-images/<path:filename>')
def uploaded_image(filename):
    return send_from_directory(bucket_path(), filename)
