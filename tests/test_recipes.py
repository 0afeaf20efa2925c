"""
Tests for recipe pages: create, edit, delete, browse, search, categories,
dashboard and image uploads.
"""

import io
import os

from recipeshare.db import get_db
from recipeshare.errors import TransientError
from recipeshare.recipes.models import get_category_by_slug, get_recipe
from recipeshare.storage import bucket_path


def recipe_form(**overrides):
    data = {
        'title': 'Lemon Cake',
        'description': 'Zesty and moist.',
        'category_id': '',
        'time_minutes': '45',
        'ingredients': '200g flour\n\n 3 eggs \n1 lemon',
        'instructions': 'Mix\nBake',
    }
    data.update(overrides)
    return data


def created_id(response):
    return int(response.headers['Location'].rstrip('/').rsplit('/', 1)[-1])


class TestCreateRecipe:

    def test_create_recipe(self, app, bob_client):
        response = bob_client.post('/recipes/create', data=recipe_form())
        assert response.status_code == 302

        with app.app_context():
            saved = get_recipe(created_id(response))
        assert saved['title'] == 'Lemon Cake'
        assert saved['ingredients'] == ['200g flour', '3 eggs', '1 lemon']
        assert saved['instructions'] == ['Mix', 'Bake']
        assert saved['time_minutes'] == 45

    def test_create_with_category(self, app, bob_client):
        with app.app_context():
            desserts = get_category_by_slug('desserts')
        response = bob_client.post('/recipes/create', data=recipe_form(category_id=str(desserts['id'])))

        with app.app_context():
            assert get_recipe(created_id(response))['category_slug'] == 'desserts'

    def test_title_required(self, bob_client):
        response = bob_client.post('/recipes/create', data=recipe_form(title=''))
        assert response.status_code == 200
        assert b'Title is required.' in response.data

    def test_at_least_one_ingredient(self, bob_client):
        response = bob_client.post('/recipes/create', data=recipe_form(ingredients='\n  \n'))
        assert b'Please add at least one ingredient' in response.data

    def test_at_least_one_instruction(self, bob_client):
        response = bob_client.post('/recipes/create', data=recipe_form(instructions=''))
        assert b'Please add at least one instruction' in response.data

    def test_time_out_of_range(self, bob_client):
        response = bob_client.post('/recipes/create', data=recipe_form(time_minutes='0'))
        assert b'Time must be between 1 and 1440 minutes.' in response.data

    def test_unknown_category_rejected(self, bob_client):
        response = bob_client.post('/recipes/create', data=recipe_form(category_id='999'))
        assert response.status_code == 200
        assert b'Not a valid choice' in response.data

    def test_requires_login(self, client):
        response = client.get('/recipes/create')
        assert response.status_code == 302
        assert '/login?next=' in response.headers['Location']
        assert 'recipes' in response.headers['Location']


class TestImageUpload:

    def test_image_saved_and_served(self, app, bob_client):
        data = recipe_form(image=(io.BytesIO(b'GIF89a fake image'), 'cake.gif'))
        response = bob_client.post('/recipes/create', data=data, content_type='multipart/form-data')

        with app.app_context():
            image_url = get_recipe(created_id(response))['image_url']
        assert image_url.startswith('/uploads/recipe-images/')
        assert image_url.endswith('.gif')

        served = bob_client.get(image_url)
        assert served.status_code == 200
        assert served.data == b'GIF89a fake image'

    def test_non_image_rejected(self, bob_client):
        data = recipe_form(image=(io.BytesIO(b'#!/bin/sh'), 'script.sh'))
        response = bob_client.post('/recipes/create', data=data, content_type='multipart/form-data')
        assert response.status_code == 200
        assert b'Please select a valid image file' in response.data

    def test_oversized_image_rejected(self, app, bob_client):
        app.config['MAX_IMAGE_BYTES'] = 10
        data = recipe_form(image=(io.BytesIO(b'x' * 11), 'big.png'))
        response = bob_client.post('/recipes/create', data=data, content_type='multipart/form-data')
        assert b'Image size must be less than 5MB' in response.data

    def test_failed_save_removes_uploaded_image(self, app, bob_client, monkeypatch):
        def refuse(**kwargs):
            raise TransientError('Could not save recipe.')

        monkeypatch.setattr('recipeshare.recipes.routes.create_recipe', refuse)
        data = recipe_form(image=(io.BytesIO(b'GIF89a fake image'), 'cake.gif'))
        response = bob_client.post(
            '/recipes/create', data=data, content_type='multipart/form-data', follow_redirects=True,
        )

        assert b'Could not save recipe.' in response.data
        with app.app_context():
            assert os.listdir(bucket_path()) == []

    def test_failed_edit_keeps_previous_image(self, app, alice_client, recipe, monkeypatch):
        with app.app_context():
            db = get_db()
            with db:
                db.execute('UPDATE recipes SET image_url = ? WHERE id = ?', ('/uploads/recipe-images/x.png', recipe))

        def refuse(*args, **kwargs):
            raise TransientError('Could not save recipe.')

        monkeypatch.setattr('recipeshare.recipes.routes.update_recipe', refuse)
        data = recipe_form(image=(io.BytesIO(b'GIF89a new image'), 'new.gif'))
        alice_client.post(f'/recipes/{recipe}/edit', data=data, content_type='multipart/form-data')

        with app.app_context():
            assert os.listdir(bucket_path()) == []
            assert get_recipe(recipe)['image_url'] == '/uploads/recipe-images/x.png'

    def test_missing_upload_is_404(self, client):
        assert client.get('/uploads/recipe-images/nope.png').status_code == 404


class TestRecipeDetail:

    def test_detail_shows_recipe(self, client, recipe):
        response = client.get(f'/recipes/{recipe}')
        assert response.status_code == 200
        assert b'Tomato Soup' in response.data
        assert b'4 tomatoes' in response.data
        assert b'Simmer 20 minutes' in response.data
        assert b'No ratings yet' in response.data

    def test_missing_recipe_is_404(self, client):
        assert client.get('/recipes/9999').status_code == 404


class TestEditDeleteRecipe:

    def test_owner_can_edit(self, app, alice_client, recipe):
        response = alice_client.get(f'/recipes/{recipe}/edit')
        assert b'4 tomatoes' in response.data

        alice_client.post(f'/recipes/{recipe}/edit', data=recipe_form(title='Roast Tomato Soup'))

        with app.app_context():
            assert get_recipe(recipe)['title'] == 'Roast Tomato Soup'

    def test_edit_keeps_image_without_new_upload(self, app, alice_client, recipe):
        with app.app_context():
            db = get_db()
            with db:
                db.execute('UPDATE recipes SET image_url = ? WHERE id = ?', ('/uploads/recipe-images/x.png', recipe))

        alice_client.post(f'/recipes/{recipe}/edit', data=recipe_form())

        with app.app_context():
            assert get_recipe(recipe)['image_url'] == '/uploads/recipe-images/x.png'

    def test_non_owner_cannot_edit(self, app, bob_client, recipe):
        response = bob_client.post(
            f'/recipes/{recipe}/edit', data=recipe_form(title='Hijacked'), follow_redirects=True,
        )
        assert b'permission to change this recipe' in response.data
        with app.app_context():
            assert get_recipe(recipe)['title'] == 'Tomato Soup'

    def test_owner_can_delete(self, app, alice_client, recipe):
        response = alice_client.post(f'/recipes/{recipe}/delete', follow_redirects=True)
        assert b'Recipe deleted.' in response.data
        with app.app_context():
            assert get_recipe(recipe) is None

    def test_non_owner_cannot_delete(self, app, bob_client, recipe):
        bob_client.post(f'/recipes/{recipe}/delete')
        with app.app_context():
            assert get_recipe(recipe) is not None

    def test_delete_removes_comments_and_favorites(self, app, alice_client, bob_client, recipe):
        bob_client.post(f'/recipes/{recipe}/comments', data={'content': 'Yum', 'rating': '5'})
        bob_client.post(f'/recipes/{recipe}/favorite', data={'action': 'add'})

        alice_client.post(f'/recipes/{recipe}/delete')

        with app.app_context():
            db = get_db()
            assert db.execute('SELECT COUNT(*) FROM comments').fetchone()[0] == 0
            assert db.execute('SELECT COUNT(*) FROM favorites').fetchone()[0] == 0


class TestBrowse:

    def test_search_matches_title_case_insensitively(self, client, recipe, recipe_factory, alice):
        recipe_factory(alice, 'Blueberry Pancakes', category='breakfast')
        response = client.get('/recipes?q=TOMATO')
        assert b'Tomato Soup' in response.data
        assert b'Blueberry Pancakes' not in response.data

    def test_search_wildcards_are_literal(self, client, recipe):
        response = client.get('/recipes?q=%25')
        assert b'Tomato Soup' not in response.data
        assert b'No recipes match' in response.data

    def test_filter_by_category(self, client, recipe, recipe_factory, alice):
        recipe_factory(alice, 'Blueberry Pancakes', category='breakfast')
        response = client.get('/recipes?category=breakfast')
        assert b'Blueberry Pancakes' in response.data
        assert b'Tomato Soup' not in response.data

    def test_unknown_category_is_404(self, client):
        assert client.get('/recipes?category=nope').status_code == 404

    def test_category_page(self, client, recipe):
        response = client.get('/categories/soups')
        assert b'Tomato Soup' in response.data

    def test_categories_index_counts(self, client, recipe):
        response = client.get('/categories')
        assert b'Soups' in response.data
        assert b'1 recipe' in response.data

    def test_home_lists_latest(self, client, recipe):
        response = client.get('/')
        assert response.status_code == 200
        assert b'Tomato Soup' in response.data


class TestDashboard:

    def test_shows_other_users_recipes_only(self, bob_client, recipe, recipe_factory, bob):
        recipe_factory(bob, "Bob's Chili", category='dinner')
        response = bob_client.get('/dashboard')
        assert b'Tomato Soup' in response.data
        assert b'Chili' not in response.data

    def test_my_recipes(self, alice_client, recipe):
        response = alice_client.get('/profile/recipes')
        assert b'Tomato Soup' in response.data

    def test_dashboard_requires_login(self, client):
        response = client.get('/dashboard')
        assert response.status_code == 302
        assert '/login' in response.headers['Location']
