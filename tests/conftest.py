"""
Pytest fixtures for the RecipeShare test suite.

Each app gets its own instance folder under tmp_path, so the SQLite
file, sessions and uploads never leak between tests.
- app/client: base test config (CSRF off, rate limiting off)
- csrf_app/csrf_client: CSRF enabled
- rate_limit_app/rate_limit_client: rate limiting enabled
- alice/bob/carol: registered users; recipe: a recipe owned by alice
"""

import pytest

from recipeshare import create_app
from recipeshare.auth.models import create_user
from recipeshare.auth.security import hash_password
from recipeshare.config import CSRFTestConfig, RateLimitTestConfig, TestConfig
from recipeshare.recipes.models import create_recipe, get_category_by_slug

PASSWORD = 'Simmer&Stir2024'


def make_user(app, username, full_name=None):
    email = f'{username}@example.com'
    with app.app_context():
        user_id = create_user(
            email=email,
            username=username,
            full_name=full_name,
            password_hash=hash_password(PASSWORD),
        )
    return {'id': user_id, 'username': username, 'email': email, 'full_name': full_name}


def make_recipe(app, owner, title='Tomato Soup', category='soups', **fields):
    with app.app_context():
        found = get_category_by_slug(category) if category else None
        return create_recipe(
            user_id=owner['id'],
            title=title,
            description=fields.get('description', 'A bright, simple soup.'),
            ingredients=fields.get('ingredients', ['4 tomatoes', '1 onion', 'Salt']),
            instructions=fields.get('instructions', ['Chop everything', 'Simmer 20 minutes']),
            category_id=found['id'] if found else None,
            time_minutes=fields.get('time_minutes', 30),
        )


@pytest.fixture
def app(tmp_path):
    """Create a Flask app with the base test configuration."""
    yield create_app(TestConfig, instance_path=str(tmp_path))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def csrf_app(tmp_path):
    """Create a Flask app with CSRF protection enabled."""
    yield create_app(CSRFTestConfig, instance_path=str(tmp_path))


@pytest.fixture
def csrf_client(csrf_app):
    return csrf_app.test_client()


@pytest.fixture
def rate_limit_app(tmp_path):
    """Create a Flask app with rate limiting enabled."""
    yield create_app(RateLimitTestConfig, instance_path=str(tmp_path))


@pytest.fixture
def rate_limit_client(rate_limit_app):
    return rate_limit_app.test_client()


@pytest.fixture
def alice(app):
    """Recipe owner in most tests."""
    return make_user(app, 'alice', full_name='Alice Baker')


@pytest.fixture
def bob(app):
    return make_user(app, 'bob', full_name='Bob Cook')


@pytest.fixture
def carol(app):
    return make_user(app, 'carol')


@pytest.fixture
def recipe(app, alice):
    """Id of a recipe owned by alice."""
    return make_recipe(app, alice)


@pytest.fixture
def user_factory(app):
    return lambda username, full_name=None: make_user(app, username, full_name)


@pytest.fixture
def recipe_factory(app):
    return lambda owner, title='Tomato Soup', **fields: make_recipe(app, owner, title, **fields)


@pytest.fixture
def login():
    """Return a helper that signs `user` in on `client`."""
    def _login(client, user, follow_redirects=False, url='/login'):
        return client.post(url, data={
            'email': user['email'],
            'password': PASSWORD,
        }, follow_redirects=follow_redirects)
    return _login


@pytest.fixture
def bob_client(client, bob, login):
    """Test client signed in as bob."""
    login(client, bob)
    return client


@pytest.fixture
def alice_client(app, alice, login):
    """Test client signed in as alice (a separate client from `client`)."""
    alice_client = app.test_client()
    login(alice_client, alice)
    return alice_client
