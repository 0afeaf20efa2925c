"""
Tests for rate limiting on login, sign-up and comment posts.

Uses RateLimitTestConfig which enables flask-limiter.
"""

from recipeshare.auth.models import create_user
from recipeshare.auth.security import hash_password
from recipeshare.recipes.models import create_recipe

PASSWORD = 'Simmer&Stir2024'


class TestLoginRateLimit:

    def test_get_not_limited(self, rate_limit_app, rate_limit_client):
        rate_limit_app.config['LOGIN_RATE_LIMIT_IP'] = '2/minute'
        for _ in range(5):
            response = rate_limit_client.get('/login')
        assert response.status_code == 200

    def test_over_limit_returns_429(self, rate_limit_app, rate_limit_client):
        rate_limit_app.config['LOGIN_RATE_LIMIT_IP'] = '2/minute'
        statuses = [
            rate_limit_client.post('/login', data={
                'email': f'user{i}@example.com',
                'password': 'password1',
            }).status_code
            for i in range(3)
        ]
        assert statuses == [200, 200, 429]

    def test_429_page_explains(self, rate_limit_app, rate_limit_client):
        rate_limit_app.config['LOGIN_RATE_LIMIT_IP'] = '1/minute'
        rate_limit_client.post('/login', data={'email': 'a@example.com', 'password': 'x'})
        response = rate_limit_client.post('/login', data={'email': 'a@example.com', 'password': 'x'})
        assert response.status_code == 429
        assert b'Too many login attempts' in response.data


class TestSignupRateLimit:

    def test_over_limit_returns_429(self, rate_limit_app, rate_limit_client):
        rate_limit_app.config['SIGNUP_RATE_LIMIT_IP'] = '1/minute'
        rate_limit_client.post('/signup', data={'username': 'x'})
        response = rate_limit_client.post('/signup', data={'username': 'y'})
        assert response.status_code == 429


class TestCommentRateLimit:

    def test_over_limit_returns_429(self, rate_limit_app, rate_limit_client):
        with rate_limit_app.app_context():
            owner = create_user(email='o@example.com', username='owner',
                                password_hash=hash_password(PASSWORD))
            create_user(email='g@example.com', username='guest',
                        password_hash=hash_password(PASSWORD))
            recipe_id = create_recipe(user_id=owner, title='Flatbread', description=None,
                                      ingredients=['Flour'], instructions=['Bake'])
        rate_limit_client.post('/login', data={'email': 'g@example.com', 'password': PASSWORD})
        rate_limit_app.config['COMMENT_RATE_LIMIT'] = '2/minute'

        statuses = [
            rate_limit_client.post(f'/recipes/{recipe_id}/comments', data={'content': f'#{i}'}).status_code
            for i in range(3)
        ]

        assert statuses == [302, 302, 429]
