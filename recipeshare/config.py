"""
Application configuration: security and product thresholds in one place.

Every threshold carries a short note on what it bounds.
No magic numbers in the blueprints.
"""

import os
import secrets


class BaseConfig:
    """Shared configuration for all environments."""

    # --- Flask Core ---
    # 256-bit random secret for session signing and CSRF tokens.
    # In production this comes from the environment (see ProductionConfig).
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)

    # Largest accepted request body: one 5MB image plus the recipe form.
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    # --- Session Configuration (flask-session) ---
    # Server-side filesystem sessions; the cookie holds an opaque id only.
    SESSION_TYPE = 'filesystem'
    SESSION_PERMANENT = True
    # Two-week sliding session, matching a typical hosted-auth refresh window.
    PERMANENT_SESSION_LIFETIME = 14 * 24 * 3600  # seconds
    SESSION_USE_SIGNER = True
    SESSION_KEY_PREFIX = 'recipeshare:'

    # --- Session Cookie Flags ---
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_NAME = 'session'

    # --- bcrypt ---
    # 12 rounds is roughly 250ms per hash.
    BCRYPT_LOG_ROUNDS = 12
    # Passwords up to 128 chars can exceed bcrypt's 72-byte input;
    # flask-bcrypt pre-hashes them with SHA-256 when this is on.
    BCRYPT_HANDLE_LONG_PASSWORDS = True

    # --- Rate Limiting (flask-limiter) ---
    RATELIMIT_ENABLED = True
    # In-memory storage for a single instance; use redis:// when scaled out.
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_DEFAULT = '600/hour'

    # Per-IP limit on sign-in and sign-up submissions.
    LOGIN_RATE_LIMIT_IP = '10/minute'
    SIGNUP_RATE_LIMIT_IP = '5/minute'
    # Per-IP limit on comment, edit and delete posts.
    COMMENT_RATE_LIMIT = '30/minute'

    # --- Reviews ---
    COMMENT_MAX_LENGTH = 2000

    # --- Recipes ---
    # "Recipes from the community" panel size.
    DASHBOARD_RECIPE_LIMIT = 12
    HOME_RECIPE_LIMIT = 6

    # --- Image Storage ---
    # Uploads live under the instance folder, one sub-folder per bucket.
    UPLOAD_FOLDER = 'uploads'
    MAX_IMAGE_BYTES = 5 * 1024 * 1024
    ALLOWED_IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'webp')

    # --- Database ---
    # SQLite file in Flask's instance folder.
    DATABASE_NAME = 'recipeshare.db'


class ProductionConfig(BaseConfig):
    """Production environment: HTTPS cookies, secret from the environment."""

    DEBUG = False
    TESTING = False

    # Never fall back to a random key: it would invalidate sessions on restart.
    SECRET_KEY = os.environ.get('SECRET_KEY')

    SESSION_COOKIE_SECURE = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    @classmethod
    def init_app(cls, app):
        """Validate required configuration at startup."""
        if not cls.SECRET_KEY:
            raise RuntimeError(
                'SECRET_KEY environment variable is required in production. '
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: cookies over plain HTTP."""

    DEBUG = True
    SESSION_COOKIE_SECURE = False


class TestConfig(BaseConfig):
    """Test environment: fast bcrypt, CSRF and rate limiting off by default."""

    TESTING = True
    SESSION_COOKIE_SECURE = False
    # 4 rounds keeps each hash in the low milliseconds.
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    WTF_CSRF_ENABLED = False
    DATABASE_NAME = 'test.db'


class RateLimitTestConfig(TestConfig):
    """Test config with rate limiting enabled."""

    RATELIMIT_ENABLED = True


class CSRFTestConfig(TestConfig):
    """Test config with CSRF protection enabled."""

    WTF_CSRF_ENABLED = True
