"""
Flask extension instances: created here, initialized in the app factory.

Kept apart from __init__.py so blueprints can import them without
circular imports.
"""

from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_session import Session
from flask_wtf.csrf import CSRFProtect

# Password hashing; cost factor comes from BCRYPT_LOG_ROUNDS.
bcrypt = Bcrypt()

# CSRF tokens on every POST form (sign-in, recipes, comments, favorites).
csrf = CSRFProtect()

# Server-side sessions: the signed-in user's id never leaves the server.
sess = Session()

# Per-IP limits by default; storage and switches come from RATELIMIT_* config.
limiter = Limiter(key_func=get_remote_address)
