"""
Accounts blueprint — sign-up, login, logout, profile.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

# Routes register themselves on import; must come after auth_bp exists.
from recipeshare.auth import routes  # noqa: E402, F401
