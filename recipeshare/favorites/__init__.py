"""
Favorites blueprint — saving recipes and the saved-recipes page.
"""

from flask import Blueprint

favorites_bp = Blueprint('favorites', __name__)

from recipeshare.favorites import routes  # noqa: E402, F401
