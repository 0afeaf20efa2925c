"""
Reviews blueprint — comments and star ratings on a recipe.
"""

from flask import Blueprint

reviews_bp = Blueprint('reviews', __name__)

from recipeshare.reviews import routes  # noqa: E402, F401
