"""
Recipes blueprint — home, dashboard, browsing, recipe CRUD, categories.
"""

from flask import Blueprint

recipes_bp = Blueprint('recipes', __name__)

from recipeshare.recipes import routes  # noqa: E402, F401
