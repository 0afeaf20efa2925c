"""
WSGI entry point for production (gunicorn).

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app

SECRET_KEY must be set in the environment; ProductionConfig.init_app
refuses to start without it.
"""

import sys

from recipeshare import create_app
from recipeshare.config import ProductionConfig

try:
    app = create_app(config_class=ProductionConfig)
except RuntimeError as exc:
    print(f'FATAL: {exc}', file=sys.stderr)
    sys.exit(1)
