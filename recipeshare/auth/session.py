"""
Signed-in user context.

The server-side session holds only the user id. Each request loads the
user once into g.user; views hand it on as an explicit `actor`
argument instead of reaching for the session again.
"""

import uuid
from datetime import datetime, timezone
from functools import wraps
from urllib.parse import urlparse

from flask import flash, g, redirect, request, session, url_for

from recipeshare.auth.models import get_user_by_id


def load_current_user() -> None:
    """before_request hook: request id for log correlation, then g.user."""
    g.request_id = str(uuid.uuid4())[:8]
    g.user = None

    user_id = session.get('user_id')
    if user_id is None:
        return

    user = get_user_by_id(user_id)
    if user is None:
        # Account no longer exists; drop the stale session.
        session.clear()
        return
    g.user = user


def start_session(user) -> None:
    """Replace any previous session with one for `user`."""
    session.clear()
    session['user_id'] = user['id']
    session['login_time'] = datetime.now(timezone.utc).isoformat()
    session.permanent = True
    g.user = user


def end_session() -> None:
    session.clear()
    g.user = None


def is_safe_next(target) -> bool:
    """Only same-site relative paths are accepted as post-login redirects."""
    if not target:
        return False
    parsed = urlparse(target)
    return not parsed.scheme and not parsed.netloc and target.startswith('/') \
        and not target.startswith('//')


def safe_referrer(default: str) -> str:
    """The Referer as a same-site path, or `default`."""
    referrer = request.referrer
    if referrer:
        parsed = urlparse(referrer)
        # A GET that failed must not redirect to itself.
        same_page = request.method == 'GET' and parsed.path == request.path
        if parsed.netloc == request.host and parsed.path.startswith('/') and not same_page:
            return parsed.path + (f'?{parsed.query}' if parsed.query else '')
    return default


def login_required(f):
    """
    Redirect anonymous users to the login page, remembering where they were.

    Form posts cannot be replayed as a GET after login, so for those the
    page the form was on is remembered instead.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            flash('Please log in to access this page.', 'info')
            if request.method == 'GET':
                target = request.full_path.rstrip('?')
            else:
                target = safe_referrer(url_for('recipes.index'))
            return redirect(url_for('auth.login', next=target))
        return f(*args, **kwargs)
    return decorated_function


def anonymous_only(f):
    """Send signed-in users away from the login and sign-up pages."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is not None:
            return redirect(url_for('recipes.index'))
        return f(*args, **kwargs)
    return decorated_function
