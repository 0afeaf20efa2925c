"""
Flask application factory.

Creates the app with its extensions, response headers, audit logging
and the four blueprints (auth, recipes, reviews, favorites). Each test
builds its own app with a different config class and instance folder.

Extension initialization order:
1. bcrypt — needed by init_dummy_hash below
2. csrf — registers before_request hook for CSRF validation
3. session — server-side session management
4. limiter — reads RATELIMIT_* from config; RATELIMIT_ENABLED=False turns it off
"""

import os

from flask import Flask, flash, redirect, render_template, request, url_for

from recipeshare.config import DevelopmentConfig


def create_app(config_class=None, instance_path=None):
    """
    Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to DevelopmentConfig.
        instance_path: Folder for the database, sessions and uploads.
                       Defaults to Flask's instance folder.

    Returns:
        Configured Flask application instance.
    """
    if config_class is None:
        config_class = DevelopmentConfig

    app = Flask(
        __name__,
        instance_path=instance_path,
        static_folder='static',
        static_url_path='/static',
    )
    app.config.from_object(config_class)
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    os.makedirs(app.instance_path, exist_ok=True)

    # Default /tmp/flask_session would be shared between test apps.
    session_dir = os.path.join(app.instance_path, 'flask_sessions')
    os.makedirs(session_dir, exist_ok=True)
    app.config['SESSION_FILE_DIR'] = session_dir

    # --- Extensions ---

    from recipeshare.extensions import bcrypt, csrf, limiter, sess

    bcrypt.init_app(app)
    csrf.init_app(app)
    sess.init_app(app)
    limiter.init_app(app)

    # --- Headers and logging ---

    from recipeshare.headers import init_security_headers
    init_security_headers(app)

    from recipeshare.logging_config import setup_audit_logging
    setup_audit_logging(app)

    from recipeshare.auth.security import init_dummy_hash
    with app.app_context():
        init_dummy_hash(app)

    # --- Blueprints ---

    from recipeshare.auth import auth_bp
    from recipeshare.favorites import favorites_bp
    from recipeshare.recipes import recipes_bp
    from recipeshare.reviews import reviews_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(recipes_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(favorites_bp)

    register_error_handlers(app)

    # --- Database ---

    from recipeshare.db import close_db, init_db

    app.teardown_appcontext(close_db)
    init_db(app)

    return app


def register_error_handlers(app: Flask) -> None:
    from flask_wtf.csrf import CSRFError

    from recipeshare.auth.security import log_csrf_failure
    from recipeshare.auth.session import safe_referrer
    from recipeshare.errors import AuthenticationRequiredError, NotFoundError, RecipeShareError

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        """Expired or missing token: send the user back to reload the form."""
        log_csrf_failure()
        flash('Your form session has expired. Please try again.', 'warning')
        return redirect(safe_referrer(url_for('recipes.index')))

    @app.errorhandler(NotFoundError)
    def handle_missing_record(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(AuthenticationRequiredError)
    def handle_login_required(e):
        flash(e.message, 'info')
        return redirect(url_for('auth.login', next=request.full_path.rstrip('?')))

    @app.errorhandler(RecipeShareError)
    def handle_domain_error(e):
        """Validation, permission and storage errors become a notice on the previous page."""
        flash(e.message, 'error')
        return redirect(safe_referrer(url_for('recipes.index')))

    @app.errorhandler(403)
    def handle_forbidden(e):
        return render_template('errors/403.html'), 403

    @app.errorhandler(404)
    def handle_not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(413)
    def handle_request_too_large(e):
        return render_template('errors/413.html'), 413

    @app.errorhandler(429)
    def handle_rate_limit(e):
        return render_template('errors/429.html', description=e.description), 429

    @app.errorhandler(500)
    def handle_server_error(e):
        """No stack traces or internal details."""
        return render_template('errors/500.html'), 500
