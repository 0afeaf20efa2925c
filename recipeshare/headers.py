"""
Response headers applied to every page.

A per-request nonce is the only way an inline <script> or <style> runs.
Recipe and avatar images may come from any HTTPS host, since users
paste avatar URLs and recipes can point at external photos.
"""

import secrets

from flask import Flask, g, request


def generate_csp_nonce() -> str:
    return secrets.token_urlsafe(32)


def content_security_policy(nonce: str) -> str:
    return '; '.join([
        "default-src 'self'",
        f"script-src 'nonce-{nonce}'",
        f"style-src 'self' 'nonce-{nonce}'",
        "img-src 'self' https: data:",
        "frame-ancestors 'none'",
        "form-action 'self'",
        "base-uri 'self'",
        "object-src 'none'",
    ])


def init_security_headers(app: Flask) -> None:
    """Register the nonce hook, its template variable and the header hook."""

    @app.before_request
    def set_csp_nonce() -> None:
        g.csp_nonce = generate_csp_nonce()

    @app.context_processor
    def inject_csp_nonce() -> dict:
        return {'csp_nonce': g.get('csp_nonce', '')}

    @app.after_request
    def set_security_headers(response):
        response.headers['Content-Security-Policy'] = content_security_policy(
            g.get('csp_nonce', '')
        )
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Permissions-Policy'] = 'camera=(), microphone=(), geolocation=()'
        response.headers['Cross-Origin-Opener-Policy'] = 'same-origin'

        # HSTS would pin localhost to HTTPS during development.
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # Pages can show another user's session after "Back"; images can be cached.
        if not request.path.startswith(('/static/', '/uploads/')):
            response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
            response.headers['Pragma'] = 'no-cache'

        response.headers.pop('Server', None)
        return response
