"""
Tests for the response headers set on every page.
"""

import re

from recipeshare import create_app


class TestContentSecurityPolicy:

    def test_csp_present(self, client):
        assert 'Content-Security-Policy' in client.get('/').headers

    def test_csp_nonce_changes_per_request(self, client):
        first = client.get('/').headers['Content-Security-Policy']
        second = client.get('/').headers['Content-Security-Policy']
        nonce1 = re.findall(r"'nonce-([^']+)'", first)
        nonce2 = re.findall(r"'nonce-([^']+)'", second)
        assert nonce1 and nonce2
        assert nonce1[0] != nonce2[0]

    def test_images_allowed_from_https(self, client):
        csp = client.get('/').headers['Content-Security-Policy']
        assert "img-src 'self' https: data:" in csp

    def test_framing_and_plugins_blocked(self, client):
        csp = client.get('/').headers['Content-Security-Policy']
        assert "frame-ancestors 'none'" in csp
        assert "object-src 'none'" in csp
        assert "form-action 'self'" in csp


class TestOtherHeaders:

    def test_basic_hardening_headers(self, client):
        headers = client.get('/').headers
        assert headers['X-Frame-Options'] == 'DENY'
        assert headers['X-Content-Type-Options'] == 'nosniff'
        assert headers['Referrer-Policy'] == 'strict-origin-when-cross-origin'
        assert headers['Cross-Origin-Opener-Policy'] == 'same-origin'
        assert 'camera=()' in headers['Permissions-Policy']

    def test_pages_not_cached(self, client):
        assert 'no-store' in client.get('/login').headers['Cache-Control']

    def test_stylesheet_cacheable(self, client):
        response = client.get('/static/css/style.css')
        assert response.status_code == 200
        assert 'no-store' not in response.headers.get('Cache-Control', '')

    def test_hsts_outside_debug(self, client):
        assert 'max-age=31536000' in client.get('/').headers['Strict-Transport-Security']

    def test_headers_on_error_pages(self, client):
        response = client.get('/no-such-page')
        assert response.status_code == 404
        assert 'Content-Security-Policy' in response.headers


class TestDefaultConfig:

    def test_factory_defaults_to_development(self, tmp_path):
        app = create_app(instance_path=str(tmp_path))
        assert app.config['DEBUG'] is True
        assert app.config['SESSION_COOKIE_SECURE'] is False

    def test_no_hsts_in_development(self, tmp_path):
        app = create_app(instance_path=str(tmp_path))
        assert 'Strict-Transport-Security' not in app.test_client().get('/').headers
