"""
Unit tests for the OAuth login flow and token retrieval.

The loopback callback server is exercised for real: a background thread
plays the browser and sends the redirect to the OS-assigned port. MSAL's
application object is replaced, since everything past the redirect talks to
login.microsoftonline.com.
"""

import json
import os
import threading
import urllib.error
import urllib.request
from unittest.mock import MagicMock

import pytest

from outlook_cli.sdk import auth
from outlook_cli.sdk.config import get_token_cache_path
from outlook_cli.sdk.exceptions import AuthError, NotConfiguredError, NotLoggedInError


def _send_redirect(url: str):
    """Play the browser: request the redirect URL in the background."""
    def run():
        try:
            urllib.request.urlopen(url, timeout=5).read()
        except (urllib.error.URLError, OSError):
            pass
    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


class FakeApp:
    """Minimal stand-in for an MSAL client application."""

    def __init__(self, token_result=None, accounts=None, silent_result=None):
        self.token_result = token_result or {
            "access_token": "access",
            "scope": "Mail.ReadWrite Mail.Send MailboxSettings.Read",
            "expires_in": 3600,
            "id_token_claims": {"preferred_username": "me@example.com"},
        }
        self.accounts = accounts or []
        self.silent_result = silent_result
        self.redirect_uri = None
        self.silent_calls = []

    def initiate_auth_code_flow(self, scopes, redirect_uri=None, **kwargs):
        self.redirect_uri = redirect_uri
        return {"auth_uri": "https://login.example/authorize?state=s1", "state": "s1"}

    def acquire_token_by_auth_code_flow(self, flow, params, scopes=None):
        if params.get("state") != flow["state"]:
            raise ValueError("state mismatch")
        return self.token_result

    def get_accounts(self):
        return self.accounts

    def acquire_token_silent(self, scopes, account=None, force_refresh=False):
        self.silent_calls.append(force_refresh)
        return self.silent_result


@pytest.fixture
def fake_app(monkeypatch):
    app = FakeApp()
    monkeypatch.setattr(auth, "_build_app", lambda settings, cache: app)
    monkeypatch.setattr(auth, "_has_refresh_token", lambda cache: True)
    return app


def _browser_for(app, query="code=abc&state=s1"):
    """An open_browser replacement that completes the redirect."""
    opened = []

    def open_browser(url):
        opened.append(url)
        _send_redirect(f"{app.redirect_uri}/?{query}")
        return True

    open_browser.opened = opened
    return open_browser


class TestCallbackServer:

    def test_returns_redirect_parameters(self):
        server = auth._create_callback_server()
        try:
            port = server.server_address[1]
            _send_redirect(f"http://127.0.0.1:{port}/?code=the-code&state=the-state")
            params = auth.wait_for_callback(server, timeout=5)
        finally:
            server.server_close()

        assert params == {"code": "the-code", "state": "the-state"}

    def test_ignores_stray_requests(self):
        server = auth._create_callback_server()
        try:
            port = server.server_address[1]
            _send_redirect(f"http://127.0.0.1:{port}/favicon.ico")
            _send_redirect(f"http://127.0.0.1:{port}/?code=c&state=s")
            params = auth.wait_for_callback(server, timeout=5)
        finally:
            server.server_close()

        assert params["code"] == "c"

    def test_times_out(self):
        server = auth._create_callback_server()
        try:
            with pytest.raises(AuthError, match="Timeout waiting for OAuth callback"):
                auth.wait_for_callback(server, timeout=0.2)
        finally:
            server.server_close()

    def test_authorization_error_is_raised(self):
        server = auth._create_callback_server()
        try:
            port = server.server_address[1]
            _send_redirect(f"http://127.0.0.1:{port}/?error=access_denied&error_description=User+declined")
            with pytest.raises(AuthError) as exc_info:
                auth.wait_for_callback(server, timeout=5)
        finally:
            server.server_close()

        assert exc_info.value.error == "access_denied"
        assert "User declined" in str(exc_info.value)

    def test_missing_state_is_rejected(self):
        server = auth._create_callback_server()
        try:
            port = server.server_address[1]
            _send_redirect(f"http://127.0.0.1:{port}/?code=c")
            with pytest.raises(AuthError, match="No state in callback"):
                auth.wait_for_callback(server, timeout=5)
        finally:
            server.server_close()


class TestLogin:

    def test_requires_client_id(self):
        with pytest.raises(NotConfiguredError):
            auth.login(open_browser=lambda url: True)

    def test_success_saves_token_cache_owner_only(self, configured, fake_app):
        browser = _browser_for(fake_app)

        result = auth.login(open_browser=browser, timeout=5)

        assert result["username"] == "me@example.com"
        assert "Mail.ReadWrite" in result["scopes"]
        assert browser.opened == ["https://login.example/authorize?state=s1"]
        assert fake_app.redirect_uri.startswith("http://localhost:")

        cache_path = get_token_cache_path()
        assert cache_path.exists()
        assert os.stat(cache_path).st_mode & 0o777 == 0o600

    def test_existing_tokens_are_discarded_first(self, configured, fake_app):
        cache_path = get_token_cache_path()
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(json.dumps({"AccessToken": {"old": {"secret": "old-token"}}}))

        auth.login(open_browser=_browser_for(fake_app), timeout=5)

        assert "old-token" not in cache_path.read_text()

    def test_state_mismatch_fails_every_attempt(self, configured, fake_app):
        browser = _browser_for(fake_app, query="code=abc&state=forged")

        with pytest.raises(AuthError, match="CSRF token mismatch"):
            auth.login(open_browser=browser, timeout=5, max_attempts=2)

        assert len(browser.opened) == 2
        assert not get_token_cache_path().exists()

    def test_token_error_is_reported(self, configured, fake_app):
        fake_app.token_result = {"error": "invalid_grant", "error_description": "Code expired"}

        with pytest.raises(AuthError) as exc_info:
            auth.login(open_browser=_browser_for(fake_app), timeout=5, max_attempts=1)

        assert exc_info.value.error == "invalid_grant"
        assert "Code expired" in str(exc_info.value)

    def test_missing_refresh_token_is_an_error(self, configured, fake_app, monkeypatch):
        monkeypatch.setattr(auth, "_has_refresh_token", lambda cache: False)

        with pytest.raises(AuthError, match="No refresh token received"):
            auth.login(open_browser=_browser_for(fake_app), timeout=5, max_attempts=1)


class TestGetAccessToken:

    def _write_cache(self):
        cache_path = get_token_cache_path()
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text("{}")

    def test_not_configured(self):
        with pytest.raises(NotConfiguredError):
            auth.get_access_token()

    def test_not_logged_in_without_cache(self, configured):
        with pytest.raises(NotLoggedInError):
            auth.get_access_token()

    def test_not_logged_in_without_account(self, configured, fake_app):
        self._write_cache()
        with pytest.raises(NotLoggedInError):
            auth.get_access_token()

    def test_returns_silent_token(self, configured, fake_app):
        self._write_cache()
        fake_app.accounts = [{"username": "me@example.com"}]
        fake_app.silent_result = {"access_token": "fresh"}

        assert auth.get_access_token(force_refresh=True) == "fresh"
        assert fake_app.silent_calls == [True]

    def test_expired_session(self, configured, fake_app):
        self._write_cache()
        fake_app.accounts = [{"username": "me@example.com"}]
        fake_app.silent_result = {"error": "invalid_grant", "error_description": "AADSTS70008"}

        with pytest.raises(NotLoggedInError, match="Session expired"):
            auth.get_access_token()


class TestBuildApp:

    def test_confidential_client_when_secret_configured(self, monkeypatch):
        confidential = MagicMock()
        monkeypatch.setattr(auth.msal, "ConfidentialClientApplication", confidential)

        auth._build_app({"client_id": "id", "client_secret": "s", "tenant": "contoso"}, cache=None)

        kwargs = confidential.call_args[1]
        assert kwargs["client_credential"] == "s"
        assert kwargs["authority"] == "https://login.microsoftonline.com/contoso"

    def test_public_client_without_secret(self, monkeypatch):
        public = MagicMock()
        monkeypatch.setattr(auth.msal, "PublicClientApplication", public)

        auth._build_app({"client_id": "id", "client_secret": None, "tenant": None}, cache=None)

        assert public.call_args[1]["authority"] == "https://login.microsoftonline.com/common"


class TestLoginStatus:

    def test_not_configured(self):
        status = auth.get_login_status()
        assert status["configured"] is False
        assert status["logged_in"] is False

    def test_reads_account_from_cache(self, configured):
        cache_path = get_token_cache_path()
        cache_path.write_text(json.dumps({
            "Account": {
                "uid.utid-login.microsoftonline.com-common": {
                    "home_account_id": "uid.utid",
                    "environment": "login.microsoftonline.com",
                    "realm": "common",
                    "local_account_id": "uid",
                    "username": "me@example.com",
                    "authority_type": "MSSTS",
                }
            }
        }))

        status = auth.get_login_status()

        assert status["client_type"] == "confidential"
        assert status["logged_in"] is True
        assert status["username"] == "me@example.com"

    def test_logout_removes_cache(self, configured):
        get_token_cache_path().write_text("{}")

        assert auth.logout() is True
        assert auth.logout() is False
