"""Authentication and token management for the outlook-cli SDK.

Uses MSAL for the Microsoft identity platform. ``login`` runs the OAuth 2.0
authorization code flow (PKCE and state are handled by MSAL) with a
loopback redirect on an OS-assigned port. Tokens are kept in a serialized
MSAL token cache; ``get_access_token`` reuses the cached access token and
transparently redeems the refresh token once it has expired.
"""

import logging
import time
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Callable, Dict, Optional
from urllib.parse import urlparse, parse_qs

import msal

from .config import get_client_settings, get_token_cache_path, ensure_config_dir, write_secure
from .exceptions import AuthError, NotConfiguredError, NotLoggedInError

logger = logging.getLogger(__name__)

AUTHORITY_HOST = "https://login.microsoftonline.com"

# Mail.ReadWrite: read, move and categorize messages
# Mail.Send: reserved for sending support
# MailboxSettings.Read: master category list
# offline_access is requested by MSAL itself and must not be listed here
SCOPES = [
    "Mail.ReadWrite",
    "Mail.Send",
    "MailboxSettings.Read",
]

LOGIN_MAX_RETRIES = 3
CALLBACK_TIMEOUT_SECS = 120

SUCCESS_PAGE = (
    "<html><body><h1>Authentication successful!</h1>"
    "<p>You can close this window.</p></body></html>"
)
FAILURE_PAGE = (
    "<html><body><h1>Authentication failed</h1>"
    "<p>Return to the terminal for details.</p></body></html>"
)


def get_authority(tenant: str) -> str:
    """Build the authority URL for a tenant ('common' accepts any account)."""
    return f"{AUTHORITY_HOST}/{tenant or 'common'}"


def _load_token_cache() -> msal.SerializableTokenCache:
    """Load the MSAL token cache from disk, or return an empty one."""
    cache = msal.SerializableTokenCache()
    cache_path = get_token_cache_path()
    if cache_path.exists():
        try:
            cache.deserialize(cache_path.read_text())
            logger.debug(f"Loaded token cache from {cache_path}")
        except ValueError as e:
            logger.warning(f"Ignoring unreadable token cache {cache_path}: {e}")
    return cache


def _save_token_cache(cache: msal.SerializableTokenCache):
    """Persist the token cache if MSAL reports a change."""
    if cache.has_state_changed:
        ensure_config_dir()
        write_secure(get_token_cache_path(), cache.serialize())
        logger.debug("Saved token cache")


def _build_app(settings: dict, cache: msal.SerializableTokenCache):
    """
    Create the MSAL client application for the configured registration.

    A confidential client is used when a client secret is configured
    (Azure "Web" platform registrations); otherwise a public client.
    """
    if not settings.get("client_id"):
        raise NotConfiguredError()

    authority = get_authority(settings.get("tenant"))
    if settings.get("client_secret"):
        logger.debug("Using MSAL confidential client application")
        return msal.ConfidentialClientApplication(
            client_id=settings["client_id"],
            client_credential=settings["client_secret"],
            authority=authority,
            token_cache=cache,
        )
    logger.debug("Using MSAL public client application")
    return msal.PublicClientApplication(
        client_id=settings["client_id"],
        authority=authority,
        token_cache=cache,
    )


class _CallbackHandler(BaseHTTPRequestHandler):
    """Captures the query string of the OAuth redirect."""

    def do_GET(self):
        params = {k: v[0] for k, v in parse_qs(urlparse(self.path).query).items()}
        if "code" not in params and "error" not in params:
            # favicon and other stray requests
            self.send_response(404)
            self.end_headers()
            return

        self.server.auth_response = params
        page = FAILURE_PAGE if "error" in params else SUCCESS_PAGE
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.end_headers()
        self.wfile.write(page.encode("utf-8"))

    def log_message(self, format, *args):
        logger.debug("Callback server: " + format % args)


def _create_callback_server() -> HTTPServer:
    """Bind the loopback listener on an OS-assigned port."""
    server = HTTPServer(("127.0.0.1", 0), _CallbackHandler)
    server.auth_response = None
    return server


def wait_for_callback(server: HTTPServer, timeout: float = CALLBACK_TIMEOUT_SECS) -> Dict[str, str]:
    """
    Serve requests until the OAuth redirect arrives or the timeout expires.

    Returns:
        The redirect query parameters (single-valued).

    Raises:
        AuthError: On timeout, or when the redirect carries an error.
    """
    deadline = time.monotonic() + timeout
    while server.auth_response is None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise AuthError("Timeout waiting for OAuth callback")
        server.timeout = remaining
        server.handle_request()

    params = server.auth_response
    if "error" in params:
        raise AuthError(
            f"Authorization failed: {params['error']} - {params.get('error_description', '')}".rstrip(" -"),
            error=params["error"],
            description=params.get("error_description"),
        )
    if "code" not in params:
        raise AuthError("No code in callback")
    if "state" not in params:
        raise AuthError("No state in callback")
    return params


def _has_refresh_token(cache: msal.SerializableTokenCache) -> bool:
    return bool(cache.find(msal.TokenCache.CredentialType.REFRESH_TOKEN))


def _try_login(settings: dict, open_browser: Callable[[str], bool], timeout: float) -> dict:
    cache = msal.SerializableTokenCache()
    app = _build_app(settings, cache)

    server = _create_callback_server()
    try:
        port = server.server_address[1]
        flow = app.initiate_auth_code_flow(
            SCOPES,
            redirect_uri=f"http://localhost:{port}",
            prompt="select_account",
        )
        if "auth_uri" not in flow:
            raise AuthError.from_result(flow, "Failed to start authorization")

        print("Opening browser for authentication...")
        print(f"If the browser does not open, visit:\n  {flow['auth_uri']}")
        open_browser(flow["auth_uri"])

        print(f"Waiting for OAuth callback on port {port} (timeout: {int(timeout)}s)...")
        params = wait_for_callback(server, timeout=timeout)
    finally:
        server.server_close()

    try:
        result = app.acquire_token_by_auth_code_flow(flow, params, scopes=SCOPES)
    except ValueError as e:
        # MSAL raises ValueError when the returned state does not match
        raise AuthError(f"CSRF token mismatch: {e}") from e

    if "access_token" not in result:
        raise AuthError.from_result(result, "Failed to exchange code for token")
    if not _has_refresh_token(cache):
        raise AuthError("No refresh token received")

    ensure_config_dir()
    write_secure(get_token_cache_path(), cache.serialize())

    claims = result.get("id_token_claims") or {}
    return {
        "username": claims.get("preferred_username") or claims.get("email"),
        "scopes": (result.get("scope") or "").split(),
        "expires_in": result.get("expires_in"),
    }


def login(
    open_browser: Callable[[str], bool] = webbrowser.open,
    timeout: float = CALLBACK_TIMEOUT_SECS,
    max_attempts: int = LOGIN_MAX_RETRIES,
) -> dict:
    """
    Authenticate interactively in the browser and store the tokens.

    Any existing token cache is discarded first so that consent is requested
    for the current scope set.

    Args:
        open_browser: Callable that opens a URL (default webbrowser.open)
        timeout: Seconds to wait for the OAuth redirect per attempt
        max_attempts: Number of attempts before giving up

    Returns:
        Dict with 'username', 'scopes' and 'expires_in'

    Raises:
        NotConfiguredError: If no client id is configured
        AuthError: If every attempt fails
    """
    settings = get_client_settings()
    if not settings.get("client_id"):
        raise NotConfiguredError()

    logout()

    last_error = None
    for attempt in range(max_attempts):
        if attempt > 0:
            logger.warning(f"Retrying login (attempt {attempt + 1}/{max_attempts})...")
        try:
            return _try_login(settings, open_browser, timeout)
        except (AuthError, OSError) as e:
            logger.error(f"Login failed: {e}")
            last_error = e

    if isinstance(last_error, AuthError):
        raise last_error
    raise AuthError(f"Login failed after {max_attempts} attempts: {last_error}")


def get_access_token(force_refresh: bool = False) -> str:
    """
    Return a valid access token for Graph, refreshing it if needed.

    Args:
        force_refresh: Skip the cached access token and redeem the refresh token

    Raises:
        NotConfiguredError: If no client id is configured
        NotLoggedInError: If there is no cached login or it can no longer be refreshed
    """
    settings = get_client_settings()
    if not settings.get("client_id"):
        raise NotConfiguredError()
    if not get_token_cache_path().exists():
        raise NotLoggedInError()

    cache = _load_token_cache()
    app = _build_app(settings, cache)

    accounts = app.get_accounts()
    if not accounts:
        raise NotLoggedInError()

    result = app.acquire_token_silent(SCOPES, account=accounts[0], force_refresh=force_refresh)
    if not result or "access_token" not in result:
        reason = result.get("error_description") if result else "no cached token"
        logger.debug(f"Silent token acquisition failed: {reason}")
        raise NotLoggedInError("Session expired. Run 'outlook login' again")

    _save_token_cache(cache)
    return result["access_token"]


def logout() -> bool:
    """Delete the token cache. Returns True if there was one."""
    cache_path = get_token_cache_path()
    if cache_path.exists():
        cache_path.unlink()
        logger.debug(f"Removed token cache {cache_path}")
        return True
    return False


def get_login_status() -> dict:
    """
    Describe the local configuration and login state without network access.

    Returns a dict with:
        - configured: True if a client id is available
        - client_type: 'confidential' or 'public' (None if not configured)
        - tenant: configured tenant
        - logged_in: True if the token cache holds an account
        - username: cached account username (may be None)
        - token_cache: path of the token cache file
    """
    settings = get_client_settings()
    status = {
        "configured": bool(settings.get("client_id")),
        "client_type": None,
        "tenant": settings.get("tenant"),
        "logged_in": False,
        "username": None,
        "token_cache": str(get_token_cache_path()),
    }
    if not status["configured"]:
        return status

    status["client_type"] = "confidential" if settings.get("client_secret") else "public"
    if get_token_cache_path().exists():
        cache = _load_token_cache()
        accounts = cache.find(msal.TokenCache.CredentialType.ACCOUNT)
        if accounts:
            status["logged_in"] = True
            status["username"] = accounts[0].get("username")
    return status
