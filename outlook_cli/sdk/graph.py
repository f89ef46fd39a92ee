"""Microsoft Graph HTTP client for the outlook-cli SDK.

Wraps a ``requests.Session`` with bearer authentication, retries for
throttling and transient failures, and a single forced token refresh when
Graph answers 401.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from .exceptions import GraphAPIError
from .timing import time_api_call

logger = logging.getLogger(__name__)

BASE_URL = "https://graph.microsoft.com/v1.0"
REQUEST_TIMEOUT_SECS = 30
MAX_RETRIES = 3
INITIAL_BACKOFF_SECS = 1.0

RETRYABLE_STATUSES = {408, 429}


def encode_segment(value: str) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(value, safe="")


def is_retryable_status(status_code: int) -> bool:
    """Rate limiting, request timeouts and server errors are retried."""
    return status_code in RETRYABLE_STATUSES or 500 <= status_code < 600


def get_retry_delay(response: Optional[requests.Response], attempt: int) -> float:
    """
    Seconds to wait before retry number ``attempt`` (0-based).

    Graph sends Retry-After (in seconds) when throttling; otherwise the
    delay doubles on each attempt: 1s, 2s, 4s...
    """
    if response is not None:
        retry_after = response.headers.get("Retry-After", "")
        if retry_after.strip().isdigit():
            return float(retry_after.strip())
    return INITIAL_BACKOFF_SECS * (2 ** attempt)


def _error_from_response(response: requests.Response) -> GraphAPIError:
    """Build a GraphAPIError from Graph's {"error": {"code", "message"}} envelope."""
    body = response.text or ""
    code = message = None
    try:
        error = response.json().get("error") or {}
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message")
    except ValueError:
        pass
    return GraphAPIError(response.status_code, body=body, code=code, message=message)


class GraphClient:
    """
    Authenticated client for the Microsoft Graph v1.0 endpoint.

    Args:
        token_provider: Callable returning a bearer token; called with
            ``force_refresh=True`` after a 401. Defaults to
            :func:`outlook_cli.sdk.auth.get_access_token`.
        session: Optional preconfigured ``requests.Session``.
        sleep: Delay function used between retries.
    """

    def __init__(
        self,
        token_provider: Callable[..., str] = None,
        session: requests.Session = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if token_provider is None:
            from .auth import get_access_token
            token_provider = get_access_token
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.sleep = sleep
        self._token = None

    def _get_token(self, force_refresh: bool = False) -> str:
        if self._token is None or force_refresh:
            if force_refresh:
                self._token = self.token_provider(force_refresh=True)
            else:
                self._token = self.token_provider()
        return self._token

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{BASE_URL}{endpoint}"

    def _send(self, method, url, params, json, headers) -> requests.Response:
        request_headers = {"Authorization": f"Bearer {self._get_token()}"}
        if headers:
            request_headers.update(headers)
        return self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=request_headers,
            timeout=REQUEST_TIMEOUT_SECS,
        )

    @time_api_call
    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Send a request to Graph and return the decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to BASE_URL, or an absolute URL (e.g. @odata.nextLink)
            params: Query parameters
            json: JSON request body
            headers: Extra request headers

        Returns:
            Response JSON, or an empty dict for 204/empty responses

        Raises:
            GraphAPIError: For non-retryable failures or once retries are exhausted
            requests.RequestException: If the network keeps failing
        """
        url = self._url(endpoint)
        refreshed = False
        attempt = 0

        while True:
            logger.debug(f"{method} {url} params={params}")
            try:
                response = self._send(method, url, params, json, headers)
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < MAX_RETRIES:
                    delay = get_retry_delay(None, attempt)
                    logger.warning(f"Request failed ({e}), retrying in {delay:.1f}s...")
                    self.sleep(delay)
                    attempt += 1
                    continue
                raise

            if response.ok:
                if response.status_code == 204 or not response.content:
                    return {}
                return response.json()

            if response.status_code == 401 and not refreshed:
                logger.debug("Access token rejected, forcing refresh")
                self._get_token(force_refresh=True)
                refreshed = True
                continue

            if is_retryable_status(response.status_code) and attempt < MAX_RETRIES:
                delay = get_retry_delay(response, attempt)
                logger.warning(f"Rate limited ({response.status_code}), retrying in {delay:.1f}s...")
                self.sleep(delay)
                attempt += 1
                continue

            error = _error_from_response(response)
            logger.debug(f"Graph API error: {error}")
            raise error

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.request("GET", endpoint, params=params, headers=headers)

    def post(self, endpoint: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("POST", endpoint, json=json)

    def patch(self, endpoint: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("PATCH", endpoint, json=json)

    def paginate(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Collect ``value`` items across pages by following @odata.nextLink.

        The next link already embeds the query, so params are only sent
        with the first request.
        """
        items = []
        next_endpoint = endpoint
        next_params = params
        while next_endpoint:
            page = self.get(next_endpoint, params=next_params, headers=headers)
            items.extend(page.get("value", []))
            if limit is not None and len(items) >= limit:
                return items[:limit]
            next_endpoint = page.get("@odata.nextLink")
            next_params = None
        return items
