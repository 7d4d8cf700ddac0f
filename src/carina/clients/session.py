"""Authenticated HTTP session shared by the backend clients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import requests

from carina import USER_AGENT
from carina.core.exceptions import (
    ApiError,
    AuthenticationError,
    CarinaError,
    NotFoundError,
    TokenExpiredError,
    TransientNetworkError,
)
from carina.utils.logging import get_logger
from carina.utils.retry import refresh_and_retry

if TYPE_CHECKING:
    from carina.interfaces.account import Account

logger = get_logger(__name__)


def extract_error_message(response: requests.Response) -> str:
    """Pull a readable message out of an error response.

    Understands the Magnum ({"errors": [{"detail": ...}]}), Keystone
    ({"error": {"message": ...}}) and make-swarm ({"message": ...}) shapes and
    falls back to the raw body.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            detail = errors[0].get("detail") or errors[0].get("title")
            if detail:
                return str(detail)
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "error_message", "faultstring"):
            if body.get(key):
                return str(body[key])

    text = (response.text or "").strip()
    return text or response.reason or f"HTTP {response.status_code}"


class Session:
    """Token-authenticated transport bound to one service endpoint.

    When the backend answers 401 the session calls refresh(), which asks the
    owning account for a new token, and replays the request once.
    """

    def __init__(
        self,
        endpoint: str,
        token: str,
        account: Account | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        http: requests.Session | None = None,
    ):
        """Initialize session.

        Args:
            endpoint: Service endpoint, e.g. https://magnum.example.com/v1
            token: Authentication token
            account: Account able to reauthenticate (optional)
            timeout: Per-request timeout in seconds
            headers: Extra headers sent with every request
            http: Existing requests session (optional)
        """
        self.endpoint = endpoint.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._account = account
        self._http = http or requests.Session()
        self._http.headers.update(
            {
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            }
        )
        if headers:
            self._http.headers.update(headers)

    def refresh(self) -> None:
        """Obtain a new token from the owning account.

        Raises:
            AuthenticationError: If there is no account or it cannot reauthenticate
        """
        if self._account is None:
            raise AuthenticationError("Session token expired and cannot be refreshed")

        logger.debug("session_token_refreshing", endpoint=self.endpoint)
        self.token = self._account.reauthenticate()
        # The identity catalog may resolve a different service endpoint
        if self._account.endpoint:
            self.endpoint = self._account.endpoint.rstrip("/")

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.endpoint}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> requests.Response:
        """Send a request, refreshing the token once on 401.

        Args:
            method: HTTP method
            path: Path relative to the endpoint, or an absolute URL
            json: JSON body (optional)
            params: Query parameters (optional)

        Returns:
            Successful response

        Raises:
            TokenExpiredError: If the token is still rejected after a refresh
            NotFoundError: On 404
            ApiError: On any other non-success status
            TransientNetworkError: On connection failures and timeouts
        """
        max_attempts = 2 if self._account is not None else 1
        for attempt in refresh_and_retry(self.refresh, (TokenExpiredError,), max_attempts):
            with attempt:
                response = self._send(method, path, json=json, params=params)
        return response

    def request_json(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and decode the JSON body.

        Returns:
            Decoded body, or None for an empty response
        """
        response = self.request(method, path, json=json, params=params)
        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                f"Invalid JSON in response from {method} {self.url(path)}",
                status_code=response.status_code,
            ) from e

    def _send(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = self.url(path)
        logger.debug("http_request", method=method, url=url)

        try:
            response = self._http.request(
                method,
                url,
                headers={"X-Auth-Token": self.token},
                json=json,
                params=params,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error("http_request_failed", method=method, url=url, error=str(e))
            raise TransientNetworkError(f"{method} {url} failed: {e}") from e
        except requests.RequestException as e:
            logger.error("http_request_failed", method=method, url=url, error=str(e))
            raise CarinaError(f"{method} {url} failed: {e}") from e

        status = response.status_code
        if status < 400:
            return response

        message = extract_error_message(response)
        logger.debug("http_error_response", method=method, url=url, status=status)

        if status == 401:
            raise TokenExpiredError(f"Token rejected by {url}: {message}")
        if status == 404:
            raise NotFoundError(message)
        raise ApiError(f"{method} {url} returned {status}: {message}", status_code=status)
