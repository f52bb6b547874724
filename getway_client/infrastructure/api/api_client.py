"""
REST client for the GetWay backend.

One request per call, bounded by a single deadline that covers connect,
headers and body, with every failure normalized into an `ApiError` subclass.
No retries: callers that want them add them.
"""

from __future__ import annotations

import threading
from typing import Any

import requests

from getway_client.domains.errors import (
    ApiError,
    GenericApiError,
    HttpStatusError,
    NetworkUnreachableError,
    RequestTimeoutError,
)
from getway_client.domains.models import ApiResponse
from getway_client.infrastructure.storage.token_store import TokenStore
from getway_client.utils.config import ClientConfig
from getway_client.utils.logger import get_logger

logger = get_logger()

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def _decode_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _http_error(response: requests.Response, payload: Any) -> HttpStatusError:
    status_code = response.status_code
    message = ""
    errors = None
    if isinstance(payload, dict):
        message = str(payload.get("message") or "")
        errors = payload.get("errors")
    if not message:
        message = f"HTTP {status_code}: {response.reason or ''}".rstrip()
    return HttpStatusError(status_code, message, errors)


def _send_within(timeout: float, method: str, url: str, kwargs: dict[str, Any]) -> requests.Response:
    """
    Run `requests.request` on a worker thread and give it `timeout` seconds
    in total.

    requests applies its own timeout to each socket operation, so a server
    that trickles bytes keeps a plain call alive indefinitely. Errors raised
    by the worker are re-raised here. An abandoned worker still ends on its
    own per-read timeout or when the server closes.
    """
    outcome: dict[str, Any] = {}

    def worker() -> None:
        try:
            outcome["response"] = requests.request(method, url, **kwargs)
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=worker, name="getway-request", daemon=True)
    thread.start()
    thread.join(timeout)
    if thread.is_alive():
        raise requests.exceptions.Timeout(f"No complete response within {timeout:.2f}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["response"]


class ApiClient:
    """
    Thin wrapper over `requests` that speaks the `{status, message, data, errors}`
    envelope. Reads the bearer token from the token store; never writes to it.
    """

    def __init__(self, config: ClientConfig, token_store: TokenStore) -> None:
        self._config = config
        self._tokens = token_store

    @property
    def base_url(self) -> str:
        return self._config.api_base_url

    def _headers(self, include_auth: bool, multipart: bool = False) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if not multipart:
            # requests sets the multipart boundary itself.
            headers["Content-Type"] = "application/json"
        if include_auth:
            token = self._tokens.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        include_auth: bool = True,
        timeout_ms: int | None = None,
        params: dict[str, Any] | None = None,
        files: Any = None,
    ) -> ApiResponse:
        """
        Perform one request against `base_url + endpoint`.

        Args:
            endpoint: Path such as "/auth/login".
            method: GET, POST, PUT, PATCH or DELETE.
            body: JSON-serializable payload; sent only for POST/PUT/PATCH.
                With `files`, sent as multipart form fields instead.
            include_auth: Attach "Authorization: Bearer <token>" when a token is stored.
            timeout_ms: Overrides the configured timeout. It is one deadline
                for the whole exchange, from connect to the last body byte.
            params: Query-string values; None values are dropped.
            files: Multipart file parts, as accepted by `requests`.

        Returns:
            The decoded envelope of a 2xx response, unvalidated.

        Raises:
            RequestTimeoutError: No complete response before the deadline.
            NetworkUnreachableError: The server could not be reached.
            HttpStatusError: Non-2xx response.
            GenericApiError: Anything else, including a 2xx body that is not JSON.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise GenericApiError(f"Unsupported HTTP method: {method}")
        url = f"{self._config.api_base_url}{endpoint}"
        timeout = (timeout_ms if timeout_ms is not None else self._config.api_timeout_ms) / 1000.0
        multipart = files is not None

        kwargs: dict[str, Any] = {
            "headers": self._headers(include_auth, multipart=multipart),
            "timeout": timeout,
        }
        if params:
            kwargs["params"] = params
        if multipart:
            kwargs["files"] = files
            if body:
                kwargs["data"] = body
        elif body is not None and method in BODY_METHODS:
            kwargs["json"] = body

        try:
            logger.info("%s %s", method, endpoint)
            response = _send_within(timeout, method, url, kwargs)
        except requests.exceptions.Timeout as e:
            logger.warning("%s %s timed out after %.1fs", method, endpoint, timeout)
            raise RequestTimeoutError() from e
        except requests.exceptions.ConnectionError as e:
            logger.warning("%s %s could not reach %s: %s", method, endpoint, self._config.api_base_url, e)
            raise NetworkUnreachableError() from e
        except requests.exceptions.RequestException as e:
            logger.exception("%s %s failed: %s", method, endpoint, e)
            raise GenericApiError(str(e)) from e
        except Exception as e:
            # e.g. a body json.dumps cannot encode, raised while preparing the request
            logger.exception("%s %s could not be sent: %s", method, endpoint, e)
            raise GenericApiError(str(e)) from e

        payload = _decode_json(response)
        status_code = response.status_code
        if not 200 <= status_code < 300:
            err = _http_error(response, payload)
            logger.warning("%s %s returned %s: %s", method, endpoint, status_code, err.message)
            raise err
        if payload is None:
            logger.warning("%s %s returned %s without a JSON body", method, endpoint, status_code)
            raise GenericApiError("Invalid response from server")
        return ApiResponse.from_dict(payload)

    def get(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        return self.request(endpoint, method="GET", **kwargs)

    def post(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return self.request(endpoint, method="POST", body=body, **kwargs)

    def put(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return self.request(endpoint, method="PUT", body=body, **kwargs)

    def patch(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return self.request(endpoint, method="PATCH", body=body, **kwargs)

    def delete(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        return self.request(endpoint, method="DELETE", **kwargs)

    def health_check(self) -> bool:
        """True when GET /health answers with a 2xx. Failures are logged, not raised."""
        try:
            self.request("/health", include_auth=False)
            return True
        except ApiError as e:
            logger.warning("Backend health check failed: %s", e.message)
            return False
