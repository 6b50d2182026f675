# backend/clients/restaurant_api.py
"""
HTTP client for the remote restaurant API.

Every call is made on behalf of the caller: the caller's bearer token is
forwarded as-is. Each request is a single attempt; transport failures become
ExternalServiceError (503) and error responses pass their status through as
UpstreamRequestError.
"""
import time
from typing import Any, Dict, Optional

import httpx

from config.logging import get_logger, log_remote_call
from core.exceptions import ExternalServiceError, UpstreamRequestError

logger = get_logger(__name__)

SERVICE_NAME = "Restaurant API"


class RestaurantApiClient:
    """Thin synchronous wrapper over a shared httpx.Client."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )

    def request(
        self,
        method: str,
        path: str,
        token: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        if params:
            params = {key: value for key, value in params.items() if value is not None and value != ""}

        start_time = time.time()
        try:
            response = self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            log_remote_call(method, path, duration=time.time() - start_time)
            logger.error(f"Remote {method} {path} failed: {e}")
            raise ExternalServiceError(SERVICE_NAME, f"{method} {path}") from e

        log_remote_call(method, path, response.status_code, time.time() - start_time)

        if response.status_code >= 400:
            raise UpstreamRequestError(
                status_code=response.status_code,
                message=self._error_message(response),
                path=path
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Remote {method} {path} returned a non-JSON body")
            raise ExternalServiceError(SERVICE_NAME, f"{method} {path}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("message", "error", "detail"):
                if isinstance(body.get(key), str) and body[key]:
                    return body[key]
        return response.reason_phrase or f"Remote request failed with status {response.status_code}"

    def get(self, path: str, token: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, token, params=params)

    def post(self, path: str, token: str, json: Any = None) -> Any:
        return self.request("POST", path, token, json=json)

    def put(self, path: str, token: str, json: Any = None) -> Any:
        return self.request("PUT", path, token, json=json)

    def delete(self, path: str, token: str) -> Any:
        return self.request("DELETE", path, token)

    def close(self) -> None:
        """Close the underlying connection pool."""
        if not self._client.is_closed:
            self._client.close()
