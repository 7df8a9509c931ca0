# thin async wrapper around the storefront REST API
from typing import Any, Callable, Dict, Optional

import httpx

from api.errors import ApiError
from utils.logger import get_logger

_logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"


class ApiClient:
    """
    Every call opens a short lived httpx.AsyncClient, sends JSON and returns the
    decoded JSON body. Any failure surfaces as ApiError.

    token_getter is asked for the bearer token on every request, so the client
    always follows the current session without holding it.
    transport is only meant for tests (httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token_getter: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token_getter = token_getter
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_getter() if self._token_getter else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        _logger.debug(f"{method} {path} params={params}")
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.request(method, path, params=params, json=json)
            except httpx.HTTPError as e:
                _logger.warning(f"{method} {path} failed: {e!r}")
                raise ApiError(f"Could not reach the server: {e}") from e

        if resp.is_error:
            message = _error_message(resp)
            _logger.warning(f"{method} {path} -> {resp.status_code} {message}")
            raise ApiError(message, status=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("Server sent an invalid response.", resp.status_code) from e

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase or "Request failed"
