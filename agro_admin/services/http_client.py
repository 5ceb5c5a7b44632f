"""Send authenticated requests to the admin REST API and classify failures."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from agro_admin.core.errors import (
    AdminError,
    AuthError,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)
TIMEOUT_SECONDS = 15.0
USER_AGENT = "Agro-Admin/1.0"

TokenProvider = Callable[[], str | None]
LanguageProvider = Callable[[], str]


def extract_error_message(payload: Any) -> str | None:
    """Pick the most useful human-readable message from an error body.

    Order: ``detail``, ``message``, ``error``, then the first entry of the
    first per-field error list (e.g. ``{"banner": ["Invalid image"]}``).
    """
    if isinstance(payload, str):
        return payload.strip() or None
    if isinstance(payload, list):
        return extract_error_message(payload[0]) if payload else None
    if not isinstance(payload, dict):
        return None

    for key in ("detail", "message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, (list, dict)) and value:
            nested = extract_error_message(value)
            if nested:
                return nested

    for value in payload.values():
        if isinstance(value, list) and value and isinstance(value[0], str):
            return value[0]
    return None


def extract_field_errors(payload: Any) -> dict[str, list[str]]:
    """Collect DRF-style ``{"field": ["msg", ...]}`` entries."""
    if not isinstance(payload, dict):
        return {}
    errors: dict[str, list[str]] = {}
    for key, value in payload.items():
        if key in ("detail", "message", "error", "code"):
            continue
        if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
            errors[key] = list(value)
        elif isinstance(value, str) and key != "status":
            errors[key] = [value]
    return errors


class ApiClient:
    """Thin async adapter over httpx; no business logic.

    The bearer token and language are read from the injected providers at the
    start of every request, so a login/logout or language switch takes effect
    on the next call without rebuilding the client.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider,
        language_provider: LanguageProvider,
        timeout: float = TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token_provider = token_provider
        self._language_provider = language_provider
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty).

        Raises:
            AuthError: no token for an authenticated call, or HTTP 401/403
            NotFoundError: HTTP 404
            ValidationError: HTTP 400/422 with per-field errors
            ServerError: any other non-2xx response
            NetworkError: timeout or transport failure
        """
        headers = {"Accept-Language": self._language_provider()}
        if authenticated:
            token = self._token_provider()
            if not token:
                raise AuthError()
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out: {e}")
            raise NetworkError("Request timed out, please try again") from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkError() from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        if response.is_success:
            return self._decode(response)
        raise self._error_for(response)

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(f"Non-JSON body from {response.request.url}, ignoring it")
            return None

    @staticmethod
    def _error_for(response: httpx.Response) -> AdminError:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        status_code = response.status_code
        message = extract_error_message(payload)
        logger.warning(
            f"{response.request.method} {response.request.url.path} failed: "
            f"HTTP {status_code}: {message or response.text[:200]}"
        )

        if status_code in (401, 403):
            return AuthError(message, status_code=status_code)
        if status_code == 404:
            return NotFoundError(message, status_code=status_code)
        if status_code in (400, 422):
            field_errors = extract_field_errors(payload)
            if field_errors:
                return ValidationError(message, field_errors=field_errors, status_code=status_code)
        return ServerError(message, status_code=status_code)
