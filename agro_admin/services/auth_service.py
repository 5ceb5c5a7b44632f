"""Auth gate: obtain, persist and hand out the bearer token."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from agro_admin.core.errors import AuthError, ServerError, ValidationError
from agro_admin.services.http_client import ApiClient

logger = logging.getLogger(__name__)

LOGIN_PATH = "/user/login/"


class TokenPair(BaseModel):
    access: str
    refresh: str | None = None


class TokenStore:
    """JSON file holding the current token pair between runs."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._pair: TokenPair | None = self._load()

    @property
    def access_token(self) -> str | None:
        return self._pair.access if self._pair else None

    @property
    def refresh_token(self) -> str | None:
        return self._pair.refresh if self._pair else None

    def save(self, pair: TokenPair) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(pair.model_dump_json(), encoding="utf-8")
        self._pair = pair
        logger.info(f"Saved token pair to {self.path}")

    def clear(self) -> None:
        self._pair = None
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove token file {self.path}: {e}")

    def _load(self) -> TokenPair | None:
        if not self.path.exists():
            return None
        try:
            return TokenPair.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # Corrupt file counts as logged out
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return None


class AuthGate:
    """Login/logout and the token provider consumed by ApiClient."""

    def __init__(self, client: ApiClient, store: TokenStore):
        self._client = client
        self._store = store

    @property
    def is_authenticated(self) -> bool:
        return self._store.access_token is not None

    def token(self) -> str | None:
        """Current access token, read fresh on every call."""
        return self._store.access_token

    async def login(self, username: str, password: str) -> TokenPair:
        """Exchange credentials for a token pair and persist it.

        Raises:
            ValidationError: blank username or password (no request is sent)
            AuthError: credentials rejected or no access token in the response
        """
        if not (username or "").strip() or not (password or "").strip():
            raise ValidationError("Please enter both username and password")

        try:
            payload = await self._client.post(
                LOGIN_PATH,
                json={"username": username, "password": password},
                authenticated=False,
            )
        except (ValidationError, ServerError) as e:
            if e.status_code == 400:
                raise AuthError(e.message, status_code=e.status_code) from e
            raise

        data = payload.get("data") if isinstance(payload, dict) else None
        access = data.get("access") if isinstance(data, dict) else None
        if not access:
            raise AuthError("Login failed: Access token not found in response")

        pair = TokenPair(access=access, refresh=data.get("refresh"))
        self._store.save(pair)
        logger.info(f"User {username} logged in")
        return pair

    def logout(self) -> None:
        self._store.clear()
        logger.info("Logged out, token pair removed")
