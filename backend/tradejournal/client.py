"""
Async HTTP client for the Trade Journal API.

Holds the signed-in session in memory and publishes session changes to
subscribers, which makes it usable as the ``AuthProvider`` behind an
``AuthStateHolder``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from tradejournal.auth.holder import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthChangeCallback,
    AuthSession,
    AuthUser,
    Unsubscribe,
)
from tradejournal.utils.credentials import require_backend_credentials
from tradejournal.utils.errors import BackendError, InvalidCredentialsError, SessionExpiredError

DEFAULT_TIMEOUT = 10.0


def _parse_expiry(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class JournalClient:
    """Thin async wrapper over the journal REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key

        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(base_url=base_url, timeout=timeout)
        elif base_url:
            http_client.base_url = base_url
        self._http = http_client
        self._http.headers.update(headers)

        self._session: Optional[AuthSession] = None
        self._subscribers: List[AuthChangeCallback] = []

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "JournalClient":
        """Build from backend settings; raises ConfigurationError when the URL or anon key is unusable."""
        require_backend_credentials(settings)
        return cls(settings.backend_url, api_key=settings.backend_anon_key or None, **kwargs)

    async def __aenter__(self) -> "JournalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ---------- session events ----------

    @property
    def current_session(self) -> Optional[AuthSession]:
        return self._session

    def on_auth_state_change(self, callback: AuthChangeCallback) -> Unsubscribe:
        """Subscribe to session changes; returns the unsubscribe callable."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event, self._session)
            except Exception:
                logger.exception(f"Auth subscriber failed handling {event}")

    def _auth_headers(self) -> Dict[str, str]:
        if not self._session:
            return {}
        return {"Authorization": f"Bearer {self._session.access_token}"}

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
            message = body.get("message") or body.get("detail") or response.text
        except ValueError:
            message = response.text
        raise BackendError(f"{action} failed: {message}", status_code=response.status_code)

    # ---------- auth ----------

    async def _fetch_session(self, token: str) -> Optional[AuthSession]:
        response = await self._http.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
        if response.status_code == 401:
            return None
        self._raise_for_status(response, "Session lookup")

        data = response.json()
        user = data["user"]
        return AuthSession(
            access_token=token,
            user=AuthUser(id=user["id"], email=user.get("email")),
            expires_at=_parse_expiry(data.get("expires_at")),
        )

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session and notify subscribers."""
        response = await self._http.post("/auth/login", json={"email": email, "password": password})
        if response.status_code == 401:
            raise InvalidCredentialsError("Incorrect email or password")
        self._raise_for_status(response, "Sign-in")

        token = response.json()["access_token"]
        session = await self._fetch_session(token)
        if session is None:
            raise BackendError("Sign-in succeeded but the issued token was rejected", status_code=401)

        self._session = session
        self._emit(SIGNED_IN)
        return session

    async def get_session(self) -> Optional[AuthSession]:
        """
        Return the current session, verified with the API.

        A rejected token clears the stored session and returns None.
        """
        if self._session is None:
            return None

        session = await self._fetch_session(self._session.access_token)
        if session is None:
            logger.info("Stored session rejected by the API, clearing it")
            self._session = None
            self._emit(SIGNED_OUT)
            return None

        self._session = session
        return session

    async def sign_out(self) -> None:
        """
        End the session. Local state is cleared even when the request fails;
        the failure is then re-raised.
        """
        headers = self._auth_headers()
        self._session = None
        self._emit(SIGNED_OUT)

        if headers:
            response = await self._http.post("/auth/logout", headers=headers)
            self._raise_for_status(response, "Sign-out")

    # ---------- data ----------

    def _data_headers(self) -> Dict[str, str]:
        if self._session is None:
            raise SessionExpiredError("Sign in before requesting journal data")
        return self._auth_headers()

    def _check_data_response(self, response: httpx.Response, action: str) -> None:
        if response.status_code == 401:
            self._session = None
            self._emit(SIGNED_OUT)
            raise SessionExpiredError("Session expired, sign in again")
        self._raise_for_status(response, action)

    @staticmethod
    def _filter_params(filters: Dict[str, Any]) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key, value in filters.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                value = ",".join(str(v) for v in value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            params[key] = value
        return params

    async def list_confluence_trades(self, page: int = 1, limit: int = 50, **filters: Any) -> Dict[str, Any]:
        """One page of trades: ``{"trades", "totalCount", "requestId"}``."""
        params = self._filter_params(filters)
        params.update({"page": page, "limit": limit})
        response = await self._http.get("/api/confluence-trades", params=params, headers=self._data_headers())
        self._check_data_response(response, "Trade listing")
        return response.json()

    async def get_confluence_stats(self, **filters: Any) -> Dict[str, Any]:
        """Aggregate statistics for the filtered trades."""
        response = await self._http.get(
            "/api/confluence-stats",
            params=self._filter_params(filters),
            headers=self._data_headers(),
        )
        self._check_data_response(response, "Statistics")
        return response.json()
