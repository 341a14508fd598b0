"""Identity provider HTTP client (GoTrue-compatible auth API of the hosted backend)"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from comissio_ledger.config import settings
from comissio_ledger.domain.exceptions import AuthenticationError, IdentityUnavailableError
from comissio_ledger.domain.models import IdentitySession, SessionEvent
from comissio_ledger.infrastructure.observability.metrics import identity_failure_counter

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionEvent, Optional[IdentitySession]], None]

# Provider message for bad credentials, surfaced to the login form as-is otherwise
INVALID_CREDENTIALS = "Invalid login credentials"


class IdentityClient:
    """Client for sign-in, sign-out, token validation and session change notifications"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self._session: Optional[IdentitySession] = None
        self._listeners: List[SessionListener] = []

    # Session change notifications

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for SIGNED_IN / SIGNED_OUT / TOKEN_REFRESHED; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent, session: Optional[IdentitySession]) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    def get_session(self) -> Optional[IdentitySession]:
        """Current session, or None when signed out or expired"""
        if self._session is not None and not self._session.is_valid(datetime.now(timezone.utc)):
            return None
        return self._session

    # Provider calls

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        """
        Exchange an e-mail/password pair for a session.

        Raises:
            AuthenticationError: Credentials rejected
            IdentityUnavailableError: Timeout, transport failure or 5xx
        """
        data = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._parse_session(data)
        self._session = session
        logger.info("Operator signed in", extra={"user_id": session.user_id})
        self._emit(SessionEvent.SIGNED_IN, session)
        return session

    async def refresh(self, session: IdentitySession) -> IdentitySession:
        """Trade the session's refresh token for a new access token"""
        if not session.refresh_token:
            raise AuthenticationError("Session has no refresh token")
        return await self.exchange_refresh_token(session.refresh_token)

    async def exchange_refresh_token(self, refresh_token: str) -> IdentitySession:
        """
        Exchange a refresh token for a new session.

        The provider rotates refresh tokens, so the one passed in is spent.
        """
        data = await self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        refreshed = self._parse_session(data)
        self._session = refreshed
        self._emit(SessionEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    async def sign_out(self, session: IdentitySession | None = None) -> None:
        """Revoke the session at the provider and drop it locally"""
        target = session or self._session
        if target is not None:
            await self._request("POST", "/logout", token=target.access_token, expect_json=False)
        if self._session is not None and (target is None or self._session.user_id == target.user_id):
            self._session = None
        logger.info("Operator signed out", extra={"user_id": target.user_id if target else None})
        self._emit(SessionEvent.SIGNED_OUT, target)

    async def get_user(self, access_token: str) -> IdentitySession:
        """Validate a bearer token and return the session it represents"""
        data = await self._request("GET", "/user", token=access_token)
        try:
            return IdentitySession(
                access_token=access_token,
                refresh_token=None,
                expires_at=None,
                user_id=data["id"],
                email=data.get("email"),
            )
        except (KeyError, TypeError) as e:
            raise IdentityUnavailableError(f"Invalid user payload from identity provider: {e}") from e

    async def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        expect_json: bool = True,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        headers = {"apikey": self.api_key} if self.api_key else {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
                response.raise_for_status()
                return response.json() if expect_json else {}

            except httpx.TimeoutException as e:
                identity_failure_counter.labels(category="network").inc()
                raise IdentityUnavailableError(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    identity_failure_counter.labels(category="auth").inc()
                    raise AuthenticationError(self._error_message(e.response)) from e
                identity_failure_counter.labels(category="network").inc()
                raise IdentityUnavailableError(f"Identity provider error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                identity_failure_counter.labels(category="network").inc()
                raise IdentityUnavailableError(f"Identity provider unreachable: {e}") from e
            except ValueError as e:
                raise IdentityUnavailableError(f"Invalid response from identity provider: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"Authentication failed ({response.status_code})"
        if not isinstance(body, dict):
            return f"Authentication failed ({response.status_code})"
        message = body.get("error_description") or body.get("msg") or body.get("message")
        if message == INVALID_CREDENTIALS:
            return "Invalid e-mail or password"
        return message or f"Authentication failed ({response.status_code})"

    @staticmethod
    def _parse_session(data: Dict[str, Any]) -> IdentitySession:
        try:
            if data.get("expires_at"):
                expires_at = datetime.fromtimestamp(int(data["expires_at"]), tz=timezone.utc)
            elif data.get("expires_in"):
                expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))
            else:
                expires_at = None
            user = data["user"]
            return IdentitySession(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token"),
                expires_at=expires_at,
                user_id=user["id"],
                email=user.get("email"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise IdentityUnavailableError(f"Invalid session payload from identity provider: {e}") from e
