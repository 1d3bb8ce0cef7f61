"""
Session manager: login, refresh, revoke and request authentication.

Access tokens are stateless and cannot be revoked before they expire; a
revoked refresh token therefore still leaves any access token it already
produced usable for at most one access-token lifetime. Refresh tokens are
not rotated on use.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Callable, Optional, Protocol

from utils.exceptions import (
    AuthFailure,
    CredentialError,
    DuplicateToken,
    EntropyUnavailable,
    HeaderError,
    NotFound,
    TokenError,
)
from utils.security import (
    ISSUER,
    Secret,
    create_access_token,
    decode_access_token,
    get_bearer_token,
    hash_password,
    make_refresh_token,
    utc_now,
    verify_password,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
REFRESH_TOKEN_EXPIRES = timedelta(hours=144)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """Hash checked for unknown emails so they cost as much as a wrong password."""
    return hash_password(secrets.token_hex(16))


@dataclass(frozen=True)
class RefreshTokenRecord:
    user_id: str
    expires_at: datetime
    revoked_at: Optional[datetime] = None


class RefreshTokenStore(Protocol):
    """What the session manager needs from persistence."""

    def get_user_by_email(self, email: str) -> Any:
        """Return an object with `id` and `hashed_password`, or raise NotFound."""

    def insert_refresh_token(self, token: str, user_id: str, expires_at: datetime) -> None:
        """Persist a new token; raise DuplicateToken if the value exists."""

    def get_refresh_token(self, token: str) -> RefreshTokenRecord:
        """Return the stored token or raise NotFound."""

    def revoke_refresh_token(self, token: str) -> None:
        """Set revoked_at if unset. Unknown tokens are ignored."""


@dataclass(frozen=True)
class LoginResult:
    user: Any
    access_token: str
    refresh_token: str

    @property
    def identity(self) -> str:
        return str(self.user.id)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class SessionManager:
    def __init__(
        self,
        store: RefreshTokenStore,
        secret: Secret,
        access_expires: timedelta = ACCESS_TOKEN_EXPIRES,
        refresh_expires: timedelta = REFRESH_TOKEN_EXPIRES,
        issuer: str = ISSUER,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("a signing secret is required")
        self.store = store
        self.secret = secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.issuer = issuer
        self.clock = clock

    def _issue_access_token(self, user_id: str) -> str:
        return create_access_token(
            user_id, self.secret, self.access_expires, issuer=self.issuer, now=self.clock()
        )

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue an access token plus a refresh token.

        Unknown email and wrong password raise the same AuthFailure.
        """
        try:
            user = self.store.get_user_by_email(normalize_email(email))
        except NotFound:
            try:
                verify_password(_dummy_hash(), password or "")
            except CredentialError:
                pass
            logger.info("login rejected: unknown email")
            raise AuthFailure("invalid credentials")

        try:
            verify_password(user.hashed_password, password or "")
        except CredentialError as exc:
            logger.info("login rejected for user %s: %s", user.id, exc.__class__.__name__)
            raise AuthFailure("invalid credentials")

        try:
            refresh_token = make_refresh_token()
            self.store.insert_refresh_token(
                refresh_token, str(user.id), self.clock() + self.refresh_expires
            )
        except (EntropyUnavailable, DuplicateToken) as exc:
            logger.error("could not create refresh token for user %s: %s", user.id, exc)
            raise AuthFailure("could not start session") from exc

        return LoginResult(
            user=user,
            access_token=self._issue_access_token(str(user.id)),
            refresh_token=refresh_token,
        )

    def refresh(self, authorization: Optional[str]) -> str:
        """Exchange a live refresh token for a new access token."""
        token = self._extract(authorization)
        try:
            record = self.store.get_refresh_token(token)
        except NotFound:
            logger.info("refresh rejected: unknown token")
            raise AuthFailure("invalid token")

        if self.clock() >= record.expires_at:
            logger.info("refresh rejected for user %s: token expired", record.user_id)
            raise AuthFailure("invalid token")
        if record.revoked_at is not None:
            logger.info("refresh rejected for user %s: token revoked", record.user_id)
            raise AuthFailure("invalid token")

        return self._issue_access_token(record.user_id)

    def revoke(self, authorization: Optional[str]) -> None:
        """Revoke a refresh token. Already revoked or unknown tokens succeed."""
        token = self._extract(authorization)
        self.store.revoke_refresh_token(token)

    def authenticate(self, authorization: Optional[str]) -> str:
        """Return the user id carried by a bearer access token."""
        token = self._extract(authorization)
        try:
            return decode_access_token(token, self.secret, issuer=self.issuer)
        except TokenError as exc:
            logger.info("access token rejected: %s", exc.__class__.__name__)
            raise AuthFailure("invalid token")

    @staticmethod
    def _extract(authorization: Optional[str]) -> str:
        try:
            return get_bearer_token(authorization)
        except HeaderError as exc:
            logger.info("authorization header rejected: %s", exc.__class__.__name__)
            raise AuthFailure("invalid token")
