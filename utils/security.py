"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access token creation/verification via PyJWT (HS256, stateless)
- Bearer header parsing
- Opaque refresh token generation
"""
from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from utils.exceptions import (
    BadSignature,
    EntropyUnavailable,
    Expired,
    HashingFailure,
    MalformedHash,
    MalformedHeader,
    MalformedToken,
    MissingHeader,
    PasswordMismatch,
    UnsupportedAlgorithm,
)

ISSUER = "chirpy"
SIGNING_ALGORITHM = "HS256"
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
REQUIRED_CLAIMS = ("iss", "sub", "iat", "exp")
MAX_PASSWORD_BYTES = 4096
REFRESH_TOKEN_BYTES = 32

ph = PasswordHasher()

Secret = Union[str, bytes]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    if not isinstance(password, str):
        raise HashingFailure("password must be a string")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise HashingFailure("password exceeds maximum length")
    try:
        return ph.hash(password)
    except HashingError as exc:
        raise HashingFailure(str(exc)) from exc


def verify_password(password_hash: str, password: str) -> bool:
    """Verify a plaintext password against a stored Argon2 hash.

    Returns True on a match; raises PasswordMismatch otherwise and
    MalformedHash when the stored value is not an Argon2 hash.
    """
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError as exc:
        raise PasswordMismatch("password does not match") from exc
    except InvalidHashError as exc:
        raise MalformedHash("stored hash is not a valid argon2 hash") from exc
    except VerificationError as exc:
        # argon2 could parse the hash but failed to recompute it
        raise MalformedHash(str(exc)) from exc


@dataclass(frozen=True)
class AccessClaims:
    iss: str
    sub: str
    iat: int
    exp: int

    @classmethod
    def from_payload(cls, payload: dict) -> "AccessClaims":
        missing = [name for name in REQUIRED_CLAIMS if name not in payload]
        if missing:
            raise MalformedToken(f"missing claims: {', '.join(missing)}")
        try:
            sub = str(uuid.UUID(str(payload["sub"])))
        except ValueError as exc:
            raise MalformedToken("subject is not a user id") from exc
        return cls(iss=payload["iss"], sub=sub, iat=int(payload["iat"]), exp=int(payload["exp"]))


def create_access_token(
    subject: str,
    secret: Secret,
    expires_in: timedelta,
    issuer: str = ISSUER,
    now: Optional[datetime] = None,
) -> str:
    """Issue a signed access token for `subject`.

    A zero or negative `expires_in` produces a token that is already expired.
    """
    now = now or utc_now()
    payload = {
        "iss": issuer,
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=SIGNING_ALGORITHM)


def decode_access_token(token: str, secret: Secret, issuer: str = ISSUER) -> str:
    """
    Verify an access token and return its subject (user id).
    Raises UnsupportedAlgorithm, BadSignature, Expired or MalformedToken.
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as exc:
        raise MalformedToken(str(exc)) from exc

    alg = header.get("alg")
    if alg not in HMAC_ALGORITHMS:
        raise UnsupportedAlgorithm(f"unsupported signing algorithm: {alg!r}")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=list(HMAC_ALGORITHMS),
            issuer=issuer,
            options={"require": list(REQUIRED_CLAIMS)},
        )
    except jwt.InvalidSignatureError as exc:
        raise BadSignature("signature verification failed") from exc
    except jwt.ExpiredSignatureError as exc:
        raise Expired("token expired") from exc
    except jwt.InvalidAlgorithmError as exc:
        raise UnsupportedAlgorithm(str(exc)) from exc
    except jwt.InvalidTokenError as exc:
        raise MalformedToken(f"invalid token: {exc}") from exc

    return AccessClaims.from_payload(payload).sub


def get_bearer_token(header_value: Optional[str]) -> str:
    """Return the token part of a `Bearer <token>` authorization header."""
    if not header_value or not header_value.strip():
        raise MissingHeader("authorization header is missing")
    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise MalformedHeader("authorization header must be 'Bearer <token>'")
    return parts[1]


def make_refresh_token() -> str:
    """32 random bytes from the OS CSPRNG, hex encoded."""
    try:
        return secrets.token_hex(REFRESH_TOKEN_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise EntropyUnavailable(f"could not read random bytes: {exc}") from exc
