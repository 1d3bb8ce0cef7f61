"""
Domain exceptions for Chirpy.

Only AuthFailure and StoreUnavailable are meant to reach the HTTP layer;
everything else is an internal reason that the session manager logs and
collapses into AuthFailure.
"""


class ChirpyError(Exception):
    """Base class for every error raised by Chirpy code."""


class AuthFailure(ChirpyError):
    """Generic authentication rejection. `reason` is for logs only."""

    def __init__(self, reason: str = "authentication failed"):
        super().__init__(reason)
        self.reason = reason


# credentials
class CredentialError(ChirpyError):
    pass


class HashingFailure(CredentialError):
    pass


class MalformedHash(CredentialError):
    pass


class PasswordMismatch(CredentialError):
    pass


# access tokens
class TokenError(ChirpyError):
    pass


class BadSignature(TokenError):
    pass


class Expired(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class UnsupportedAlgorithm(TokenError):
    pass


# authorization header
class HeaderError(ChirpyError):
    pass


class MissingHeader(HeaderError):
    pass


class MalformedHeader(HeaderError):
    pass


class EntropyUnavailable(ChirpyError):
    pass


# storage
class StoreError(ChirpyError):
    pass


class NotFound(StoreError):
    pass


class DuplicateToken(StoreError):
    pass


class StoreUnavailable(StoreError):
    """The relational store could not be reached."""
