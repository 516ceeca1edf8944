"""Exception hierarchy for signedlicense.

Trust decisions (verified, expired, revoked) are reported as booleans and
never raise.  The exceptions below are reserved for failures the caller can
act on: bad input to the canonical form, unusable signing keys, malformed
typed features, and an unreachable revocation service.
"""

from __future__ import annotations


class LicenseError(Exception):
    """Base class for licensing errors."""

    pass


class EncodingError(LicenseError):
    """Raised when a feature set cannot be represented in canonical form."""

    pass


class SignatureError(LicenseError):
    """Raised when a key cannot be used with the configured algorithm."""

    pass


class TypeCoercionError(LicenseError, ValueError):
    """Raised when a typed feature cannot be encoded or decoded."""

    def __init__(self, message: str, *, feature: str | None = None, kind: object = None) -> None:
        self.feature = feature
        self.kind = kind
        super().__init__(message)


class NetworkError(LicenseError):
    """Raised when the revocation service cannot be reached."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Revocation service {url} unreachable: {reason}")
