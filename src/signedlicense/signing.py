"""Asymmetric signatures over canonical license bytes.

The :class:`SignatureEngine` wraps one signature algorithm from the
``cryptography`` package and applies it identically on the signing and the
verification path.  Signing raises :class:`SignatureError` when the key does
not fit the configured algorithm; verification never raises and answers
``False`` for anything it cannot confirm.

Supported algorithms (see :class:`SignatureAlgorithm`):

* ``ed25519`` (default)
* ``rsa-pkcs1v15-sha256``
* ``rsa-pss-sha256``
* ``ecdsa-sha256``
* ``dsa-sha256``

Example::

    from signedlicense.signing import SignatureEngine, load_private_key

    engine = SignatureEngine("ed25519")
    signature = engine.sign(load_private_key(pem_text), payload)
    engine.verify(public_key, payload, signature)   # → True
"""

from __future__ import annotations

import base64
import enum
import logging
from typing import Any

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from signedlicense.errors import SignatureError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Text helpers for signatures and raw keys
# ---------------------------------------------------------------------------


def _decode_b64_flexible(value: str) -> bytes:
    """Decode standard or url-safe base64 with optional missing padding."""
    padded = value + "=" * ((4 - len(value) % 4) % 4)
    if "-" in padded or "_" in padded:
        return base64.urlsafe_b64decode(padded)
    return base64.b64decode(padded, validate=True)


def encode_signature(signature: bytes) -> str:
    """Return *signature* as standard padded base64 text."""
    return base64.b64encode(signature).decode("ascii")


def decode_signature(text: str) -> bytes:
    """Inverse of :func:`encode_signature`; also accepts base64url and missing padding.

    Raises:
        ValueError: If *text* is not base64.
    """
    return _decode_b64_flexible(text.strip())


# ---------------------------------------------------------------------------
# Algorithm enum
# ---------------------------------------------------------------------------


class SignatureAlgorithm(enum.Enum):
    """Signature algorithms usable for license documents."""

    ED25519 = "ed25519"
    RSA_PKCS1V15_SHA256 = "rsa-pkcs1v15-sha256"
    RSA_PSS_SHA256 = "rsa-pss-sha256"
    ECDSA_SHA256 = "ecdsa-sha256"
    DSA_SHA256 = "dsa-sha256"

    @classmethod
    def parse(cls, value: SignatureAlgorithm | str) -> SignatureAlgorithm:
        """Return the algorithm named by *value* (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown signature algorithm {value!r} "
                f"(expected one of: {', '.join(a.value for a in cls)})"
            ) from None


# Key classes accepted by each algorithm: (private, public).
_KEY_TYPES: dict[SignatureAlgorithm, tuple[type, type]] = {
    SignatureAlgorithm.ED25519: (Ed25519PrivateKey, Ed25519PublicKey),
    SignatureAlgorithm.RSA_PKCS1V15_SHA256: (rsa.RSAPrivateKey, rsa.RSAPublicKey),
    SignatureAlgorithm.RSA_PSS_SHA256: (rsa.RSAPrivateKey, rsa.RSAPublicKey),
    SignatureAlgorithm.ECDSA_SHA256: (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey),
    SignatureAlgorithm.DSA_SHA256: (dsa.DSAPrivateKey, dsa.DSAPublicKey),
}


def _pss_padding() -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.MAX_LENGTH)


# ---------------------------------------------------------------------------
# Signature engine
# ---------------------------------------------------------------------------


class SignatureEngine:
    """Signs and verifies canonical bytes with a single configured algorithm."""

    def __init__(self, algorithm: SignatureAlgorithm | str | None = None) -> None:
        if algorithm is None:
            from signedlicense.config import load_settings

            algorithm = load_settings().algorithm
        self._algorithm = SignatureAlgorithm.parse(algorithm)

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return self._algorithm

    def sign(self, private_key: Any, data: bytes) -> bytes:
        """Sign *data* with *private_key*.

        Raises:
            SignatureError: If the key is not a private key of the configured
                algorithm's type, or the primitive rejects it.
        """
        private_type = _KEY_TYPES[self._algorithm][0]
        if not isinstance(private_key, private_type):
            raise SignatureError(
                f"{self._algorithm.value} signing requires a {private_type.__name__}, "
                f"got {type(private_key).__name__}"
            )
        if not isinstance(data, (bytes, bytearray)):
            raise SignatureError(f"Signing input must be bytes, got {type(data).__name__}")

        data = bytes(data)
        try:
            if self._algorithm is SignatureAlgorithm.ED25519:
                return private_key.sign(data)
            if self._algorithm is SignatureAlgorithm.RSA_PKCS1V15_SHA256:
                return private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
            if self._algorithm is SignatureAlgorithm.RSA_PSS_SHA256:
                return private_key.sign(data, _pss_padding(), hashes.SHA256())
            if self._algorithm is SignatureAlgorithm.ECDSA_SHA256:
                return private_key.sign(data, ec.ECDSA(hashes.SHA256()))
            if self._algorithm is SignatureAlgorithm.DSA_SHA256:
                return private_key.sign(data, hashes.SHA256())
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SignatureError(f"{self._algorithm.value} signing failed: {exc}") from exc
        raise AssertionError(f"Unhandled signature algorithm {self._algorithm!r}")

    def verify(self, public_key: Any, data: bytes, signature: bytes) -> bool:
        """Return ``True`` only if *signature* over *data* checks out.

        Wrong key types, malformed signatures and primitive errors all yield
        ``False``.
        """
        public_type = _KEY_TYPES[self._algorithm][1]
        if not isinstance(public_key, public_type):
            logger.debug(
                "%s verification needs a %s, got %s",
                self._algorithm.value,
                public_type.__name__,
                type(public_key).__name__,
            )
            return False
        if not isinstance(signature, (bytes, bytearray)) or not signature:
            logger.debug("Missing or non-bytes signature")
            return False

        data, signature = bytes(data), bytes(signature)
        try:
            if self._algorithm is SignatureAlgorithm.ED25519:
                public_key.verify(signature, data)
            elif self._algorithm is SignatureAlgorithm.RSA_PKCS1V15_SHA256:
                public_key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
            elif self._algorithm is SignatureAlgorithm.RSA_PSS_SHA256:
                public_key.verify(signature, data, _pss_padding(), hashes.SHA256())
            elif self._algorithm is SignatureAlgorithm.ECDSA_SHA256:
                public_key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
            elif self._algorithm is SignatureAlgorithm.DSA_SHA256:
                public_key.verify(signature, data, hashes.SHA256())
            else:
                return False
        except InvalidSignature:
            logger.warning("License signature verification failed")
            return False
        except Exception as exc:
            logger.warning("License signature verification error: %s", exc)
            return False
        return True


# ---------------------------------------------------------------------------
# Key loading
# ---------------------------------------------------------------------------


def _raw_key_bytes(value: str) -> bytes:
    """Decode a raw key given as hex, base64 or base64url text."""
    try:
        return bytes.fromhex(value)
    except ValueError:
        return _decode_b64_flexible(value)


def load_private_key(data: bytes | str, password: bytes | None = None) -> Any:
    """Load a private key from PEM, DER, or raw Ed25519 text.

    Bytes are read as PEM when they carry a ``BEGIN`` header, DER otherwise.
    Text without a PEM header is treated as a 32-byte Ed25519 private key in
    hex, base64 or base64url.

    Raises:
        SignatureError: If the material cannot be loaded.
    """
    try:
        if isinstance(data, str):
            value = data.strip()
            if not value:
                raise ValueError("Empty private key")
            if "BEGIN" in value:
                return serialization.load_pem_private_key(value.encode("utf-8"), password=password)
            raw = _raw_key_bytes(value)
            if len(raw) != 32:
                raise ValueError("Ed25519 private key must be 32 bytes")
            return Ed25519PrivateKey.from_private_bytes(raw)
        if b"BEGIN" in data:
            return serialization.load_pem_private_key(bytes(data), password=password)
        return serialization.load_der_private_key(bytes(data), password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SignatureError(f"Could not load private key: {exc}") from exc


def load_public_key(data: bytes | str) -> Any:
    """Load a public key from PEM, DER, or raw Ed25519 text.

    Follows the same input rules as :func:`load_private_key`.

    Raises:
        SignatureError: If the material cannot be loaded.
    """
    try:
        if isinstance(data, str):
            value = data.strip()
            if not value:
                raise ValueError("Empty public key")
            if "BEGIN" in value:
                return serialization.load_pem_public_key(value.encode("utf-8"))
            raw = _raw_key_bytes(value)
            if len(raw) != 32:
                raise ValueError("Ed25519 public key must be 32 bytes")
            return Ed25519PublicKey.from_public_bytes(raw)
        if b"BEGIN" in data:
            return serialization.load_pem_public_key(bytes(data))
        return serialization.load_der_public_key(bytes(data))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SignatureError(f"Could not load public key: {exc}") from exc
