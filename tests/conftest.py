"""Shared fixtures for the signedlicense test suite.

Provides real key pairs for every supported signature algorithm and keeps
tests isolated from the developer's own config file and environment.
"""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric import dsa, ec, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from signedlicense.signing import SignatureAlgorithm

# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config lookups at an empty temp dir and clear package env vars."""
    monkeypatch.setenv("SIGNEDLICENSE_CONFIG", str(tmp_path / "no-config.yaml"))
    for name in (
        "SIGNEDLICENSE_ALGORITHM",
        "SIGNEDLICENSE_REVOCATION_TIMEOUT",
        "SIGNEDLICENSE_LOG_LEVEL",
        "SIGNEDLICENSE_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Key pairs
# ---------------------------------------------------------------------------


def _generate_private_key(algorithm: SignatureAlgorithm):
    if algorithm is SignatureAlgorithm.ED25519:
        return Ed25519PrivateKey.generate()
    if algorithm in (SignatureAlgorithm.RSA_PKCS1V15_SHA256, SignatureAlgorithm.RSA_PSS_SHA256):
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    if algorithm is SignatureAlgorithm.ECDSA_SHA256:
        return ec.generate_private_key(ec.SECP256R1())
    if algorithm is SignatureAlgorithm.DSA_SHA256:
        return dsa.generate_private_key(key_size=2048)
    raise AssertionError(algorithm)


_KEY_CACHE: dict[SignatureAlgorithm, tuple] = {}


def keypair_for(algorithm: SignatureAlgorithm) -> tuple:
    """Return a cached ``(private_key, public_key)`` pair for *algorithm*."""
    if algorithm not in _KEY_CACHE:
        private_key = _generate_private_key(algorithm)
        _KEY_CACHE[algorithm] = (private_key, private_key.public_key())
    return _KEY_CACHE[algorithm]


@pytest.fixture()
def ed25519_keypair():
    """Ed25519 ``(private_key, public_key)``."""
    return keypair_for(SignatureAlgorithm.ED25519)


@pytest.fixture()
def other_ed25519_keypair():
    """A second, unrelated Ed25519 key pair."""
    private_key = Ed25519PrivateKey.generate()
    return private_key, private_key.public_key()


@pytest.fixture(params=list(SignatureAlgorithm), ids=lambda a: a.value)
def algorithm_keypair(request):
    """``(algorithm, private_key, public_key)`` for every supported algorithm."""
    private_key, public_key = keypair_for(request.param)
    return request.param, private_key, public_key
