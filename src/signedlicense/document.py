"""License documents: a feature set plus its signature.

A :class:`LicenseDocument` owns one :class:`~signedlicense.features.FeatureStore`
and at most one signature.  The issuer fills in features and signs with a
private key; the consumer calls :meth:`LicenseDocument.is_verified` with the
matching public key.

Verification is recomputed from the current features on every call.  Changing
a feature after signing leaves the old signature bytes in place, but
``is_verified`` reports ``False`` until the document is signed again.

Expiry (:meth:`LicenseDocument.is_expired`) and revocation
(:meth:`LicenseDocument.is_revoked`) are separate questions; a caller
deciding whether to trust a license should ask all three.

Example::

    from signedlicense import LicenseDocument, FeatureType

    doc = LicenseDocument()
    doc.set_feature("edition", "enterprise")
    doc.set_feature("seats", 25)
    doc.set_expiry(datetime.date(2027, 1, 31))
    doc.generate_license_id()
    doc.sign(private_key)

    doc.is_verified(public_key)                 # → True
    doc.get_feature("seats", FeatureType.INTEGER)   # → 25
"""

from __future__ import annotations

import binascii
import datetime
import logging
import uuid
from collections.abc import Callable
from typing import Any

import requests

from signedlicense.canonical import CanonicalEncoder
from signedlicense.errors import EncodingError, TypeCoercionError
from signedlicense.expiry import EXPIRY_DATE_FEATURE, ExpiryPolicy
from signedlicense.features import FeatureStore
from signedlicense.revocation import LICENSE_ID_FEATURE, REVOCATION_URL_FEATURE, RevocationChecker
from signedlicense.signing import SignatureAlgorithm, SignatureEngine, decode_signature, encode_signature
from signedlicense.typed import FeatureType, decode, encode, infer_kind

logger = logging.getLogger(__name__)


class LicenseDocument:
    """A signable set of license features."""

    def __init__(
        self,
        features: FeatureStore | dict[str, str] | None = None,
        *,
        signature: bytes | None = None,
        engine: SignatureEngine | None = None,
        encoder: CanonicalEncoder | None = None,
    ) -> None:
        if isinstance(features, FeatureStore):
            self._store = features.copy()
        else:
            self._store = FeatureStore(features)
        self._signature = signature
        self._engine = engine or SignatureEngine()
        self._encoder = encoder or CanonicalEncoder()

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    @property
    def features(self) -> FeatureStore:
        """A copy of the current features."""
        return self._store.copy()

    def set_feature(self, name: str, value: Any, kind: FeatureType | None = None) -> None:
        """Set feature *name*.

        Strings are stored as given unless *kind* says otherwise.  ``int``,
        ``date``/``datetime`` and ``UUID`` values are encoded by their type.

        Raises:
            TypeCoercionError: If *value* has no encoding or does not fit *kind*.
            ValueError: If *kind* is not a :class:`FeatureType`.
        """
        if kind is None:
            try:
                kind = infer_kind(value)
            except TypeCoercionError as exc:
                raise TypeCoercionError(str(exc), feature=name) from exc
        if kind is None:
            self._store.set(name, value)
        else:
            self._store.set(name, encode(value, kind, feature=name))

    def get_feature(self, name: str, kind: FeatureType | None = None) -> Any:
        """Return feature *name*, decoded as *kind* when one is given.

        Without *kind* the raw string is returned, or ``None`` if unset.

        Raises:
            TypeCoercionError: If *kind* is given and the feature is absent or
                cannot be decoded.
            ValueError: If *kind* is not a :class:`FeatureType`.
        """
        raw = self._store.get(name)
        if kind is None:
            return raw
        return decode(raw, kind, feature=name)

    def remove_feature(self, name: str) -> None:
        self._store.remove(name)

    # ------------------------------------------------------------------
    # Signing and verification
    # ------------------------------------------------------------------

    @property
    def signature(self) -> bytes | None:
        return self._signature

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return self._engine.algorithm

    def canonical_bytes(self) -> bytes:
        """Return the exact bytes that are signed and verified.

        Raises:
            EncodingError: If the features cannot be canonically encoded.
        """
        return self._encoder.encode(self._store)

    def sign(self, private_key: Any) -> bytes:
        """Sign the current features, replacing any previous signature.

        Raises:
            SignatureError: If *private_key* is unusable for the algorithm.
            EncodingError: If the features cannot be canonically encoded.
        """
        self._signature = self._engine.sign(private_key, self.canonical_bytes())
        logger.debug(
            "Signed license with %d features using %s",
            len(self._store),
            self._engine.algorithm.value,
        )
        return self._signature

    def is_verified(self, public_key: Any) -> bool:
        """Return ``True`` if the stored signature matches the current features."""
        if self._signature is None:
            logger.debug("License has no signature")
            return False
        try:
            data = self.canonical_bytes()
        except EncodingError as exc:
            logger.warning("License features cannot be encoded for verification: %s", exc)
            return False
        return self._engine.verify(public_key, data, self._signature)

    # ------------------------------------------------------------------
    # Well-known features
    # ------------------------------------------------------------------

    def set_expiry(self, expiry_date: datetime.date) -> None:
        """Set ``expiryDate``.  A ``datetime`` loses its time of day."""
        self.set_feature(EXPIRY_DATE_FEATURE, expiry_date, FeatureType.DATE)

    def is_expired(self, today: Callable[[], datetime.date] | None = None) -> bool:
        """Return ``True`` if ``expiryDate`` is before today, absent or malformed.

        :param today: Optional callable returning today's date.
        """
        return ExpiryPolicy(self, today=today or datetime.date.today).is_expired()

    def generate_license_id(self) -> uuid.UUID:
        """Generate a random ``licenseId``, store it and return it."""
        license_id = uuid.uuid4()
        self.set_license_id(license_id)
        return license_id

    def set_license_id(self, license_id: uuid.UUID) -> None:
        self.set_feature(LICENSE_ID_FEATURE, license_id, FeatureType.IDENTIFIER)

    def get_license_id(self) -> uuid.UUID | None:
        """Return ``licenseId``, or ``None`` if it is absent or malformed."""
        try:
            return self.get_feature(LICENSE_ID_FEATURE, FeatureType.IDENTIFIER)
        except TypeCoercionError:
            return None

    def set_revocation_url(self, url: Any) -> None:
        """Set ``revocationUrl``.

        The URL is stored as text so it may contain the ``${licenseId}``
        placeholder.
        """
        self.set_feature(REVOCATION_URL_FEATURE, url, FeatureType.URL)

    def get_revocation_url(self) -> str | None:
        """See :meth:`RevocationChecker.get_revocation_url`."""
        return self._revocation_checker().get_revocation_url()

    def is_revoked(
        self,
        force_online: bool = False,
        *,
        session: requests.Session | None = None,
    ) -> bool:
        """See :meth:`RevocationChecker.is_revoked`."""
        return self._revocation_checker(session).is_revoked(force_online)

    def _revocation_checker(self, session: requests.Session | None = None) -> RevocationChecker:
        return RevocationChecker(self, session=session)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dict of features, algorithm and base64 signature."""
        return {
            "features": self._store.to_dict(),
            "algorithm": self._engine.algorithm.value,
            "signature": encode_signature(self._signature) if self._signature is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LicenseDocument:
        """Rebuild a document produced by :meth:`to_dict`.

        Raises:
            EncodingError: If the dict is malformed.
            ValueError: If the algorithm name is unknown.
        """
        features = data.get("features")
        if not isinstance(features, dict):
            raise EncodingError("License data has no 'features' mapping")
        try:
            store = FeatureStore(features)
        except TypeError as exc:
            raise EncodingError(f"License features must be strings: {exc}") from exc

        signature = None
        raw_signature = data.get("signature")
        if raw_signature is not None:
            if not isinstance(raw_signature, str):
                raise EncodingError("License signature must be base64 text")
            try:
                signature = decode_signature(raw_signature)
            except (binascii.Error, ValueError) as exc:
                raise EncodingError(f"License signature is not valid base64: {exc}") from exc

        algorithm = data.get("algorithm")
        engine = SignatureEngine(algorithm) if algorithm else None
        return cls(store, signature=signature, engine=engine)
