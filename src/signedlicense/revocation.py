"""Online revocation checks.

A license may name a revocation service in its ``revocationUrl`` feature.
The URL may contain the placeholder ``${licenseId}``, which is replaced by
the license's ``licenseId`` so one URL template can serve every license.

The check is a single blocking HTTP GET.  Status ``200`` means the license
is not revoked; any other status means it is.  When the service cannot be
reached the caller's ``force_online`` choice decides:

* ``force_online=False`` (default): unreachable means *not* revoked, so an
  offline machine keeps working.
* ``force_online=True``: unreachable means revoked; only a confirmed answer
  from the service keeps the license alive.

A license without a revocation URL, or with a malformed one, cannot be
checked either, so ``force_online`` decides those cases too.

There is no retry.  The timeout comes from
:class:`~signedlicense.config.LicenseSettings` and defaults to whatever the
transport uses.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import TYPE_CHECKING

import requests

from signedlicense.errors import NetworkError, TypeCoercionError
from signedlicense.typed import FeatureType, decode

if TYPE_CHECKING:
    from signedlicense.document import LicenseDocument

logger = logging.getLogger(__name__)

REVOCATION_URL_FEATURE = "revocationUrl"
LICENSE_ID_FEATURE = "licenseId"
LICENSE_ID_PLACEHOLDER = "${licenseId}"

_HTTP_SCHEMES = ("http", "https")


class RevocationChecker:
    """Resolves a document's revocation URL and probes it."""

    def __init__(
        self,
        document: LicenseDocument,
        *,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self._document = document
        self._session = session
        if timeout is None:
            from signedlicense.config import load_settings

            timeout = load_settings().revocation_timeout
        self._timeout = timeout

    def get_revocation_url(self) -> str | None:
        """Return the revocation URL with ``${licenseId}`` filled in.

        The placeholder is left untouched when the license has no readable
        ``licenseId``.  Returns ``None`` when no revocation URL is set.

        Raises:
            TypeCoercionError: If the resolved URL is malformed.
        """
        template = self._document.get_feature(REVOCATION_URL_FEATURE)
        if template is None:
            return None
        license_id = self._document.get_license_id()
        if license_id is not None:
            template = template.replace(LICENSE_ID_PLACEHOLDER, str(license_id))
        # Validates the result; the string form is returned unchanged.
        return decode(template, FeatureType.URL, feature=REVOCATION_URL_FEATURE)

    def probe(self, url: str) -> int:
        """Issue a GET to *url* and return the HTTP status code.

        Raises:
            NetworkError: If the request does not complete.
        """
        getter = self._session.get if self._session is not None else requests.get
        try:
            resp = getter(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise NetworkError(url, str(exc)) from exc
        return resp.status_code

    def is_revoked(self, force_online: bool = False) -> bool:
        """Return ``True`` if the license is revoked.

        :param force_online: Treat the license as revoked when the
            revocation service is missing, malformed or unreachable.
        """
        try:
            url = self.get_revocation_url()
        except TypeCoercionError as exc:
            logger.warning("Revocation URL unusable (%s); force_online=%s decides", exc, force_online)
            return force_online

        if url is None:
            logger.info("License has no %s; force_online=%s decides", REVOCATION_URL_FEATURE, force_online)
            return force_online

        scheme = urllib.parse.urlsplit(url).scheme.lower()
        if scheme not in _HTTP_SCHEMES:
            logger.warning("Revocation URL %s is not HTTP(S); treating license as revoked", url)
            return True

        try:
            status = self.probe(url)
        except NetworkError as exc:
            logger.warning("%s; force_online=%s decides", exc, force_online)
            return force_online

        if status == 200:
            return False
        logger.info("Revocation service %s answered %d; license is revoked", url, status)
        return True
