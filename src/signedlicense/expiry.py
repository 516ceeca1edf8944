"""Expiration state of a license.

The expiry date lives in the DATE feature ``expiryDate``.  A license is
expired when today's local calendar date is strictly after that date, so a
license expiring today is still good until midnight.  The day boundary
follows the local clock: licenses expire first in Australia, later in
Europe and last in the Americas.

Note that expiry says nothing about authenticity; check
:meth:`~signedlicense.document.LicenseDocument.is_verified` separately.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from signedlicense.errors import TypeCoercionError
from signedlicense.typed import FeatureType

if TYPE_CHECKING:
    from signedlicense.document import LicenseDocument

logger = logging.getLogger(__name__)

EXPIRY_DATE_FEATURE = "expiryDate"


class ExpiryPolicy:
    """Derives expired / not expired from a document's ``expiryDate``."""

    def __init__(
        self,
        document: LicenseDocument,
        today: Callable[[], datetime.date] = datetime.date.today,
    ) -> None:
        self._document = document
        self._today = today

    def expiry_date(self) -> datetime.date:
        """Return the decoded expiry date.

        Raises:
            TypeCoercionError: If the feature is absent or malformed.
        """
        return self._document.get_feature(EXPIRY_DATE_FEATURE, FeatureType.DATE)

    def is_expired(self) -> bool:
        """Return ``True`` if the license has expired.

        An absent or unreadable expiry date counts as expired.
        """
        try:
            expiry = self.expiry_date()
            today = self._today()
            if isinstance(today, datetime.datetime):
                today = today.date()
            return today > expiry
        except TypeCoercionError as exc:
            logger.warning("Treating license as expired: %s", exc)
            return True
        except Exception as exc:
            logger.warning("Expiry check failed, treating license as expired: %s", exc)
            return True
