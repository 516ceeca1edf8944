"""Tests for signedlicense.expiry -- expiration policy."""

from __future__ import annotations

import datetime

import pytest

from signedlicense.document import LicenseDocument
from signedlicense.errors import TypeCoercionError
from signedlicense.expiry import ExpiryPolicy

TODAY = datetime.date(2026, 10, 19)


def _policy(expiry: str | None, today: datetime.date = TODAY) -> ExpiryPolicy:
    doc = LicenseDocument()
    if expiry is not None:
        doc.set_feature("expiryDate", expiry)
    return ExpiryPolicy(doc, today=lambda: today)


class TestIsExpired:
    def test_past_date_expired(self):
        assert _policy("2026-10-18").is_expired() is True

    def test_far_past_expired(self):
        assert _policy("1999-01-01").is_expired() is True

    def test_future_date_not_expired(self):
        assert _policy("2026-10-20").is_expired() is False

    def test_today_not_expired(self):
        assert _policy("2026-10-19").is_expired() is False

    def test_expires_next_day(self):
        policy = _policy("2026-10-19", today=TODAY + datetime.timedelta(days=1))
        assert policy.is_expired() is True

    def test_absent_is_expired(self):
        assert _policy(None).is_expired() is True

    @pytest.mark.parametrize(
        "value", ["", "tomorrow", "2026-13-01", "2026/10/20", "2026-10-20T00:00:00", "2030-01-01\n"]
    )
    def test_malformed_is_expired(self, value):
        assert _policy(value).is_expired() is True

    def test_datetime_clock_uses_date_part(self):
        doc = LicenseDocument()
        doc.set_expiry(TODAY)
        late_evening = datetime.datetime(2026, 10, 19, 23, 59, 59)
        assert ExpiryPolicy(doc, today=lambda: late_evening).is_expired() is False

    def test_failing_clock_is_expired(self):
        doc = LicenseDocument()
        doc.set_expiry(TODAY)

        def broken_clock():
            raise OSError("clock unavailable")

        assert ExpiryPolicy(doc, today=broken_clock).is_expired() is True

    def test_default_clock_is_local_today(self):
        doc = LicenseDocument()
        doc.set_expiry(datetime.date.today() + datetime.timedelta(days=1))
        assert ExpiryPolicy(doc).is_expired() is False
        doc.set_expiry(datetime.date.today() - datetime.timedelta(days=1))
        assert ExpiryPolicy(doc).is_expired() is True


class TestExpiryDate:
    def test_decoded(self):
        assert _policy("2030-01-31").expiry_date() == datetime.date(2030, 1, 31)

    def test_missing_raises(self):
        with pytest.raises(TypeCoercionError, match="expiryDate"):
            _policy(None).expiry_date()
