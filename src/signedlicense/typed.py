"""Typed feature values layered over string storage.

Every feature is stored as a string.  This module defines the closed set of
typed interpretations a feature may have and the text format each one uses
on the wire:

=============  ==========================================  ==================
FeatureType    Text form                                   Python value
=============  ==========================================  ==================
INTEGER        decimal, optional sign (``-42``)             ``int``
DATE           ``YYYY-MM-DD``                               ``datetime.date``
IDENTIFIER     hyphenated hex UUID, written lowercase       ``uuid.UUID``
URL            absolute URL string                          ``str``
=============  ==========================================  ==================

Decoding a string outside a type's grammar raises
:class:`~signedlicense.errors.TypeCoercionError`.  Asking for anything that
is not a :class:`FeatureType` raises :class:`ValueError` straight away; that
is a programming error rather than bad license data.
"""

from __future__ import annotations

import datetime
import enum
import re
import urllib.parse
import uuid
from typing import Any

from signedlicense.errors import TypeCoercionError

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")


class FeatureType(enum.Enum):
    """Typed interpretations of a feature value."""

    INTEGER = "integer"
    DATE = "date"
    IDENTIFIER = "identifier"
    URL = "url"


def _require_kind(kind: Any) -> FeatureType:
    if not isinstance(kind, FeatureType):
        raise ValueError(f"{kind!r} is not a FeatureType")
    return kind


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_integer(text: str) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise ValueError("not a decimal integer")
    return int(text)


def _decode_date(text: str) -> datetime.date:
    if not _DATE_RE.fullmatch(text):
        raise ValueError("not in YYYY-MM-DD form")
    return datetime.date(int(text[0:4]), int(text[5:7]), int(text[8:10]))


def _decode_identifier(text: str) -> uuid.UUID:
    if not _UUID_RE.fullmatch(text):
        raise ValueError("not a hyphenated hexadecimal UUID")
    return uuid.UUID(text)


def _decode_url(text: str) -> str:
    if not text or text != text.strip() or any(ch.isspace() for ch in text):
        raise ValueError("URL is empty or contains whitespace")
    parts = urllib.parse.urlsplit(text)
    if not parts.scheme or not _SCHEME_RE.fullmatch(parts.scheme):
        raise ValueError("URL has no scheme")
    if not parts.netloc and not parts.path:
        raise ValueError("URL has neither host nor path")
    if parts.scheme.lower() in ("http", "https", "ftp") and not parts.hostname:
        raise ValueError(f"{parts.scheme} URL has no host")
    # Raises ValueError for a non-numeric or out-of-range port.
    _ = parts.port
    return text


_DECODERS = {
    FeatureType.INTEGER: _decode_integer,
    FeatureType.DATE: _decode_date,
    FeatureType.IDENTIFIER: _decode_identifier,
    FeatureType.URL: _decode_url,
}


def decode(text: str | None, kind: FeatureType, *, feature: str | None = None) -> Any:
    """Decode stored *text* as *kind*.

    Raises:
        ValueError: If *kind* is not a :class:`FeatureType`.
        TypeCoercionError: If *text* is missing or outside the type's grammar.
    """
    kind = _require_kind(kind)
    label = f"feature {feature!r}" if feature is not None else "value"
    if text is None:
        raise TypeCoercionError(
            f"Cannot read {label} as {kind.value}: feature is not set",
            feature=feature,
            kind=kind,
        )
    try:
        return _DECODERS[kind](text)
    except ValueError as exc:
        raise TypeCoercionError(
            f"Cannot read {label} as {kind.value}: {text!r} ({exc})",
            feature=feature,
            kind=kind,
        ) from exc


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def infer_kind(value: Any) -> FeatureType | None:
    """Return the type implied by a Python value, or ``None`` for plain strings.

    Raises:
        TypeCoercionError: For values with no feature encoding (including
            ``bool``, which is deliberately not an integer here).
    """
    if isinstance(value, str):
        return None
    if isinstance(value, bool):
        raise TypeCoercionError("Boolean values have no feature encoding; store a string or integer")
    if isinstance(value, int):
        return FeatureType.INTEGER
    if isinstance(value, datetime.date):
        return FeatureType.DATE
    if isinstance(value, uuid.UUID):
        return FeatureType.IDENTIFIER
    if isinstance(value, urllib.parse.SplitResult | urllib.parse.ParseResult):
        return FeatureType.URL
    raise TypeCoercionError(f"Values of type {type(value).__name__} have no feature encoding")


def encode(value: Any, kind: FeatureType, *, feature: str | None = None) -> str:
    """Encode *value* as the text form of *kind*.

    Raises:
        ValueError: If *kind* is not a :class:`FeatureType`.
        TypeCoercionError: If *value* does not fit *kind*.
    """
    kind = _require_kind(kind)
    label = f"feature {feature!r}" if feature is not None else "value"

    def mismatch(detail: str) -> TypeCoercionError:
        return TypeCoercionError(
            f"Cannot store {label} as {kind.value}: {detail}",
            feature=feature,
            kind=kind,
        )

    if kind is FeatureType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            raise mismatch(f"expected int, got {type(value).__name__}")
        return str(value)

    if kind is FeatureType.DATE:
        # datetime is a date subclass; the time of day is dropped.
        if not isinstance(value, datetime.date):
            raise mismatch(f"expected date, got {type(value).__name__}")
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"

    if kind is FeatureType.IDENTIFIER:
        if not isinstance(value, uuid.UUID):
            raise mismatch(f"expected UUID, got {type(value).__name__}")
        return str(value)

    if kind is FeatureType.URL:
        if isinstance(value, urllib.parse.SplitResult | urllib.parse.ParseResult):
            value = value.geturl()
        if not isinstance(value, str):
            raise mismatch(f"expected URL string, got {type(value).__name__}")
        try:
            return _decode_url(value)
        except ValueError as exc:
            raise mismatch(f"{value!r} ({exc})") from exc

    raise AssertionError(f"Unhandled feature type {kind!r}")
