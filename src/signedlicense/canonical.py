"""Canonical byte form of a feature set.

The bytes produced here are the exact input to signing and verification, so
both sides of the exchange must produce them identically.  The layout is:

* entries sorted by feature name (Unicode code point order)
* one entry per line: ``escape(name) "=" escape(value) "\\n"``
* ``escape`` maps ``\\`` to ``\\\\``, ``=`` to ``\\=`` and a newline to ``\\n``
* the resulting text is encoded as strict UTF-8

An empty feature set encodes to ``b""``.  Because separators are always
escaped inside names and values, two different feature sets can never
produce the same bytes.

Example::

    from signedlicense.canonical import CanonicalEncoder
    from signedlicense.features import FeatureStore

    store = FeatureStore({"b": "2", "a": "x=y"})
    CanonicalEncoder().encode(store)   # → b"a=x\\\\=y\\nb=2\\n"
"""

from __future__ import annotations

from signedlicense.errors import EncodingError
from signedlicense.features import FeatureStore

_SEPARATOR = "="
_TERMINATOR = "\n"
_ESCAPE = "\\"

_ESCAPES: dict[str, str] = {
    _ESCAPE: _ESCAPE + _ESCAPE,
    _SEPARATOR: _ESCAPE + _SEPARATOR,
    _TERMINATOR: _ESCAPE + "n",
}
_UNESCAPES: dict[str, str] = {
    _ESCAPE: _ESCAPE,
    _SEPARATOR: _SEPARATOR,
    "n": _TERMINATOR,
}


def _escape(text: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


class CanonicalEncoder:
    """Deterministic, order-independent serializer for :class:`FeatureStore`."""

    def encode(self, store: FeatureStore) -> bytes:
        """Return the canonical bytes of *store*.

        Raises:
            EncodingError: If a name or value cannot be encoded as UTF-8.
        """
        lines = [
            _escape(name) + _SEPARATOR + _escape(value) + _TERMINATOR
            for name, value in sorted(store.items())
        ]
        try:
            return "".join(lines).encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncodingError(f"Feature set is not representable as UTF-8: {exc}") from exc

    def decode(self, data: bytes) -> FeatureStore:
        """Parse canonical bytes back into a :class:`FeatureStore`.

        Raises:
            EncodingError: If *data* is not in canonical form.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Canonical data is not valid UTF-8: {exc}") from exc

        store = FeatureStore()
        if not text:
            return store
        if not text.endswith(_TERMINATOR):
            raise EncodingError("Canonical data is truncated (missing final newline)")

        name: list[str] = []
        value: list[str] = []
        current = name
        previous: str | None = None
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == _ESCAPE:
                nxt = text[i + 1] if i + 1 < len(text) else ""
                if nxt not in _UNESCAPES:
                    raise EncodingError(f"Invalid escape sequence at offset {i}")
                current.append(_UNESCAPES[nxt])
                i += 2
                continue
            if ch == _SEPARATOR:
                if current is value:
                    raise EncodingError(f"Unescaped separator in value at offset {i}")
                current = value
            elif ch == _TERMINATOR:
                if current is not value:
                    raise EncodingError(f"Entry without separator ending at offset {i}")
                entry_name = "".join(name)
                # Strictly increasing names: sorted and unique.
                if previous is not None and entry_name <= previous:
                    raise EncodingError(f"Entries out of canonical order at {entry_name!r}")
                store.set(entry_name, "".join(value))
                previous = entry_name
                name, value = [], []
                current = name
            else:
                current.append(ch)
            i += 1
        return store
