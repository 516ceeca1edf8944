"""Raw feature storage for a license.

A :class:`FeatureStore` maps case-sensitive feature names to string values.
Iteration order carries no meaning; the canonical encoder sorts entries
itself before anything is signed.
"""

from __future__ import annotations

from collections.abc import Iterator


class FeatureStore:
    """Mapping of feature name to string value."""

    def __init__(self, features: dict[str, str] | None = None) -> None:
        self._features: dict[str, str] = {}
        if features:
            for name, value in features.items():
                self.set(name, value)

    def set(self, name: str, value: str) -> None:
        """Store *value* under *name*, replacing any previous value."""
        if not isinstance(name, str):
            raise TypeError(f"Feature name must be a string, got {type(name).__name__}")
        if not isinstance(value, str):
            raise TypeError(f"Feature {name!r} value must be a string, got {type(value).__name__}")
        self._features[name] = value

    def get(self, name: str) -> str | None:
        return self._features.get(name)

    def remove(self, name: str) -> None:
        """Delete *name* if present."""
        self._features.pop(name, None)

    def names(self) -> list[str]:
        return list(self._features)

    def items(self) -> list[tuple[str, str]]:
        return list(self._features.items())

    def copy(self) -> FeatureStore:
        return FeatureStore(dict(self._features))

    def to_dict(self) -> dict[str, str]:
        return dict(self._features)

    def __contains__(self, name: object) -> bool:
        return name in self._features

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[str]:
        return iter(self._features)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureStore):
            return NotImplemented
        return self._features == other._features

    def __repr__(self) -> str:
        return f"FeatureStore({self._features!r})"
