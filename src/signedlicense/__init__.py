"""signedlicense - Tamper-evident software licenses built from signed feature sets."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

try:
    from importlib.metadata import PackageNotFoundError, version
except ImportError:  # pragma: no cover - py310+ ships importlib.metadata
    from importlib_metadata import PackageNotFoundError, version  # type: ignore[no-redef]


_logger = logging.getLogger(__name__)


def _resolve_version() -> str:
    """Resolve the installed package version with a source-tree fallback."""
    # Source-tree first: avoids stale installed metadata when running from git.
    try:
        pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
        if pyproject.is_file():
            content = pyproject.read_text(encoding="utf-8")
            match = re.search(r'(?m)^\s*version\s*=\s*"([^"]+)"\s*$', content)
            if match:
                return match.group(1)
    except Exception as exc:
        _logger.debug("Local pyproject version fallback failed: %s", exc)

    try:
        return version("signedlicense")
    except PackageNotFoundError:
        pass
    except Exception as exc:
        _logger.debug("Package version lookup failed: %s", exc)

    return "unknown"


__version__ = _resolve_version()


def parse_float_env(name: str, default: float | None) -> float | None:
    """Parse a float from an environment variable with safe fallback.

    Logs a warning and returns *default* if the value is not a valid number.
    """
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning(
            "Invalid number for %s=%r, using default %s",
            name,
            raw,
            default,
        )
        return default


# Public API.  Imported after the helpers above because config.py uses them.
from signedlicense.canonical import CanonicalEncoder  # noqa: E402
from signedlicense.document import LicenseDocument  # noqa: E402
from signedlicense.errors import (  # noqa: E402
    EncodingError,
    LicenseError,
    NetworkError,
    SignatureError,
    TypeCoercionError,
)
from signedlicense.expiry import ExpiryPolicy  # noqa: E402
from signedlicense.features import FeatureStore  # noqa: E402
from signedlicense.revocation import RevocationChecker  # noqa: E402
from signedlicense.signing import (  # noqa: E402
    SignatureAlgorithm,
    SignatureEngine,
    load_private_key,
    load_public_key,
)
from signedlicense.typed import FeatureType  # noqa: E402

__all__ = [
    "CanonicalEncoder",
    "EncodingError",
    "ExpiryPolicy",
    "FeatureStore",
    "FeatureType",
    "LicenseDocument",
    "LicenseError",
    "NetworkError",
    "RevocationChecker",
    "SignatureAlgorithm",
    "SignatureEngine",
    "SignatureError",
    "TypeCoercionError",
    "load_private_key",
    "load_public_key",
    "parse_float_env",
]
