"""Configuration for signedlicense.

Settings are read from ``~/.signedlicense/config.yaml`` (or the file named by
``SIGNEDLICENSE_CONFIG``), environment variables, and explicit arguments.

Precedence (highest first):
    1. Keyword arguments to :func:`load_settings`
    2. Environment variables (``SIGNEDLICENSE_ALGORITHM``, etc.)
    3. Config file
    4. Built-in defaults

Example config file::

    signing:
      algorithm: rsa-pss-sha256
    revocation:
      timeout: 10
"""

from __future__ import annotations

import logging
import os
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from signedlicense import parse_float_env
from signedlicense.signing import SignatureAlgorithm

logger = logging.getLogger(__name__)

_CONFIG_ENV = "SIGNEDLICENSE_CONFIG"
_ALGORITHM_ENV = "SIGNEDLICENSE_ALGORITHM"
_TIMEOUT_ENV = "SIGNEDLICENSE_REVOCATION_TIMEOUT"

# Valid top-level keys in the config file.  Used for schema validation.
_KNOWN_KEYS: set[str] = {"signing", "revocation"}


@dataclass(frozen=True)
class LicenseSettings:
    """Resolved configuration."""

    algorithm: SignatureAlgorithm = SignatureAlgorithm.ED25519
    # None leaves the timeout to the HTTP transport default.
    revocation_timeout: float | None = None


def get_config_path() -> Path:
    """Return the config file path (``SIGNEDLICENSE_CONFIG`` or ``~/.signedlicense/config.yaml``)."""
    env_path = os.environ.get(_CONFIG_ENV, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".signedlicense" / "config.yaml"


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def _check_file_permissions(path: Path) -> None:
    """Warn if *path* is writable by group or others.

    Skipped on Windows where POSIX permission semantics do not apply.
    """
    if sys.platform == "win32":
        return
    try:
        mode = path.stat().st_mode
        if mode & (stat.S_IWGRP | stat.S_IWOTH):
            logger.warning(
                "Config file %s is writable by other users (mode %04o). Recommended: chmod 644 %s",
                path,
                stat.S_IMODE(mode),
                path,
            )
    except OSError:
        pass


def _validate_config_schema(data: dict[str, Any], path: Path) -> None:
    """Log warnings for unknown keys in the config file."""
    unknown = set(data.keys()) - _KNOWN_KEYS
    for key in sorted(unknown):
        logger.warning(
            "Config file %s contains unknown key %r (expected one of: %s)",
            path,
            key,
            ", ".join(sorted(_KNOWN_KEYS)),
        )


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read and parse the YAML config file; return ``{}`` on any failure."""
    if not path.is_file():
        return {}
    _check_file_permissions(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if not isinstance(data, dict):
            return {}
        _validate_config_schema(data, path)
        return data
    except yaml.YAMLError as exc:
        logger.warning("Config file %s has invalid YAML: %s", path, exc)
        return {}
    except OSError as exc:
        logger.warning("Could not read config file %s: %s", path, exc)
        return {}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def _file_timeout(raw: Any, path: Path) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Config file %s has invalid revocation.timeout %r, ignoring", path, raw)
        return None


def load_settings(
    *,
    algorithm: SignatureAlgorithm | str | None = None,
    revocation_timeout: float | None = None,
    config_path: Path | None = None,
) -> LicenseSettings:
    """Resolve :class:`LicenseSettings` from arguments, env vars and the config file.

    Raises:
        ValueError: If the resolved algorithm name is unknown.
    """
    path = config_path or get_config_path()
    raw = _read_config_file(path)
    signing = _section(raw, "signing")
    revocation = _section(raw, "revocation")

    if algorithm is None:
        algorithm = (
            os.environ.get(_ALGORITHM_ENV, "").strip()
            or signing.get("algorithm")
            or SignatureAlgorithm.ED25519
        )

    if revocation_timeout is None:
        revocation_timeout = parse_float_env(
            _TIMEOUT_ENV, _file_timeout(revocation.get("timeout"), path)
        )
    if revocation_timeout is not None and revocation_timeout <= 0:
        logger.warning("Ignoring non-positive revocation timeout %s", revocation_timeout)
        revocation_timeout = None

    return LicenseSettings(
        algorithm=SignatureAlgorithm.parse(algorithm),
        revocation_timeout=revocation_timeout,
    )
