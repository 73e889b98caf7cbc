# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Configuration for request signature processing.

Configuration is loaded from a YAML file.  The default location follows
the XDG Base Directory Specification:

    ``$XDG_CONFIG_HOME/s3gate/s3gate.yaml``
    (typically ``~/.config/s3gate/s3gate.yaml``)

``!env`` tags resolve values from environment variables.  Example::

    signature:
      validate_host: !env S3GATE_VALIDATE_HOST
      presign_window_seconds: 604800
      date_granularity: instant
"""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_path

from s3gate.dotenv_loader import load_dotenv_once
from s3gate.signature.validation import (
    PRESIGN_URL_MAX_EXPIRATION_SECONDS,
    DateGranularity,
    Resolver,
    SignedHeaderValidator,
)


logger = logging.getLogger(__name__)

#: Application name for XDG path resolution.
_APP_NAME = "s3gate"

_BOOL_TRUTHY = frozenset({"true", "1", "yes", "on"})
_BOOL_FALSY = frozenset({"false", "0", "no", "off"})

_DATE_GRANULARITIES = ("instant", "day")


def get_config_path() -> Path:
    """Return the default config file path (XDG)."""
    return user_config_path(_APP_NAME) / "s3gate.yaml"


def get_dotenv_path() -> Path:
    """Return the default ``.env`` path inside the XDG config directory."""
    return user_config_path(_APP_NAME) / ".env"


class ConfigError(Exception):
    """Base exception for configuration errors."""


# ---------------------------------------------------------------------------
# YAML tag placeholders
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    value = loader.construct_scalar(node)
    return _EnvVar(str(value))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


# ---------------------------------------------------------------------------
# Value resolution
# ---------------------------------------------------------------------------


def _coerce_bool(value: object) -> bool:
    """Coerce a value to bool, handling string representations."""
    if isinstance(value, bool):
        return value
    s = str(value).lower().strip()
    if s in _BOOL_TRUTHY:
        return True
    if s in _BOOL_FALSY:
        return False
    raise ConfigError(f"Cannot convert {value!r} to bool")


def _raw_resolve(value: object) -> str | None:
    """Resolve an ``_EnvVar`` to its string value, or stringify literals.

    Returns None if the value is None or the env var is unset or empty.
    """
    if isinstance(value, _EnvVar):
        raw = os.environ.get(value.var_name)
        if not raw:
            return None
        return raw
    if value is None:
        return None
    return str(value)


def _resolve(value: object, coerce: type, *, default: Any) -> Any:
    """Resolve a YAML value, handling ``!env`` tags and type coercion.

    Args:
        value: Raw value from YAML (may be ``_EnvVar``, None or a literal
            already parsed by PyYAML).
        coerce: Target type (``str``, ``int``, ``bool``).
        default: Value used when *value* is absent.

    Returns:
        The resolved, coerced value.

    Raises:
        ConfigError: If the value cannot be coerced.
    """
    if not isinstance(value, _EnvVar) and value is not None:
        if coerce is bool:
            return _coerce_bool(value)
        if isinstance(value, coerce) and not isinstance(value, bool):
            return value

    resolved = _raw_resolve(value)
    if resolved is None:
        return default

    if coerce is bool:
        return _coerce_bool(resolved)
    try:
        return coerce(resolved)
    except ValueError as exc:
        raise ConfigError(
            f"Cannot convert {resolved!r} to {coerce.__name__}"
        ) from exc


# ---------------------------------------------------------------------------
# Signing configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SigningConfig:
    """Settings for signed header validation.

    Attributes:
        validate_host: Resolve the signed ``host`` header through DNS.
            Disable for virtual-hosted buckets or offline deployments.
        presign_window_seconds: Maximum distance between ``x-amz-date``
            and the gateway clock.
        date_granularity: ``instant`` compares full timestamps, ``day``
            compares calendar dates only.
    """

    validate_host: bool = True
    presign_window_seconds: int = PRESIGN_URL_MAX_EXPIRATION_SECONDS
    date_granularity: DateGranularity = "instant"

    def __post_init__(self) -> None:
        """Validate configuration.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if not 1 <= self.presign_window_seconds <= (
            PRESIGN_URL_MAX_EXPIRATION_SECONDS
        ):
            raise ConfigError(
                f"Presign window must be between 1 and "
                f"{PRESIGN_URL_MAX_EXPIRATION_SECONDS} seconds: "
                f"{self.presign_window_seconds}"
            )
        if self.date_granularity not in _DATE_GRANULARITIES:
            raise ConfigError(
                f"Date granularity must be one of "
                f"{', '.join(_DATE_GRANULARITIES)}: {self.date_granularity!r}"
            )

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> "SigningConfig":
        """Load configuration from a YAML file.

        A ``.env`` file is loaded first if present.  A missing file yields
        the defaults.

        Args:
            config_path: Path to YAML config file.  Defaults to
                ``~/.config/s3gate/s3gate.yaml`` (XDG).

        Returns:
            SigningConfig instance.

        Raises:
            ConfigError: If the file is malformed or holds invalid values.
        """
        load_dotenv_once()

        if config_path is None:
            config_path = get_config_path()

        if not config_path.exists():
            logger.info("No config at %s, using defaults", config_path)
            return cls()

        with open(config_path) as f:
            try:
                raw = yaml.load(f, Loader=_make_loader())
            except yaml.YAMLError as exc:
                raise ConfigError(
                    f"Invalid YAML in {config_path}: {exc}"
                ) from exc

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Config file must be a YAML mapping: {config_path}"
            )

        config = cls._from_raw(raw)
        logger.info(
            "Signing config loaded: validate_host=%s, window=%ds, "
            "granularity=%s",
            config.validate_host,
            config.presign_window_seconds,
            config.date_granularity,
        )
        return config

    @classmethod
    def _from_raw(cls, raw: dict) -> "SigningConfig":
        """Build config from parsed (but unresolved) YAML dict."""
        signature = raw.get("signature") or {}
        if not isinstance(signature, dict):
            raise ConfigError("'signature' must be a YAML mapping")

        return cls(
            validate_host=_resolve(
                signature.get("validate_host"), bool, default=True
            ),
            presign_window_seconds=_resolve(
                signature.get("presign_window_seconds"),
                int,
                default=PRESIGN_URL_MAX_EXPIRATION_SECONDS,
            ),
            date_granularity=_resolve(
                signature.get("date_granularity"), str, default="instant"
            ),
        )

    def validator(
        self, *, resolver: Resolver | None = None
    ) -> SignedHeaderValidator:
        """Build a signed header validator from these settings.

        Args:
            resolver: Optional hostname resolver override.
        """
        return SignedHeaderValidator(
            resolver=resolver,
            validate_host=self.validate_host,
            presign_window=timedelta(seconds=self.presign_window_seconds),
            date_granularity=self.date_granularity,
        )
