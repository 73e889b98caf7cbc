# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for signing configuration."""

from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml

from s3gate.config import (
    ConfigError,
    SigningConfig,
    _coerce_bool,
    _EnvVar,
    _make_loader,
    _raw_resolve,
    _resolve,
    get_config_path,
    get_dotenv_path,
)
from s3gate.signature.validation import PRESIGN_URL_MAX_EXPIRATION_SECONDS


@pytest.fixture(autouse=True)
def _no_dotenv():
    with patch("s3gate.config.load_dotenv_once"):
        yield


class TestPaths:
    """Tests for XDG path helpers."""

    def test_config_path(self) -> None:
        """Config file lives in the XDG config dir."""
        with patch(
            "s3gate.config.user_config_path", return_value=Path("/cfg")
        ):
            assert get_config_path() == Path("/cfg/s3gate.yaml")
            assert get_dotenv_path() == Path("/cfg/.env")


class TestRawResolve:
    """Tests for _raw_resolve."""

    def test_literal(self) -> None:
        """Literals are stringified."""
        assert _raw_resolve("hello") == "hello"
        assert _raw_resolve(42) == "42"

    def test_none(self) -> None:
        """None resolves to None."""
        assert _raw_resolve(None) is None

    def test_envvar_set(self) -> None:
        """EnvVar resolves to the env value when set."""
        with patch.dict("os.environ", {"MY_VAR": "val"}):
            assert _raw_resolve(_EnvVar("MY_VAR")) == "val"

    def test_envvar_unset(self) -> None:
        """EnvVar resolves to None when unset."""
        with patch.dict("os.environ", {}, clear=True):
            assert _raw_resolve(_EnvVar("MISSING")) is None

    def test_envvar_empty(self) -> None:
        """EnvVar resolves to None when empty."""
        with patch.dict("os.environ", {"EMPTY": ""}):
            assert _raw_resolve(_EnvVar("EMPTY")) is None


class TestCoerceBool:
    """Tests for _coerce_bool."""

    def test_truthy_strings(self) -> None:
        """Truthy strings are recognized."""
        for val in ("true", "True", "1", "yes", "on"):
            assert _coerce_bool(val) is True

    def test_falsy_strings(self) -> None:
        """Falsy strings are recognized."""
        for val in ("false", "FALSE", "0", "no", "off"):
            assert _coerce_bool(val) is False

    def test_invalid_raises(self) -> None:
        """Anything else raises ConfigError."""
        with pytest.raises(ConfigError, match="Cannot convert"):
            _coerce_bool("maybe")


class TestResolve:
    """Tests for _resolve."""

    def test_default_when_missing(self) -> None:
        """Missing values fall back to the default."""
        assert _resolve(None, int, default=7) == 7

    def test_int_literal(self) -> None:
        """Int literals pass through."""
        assert _resolve(3600, int, default=0) == 3600

    def test_int_envvar(self) -> None:
        """Int !env values are coerced."""
        with patch.dict("os.environ", {"W": "900"}):
            assert _resolve(_EnvVar("W"), int, default=0) == 900

    def test_int_invalid(self) -> None:
        """Unconvertible ints raise ConfigError."""
        with pytest.raises(ConfigError, match="to int"):
            _resolve("soon", int, default=0)

    def test_bool_not_int(self) -> None:
        """YAML booleans are not accepted as ints."""
        with pytest.raises(ConfigError):
            _resolve(True, int, default=0)

    def test_bool_envvar(self) -> None:
        """Bool !env values are coerced."""
        with patch.dict("os.environ", {"B": "off"}):
            assert _resolve(_EnvVar("B"), bool, default=True) is False


class TestEnvLoader:
    """Tests for the !env YAML tag."""

    def test_env_tag(self) -> None:
        """!env produces an unresolved placeholder."""
        raw = yaml.load("a: !env FOO", Loader=_make_loader())
        assert isinstance(raw["a"], _EnvVar)
        assert raw["a"].var_name == "FOO"


class TestSigningConfig:
    """Tests for SigningConfig."""

    def test_defaults(self) -> None:
        """Defaults resolve hosts and use a seven-day instant window."""
        config = SigningConfig()
        assert config.validate_host is True
        assert config.presign_window_seconds == 604800
        assert config.date_granularity == "instant"

    @pytest.mark.parametrize(
        "seconds", [0, -1, PRESIGN_URL_MAX_EXPIRATION_SECONDS + 1]
    )
    def test_window_bounds(self, seconds: int) -> None:
        """The window must be within 1s and seven days."""
        with pytest.raises(ConfigError, match="Presign window"):
            SigningConfig(presign_window_seconds=seconds)

    def test_unknown_granularity(self) -> None:
        """Granularity must be instant or day."""
        with pytest.raises(ConfigError, match="granularity"):
            SigningConfig(date_granularity="week")

    def test_from_yaml(self, tmp_path: Path) -> None:
        """Values are read from the signature section."""
        path = tmp_path / "s3gate.yaml"
        path.write_text(
            "signature:\n"
            "  validate_host: false\n"
            "  presign_window_seconds: 900\n"
            "  date_granularity: day\n"
        )
        config = SigningConfig.from_yaml(path)
        assert config == SigningConfig(
            validate_host=False,
            presign_window_seconds=900,
            date_granularity="day",
        )

    def test_from_yaml_env_tags(self, tmp_path: Path) -> None:
        """!env tags are resolved from the environment."""
        path = tmp_path / "s3gate.yaml"
        path.write_text(
            "signature:\n"
            "  validate_host: !env S3GATE_VALIDATE_HOST\n"
            "  presign_window_seconds: !env S3GATE_WINDOW\n"
        )
        with patch.dict(
            "os.environ",
            {"S3GATE_VALIDATE_HOST": "no", "S3GATE_WINDOW": "60"},
        ):
            config = SigningConfig.from_yaml(path)
        assert config.validate_host is False
        assert config.presign_window_seconds == 60

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields the defaults."""
        assert SigningConfig.from_yaml(tmp_path / "nope.yaml") == (
            SigningConfig()
        )

    def test_from_yaml_default_path(self, tmp_path: Path) -> None:
        """Without a path the XDG location is used."""
        path = tmp_path / "s3gate.yaml"
        path.write_text("signature:\n  presign_window_seconds: 120\n")
        with patch("s3gate.config.get_config_path", return_value=path):
            config = SigningConfig.from_yaml()
        assert config.presign_window_seconds == 120

    def test_from_yaml_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the defaults."""
        path = tmp_path / "s3gate.yaml"
        path.write_text("")
        assert SigningConfig.from_yaml(path) == SigningConfig()

    def test_from_yaml_not_mapping(self, tmp_path: Path) -> None:
        """A non-mapping document is rejected."""
        path = tmp_path / "s3gate.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="YAML mapping"):
            SigningConfig.from_yaml(path)

    def test_from_yaml_signature_not_mapping(self, tmp_path: Path) -> None:
        """A non-mapping signature section is rejected."""
        path = tmp_path / "s3gate.yaml"
        path.write_text("signature: 5\n")
        with pytest.raises(ConfigError, match="'signature'"):
            SigningConfig.from_yaml(path)

    def test_from_yaml_invalid_yaml(self, tmp_path: Path) -> None:
        """Broken YAML is reported as ConfigError."""
        path = tmp_path / "s3gate.yaml"
        path.write_text("signature: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            SigningConfig.from_yaml(path)

    def test_from_yaml_loads_dotenv(self, tmp_path: Path) -> None:
        """The .env loader runs before reading the file."""
        with patch("s3gate.config.load_dotenv_once") as mock_load:
            SigningConfig.from_yaml(tmp_path / "nope.yaml")
        mock_load.assert_called_once_with()

    def test_validator(self) -> None:
        """The validator mirrors the configured settings."""
        resolver = MagicMock()
        config = SigningConfig(
            validate_host=False,
            presign_window_seconds=300,
            date_granularity="day",
        )
        validator = config.validator(resolver=resolver)
        assert validator.validate_host is False
        assert validator.presign_window == timedelta(seconds=300)
        assert validator.date_granularity == "day"
        validator.validate("http", "host", "s3.example.com")
        resolver.assert_not_called()
