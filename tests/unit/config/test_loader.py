"""Tests for config loader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from slack_butler.config.loader import (
    ConfigFileNotFoundError,
    ConfigParseError,
    EnvVarNotFoundError,
    MissingTokenError,
    expand_env_vars,
    load_config,
    require_token,
)
from slack_butler.config.models import AppConfig


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
slack:
  token: xoxb-from-file
archive:
  warn_seconds: 60
  archive_seconds: 30
  exclude_channels: general,random
detect:
  announce_to: "#announcements"
""")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(config_file)

        assert isinstance(config, AppConfig)
        assert config.slack.token == "xoxb-from-file"
        assert config.archive.warn_seconds == 60
        assert config.archive.archive_seconds == 30
        assert config.archive.exclude_channels == "general,random"
        assert config.archive.exclude_prefixes == ""
        assert config.detect.announce_to == "#announcements"
        assert config.detect.since_days == 1.0

    def test_no_path_uses_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(None)

        assert config == AppConfig()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(config_file)

        assert config.archive.warn_seconds == 2_592_000

    def test_file_not_found(self) -> None:
        with pytest.raises(ConfigFileNotFoundError) as exc_info:
            load_config(Path("/nonexistent/path/config.yaml"))

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: format:")

        with pytest.raises(ConfigParseError):
            load_config(config_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigParseError, match="mapping"):
            load_config(config_file)

    def test_invalid_field_type(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
archive:
  warn_seconds: soon
""")

        with pytest.raises(ValidationError) as exc_info:
            load_config(config_file)

        errors = exc_info.value.errors()
        assert any(e["loc"] == ("archive", "warn_seconds") for e in errors)

    def test_slack_token_env_overrides_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("slack:\n  token: xoxb-from-file\n")

        with patch.dict(os.environ, {"SLACK_TOKEN": "xoxb-from-env"}, clear=True):
            config = load_config(config_file)

        assert config.slack.token == "xoxb-from-env"


class TestExpandEnvVars:
    """Tests for expand_env_vars function."""

    def test_expand_string_env_var(self) -> None:
        with patch.dict(os.environ, {"BOT_TOKEN": "xoxb-test"}, clear=False):
            result = expand_env_vars("${BOT_TOKEN}")

        assert result == "xoxb-test"

    def test_expand_nested_dict(self) -> None:
        with patch.dict(os.environ, {"BOT_TOKEN": "xoxb-test"}, clear=False):
            result = expand_env_vars({"slack": {"token": "${BOT_TOKEN}"}})

        assert result["slack"]["token"] == "xoxb-test"

    def test_expand_in_list(self) -> None:
        with patch.dict(os.environ, {"VAR1": "value1", "VAR2": "value2"}, clear=False):
            result = expand_env_vars(["${VAR1}", "${VAR2}", "static"])

        assert result == ["value1", "value2", "static"]

    def test_no_expansion_for_partial_match(self) -> None:
        with patch.dict(os.environ, {"VAR": "value"}, clear=False):
            result = expand_env_vars("prefix${VAR}suffix")

        assert result == "prefix${VAR}suffix"

    def test_undefined_env_var_raises_error(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EnvVarNotFoundError) as exc_info:
                expand_env_vars("${UNDEFINED_VAR}")

            assert "UNDEFINED_VAR" in str(exc_info.value)

    def test_non_string_values_unchanged(self) -> None:
        data = {"warn_seconds": 60, "include_private": True, "since_days": 0.5, "x": None}

        assert expand_env_vars(data) == data


class TestLoadConfigWithEnvVars:
    """Tests for load_config with environment variable expansion."""

    def test_load_config_with_env_vars(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
detect:
  announce_to: ${ANNOUNCE_CHANNEL}
""")

        with patch.dict(os.environ, {"ANNOUNCE_CHANNEL": "new-channels"}, clear=True):
            config = load_config(config_file)

        assert config.detect.announce_to == "new-channels"

    def test_load_config_with_undefined_env_var(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("slack:\n  token: ${MISSING_TOKEN}\n")

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EnvVarNotFoundError):
                load_config(config_file)


class TestRequireToken:
    """Tests for require_token function."""

    def test_returns_token(self) -> None:
        config = AppConfig()
        config.slack.token = "xoxb-abc"

        assert require_token(config) == "xoxb-abc"

    def test_missing_token_raises(self) -> None:
        with pytest.raises(MissingTokenError) as exc_info:
            require_token(AppConfig())

        assert "SLACK_TOKEN" in str(exc_info.value)
        assert "--token" in str(exc_info.value)
