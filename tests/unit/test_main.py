"""Unit tests for __main__.py entry point."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from slack_butler.config import AppConfig
from slack_butler.domain.errors import MissingPermissionError


@pytest.fixture
def mock_slack(monkeypatch: pytest.MonkeyPatch) -> None:
    """Use the in-memory Slack API with a test token."""
    monkeypatch.setenv("MOCK_SLACK", "true")
    monkeypatch.setenv("SLACK_TOKEN", "MOCK-TOKEN")
    monkeypatch.delenv("SLACK_DEBUG", raising=False)


def run_main(argv: list[str]) -> int:
    from slack_butler.__main__ import main

    with patch.object(sys, "argv", ["slack-butler", *argv]):
        with pytest.raises(SystemExit) as exc_info:
            main()
    return exc_info.value.code


class TestParseArgs:
    """Test cases for parse_args function."""

    def test_archive_defaults(self) -> None:
        from slack_butler.__main__ import parse_args

        args = parse_args(["channels", "archive"])

        assert args.config is None
        assert args.command == "channels"
        assert args.channels_command == "archive"
        assert args.warn_seconds is None
        assert args.dry_run is False

    def test_archive_flags(self) -> None:
        from slack_butler.__main__ import parse_args

        args = parse_args(
            [
                "--config",
                "custom.yaml",
                "channels",
                "archive",
                "--warn-seconds",
                "30",
                "--archive-seconds",
                "7",
                "--exclude-channels",
                "general,random",
                "--exclude-prefixes",
                "test-",
                "--dry-run",
            ]
        )

        assert args.config == Path("custom.yaml")
        assert args.warn_seconds == 30
        assert args.archive_seconds == 7
        assert args.exclude_channels == "general,random"
        assert args.exclude_prefixes == "test-"
        assert args.dry_run is True

    def test_detect_flags(self) -> None:
        from slack_butler.__main__ import parse_args

        args = parse_args(
            ["channels", "detect", "--since", "7", "--announce-to", "#new-channels"]
        )

        assert args.channels_command == "detect"
        assert args.since == 7.0
        assert args.announce_to == "#new-channels"

    def test_subcommand_required(self) -> None:
        from slack_butler.__main__ import parse_args

        with pytest.raises(SystemExit):
            parse_args([])


class TestApplyOverrides:
    def test_cli_flags_override_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from slack_butler.__main__ import apply_overrides, parse_args

        monkeypatch.delenv("SLACK_DEBUG", raising=False)
        args = parse_args(
            ["--token", "xoxb-cli", "channels", "archive", "--warn-seconds", "60"]
        )

        config = apply_overrides(AppConfig(), args)

        assert config.slack.token == "xoxb-cli"
        assert config.archive.warn_seconds == 60
        assert config.archive.archive_seconds == 604_800
        assert config.logging.level == "INFO"

    def test_negative_since_rejected(self) -> None:
        from slack_butler.__main__ import apply_overrides, parse_args

        args = parse_args(["channels", "detect", "--since", "-1"])

        with pytest.raises(ValidationError):
            apply_overrides(AppConfig(), args)

    def test_debug_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from slack_butler.__main__ import apply_overrides, parse_args

        monkeypatch.setenv("SLACK_DEBUG", "true")

        config = apply_overrides(AppConfig(), parse_args(["health"]))

        assert config.logging.level == "DEBUG"


class TestMainWithErrors:
    """Test cases for main function error handling."""

    def test_config_file_not_found(
        self, mock_slack: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_main(["-c", "nonexistent.yaml", "channels", "archive"])

        assert code == 1
        captured = capsys.readouterr()
        assert "nonexistent.yaml" in captured.err
        assert "not found" in captured.err

    def test_invalid_config_file(
        self, mock_slack: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        invalid_config = tmp_path / "invalid.yaml"
        invalid_config.write_text("invalid: yaml: content:")

        code = run_main(["-c", str(invalid_config), "channels", "archive"])

        assert code == 1
        assert "Error" in capsys.readouterr().err

    def test_missing_token(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.delenv("SLACK_TOKEN", raising=False)
        monkeypatch.delenv("MOCK_SLACK", raising=False)

        code = run_main(["channels", "archive"])

        assert code == 1
        assert "SLACK_TOKEN" in capsys.readouterr().err

    def test_non_positive_threshold(
        self, mock_slack: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_main(["channels", "archive", "--warn-seconds", "0"])

        assert code == 1
        assert "must be positive" in capsys.readouterr().err

    def test_negative_since_exits_with_error(
        self, mock_slack: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_main(["channels", "detect", "--since", "-1"])

        assert code == 1
        err = capsys.readouterr().err
        assert "Configuration validation error" in err
        assert "since_days" in err

    def test_invalid_announce_channel(
        self, mock_slack: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_main(["channels", "detect", "--announce-to", "Bad Name"])

        assert code == 1
        assert "invalid channel name" in capsys.readouterr().err

    def test_slack_error_prints_hint(
        self, mock_slack: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        error = MissingPermissionError("channels:history", "read channel history")
        with patch("slack_butler.__main__.run", side_effect=error):
            code = run_main(["channels", "archive"])

        assert code == 1
        err = capsys.readouterr().err
        assert "channels:history" in err
        assert "Fix:" in err

    def test_keyboard_interrupt_exits_130(self, mock_slack: None) -> None:
        with patch("slack_butler.__main__.run", side_effect=KeyboardInterrupt):
            code = run_main(["channels", "archive"])

        assert code == 130


class TestMainCommands:
    """End-to-end runs against the in-memory Slack API."""

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = run_main(["--version"])

        assert code == 0
        assert "slack-butler version 0.1.0" in capsys.readouterr().out

    def test_archive_dry_run(
        self, mock_slack: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_main(["channels", "archive", "--dry-run"])

        assert code == 0
        assert "Summary (dry run)" in capsys.readouterr().out

    def test_detect(self, mock_slack: None, capsys: pytest.CaptureFixture[str]) -> None:
        code = run_main(["channels", "detect", "--dry-run"])

        assert code == 0
        assert "No new channels found" in capsys.readouterr().out

    def test_health(self, mock_slack: None, capsys: pytest.CaptureFixture[str]) -> None:
        code = run_main(["health", "--verbose"])

        assert code == 0
        out = capsys.readouterr().out
        assert "authentication: PASSED" in out
        assert "Health check completed successfully" in out
