"""Tests for command-line parsing."""

from mkacct.services.arguments import parse_arguments, split_groups
from mkacct.services.result import ErrorCode


class TestParseArguments:
    def test_username_only(self) -> None:
        result = parse_arguments(["alice"])
        assert result.ok
        config = result.data["config"]
        assert config.username == "alice"
        assert config.shell == "/bin/bash"
        assert result.warnings == []

    def test_all_options(self) -> None:
        result = parse_arguments(
            [
                "jane",
                "--groups",
                "sudo,docker",
                "--shell",
                "/bin/zsh",
                "--comment",
                "Jane Doe",
                "--no-password",
                "--dry-run",
                "--verbose",
            ]
        )
        config = result.data["config"]
        assert config.username == "jane"
        assert config.groups == ("sudo", "docker")
        assert config.shell == "/bin/zsh"
        assert config.comment == "Jane Doe"
        assert config.skip_password is True
        assert config.dry_run is True
        assert config.verbose is True

    def test_options_before_username(self) -> None:
        config = parse_arguments(["--dry-run", "bob"]).data["config"]
        assert config.username == "bob"
        assert config.dry_run is True

    def test_default_shell_override(self) -> None:
        config = parse_arguments(["bob"], default_shell="/bin/sh").data["config"]
        assert config.shell == "/bin/sh"

    def test_empty_is_usage_error(self) -> None:
        result = parse_arguments([])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.USAGE
        assert result.error.message == "No arguments provided"
        assert result.error.detail["show_usage"] is True

    def test_help_wins(self) -> None:
        for flag in ("--help", "-h"):
            result = parse_arguments(["alice", flag, "--shell"])
            assert result.ok
            assert result.data == {"help": True}

    def test_missing_value(self) -> None:
        result = parse_arguments(["alice", "--shell"])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.USAGE
        assert result.error.message == "--shell requires a value"

    def test_value_cannot_be_a_flag(self) -> None:
        result = parse_arguments(["alice", "--groups", "--dry-run"])
        assert result.error is not None
        assert result.error.message == "--groups requires a value"

    def test_value_may_start_with_single_dash(self) -> None:
        config = parse_arguments(["alice", "--comment", "-ops-"]).data["config"]
        assert config.comment == "-ops-"

    def test_unknown_option_warns(self) -> None:
        result = parse_arguments(["alice", "--frobnicate"])
        assert result.ok
        assert result.warnings == ["Unknown option: --frobnicate"]
        assert result.data["config"].username == "alice"

    def test_extra_positional_warns(self) -> None:
        result = parse_arguments(["alice", "bob"])
        assert result.data["config"].username == "alice"
        assert result.warnings == ["Ignoring extra argument: bob"]

    def test_no_username_still_parses(self) -> None:
        result = parse_arguments(["--dry-run"])
        assert result.ok
        assert result.data["config"].username == ""


class TestSplitGroups:
    def test_drops_blanks_and_whitespace(self) -> None:
        assert split_groups(" sudo, ,docker,") == ("sudo", "docker")

    def test_empty(self) -> None:
        assert split_groups("") == ()
