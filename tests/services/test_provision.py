"""Tests for ProvisionService."""

from __future__ import annotations

from pathlib import Path

from structlog.testing import capture_logs

from mkacct.domain.accounts import Configuration, ProvisionOutcome
from mkacct.services.provision import COMMAND_NOT_FOUND, ProvisionService, build_useradd_command
from mkacct.services.result import ErrorCode
from tests.conftest import FakeAccountProvider


class TestBuildUseraddCommand:
    def test_minimal(self) -> None:
        command = build_useradd_command(Configuration(username="alice"))
        assert command == ["useradd", "-m", "-s", "/bin/bash", "alice"]

    def test_groups_and_comment(self) -> None:
        config = Configuration(
            username="jane", groups=("sudo", "docker"), comment="Jane Doe", shell="/bin/zsh"
        )
        assert build_useradd_command(config) == [
            "useradd",
            "-m",
            "-s",
            "/bin/zsh",
            "-G",
            "sudo,docker",
            "-c",
            "Jane Doe",
            "jane",
        ]

    def test_username_is_last(self) -> None:
        command = build_useradd_command(Configuration(username="bob", comment="x"))
        assert command[-1] == "bob"


class TestProvisionDryRun:
    def test_no_side_effects(self, provider: FakeAccountProvider) -> None:
        result = ProvisionService(provider).provision(Configuration(username="alice", dry_run=True))
        assert result.ok
        assert provider.created == []
        assert provider.passwords == []

    def test_outcome(self, provider: FakeAccountProvider) -> None:
        provider.home_base = Path("/srv/home")
        result = ProvisionService(provider).provision(Configuration(username="alice", dry_run=True))
        outcome = result.data["outcome"]
        assert outcome.dry_run is True
        assert outcome.created is False
        assert outcome.home_directory == "/srv/home/alice"
        assert outcome.command == ["useradd", "-m", "-s", "/bin/bash", "alice"]

    def test_on_created_not_called(self, provider: FakeAccountProvider) -> None:
        seen: list[ProvisionOutcome] = []
        ProvisionService(provider).provision(
            Configuration(username="alice", dry_run=True), on_created=seen.append
        )
        assert seen == []


class TestProvisionLive:
    def test_creates_and_sets_password(self, provider: FakeAccountProvider) -> None:
        seen: list[ProvisionOutcome] = []
        result = ProvisionService(provider).provision(
            Configuration(username="alice"), on_created=seen.append
        )
        assert result.ok
        assert result.warnings == []
        assert provider.created == [["useradd", "-m", "-s", "/bin/bash", "alice"]]
        assert provider.passwords == ["alice"]
        outcome = result.data["outcome"]
        assert outcome.created is True
        assert outcome.password_set is True
        assert outcome.home_directory == "/home/alice"
        assert [o.username for o in seen] == ["alice"]

    def test_skip_password(self, provider: FakeAccountProvider) -> None:
        result = ProvisionService(provider).provision(
            Configuration(username="alice", skip_password=True)
        )
        assert result.ok
        assert provider.passwords == []
        assert result.data["outcome"].password_set is False
        assert result.warnings == ["User account may be locked until password is set"]

    def test_passwd_failure_is_a_warning(self, provider: FakeAccountProvider) -> None:
        provider.passwd_returncode = 10
        result = ProvisionService(provider).provision(Configuration(username="alice"))
        assert result.ok
        assert result.data["outcome"].created is True
        assert result.data["outcome"].password_set is False
        assert result.warnings == [
            "Password setting failed or was cancelled; user account may be locked"
        ]

    def test_useradd_failure(self, provider: FakeAccountProvider) -> None:
        provider.create_returncode = 9
        provider.create_stderr = "useradd: user 'alice' already exists"
        result = ProvisionService(provider).provision(Configuration(username="alice"))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.EXECUTION
        assert result.error.message == "Failed to create user 'alice' (exit code: 9)"
        assert result.error.detail["exit_code"] == 9
        assert result.exit_status == 3
        assert provider.passwords == []

    def test_useradd_failure_output_is_warning(self, provider: FakeAccountProvider) -> None:
        provider.create_returncode = 6
        provider.create_stderr = "useradd: group 'docker' does not exist\n"
        config = Configuration(username="alice", groups=("docker",))
        with capture_logs() as logs:
            ProvisionService(provider).provision(config)
        warnings = [e["event"] for e in logs if e["log_level"] == "warning"]
        assert warnings == ["useradd: group 'docker' does not exist"]
        assert [e for e in logs if e["log_level"] == "error"] == []

    def test_useradd_success_output_is_info(self, provider: FakeAccountProvider) -> None:
        provider.create_stderr = "useradd: warning: the home directory already exists.\n"
        with capture_logs() as logs:
            ProvisionService(provider).provision(Configuration(username="alice", skip_password=True))
        assert all(e["log_level"] == "info" for e in logs)

    def test_useradd_cannot_start(self, provider: FakeAccountProvider) -> None:
        provider.create_error = FileNotFoundError("useradd")
        result = ProvisionService(provider).provision(Configuration(username="alice"))
        assert result.error is not None
        assert result.error.detail["exit_code"] == COMMAND_NOT_FOUND
        assert provider.passwords == []
