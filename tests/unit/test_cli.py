"""Unit tests for the netloy command line."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from netloy import __version__, cli
from netloy.core.config import Settings
from netloy.core.exceptions import ToolExecutionError, ValidationError
from netloy.core.types import BuildReport, PackageType, PhaseResult

runner = CliRunner()


@pytest.fixture
def run_build(settings):
    """The build command with logging, settings and the build itself mocked out."""
    with patch.object(cli, "setup_logging"), patch.object(cli, "get_settings", return_value=settings), patch.object(
        cli, "run_build"
    ) as mock:
        yield mock


def completed_report():
    phase = PhaseResult(phase_name="build package")
    phase.mark_completed()
    return BuildReport(
        package_type=PackageType.DEB,
        runtime="linux-x64",
        artifact=Path("out.deb"),
        phases=[phase],
    )


class TestCommands:
    """Tests for the version, macros and new commands."""

    def test_version(self):
        result = runner.invoke(cli.app, ["--version"])
        assert result.exit_code == 0
        assert f"netloy v{__version__}" in result.output

    def test_macros(self):
        result = runner.invoke(cli.app, ["macros"])
        assert result.exit_code == 0
        assert "${APP_ID}" in result.output
        assert "${INSTALL_EXEC}" in result.output

    def test_new(self, temp_dir):
        with patch.object(cli, "setup_logging"):
            result = runner.invoke(cli.app, ["new", "conf", "-o", str(temp_dir), "-n", "hello", "-y"])
        assert result.exit_code == 0
        assert (temp_dir / "hello.netloy").is_file()

    def test_new_rejects_unknown_kind(self, temp_dir):
        result = runner.invoke(cli.app, ["new", "readme", "-o", str(temp_dir)])
        assert result.exit_code == 2


class TestBuild:
    """Tests for the build command."""

    def test_success(self, run_build):
        run_build.return_value = completed_report()

        result = runner.invoke(cli.app, ["build", "-t", "DEB", "-r", "linux-x64", "-y", "--config-path", "app.netloy"])

        assert result.exit_code == 0
        assert "Package created" in result.output
        request, config_path = run_build.call_args.args[:2]
        assert request.package_type == PackageType.DEB
        assert request.runtime == "linux-x64"
        assert request.skip_prompts is True
        assert config_path == Path("app.netloy")

    def test_options(self, run_build):
        run_build.return_value = completed_report()

        runner.invoke(
            cli.app,
            ["build", "-t", "portable", "-v", "2.0.0", "-c", "Debug", "--binary-path", "bin", "--clean"],
        )

        request = run_build.call_args.args[0]
        assert request.package_type == PackageType.PORTABLE
        assert request.runtime is None
        assert request.app_version == "2.0.0"
        assert request.publish_configuration == "Debug"
        assert request.binary_path == Path("bin")
        assert request.clean is True

    def test_user_error_exits_with_one(self, run_build):
        run_build.side_effect = ValidationError.from_errors(["Couldn't find icon file."])

        result = runner.invoke(cli.app, ["build", "-t", "deb"])

        assert result.exit_code == 1
        assert "Build failed" in result.output
        assert "Couldn't find icon file." in result.output

    def test_internal_error_exits_with_minus_one(self, run_build):
        run_build.side_effect = RuntimeError("boom")

        result = runner.invoke(cli.app, ["build", "-t", "deb"])

        assert result.exit_code == -1
        assert "Internal error" in result.output

    def test_credentials_are_redacted(self, run_build):
        run_build.side_effect = ToolExecutionError(
            message="login rejected for s3cr3t-pass", tool_name="xcrun", returncode=1
        )

        result = runner.invoke(
            cli.app, ["build", "-t", "app", "-r", "osx-arm64", "--apple-password", "s3cr3t-pass"]
        )

        assert result.exit_code == 1
        assert "s3cr3t-pass" not in result.output
        assert "***PASSWORD***" in result.output
        assert run_build.call_args.args[0].signing.password_value == "s3cr3t-pass"

    def test_credentials_from_environment(self, run_build, monkeypatch, temp_dir):
        monkeypatch.setenv("NETLOY_APPLE_ID", "dev@example.com")
        monkeypatch.setenv("NETLOY_APPLE_PASSWORD", "env-pass")
        run_build.return_value = completed_report()

        with patch.object(cli, "get_settings", return_value=Settings(temp_dir=temp_dir)):
            runner.invoke(cli.app, ["build", "-t", "dmg", "--apple-password", "cli-pass"])

        signing = run_build.call_args.args[0].signing
        assert signing.apple_id_value == "dev@example.com"
        assert signing.password_value == "cli-pass"
        assert not signing.has_identity
