"""Unit tests for tool invocation, discovery and secret redaction."""

import sys

import pytest

from netloy.core.exceptions import ToolNotFoundError
from netloy.core.logging import redact_secrets, use_sanitizer
from netloy.core.types import HostOS, LinuxDistro
from netloy.tools import REDACTION_TOKENS, Sanitizer, ToolInvoker, ToolLocator
from netloy.tools.invoker import COMMAND_NOT_FOUND


SECRETS = {
    "apple_id": "dev@example.com",
    "team_id": "TEAM123456",
    "password": "abcd-efgh-ijkl-mnop",
    "signing_identity": "Developer ID Application: Example Ltd (TEAM123456)",
}


class TestSanitizer:
    """Tests for Sanitizer."""

    def test_every_secret_replaced(self):
        sanitizer = Sanitizer(SECRETS)
        text = (
            "--apple-id dev@example.com --team-id TEAM123456 --password abcd-efgh-ijkl-mnop "
            "--sign 'Developer ID Application: Example Ltd (TEAM123456)'"
        )

        result = sanitizer.sanitize(text)

        for value in SECRETS.values():
            assert value not in result
        assert "***APPLE_ID***" in result
        assert "***PASSWORD***" in result
        assert "***SIGNING_IDENTITY***" in result
        assert result.count("***TEAM_ID***") == 1

    def test_other_text_untouched(self):
        sanitizer = Sanitizer(SECRETS)
        assert sanitizer.sanitize("status: Accepted") == "status: Accepted"

    def test_empty_secrets_ignored(self):
        sanitizer = Sanitizer({"apple_id": "", "password": ""})
        assert not sanitizer.active
        assert sanitizer.sanitize("nothing to hide") == "nothing to hide"

    def test_none_text(self):
        assert Sanitizer(SECRETS).sanitize(None) == ""

    def test_tokens_are_fixed(self):
        assert set(REDACTION_TOKENS.values()) == {
            "***APPLE_ID***",
            "***TEAM_ID***",
            "***PASSWORD***",
            "***SIGNING_IDENTITY***",
        }

    def test_log_processor_redacts_string_fields(self):
        use_sanitizer(Sanitizer(SECRETS))
        try:
            event = redact_secrets(None, "info", {"event": "submit abcd-efgh-ijkl-mnop", "count": 3})
        finally:
            use_sanitizer(None)

        assert event["event"] == "submit ***PASSWORD***"
        assert event["count"] == 3

    def test_log_processor_without_sanitizer(self):
        event = {"event": "abcd-efgh-ijkl-mnop"}
        assert redact_secrets(None, "info", dict(event)) == event


@pytest.mark.asyncio
class TestToolInvoker:
    """Tests for ToolInvoker with real processes."""

    async def test_output_is_sanitized(self):
        invoker = ToolInvoker(Sanitizer(SECRETS))
        result = await invoker.run(
            sys.executable,
            ["-c", "import sys; print('id dev@example.com'); print('pw abcd-efgh-ijkl-mnop', file=sys.stderr)"],
        )

        assert result.succeeded
        assert result.stdout.strip() == "id ***APPLE_ID***"
        assert result.stderr.strip() == "pw ***PASSWORD***"

    async def test_nonzero_exit_is_reported(self):
        invoker = ToolInvoker()
        result = await invoker.run(sys.executable, ["-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])

        assert not result.succeeded
        assert result.returncode == 3
        assert result.message == "bad"

    async def test_missing_executable(self):
        result = await ToolInvoker().run("netloy-no-such-tool", ["--help"])
        assert result.returncode == COMMAND_NOT_FOUND
        assert "command not found" in result.message

    async def test_environment_is_layered(self):
        result = await ToolInvoker().run(
            sys.executable,
            ["-c", "import os; print(os.environ['APP_ID'], 'PATH' in os.environ)"],
            env={"APP_ID": "com.example.app"},
        )
        assert result.stdout.strip() == "com.example.app True"


class TestToolLocator:
    """Tests for ToolLocator."""

    def test_lookups_are_memoized(self):
        seen = []

        def which(name):
            seen.append(name)
            return "/usr/bin/dpkg-deb" if name == "dpkg-deb" else None

        locator = ToolLocator(which=which, host_os=HostOS.LINUX)
        assert locator.is_available("dpkg-deb")
        assert locator.find("dpkg-deb") is not None
        assert not locator.is_available("rpmbuild")
        assert seen == ["dpkg-deb", "rpmbuild"]

    def test_require_missing_tool(self):
        locator = ToolLocator(which=lambda name: None, host_os=HostOS.LINUX)
        with pytest.raises(ToolNotFoundError) as exc_info:
            locator.require("rpmbuild")
        assert exc_info.value.tool_name == "rpmbuild"
        assert "rpm-build" in exc_info.value.install_hint

    @pytest.mark.parametrize(
        "host_os,arch,expected",
        [
            (HostOS.LINUX, "x64", "linux-x64"),
            (HostOS.MACOS, "arm64", "osx-arm64"),
            (HostOS.WINDOWS, "x86", "win-x86"),
        ],
    )
    def test_default_runtime(self, host_os, arch, expected):
        locator = ToolLocator(host_os=host_os, host_architecture=arch)
        assert locator.default_runtime() == expected

    def test_default_runtime_unknown_host(self):
        with pytest.raises(ValueError):
            ToolLocator(host_os=HostOS.UNKNOWN, host_architecture="x64").default_runtime()

    def test_linux_distro_detection(self, temp_dir):
        os_release = temp_dir / "os-release"
        os_release.write_text('NAME="Fedora Linux"\nID=fedora\n')
        locator = ToolLocator(host_os=HostOS.LINUX, os_release=os_release)
        assert locator.linux_distro == LinuxDistro.REDHAT

    def test_linux_distro_on_other_hosts(self, temp_dir):
        os_release = temp_dir / "os-release"
        os_release.write_text("ID=ubuntu\n")
        locator = ToolLocator(host_os=HostOS.MACOS, os_release=os_release)
        assert locator.linux_distro == LinuxDistro.UNKNOWN
