"""Test configuration for netloy."""

import tempfile
from pathlib import Path

import pytest

from netloy.core.config import Settings
from netloy.core.types import FrameworkKind, HostOS, PackageType
from netloy.metadata.templates import INFO_PLIST_TEMPLATE
from netloy.models.configuration import AppConfiguration
from netloy.models.request import BuildRequest
from netloy.packaging.pipeline import BuildServices
from netloy.tools.invoker import ToolInvoker, ToolResult
from netloy.tools.locator import ToolLocator
from netloy.tools.sanitizer import Sanitizer


class FakeInvoker(ToolInvoker):
    """ToolInvoker that records commands instead of running them.

    Responses are matched by substring against ``"<tool name> <args...>"``;
    unmatched commands succeed with empty output. A response may carry a
    ``side_effect`` called with the argument list, e.g. to create the file a
    packaging tool would have produced.
    """

    def __init__(self, sanitizer=None):
        super().__init__(sanitizer)
        self.calls = []
        self.envs = []
        self._responses = []

    def respond(self, match, returncode=0, stdout="", stderr="", side_effect=None):
        self._responses.append((match, returncode, stdout, stderr, side_effect))

    def commands(self, tool=None):
        return [call for call in self.calls if tool is None or call[0] == tool]

    async def run(self, tool, args, cwd=None, env=None):
        name = Path(tool).name
        self.calls.append([name, *args])
        self.envs.append(env)
        command = " ".join([name, *args])
        for match, returncode, stdout, stderr, side_effect in self._responses:
            if match in command:
                if side_effect is not None:
                    side_effect(list(args))
                return ToolResult(
                    tool=tool,
                    returncode=returncode,
                    stdout=self.sanitizer.sanitize(stdout),
                    stderr=self.sanitizer.sanitize(stderr),
                )
        return ToolResult(tool=tool, returncode=0)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(temp_dir):
    """Settings whose working tree lives under the temporary directory."""
    return Settings(temp_dir=temp_dir / "tmp")


@pytest.fixture
def icon_files(temp_dir):
    """One icon of every supported format.

    Returns:
        dict: Icon paths keyed by extension; PNGs keyed by size.
    """
    icons_dir = temp_dir / "icons"
    icons_dir.mkdir()
    icons = {
        ".icns": icons_dir / "logo.icns",
        ".ico": icons_dir / "logo.ico",
        ".svg": icons_dir / "logo.svg",
        "32": icons_dir / "logo.32x32.png",
        "256": icons_dir / "logo.256x256.png",
    }
    for path in icons.values():
        path.write_bytes(b"icon")
    return icons


@pytest.fixture
def binaries(temp_dir):
    """A pre-built publish directory for the HelloWorld application."""
    path = temp_dir / "bin"
    path.mkdir()
    (path / "HelloWorld").write_text("#!/bin/sh\necho hello\n")
    (path / "HelloWorld.dll").write_bytes(b"MZ")
    (path / "libnative.so").write_bytes(b"ELF")
    (path / "appsettings.json").write_text("{}")
    return path


@pytest.fixture
def app_config(temp_dir, icon_files):
    """A complete, valid application configuration."""
    output = temp_dir / "out"
    output.mkdir()
    info_plist = temp_dir / "Info.plist"
    info_plist.write_text(INFO_PLIST_TEMPLATE, encoding="utf-8")
    return AppConfiguration(
        app_base_name="HelloWorld",
        app_friendly_name="Hello World",
        app_id="com.example.helloworld",
        app_version_release="1.2.3[4]",
        app_short_summary="Says hello",
        app_description="A friendly application.\n\n* Greets\n* Waves",
        app_license_id="MIT",
        publisher_name="Example Ltd",
        publisher_copyright="Copyright (C) Example Ltd",
        publisher_link_name="Home Page",
        publisher_link_url="https://example.com",
        publisher_email="dev@example.com",
        prime_category="Utility",
        package_name="helloworld",
        output_directory=output,
        config_directory=temp_dir,
        icons=list(icon_files.values()),
        macos_info_plist=info_plist,
    )


@pytest.fixture
def make_request(binaries):
    """Factory for build requests that package the pre-built binaries."""

    def _make(package_type=PackageType.DEB, runtime="linux-x64", **overrides):
        values = {
            "package_type": package_type,
            "runtime": runtime,
            "framework": FrameworkKind.NETCORE,
            "binary_path": binaries,
            "skip_prompts": True,
        }
        values.update(overrides)
        return BuildRequest(**values)

    return _make


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def make_invoker():
    """Factory for fake invokers that redact the given secrets."""

    def _make(secrets=None):
        return FakeInvoker(Sanitizer(secrets))

    return _make


@pytest.fixture
def make_services(settings, fake_invoker, temp_dir):
    """Factory for BuildServices with a fake invoker and a scripted host.

    Every tool is found on PATH except those named in ``missing``; the
    Linux distribution is read from ``os_release``.
    """

    def _make(host_os=HostOS.LINUX, missing=(), invoker=None, os_release="ID=fedora\n"):
        release_file = temp_dir / "os-release"
        release_file.write_text(os_release)
        locator = ToolLocator(
            which=lambda name: None if name in missing else f"/usr/bin/{name}",
            host_os=host_os,
            host_architecture="x64",
            os_release=release_file,
        )
        return BuildServices(
            locator=locator,
            invoker=invoker or fake_invoker,
            settings=settings,
            confirm=lambda question: True,
        )

    return _make
