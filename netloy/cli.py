"""
netloy CLI.

Command-line interface for building packages and creating starter files.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from pydantic import SecretStr
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from .configuration import ConfigurationLoader
from .core.config import Settings, get_settings
from .core.exceptions import NetloyError, PlatformMismatchError
from .core.logging import bind_context, clear_context, get_logger, setup_logging, use_sanitizer
from .core.types import BuildReport, FrameworkKind, PackageType, PhaseStatus
from .macro import MacroId
from .metadata.templates import NewFileType, create_template_files
from .models.request import BuildRequest, SigningCredentials
from .packaging.capabilities import resolve_runtime
from .packaging.factory import BuilderFactory
from .packaging.pipeline import BuildServices
from .tools import Sanitizer, ToolInvoker, ToolLocator

app = typer.Typer(
    name="netloy",
    help="Package compiled .NET applications into native installers and archives",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_INTERNAL = -1

_STATUS_STYLES = {
    PhaseStatus.COMPLETED: "[green]completed[/green]",
    PhaseStatus.SKIPPED: "[dim]skipped[/dim]",
    PhaseStatus.FAILED: "[yellow]failed (optional)[/yellow]",
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"netloy v{__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """netloy: .NET application to native package."""
    pass


def ask(question: str) -> bool:
    return Confirm.ask(question, console=console, default=True)


def _secret(cli_value: Optional[str], env_value: SecretStr | None) -> SecretStr | None:
    if cli_value:
        return SecretStr(cli_value)
    return env_value


def signing_credentials(
    settings: Settings,
    identity: Optional[str],
    apple_id: Optional[str],
    team_id: Optional[str],
    password: Optional[str],
) -> SigningCredentials:
    """Command line values, falling back to the NETLOY_* environment."""
    env = settings.signing
    return SigningCredentials(
        identity=_secret(identity, env.identity),
        apple_id=_secret(apple_id, env.apple_id),
        team_id=_secret(team_id, env.team_id),
        password=_secret(password, env.password),
    )


def print_report(report: BuildReport) -> None:
    table = Table(title="Build Phases")
    table.add_column("Phase", style="cyan")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Note", style="dim")

    for phase in report.phases:
        table.add_row(
            phase.phase_name,
            _STATUS_STYLES.get(phase.status, phase.status.value),
            f"{phase.duration_seconds:.1f}s",
            phase.error_message or "",
        )
    console.print(table)

    if report.warnings:
        console.print(f"\n[yellow]Completed with {len(report.warnings)} warning(s)[/yellow]")
    console.print(f"\n[bold green]✓ Package created:[/bold green] {report.artifact}")


def run_build(request: BuildRequest, config_path: Optional[Path], settings: Settings, sanitizer: Sanitizer) -> BuildReport:
    """Load configuration, pick the builder, validate, build and optionally clean.

    Raises:
        NetloyError: On any user-facing failure.
        InternalError: When a precondition inside netloy is violated.
    """
    confirm = None if request.skip_prompts else ask
    loader = ConfigurationLoader(skip_prompts=request.skip_prompts, confirm=confirm)
    config = loader.load(config_path, project_path=request.project_path, output_path=request.output_path)

    locator = ToolLocator()
    request = resolve_runtime(request, locator)
    bind_context(package_type=request.package_type.value, runtime=request.runtime)

    services = BuildServices(
        locator=locator,
        invoker=ToolInvoker(sanitizer, verbose=request.verbose),
        settings=settings,
        confirm=confirm,
    )
    factory = BuilderFactory(services)
    if not factory.can_build(request):
        raise PlatformMismatchError(
            message="The package type is not supported for this host and runtime combination",
            package_type=request.package_type.value,
            runtime=request.runtime or "",
            host_os=locator.host_os.value,
        )

    builder = factory.create_builder(request, config)
    builder.validate()
    report = asyncio.run(builder.build())
    if request.clean:
        builder.clear()
    return report


@app.command()
def build(
    package_type: PackageType = typer.Option(
        ...,
        "--type",
        "-t",
        case_sensitive=False,
        help="Package type to build",
    ),
    runtime: Optional[str] = typer.Option(
        None,
        "--runtime",
        "-r",
        help="Target runtime identifier, e.g. linux-x64 (defaults to the host)",
    ),
    framework: FrameworkKind = typer.Option(
        FrameworkKind.NETCORE,
        "--framework",
        "-f",
        case_sensitive=False,
        help="Target framework kind",
    ),
    publish_configuration: str = typer.Option(
        "Release",
        "--configuration",
        "-c",
        help="Publish configuration",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory or file",
    ),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Project file or directory; overrides DotnetProjectPath",
    ),
    binary_path: Optional[Path] = typer.Option(
        None,
        "--binary-path",
        help="Package pre-built binaries instead of publishing",
    ),
    app_version: Optional[str] = typer.Option(
        None,
        "--app-version",
        "-v",
        help="Overrides the version from AppVersionRelease",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config-path",
        help="Configuration file (defaults to the *.netloy file in the current directory)",
    ),
    clean: bool = typer.Option(False, "--clean", help="Clean project and working directory"),
    skip_prompts: bool = typer.Option(False, "--yes", "-y", help="Answer yes to every question"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
    mac_signing_identity: Optional[str] = typer.Option(
        None, "--mac-signing-identity", help="codesign identity (or NETLOY_MAC_SIGNING_IDENTITY)"
    ),
    apple_id: Optional[str] = typer.Option(None, "--apple-id", help="Apple ID (or NETLOY_APPLE_ID)"),
    apple_team_id: Optional[str] = typer.Option(
        None, "--apple-team-id", help="Apple team ID (or NETLOY_APPLE_TEAM_ID)"
    ),
    apple_password: Optional[str] = typer.Option(
        None, "--apple-password", help="App-specific password (or NETLOY_APPLE_PASSWORD)"
    ),
) -> None:
    """Build a package from the .netloy configuration."""
    settings = get_settings()
    setup_logging(settings, verbose=verbose)

    credentials = signing_credentials(settings, mac_signing_identity, apple_id, apple_team_id, apple_password)
    sanitizer = Sanitizer(credentials.secrets())
    use_sanitizer(sanitizer)

    request = BuildRequest(
        package_type=package_type,
        runtime=runtime,
        framework=framework,
        publish_configuration=publish_configuration,
        output_path=output,
        project_path=project,
        binary_path=binary_path,
        app_version=app_version,
        signing=credentials,
        skip_prompts=skip_prompts,
        clean=clean,
        verbose=verbose,
    )

    console.print(Panel.fit(
        f"[bold blue]netloy[/bold blue]\nBuilding {package_type.value.upper()} package",
        border_style="blue",
    ))

    try:
        report = run_build(request, config_path, settings, sanitizer)
    except NetloyError as e:
        console.print(f"\n[bold red]✗ Build failed[/bold red]\n{escape(sanitizer.sanitize(str(e)))}")
        if verbose and e.cause is not None:
            console.print(f"[dim]{escape(sanitizer.sanitize(str(e.cause)))}[/dim]")
        raise typer.Exit(EXIT_FAILURE)
    except Exception as e:
        logger.exception("Unhandled error")
        console.print(f"\n[bold red]✗ Internal error[/bold red]\n{escape(sanitizer.sanitize(str(e)))}")
        raise typer.Exit(EXIT_INTERNAL)
    finally:
        clear_context()
        use_sanitizer(None)

    print_report(report)


@app.command()
def new(
    kind: NewFileType = typer.Argument(..., case_sensitive=False, help="File kind to create"),
    output: Path = typer.Option(Path("."), "--output", "-o", help="Target directory"),
    name: str = typer.Option("app", "--name", "-n", help="Base file name"),
    skip_prompts: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files without asking"),
) -> None:
    """Create starter configuration and template files."""
    setup_logging(get_settings())

    try:
        written = create_template_files(kind, output, name=name, confirm=None if skip_prompts else ask)
    except NetloyError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_FAILURE)
    except OSError as e:
        console.print(f"[red]Failed to write files: {e}[/red]")
        raise typer.Exit(EXIT_FAILURE)

    for path in written:
        console.print(f"  [green]✓[/green] {path}")


@app.command()
def macros() -> None:
    """List the macros available in template files."""
    table = Table(title="Macros")
    table.add_column("Placeholder", style="cyan")
    table.add_column("Description")

    for macro_id in MacroId:
        table.add_row(macro_id.placeholder, macro_id.description)

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
