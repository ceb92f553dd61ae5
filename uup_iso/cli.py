"""Thin CLI wrapper for uup_iso.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from uup_iso import __version__
from uup_iso.config import get_settings, print_settings_json
from uup_iso.errors import UupIsoError
from uup_iso.log import configure_logging

app = typer.Typer(
    name="uup-iso",
    help="UUP ISO - resolve Windows builds on UUP dump and build ISO images",
    no_args_is_help=True,
)
console = Console()

TargetArg = Annotated[
    str, typer.Argument(help="Windows target name (e.g., windows-11)")
]
ArchitectureOpt = Annotated[
    str, typer.Option("--architecture", "-a", help="Architecture: x64 or arm64")
]
EditionOpt = Annotated[
    str, typer.Option("--edition", "-e", help="Edition: pro, core, multi or home")
]
LangOpt = Annotated[str, typer.Option("--lang", "-l", help="Language code")]
JsonOpt = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"uup-iso version {__version__}")
        raise typer.Exit()


def _error_exit(error: UupIsoError) -> typer.Exit:
    """Print a uup_iso error and return the exit to raise."""
    console.print(f"[red]Error \\[{error.code}]: {escape(str(error))}[/red]")
    return typer.Exit(code=1)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (overrides UUP_ISO_LOG_LEVEL)"),
    ] = None,
) -> None:
    """UUP ISO - resolve Windows builds on UUP dump and build ISO images."""
    configure_logging((log_level or get_settings().log_level).upper())


@app.command()
def config(json_output: JsonOpt = False) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True)
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Catalog:[/bold]")
    console.print(f"  API base URL:        {settings.api_base_url}")
    console.print(f"  Web base URL:        {settings.web_base_url}")
    console.print(f"  User agent:          {settings.user_agent}")
    console.print()
    console.print("[bold]Retry:[/bold]")
    console.print(f"  Request timeout:     {settings.request_timeout}")
    console.print(f"  Max attempts:        {settings.max_attempts}")
    console.print(f"  Retry delay:         {settings.retry_delay}")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  Output directory:    {settings.output_dir}")
    console.print(f"  Work directory:      {settings.work_dir}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Conversion timeout:  {settings.conversion_timeout}")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def targets(
    architecture: ArchitectureOpt = "x64",
    edition: EditionOpt = "pro",
    json_output: JsonOpt = False,
) -> None:
    """List supported Windows targets."""
    from uup_iso.catalog.targets import TargetCatalog
    from uup_iso.errors import InvalidParameterError
    from uup_iso.request import VALID_ARCHITECTURES, VALID_EDITIONS, edition_for_choice
    from uup_iso.types import Architecture, EditionChoice

    try:
        if architecture not in VALID_ARCHITECTURES:
            raise InvalidParameterError("architecture", architecture, VALID_ARCHITECTURES)
        if edition not in VALID_EDITIONS:
            raise InvalidParameterError("edition", edition, VALID_EDITIONS)
    except UupIsoError as e:
        raise _error_exit(e) from None

    catalog = TargetCatalog(
        arch=Architecture(architecture).catalog_token,
        edition=edition_for_choice(EditionChoice(edition)),
    )

    if json_output:
        output = [
            {
                "name": t.name,
                "search": t.search_term,
                "edition": t.required_edition.value,
                "ring": t.ring.value if t.ring else None,
            }
            for t in catalog.values()
        ]
        console.print(json.dumps(output, indent=2), soft_wrap=True)
        return

    console.print(f"[bold]{len(catalog)} target(s):[/bold]")
    console.print()
    for t in catalog.values():
        ring = f" [yellow]({t.ring.value})[/yellow]" if t.ring else ""
        console.print(f"  [green]{t.name}[/green]{ring}")
        console.print(f"    Search: {t.search_term}")
        console.print(f"    Edition: {t.required_edition.value}")


@app.command()
def resolve(
    target: TargetArg,
    architecture: ArchitectureOpt = "x64",
    edition: EditionOpt = "pro",
    lang: LangOpt = "en-us",
    json_output: JsonOpt = False,
) -> None:
    """Resolve a target to one catalog build and print its URLs."""
    from uup_iso.catalog.client import CatalogClient
    from uup_iso.request import resolve_request
    from uup_iso.service import resolve_build

    settings = get_settings()
    try:
        request = resolve_request(
            target, architecture=architecture, edition=edition, language=lang
        )
        with CatalogClient.from_settings(settings) as client:
            selected = resolve_build(request, client, settings=settings)
    except UupIsoError as e:
        raise _error_exit(e) from None

    if json_output:
        console.print(json.dumps(selected.to_dict(), indent=2), soft_wrap=True)
        return

    console.print(f"[green]✓ {selected.title}[/green]")
    console.print(f"  ID:        {selected.id}")
    console.print(f"  Build:     {selected.build_number}")
    console.print(f"  Edition:   {selected.edition}")
    if selected.virtual_edition:
        console.print(f"  Virtual:   {selected.virtual_edition}")
    console.print(f"  API:       {selected.api_url}")
    console.print(f"  Download:  {selected.download_url}")
    console.print(f"  Package:   {selected.download_package_url}")


@app.command()
def build(
    target: TargetArg,
    destination_directory: Annotated[
        str | None,
        typer.Option("--destination-directory", "-d", help="Output directory"),
    ] = None,
    architecture: ArchitectureOpt = "x64",
    edition: EditionOpt = "pro",
    lang: LangOpt = "en-us",
    esd: Annotated[bool, typer.Option("--esd", help="Compress install image as ESD")] = False,
    drivers: Annotated[bool, typer.Option("--drivers", help="Add drivers")] = False,
    netfx3: Annotated[bool, typer.Option("--netfx3", help="Integrate .NET 3.5")] = False,
    virtual_edition: Annotated[
        str | None,
        typer.Option("--virtual-edition", help="Virtual edition to create"),
    ] = None,
    skip_conversion: Annotated[
        bool,
        typer.Option("--skip-conversion", help="Only prepare the conversion package"),
    ] = False,
    keep_work_dir: Annotated[
        bool,
        typer.Option("--keep-work-dir", help="Keep the conversion package directory"),
    ] = False,
) -> None:
    """Resolve a target and build its ISO."""
    from uup_iso.request import resolve_request
    from uup_iso.service import build_iso

    settings = get_settings()
    try:
        request = resolve_request(
            target,
            architecture=architecture,
            edition=edition,
            language=lang,
            esd=esd,
            drivers=drivers,
            netfx3=netfx3,
            destination_directory=destination_directory or str(settings.output_dir),
            virtual_edition=virtual_edition,
        )
        console.print(f"[blue]Building {target} ({architecture}, {edition}, {lang})...[/blue]")
        result = build_iso(
            request,
            settings=settings,
            skip_conversion=skip_conversion,
            keep_work_dir=keep_work_dir,
        )
    except UupIsoError as e:
        raise _error_exit(e) from None

    if result.artifact is None:
        console.print(f"[green]✓ Package prepared: {result.package_dir}[/green]")
        return

    console.print(f"[green]✓ ISO ready: {result.artifact.iso_path}[/green]")
    console.print(f"  SHA-256: {result.artifact.sha256}")
    console.print(f"  Size:    {result.artifact.size_bytes} bytes")


@app.command("config-export")
def config_export(
    target: TargetArg,
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output file"),
    ] = "windows-iso-config.json",
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: json or yaml"),
    ] = "json",
    destination_directory: Annotated[
        str,
        typer.Option("--destination-directory", "-d", help="Output directory"),
    ] = "output",
    architecture: ArchitectureOpt = "x64",
    edition: EditionOpt = "pro",
    lang: LangOpt = "en-us",
    esd: Annotated[bool, typer.Option("--esd", help="Compress install image as ESD")] = False,
    drivers: Annotated[bool, typer.Option("--drivers", help="Add drivers")] = False,
    netfx3: Annotated[bool, typer.Option("--netfx3", help="Integrate .NET 3.5")] = False,
) -> None:
    """Validate parameters and write them with the target table to a file."""
    from uup_iso.export import export_request_config
    from uup_iso.request import resolve_request

    try:
        request = resolve_request(
            target,
            architecture=architecture,
            edition=edition,
            language=lang,
            esd=esd,
            drivers=drivers,
            netfx3=netfx3,
            destination_directory=destination_directory,
        )
    except UupIsoError as e:
        raise _error_exit(e) from None

    if output_format not in ("json", "yaml"):
        console.print(f"[red]Error: Unsupported format: {output_format}[/red]")
        raise typer.Exit(code=1)

    path = export_request_config(request, Path(output), output_format=output_format)  # type: ignore[arg-type]
    console.print(f"Configuration saved to {path}")
    console.print(f"Target: {request.target_name}")
    console.print(f"Architecture: {request.architecture.value} ({request.arch})")
    console.print(f"Edition: {request.edition_choice.value}")
    console.print(f"Language: {request.language}")


if __name__ == "__main__":
    app()
