"""CLI principal (Typer).

Por qué Typer + Rich:
- Comandos declarativos con tipado y ayuda automática.
- La presentación (tablas/paneles) queda en `cli.ui_components`; la lógica de
  aplicación vive en `core.services.patch_applier`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.json_exporter import export_definition_json, render_definition_json
from adapters.kts_renderer import DEFAULT_PACKAGE, export_kts_patch, render_kts_patch
from adapters.patch_loader import discover_patch_files, load_patches
from adapters.registry_store import load_registry, save_registry
from cli import doctor
from cli.ui_components import (
    build_changes_table,
    build_parameters_table,
    build_patch_table,
    print_error,
)
from core.config import AppSettings
from core.domain.errors import PatchError
from core.domain.models import BuildTypePatch
from core.services.patch_applier import apply_patch_document

app = typer.Typer(no_args_is_help=True, help="Apply build-type parameter patches to a CI configuration registry.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def load_settings() -> AppSettings:
    try:
        return AppSettings()
    except ValidationError as exc:
        print_error(_err_console, f"Invalid configuration: {exc}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    settings = load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _load_all(paths: list[Path]) -> list[tuple[Path, list[BuildTypePatch]]]:
    return [(path, load_patches(path)) for path in paths]


@app.command()
def apply(
    patch_paths: Optional[List[Path]] = typer.Argument(
        None,
        help="Patch files (.kts/.json). Defaults to every patch under the configured patches dir.",
    ),
    registry_path: Optional[Path] = typer.Option(None, "--registry", "-r", help="Registry snapshot (JSON)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the updated registry here."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Apply in memory only; write nothing."),
    delete_patch: Optional[bool] = typer.Option(
        None,
        "--delete-patch/--keep-patch",
        help="Delete patch files once applied.",
    ),
) -> None:
    """Apply patches in order. Stops on the first error and writes nothing."""

    settings = load_settings()
    registry_path = registry_path or settings.registry_path
    paths = list(patch_paths or discover_patch_files(settings.patches_dir))
    if not paths:
        _console.print(f"[yellow]No patch files found in {settings.patches_dir}[/yellow]")
        raise typer.Exit(code=0)

    try:
        registry = load_registry(registry_path)
        loaded = _load_all(paths)
        for path, patches in loaded:
            for patch in patches:
                outcome = apply_patch_document(registry, patch)
                _console.print(build_changes_table(outcome))
            logger.info("Applied %s", path)
    except PatchError as exc:
        print_error(_err_console, str(exc))
        raise typer.Exit(code=1) from exc

    if dry_run:
        _console.print("[yellow]Dry run: registry not written.[/yellow]")
        return

    target = save_registry(registry, output or registry_path, indent=settings.json_indent)
    _console.print(f"[green]Registry written to:[/green] {target}")

    should_delete = settings.delete_applied_patches if delete_patch is None else delete_patch
    if should_delete:
        for path in paths:
            path.unlink(missing_ok=True)
            _console.print(f"[dim]Deleted {path}[/dim]")


@app.command()
def show(
    build_type: str = typer.Argument(..., help="Build type id or uuid."),
    registry_path: Optional[Path] = typer.Option(None, "--registry", "-r", help="Registry snapshot (JSON)."),
    as_json: bool = typer.Option(False, "--json", help="Print the definition as JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the definition as JSON to this file."),
) -> None:
    """Show a build type's parameters."""

    settings = load_settings()
    try:
        registry = load_registry(registry_path or settings.registry_path)
    except PatchError as exc:
        print_error(_err_console, str(exc))
        raise typer.Exit(code=1) from exc

    definition = registry.resolve_build_type(build_type)
    if definition is None:
        print_error(_err_console, f"Unknown build type: {build_type!r}")
        raise typer.Exit(code=1)

    if output is not None:
        target = export_definition_json(definition=definition, output_path=output, indent=settings.json_indent)
        _console.print(f"[green]Wrote[/green] {target}")
        return
    if as_json:
        typer.echo(render_definition_json(definition, indent=settings.json_indent), nl=False)
        return
    _console.print(build_parameters_table(definition))


@app.command()
def inspect(
    patch_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Patch file (.kts/.json)."),
) -> None:
    """Parse a patch file and list its directives."""

    try:
        patches = load_patches(patch_path)
    except PatchError as exc:
        print_error(_err_console, str(exc))
        raise typer.Exit(code=1) from exc

    for patch in patches:
        _console.print(build_patch_table(patch))


@app.command()
def render(
    patch_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Patch file (.kts/.json)."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Target file, or directory when the input holds several patches.",
    ),
    package_name: str = typer.Option(DEFAULT_PACKAGE, "--package", help="Package line of the script."),
) -> None:
    """Render a patch as a generated `.kts` patch script."""

    try:
        patches = load_patches(patch_path)
    except PatchError as exc:
        print_error(_err_console, str(exc))
        raise typer.Exit(code=1) from exc

    if output is None:
        for patch in patches:
            typer.echo(render_kts_patch(patch, package_name=package_name), nl=False)
        return

    if len(patches) == 1 and output.suffix:
        written = [export_kts_patch(patch=patches[0], output_path=output, package_name=package_name)]
    else:
        written = [
            export_kts_patch(
                patch=patch,
                output_path=output / f"{patch.build_type.id}.kts",
                package_name=package_name,
            )
            for patch in patches
        ]
    for path in written:
        _console.print(f"[green]Wrote[/green] {path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
