"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from adapters.kts_renderer import render_kts_patch
from adapters.patch_loader import discover_patch_files
from adapters.registry_store import load_registry
from core.config import AppSettings, get_user_env_file
from core.domain.errors import PatchError
from core.domain.models import AddParameter, BuildTypePatch, BuildTypeRef

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_registry(settings: AppSettings) -> tuple[bool, str]:
    if not settings.registry_path.exists():
        return False, f"{settings.registry_path} not found"
    try:
        registry = load_registry(settings.registry_path)
    except PatchError as exc:
        return False, str(exc)
    return True, f"{len(registry)} build type(s)"


def _check_template() -> tuple[bool, str]:
    """Render a throwaway patch to detect a missing/broken template."""

    patch = BuildTypePatch(
        build_type=BuildTypeRef(id="doctor"),
        directives=[AddParameter(name="doctor.check", value="ok")],
    )
    try:
        render_kts_patch(patch)
    except Exception as exc:
        return False, str(exc)
    return True, "OK"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="buildtype-patcher Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    user_env = get_user_env_file()
    table.add_row("User config", "OK" if user_env.exists() else "OPTIONAL", str(user_env))
    table.add_row("Log level", "OK", settings.log_level)

    ok_registry, detail_registry = _check_registry(settings)
    table.add_row("Registry", "OK" if ok_registry else "FAIL", detail_registry)

    patches = discover_patch_files(settings.patches_dir)
    if settings.patches_dir.is_dir():
        table.add_row("Patches dir", "OK", f"{settings.patches_dir} ({len(patches)} patch file(s))")
    else:
        table.add_row("Patches dir", "OPTIONAL", f"{settings.patches_dir} not found")

    ok_template, detail_template = _check_template()
    table.add_row("Patch template", "OK" if ok_template else "FAIL", detail_template)

    _console.print(table)

    if not ok_registry:
        _console.print(
            "\n[yellow]Note:[/yellow] Set BT_PATCH_REGISTRY_PATH or pass `--registry` to point at a registry snapshot."
        )
