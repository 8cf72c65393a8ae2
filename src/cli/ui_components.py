"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BuildTypeDefinition, BuildTypePatch, PatchOutcome


def print_error(console: Console, message: str) -> None:
    console.print(Panel(Text(message, style="bold red"), title="Patch failed", border_style="red"))


def build_changes_table(outcome: PatchOutcome) -> Table:
    """Tabla con el efecto de cada directiva sobre los parámetros."""

    table = Table(title=f"Build type {outcome.build_type_id}")
    table.add_column("Parameter", style="cyan", no_wrap=True)
    table.add_column("Before", style="dim")
    table.add_column("After", style="green")
    for change in outcome.changes:
        before = Text(change.before if change.before is not None else "-")
        after = Text(change.after if change.after is not None else "(removed)")
        if change.before is None and change.after is None:
            after = Text("(absent)", style="dim")
        elif not change.changed:
            after = Text(f"{after.plain} (unchanged)", style="dim")
        table.add_row(Text(change.name), before, after)
    return table


def build_parameters_table(definition: BuildTypeDefinition) -> Table:
    title = definition.id if not definition.name else f"{definition.name} ({definition.id})"
    table = Table(title=title)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for parameter in definition.iter_parameters():
        table.add_row(Text(parameter.name), Text(parameter.value))
    return table


def build_patch_table(patch: BuildTypePatch) -> Table:
    ref = patch.build_type
    title = ref.id if not ref.uuid or ref.uuid == ref.id else f"{ref.id} (uuid {ref.uuid})"
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", style="magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for index, directive in enumerate(patch.directives):
        value = getattr(directive, "value", "")
        table.add_row(str(index), directive.kind, Text(directive.name), Text(value))
    return table
