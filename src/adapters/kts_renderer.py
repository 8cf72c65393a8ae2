"""Render de patches como scripts `.kts`.

Por qué Jinja2:
- El script generado es texto con forma fija (cabecera, imports, bloques
  `params`); un template es más legible que concatenar strings.
- Mismo enfoque que el resto de exportadores basados en templates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from core.domain.models import AddParameter, BuildTypePatch, RemoveParameter, ReplaceParameter

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

DEFAULT_PACKAGE = "patches.buildTypes"

_KOTLIN_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "$": "\\$",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

_OPERATION_BY_KIND = {"add": "add", "replace": "update", "remove": "remove"}


def kotlin_string(value: str) -> str:
    return '"' + "".join(_KOTLIN_ESCAPES.get(ch, ch) for ch in value) + '"'


def _param_call(directive: AddParameter | RemoveParameter | ReplaceParameter) -> str:
    if isinstance(directive, RemoveParameter):
        return f"param({kotlin_string(directive.name)})"
    return f"param({kotlin_string(directive.name)}, {kotlin_string(directive.value)})"


@dataclass
class _Group:
    operation: str
    directives: list = field(default_factory=list)


def _group_directives(patch: BuildTypePatch) -> list[_Group]:
    # Consecutive directives of the same kind share a block; order is kept.
    groups: list[_Group] = []
    for directive in patch.directives:
        operation = _OPERATION_BY_KIND[directive.kind]
        if not groups or groups[-1].operation != operation:
            groups.append(_Group(operation=operation))
        groups[-1].directives.append(directive)
    return groups


def _get_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.filters["kotlin_string"] = kotlin_string
    env.filters["param_call"] = _param_call
    return env


def render_kts_patch(patch: BuildTypePatch, *, package_name: str = DEFAULT_PACKAGE) -> str:
    """Renderiza un `BuildTypePatch` con la forma de un patch generado."""

    ref = patch.build_type
    template = _get_env().get_template("patch.kts.j2")
    return template.render(
        package_name=package_name,
        build_type_id=ref.id,
        uuid=ref.uuid or ref.id,
        groups=_group_directives(patch),
    )


def export_kts_patch(*, patch: BuildTypePatch, output_path: Path, package_name: str = DEFAULT_PACKAGE) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_kts_patch(patch, package_name=package_name), encoding="utf-8")
    return output_path
