"""Exportación JSON de build types.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines de CI.
- Permite revisar el resultado de un patch sin tocar el registro.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel

from core.domain.models import BuildTypeDefinition


def _dump(model: BaseModel, *, indent: int) -> str:
    payload = model.model_dump(mode="json", exclude_none=True)
    return json.dumps(payload, ensure_ascii=False, indent=indent or None) + "\n"


def render_definition_json(definition: BuildTypeDefinition, *, indent: int = 2) -> str:
    return _dump(definition, indent=indent)


def export_definition_json(*, definition: BuildTypeDefinition, output_path: Path, indent: int = 2) -> Path:
    """Exporta `BuildTypeDefinition` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_definition_json(definition, indent=indent), encoding="utf-8")
    return output_path
