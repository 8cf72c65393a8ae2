"""Registro de build types en memoria + snapshot JSON.

Formato del snapshot:
    {"build_types": [{"id": "...", "uuid": "...", "name": "...", "parameters": {...}}]}

El registro real pertenece al servidor de CI; este adaptador existe para la
CLI y los tests. Se pasa explícitamente al applier (no hay registro global).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import BaseModel, Field, ValidationError

from core.domain.errors import PatchFormatError
from core.domain.models import BuildTypeDefinition

logger = logging.getLogger(__name__)


class RegistrySnapshot(BaseModel):
    build_types: list[BuildTypeDefinition] = Field(default_factory=list)


class InMemoryRegistry:
    """Implementa `core.interfaces.registry.BuildTypeRegistry`."""

    def __init__(self, definitions: Iterable[BuildTypeDefinition] = ()) -> None:
        self._by_id: dict[str, BuildTypeDefinition] = {}
        for definition in definitions:
            self.add(definition)

    def add(self, definition: BuildTypeDefinition) -> None:
        if definition.id in self._by_id:
            raise ValueError(f"duplicate build type id: {definition.id!r}")
        self._by_id[definition.id] = definition

    def resolve_build_type(self, build_type_id: str) -> BuildTypeDefinition | None:
        found = self._by_id.get(build_type_id)
        if found is not None:
            return found
        for definition in self._by_id.values():
            if definition.uuid and definition.uuid == build_type_id:
                return definition
        return None

    def __iter__(self) -> Iterator[BuildTypeDefinition]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, build_type_id: object) -> bool:
        return isinstance(build_type_id, str) and self.resolve_build_type(build_type_id) is not None


def load_registry(path: Path) -> InMemoryRegistry:
    """Lee un snapshot JSON. Un archivo inexistente es un registro vacío."""

    if not path.exists():
        logger.warning("Registry file %s not found, starting empty", path)
        return InMemoryRegistry()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        snapshot = RegistrySnapshot.model_validate(data)
    except json.JSONDecodeError as exc:
        raise PatchFormatError(exc.msg, line=exc.lineno, source=str(path)) from exc
    except ValidationError as exc:
        raise PatchFormatError(f"invalid registry: {exc}", source=str(path)) from exc

    try:
        return InMemoryRegistry(snapshot.build_types)
    except ValueError as exc:
        raise PatchFormatError(str(exc), source=str(path)) from exc


def save_registry(registry: InMemoryRegistry, path: Path, *, indent: int = 2) -> Path:
    """Escribe el snapshot UTF-8 con formato estable."""

    path.parent.mkdir(parents=True, exist_ok=True)
    snapshot = RegistrySnapshot(build_types=list(registry))
    payload = snapshot.model_dump(mode="json", exclude_none=True)
    path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=indent or None) + "\n",
        encoding="utf-8",
    )
    return path
