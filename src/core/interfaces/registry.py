"""Contrato del registro de build types.

Por qué Protocol:
- El registro pertenece al sistema de configuración externo; el applier solo
  necesita resolver un id y escribir en `parameters`.
- Permite un registro en memoria para tests/CLI y cualquier otro que cumpla
  la misma forma, sin herencia.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import BuildTypeDefinition


@runtime_checkable
class BuildTypeRegistry(Protocol):
    """Contrato mínimo que consume el applier."""

    def resolve_build_type(self, build_type_id: str) -> BuildTypeDefinition | None:
        """Devuelve la definición (mutable) o `None` si el id no existe."""

        ...
