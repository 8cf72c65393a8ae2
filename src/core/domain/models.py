"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación en el borde (archivos JSON de patch / registro) y serialización
  estable sin acoplar el Core a la CLI.
- Las directivas son una unión discriminada por `kind`, así un patch leído de
  disco y uno construido en código tienen la misma forma.

Nota:
- Estos modelos describen *qué* se modifica, no *cómo* se aplica; eso vive en
  `core.services.patch_applier`.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


BUILD_TYPE_ID_PATTERN = r"^[A-Za-z0-9_]{1,225}$"


class BuildTypeRef(BaseModel):
    """Referencia opaca a un build type existente (par `id`/`uuid`).

    El `id` solo admite letras latinas, dígitos y `_` (mismo alfabeto que el
    servidor de CI); también se usa como nombre de archivo al renderizar.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        pattern=BUILD_TYPE_ID_PATTERN,
        description="Identificador del build type (p.ej. 'Gradle_Check_SanityCheck').",
    )
    uuid: str | None = Field(
        default=None,
        description="UUID del build type, si el registro lo conoce por separado.",
    )


class BuildTypeDefinition(BaseModel):
    """Build type tal como lo expone el registro de configuración.

    `parameters` es un mapping mutable: el applier escribe directamente sobre
    él. El orden de inserción se conserva (solo afecta a la presentación).
    """

    id: str = Field(..., min_length=1, description="Identificador del build type.")
    uuid: str | None = Field(default=None, description="UUID del build type.")
    name: str | None = Field(default=None, description="Nombre visible (opcional).")
    parameters: dict[str, str] = Field(
        default_factory=dict,
        description="Parámetros del build type (name -> value).",
    )

    @property
    def ref(self) -> BuildTypeRef:
        return BuildTypeRef(id=self.id, uuid=self.uuid)

    def iter_parameters(self) -> list[Parameter]:
        return [Parameter(name=name, value=value) for name, value in self.parameters.items()]


class Parameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class AddParameter(BaseModel):
    """Inserta o sobrescribe un parámetro (last write wins)."""

    kind: Literal["add"] = "add"
    name: str = Field(..., description="Nombre del parámetro (p.ej. 'system.java9Home').")
    value: str = Field(..., description="Valor literal; los placeholders `%...%` son opacos.")


class RemoveParameter(BaseModel):
    """Elimina un parámetro; si no existe no hace nada."""

    kind: Literal["remove"] = "remove"
    name: str = Field(..., description="Nombre del parámetro a eliminar.")


class ReplaceParameter(BaseModel):
    """Sobrescribe un parámetro que ya debe existir."""

    kind: Literal["replace"] = "replace"
    name: str = Field(..., description="Nombre del parámetro existente.")
    value: str = Field(..., description="Nuevo valor.")


PatchDirective = Annotated[
    Union[AddParameter, RemoveParameter, ReplaceParameter],
    Field(discriminator="kind"),
]


class BuildTypePatch(BaseModel):
    """Un patch completo: qué build type y qué directivas, en orden."""

    build_type: BuildTypeRef
    directives: list[PatchDirective] = Field(default_factory=list)


class ParameterChange(BaseModel):
    """Efecto observable de una directiva sobre el mapping."""

    name: str
    before: str | None = None
    after: str | None = None

    @property
    def changed(self) -> bool:
        return self.before != self.after


class PatchOutcome(BaseModel):
    build_type_id: str
    applied: int = Field(default=0, ge=0, description="Directivas aplicadas.")
    changes: list[ParameterChange] = Field(default_factory=list)
    definition: BuildTypeDefinition
