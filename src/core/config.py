"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (registro/patches) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "buildtype-patcher"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "buildtype-patcher"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "buildtype-patcher"
    return Path.home() / ".config" / "buildtype-patcher"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="BT_PATCH_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero, luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    registry_path: Path = Field(
        default=Path("buildtypes.json"),
        description="Snapshot JSON del registro de build types.",
    )
    patches_dir: Path = Field(
        default=Path(".teamcity"),
        description=(
            "Raíz donde se buscan patches por defecto; solo cuentan los archivos bajo un "
            "directorio `patches` (p.ej. `.teamcity/<Project>/patches/buildTypes/`)."
        ),
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentación al escribir JSON (0 = compacto).",
    )
    delete_applied_patches: bool = Field(
        default=False,
        description="Borrar el archivo de patch tras aplicarlo con éxito.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging para la CLI.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level
