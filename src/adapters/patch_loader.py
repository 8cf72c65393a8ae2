"""Carga de patches desde disco.

Soporta:
- `.kts`: scripts de patch generados por el servidor de CI (ver `kts_parser`).
- `.json`: un patch `{"build_type": {...}, "directives": [...]}`, una lista de
  ellos, o `{"patches": [...]}`.

Los errores de formato (JSON inválido, validación de Pydantic) se convierten
en `PatchFormatError` aquí, en el borde.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from adapters.kts_parser import parse_kts_patch
from core.domain.errors import PatchFormatError
from core.domain.models import BuildTypePatch

logger = logging.getLogger(__name__)

PATCH_SUFFIXES = (".kts", ".json")
PATCHES_DIR_NAME = "patches"

_PATCH_LIST = TypeAdapter(list[BuildTypePatch])


def parse_json_patches(text: str, *, source: str | None = None) -> list[BuildTypePatch]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PatchFormatError(exc.msg, line=exc.lineno, source=source) from exc

    if isinstance(data, dict) and "patches" in data:
        data = data["patches"]
    if isinstance(data, dict):
        data = [data]

    try:
        return _PATCH_LIST.validate_python(data)
    except ValidationError as exc:
        raise PatchFormatError(f"invalid patch: {exc}", source=source) from exc


def load_patches(path: Path) -> list[BuildTypePatch]:
    suffix = path.suffix.lower()
    if suffix not in PATCH_SUFFIXES:
        raise PatchFormatError(f"unsupported patch file type {suffix or '(none)'}", source=str(path))

    text = path.read_text(encoding="utf-8")
    if suffix == ".kts":
        patches = parse_kts_patch(text, source=str(path))
    else:
        patches = parse_json_patches(text, source=str(path))

    logger.debug("Loaded %d patch(es) from %s", len(patches), path)
    return patches


def discover_patch_files(directory: Path) -> list[Path]:
    """Lista los archivos de patch bajo `directory`, en orden estable.

    Solo cuentan los que viven dentro de un directorio `patches` (el propio
    `directory` o uno anidado, como `.teamcity/<Project>/patches/`); el resto
    de scripts de settings se ignora.
    """

    if not directory.is_dir():
        return []

    found: list[Path] = []
    for path in directory.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in PATCH_SUFFIXES:
            continue
        parents = path.relative_to(directory).parts[:-1]
        if directory.name == PATCHES_DIR_NAME or PATCHES_DIR_NAME in parents:
            found.append(path)
    return sorted(found)
