from __future__ import annotations

import json
from pathlib import Path

import pytest

from adapters.registry_store import InMemoryRegistry
from core.domain.models import BuildTypeDefinition

FIXTURES = Path(__file__).resolve().parent / "fixtures"

SANITY_CHECK_ID = "Gradle_Check_SanityCheck"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep project/user `.env` files and BT_PATCH_* vars out of the tests."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in (
        "BT_PATCH_REGISTRY_PATH",
        "BT_PATCH_PATCHES_DIR",
        "BT_PATCH_JSON_INDENT",
        "BT_PATCH_DELETE_APPLIED_PATCHES",
        "BT_PATCH_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


@pytest.fixture
def registry() -> InMemoryRegistry:
    return InMemoryRegistry(
        [
            BuildTypeDefinition(
                id=SANITY_CHECK_ID,
                uuid="0a1b2c3d-sanity",
                name="Sanity Check",
                parameters={"env.JAVA_HOME": "%linux.java8.oracle.64bit%"},
            ),
            BuildTypeDefinition(id="Gradle_Check_Quick", parameters={}),
        ]
    )


@pytest.fixture
def sanity_patch_path() -> Path:
    return FIXTURES / "Gradle_Check_SanityCheck.kts"


@pytest.fixture
def registry_file(tmp_path: Path) -> Path:
    path = tmp_path / "buildtypes.json"
    path.write_text(
        json.dumps(
            {
                "build_types": [
                    {
                        "id": SANITY_CHECK_ID,
                        "name": "Sanity Check",
                        "parameters": {"env.JAVA_HOME": "%linux.java8.oracle.64bit%"},
                    },
                    {"id": "Gradle_Check_Quick", "uuid": "quick-uuid", "parameters": {}},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path
