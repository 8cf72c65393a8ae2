from __future__ import annotations

import pytest

from adapters.registry_store import InMemoryRegistry
from core.domain.errors import InvalidDirective, UnknownBuildType
from core.domain.models import (
    AddParameter,
    BuildTypePatch,
    BuildTypeRef,
    RemoveParameter,
    ReplaceParameter,
)
from core.interfaces.registry import BuildTypeRegistry
from core.services.patch_applier import apply_patch, apply_patch_document, apply_patches

SANITY_CHECK_ID = "Gradle_Check_SanityCheck"


def test_in_memory_registry_satisfies_protocol(registry: InMemoryRegistry) -> None:
    assert isinstance(registry, BuildTypeRegistry)


def test_add_parameter_to_sanity_check(registry: InMemoryRegistry) -> None:
    outcome = apply_patch(
        registry,
        SANITY_CHECK_ID,
        [AddParameter(name="system.java9Home", value="%linux.java8.oracle.64bit%")],
    )

    definition = registry.resolve_build_type(SANITY_CHECK_ID)
    assert definition is not None
    assert definition.parameters["system.java9Home"] == "%linux.java8.oracle.64bit%"
    assert definition.parameters["env.JAVA_HOME"] == "%linux.java8.oracle.64bit%"
    assert outcome.applied == 1
    assert outcome.build_type_id == SANITY_CHECK_ID
    assert outcome.changes[0].before is None
    assert outcome.definition is definition


def test_add_is_idempotent(registry: InMemoryRegistry) -> None:
    directive = AddParameter(name="system.java9Home", value="/opt/jdk9")

    apply_patch(registry, SANITY_CHECK_ID, [directive])
    once = dict(registry.resolve_build_type(SANITY_CHECK_ID).parameters)
    outcome = apply_patch(registry, SANITY_CHECK_ID, [directive])
    twice = dict(registry.resolve_build_type(SANITY_CHECK_ID).parameters)

    assert once == twice
    assert list(twice).count("system.java9Home") == 1
    assert not outcome.changes[0].changed


def test_add_overwrites_last_write_wins(registry: InMemoryRegistry) -> None:
    apply_patch(
        registry,
        SANITY_CHECK_ID,
        [
            AddParameter(name="system.java9Home", value="first"),
            AddParameter(name="system.java9Home", value="second"),
        ],
    )

    assert registry.resolve_build_type(SANITY_CHECK_ID).parameters["system.java9Home"] == "second"


def test_unknown_build_type(registry: InMemoryRegistry) -> None:
    before = {d.id: dict(d.parameters) for d in registry}

    with pytest.raises(UnknownBuildType) as excinfo:
        apply_patch(registry, "Does_Not_Exist", [AddParameter(name="a", value="b")])

    assert excinfo.value.build_type_id == "Does_Not_Exist"
    assert {d.id: dict(d.parameters) for d in registry} == before


@pytest.mark.parametrize("build_type_id", ["", "   "])
def test_empty_build_type_id_is_unknown(registry: InMemoryRegistry, build_type_id: str) -> None:
    with pytest.raises(UnknownBuildType):
        apply_patch(registry, build_type_id, [])


@pytest.mark.parametrize("name", ["", "  ", "system java9Home"])
def test_malformed_name_is_invalid_directive(registry: InMemoryRegistry, name: str) -> None:
    with pytest.raises(InvalidDirective) as excinfo:
        apply_patch(registry, SANITY_CHECK_ID, [AddParameter(name=name, value="x")])

    assert excinfo.value.index == 0
    assert excinfo.value.applied == 0


def test_stops_at_first_error_without_rollback(registry: InMemoryRegistry) -> None:
    with pytest.raises(InvalidDirective) as excinfo:
        apply_patch(
            registry,
            SANITY_CHECK_ID,
            [
                AddParameter(name="system.first", value="1"),
                AddParameter(name="", value="2"),
                AddParameter(name="system.third", value="3"),
            ],
        )

    parameters = registry.resolve_build_type(SANITY_CHECK_ID).parameters
    assert excinfo.value.index == 1
    assert excinfo.value.applied == 1
    assert parameters["system.first"] == "1"
    assert "system.third" not in parameters


def test_unsupported_directive_object(registry: InMemoryRegistry) -> None:
    with pytest.raises(InvalidDirective):
        apply_patch(registry, SANITY_CHECK_ID, [("system.java9Home", "x")])  # type: ignore[list-item]


def test_remove_existing_and_missing(registry: InMemoryRegistry) -> None:
    outcome = apply_patch(
        registry,
        SANITY_CHECK_ID,
        [RemoveParameter(name="env.JAVA_HOME"), RemoveParameter(name="not.there")],
    )

    assert "env.JAVA_HOME" not in registry.resolve_build_type(SANITY_CHECK_ID).parameters
    assert outcome.applied == 2
    assert outcome.changes[0].changed
    assert not outcome.changes[1].changed


def test_replace_requires_existing_parameter(registry: InMemoryRegistry) -> None:
    apply_patch(registry, SANITY_CHECK_ID, [ReplaceParameter(name="env.JAVA_HOME", value="/opt/jdk8")])
    assert registry.resolve_build_type(SANITY_CHECK_ID).parameters["env.JAVA_HOME"] == "/opt/jdk8"

    with pytest.raises(InvalidDirective, match="missing parameter"):
        apply_patch(registry, SANITY_CHECK_ID, [ReplaceParameter(name="system.nope", value="x")])


def test_apply_patch_document_resolves_by_uuid(registry: InMemoryRegistry) -> None:
    patch = BuildTypePatch(
        build_type=BuildTypeRef(id="Renamed_Id", uuid="0a1b2c3d-sanity"),
        directives=[AddParameter(name="system.java9Home", value="%linux.java8.oracle.64bit%")],
    )

    outcome = apply_patch_document(registry, patch)

    assert outcome.build_type_id == SANITY_CHECK_ID
    assert registry.resolve_build_type(SANITY_CHECK_ID).parameters["system.java9Home"] == "%linux.java8.oracle.64bit%"


def test_apply_patches_in_order(registry: InMemoryRegistry) -> None:
    patches = [
        BuildTypePatch(build_type=BuildTypeRef(id="Gradle_Check_Quick"), directives=[AddParameter(name="a", value="1")]),
        BuildTypePatch(build_type=BuildTypeRef(id="Gradle_Check_Quick"), directives=[AddParameter(name="a", value="2")]),
    ]

    outcomes = apply_patches(registry, patches)

    assert [o.applied for o in outcomes] == [1, 1]
    assert registry.resolve_build_type("Gradle_Check_Quick").parameters == {"a": "2"}
