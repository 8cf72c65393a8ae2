from __future__ import annotations

from adapters.kts_parser import parse_kts_patch
from adapters.kts_renderer import kotlin_string, render_kts_patch
from core.domain.models import (
    AddParameter,
    BuildTypePatch,
    BuildTypeRef,
    RemoveParameter,
    ReplaceParameter,
)


def test_render_matches_generated_shape() -> None:
    patch = BuildTypePatch(
        build_type=BuildTypeRef(id="Gradle_Check_SanityCheck"),
        directives=[AddParameter(name="system.java9Home", value="%linux.java8.oracle.64bit%")],
    )

    text = render_kts_patch(patch, package_name="Gradle_Check.patches.buildTypes")

    assert text.startswith("package Gradle_Check.patches.buildTypes\n")
    assert "uuid = 'Gradle_Check_SanityCheck' (id = 'Gradle_Check_SanityCheck')" in text
    assert (
        'changeBuildType("Gradle_Check_SanityCheck") {\n'
        "    params {\n"
        "        add {\n"
        '            param("system.java9Home", "%linux.java8.oracle.64bit%")\n'
        "        }\n"
        "    }\n"
        "}\n"
    ) in text


def test_render_groups_consecutive_directives_and_parses_back() -> None:
    patch = BuildTypePatch(
        build_type=BuildTypeRef(id="A", uuid="uuid-a"),
        directives=[
            AddParameter(name="one", value="1"),
            AddParameter(name="two", value='quote " and $dollar'),
            ReplaceParameter(name="one", value="uno"),
            RemoveParameter(name="two"),
            AddParameter(name="three", value="3"),
        ],
    )

    text = render_kts_patch(patch)

    assert text.count("add {") == 2
    assert text.count("update {") == 1
    (parsed,) = parse_kts_patch(text)
    assert parsed == patch


def test_kotlin_string_escapes() -> None:
    assert kotlin_string('a"b\\c$d\n') == '"a\\"b\\\\c\\$d\\n"'
