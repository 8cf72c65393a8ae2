"""Build-type patch application.

Applies parameter directives to a build type owned by an external
configuration registry. The registry is passed in explicitly; there is no
module-level registry. Application is ordered and stops at the first bad
directive, keeping whatever was applied before it (no rollback).
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.domain.errors import InvalidDirective, UnknownBuildType
from core.domain.models import (
    AddParameter,
    BuildTypeDefinition,
    BuildTypePatch,
    ParameterChange,
    PatchOutcome,
    RemoveParameter,
    ReplaceParameter,
)
from core.interfaces.registry import BuildTypeRegistry

logger = logging.getLogger(__name__)

Directive = AddParameter | RemoveParameter | ReplaceParameter


def resolve_or_fail(registry: BuildTypeRegistry, build_type_id: str) -> BuildTypeDefinition:
    if not isinstance(build_type_id, str) or not build_type_id.strip():
        raise UnknownBuildType(build_type_id if isinstance(build_type_id, str) else repr(build_type_id))

    definition = registry.resolve_build_type(build_type_id)
    if definition is None:
        raise UnknownBuildType(build_type_id)
    return definition


def validate_directive(directive: object, *, index: int, applied: int) -> Directive:
    """Check a directive before it touches the parameter mapping."""

    if not isinstance(directive, (AddParameter, RemoveParameter, ReplaceParameter)):
        raise InvalidDirective(
            f"unsupported directive type {type(directive).__name__}",
            index=index,
            applied=applied,
        )

    name = directive.name
    if not isinstance(name, str) or not name.strip():
        raise InvalidDirective("parameter name must not be empty", index=index, applied=applied)
    if any(ch.isspace() for ch in name):
        raise InvalidDirective(
            f"parameter name {name!r} must not contain whitespace",
            index=index,
            applied=applied,
        )

    value = getattr(directive, "value", "")
    if not isinstance(value, str):
        raise InvalidDirective(
            f"value for {name!r} must be a string, got {type(value).__name__}",
            index=index,
            applied=applied,
        )
    return directive


def _apply_one(parameters: dict[str, str], directive: Directive, *, index: int, applied: int) -> ParameterChange:
    name = directive.name
    before = parameters.get(name)

    if isinstance(directive, AddParameter):
        parameters[name] = directive.value
        return ParameterChange(name=name, before=before, after=directive.value)

    if isinstance(directive, ReplaceParameter):
        if name not in parameters:
            raise InvalidDirective(
                f"cannot replace missing parameter {name!r}",
                index=index,
                applied=applied,
            )
        parameters[name] = directive.value
        return ParameterChange(name=name, before=before, after=directive.value)

    # RemoveParameter
    if name not in parameters:
        logger.info("Parameter %r not present, nothing to remove", name)
        return ParameterChange(name=name, before=None, after=None)
    del parameters[name]
    return ParameterChange(name=name, before=before, after=None)


def apply_patch(
    registry: BuildTypeRegistry,
    build_type_id: str,
    directives: Sequence[Directive],
) -> PatchOutcome:
    """Apply `directives` in order to the build type named `build_type_id`.

    Raises:
    - `UnknownBuildType` if the id is empty or does not resolve.
    - `InvalidDirective` on the first malformed or inapplicable directive.
      Directives before it remain applied.
    """

    definition = resolve_or_fail(registry, build_type_id)
    parameters = definition.parameters

    changes: list[ParameterChange] = []
    for index, raw in enumerate(directives):
        directive = validate_directive(raw, index=index, applied=len(changes))
        change = _apply_one(parameters, directive, index=index, applied=len(changes))
        logger.debug(
            "%s: %s %s (%r -> %r)",
            definition.id,
            directive.kind,
            change.name,
            change.before,
            change.after,
        )
        changes.append(change)

    logger.info("Applied %d directive(s) to build type %s", len(changes), definition.id)
    return PatchOutcome(
        build_type_id=definition.id,
        applied=len(changes),
        changes=changes,
        definition=definition,
    )


def apply_patch_document(registry: BuildTypeRegistry, patch: BuildTypePatch) -> PatchOutcome:
    """Apply a patch read from disk, resolving its ref by id then by uuid."""

    ref = patch.build_type
    target_id = ref.id
    if registry.resolve_build_type(ref.id) is None and ref.uuid:
        target_id = ref.uuid
    return apply_patch(registry, target_id, patch.directives)


def apply_patches(registry: BuildTypeRegistry, patches: Sequence[BuildTypePatch]) -> list[PatchOutcome]:
    """Apply several patches in order; the first failure propagates."""

    return [apply_patch_document(registry, patch) for patch in patches]
