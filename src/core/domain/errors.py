"""Errors raised while resolving, reading or applying build-type patches.

All of them point at a misconfiguration a human has to fix (the patch or the
underlying build type), so callers surface them instead of retrying.
"""

from __future__ import annotations


class PatchError(Exception):
    """Base class for every patch failure."""


class UnknownBuildType(PatchError):
    def __init__(self, build_type_id: str) -> None:
        self.build_type_id = build_type_id
        super().__init__(f"Unknown build type: {build_type_id!r}")


class InvalidDirective(PatchError):
    """A directive is malformed or cannot apply to the current parameters.

    `index` is the position of the failing directive and `applied` how many
    directives before it were already applied (there is no rollback).
    """

    def __init__(self, reason: str, *, index: int | None = None, applied: int = 0) -> None:
        self.reason = reason
        self.index = index
        self.applied = applied
        where = f" (directive #{index})" if index is not None else ""
        super().__init__(f"Invalid directive{where}: {reason}")


class PatchFormatError(PatchError):
    """A patch file could not be parsed."""

    def __init__(self, reason: str, *, line: int | None = None, source: str | None = None) -> None:
        self.reason = reason
        self.line = line
        self.source = source
        location = ""
        if source:
            location = f"{source}:"
        if line is not None:
            location = f"{location}{line}:"
        prefix = f"{location} " if location else ""
        super().__init__(f"{prefix}{reason}")
