"""Parser for generated build-type patch scripts (`.kts`).

Only the shape the CI server emits when a setting is changed in the UI is
understood:

    changeBuildType("Some_Id") {
        params {
            add { param("name", "value") }
            update { param("name", "value") }
            remove { param("name") }
        }
    }

`package`/`import` lines and comments are skipped. Several `changeBuildType`
blocks may appear in one script. Anything else is a `PatchFormatError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from core.domain.errors import PatchFormatError
from core.domain.models import (
    AddParameter,
    BUILD_TYPE_ID_PATTERN,
    BuildTypePatch,
    BuildTypeRef,
    RemoveParameter,
    ReplaceParameter,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
  | (?P<space>[ \t\r\f]+)
  | (?P<line_comment>//[^\n]*)
  | (?P<block_comment>/\*.*?\*/)
  | (?P<raw_string>\"\"\")
  | (?P<string>"(?:[^"\\\n]|\\.)*")
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<punct>[(){},.*])
    """,
    re.VERBOSE | re.DOTALL,
)

# "change the buildType with uuid = 'X' (id = 'Y')" in the generated header.
_HEADER_REF_RE = re.compile(r"uuid\s*=\s*'([^']+)'\s*\(id\s*=\s*'([^']+)'\)")
_BUILD_TYPE_ID_RE = re.compile(BUILD_TYPE_ID_PATTERN)

_SIMPLE_ESCAPES = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "$": "$",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
}

_OPERATIONS = ("add", "update", "remove")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int


def _decode_string(literal: str, *, line: int, source: str | None) -> str:
    body = literal[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "$" and i + 1 < len(body) and (body[i + 1] == "{" or body[i + 1].isalpha() or body[i + 1] == "_"):
            raise PatchFormatError("string templates are not supported", line=line, source=source)
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        esc = body[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
            continue
        if esc == "u":
            digits = body[i + 2 : i + 6]
            if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise PatchFormatError(f"bad unicode escape: \\u{digits}", line=line, source=source)
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        raise PatchFormatError(f"unknown escape: \\{esc}", line=line, source=source)
    return "".join(out)


def tokenize(text: str, *, source: str | None = None) -> list[Token]:
    tokens: list[Token] = []
    line = 1
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise PatchFormatError(f"unexpected character {text[pos]!r}", line=line, source=source)
        kind = match.lastgroup or ""
        value = match.group()
        if kind == "raw_string":
            raise PatchFormatError("raw strings are not supported", line=line, source=source)
        if kind == "string":
            tokens.append(Token("string", _decode_string(value, line=line, source=source), line))
        elif kind in ("ident", "punct"):
            tokens.append(Token(kind, value, line))
        line += value.count("\n")
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[Token], source: str | None) -> None:
        self._tokens = tokens
        self._pos = 0
        self._source = source

    def _peek(self) -> Token | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _fail(self, reason: str, token: Token | None = None) -> PatchFormatError:
        token = token or self._peek()
        if token is None and self._tokens:
            token = self._tokens[-1]
        return PatchFormatError(reason, line=token.line if token else None, source=self._source)

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise self._fail("unexpected end of script")
        self._pos += 1
        return token

    def _expect(self, kind: str, text: str | None = None) -> Token:
        token = self._next()
        if token.kind != kind or (text is not None and token.text != text):
            wanted = text or kind
            raise self._fail(f"expected {wanted!r}, got {token.text!r}", token)
        return token

    def _at(self, kind: str, text: str | None = None) -> bool:
        token = self._peek()
        return token is not None and token.kind == kind and (text is None or token.text == text)

    def _skip_qualified_name(self) -> None:
        self._expect("ident")
        while self._at("punct", "."):
            self._next()
            if self._at("punct", "*"):
                self._next()
                return
            self._expect("ident")

    def parse(self, uuids: dict[str, str]) -> list[BuildTypePatch]:
        patches: list[BuildTypePatch] = []
        while self._peek() is not None:
            token = self._next()
            if token.kind == "ident" and token.text in ("package", "import"):
                self._skip_qualified_name()
            elif token.kind == "ident" and token.text == "changeBuildType":
                patches.append(self._change_build_type(uuids))
            else:
                raise self._fail(f"unsupported statement {token.text!r}", token)
        return patches

    def _change_build_type(self, uuids: dict[str, str]) -> BuildTypePatch:
        self._expect("punct", "(")
        id_token = self._expect("string")
        build_type_id = id_token.text
        if not _BUILD_TYPE_ID_RE.fullmatch(build_type_id):
            raise self._fail(f"invalid build type id {build_type_id!r}", id_token)
        self._expect("punct", ")")
        self._expect("punct", "{")

        directives: list[AddParameter | RemoveParameter | ReplaceParameter] = []
        while not self._at("punct", "}"):
            token = self._next()
            if token.kind == "ident" and token.text == "params":
                directives.extend(self._params())
            else:
                raise self._fail(f"unsupported build type change {token.text!r}", token)
        self._expect("punct", "}")

        ref = BuildTypeRef(id=build_type_id, uuid=uuids.get(build_type_id))
        return BuildTypePatch(build_type=ref, directives=directives)

    def _params(self) -> list[AddParameter | RemoveParameter | ReplaceParameter]:
        self._expect("punct", "{")
        directives: list[AddParameter | RemoveParameter | ReplaceParameter] = []
        while not self._at("punct", "}"):
            token = self._next()
            if token.kind != "ident" or token.text not in _OPERATIONS:
                raise self._fail(f"unsupported params operation {token.text!r}", token)
            directives.extend(self._operation(token.text))
        self._expect("punct", "}")
        return directives

    def _operation(self, operation: str) -> list[AddParameter | RemoveParameter | ReplaceParameter]:
        self._expect("punct", "{")
        directives: list[AddParameter | RemoveParameter | ReplaceParameter] = []
        while not self._at("punct", "}"):
            call = self._expect("ident", "param")
            args = self._arguments()
            if operation == "remove":
                if len(args) not in (1, 2):
                    raise self._fail("remove expects param(name) or param(name, value)", call)
                directives.append(RemoveParameter(name=args[0]))
                continue
            if len(args) != 2:
                raise self._fail(f"{operation} expects param(name, value)", call)
            if operation == "add":
                directives.append(AddParameter(name=args[0], value=args[1]))
            else:
                directives.append(ReplaceParameter(name=args[0], value=args[1]))
        self._expect("punct", "}")
        return directives

    def _arguments(self) -> list[str]:
        self._expect("punct", "(")
        args = [self._expect("string").text]
        while self._at("punct", ","):
            self._next()
            args.append(self._expect("string").text)
        self._expect("punct", ")")
        return args


def parse_kts_patch(text: str, *, source: str | None = None) -> list[BuildTypePatch]:
    """Parse a patch script into one `BuildTypePatch` per `changeBuildType` block."""

    uuids = {build_type_id: uuid for uuid, build_type_id in _HEADER_REF_RE.findall(text)}
    return _Parser(tokenize(text, source=source), source).parse(uuids)
