"""
Translation of Closure-style annotation strings (as found in JSDoc ``@type``,
``@param`` and ``@return`` tags) into TypeScript type expressions.

Only the closed dialect emitted by the analyzer is understood. Anything else
degrades to ``any``; translation never raises.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from declgen.logger import logger
from declgen.types import (
    ANY,
    ArrayType,
    FunctionType,
    GenericType,
    NameType,
    RecordType,
    TypeExpression,
    UnionType,
    ensure_array,
)


_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<rest>\.\.\.)"
    r"|(?P<name>[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)"
    r"|(?P<array>\[\])"
    r"|(?P<punct>[|?!*=<>(),:{}.])"
    r")"
)

# Closure boxed primitives map onto TypeScript primitives
_RENAMES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Object": "object",
}

# Tokens that may directly follow a lone "?" (the Closure unknown type)
_UNKNOWN_FOLLOWERS = {None, ",", ")", "|", ">", "=", "}"}


class AnnotationSyntaxError(ValueError):
    """Raised internally when an annotation falls outside the known dialect."""


@dataclass(frozen=True)
class ParamTranslation:
    type: TypeExpression
    optional: bool = False
    rest: bool = False


def tokenize(annotation: str) -> List[str]:
    tokens: List[str] = []
    pos = 0
    text = annotation.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m or m.end() == pos:
            raise AnnotationSyntaxError(f"Unexpected character at {pos}: {text[pos:]!r}")
        tokens.append(m.group(m.lastgroup))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, tokens: Sequence[str], template_types: Iterable[str]) -> None:
        self.tokens = list(tokens)
        self.pos = 0
        self.template_types = frozenset(template_types)

    # Cursor helpers
    def peek(self, offset: int = 0) -> Optional[str]:
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else None

    def take(self, expected: Optional[str] = None) -> str:
        tok = self.peek()
        if tok is None:
            raise AnnotationSyntaxError("Unexpected end of annotation")
        if expected is not None and tok != expected:
            raise AnnotationSyntaxError(f"Expected {expected!r}, got {tok!r}")
        self.pos += 1
        return tok

    def accept(self, tok: str) -> bool:
        if self.peek() == tok:
            self.pos += 1
            return True
        return False

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    # Grammar
    def parse_top(self) -> ParamTranslation:
        rest = self.accept("...")
        if rest and (self.at_end() or self.peek() == "="):
            typ = ANY
        else:
            typ = self.parse_union()
        optional = self.accept("=")
        if not self.at_end():
            raise AnnotationSyntaxError(f"Trailing tokens: {self.tokens[self.pos:]}")
        return ParamTranslation(type=typ, optional=optional, rest=rest)

    def parse_union(self) -> TypeExpression:
        members = [self.parse_postfix()]
        while self.accept("|"):
            members.append(self.parse_postfix())
        if len(members) == 1:
            return members[0]
        return UnionType(tuple(members))

    def parse_postfix(self) -> TypeExpression:
        typ = self.parse_prefix()
        while self.accept("[]"):
            typ = ArrayType(typ)
        return typ

    def parse_prefix(self) -> TypeExpression:
        tok = self.peek()
        if tok == "?":
            self.take()
            if self.peek() in _UNKNOWN_FOLLOWERS:
                return ANY
            # Nullable: informational only, the underlying type is kept as-is
            return self.parse_prefix()
        if tok == "!":
            self.take()
            return self.parse_prefix()
        if tok == "*":
            self.take()
            return ANY
        return self.parse_primary()

    def parse_primary(self) -> TypeExpression:
        tok = self.peek()
        if tok == "(":
            self.take()
            typ = self.parse_union()
            self.take(")")
            return typ
        if tok == "{":
            return self.parse_record()
        if tok == "function" and self.peek(1) == "(":
            return self.parse_function()
        if tok is None or not _is_name(tok):
            raise AnnotationSyntaxError(f"Expected a type, got {tok!r}")
        self.take()
        return self.convert_name(tok, self.parse_generics())

    def parse_generics(self) -> List[TypeExpression]:
        if self.peek() == "." and self.peek(1) == "<":
            self.take()
        if not self.accept("<"):
            return []
        args = [self.parse_union()]
        while self.accept(","):
            args.append(self.parse_union())
        self.take(">")
        return args

    def parse_function(self) -> FunctionType:
        self.take("function")
        self.take("(")
        params: List[TypeExpression] = []
        if not self.accept(")"):
            while True:
                if self.peek() in ("this", "new") and self.peek(1) == ":":
                    # Receiver and constructor bindings have no TypeScript
                    # counterpart in a plain function type.
                    self.take()
                    self.take(":")
                    self.parse_union()
                else:
                    rest = self.accept("...")
                    typ = self.parse_union()
                    self.accept("=")
                    params.append(ensure_array(typ) if rest else typ)
                if self.accept(")"):
                    break
                self.take(",")
        returns = self.parse_union() if self.accept(":") else ANY
        return FunctionType(params=tuple(params), returns=returns)

    def parse_record(self) -> RecordType:
        self.take("{")
        fields = []
        if not self.accept("}"):
            while True:
                name = self.take()
                if not _is_name(name):
                    raise AnnotationSyntaxError(f"Expected a field name, got {name!r}")
                typ = self.parse_union() if self.accept(":") else ANY
                fields.append((name, typ))
                if self.accept("}"):
                    break
                self.take(",")
        return RecordType(fields=tuple(fields))

    def convert_name(self, name: str, args: List[TypeExpression]) -> TypeExpression:
        if name in self.template_types:
            return NameType(name)
        if name == "Array":
            return ArrayType(args[0] if args else ANY)
        if name == "Object" and args:
            if len(args) == 1:
                return GenericType("Record", (NameType("string"), args[0]))
            return GenericType("Record", (args[0], args[1]))
        name = _RENAMES.get(name, name)
        if args:
            return GenericType(name, tuple(args))
        return NameType(name)


def _is_name(tok: str) -> bool:
    return bool(tok) and (tok[0].isalpha() or tok[0] in "_$")


def _parse(annotation: str, template_types: Iterable[str]) -> Optional[ParamTranslation]:
    try:
        return _Parser(tokenize(annotation), template_types).parse_top()
    except (AnnotationSyntaxError, RecursionError) as exc:
        logger.debug("Unparseable annotation", annotation=annotation, error=str(exc))
        return None


def translate_type(
    annotation: Optional[str], template_types: Iterable[str] = ()
) -> TypeExpression:
    """
    Translate a property or return annotation. Absent or unparseable
    annotations yield ``any``.
    """
    if annotation is None or not annotation.strip():
        return ANY
    parsed = _parse(annotation, template_types)
    if parsed is None:
        return ANY
    return parsed.type


def translate_param(
    annotation: Optional[str],
    template_types: Iterable[str] = (),
    variadic: bool = False,
) -> ParamTranslation:
    """
    Translate a parameter annotation, splitting off the leading rest marker
    (``...T``) and the trailing optional marker (``T=``).

    The returned type is the element type for rest parameters; callers wrap
    it into an array. The one exception is an absent annotation on a
    parameter the caller already knows to be variadic, which yields ``any[]``.
    """
    if annotation is None or not annotation.strip():
        if variadic:
            return ParamTranslation(type=ArrayType(ANY), rest=True)
        return ParamTranslation(type=ANY)
    parsed = _parse(annotation, template_types)
    if parsed is None:
        return ParamTranslation(type=ANY, rest=variadic)
    if variadic and not parsed.rest:
        return ParamTranslation(type=parsed.type, optional=parsed.optional, rest=True)
    return parsed
