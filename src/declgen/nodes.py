import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from declgen.types import ANY, TypeExpression


IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
INDENT = "  "

HEADER_TEMPLATE = """/**
 * DO NOT EDIT
 *
 * This file was automatically generated by declgen.
 *
 * To modify these typings, edit the source file(s):
{sources}
 */
"""


def format_comment(text: str, depth: int) -> str:
    """
    Render *text* as a JSDoc block indented to *depth*. Returns an empty
    string for blank text.
    """
    text = (text or "").strip()
    if not text:
        return ""
    ind = INDENT * depth
    lines = [f"{ind}/**"]
    for line in text.replace("*/", "*\\/").splitlines():
        lines.append(f"{ind} * {line.strip()}".rstrip())
    lines.append(f"{ind} */")
    return "\n".join(lines) + "\n"


def quote_name(name: str) -> str:
    if IDENTIFIER_RE.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _template_list(template_types: Sequence[str]) -> str:
    return f"<{', '.join(template_types)}>" if template_types else ""


# Leaf nodes
@dataclass
class Param:
    name: str
    type: TypeExpression = ANY
    optional: bool = False
    rest: bool = False
    description: str = ""

    def serialize(self) -> str:
        prefix = "..." if self.rest else ""
        marker = "?" if self.optional and not self.rest else ""
        return f"{prefix}{self.name}{marker}: {self.type.serialize()}"


@dataclass
class Property:
    name: str
    type: TypeExpression = ANY
    description: str = ""
    readonly: bool = False

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        readonly = "readonly " if self.readonly else ""
        out = format_comment(self.description, depth)
        out += f"{ind}{readonly}{quote_name(self.name)}: {self.type.serialize()};\n"
        return out


@dataclass
class Function:
    name: str
    description: str = ""
    params: List[Param] = field(default_factory=list)
    returns: TypeExpression = ANY
    returns_description: str = ""
    template_types: List[str] = field(default_factory=list)

    keyword = "function "

    def _comment(self, depth: int) -> str:
        parts = [self.description.strip()] if self.description.strip() else []
        tags = [
            f"@param {p.name} {p.description.strip()}"
            for p in self.params
            if p.description.strip()
        ]
        if self.returns_description.strip():
            tags.append(f"@returns {self.returns_description.strip()}")
        if tags:
            parts.append("\n".join(tags))
        return format_comment("\n\n".join(parts), depth)

    def signature(self) -> str:
        params = ", ".join(p.serialize() for p in self.params)
        return (
            f"{self.name}{_template_list(self.template_types)}"
            f"({params}): {self.returns.serialize()}"
        )

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        declare = "declare " if depth == 0 else ""
        return f"{self._comment(depth)}{ind}{declare}{self.keyword}{self.signature()};\n"


@dataclass
class Method(Function):
    static: bool = False

    keyword = ""

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        static = "static " if self.static else ""
        return f"{self._comment(depth)}{ind}{static}{self.signature()};\n"


def _body(
    properties: Sequence[Property], methods: Sequence[Method], depth: int
) -> str:
    out = ""
    for member in [*properties, *methods]:
        out += member.serialize(depth + 1)
    return out


# Type-level nodes
@dataclass
class Interface:
    name: str
    description: str = ""
    extends: List[str] = field(default_factory=list)
    properties: List[Property] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        out = format_comment(self.description, depth)
        out += f"{ind}interface {self.name}"
        if self.extends:
            out += f" extends {', '.join(self.extends)}"
        out += " {\n"
        out += _body(self.properties, self.methods, depth)
        out += f"{ind}}}\n"
        return out


@dataclass
class Class:
    """
    Constructable declaration. Mixins and behaviors cannot be expressed in a
    single ``extends`` clause, so they are attached through an interface of
    the same name which TypeScript merges into the class type.
    """

    name: str
    description: str = ""
    extends: Optional[str] = None
    mixins: List[str] = field(default_factory=list)
    interfaces: List[str] = field(default_factory=list)
    properties: List[Property] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)
    static_methods: List[Method] = field(default_factory=list)
    template_types: List[str] = field(default_factory=list)

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        declare = "declare " if depth == 0 else ""
        out = format_comment(self.description, depth)
        out += f"{ind}{declare}class {self.name}{_template_list(self.template_types)}"
        if self.extends:
            out += f" extends {self.extends}"
        out += " {\n"
        out += _body(self.properties, [*self.static_methods, *self.methods], depth)
        out += f"{ind}}}\n"
        merged = [*self.mixins, *self.interfaces]
        if merged:
            out += "\n"
            out += f"{ind}interface {self.name} extends {', '.join(merged)} {{\n"
            out += f"{ind}}}\n"
        return out


@dataclass
class Mixin:
    """
    Value-space half of a mixin: a function that applies the mixin to a base
    constructor. It shares its name with the type-space ``Interface`` that
    describes the mixin's members.
    """

    name: str
    description: str = ""
    interfaces: List[str] = field(default_factory=list)

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        declare = "declare " if depth == 0 else ""
        constructors = " & ".join(f"{i}Constructor" for i in self.interfaces)
        returns = f"T & {constructors}" if constructors else "T"
        out = format_comment(self.description, depth)
        out += (
            f"{ind}{declare}function {self.name}"
            f"<T extends new (...args: any[]) => {{}}>(base: T): {returns};\n"
        )
        out += "\n"
        out += f"{ind}interface {self.name}Constructor {{\n"
        out += f"{ind}{INDENT}new(...args: any[]): {self.name};\n"
        out += f"{ind}}}\n"
        return out


# Containers
Member = Union["Namespace", Class, Interface, Mixin, Function]


@dataclass
class Namespace:
    name: str
    description: str = ""
    members: List[Member] = field(default_factory=list)

    def serialize(self, depth: int = 0) -> str:
        ind = INDENT * depth
        declare = "declare " if depth == 0 else ""
        out = format_comment(self.description, depth)
        out += f"{ind}{declare}namespace {self.name} {{\n"
        for member in self.members:
            out += "\n"
            out += member.serialize(depth + 1)
        out += f"{ind}}}\n"
        return out


@dataclass
class Document:
    path: str
    members: List[Member] = field(default_factory=list)
    reference_paths: set[str] = field(default_factory=set)
    header_sources: List[str] = field(default_factory=list)
    # Upsert index of namespaces keyed by their full path
    namespaces: Dict[Tuple[str, ...], Namespace] = field(
        default_factory=dict, repr=False
    )

    def namespace_for(self, path: Sequence[str]) -> Union["Document", Namespace]:
        """
        Return the container addressed by *path*, creating any missing
        namespaces along the way. An empty path addresses the document root.
        """
        container: Union[Document, Namespace] = self
        for i, segment in enumerate(path):
            key = tuple(path[: i + 1])
            ns = self.namespaces.get(key)
            if ns is None:
                ns = Namespace(name=segment)
                container.members.append(ns)
                self.namespaces[key] = ns
            container = ns
        return container

    def add_source(self, url: str) -> None:
        if url not in self.header_sources:
            self.header_sources.append(url)

    def serialize(self) -> str:
        sources = "\n".join(f" *   {s}" for s in self.header_sources)
        out = HEADER_TEMPLATE.format(sources=sources)
        if self.reference_paths:
            out += "\n"
            for ref in sorted(self.reference_paths):
                out += f'/// <reference path="{ref}" />\n'
        for member in self.members:
            out += "\n"
            out += member.serialize(0)
        return out
