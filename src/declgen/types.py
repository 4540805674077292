from dataclasses import dataclass, field
from typing import Tuple, Union


# Type expressions
@dataclass(frozen=True)
class NameType:
    """
    Nominal reference to a builtin or user-defined type, or a bare type
    variable when the name is a template type in scope.
    """

    name: str

    @property
    def is_array(self) -> bool:
        return False

    def serialize(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayType:
    element: "TypeExpression"

    @property
    def is_array(self) -> bool:
        return True

    def serialize(self) -> str:
        inner = self.element.serialize()
        if isinstance(self.element, (UnionType, FunctionType)):
            inner = f"({inner})"
        return f"{inner}[]"


@dataclass(frozen=True)
class UnionType:
    """
    Ordered union of two or more members. Members are kept exactly as given:
    nested unions are not flattened and repeated members are not collapsed.
    """

    members: Tuple["TypeExpression", ...]

    def __post_init__(self) -> None:
        if len(self.members) < 2:
            raise ValueError("UnionType requires at least two members")
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def is_array(self) -> bool:
        return False

    def serialize(self) -> str:
        return "|".join(_union_member(m) for m in self.members)


@dataclass(frozen=True)
class FunctionType:
    params: Tuple["TypeExpression", ...] = ()
    returns: "TypeExpression" = field(default_factory=lambda: ANY)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def is_array(self) -> bool:
        return False

    def serialize(self) -> str:
        params = ", ".join(f"p{i}: {p.serialize()}" for i, p in enumerate(self.params))
        return f"({params}) => {self.returns.serialize()}"


@dataclass(frozen=True)
class GenericType:
    """Instantiated generic such as ``Promise<string>`` or ``Record<K, V>``."""

    base: str
    arguments: Tuple["TypeExpression", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(self.arguments))

    @property
    def is_array(self) -> bool:
        return False

    def serialize(self) -> str:
        args = ", ".join(a.serialize() for a in self.arguments)
        return f"{self.base}<{args}>"


@dataclass(frozen=True)
class RecordType:
    fields: Tuple[Tuple[str, "TypeExpression"], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(tuple(f) for f in self.fields))

    @property
    def is_array(self) -> bool:
        return False

    def serialize(self) -> str:
        if not self.fields:
            return "{}"
        body = " ".join(f"{name}: {typ.serialize()};" for name, typ in self.fields)
        return f"{{{body}}}"


TypeExpression = Union[
    NameType, ArrayType, UnionType, FunctionType, GenericType, RecordType
]

ANY = NameType("any")
UNDEFINED = NameType("undefined")
NULL = NameType("null")


def ensure_array(typ: TypeExpression) -> TypeExpression:
    """Return *typ* unchanged when it is already array-shaped, else wrap it."""
    if typ.is_array:
        return typ
    return ArrayType(typ)


def _union_member(typ: TypeExpression) -> str:
    # An arrow type would otherwise absorb the following members as its return
    if isinstance(typ, FunctionType):
        return f"({typ.serialize()})"
    return typ.serialize()
