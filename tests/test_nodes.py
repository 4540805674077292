from declgen.nodes import (
    Class,
    Document,
    Function,
    Interface,
    Method,
    Mixin,
    Namespace,
    Param,
    Property,
    format_comment,
    quote_name,
)
from declgen.types import ANY, ArrayType, NameType

STRING = NameType("string")
VOID = NameType("void")


def test_param_serialize():
    assert Param("a", STRING).serialize() == "a: string"
    assert Param("a", STRING, optional=True).serialize() == "a?: string"
    # Rest parameters are never rendered optional
    assert (
        Param("args", ArrayType(STRING), optional=True, rest=True).serialize()
        == "...args: string[]"
    )


def test_property_serialize_quotes_non_identifiers():
    assert quote_name("foo") == "foo"
    assert quote_name("my-widget") == '"my-widget"'
    assert Property("my-widget", NameType("MyWidget")).serialize(1) == (
        '  "my-widget": MyWidget;\n'
    )
    assert Property("size", NameType("number"), readonly=True).serialize() == (
        "readonly size: number;\n"
    )


def test_format_comment():
    assert format_comment("", 0) == ""
    assert format_comment("Hello\n\nworld", 1) == (
        "  /**\n   * Hello\n   *\n   * world\n   */\n"
    )
    assert "*\\/" in format_comment("ends */ early", 0)


def test_function_serialize():
    fn = Function(name="f", params=[Param("a", STRING)], returns=VOID)
    assert fn.serialize() == "declare function f(a: string): void;\n"
    assert fn.serialize(1) == "  function f(a: string): void;\n"

    generic = Function(
        name="first", params=[Param("items", ArrayType(NameType("T")))],
        returns=NameType("T"), template_types=["T"],
    )
    assert generic.serialize(1) == "  function first<T>(items: T[]): T;\n"


def test_method_comment_includes_param_and_return_docs():
    method = Method(
        name="f",
        description="Does f.",
        params=[Param("a", STRING, description="The a."), Param("b", STRING)],
        returns_description="Nothing.",
    )
    assert method.serialize(1) == (
        "  /**\n"
        "   * Does f.\n"
        "   *\n"
        "   * @param a The a.\n"
        "   * @returns Nothing.\n"
        "   */\n"
        "  f(a: string, b: string): any;\n"
    )
    assert Method(name="create", static=True).serialize(1) == "  static create(): any;\n"


def test_namespace_with_class():
    ns = Namespace(
        "Polymer",
        members=[
            Class(
                "MyEl",
                extends="Polymer.Element",
                properties=[Property("foo", STRING)],
                methods=[Method("bar", returns=VOID)],
            )
        ],
    )
    assert ns.serialize() == (
        "declare namespace Polymer {\n"
        "\n"
        "  class MyEl extends Polymer.Element {\n"
        "    foo: string;\n"
        "    bar(): void;\n"
        "  }\n"
        "}\n"
    )


def test_class_merges_mixins_and_behaviors_into_interface():
    cls = Class(
        "FancyButton",
        extends="Polymer.Element",
        mixins=["ThemeMixin"],
        interfaces=["SelectableBehavior"],
    )
    assert cls.serialize() == (
        "declare class FancyButton extends Polymer.Element {\n"
        "}\n"
        "\n"
        "interface FancyButton extends ThemeMixin, SelectableBehavior {\n"
        "}\n"
    )
    assert Class("Plain").serialize() == "declare class Plain {\n}\n"


def test_interface_serialize():
    iface = Interface(
        "MyWidget",
        description="A widget.",
        extends=["HTMLElement"],
        methods=[Method("foo", params=[Param("bar", STRING)])],
    )
    assert iface.serialize() == (
        "/**\n"
        " * A widget.\n"
        " */\n"
        "interface MyWidget extends HTMLElement {\n"
        "  foo(bar: string): any;\n"
        "}\n"
    )


def test_mixin_serialize():
    mixin = Mixin("FooMixin", interfaces=["FooMixin", "BarMixin"])
    assert mixin.serialize() == (
        "declare function FooMixin<T extends new (...args: any[]) => {}>"
        "(base: T): T & FooMixinConstructor & BarMixinConstructor;\n"
        "\n"
        "interface FooMixinConstructor {\n"
        "  new(...args: any[]): FooMixin;\n"
        "}\n"
    )


def test_document_namespace_for_reuses_nodes():
    doc = Document(path="foo.d.ts")
    assert doc.namespace_for([]) is doc
    first = doc.namespace_for(["A", "B"])
    second = doc.namespace_for(["A", "B"])
    assert first is second
    assert len(doc.members) == 1
    assert doc.members[0].members == [first]
    assert doc.namespace_for(["A"]) is doc.members[0]


def test_empty_document_still_serializes():
    doc = Document(path="empty.d.ts")
    doc.add_source("empty.html")
    doc.add_source("empty.html")
    out = doc.serialize()
    assert out.startswith("/**\n * DO NOT EDIT\n")
    assert " *   empty.html\n" in out
    assert out.count("empty.html") == 1
    assert "reference" not in out


def test_document_references_sorted():
    doc = Document(path="a.d.ts", reference_paths={"z.d.ts", "../b/b.d.ts"})
    out = doc.serialize()
    assert out.index('/// <reference path="../b/b.d.ts" />') < out.index(
        '/// <reference path="z.d.ts" />'
    )
    assert doc.serialize() == out
