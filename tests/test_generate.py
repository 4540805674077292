import json
from pathlib import Path

import pytest

from declgen.analyzer import AbstractAnalyzer, JsonAnalyzer
from declgen.generate import build_documents, generate_declarations, write_declarations
from declgen.models import Analysis, AnalyzedDocument, Feature, FeatureKind, SourceRange
from declgen.nodes import Mixin
from declgen.settings import GeneratorSettings


SAMPLES_DIR = Path(__file__).parent / "samples" / "package"


def _settings(**kwargs) -> GeneratorSettings:
    return GeneratorSettings(root_dir=str(SAMPLES_DIR), **kwargs)


class _StaticAnalyzer(AbstractAnalyzer):
    def __init__(self, analysis: Analysis) -> None:
        self.analysis = analysis

    async def analyze(self, root_dir: str) -> Analysis:
        return self.analysis


@pytest.mark.asyncio
async def test_generate_sample_package():
    outputs = await generate_declarations(_settings())

    # test/ is excluded by default, empty documents are kept
    assert list(outputs) == ["src/empty.d.ts", "src/lib.d.ts", "src/my-widget.d.ts"]

    expected = (SAMPLES_DIR / "my-widget.d.ts.expected").read_text(encoding="utf-8")
    assert outputs["src/my-widget.d.ts"] == expected

    assert " *   src/empty.html\n" in outputs["src/empty.d.ts"]


@pytest.mark.asyncio
async def test_generate_lib_declarations():
    outputs = await generate_declarations(_settings())
    lib = outputs["src/lib.d.ts"]

    # The import recorded in lib.js is declared by my-widget.html
    assert "reference" not in lib
    assert "Hidden" not in lib
    assert "inheritedProp" not in lib

    assert "/**\n * Application namespace.\n */\ndeclare namespace MyApp {\n" in lib
    assert "  interface SelectableBehavior {\n    selected: string;\n  }\n" in lib
    assert (
        "  function ThemeMixin<T extends new (...args: any[]) => {}>"
        "(base: T): T & MyApp.ThemeMixinConstructor;\n" in lib
    )
    assert "  interface ThemeMixin {\n    theme: string|undefined;\n  }\n" in lib
    assert "  class Registry<T> {\n" in lib
    assert (
        "    register(key: string, value: T|undefined, cb: (p0: T) => void): boolean;\n"
        in lib
    )
    assert "    all(...keys: any[]): T[];\n" in lib
    assert "  class FancyButton extends Polymer.Element {\n" in lib
    assert "    readonly size: number;\n" in lib
    assert (
        "  interface FancyButton extends MyApp.ThemeMixin, MyApp.SelectableBehavior {\n"
        in lib
    )
    assert '  "fancy-button": MyApp.FancyButton;\n' in lib


@pytest.mark.asyncio
async def test_generate_is_idempotent():
    first = await generate_declarations(_settings())
    second = await generate_declarations(_settings())
    assert first == second


@pytest.mark.asyncio
async def test_reference_settings_applied():
    outputs = await generate_declarations(
        _settings(
            remove_references=["lib.d.ts"],
            add_references={"src/my-widget.d.ts": ["types/extra.d.ts"]},
        )
    )
    widget = outputs["src/my-widget.d.ts"]
    assert '/// <reference path="lib.d.ts" />' not in widget
    assert '/// <reference path="../types/extra.d.ts" />' in widget
    assert '/// <reference path="../../polymer/polymer.d.ts" />' in widget


@pytest.mark.asyncio
async def test_custom_exclude_and_analyzer():
    analysis = Analysis(
        documents=[
            AnalyzedDocument(
                url="demo/index.html",
                features=[Feature(kinds={FeatureKind.CLASS}, name="Demo")],
            ),
            AnalyzedDocument(
                url="lib/a.js",
                features=[
                    Feature(
                        kinds={FeatureKind.IMPORT},
                        url="demo/index.html",
                        source_range=SourceRange(file="lib/a.js"),
                    )
                ],
            ),
        ]
    )
    outputs = await generate_declarations(
        _settings(exclude=["lib/"]), analyzer=_StaticAnalyzer(analysis)
    )
    assert list(outputs) == ["demo/index.d.ts"]
    assert "declare class Demo {\n}\n" in outputs["demo/index.d.ts"]

    # With the default exclusions the demo is dropped, and so is the import of it
    outputs = await generate_declarations(_settings(), analyzer=_StaticAnalyzer(analysis))
    assert list(outputs) == ["lib/a.d.ts"]
    assert "reference" not in outputs["lib/a.d.ts"]


def test_build_documents_ordered_by_unit():
    analysis = Analysis(
        documents=[
            AnalyzedDocument(url="b.js", features=[Feature(kinds={FeatureKind.CLASS}, name="B")]),
            AnalyzedDocument(url="a.js", features=[Feature(kinds={FeatureKind.CLASS}, name="A")]),
            AnalyzedDocument(url="a.html", features=[Feature(kinds={FeatureKind.CLASS}, name="A2")]),
        ]
    )
    documents = build_documents(analysis, GeneratorSettings())
    assert list(documents) == ["a.d.ts", "b.d.ts"]
    assert documents["a.d.ts"].header_sources == ["a.html", "a.js"]
    assert [m.name for m in documents["a.d.ts"].members] == ["A2", "A"]


@pytest.mark.asyncio
async def test_json_analyzer_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        await JsonAnalyzer().analyze(str(tmp_path))

    with pytest.raises(ValueError):
        await JsonAnalyzer().analyze(str(tmp_path / "missing"))

    bad = tmp_path / "analysis.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        await JsonAnalyzer().analyze(str(tmp_path))

    bad.write_text('{"documents": [{"features": []}]}', encoding="utf-8")
    with pytest.raises(ValueError):
        await JsonAnalyzer(str(bad)).analyze(str(tmp_path))


@pytest.mark.asyncio
async def test_json_analyzer_tolerates_unfamiliar_kinds(tmp_path):
    dump = {
        "documents": [
            {
                "url": "src/bar.js",
                "features": [
                    {"kinds": ["mixin"], "name": "Foo.BarMixin"},
                    {"kinds": ["element-mixin", "polymer-element-mixin"], "name": "Foo.BazMixin"},
                    {"kinds": ["import", "html-import"], "url": "baz.html"},
                    {"kinds": ["html-style"], "name": "Unbuilt"},
                ],
            }
        ]
    }
    (tmp_path / "analysis.json").write_text(json.dumps(dump), encoding="utf-8")
    analysis = await JsonAnalyzer().analyze(str(tmp_path))

    kinds = [f.kinds for f in analysis.documents[0].features]
    assert kinds == [
        {FeatureKind.MIXIN},
        {FeatureKind.MIXIN},
        {FeatureKind.IMPORT},
        set(),
    ]

    doc = build_documents(analysis, GeneratorSettings())["src/bar.d.ts"]
    (foo,) = doc.members
    assert foo.name == "Foo"
    assert [m.name for m in foo.members if isinstance(m, Mixin)] == ["BarMixin", "BazMixin"]


def test_write_declarations(tmp_path):
    written = write_declarations(
        {"src/a.d.ts": "A", "b.d.ts": "B"}, str(tmp_path / "out")
    )
    assert len(written) == 2
    assert (tmp_path / "out" / "src" / "a.d.ts").read_text(encoding="utf-8") == "A"
    assert (tmp_path / "out" / "b.d.ts").read_text(encoding="utf-8") == "B"
