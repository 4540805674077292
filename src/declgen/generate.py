import os
from typing import Dict, List, Optional

from declgen.analyzer import AbstractAnalyzer, JsonAnalyzer
from declgen.builder import TreeBuilder
from declgen.helpers import build_exclude_spec, declarations_filename, is_excluded
from declgen.logger import logger
from declgen.models import Analysis
from declgen.nodes import Document
from declgen.settings import GeneratorSettings
from declgen.simplify import finalize_document


def build_documents(
    analysis: Analysis, settings: GeneratorSettings
) -> Dict[str, Document]:
    """
    Build one finalized declarations ``Document`` per output filename.
    Compilation units sharing a filename (``foo.html`` and ``foo.js``) are
    merged into the same document. The result is ordered by filename.
    """
    exclude_spec = build_exclude_spec(settings.exclude)
    builders: Dict[str, TreeBuilder] = {}

    # Units are processed by url so output never depends on analyzer order
    for doc in sorted(analysis.documents, key=lambda d: d.url):
        if is_excluded(doc.url, exclude_spec):
            logger.debug("Excluded document skipped", url=doc.url)
            continue
        filename = declarations_filename(doc.url, settings.declaration_extension)
        builder = builders.get(filename)
        if builder is None:
            builder = TreeBuilder(Document(path=filename), settings, exclude_spec)
            builders[filename] = builder
        builder.add_document(doc)

    documents: Dict[str, Document] = {}
    for filename in sorted(builders):
        documents[filename] = finalize_document(
            builders[filename].document,
            settings.remove_references,
            settings.add_references,
        )
    return documents


def render_documents(
    analysis: Analysis, settings: GeneratorSettings
) -> Dict[str, str]:
    return {
        filename: doc.serialize()
        for filename, doc in build_documents(analysis, settings).items()
    }


async def generate_declarations(
    settings: GeneratorSettings, analyzer: Optional[AbstractAnalyzer] = None
) -> Dict[str, str]:
    """
    Analyze the package at ``settings.root_dir`` and return the text of every
    declaration file keyed by its package-relative filename.
    """
    if analyzer is None:
        analyzer = JsonAnalyzer(settings.analysis_file)
    analysis = await analyzer.analyze(settings.root_dir)
    outputs = render_documents(analysis, settings)
    logger.info("Declarations generated", files=len(outputs), root=settings.root_dir)
    return outputs


def write_declarations(outputs: Dict[str, str], out_dir: str) -> List[str]:
    """Write *outputs* below *out_dir* and return the written paths."""
    written: List[str] = []
    for filename, text in outputs.items():
        path = os.path.join(out_dir, filename)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        written.append(path)
    return written
