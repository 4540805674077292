from declgen.generate import (
    build_documents,
    generate_declarations,
    render_documents,
    write_declarations,
)
from declgen.settings import GeneratorSettings

__all__ = [
    "GeneratorSettings",
    "build_documents",
    "generate_declarations",
    "render_documents",
    "write_declarations",
]
