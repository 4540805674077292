from typing import Optional, List

from pydantic import Field
from pydantic_settings import BaseSettings


class GeneratorSettings(BaseSettings):
    """Top-level settings for a declaration generation run."""

    root_dir: str = Field(
        default=".",
        description="The root directory of the package whose declarations are generated.",
    )
    analysis_file: Optional[str] = Field(
        default=None,
        description=(
            "Path to the analyzer's JSON dump. If None, `analysis.json` under "
            "`root_dir` is used."
        ),
    )
    out_dir: Optional[str] = Field(
        default=None,
        description="Directory to write declaration files to. If None, they are printed.",
    )
    exclude: List[str] = Field(
        default_factory=lambda: ["test/", "demo/"],
        description=(
            "Gitignore-style glob patterns of source paths to skip. Matching "
            "documents produce no declarations and are never referenced."
        ),
    )
    remove_references: List[str] = Field(
        default_factory=list,
        description="Reference paths to drop from every generated document.",
    )
    add_references: dict[str, List[str]] = Field(
        default_factory=dict,
        description=(
            "Extra reference paths keyed by declaration file. Both keys and "
            "values are relative to `root_dir`."
        ),
    )
    framework_base: str = Field(
        default="Polymer.Element",
        description="Base type of framework (Polymer) elements.",
    )
    element_base: str = Field(
        default="HTMLElement",
        description="Base type of plain custom elements.",
    )
    tag_map_interface: str = Field(
        default="HTMLElementTagNameMap",
        description="Global interface augmented with one property per element tag.",
    )
    declaration_extension: str = Field(
        default=".d.ts",
        description="Extension replacing the source extension of each compilation unit.",
    )
    staged_dependency_dirs: List[str] = Field(
        default_factory=lambda: ["bower_components", "node_modules"],
        description=(
            "Directories dependencies are installed to during analysis. Import "
            "urls under them are rewritten to sibling packages (`../`)."
        ),
    )
