from pydantic import BaseModel, Field, field_validator
from enum import Enum
from typing import Any, List, Optional, Set

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class FeatureKind(str, Enum):
    ELEMENT = "element"
    POLYMER_ELEMENT = "polymer-element"  # framework element (vs. plain custom element)
    BEHAVIOR = "behavior"
    MIXIN = "element-mixin"
    CLASS = "class"
    FUNCTION = "function"
    NAMESPACE = "namespace"
    IMPORT = "import"


# Other spellings the analyzer uses for the same kind
_KIND_ALIASES = {
    "mixin": FeatureKind.MIXIN,
}


class Privacy(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


# ---------------------------------------------------------------------------
# Member descriptions
# ---------------------------------------------------------------------------


class SourceRange(BaseModel):
    file: str  # url of the compilation unit the feature was found in
    start_line: int = 0
    end_line: int = 0


class ParamInfo(BaseModel):
    name: str
    type: Optional[str] = None  # raw annotation, e.g. "string=" or "...number"
    description: Optional[str] = None
    default_value: Optional[str] = None
    rest: bool = False  # variadic as inferred by the analyzer


class ReturnInfo(BaseModel):
    type: Optional[str] = None
    description: Optional[str] = None


class PropertyInfo(BaseModel):
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    privacy: Privacy = Privacy.PUBLIC
    inherited_from: Optional[str] = None
    read_only: bool = False


class MethodInfo(BaseModel):
    name: str
    description: Optional[str] = None
    privacy: Privacy = Privacy.PUBLIC
    inherited_from: Optional[str] = None
    params: List[ParamInfo] = Field(default_factory=list)
    returns: Optional[ReturnInfo] = Field(default=None, alias="return")
    template_types: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


# ---------------------------------------------------------------------------
# Features and documents
# ---------------------------------------------------------------------------


class Feature(BaseModel):
    """
    One symbol discovered by the analyzer. A feature may carry several kinds
    at once (an element is usually also a class).
    """

    kinds: Set[FeatureKind] = Field(default_factory=set)

    name: Optional[str] = None  # qualified name for behaviors, mixins, classes, ...
    class_name: Optional[str] = None  # qualified class name of an element
    tag_name: Optional[str] = None  # custom element tag, e.g. "my-widget"

    description: Optional[str] = None
    summary: Optional[str] = None
    privacy: Privacy = Privacy.PUBLIC

    super_class: Optional[str] = None
    mixins: List[str] = Field(default_factory=list)
    behaviors: List[str] = Field(default_factory=list)
    template_types: List[str] = Field(default_factory=list)

    properties: List[PropertyInfo] = Field(default_factory=list)
    methods: List[MethodInfo] = Field(default_factory=list)
    static_methods: List[MethodInfo] = Field(default_factory=list)

    # Functions
    params: List[ParamInfo] = Field(default_factory=list)
    returns: Optional[ReturnInfo] = Field(default=None, alias="return")

    # Imports
    url: Optional[str] = None

    source_range: Optional[SourceRange] = None

    model_config = {"populate_by_name": True}

    @field_validator("kinds", mode="before")
    @classmethod
    def _known_kinds(cls, value: Any) -> Any:
        # Kinds nothing is built for (html-import, polymer-element-mixin) are dropped
        if not isinstance(value, (list, tuple, set, frozenset)):
            return value
        known = {k.value for k in FeatureKind}
        kinds: Set[FeatureKind] = set()
        for kind in value:
            if isinstance(kind, FeatureKind):
                kinds.add(kind)
            elif not isinstance(kind, str):
                continue
            elif kind in _KIND_ALIASES:
                kinds.add(_KIND_ALIASES[kind])
            elif kind in known:
                kinds.add(FeatureKind(kind))
        return kinds

    @property
    def doc(self) -> str:
        return self.description or self.summary or ""


class AnalyzedDocument(BaseModel):
    url: str  # package-relative url, e.g. "src/my-widget.html"
    features: List[Feature] = Field(default_factory=list)


class Analysis(BaseModel):
    documents: List[AnalyzedDocument] = Field(default_factory=list)
