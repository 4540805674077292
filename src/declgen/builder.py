from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pathspec

from declgen.annotations import translate_param, translate_type
from declgen.helpers import (
    build_exclude_spec,
    declarations_filename,
    is_excluded,
    is_external_url,
    kebab_to_pascal,
    relative_reference,
    unstage_dependency_url,
)
from declgen.logger import logger
from declgen.models import (
    AnalyzedDocument,
    Feature,
    FeatureKind,
    MethodInfo,
    ParamInfo,
    Privacy,
)
from declgen.nodes import (
    Class,
    Document,
    Function,
    Interface,
    Method,
    Mixin,
    Param,
    Property,
)
from declgen.settings import GeneratorSettings
from declgen.types import UNDEFINED, NameType, UnionType, ensure_array


class FeatureVariant(str, Enum):
    ELEMENT = "element"
    BEHAVIOR = "behavior"
    MIXIN = "mixin"
    CLASS = "class"
    FUNCTION = "function"
    NAMESPACE = "namespace"
    IMPORT = "import"


# Priority order: a feature carrying several kinds resolves to the first match
_KIND_PRIORITY: Tuple[Tuple[FeatureKind, FeatureVariant], ...] = (
    (FeatureKind.ELEMENT, FeatureVariant.ELEMENT),
    (FeatureKind.BEHAVIOR, FeatureVariant.BEHAVIOR),
    (FeatureKind.MIXIN, FeatureVariant.MIXIN),
    (FeatureKind.CLASS, FeatureVariant.CLASS),
    (FeatureKind.FUNCTION, FeatureVariant.FUNCTION),
    (FeatureKind.NAMESPACE, FeatureVariant.NAMESPACE),
    (FeatureKind.IMPORT, FeatureVariant.IMPORT),
)


def classify(feature: Feature) -> Optional[FeatureVariant]:
    """
    Resolve the kinds of *feature* to the single variant that is built for
    it. Returns None for non-public features and for features of no known kind.
    """
    if feature.privacy is not Privacy.PUBLIC:
        return None
    for kind, variant in _KIND_PRIORITY:
        if kind in feature.kinds:
            return variant
    return None


def split_qualified_name(name: str) -> Tuple[List[str], str]:
    """``Polymer.Foo.Bar`` -> (["Polymer", "Foo"], "Bar")"""
    parts = name.split(".")
    return parts[:-1], parts[-1]


def build_params(
    params: Sequence[ParamInfo], template_types: Sequence[str] = ()
) -> List[Param]:
    """
    Translate a parameter list, walking it right to left.

    A parameter that is optional (by annotation or default value) can only be
    emitted as optional when no required parameter follows it. Otherwise its
    type is widened with ``undefined`` so callers may still pass
    ``undefined`` explicitly.
    """
    out: List[Optional[Param]] = [None] * len(params)
    required_seen = False
    for i in range(len(params) - 1, -1, -1):
        info = params[i]
        tr = translate_param(info.type, template_types, variadic=info.rest)
        description = info.description or ""
        if tr.rest:
            out[i] = Param(
                name=info.name,
                type=ensure_array(tr.type),
                rest=True,
                description=description,
            )
            continue

        typ = tr.type
        optional = tr.optional or info.default_value is not None
        if optional and required_seen:
            typ = UnionType((typ, UNDEFINED))
            optional = False
        elif not optional:
            required_seen = True
        out[i] = Param(
            name=info.name, type=typ, optional=optional, description=description
        )
    return [p for p in out if p is not None]


class TreeBuilder:
    """
    Inserts analyzer features into a declarations ``Document``.

    One builder is used per output document; all features of every
    compilation unit merged into that document go through it.
    """

    def __init__(
        self,
        document: Document,
        settings: GeneratorSettings,
        exclude_spec: Optional["pathspec.PathSpec"] = None,
    ) -> None:
        self.document = document
        self.settings = settings
        self.exclude_spec = exclude_spec or build_exclude_spec(settings.exclude)
        self._handlers: Dict[FeatureVariant, Callable[[Feature, str], None]] = {
            FeatureVariant.ELEMENT: self._handle_element,
            FeatureVariant.BEHAVIOR: self._handle_behavior,
            FeatureVariant.MIXIN: self._handle_mixin,
            FeatureVariant.CLASS: self._handle_class,
            FeatureVariant.FUNCTION: self._handle_function,
            FeatureVariant.NAMESPACE: self._handle_namespace,
            FeatureVariant.IMPORT: self._handle_import,
        }

    def add_document(self, doc: AnalyzedDocument) -> None:
        self.document.add_source(doc.url)
        for feature in doc.features:
            self.add_feature(feature, doc.url)

    def add_feature(self, feature: Feature, source_url: str) -> None:
        variant = classify(feature)
        if variant is None:
            logger.debug(
                "Feature skipped",
                name=feature.name or feature.class_name or feature.tag_name,
                privacy=feature.privacy.value,
                url=source_url,
            )
            return
        self._handlers[variant](feature, source_url)

    # Handlers
    def _handle_element(self, feature: Feature, source_url: str) -> None:
        is_framework = FeatureKind.POLYMER_ELEMENT in feature.kinds
        behaviors = list(feature.behaviors) if is_framework else []
        properties = self._properties(feature)
        methods = self._methods(feature.methods, feature.template_types)

        if feature.class_name:
            path, name = split_qualified_name(feature.class_name)
            if feature.super_class:
                extends = feature.super_class
            elif is_framework:
                extends = self.settings.framework_base
            else:
                extends = self.settings.element_base
            self.document.namespace_for(path).members.append(
                Class(
                    name=name,
                    description=feature.doc,
                    extends=extends,
                    mixins=list(feature.mixins),
                    interfaces=behaviors,
                    properties=properties,
                    methods=methods,
                    static_methods=self._methods(
                        feature.static_methods, feature.template_types, static=True
                    ),
                    template_types=list(feature.template_types),
                )
            )
            qualified = feature.class_name
        elif feature.tag_name:
            # Tag-only elements have no namespace of their own and land in
            # the global scope.
            name = kebab_to_pascal(feature.tag_name)
            base = self.settings.framework_base if is_framework else self.settings.element_base
            self.document.members.append(
                Interface(
                    name=name,
                    description=feature.doc,
                    extends=[base, *behaviors, *feature.mixins],
                    properties=properties,
                    methods=methods,
                )
            )
            qualified = name
        else:
            self._warn_unnamed(feature, source_url)
            return

        if feature.tag_name:
            self._register_tag(feature.tag_name, qualified)

    def _handle_behavior(self, feature: Feature, source_url: str) -> None:
        qualified = feature.name or feature.class_name
        if not qualified:
            self._warn_unnamed(feature, source_url)
            return
        path, name = split_qualified_name(qualified)
        self.document.namespace_for(path).members.append(
            Interface(
                name=name,
                description=feature.doc,
                properties=self._properties(feature),
                methods=self._methods(feature.methods, feature.template_types),
            )
        )

    def _handle_mixin(self, feature: Feature, source_url: str) -> None:
        if not feature.name:
            self._warn_unnamed(feature, source_url)
            return
        path, name = split_qualified_name(feature.name)
        container = self.document.namespace_for(path)
        container.members.append(
            Mixin(
                name=name,
                description=feature.doc,
                interfaces=[feature.name, *feature.mixins],
            )
        )
        container.members.append(
            Interface(
                name=name,
                properties=self._properties(feature),
                methods=self._methods(feature.methods, feature.template_types),
            )
        )

    def _handle_class(self, feature: Feature, source_url: str) -> None:
        qualified = feature.name or feature.class_name
        if not qualified:
            self._warn_unnamed(feature, source_url)
            return
        path, name = split_qualified_name(qualified)
        self.document.namespace_for(path).members.append(
            Class(
                name=name,
                description=feature.doc,
                extends=feature.super_class,
                mixins=list(feature.mixins),
                properties=self._properties(feature),
                methods=self._methods(feature.methods, feature.template_types),
                static_methods=self._methods(
                    feature.static_methods, feature.template_types, static=True
                ),
                template_types=list(feature.template_types),
            )
        )

    def _handle_function(self, feature: Feature, source_url: str) -> None:
        if not feature.name:
            self._warn_unnamed(feature, source_url)
            return
        path, name = split_qualified_name(feature.name)
        templates = feature.template_types
        returns = feature.returns
        self.document.namespace_for(path).members.append(
            Function(
                name=name,
                description=feature.doc,
                params=build_params(feature.params, templates),
                returns=translate_type(returns.type if returns else None, templates),
                returns_description=(returns.description or "") if returns else "",
                template_types=list(templates),
            )
        )

    def _handle_namespace(self, feature: Feature, source_url: str) -> None:
        if not feature.name:
            self._warn_unnamed(feature, source_url)
            return
        ns = self.document.namespace_for(feature.name.split("."))
        if feature.doc:
            ns.description = feature.doc

    def _handle_import(self, feature: Feature, source_url: str) -> None:
        if not feature.url:
            return
        # The analyzer records an import against both ends of the edge. Only
        # the outbound side, declared in this unit, is a dependency of ours.
        if feature.source_range is None or feature.source_range.file != source_url:
            return
        url = unstage_dependency_url(feature.url, self.settings.staged_dependency_dirs)
        if is_external_url(url):
            return
        if is_excluded(url, self.exclude_spec):
            logger.debug("Excluded import skipped", url=url, source=source_url)
            return
        target = declarations_filename(url, self.settings.declaration_extension)
        self.document.reference_paths.add(relative_reference(self.document.path, target))

    # Members
    def _properties(self, feature: Feature) -> List[Property]:
        out: List[Property] = []
        for prop in feature.properties:
            if prop.inherited_from or prop.privacy is Privacy.PRIVATE:
                continue
            out.append(
                Property(
                    name=prop.name,
                    type=translate_type(prop.type, feature.template_types),
                    description=prop.description or "",
                    readonly=prop.read_only,
                )
            )
        return out

    def _methods(
        self,
        methods: Sequence[MethodInfo],
        template_types: Sequence[str] = (),
        static: bool = False,
    ) -> List[Method]:
        out: List[Method] = []
        for method in methods:
            if method.inherited_from or method.privacy is Privacy.PRIVATE:
                continue
            templates = [*template_types, *method.template_types]
            returns = method.returns
            out.append(
                Method(
                    name=method.name,
                    description=method.description or "",
                    params=build_params(method.params, templates),
                    returns=translate_type(returns.type if returns else None, templates),
                    returns_description=(returns.description or "") if returns else "",
                    template_types=list(method.template_types),
                    static=static,
                )
            )
        return out

    def _register_tag(self, tag_name: str, qualified: str) -> None:
        """
        Add ``"tag": Type`` to the global tag lookup interface so that e.g.
        ``document.createElement("my-widget")`` resolves to the element type.
        """
        tag_map = next(
            (
                m
                for m in self.document.members
                if isinstance(m, Interface) and m.name == self.settings.tag_map_interface
            ),
            None,
        )
        if tag_map is None:
            tag_map = Interface(name=self.settings.tag_map_interface)
            self.document.members.append(tag_map)
        if any(p.name == tag_name for p in tag_map.properties):
            return
        tag_map.properties.append(Property(name=tag_name, type=NameType(qualified)))

    def _warn_unnamed(self, feature: Feature, source_url: str) -> None:
        logger.warning(
            "Could not find a name for feature",
            kinds=sorted(k.value for k in feature.kinds),
            url=source_url,
        )
