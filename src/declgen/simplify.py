from typing import Dict, Iterable, List, Mapping, Sequence, Union

from declgen.helpers import relative_reference
from declgen.logger import logger
from declgen.nodes import Document, Member, Namespace


def apply_references(
    document: Document,
    remove_references: Iterable[str] = (),
    add_references: Mapping[str, Sequence[str]] | None = None,
) -> None:
    """
    Apply configured reference edits to *document*: removals first, then
    additions. Added paths are package-relative and are rewritten relative to
    the document's own location.
    """
    for ref in remove_references:
        document.reference_paths.discard(ref)

    for ref in (add_references or {}).get(document.path, []):
        document.reference_paths.add(relative_reference(document.path, ref))


def _merge_namespaces(members: List[Member]) -> List[Member]:
    merged: List[Member] = []
    seen: Dict[str, Namespace] = {}
    for member in members:
        if not isinstance(member, Namespace):
            merged.append(member)
            continue
        existing = seen.get(member.name)
        if existing is None:
            seen[member.name] = member
            merged.append(member)
            continue
        logger.debug("Merging duplicate namespace", namespace=member.name)
        existing.members.extend(member.members)
        if not existing.description:
            existing.description = member.description
    for ns in seen.values():
        ns.members = _merge_namespaces(ns.members)
    return merged


def _index_namespaces(
    container: Union[Document, Namespace], prefix: tuple, index: dict
) -> None:
    for member in container.members:
        if isinstance(member, Namespace):
            key = (*prefix, member.name)
            index[key] = member
            _index_namespaces(member, key, index)


def simplify(document: Document) -> Document:
    """
    Normalize *document* in place: same-named sibling namespaces are merged
    (recursively) and a reference from the document to itself is dropped.
    """
    document.members = _merge_namespaces(document.members)
    document.namespaces = {}
    _index_namespaces(document, (), document.namespaces)
    document.reference_paths.discard(relative_reference(document.path, document.path))
    return document


def finalize_document(
    document: Document,
    remove_references: Iterable[str] = (),
    add_references: Mapping[str, Sequence[str]] | None = None,
) -> Document:
    apply_references(document, remove_references, add_references)
    return simplify(document)
