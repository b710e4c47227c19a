"""Resolve links between guide documents.

Guides refer to each other by literal, human-typed filenames such as
``[modules](Modules, Exports, and Imports.md)``. The resolver runs every
prose block and section title through the same Markdown configuration the
renderer uses and collects the ``href`` of each resulting anchor, so inline,
reference-style and angle-bracketed links are seen exactly as they will be
rendered. Targets ending in a source suffix are local document links and are
matched against document identifiers exactly and case-sensitively. Nothing
is normalised: a link whose spelling differs from the filename is reported
as broken rather than silently fixed.

External links (anything with a scheme or network location), absolute paths
and bare ``#fragment`` links are left alone.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import posixpath
import types
import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from guide_pages._constants import DEFAULT_SOURCE_SUFFIXES
from guide_pages.generator.renderer import build_markdown
from guide_pages.markdown_parser import ProseBlock
from guide_pages.report import MISSING_ANCHOR, MISSING_DOCUMENT, BrokenLink

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from guide_pages.markdown_parser import Document
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

logger = logging.getLogger(__name__)

_EXTERNAL_PREFIXES = ("#", "/", "//")


@dc.dataclass(frozen=True, slots=True)
class CrossReference:
    """A link from one document to another.

    Attributes
    ----------
    source_id : str
        Document containing the link.
    target : str
        Link target exactly as written.
    target_id : str or None
        Identifier of the matched document, or ``None`` when unresolved.
    anchor : str or None
        Fragment naming a section of the target, if any.
    resolved : bool
        ``True`` when both the document and any anchor exist.
    """

    source_id: str
    target: str
    target_id: str | None
    anchor: str | None = None
    resolved: bool = False


@dc.dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Every cross-reference found in a document set plus the broken ones."""

    references: tuple[CrossReference, ...] = ()
    broken: tuple[BrokenLink, ...] = ()

    def for_source(self, source_id: str) -> cabc.Mapping[str, CrossReference]:
        """Return a read-only ``target -> CrossReference`` map for one document."""
        return types.MappingProxyType(
            {ref.target: ref for ref in self.references if ref.source_id == source_id}
        )


class LinkCollectorExtension(Extension):
    """Record the ``href`` of every anchor Markdown builds from a text."""

    def __init__(self) -> None:
        super().__init__()
        self.targets: list[str] = []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the collecting treeprocessor where links are rewritten."""
        md.treeprocessors.register(
            LinkCollectorTreeprocessor(md, self.targets), "guide_link_collector", 15
        )


class LinkCollectorTreeprocessor(Treeprocessor):
    """Append anchor targets to a shared list without changing the tree."""

    def __init__(self, md: Markdown, targets: list[str]) -> None:
        super().__init__(md)
        self.targets = targets

    def run(self, root: Element) -> Element:
        """Collect ``href`` values in document order."""
        for element in root.iter("a"):
            href = element.get("href")
            if href:
                self.targets.append(href)
        return root


def extract_link_targets(text: str) -> list[str]:
    """Return link targets in ``text`` in order of appearance.

    The text is converted with the renderer's Markdown configuration, so
    the result holds exactly the hrefs the rendered page would contain.
    Images and code spans never produce anchors and are skipped.
    """
    if not text.strip():
        return []
    collector = LinkCollectorExtension()
    build_markdown([collector]).convert(text)
    return collector.targets


def _linkable_texts(document: Document) -> cabc.Iterator[str]:
    """Yield section titles and prose in source order."""
    for section in document.sections:
        if section.title:
            yield section.title
        for block in section.blocks:
            if isinstance(block, ProseBlock):
                yield block.text


def is_local_document_link(
    target: str, suffixes: cabc.Iterable[str] = DEFAULT_SOURCE_SUFFIXES
) -> bool:
    """Return ``True`` when ``target`` looks like a relative link to a guide."""
    if target.startswith(_EXTERNAL_PREFIXES) or "://" in target:
        return False
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return False
    return parsed.path.endswith(tuple(suffixes))


def _split_target(source_id: str, target: str) -> tuple[str, str | None]:
    """Return the candidate document id and fragment for a local link."""
    path, _, fragment = target.partition("#")
    path = path.split("?", 1)[0]
    base_dir = posixpath.dirname(source_id)
    joined = posixpath.normpath(posixpath.join(base_dir, path))
    return joined, fragment or None


def _resolve_one(
    source_id: str, target: str, documents: cabc.Mapping[str, Document]
) -> tuple[CrossReference, BrokenLink | None]:
    candidate, anchor = _split_target(source_id, target)
    document = documents.get(candidate)
    if document is None:
        ref = CrossReference(source_id, target, None, anchor)
        return ref, BrokenLink(source_id, target, MISSING_DOCUMENT)
    if anchor is not None and anchor not in document.anchors:
        ref = CrossReference(source_id, target, candidate, anchor)
        return ref, BrokenLink(source_id, target, MISSING_ANCHOR)
    return CrossReference(source_id, target, candidate, anchor, resolved=True), None


def resolve_references(
    documents: cabc.Sequence[Document],
    suffixes: cabc.Iterable[str] = DEFAULT_SOURCE_SUFFIXES,
) -> ResolutionResult:
    """Resolve local links across the complete document set.

    Parameters
    ----------
    documents : Sequence[Document]
        Every parsed document of the build; resolution needs the full id set.
    suffixes : Iterable[str], optional
        Suffixes that mark a link target as a guide document.

    Returns
    -------
    ResolutionResult
        One :class:`CrossReference` per distinct ``(source, target)`` pair in
        source order, and a :class:`BrokenLink` for each unresolved one.
    """
    allowed = tuple(suffixes)
    by_id = {document.doc_id: document for document in documents}
    references: list[CrossReference] = []
    broken: list[BrokenLink] = []
    for document in documents:
        seen: set[str] = set()
        for text in _linkable_texts(document):
            for target in extract_link_targets(text):
                if target in seen or not is_local_document_link(target, allowed):
                    continue
                seen.add(target)
                ref, problem = _resolve_one(document.doc_id, target, by_id)
                references.append(ref)
                if problem is not None:
                    broken.append(problem)
    logger.debug(
        "resolved %d cross-reference(s), %d broken", len(references), len(broken)
    )
    return ResolutionResult(references=tuple(references), broken=tuple(broken))


__all__ = [
    "CrossReference",
    "LinkCollectorExtension",
    "ResolutionResult",
    "extract_link_targets",
    "is_local_document_link",
    "resolve_references",
]
