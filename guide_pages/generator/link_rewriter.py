"""Rewrite cross-document links inside rendered Markdown."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from guide_pages.generator.models import LinkModel

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from guide_pages.site_index import PageEntry
    from guide_pages.xrefs import CrossReference
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

BROKEN_LINK_CLASS = "broken-link"


def build_href(
    ref: CrossReference, site_index: cabc.Mapping[str, PageEntry]
) -> str | None:
    """Return the generated-page href for a resolved reference, else ``None``."""
    if not ref.resolved or ref.target_id is None:
        return None
    entry = site_index.get(ref.target_id)
    if entry is None:
        return None
    if ref.anchor:
        return f"{entry.output_path}#{ref.anchor}"
    return entry.output_path


class CrossReferenceExtension(Extension):
    """Point local guide links at generated pages.

    Insert this extension into a ``markdown.Markdown`` instance together with
    the resolved references of the document being rendered. Links whose
    target resolved are rewritten to ``<page>.html[#anchor]``; unresolved ones
    are demoted to a ``<span class="broken-link">`` holding the link text.
    Links the resolver did not record (external URLs, in-page anchors) are
    left untouched. Every rewritten or demoted link is appended to
    :attr:`links`.
    """

    def __init__(
        self,
        references: cabc.Mapping[str, CrossReference],
        site_index: cabc.Mapping[str, PageEntry],
    ) -> None:
        super().__init__()
        self.references = references
        self.site_index = site_index
        self.links: list[LinkModel] = []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the cross-reference treeprocessor on the Markdown instance."""
        processor = CrossReferenceTreeprocessor(md, self)
        md.treeprocessors.register(processor, "guide_cross_references", 15)


class CrossReferenceTreeprocessor(Treeprocessor):
    """Rewrite or demote anchors recorded by the cross-reference resolver."""

    def __init__(self, md: Markdown, extension: CrossReferenceExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> Element:
        """Rewrite recorded anchors in the parsed markdown tree."""
        for element in root.iter("a"):
            href = element.get("href")
            if href is None:
                continue
            ref = self.extension.references.get(href)
            if ref is None:
                continue
            rewritten = build_href(ref, self.extension.site_index)
            if rewritten is None:
                _demote(element, href)
            else:
                element.set("href", rewritten)
            self.extension.links.append(
                LinkModel(target=href, href=rewritten, resolved=rewritten is not None)
            )
        return root


def _demote(element: Element, target: str) -> None:
    """Turn an anchor into literal text that still records its target."""
    element.tag = "span"
    element.attrib.pop("href", None)
    element.attrib.pop("title", None)
    element.set("class", BROKEN_LINK_CLASS)
    element.set("data-target", target)


__all__ = [
    "BROKEN_LINK_CLASS",
    "CrossReferenceExtension",
    "CrossReferenceTreeprocessor",
    "build_href",
]
