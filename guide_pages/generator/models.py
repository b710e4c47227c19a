"""Structural page models produced by the renderer.

Pages are built as plain dataclasses first and serialised to HTML second, so
tests (and alternative output formats) can inspect titles, anchors, links, and
code blocks without parsing markup.
"""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class ProseModel:
    """Rendered prose block.

    Attributes
    ----------
    text : str
        Original Markdown.
    html : str
        Markdown rendered to HTML with cross-references rewritten.
    """

    text: str
    html: str


@dc.dataclass(frozen=True, slots=True)
class CodeModel:
    """Code block carried through verbatim.

    Attributes
    ----------
    text : str
        Exact source text between the fences.
    language : str or None
        Fence language tag kept as highlighting metadata.
    html : str
        Highlighted markup with a ``data-language`` attribute.
    """

    text: str
    language: str | None
    html: str


BlockModel = ProseModel | CodeModel


@dc.dataclass(frozen=True, slots=True)
class SectionModel:
    """Structured data passed to the section loop of the page template.

    Attributes
    ----------
    title : str
        Heading text; empty for the implicit leading section.
    level : int
        Heading depth (1-6).
    anchor : str
        ``id`` attribute of the heading.
    blocks : tuple[BlockModel, ...]
        Rendered blocks in source order.
    title_html : str
        Heading text rendered as inline Markdown; empty when ``title`` is.
    """

    title: str
    level: int
    anchor: str
    blocks: tuple[BlockModel, ...]
    title_html: str = ""


@dc.dataclass(frozen=True, slots=True)
class LinkModel:
    """A cross-reference as it appears on a rendered page."""

    target: str
    href: str | None
    resolved: bool


@dc.dataclass(frozen=True, slots=True)
class NavEntry:
    """Sidebar or table-of-contents entry."""

    doc_id: str
    label: str
    href: str
    is_current: bool = False


@dc.dataclass(frozen=True, slots=True)
class PageModel:
    """Everything needed to serialise one document page."""

    doc_id: str
    title: str
    output_path: str
    sections: tuple[SectionModel, ...]
    links: tuple[LinkModel, ...]
    nav: tuple[NavEntry, ...]

    @property
    def unresolved_links(self) -> tuple[LinkModel, ...]:
        """Return links that were left as literal text."""
        return tuple(link for link in self.links if not link.resolved)


@dc.dataclass(frozen=True, slots=True)
class TocModel:
    """The aggregate table-of-contents page."""

    title: str
    output_path: str
    entries: tuple[NavEntry, ...]


@dc.dataclass(frozen=True, slots=True)
class RenderedPage:
    """A structural model paired with its serialised HTML."""

    output_path: str
    html: str
    model: PageModel | TocModel


__all__ = [
    "BlockModel",
    "CodeModel",
    "LinkModel",
    "NavEntry",
    "PageModel",
    "ProseModel",
    "RenderedPage",
    "SectionModel",
    "TocModel",
]
