"""Turn parsed guides into page models and themed HTML.

This module is the rendering stage of the build. :class:`PageRenderer`
consumes one :class:`~guide_pages.markdown_parser.Document` together with the
finished :class:`~guide_pages.xrefs.ResolutionResult` and the site index, and
produces a :class:`~guide_pages.generator.models.RenderedPage`: a structural
:class:`PageModel` and the HTML serialised from it through Jinja templates.
It also renders the aggregate table of contents.

Rendering a page only reads its inputs, so one renderer can serve many worker
threads at once.

Example
-------
>>> from guide_pages.config import BuildConfig
>>> from guide_pages.generator import PageRenderer
>>> from guide_pages.markdown_parser import parse_document
>>> from guide_pages.site_index import build_site_index
>>> from guide_pages.xrefs import resolve_references
>>> doc = parse_document("A.md", "# Title A\\nSee [B](B.md).").document
>>> renderer = PageRenderer(BuildConfig())
>>> page = renderer.render_page(doc, resolve_references([doc]), build_site_index([doc]))
>>> page.output_path
'a.html'
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from guide_pages._constants import TOC_FILENAME
from guide_pages.generator.link_rewriter import CrossReferenceExtension
from guide_pages.generator.models import (
    BlockModel,
    CodeModel,
    NavEntry,
    PageModel,
    ProseModel,
    RenderedPage,
    SectionModel,
    TocModel,
)
from guide_pages.generator.renderer import HtmlContentRenderer
from guide_pages.markdown_parser import CodeBlock, ProseBlock

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from guide_pages.config import BuildConfig
    from guide_pages.markdown_parser import Block, Document, Section
    from guide_pages.site_index import PageEntry
    from guide_pages.xrefs import ResolutionResult


class PageRenderer:
    """Render guide documents and the table of contents into HTML."""

    def __init__(
        self, config: BuildConfig, *, templates_dir: Path | None = None
    ) -> None:
        """Initialize the renderer with configuration and template context.

        Parameters
        ----------
        config : BuildConfig
            Build configuration providing theme labels and the Pygments style.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.config = config
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.renderer = HtmlContentRenderer(config.pygments_style)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.page_template = self.env.get_template("doc_page.jinja")
        self.toc_template = self.env.get_template("toc_page.jinja")

    def render_page(
        self,
        document: Document,
        resolution: ResolutionResult,
        site_index: cabc.Mapping[str, PageEntry],
    ) -> RenderedPage:
        """Render one document.

        Parameters
        ----------
        document : Document
            Parsed guide to render.
        resolution : ResolutionResult
            Cross-references for the whole build; only those whose source is
            ``document`` are consulted.
        site_index : Mapping[str, PageEntry]
            Output metadata for every document in the build.

        Returns
        -------
        RenderedPage
            The page model and its HTML. Resolved links point at generated
            pages; unresolved ones are listed in ``model.unresolved_links``.
        """
        entry = site_index[document.doc_id]
        links = CrossReferenceExtension(
            resolution.for_source(document.doc_id), site_index
        )
        sections = tuple(
            self._build_section_model(section, links) for section in document.sections
        )
        model = PageModel(
            doc_id=document.doc_id,
            title=document.title,
            output_path=entry.output_path,
            sections=sections,
            links=tuple(links.links),
            nav=self._build_nav(site_index, current=document.doc_id),
        )
        html = self.page_template.render(
            page=model,
            outline=self._build_outline(sections),
            theme=self.config.theme,
            html_title=self._format_page_title(document.title),
            toc_href=TOC_FILENAME,
            pygments_css=self.renderer.stylesheet,
        )
        return RenderedPage(output_path=entry.output_path, html=html, model=model)

    def render_toc(self, site_index: cabc.Mapping[str, PageEntry]) -> RenderedPage:
        """Render the table of contents listing every document by id order."""
        model = TocModel(
            title=self.config.theme.toc_title,
            output_path=TOC_FILENAME,
            entries=self._build_nav(site_index),
        )
        html = self.toc_template.render(
            toc=model,
            theme=self.config.theme,
            html_title=self._format_page_title(model.title),
        )
        return RenderedPage(output_path=TOC_FILENAME, html=html, model=model)

    def _build_section_model(
        self, section: Section, links: CrossReferenceExtension
    ) -> SectionModel:
        title_html = self.renderer.inline(section.title, links)
        return SectionModel(
            title=section.title,
            level=section.level,
            anchor=section.anchor,
            blocks=tuple(
                self._build_block_model(block, links) for block in section.blocks
            ),
            title_html=title_html,
        )

    def _build_block_model(
        self, block: Block, links: CrossReferenceExtension
    ) -> BlockModel:
        """Render a single block; every Block variant must be handled here."""
        match block:
            case ProseBlock(text=text):
                return ProseModel(text=text, html=self.renderer.markdown(text, links))
            case CodeBlock(text=text, language=language):
                return CodeModel(
                    text=text,
                    language=language,
                    html=self.renderer.code_block(text, language),
                )
            case _:
                typ.assert_never(block)

    @staticmethod
    def _build_nav(
        site_index: cabc.Mapping[str, PageEntry], current: str | None = None
    ) -> tuple[NavEntry, ...]:
        """Return one entry per document in lexicographic id order."""
        return tuple(
            NavEntry(
                doc_id=doc_id,
                label=_clean_nav_label(site_index[doc_id].title),
                href=site_index[doc_id].output_path,
                is_current=doc_id == current,
            )
            for doc_id in sorted(site_index)
        )

    @staticmethod
    def _build_outline(sections: tuple[SectionModel, ...]) -> list[dict[str, str]]:
        """Return in-page navigation entries for titled sections."""
        return [
            {"label": _clean_nav_label(section.title), "anchor": section.anchor}
            for section in sections
            if section.title
        ]

    def _format_page_title(self, title: str) -> str:
        """Compose the HTML title using site name, page title, and suffix."""
        theme = self.config.theme
        return f"{title} | {theme.site_name} {theme.page_title_suffix}"


def _clean_nav_label(label: str) -> str:
    """Trim surrounding whitespace and trailing colons from nav labels."""
    return label.strip().rstrip(":").strip()


__all__ = ["PageRenderer"]
