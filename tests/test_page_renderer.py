"""Tests for page models, HTML rendering, and the table of contents.

These tests drive ``guide_pages.generator.PageRenderer`` directly with parsed
documents so the structural ``PageModel`` and the serialised HTML can be
checked side by side. HTML is inspected with BeautifulSoup.
"""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from guide_pages.config import BuildConfig, ThemeConfig
from guide_pages.generator import CodeModel, PageRenderer, ProseModel
from guide_pages.generator.models import PageModel, TocModel
from guide_pages.markdown_parser import Document, parse_document
from guide_pages.site_index import build_site_index
from guide_pages.xrefs import resolve_references


@pytest.fixture(scope="module")
def renderer() -> PageRenderer:
    """Return a renderer with a recognisable theme."""
    theme = ThemeConfig(
        site_name="Elm Notes", page_title_suffix="Guide", toc_title="All guides"
    )
    return PageRenderer(BuildConfig(theme=theme))


def _render_all(renderer: PageRenderer, sources: dict[str, str]) -> dict[str, tuple]:
    documents: list[Document] = [
        parse_document(doc_id, text).document for doc_id, text in sources.items()
    ]
    resolution = resolve_references(documents)
    site_index = build_site_index(documents)
    pages = {}
    for document in documents:
        page = renderer.render_page(document, resolution, site_index)
        pages[document.doc_id] = (page, BeautifulSoup(page.html, "html.parser"))
    return pages


def test_resolved_link_points_at_generated_page(renderer: PageRenderer) -> None:
    """A link to B.md is rewritten to B's generated page."""
    pages = _render_all(
        renderer, {"A.md": "# Title A\nSee [B](B.md).", "B.md": "# Title B\nNo links."}
    )
    page, soup = pages["A.md"]
    link = soup.select_one("main a")
    assert link is not None, "expected an anchor in the page body"
    assert link["href"] == "b.html"
    assert link.get_text() == "B"
    assert page.model.unresolved_links == ()
    assert [(ref.target, ref.href) for ref in page.model.links] == [("B.md", "b.html")]


def test_anchor_links_keep_their_fragment(renderer: PageRenderer) -> None:
    """Section fragments survive the rewrite."""
    pages = _render_all(
        renderer,
        {
            "Scope.md": "# Scope\nSee [maybe](Maybe and Result.md#maybe).",
            "Maybe and Result.md": "# Maybe and Result\n## Maybe\ntext",
        },
    )
    _page, soup = pages["Scope.md"]
    assert soup.select_one("main a")["href"] == "maybe-and-result.html#maybe"


def test_unresolved_link_is_left_as_literal_text(renderer: PageRenderer) -> None:
    """Broken links lose their href but keep the text and record a warning."""
    pages = _render_all(renderer, {"A.md": "# Title A\nSee [C](C.md)."})
    page, soup = pages["A.md"]
    assert soup.select("main a") == [], "broken link must not stay clickable"
    span = soup.select_one("main span.broken-link")
    assert span is not None
    assert span.get_text() == "C"
    assert span["data-target"] == "C.md"
    assert [link.target for link in page.model.unresolved_links] == ["C.md"]


def test_external_links_are_untouched(renderer: PageRenderer) -> None:
    """External URLs pass through unchanged."""
    pages = _render_all(renderer, {"A.md": "# A\nVisit [Elm](https://elm-lang.org)."})
    page, soup = pages["A.md"]
    assert soup.select_one("main a")["href"] == "https://elm-lang.org"
    assert page.model.links == ()


def test_code_blocks_keep_text_and_language(renderer: PageRenderer) -> None:
    """Code text is verbatim in the model and the language is HTML metadata."""
    code = "type Maybe a\n    = Just a\n    | Nothing\n\n  -- trailing  "
    pages = _render_all(renderer, {"Maybe.md": f"# Maybe\n```elm\n{code}\n```\nDone."})
    page, soup = pages["Maybe.md"]
    model = page.model
    assert isinstance(model, PageModel)
    code_model, prose_model = model.sections[0].blocks
    assert isinstance(code_model, CodeModel)
    assert code_model.text == code
    assert code_model.language == "elm"
    assert isinstance(prose_model, ProseModel)
    block = soup.select_one("div.codehilite")
    assert block is not None
    assert block["data-language"] == "elm"
    assert block.select_one("code").get_text() == code


def test_unknown_language_keeps_its_tag(renderer: PageRenderer) -> None:
    """A tag without a Pygments lexer still appears as metadata."""
    pages = _render_all(renderer, {"x.md": "```not-a-lexer\nbody\n```"})
    _page, soup = pages["x.md"]
    assert soup.select_one("div.codehilite")["data-language"] == "not-a-lexer"


def test_sections_render_headings_with_anchors(renderer: PageRenderer) -> None:
    """Titled sections get headings with ids; the implicit section does not."""
    pages = _render_all(renderer, {"S.md": "Lead\n# Scope\n## Let Expressions\ntext"})
    _page, soup = pages["S.md"]
    sections = soup.select("main section")
    assert [section["id"] for section in sections] == ["section", "scope", "let-expressions"]
    assert sections[0].find(["h1", "h2"]) is None
    assert soup.select_one("#let-expressions h2").get_text() == "Let Expressions"
    outline = [a["href"] for a in soup.select(".page-outline a")]
    assert outline == ["#scope", "#let-expressions"]


def test_sidebar_marks_current_page(renderer: PageRenderer) -> None:
    """Every page lists all guides and flags the one being viewed."""
    pages = _render_all(renderer, {"A.md": "# A", "B.md": "# B"})
    _page, soup = pages["B.md"]
    nav = soup.select(".site-nav a")
    assert [a["href"] for a in nav] == ["a.html", "b.html"]
    assert nav[1].get("aria-current") == "page"
    assert soup.title.get_text() == "B | Elm Notes Guide"


def test_toc_lists_every_document_once_in_id_order(renderer: PageRenderer) -> None:
    """The table of contents is complete and sorted lexicographically by id."""
    documents = [
        parse_document(doc_id, f"# {title}").document
        for doc_id, title in [("b.md", "Bee"), ("A.md", "Ay"), ("a.md", "Lower Ay")]
    ]
    toc = renderer.render_toc(build_site_index(documents))
    assert toc.output_path == "index.html"
    assert isinstance(toc.model, TocModel)
    assert [entry.doc_id for entry in toc.model.entries] == ["A.md", "a.md", "b.md"]
    soup = BeautifulSoup(toc.html, "html.parser")
    assert [a["href"] for a in soup.select("ol.toc a")] == ["a.html", "a-2.html", "b.html"]
    assert soup.select_one("h1").get_text() == "All guides"


def test_site_index_reserves_the_toc_filename() -> None:
    """A guide called index.md cannot overwrite the table of contents."""
    site_index = build_site_index([parse_document("index.md", "# Home").document])
    assert site_index["index.md"].output_path == "index-2.html"
    assert site_index["index.md"].title == "Home"


def test_titles_are_html_escaped(renderer: PageRenderer) -> None:
    """Heading text is escaped by the templates."""
    pages = _render_all(renderer, {"x.md": "# Maybe <a>"})
    _page, soup = pages["x.md"]
    assert soup.select_one("main h1").get_text() == "Maybe <a>"


def test_reference_style_broken_link_is_demoted(renderer: PageRenderer) -> None:
    """Reference-style links are checked and demoted like inline ones."""
    pages = _render_all(renderer, {"A.md": "# A\nSee [gone][c].\n[c]: C.md"})
    page, soup = pages["A.md"]
    assert soup.select("main a") == []
    assert soup.select_one("main span.broken-link")["data-target"] == "C.md"
    assert [link.target for link in page.model.unresolved_links] == ["C.md"]


def test_parenthesised_filename_link_is_rewritten(renderer: PageRenderer) -> None:
    """Balanced parentheses in a filename survive into the rewritten href."""
    pages = _render_all(
        renderer,
        {"A.md": "# A\nSee [y](Scope (advanced).md).", "Scope (advanced).md": "# S"},
    )
    _page, soup = pages["A.md"]
    assert soup.select_one("main a")["href"] == "scope-advanced.html"


def test_headings_render_inline_markup(renderer: PageRenderer) -> None:
    """Code spans in headings become markup; list-like titles stay literal."""
    pages = _render_all(renderer, {"M.md": "# The `Maybe` type\n## 1. Setup\ntext"})
    _page, soup = pages["M.md"]
    heading = soup.select_one("main h1")
    assert heading.get_text() == "The Maybe type"
    assert heading.select_one("code").get_text() == "Maybe"
    setup = soup.find("section", id="1-setup")
    assert setup.find("h2").get_text() == "1. Setup"


def test_heading_links_point_at_generated_pages(renderer: PageRenderer) -> None:
    """A link inside a heading is rewritten like one in prose."""
    pages = _render_all(
        renderer, {"A.md": "# A\n## See [B](B.md)\ntext", "B.md": "# B"}
    )
    page, soup = pages["A.md"]
    assert soup.select_one("main h2 a")["href"] == "b.html"
    assert page.model.unresolved_links == ()
