"""Utilities for rendering prose markdown and syntax-highlighted code blocks."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
PROSE_EXTENSIONS = ("tables", "sane_lists")
PARAGRAPH_PATTERN = re.compile(r"<p>(.*)</p>", re.DOTALL)


def build_markdown(
    extensions: cabc.Iterable[Extension] = (), *, allow_html: bool = True
) -> Markdown:
    """Return a Markdown converter configured like every rendered prose block.

    Link discovery and rendering both go through this factory so they agree
    on which text forms a link. With ``allow_html`` disabled, raw HTML is
    treated as text and escaped on output.
    """
    md = Markdown(extensions=[*PROSE_EXTENSIONS, *extensions], output_format="html")
    if not allow_html:
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")
    return md


class HtmlContentRenderer:
    """Render prose and code snippets with consistent styling."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with the pygments style used for code blocks.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(
            style=pygments_style, cssclass="codehilite", wrapcode=True
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str, link_extension: Extension | None = None) -> str:
        """Render a prose block into HTML.

        Parameters
        ----------
        text : str
            Markdown source of one prose block.
        link_extension : Extension, optional
            Extension that rewrites cross-document links; pass ``None`` to
            leave links untouched.
        """
        if not text.strip():
            return ""
        extensions = [link_extension] if link_extension is not None else []
        return build_markdown(extensions).convert(text)

    def inline(self, text: str, link_extension: Extension | None = None) -> str:
        """Render one line of Markdown, such as a heading, without a wrapper.

        Raw HTML is escaped. Text that Markdown turns into block structure
        (``1. Setup`` becomes a list) is returned escaped and otherwise as is.
        """
        if not text.strip():
            return ""
        extensions = [link_extension] if link_extension is not None else []
        html = build_markdown(extensions, allow_html=False).convert(text)
        match = PARAGRAPH_PATTERN.fullmatch(html)
        if match is None:
            return escape(text)
        return match.group(1)

    def code_block(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into highlighted HTML with an optional language tag.

        Parameters
        ----------
        code : str
            Source snippet to highlight. Leading and trailing blank lines are
            kept so the visible text matches the source exactly.
        language : str, optional
            Pygments lexer name; defaults to ``"text"`` when not provided or
            when the lexer lookup fails. The original tag is always emitted as
            ``data-language`` even when no lexer exists for it.

        Returns
        -------
        str
            HTML containing the highlighted block with ``data-language``
            metadata applied.
        """
        lang = language or "text"
        options = {"stripnl": False, "ensurenl": False}
        try:
            lexer = get_lexer_by_name(lang, **options)
        except ClassNotFound:
            lexer = get_lexer_by_name("text", **options)
        html = highlight(code, lexer, self._formatter)
        return self._attach_language_attribute(html, lang)

    @staticmethod
    def _attach_language_attribute(html: str, language: str) -> str:
        """Add a single language attribute to an already highlighted block."""
        safe_lang = escape(language or "text", quote=True)

        def _repl(match: re.Match[str]) -> str:
            return f'<div class="codehilite" data-language="{safe_lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html, 1)


__all__ = ["HtmlContentRenderer", "build_markdown"]
