"""Utilities for rendering guide documents into HTML pages."""

from .link_rewriter import CrossReferenceExtension
from .models import (
    CodeModel,
    PageModel,
    ProseModel,
    RenderedPage,
    SectionModel,
    TocModel,
)
from .page_generator import PageRenderer
from .renderer import HtmlContentRenderer

__all__ = [
    "CodeModel",
    "CrossReferenceExtension",
    "HtmlContentRenderer",
    "PageModel",
    "PageRenderer",
    "ProseModel",
    "RenderedPage",
    "SectionModel",
    "TocModel",
]
